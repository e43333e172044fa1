"""
Natural-language matching over current paper versions.

Terms and documents are split into lowercase word tokens. A document
matches when it contains at least one query token as a whole word, and is
scored by the cosine of its TF-IDF vector with the query's, the vectorizer
being fitted on the whole collection of current versions.
"""

import re
from dataclasses import dataclass
from typing import List, Mapping

from sklearn.feature_extraction.text import TfidfVectorizer

# Single-character words count, unlike the vectorizer default
TOKEN_PATTERN = r"(?u)\b\w+\b"

_WORD_RE = re.compile(TOKEN_PATTERN)


def tokenize(text: str) -> List[str]:
    """Lowercase word tokens of text, in order."""
    return [word.lower() for word in _WORD_RE.findall(text or "")]


def query_tokens(term: str) -> List[str]:
    """Distinct tokens of a query, first occurrence order."""
    return list(dict.fromkeys(tokenize(term)))


@dataclass
class ScoredDocument:
    doc_id: int
    score: float


class RelevanceScorer:
    """
    TF-IDF relevance of a collection of documents to free-text queries.

    Usage:
        scorer = RelevanceScorer().fit({1: "AI in Healthcare", 2: "Quantum Computing"})
        ranked = scorer.rank("quantum")
    """

    def __init__(self):
        self.vectorizer = TfidfVectorizer(
            lowercase=True,
            analyzer="word",
            token_pattern=TOKEN_PATTERN,
        )
        self.doc_ids: List[int] = []
        self.matrix = None
        self.is_fitted = False

    def fit(self, documents: Mapping[int, str]) -> "RelevanceScorer":
        """
        Fit the vectorizer on the collection.

        Args:
            documents: doc id -> text (title and abstract joined)
        """
        self.doc_ids = list(documents)
        self.matrix = None
        self.is_fitted = False
        if not self.doc_ids:
            return self

        try:
            self.matrix = self.vectorizer.fit_transform(
                [documents[doc_id] or "" for doc_id in self.doc_ids]
            )
        except ValueError:
            # Empty vocabulary: no document holds a word
            return self

        self.is_fitted = True
        return self

    def rank(self, term: str) -> List[ScoredDocument]:
        """
        Score and order the documents matching term.

        Returns:
            Matching documents, highest score first, doc id ascending on ties
        """
        if not self.is_fitted or not query_tokens(term):
            return []

        query = self.vectorizer.transform([term])
        scores = (self.matrix @ query.T).toarray().ravel()

        scored = [
            ScoredDocument(doc_id=doc_id, score=float(score))
            for doc_id, score in zip(self.doc_ids, scores)
            if score > 0
        ]
        scored.sort(key=lambda d: (-d.score, d.doc_id))
        return scored
