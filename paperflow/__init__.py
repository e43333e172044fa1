"""
Paper Workflow Engine

Versioned research-paper submissions through a peer-review pipeline:
authors submit revisions, admins assign reviewers, reviewers score and
comment, and every tracked mutation is audited in the same transaction.
"""

__version__ = "1.0.0"
