"""
Paper lifecycle transitions.

Submission follows one uniform rule: a DRAFT paper becomes SUBMITTED, any
other paper becomes REVISION_REQUESTED. That includes ACCEPTED and REJECTED
papers being resubmitted; strict mode refuses those instead.

Editorial decisions (UNDER_REVIEW, ACCEPTED, REJECTED, ...) go through
set_paper_status and may target any status other than DRAFT.
"""

from typing import Dict, FrozenSet

from paperflow.kernel.errors import InvalidStateError, ValidationError
from paperflow.kernel.models.paper import PaperStatus, TERMINAL_STATUSES

# Statuses an admin may set directly, keyed by the current status
_EDITORIAL_TRANSITIONS: Dict[PaperStatus, FrozenSet[PaperStatus]] = {
    status: frozenset(PaperStatus) - {PaperStatus.DRAFT, status}
    for status in PaperStatus
}

# Statuses that move to UNDER_REVIEW when a reviewer is assigned (opt-in)
REVIEWABLE_STATUSES = frozenset({PaperStatus.SUBMITTED, PaperStatus.REVISION_REQUESTED})


def status_after_submission(current: PaperStatus, strict: bool = False) -> PaperStatus:
    """
    Status a paper moves to when a new version is submitted.

    Args:
        current: Status before the submission
        strict: Refuse resubmission of ACCEPTED/REJECTED papers

    Raises:
        InvalidStateError: In strict mode, for a terminal paper
    """
    current = PaperStatus(current)
    if strict and current in TERMINAL_STATUSES:
        raise InvalidStateError(
            f"Cannot submit a new version of a {current.value} paper"
        )
    if current == PaperStatus.DRAFT:
        return PaperStatus.SUBMITTED
    return PaperStatus.REVISION_REQUESTED


def valid_editorial_transitions(current: PaperStatus) -> FrozenSet[PaperStatus]:
    """Statuses an admin may move a paper to from current."""
    return _EDITORIAL_TRANSITIONS[PaperStatus(current)]


def check_editorial_transition(current: PaperStatus, target: str) -> PaperStatus:
    """Validate an admin-initiated status change and return the target status."""
    try:
        target_status = PaperStatus(target)
    except ValueError as exc:
        raise ValidationError(f"Unknown paper status: {target}", field="status") from exc

    if target_status not in valid_editorial_transitions(current):
        raise InvalidStateError(
            f"Invalid transition: {PaperStatus(current).value} -> {target_status.value}"
        )
    return target_status
