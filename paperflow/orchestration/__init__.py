"""Orchestration layer - workflow commands, status rules, transactions."""

from paperflow.orchestration.workflow_engine import WorkflowEngine, parse_author_ids
from paperflow.orchestration.transactions import transaction
from paperflow.orchestration.state_machine import (
    status_after_submission,
    check_editorial_transition,
    valid_editorial_transitions,
)

__all__ = [
    "WorkflowEngine",
    "parse_author_ids",
    "transaction",
    "status_after_submission",
    "check_editorial_transition",
    "valid_editorial_transitions",
]
