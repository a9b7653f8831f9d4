"""Canonical state transition helpers for engagement entities."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from engagements.core.enums import ProposalStatus
from engagements.core.exceptions import ValidationError


class InvalidTransitionError(ValidationError):
    """Raised when a disallowed state transition is attempted."""

    def __init__(self, current: str, requested: str, allowed: Iterable[str]) -> None:
        self.current = current
        self.requested = requested
        self.allowed = tuple(sorted(allowed))
        allowed_text = ", ".join(self.allowed) if self.allowed else "none"
        super().__init__(
            f"Invalid status transition from '{current}' to '{requested}'. "
            f"Allowed transitions: {allowed_text}"
        )


def _value(state) -> str:
    return getattr(state, "value", state)


class StateMachine:
    """Adjacency-map state machine: each state maps to its allowed next states."""

    def __init__(self, transitions: Mapping[str, Iterable[str]]) -> None:
        self._transitions = {
            _value(state): frozenset(_value(target) for target in targets)
            for state, targets in transitions.items()
        }

    def allowed(self, current: str) -> frozenset[str]:
        return self._transitions.get(_value(current), frozenset())

    def can_transition(self, current: str, target: str) -> bool:
        return _value(target) in self.allowed(current)

    def assert_transition(self, current: str, target: str) -> None:
        if _value(current) == _value(target):
            return
        if not self.can_transition(current=current, target=target):
            raise InvalidTransitionError(_value(current), _value(target), self.allowed(current))


PROPOSAL_TRANSITIONS: dict[ProposalStatus, frozenset[ProposalStatus]] = {
    ProposalStatus.DRAFT: frozenset(
        {ProposalStatus.IN_PREPARATION, ProposalStatus.SUBMITTED, ProposalStatus.WITHDRAWN, ProposalStatus.ARCHIVED}
    ),
    ProposalStatus.IN_PREPARATION: frozenset(
        {ProposalStatus.DRAFT, ProposalStatus.SUBMITTED, ProposalStatus.WITHDRAWN, ProposalStatus.ARCHIVED}
    ),
    ProposalStatus.SUBMITTED: frozenset(
        {
            ProposalStatus.UNDER_REVIEW,
            ProposalStatus.REQUIRES_REVISION,
            ProposalStatus.WITHDRAWN,
            ProposalStatus.REJECTED,
        }
    ),
    ProposalStatus.UNDER_REVIEW: frozenset(
        {
            ProposalStatus.PENDING_APPROVAL,
            ProposalStatus.PENDING_CLIENT_REVIEW,
            ProposalStatus.REQUIRES_REVISION,
            ProposalStatus.REJECTED,
        }
    ),
    ProposalStatus.PENDING_APPROVAL: frozenset(
        {ProposalStatus.APPROVED, ProposalStatus.REQUIRES_REVISION, ProposalStatus.REJECTED}
    ),
    ProposalStatus.PENDING_CLIENT_REVIEW: frozenset(
        {ProposalStatus.ACCEPTED_BY_CLIENT, ProposalStatus.REQUIRES_REVISION, ProposalStatus.REJECTED}
    ),
    ProposalStatus.REQUIRES_REVISION: frozenset(
        {ProposalStatus.DRAFT, ProposalStatus.IN_PREPARATION, ProposalStatus.SUBMITTED, ProposalStatus.WITHDRAWN}
    ),
    ProposalStatus.APPROVED: frozenset(
        {ProposalStatus.ACCEPTED_BY_CLIENT, ProposalStatus.IN_IMPLEMENTATION, ProposalStatus.ARCHIVED}
    ),
    ProposalStatus.ACCEPTED_BY_CLIENT: frozenset({ProposalStatus.IN_IMPLEMENTATION, ProposalStatus.COMPLETED}),
    ProposalStatus.IN_IMPLEMENTATION: frozenset({ProposalStatus.COMPLETED}),
    ProposalStatus.REJECTED: frozenset({ProposalStatus.ARCHIVED}),
    ProposalStatus.WITHDRAWN: frozenset({ProposalStatus.ARCHIVED}),
    ProposalStatus.COMPLETED: frozenset({ProposalStatus.ARCHIVED}),
    ProposalStatus.ARCHIVED: frozenset(),
}

proposal_state_machine = StateMachine(PROPOSAL_TRANSITIONS)
