"""Canonical enum values for contracts, service scopes and proposals."""

from __future__ import annotations

import enum


class ContractStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    ACTIVE = "active"
    RENEWED_ACTIVE = "renewed_active"
    RENEWED_INACTIVE = "renewed_inactive"
    EXPIRED = "expired"
    TERMINATED = "terminated"
    CANCELLED = "cancelled"
    SUSPENDED = "suspended"
    ON_HOLD = "on_hold"


class SAFStatus(str, enum.Enum):
    """Service Activation Form status of a service scope."""

    NOT_INITIATED = "not_initiated"
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"
    CANCELLED = "cancelled"


class ProposalType(str, enum.Enum):
    TECHNICAL = "technical"
    FINANCIAL = "financial"
    TECHNICAL_FINANCIAL = "technical_financial"
    ARCHITECTURE = "architecture"
    IMPLEMENTATION = "implementation"
    PRICING = "pricing"
    SCOPE_CHANGE = "scope_change"
    OTHER = "other"


class ProposalStatus(str, enum.Enum):
    DRAFT = "draft"
    IN_PREPARATION = "in_preparation"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    PENDING_APPROVAL = "pending_approval"
    PENDING_CLIENT_REVIEW = "pending_client_review"
    REQUIRES_REVISION = "requires_revision"
    APPROVED = "approved"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"
    ARCHIVED = "archived"
    ACCEPTED_BY_CLIENT = "accepted_by_client"
    IN_IMPLEMENTATION = "in_implementation"
    COMPLETED = "completed"


class CustomFieldEntityType(str, enum.Enum):
    """Entity kinds that can carry admin-defined custom fields."""

    CONTRACT = "contract"
    SERVICE_SCOPE = "service_scope"
    PROPOSAL = "proposal"


class SortDirection(str, enum.Enum):
    ASC = "ASC"
    DESC = "DESC"


# Convenience groupings used by derived flags and guards
DRAFT_PROPOSAL_STATUSES = frozenset({ProposalStatus.DRAFT, ProposalStatus.IN_PREPARATION})
SUBMITTED_PROPOSAL_STATUSES = frozenset(
    {
        ProposalStatus.SUBMITTED,
        ProposalStatus.UNDER_REVIEW,
        ProposalStatus.PENDING_APPROVAL,
        ProposalStatus.PENDING_CLIENT_REVIEW,
    }
)
APPROVED_PROPOSAL_STATUSES = frozenset(
    {
        ProposalStatus.APPROVED,
        ProposalStatus.ACCEPTED_BY_CLIENT,
        ProposalStatus.IN_IMPLEMENTATION,
        ProposalStatus.COMPLETED,
    }
)
FINAL_PROPOSAL_STATUSES = frozenset(
    {
        ProposalStatus.APPROVED,
        ProposalStatus.REJECTED,
        ProposalStatus.WITHDRAWN,
        ProposalStatus.ARCHIVED,
        ProposalStatus.COMPLETED,
    }
)
NON_TERMINABLE_CONTRACT_STATUSES = frozenset(
    {ContractStatus.TERMINATED, ContractStatus.CANCELLED, ContractStatus.EXPIRED}
)
ACTIVE_CONTRACT_STATUSES = frozenset({ContractStatus.ACTIVE, ContractStatus.RENEWED_ACTIVE})
