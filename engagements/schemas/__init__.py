"""Pydantic request/response shapes for the engagement workflow."""

from engagements.schemas.common import (
    ErrorEnvelope,
    ListEnvelope,
    ListParams,
    MutationEnvelope,
    dump_envelope,
    error_envelope,
    mutation_envelope,
)
from engagements.schemas.contracts import ContractCreate, ContractListParams, ContractResponse, ContractUpdate
from engagements.schemas.proposals import ProposalCreate, ProposalListParams, ProposalResponse, ProposalUpdate
from engagements.schemas.service_scopes import (
    ServiceScopeCreate,
    ServiceScopeListParams,
    ServiceScopeResponse,
    ServiceScopeUpdate,
)

__all__ = [
    "ContractCreate",
    "ContractListParams",
    "ContractResponse",
    "ContractUpdate",
    "ErrorEnvelope",
    "ListEnvelope",
    "ListParams",
    "MutationEnvelope",
    "ProposalCreate",
    "ProposalListParams",
    "ProposalResponse",
    "ProposalUpdate",
    "ServiceScopeCreate",
    "ServiceScopeListParams",
    "ServiceScopeResponse",
    "ServiceScopeUpdate",
    "dump_envelope",
    "error_envelope",
    "mutation_envelope",
]
