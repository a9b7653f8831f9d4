"""SQLAlchemy model package for the engagement schema."""

from engagements.models.base import Base
from engagements.models.client import Client
from engagements.models.contract import Contract
from engagements.models.proposal import Proposal
from engagements.models.service import Service
from engagements.models.service_scope import ServiceScope
from engagements.models.user import User

__all__ = [
    "Base",
    "Client",
    "Contract",
    "Proposal",
    "Service",
    "ServiceScope",
    "User",
]
