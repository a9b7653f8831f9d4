"""Proposal model module."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import Date, DateTime, Enum, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from engagements.core.enums import (
    APPROVED_PROPOSAL_STATUSES,
    DRAFT_PROPOSAL_STATUSES,
    FINAL_PROPOSAL_STATUSES,
    SUBMITTED_PROPOSAL_STATUSES,
    ProposalStatus,
    ProposalType,
)
from engagements.models.base import AuditMixin, Base, enum_values
from engagements.models.contract import JSONMap


class Proposal(Base, AuditMixin):
    __tablename__ = "proposals"
    __table_args__ = (
        Index("idx_proposals_service_scope", "service_scope_id"),
        Index("idx_proposals_type", "proposal_type"),
        Index("idx_proposals_status", "status"),
        Index("idx_proposals_assignee", "assignee_user_id"),
        Index("idx_proposals_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    service_scope_id: Mapped[int] = mapped_column(ForeignKey("service_scopes.id", ondelete="CASCADE"), nullable=False)
    proposal_type: Mapped[ProposalType] = mapped_column(
        Enum(ProposalType, native_enum=False, length=32, values_callable=enum_values),
        nullable=False,
    )
    document_link: Mapped[str] = mapped_column(String(500), nullable=False)
    version: Mapped[str | None] = mapped_column(String(50))
    status: Mapped[ProposalStatus] = mapped_column(
        Enum(ProposalStatus, native_enum=False, length=32, values_callable=enum_values),
        default=ProposalStatus.DRAFT,
        nullable=False,
    )
    title: Mapped[str | None] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text)
    proposal_value: Mapped[Decimal | None] = mapped_column(Numeric(15, 2))
    currency: Mapped[str | None] = mapped_column(String(3))
    valid_until_date: Mapped[date | None] = mapped_column(Date)
    estimated_duration_days: Mapped[int | None] = mapped_column(Integer)
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    notes: Mapped[str | None] = mapped_column(Text)
    assignee_user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    custom_field_data: Mapped[dict[str, Any] | None] = mapped_column(JSONMap)

    service_scope = relationship("ServiceScope", back_populates="proposals")
    assignee_user = relationship("User")

    @property
    def is_draft(self) -> bool:
        return self.status in DRAFT_PROPOSAL_STATUSES

    @property
    def is_submitted(self) -> bool:
        return self.status in SUBMITTED_PROPOSAL_STATUSES

    @property
    def is_approved(self) -> bool:
        return self.status in APPROVED_PROPOSAL_STATUSES

    @property
    def is_final(self) -> bool:
        return self.status in FINAL_PROPOSAL_STATUSES

    @property
    def is_expired(self) -> bool:
        if self.valid_until_date is None:
            return False
        return datetime.now(timezone.utc).date() > self.valid_until_date and not self.is_final
