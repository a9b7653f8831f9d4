"""Service scope model module."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import Boolean, Date, Enum, ForeignKey, Index, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from engagements.core.enums import SAFStatus
from engagements.models.base import AuditMixin, Base, enum_values
from engagements.models.contract import JSONMap


class ServiceScope(Base, AuditMixin):
    __tablename__ = "service_scopes"
    __table_args__ = (
        UniqueConstraint("contract_id", "service_id", name="uq_service_scopes_contract_service"),
        Index("idx_service_scopes_contract", "contract_id"),
        Index("idx_service_scopes_service", "service_id"),
        Index("idx_service_scopes_saf_status", "saf_status"),
        Index("idx_service_scopes_is_active", "is_active"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    contract_id: Mapped[int] = mapped_column(ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False)
    service_id: Mapped[int] = mapped_column(ForeignKey("services.id", ondelete="RESTRICT"), nullable=False)
    scope_details: Mapped[dict[str, Any] | None] = mapped_column(JSONMap)
    price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    quantity: Mapped[int | None] = mapped_column(Integer)
    unit: Mapped[str | None] = mapped_column(String(50))
    notes: Mapped[str | None] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    saf_status: Mapped[SAFStatus] = mapped_column(
        Enum(SAFStatus, native_enum=False, length=32, values_callable=enum_values),
        default=SAFStatus.NOT_INITIATED,
        nullable=False,
    )
    saf_service_start_date: Mapped[date | None] = mapped_column(Date)
    saf_service_end_date: Mapped[date | None] = mapped_column(Date)
    saf_document_link: Mapped[str | None] = mapped_column(String(500))
    custom_field_data: Mapped[dict[str, Any] | None] = mapped_column(JSONMap)

    contract = relationship("Contract", back_populates="service_scopes")
    service = relationship("Service", back_populates="service_scopes")
    proposals = relationship("Proposal", back_populates="service_scope", cascade="all, delete-orphan")

    @property
    def total_value(self) -> Decimal | None:
        if self.price is None:
            return None
        return self.price * (self.quantity or 1)

    @property
    def is_saf_completed(self) -> bool:
        return self.saf_status == SAFStatus.COMPLETED

    @property
    def service_duration_in_days(self) -> int | None:
        if self.saf_service_start_date is None or self.saf_service_end_date is None:
            return None
        return (self.saf_service_end_date - self.saf_service_start_date).days
