"""Contract model module."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, Date, Enum, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from engagements.core.enums import ContractStatus
from engagements.models.base import AuditMixin, Base, enum_values

JSONMap = JSON().with_variant(JSONB(), "postgresql")


class Contract(Base, AuditMixin):
    __tablename__ = "contracts"
    __table_args__ = (
        Index("idx_contracts_client_start", "client_id", "start_date"),
        Index("idx_contracts_end_date", "end_date"),
        Index("idx_contracts_status", "status"),
        Index("idx_contracts_previous", "previous_contract_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    client_id: Mapped[int] = mapped_column(ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    renewal_date: Mapped[date | None] = mapped_column(Date)
    value: Mapped[Decimal | None] = mapped_column(Numeric(15, 2))
    status: Mapped[ContractStatus] = mapped_column(
        Enum(ContractStatus, native_enum=False, length=32, values_callable=enum_values),
        default=ContractStatus.DRAFT,
        nullable=False,
    )
    document_link: Mapped[str | None] = mapped_column(String(500))
    notes: Mapped[str | None] = mapped_column(Text)
    previous_contract_id: Mapped[int | None] = mapped_column(ForeignKey("contracts.id", ondelete="SET NULL"))
    custom_field_data: Mapped[dict[str, Any] | None] = mapped_column(JSONMap)

    client = relationship("Client", back_populates="contracts")
    previous_contract = relationship("Contract", remote_side=[id], back_populates="renewal_contracts")
    renewal_contracts = relationship("Contract", back_populates="previous_contract")
    service_scopes = relationship("ServiceScope", back_populates="contract", cascade="all, delete-orphan")

    @property
    def is_renewal(self) -> bool:
        return self.previous_contract_id is not None

    @property
    def duration_in_days(self) -> int:
        return (self.end_date - self.start_date).days

    def is_expiring_soon(self, days: int = 30) -> bool:
        today = datetime.now(timezone.utc).date()
        return today <= self.end_date <= today + timedelta(days=days)
