"""Contract service for contract lifecycle operations."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import selectinload

from engagements.core.config import get_config
from engagements.core.enums import (
    ACTIVE_CONTRACT_STATUSES,
    NON_TERMINABLE_CONTRACT_STATUSES,
    ContractStatus,
    CustomFieldEntityType,
)
from engagements.core.exceptions import BusinessRuleError, ConflictError
from engagements.models import Client, Contract
from engagements.schemas.contracts import ContractCreate, ContractListParams, ContractUpdate
from engagements.services.base_service import BaseService
from engagements.services.list_query import FilterField, FilterKind, ListQuerySpec, Page, run_list_query
from engagements.services.validation import validate_custom_fields, validate_date_window, validate_non_negative

logger = logging.getLogger(__name__)

CONTRACT_LIST_SPEC = ListQuerySpec(
    model=Contract,
    filters=(
        FilterField("status", Contract.status),
        FilterField("client_id", Contract.client_id),
        FilterField("min_value", Contract.value, FilterKind.MIN),
        FilterField("max_value", Contract.value, FilterKind.MAX),
    ),
    search_columns=(Contract.name, Contract.notes),
    sort_columns={
        "createdAt": Contract.created_at,
        "updatedAt": Contract.updated_at,
        "name": Contract.name,
        "startDate": Contract.start_date,
        "endDate": Contract.end_date,
        "value": Contract.value,
    },
    nullable_sort_keys=frozenset({"value"}),
    load_options=(selectinload(Contract.client),),
)

CONTRACT_DETAIL_OPTIONS = (
    selectinload(Contract.client),
    selectinload(Contract.previous_contract),
    selectinload(Contract.renewal_contracts),
    selectinload(Contract.service_scopes),
)


def _today():
    return datetime.now(timezone.utc).date()


class ContractService(BaseService):
    """Service for contract CRUD, expiry tracking and termination."""

    def _ensure_name_available(self, name: str, exclude_id: int | None = None) -> None:
        query = self.db.query(Contract.id).filter(Contract.name == name)
        if exclude_id is not None:
            query = query.filter(Contract.id != exclude_id)
        if query.first() is not None:
            raise ConflictError(f"Contract with name '{name}' already exists")

    def create_contract(self, data: ContractCreate) -> Contract:
        logger.info("contract.create.requested", extra={"event": "contract.create.requested", "name": data.name})

        self._require(Client, data.client_id)
        if data.previous_contract_id is not None:
            self._require(Contract, data.previous_contract_id, "Previous contract")
        self._ensure_name_available(data.name)

        validate_date_window(data.start_date, data.end_date)
        validate_non_negative(data.value, "Contract value")
        custom_field_data = validate_custom_fields(
            self.custom_fields, CustomFieldEntityType.CONTRACT, data.custom_field_data
        )

        contract = Contract(
            name=data.name,
            client_id=data.client_id,
            start_date=data.start_date,
            end_date=data.end_date,
            renewal_date=data.renewal_date,
            value=data.value,
            status=data.status or ContractStatus.DRAFT,
            document_link=data.document_link,
            notes=data.notes,
            previous_contract_id=data.previous_contract_id,
            custom_field_data=custom_field_data,
        )
        self.db.add(contract)
        self.commit(conflict_message=f"Contract with name '{data.name}' already exists")

        logger.info("contract.created", extra={"event": "contract.created", "contract_id": contract.id})
        return self.get_contract(contract.id)

    def list_contracts(self, params: ContractListParams | None = None) -> Page[Contract]:
        params = params or ContractListParams()
        extra_criteria = []
        if params.expiring_soon_days is not None:
            today = _today()
            extra_criteria.append(
                Contract.end_date.between(today, today + timedelta(days=params.expiring_soon_days))
            )

        page = run_list_query(self.db, CONTRACT_LIST_SPEC, params, extra_criteria)
        logger.info(
            "contract.list.fetched",
            extra={"event": "contract.list.fetched", "count": page.count, "page": page.page},
        )
        return page

    def get_contract(self, contract_id: int) -> Contract:
        return self._require(Contract, contract_id, options=CONTRACT_DETAIL_OPTIONS)

    def update_contract(self, contract_id: int, data: ContractUpdate) -> Contract:
        contract = self.get_contract(contract_id)
        changes: dict[str, Any] = data.model_dump(exclude_unset=True)

        if changes.get("client_id") is not None and changes["client_id"] != contract.client_id:
            self._require(Client, changes["client_id"])
        if changes.get("previous_contract_id") is not None:
            self._require(Contract, changes["previous_contract_id"], "Previous contract")
        if changes.get("name") and changes["name"] != contract.name:
            self._ensure_name_available(changes["name"], exclude_id=contract.id)

        validate_date_window(
            changes.get("start_date") or contract.start_date,
            changes.get("end_date") or contract.end_date,
        )
        validate_non_negative(changes.get("value"), "Contract value")

        if "custom_field_data" in changes:
            changes["custom_field_data"] = validate_custom_fields(
                self.custom_fields,
                CustomFieldEntityType.CONTRACT,
                changes["custom_field_data"],
                existing=contract.custom_field_data,
            )

        for field_name, value in changes.items():
            # Required columns are never cleared by a partial update.
            if value is None and field_name in {"name", "client_id", "start_date", "end_date", "status"}:
                continue
            setattr(contract, field_name, value)

        self.commit(conflict_message=f"Contract with name '{contract.name}' already exists")
        logger.info(
            "contract.updated",
            extra={"event": "contract.updated", "contract_id": contract.id, "fields": sorted(changes)},
        )
        return self.get_contract(contract.id)

    def terminate_contract(self, contract_id: int) -> Contract:
        """Soft end-of-life: move the contract to ``terminated``."""
        contract = self.get_contract(contract_id)
        if contract.status in NON_TERMINABLE_CONTRACT_STATUSES:
            raise BusinessRuleError(f"Cannot terminate contract with status: {ContractStatus(contract.status).value}")

        contract.status = ContractStatus.TERMINATED
        self.commit()
        logger.info("contract.terminated", extra={"event": "contract.terminated", "contract_id": contract.id})
        return self.get_contract(contract.id)

    def get_expiring_contracts(self, days: int | None = None) -> list[Contract]:
        """Active contracts whose end date falls within the next ``days`` days."""
        days = days if days is not None else get_config().EXPIRING_SOON_DAYS
        today = _today()
        contracts = (
            self.db.query(Contract)
            .options(selectinload(Contract.client))
            .filter(
                Contract.status.in_(list(ACTIVE_CONTRACT_STATUSES)),
                Contract.end_date.between(today, today + timedelta(days=days)),
            )
            .order_by(Contract.end_date.asc(), Contract.id.asc())
            .all()
        )
        logger.info(
            "contract.expiring.fetched",
            extra={"event": "contract.expiring.fetched", "days": days, "count": len(contracts)},
        )
        return contracts

    def get_contract_statistics(self) -> dict[str, Any]:
        total = self.db.query(func.count(Contract.id)).scalar() or 0
        rows = self.db.query(Contract.status, func.count(Contract.id)).group_by(Contract.status).all()
        by_status = {ContractStatus(status).value: count for status, count in rows}
        active_contracts = sum(by_status.get(status.value, 0) for status in ACTIVE_CONTRACT_STATUSES)
        return {
            "total": total,
            "by_status": by_status,
            "active_contracts": active_contracts,
            "expiring_contracts": len(self.get_expiring_contracts()),
        }

    def upload_document(self, contract_id: int, filename: str, payload: bytes) -> Contract:
        """Store a contract document and keep only the returned link."""
        contract = self.get_contract(contract_id)
        link = self._store_document("contracts", contract.id, filename, payload, contract.document_link)
        contract.document_link = link
        self.commit()
        logger.info(
            "contract.document.uploaded",
            extra={"event": "contract.document.uploaded", "contract_id": contract.id, "document_link": link},
        )
        return self.get_contract(contract.id)
