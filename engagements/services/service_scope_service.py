"""Service scope service: services sold under a contract."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from sqlalchemy import String, cast
from sqlalchemy.orm import selectinload

from engagements.core.enums import CustomFieldEntityType, SAFStatus
from engagements.core.exceptions import ConflictError, NotFoundError
from engagements.models import Contract, Service, ServiceScope
from engagements.schemas.service_scopes import ServiceScopeCreate, ServiceScopeListParams, ServiceScopeUpdate
from engagements.services.aggregation import contract_total
from engagements.services.base_service import BaseService
from engagements.services.list_query import FilterField, FilterKind, ListQuerySpec, Page, run_list_query
from engagements.services.validation import resolve_effective, validate_custom_fields, validate_date_window

logger = logging.getLogger(__name__)

SERVICE_SCOPE_LIST_SPEC = ListQuerySpec(
    model=ServiceScope,
    filters=(
        FilterField("contract_id", ServiceScope.contract_id),
        FilterField("service_id", ServiceScope.service_id),
        FilterField("saf_status", ServiceScope.saf_status),
        FilterField("is_active", ServiceScope.is_active),
        FilterField("min_price", ServiceScope.price, FilterKind.MIN),
        FilterField("max_price", ServiceScope.price, FilterKind.MAX),
    ),
    search_columns=(Service.name, ServiceScope.notes, cast(ServiceScope.scope_details, String)),
    sort_columns={
        "createdAt": ServiceScope.created_at,
        "updatedAt": ServiceScope.updated_at,
        "price": ServiceScope.price,
        "quantity": ServiceScope.quantity,
        "safStatus": ServiceScope.saf_status,
    },
    nullable_sort_keys=frozenset({"price", "quantity"}),
    joins=((Service, ServiceScope.service_id == Service.id),),
    load_options=(
        selectinload(ServiceScope.service),
        selectinload(ServiceScope.contract).selectinload(Contract.client),
    ),
)

SERVICE_SCOPE_DETAIL_OPTIONS = (
    selectinload(ServiceScope.service),
    selectinload(ServiceScope.contract).selectinload(Contract.client),
    selectinload(ServiceScope.proposals),
)


class ServiceScopeService(BaseService):
    """Service for service scope CRUD, SAF tracking and contract totals."""

    def _require_active_service(self, service_id: int) -> Service:
        service = (
            self.db.query(Service)
            .filter(Service.id == service_id, Service.is_active.is_(True))
            .first()
        )
        if service is None:
            raise NotFoundError("Service", service_id, f"Active service with ID {service_id} not found")
        return service

    def _ensure_service_not_in_contract(
        self, contract_id: int, service: Service, exclude_id: int | None = None
    ) -> None:
        query = self.db.query(ServiceScope.id).filter(
            ServiceScope.contract_id == contract_id,
            ServiceScope.service_id == service.id,
        )
        if exclude_id is not None:
            query = query.filter(ServiceScope.id != exclude_id)
        if query.first() is not None:
            raise ConflictError(f"Service '{service.name}' is already included in this contract")

    def create_for_contract(self, contract_id: int, data: ServiceScopeCreate) -> ServiceScope:
        logger.info(
            "service_scope.create.requested",
            extra={"event": "service_scope.create.requested", "contract_id": contract_id, "service_id": data.service_id},
        )
        self._require(Contract, contract_id)
        service = self._require_active_service(data.service_id)
        self._ensure_service_not_in_contract(contract_id, service)

        validate_date_window(
            data.saf_service_start_date,
            data.saf_service_end_date,
            "SAF service start date",
            "SAF service end date",
        )
        custom_field_data = validate_custom_fields(
            self.custom_fields, CustomFieldEntityType.SERVICE_SCOPE, data.custom_field_data
        )

        scope = ServiceScope(
            contract_id=contract_id,
            service_id=service.id,
            scope_details=data.scope_details,
            price=data.price,
            quantity=data.quantity,
            unit=data.unit,
            notes=data.notes,
            is_active=True,
            saf_status=data.saf_status or SAFStatus.NOT_INITIATED,
            saf_service_start_date=data.saf_service_start_date,
            saf_service_end_date=data.saf_service_end_date,
            saf_document_link=data.saf_document_link,
            custom_field_data=custom_field_data,
        )
        self.db.add(scope)
        self.commit(conflict_message=f"Service '{service.name}' is already included in this contract")

        logger.info(
            "service_scope.created",
            extra={"event": "service_scope.created", "service_scope_id": scope.id, "contract_id": contract_id},
        )
        return self.get_service_scope(scope.id)

    def list_service_scopes(self, params: ServiceScopeListParams | None = None) -> Page[ServiceScope]:
        params = params or ServiceScopeListParams()
        page = run_list_query(self.db, SERVICE_SCOPE_LIST_SPEC, params)
        logger.info(
            "service_scope.list.fetched",
            extra={"event": "service_scope.list.fetched", "count": page.count, "page": page.page},
        )
        return page

    def list_for_contract(self, contract_id: int) -> list[ServiceScope]:
        self._require(Contract, contract_id)
        return (
            self.db.query(ServiceScope)
            .options(*SERVICE_SCOPE_DETAIL_OPTIONS)
            .filter(ServiceScope.contract_id == contract_id)
            .order_by(ServiceScope.created_at.desc(), ServiceScope.id.desc())
            .all()
        )

    def get_service_scope(self, service_scope_id: int) -> ServiceScope:
        return self._require(ServiceScope, service_scope_id, "Service scope", SERVICE_SCOPE_DETAIL_OPTIONS)

    def update_service_scope(self, service_scope_id: int, data: ServiceScopeUpdate) -> ServiceScope:
        scope = self.get_service_scope(service_scope_id)
        changes: dict[str, Any] = data.model_dump(exclude_unset=True)

        new_service_id = changes.get("service_id")
        if new_service_id is not None and new_service_id != scope.service_id:
            service = self._require_active_service(new_service_id)
            self._ensure_service_not_in_contract(scope.contract_id, service, exclude_id=scope.id)
        else:
            changes.pop("service_id", None)

        validate_date_window(
            resolve_effective(changes, "saf_service_start_date", scope.saf_service_start_date),
            resolve_effective(changes, "saf_service_end_date", scope.saf_service_end_date),
            "SAF service start date",
            "SAF service end date",
        )

        if "custom_field_data" in changes:
            changes["custom_field_data"] = validate_custom_fields(
                self.custom_fields,
                CustomFieldEntityType.SERVICE_SCOPE,
                changes["custom_field_data"],
                existing=scope.custom_field_data,
            )

        for field_name, value in changes.items():
            if value is None and field_name in {"is_active", "saf_status"}:
                continue
            setattr(scope, field_name, value)

        self.commit(conflict_message="Service is already included in this contract")
        logger.info(
            "service_scope.updated",
            extra={"event": "service_scope.updated", "service_scope_id": scope.id, "fields": sorted(changes)},
        )
        return self.get_service_scope(service_scope_id)

    def deactivate_service_scope(self, service_scope_id: int) -> ServiceScope:
        """Soft delete: the scope stays stored but stops counting."""
        scope = self.get_service_scope(service_scope_id)
        scope.is_active = False
        self.commit()
        logger.info(
            "service_scope.deactivated",
            extra={"event": "service_scope.deactivated", "service_scope_id": scope.id},
        )
        return self.get_service_scope(service_scope_id)

    def hard_delete_service_scope(self, service_scope_id: int) -> None:
        """Permanently remove a scope together with its proposals."""
        scope = self._require(ServiceScope, service_scope_id, "Service scope")
        self.db.delete(scope)
        self.commit()
        logger.warning(
            "service_scope.hard_deleted",
            extra={"event": "service_scope.hard_deleted", "service_scope_id": service_scope_id},
        )

    def calculate_contract_total(self, contract_id: int) -> Decimal:
        self._require(Contract, contract_id)
        total = contract_total(self.db, contract_id)
        logger.info(
            "service_scope.contract_total.calculated",
            extra={"event": "service_scope.contract_total.calculated", "contract_id": contract_id, "total": total},
        )
        return total

    def upload_saf_document(self, service_scope_id: int, filename: str, payload: bytes) -> ServiceScope:
        scope = self.get_service_scope(service_scope_id)
        link = self._store_document("service-scopes", scope.id, filename, payload, scope.saf_document_link)
        scope.saf_document_link = link
        self.commit()
        logger.info(
            "service_scope.saf_document.uploaded",
            extra={"event": "service_scope.saf_document.uploaded", "service_scope_id": scope.id},
        )
        return self.get_service_scope(service_scope_id)
