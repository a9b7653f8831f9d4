"""Proposal service: offers attached to a service scope."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy.orm import selectinload

from engagements.core.enums import CustomFieldEntityType, ProposalStatus
from engagements.core.exceptions import BusinessRuleError, ValidationError
from engagements.models import Contract, Proposal, ServiceScope, User
from engagements.orchestration.state_machine import proposal_state_machine
from engagements.schemas.proposals import ProposalCreate, ProposalListParams, ProposalUpdate
from engagements.services.base_service import BaseService
from engagements.services.list_query import FilterField, FilterKind, ListQuerySpec, Page, run_list_query
from engagements.services.validation import (
    resolve_effective,
    validate_custom_fields,
    validate_financials,
    validate_proposal_dates,
)

logger = logging.getLogger(__name__)

PROPOSAL_EXPIRY_WINDOW_DAYS = 30

PROPOSAL_LIST_SPEC = ListQuerySpec(
    model=Proposal,
    filters=(
        FilterField("proposal_type", Proposal.proposal_type),
        FilterField("status", Proposal.status),
        FilterField("assignee_user_id", Proposal.assignee_user_id),
        FilterField("client_id", Contract.client_id),
        FilterField("service_scope_id", Proposal.service_scope_id),
        FilterField("currency", Proposal.currency),
        FilterField("date_from", Proposal.created_at, FilterKind.MIN),
        FilterField("date_to", Proposal.created_at, FilterKind.MAX),
        FilterField("submitted_date_from", Proposal.submitted_at, FilterKind.MIN),
        FilterField("submitted_date_to", Proposal.submitted_at, FilterKind.MAX),
    ),
    search_columns=(Proposal.title, Proposal.description, Proposal.notes),
    sort_columns={
        "createdAt": Proposal.created_at,
        "updatedAt": Proposal.updated_at,
        "submittedAt": Proposal.submitted_at,
        "approvedAt": Proposal.approved_at,
        "proposalValue": Proposal.proposal_value,
        "validUntilDate": Proposal.valid_until_date,
    },
    nullable_sort_keys=frozenset({"submittedAt", "approvedAt", "proposalValue", "validUntilDate"}),
    joins=(
        (ServiceScope, Proposal.service_scope_id == ServiceScope.id),
        (Contract, ServiceScope.contract_id == Contract.id),
    ),
    load_options=(
        selectinload(Proposal.service_scope).selectinload(ServiceScope.service),
        selectinload(Proposal.assignee_user),
    ),
)

PROPOSAL_DETAIL_OPTIONS = (
    selectinload(Proposal.service_scope).selectinload(ServiceScope.contract).selectinload(Contract.client),
    selectinload(Proposal.service_scope).selectinload(ServiceScope.service),
    selectinload(Proposal.assignee_user),
)

# Required columns a partial update never clears.
_NON_NULLABLE_FIELDS = {"proposal_type", "document_link", "status"}


class ProposalService(BaseService):
    """Service for proposal CRUD, status workflow and statistics."""

    def _require_assignee(self, user_id: int | None) -> None:
        if user_id is None:
            return
        user = self._require(User, user_id, "Assignee user")
        logger.info(
            "proposal.assignee.resolved",
            extra={"event": "proposal.assignee.resolved", "assignee_user_id": user.id},
        )

    def create_for_service_scope(self, service_scope_id: int, data: ProposalCreate) -> Proposal:
        """Create under a scope addressed by path; the body must name the same scope."""
        self._require(ServiceScope, service_scope_id, "Service scope")
        if data.service_scope_id != service_scope_id:
            raise ValidationError("Service scope ID in URL must match service scope ID in request body")
        return self._create(data)

    def create_proposal(self, data: ProposalCreate) -> Proposal:
        self._require(ServiceScope, data.service_scope_id, "Service scope")
        return self._create(data)

    def _create(self, data: ProposalCreate) -> Proposal:
        logger.info(
            "proposal.create.requested",
            extra={"event": "proposal.create.requested", "service_scope_id": data.service_scope_id},
        )
        self._require_assignee(data.assignee_user_id)

        validate_proposal_dates(data.submitted_at, data.approved_at, data.valid_until_date)
        currency = validate_financials(data.proposal_value, data.currency, logger)
        custom_field_data = validate_custom_fields(
            self.custom_fields, CustomFieldEntityType.PROPOSAL, data.custom_field_data
        )

        proposal = Proposal(
            service_scope_id=data.service_scope_id,
            proposal_type=data.proposal_type,
            document_link=data.document_link,
            version=data.version,
            status=data.status or ProposalStatus.DRAFT,
            title=data.title,
            description=data.description,
            proposal_value=data.proposal_value,
            currency=currency,
            valid_until_date=data.valid_until_date,
            estimated_duration_days=data.estimated_duration_days,
            submitted_at=data.submitted_at,
            approved_at=data.approved_at,
            assignee_user_id=data.assignee_user_id,
            notes=data.notes,
            custom_field_data=custom_field_data,
        )
        self.db.add(proposal)
        self.commit()

        logger.info("proposal.created", extra={"event": "proposal.created", "proposal_id": proposal.id})
        return self.get_proposal(proposal.id)

    def list_proposals(self, params: ProposalListParams | None = None) -> Page[Proposal]:
        params = params or ProposalListParams()
        page = run_list_query(self.db, PROPOSAL_LIST_SPEC, params)
        logger.info(
            "proposal.list.fetched",
            extra={"event": "proposal.list.fetched", "count": page.count, "page": page.page},
        )
        return page

    def list_for_service_scope(
        self, service_scope_id: int, params: ProposalListParams | None = None
    ) -> Page[Proposal]:
        self._require(ServiceScope, service_scope_id, "Service scope")
        params = params or ProposalListParams()
        return run_list_query(
            self.db,
            PROPOSAL_LIST_SPEC,
            params,
            extra_criteria=(Proposal.service_scope_id == service_scope_id,),
        )

    def get_proposal(self, proposal_id: int) -> Proposal:
        return self._require(Proposal, proposal_id, options=PROPOSAL_DETAIL_OPTIONS)

    def update_proposal(self, proposal_id: int, data: ProposalUpdate) -> Proposal:
        proposal = self.get_proposal(proposal_id)
        changes: dict[str, Any] = data.model_dump(exclude_unset=True)

        if changes.get("assignee_user_id") is not None:
            self._require_assignee(changes["assignee_user_id"])

        requested_status = changes.get("status")
        if requested_status is not None:
            proposal_state_machine.assert_transition(proposal.status, requested_status)

        validate_proposal_dates(
            resolve_effective(changes, "submitted_at", proposal.submitted_at),
            resolve_effective(changes, "approved_at", proposal.approved_at),
            resolve_effective(changes, "valid_until_date", proposal.valid_until_date),
        )

        effective_currency = resolve_effective(changes, "currency", proposal.currency)
        resolved_currency = validate_financials(
            resolve_effective(changes, "proposal_value", proposal.proposal_value),
            effective_currency,
            logger,
        )
        if resolved_currency != effective_currency:
            changes["currency"] = resolved_currency

        if "custom_field_data" in changes:
            changes["custom_field_data"] = validate_custom_fields(
                self.custom_fields,
                CustomFieldEntityType.PROPOSAL,
                changes["custom_field_data"],
                existing=proposal.custom_field_data,
            )

        previous_status = ProposalStatus(proposal.status)
        for field_name, value in changes.items():
            if value is None and field_name in _NON_NULLABLE_FIELDS:
                continue
            setattr(proposal, field_name, value)

        self.commit()
        logger.info(
            "proposal.updated",
            extra={
                "event": "proposal.updated",
                "proposal_id": proposal.id,
                "fields": sorted(changes),
                "from_status": previous_status.value,
                "to_status": ProposalStatus(proposal.status).value,
            },
        )
        return self.get_proposal(proposal_id)

    def delete_proposal(self, proposal_id: int) -> None:
        proposal = self.get_proposal(proposal_id)
        if proposal.is_approved and not proposal.is_draft:
            raise BusinessRuleError("Cannot delete approved or completed proposals. Consider archiving instead.")

        self.db.delete(proposal)
        self.commit()
        logger.info("proposal.deleted", extra={"event": "proposal.deleted", "proposal_id": proposal_id})

    def get_proposal_statistics(self, client_id: int | None = None) -> dict[str, Any]:
        query = self.db.query(Proposal)
        if client_id is not None:
            query = (
                query.join(ServiceScope, Proposal.service_scope_id == ServiceScope.id)
                .join(Contract, ServiceScope.contract_id == Contract.id)
                .filter(Contract.client_id == client_id)
            )
        proposals = query.all()

        today = datetime.now(timezone.utc).date()
        horizon = today + timedelta(days=PROPOSAL_EXPIRY_WINDOW_DAYS)
        by_status: dict[str, int] = {}
        by_type: dict[str, int] = {}
        values: list[Decimal] = []
        expiring_soon = 0

        for proposal in proposals:
            status = ProposalStatus(proposal.status).value
            by_status[status] = by_status.get(status, 0) + 1
            proposal_type = proposal.proposal_type.value
            by_type[proposal_type] = by_type.get(proposal_type, 0) + 1
            if proposal.proposal_value:
                values.append(Decimal(proposal.proposal_value))
            if proposal.valid_until_date and today < proposal.valid_until_date <= horizon:
                expiring_soon += 1

        total_value = sum(values, Decimal("0.00"))
        average_value = (total_value / len(values)).quantize(Decimal("0.01")) if values else Decimal("0.00")
        return {
            "total": len(proposals),
            "by_status": by_status,
            "by_type": by_type,
            "total_value": total_value,
            "average_value": average_value,
            "expiring_soon": expiring_soon,
        }

    def upload_document(self, proposal_id: int, filename: str, payload: bytes) -> Proposal:
        proposal = self.get_proposal(proposal_id)
        link = self._store_document("proposals", proposal.id, filename, payload, proposal.document_link)
        proposal.document_link = link
        self.commit()
        logger.info(
            "proposal.document.uploaded",
            extra={"event": "proposal.document.uploaded", "proposal_id": proposal.id},
        )
        return self.get_proposal(proposal_id)
