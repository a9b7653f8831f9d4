from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from engagements.core.enums import ProposalStatus, ProposalType
from engagements.core.exceptions import BusinessRuleError, NotFoundError, ValidationError
from engagements.models import Client, Contract, Proposal, ServiceScope
from engagements.orchestration.state_machine import InvalidTransitionError
from engagements.schemas.proposals import ProposalCreate, ProposalListParams, ProposalUpdate
from engagements.services.proposal_service import ProposalService


def _utc_now():
    return datetime.now(timezone.utc)


def _scope(session, client, catalog, contract_window, name="Acme MSA", service_index=0):
    start, end = contract_window
    contract = Contract(name=name, client_id=client.id, start_date=start, end_date=end)
    session.add(contract)
    session.flush()
    scope = ServiceScope(contract_id=contract.id, service_id=catalog[service_index].id)
    session.add(scope)
    session.commit()
    return scope


def _payload(scope, **overrides):
    payload = {
        "serviceScopeId": scope.id,
        "proposalType": "technical",
        "documentLink": "/docs/proposal.pdf",
    }
    payload.update(overrides)
    return ProposalCreate.model_validate(payload)


def test_create_for_service_scope(session, client, catalog, contract_window, user):
    scope = _scope(session, client, catalog, contract_window)
    service = ProposalService(db=session)

    proposal = service.create_for_service_scope(
        scope.id, _payload(scope, title="SOC onboarding", assigneeUserId=user.id)
    )

    assert proposal.status == ProposalStatus.DRAFT
    assert proposal.is_draft is True
    assert proposal.service_scope.service.name == "Managed SOC"
    assert proposal.assignee_user.email == "analyst@acme.example"


def test_path_and_body_scope_must_match(session, client, catalog, contract_window):
    scope = _scope(session, client, catalog, contract_window)
    other = _scope(session, client, catalog, contract_window, name="Other MSA")
    service = ProposalService(db=session)

    with pytest.raises(ValidationError, match="Service scope ID in URL must match"):
        service.create_for_service_scope(scope.id, _payload(other))


def test_unknown_scope_and_assignee(session, client, catalog, contract_window):
    scope = _scope(session, client, catalog, contract_window)
    service = ProposalService(db=session)

    with pytest.raises(NotFoundError, match="Service scope with ID 999 not found"):
        service.create_for_service_scope(999, _payload(scope))
    with pytest.raises(NotFoundError, match="Assignee user with ID 77 not found"):
        service.create_proposal(_payload(scope, assigneeUserId=77))
    with pytest.raises(NotFoundError):
        service.list_for_service_scope(999)


def test_positive_value_defaults_currency(session, client, catalog, contract_window):
    scope = _scope(session, client, catalog, contract_window)
    service = ProposalService(db=session)

    priced = service.create_proposal(_payload(scope, proposalValue="15000.00"))
    assert priced.currency == "SAR"

    explicit = service.create_proposal(_payload(scope, proposalValue="10", currency="usd"))
    assert explicit.currency == "USD"

    unpriced = service.create_proposal(_payload(scope))
    assert unpriced.currency is None


def test_creation_date_rules(session, client, catalog, contract_window):
    scope = _scope(session, client, catalog, contract_window)
    service = ProposalService(db=session)
    submitted = _utc_now() - timedelta(days=1)
    today = _utc_now().date()

    with pytest.raises(ValidationError, match="Approval date must be after submission date"):
        service.create_proposal(_payload(scope, submittedAt=submitted, approvedAt=submitted))

    approved = service.create_proposal(
        _payload(scope, submittedAt=submitted, approvedAt=submitted + timedelta(seconds=1))
    )
    assert approved.approved_at is not None

    with pytest.raises(ValidationError, match="Valid until date must be in the future"):
        service.create_proposal(_payload(scope, validUntilDate=today))

    valid = service.create_proposal(_payload(scope, validUntilDate=today + timedelta(days=1)))
    assert valid.is_expired is False

    with pytest.raises(ValidationError, match="Submission date cannot be in the future"):
        service.create_proposal(_payload(scope, submittedAt=_utc_now() + timedelta(hours=1)))


def test_status_changes_follow_transition_table(session, client, catalog, contract_window):
    scope = _scope(session, client, catalog, contract_window)
    service = ProposalService(db=session)
    proposal = service.create_proposal(_payload(scope))

    submitted = service.update_proposal(proposal.id, ProposalUpdate(status=ProposalStatus.SUBMITTED))
    assert submitted.status == ProposalStatus.SUBMITTED

    with pytest.raises(InvalidTransitionError) as exc_info:
        service.update_proposal(proposal.id, ProposalUpdate(status=ProposalStatus.APPROVED))
    assert exc_info.value.current == "submitted"
    assert exc_info.value.requested == "approved"
    assert "under_review" in exc_info.value.allowed

    same = service.update_proposal(proposal.id, ProposalUpdate(status=ProposalStatus.SUBMITTED, title="Resent"))
    assert same.title == "Resent"
    assert session.get(Proposal, proposal.id).status == ProposalStatus.SUBMITTED


def test_update_checks_effective_dates(session, client, catalog, contract_window):
    scope = _scope(session, client, catalog, contract_window)
    service = ProposalService(db=session)
    submitted = _utc_now() - timedelta(days=2)
    proposal = service.create_proposal(_payload(scope, submittedAt=submitted))

    with pytest.raises(ValidationError, match="Approval date must be after submission date"):
        service.update_proposal(proposal.id, ProposalUpdate(approved_at=submitted - timedelta(hours=1)))

    updated = service.update_proposal(proposal.id, ProposalUpdate(approved_at=submitted + timedelta(hours=1)))
    assert updated.approved_at is not None


def test_update_defaults_currency_on_effective_value(session, client, catalog, contract_window):
    scope = _scope(session, client, catalog, contract_window)
    service = ProposalService(db=session)
    proposal = service.create_proposal(_payload(scope))

    updated = service.update_proposal(proposal.id, ProposalUpdate(proposal_value=Decimal("500.00")))
    assert updated.currency == "SAR"

    kept = service.update_proposal(proposal.id, ProposalUpdate(currency="EUR"))
    assert kept.currency == "EUR"
    assert kept.proposal_value == Decimal("500.00")


def test_cleared_dates_are_not_checked_against_old_values(session, client, catalog, contract_window):
    scope = _scope(session, client, catalog, contract_window)
    service = ProposalService(db=session)
    now = _utc_now()
    proposal = service.create_proposal(
        _payload(scope, submittedAt=now - timedelta(days=2), approvedAt=now - timedelta(days=1))
    )

    updated = service.update_proposal(
        proposal.id, ProposalUpdate(submitted_at=now - timedelta(hours=1), approved_at=None)
    )

    assert updated.approved_at is None
    assert updated.submitted_at is not None


def test_clearing_value_does_not_default_currency(session, client, catalog, contract_window):
    scope = _scope(session, client, catalog, contract_window)
    service = ProposalService(db=session)
    proposal = service.create_proposal(_payload(scope, proposalValue="10.00"))
    proposal.currency = None
    session.commit()

    updated = service.update_proposal(proposal.id, ProposalUpdate(proposal_value=None))

    assert updated.proposal_value is None
    assert updated.currency is None


def test_custom_field_merge_on_update(session, client, catalog, contract_window, custom_fields):
    scope = _scope(session, client, catalog, contract_window)
    service = ProposalService(db=session, custom_fields=custom_fields)
    proposal = service.create_proposal(_payload(scope, customFieldData={"a": 1, "b": 2}))

    updated = service.update_proposal(proposal.id, ProposalUpdate(custom_field_data={"b": 3, "c": 4}))
    assert updated.custom_field_data == {"a": 1, "b": 3, "c": 4}

    untouched = service.update_proposal(proposal.id, ProposalUpdate(notes="no custom fields"))
    assert untouched.custom_field_data == {"a": 1, "b": 3, "c": 4}


def test_invalid_custom_fields_block_the_write(session, client, catalog, contract_window, custom_fields):
    scope = _scope(session, client, catalog, contract_window)
    service = ProposalService(db=session, custom_fields=custom_fields)

    with pytest.raises(ValidationError):
        service.create_proposal(_payload(scope, customFieldData={"unknown": True}))
    assert session.query(Proposal).count() == 0


def test_delete_guard(session, client, catalog, contract_window):
    scope = _scope(session, client, catalog, contract_window)
    service = ProposalService(db=session)
    approved = service.create_proposal(_payload(scope, status="approved"))
    draft = service.create_proposal(_payload(scope))

    with pytest.raises(BusinessRuleError, match="Cannot delete approved or completed proposals"):
        service.delete_proposal(approved.id)

    service.delete_proposal(draft.id)
    assert session.get(Proposal, draft.id) is None
    assert session.get(Proposal, approved.id) is not None


def test_list_for_service_scope_is_scoped(session, client, catalog, contract_window):
    scope = _scope(session, client, catalog, contract_window)
    other = _scope(session, client, catalog, contract_window, name="Other MSA")
    service = ProposalService(db=session)
    mine = service.create_proposal(_payload(scope, proposalType="financial"))
    service.create_proposal(_payload(other))

    page = service.list_for_service_scope(scope.id)
    assert [proposal.id for proposal in page.data] == [mine.id]

    filtered = service.list_proposals(ProposalListParams(proposalType="financial"))
    assert filtered.count == 1


def test_statistics(session, client, catalog, contract_window):
    scope = _scope(session, client, catalog, contract_window)
    other_client = Client(company_name="Globex")
    session.add(other_client)
    session.commit()
    foreign_scope = _scope(session, other_client, catalog, contract_window, name="Globex MSA")
    service = ProposalService(db=session)
    soon = _utc_now().date() + timedelta(days=10)
    far = _utc_now().date() + timedelta(days=90)

    service.create_proposal(_payload(scope, proposalValue="100.00", validUntilDate=soon))
    service.create_proposal(_payload(scope, proposalValue="200.00", proposalType="financial", validUntilDate=far))
    service.create_proposal(_payload(foreign_scope))

    stats = service.get_proposal_statistics()
    assert stats["total"] == 3
    assert stats["by_status"] == {"draft": 3}
    assert stats["by_type"] == {"technical": 2, "financial": 1}
    assert stats["total_value"] == Decimal("300.00")
    assert stats["average_value"] == Decimal("150.00")
    assert stats["expiring_soon"] == 1

    scoped = service.get_proposal_statistics(client_id=other_client.id)
    assert scoped["total"] == 1
    assert scoped["average_value"] == Decimal("0.00")


def test_upload_document_swaps_link(session, client, catalog, contract_window, documents):
    scope = _scope(session, client, catalog, contract_window)
    service = ProposalService(db=session, documents=documents)
    proposal = service.create_proposal(_payload(scope))

    updated = service.upload_document(proposal.id, "v2.pdf", b"bytes")
    assert updated.document_link == f"/uploads/proposals/{proposal.id}/v2.pdf"
    assert documents.deleted == ["/docs/proposal.pdf"]
