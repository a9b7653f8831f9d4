from __future__ import annotations

from datetime import date, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from engagements.core.exceptions import ValidationError
from engagements.integrations.custom_fields import CustomFieldGateway
from engagements.models import Base, Client, Service, User


def _build_session():
    engine = create_engine("sqlite:///:memory:")
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    return TestingSessionLocal()


class FakeDefinitionProvider:
    def __init__(self, definitions: dict | None = None) -> None:
        self.definitions = definitions or {"a": "number", "b": "number", "c": "number", "region": "text"}
        self.requested: list = []

    def get_field_definitions_map(self, entity_kind):
        self.requested.append(entity_kind)
        return self.definitions


class FakeCustomFieldValidator:
    def validate_custom_field_data(self, payload, definitions):
        unknown = sorted(set(payload) - set(definitions))
        if unknown:
            raise ValidationError(f"Unknown custom fields: {', '.join(unknown)}")
        return {key: (int(value) if definitions[key] == "number" else value) for key, value in payload.items()}


class FakeDocumentStore:
    def __init__(self) -> None:
        self.stored: list[tuple] = []
        self.deleted: list[str] = []

    def store_document(self, entity_kind, entity_id, filename, payload):
        self.stored.append((entity_kind, entity_id, filename, payload))
        return f"/uploads/{entity_kind}/{entity_id}/{filename}"

    def delete_document(self, link):
        self.deleted.append(link)
        return True


@pytest.fixture
def session():
    db = _build_session()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def definition_provider():
    return FakeDefinitionProvider()


@pytest.fixture
def custom_fields(definition_provider):
    return CustomFieldGateway(definition_provider, FakeCustomFieldValidator())


@pytest.fixture
def documents():
    return FakeDocumentStore()


@pytest.fixture
def client(session):
    client = Client(company_name="Acme Holdings", contact_email="ops@acme.example")
    session.add(client)
    session.commit()
    return client


@pytest.fixture
def catalog(session):
    services = [
        Service(name="Managed SOC"),
        Service(name="Endpoint Protection"),
        Service(name="Vulnerability Scanning"),
        Service(name="Legacy Backup", is_active=False),
    ]
    session.add_all(services)
    session.commit()
    return services


@pytest.fixture
def user(session):
    user = User(email="analyst@acme.example", full_name="Sam Analyst")
    session.add(user)
    session.commit()
    return user


@pytest.fixture
def contract_window():
    start = date.today() - timedelta(days=30)
    return start, start + timedelta(days=365)
