from __future__ import annotations

from alembic import command
from sqlalchemy import create_engine, inspect

from engagements.database.init_db import _build_alembic_config


def test_baseline_migration_matches_models(tmp_path):
    database_url = f"sqlite:///{tmp_path / 'engagements.db'}"
    command.upgrade(_build_alembic_config(database_url), "head")

    inspector = inspect(create_engine(database_url))
    tables = set(inspector.get_table_names())
    assert {"clients", "services", "users", "contracts", "service_scopes", "proposals"} <= tables

    scope_uniques = {constraint["name"] for constraint in inspector.get_unique_constraints("service_scopes")}
    assert "uq_service_scopes_contract_service" in scope_uniques

    proposal_columns = {column["name"] for column in inspector.get_columns("proposals")}
    assert {"valid_until_date", "submitted_at", "approved_at", "custom_field_data"} <= proposal_columns


def test_downgrade_removes_tables(tmp_path):
    database_url = f"sqlite:///{tmp_path / 'engagements.db'}"
    cfg = _build_alembic_config(database_url)
    command.upgrade(cfg, "head")
    command.downgrade(cfg, "base")

    tables = set(inspect(create_engine(database_url)).get_table_names())
    assert not {"contracts", "service_scopes", "proposals"} & tables
