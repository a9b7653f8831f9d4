"""Shared service base with robust session lifecycle behavior."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import engagements.database.db as db_module
from engagements.core.exceptions import ConfigurationError, ConflictError, NotFoundError
from engagements.integrations.custom_fields import CustomFieldGateway
from engagements.integrations.documents import DocumentStore

logger = logging.getLogger(__name__)


class BaseService:
    """Base class for services that operate on a SQLAlchemy session."""

    def __init__(
        self,
        db: Session | None = None,
        custom_fields: CustomFieldGateway | None = None,
        documents: DocumentStore | None = None,
    ) -> None:
        self.db = db or db_module.SessionLocal()
        self.custom_fields = custom_fields
        self.documents = documents

    def commit(self, conflict_message: str = "Resource already exists") -> None:
        """Commit current transaction and rollback on failure.

        Unique-constraint violations surface as ``ConflictError``.
        """
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning(
                "database.integrity_conflict",
                extra={"event": "database.integrity_conflict", "reason": str(exc.orig)},
            )
            raise ConflictError(conflict_message) from exc
        except Exception:
            self.db.rollback()
            raise

    def rollback(self) -> None:
        self.db.rollback()

    def close(self) -> None:
        self.db.close()

    def _require(self, model, entity_id: int, entity: str | None = None, options=()):
        """Fetch a row by primary key or raise ``NotFoundError``."""
        query = self.db.query(model).populate_existing()
        if options:
            query = query.options(*options)
        row = query.filter(model.id == entity_id).first()
        if row is None:
            raise NotFoundError(entity or model.__name__, entity_id)
        return row

    def _store_document(
        self, entity_kind: str, entity_id: int, filename: str, payload: bytes, previous_link: str | None = None
    ) -> str:
        """Hand bytes to the document store and drop the superseded document."""
        if self.documents is None:
            raise ConfigurationError("No document store is configured")
        link = self.documents.store_document(entity_kind, entity_id, filename, payload)
        if previous_link and previous_link != link:
            self.documents.delete_document(previous_link)
        return link

    def __enter__(self) -> "BaseService":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type:
            self.rollback()
        self.close()
