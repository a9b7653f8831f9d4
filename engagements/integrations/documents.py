"""Call boundary to the external document store."""

from __future__ import annotations

from typing import Protocol


class DocumentStore(Protocol):
    """Stores uploaded bytes elsewhere; the core only keeps the returned link."""

    def store_document(self, entity_kind: str, entity_id: int, filename: str, payload: bytes) -> str:
        ...

    def delete_document(self, link: str) -> bool:
        ...
