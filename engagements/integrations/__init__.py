"""Narrow interfaces to the custom-field and document subsystems."""

from engagements.integrations.custom_fields import (
    CustomFieldDefinitionProvider,
    CustomFieldGateway,
    CustomFieldValidator,
)
from engagements.integrations.documents import DocumentStore

__all__ = [
    "CustomFieldDefinitionProvider",
    "CustomFieldGateway",
    "CustomFieldValidator",
    "DocumentStore",
]
