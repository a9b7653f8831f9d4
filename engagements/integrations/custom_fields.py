"""Call boundary to the external custom-field subsystem.

The engagement core never interprets custom-field definitions; it asks the
provider for the definitions of an entity kind and hands the payload to the
validator, which type-checks and coerces every value.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

from engagements.core.enums import CustomFieldEntityType

logger = logging.getLogger(__name__)


class CustomFieldDefinitionProvider(Protocol):
    def get_field_definitions_map(self, entity_kind: CustomFieldEntityType) -> Mapping[str, Any]:
        ...


class CustomFieldValidator(Protocol):
    def validate_custom_field_data(self, payload: Mapping[str, Any], definitions: Mapping[str, Any]) -> dict[str, Any]:
        """Return the coerced payload or raise ``ValidationError``."""
        ...


class CustomFieldGateway:
    """Pairs a definition provider with a validator for one call site."""

    def __init__(self, provider: CustomFieldDefinitionProvider, validator: CustomFieldValidator) -> None:
        self.provider = provider
        self.validator = validator

    def validate(self, entity_kind: CustomFieldEntityType, payload: Mapping[str, Any]) -> dict[str, Any]:
        definitions = self.provider.get_field_definitions_map(entity_kind)
        validated = self.validator.validate_custom_field_data(payload, definitions)
        logger.debug(
            "custom_fields.validated",
            extra={"event": "custom_fields.validated", "entity_kind": entity_kind.value, "fields": sorted(validated)},
        )
        return dict(validated)
