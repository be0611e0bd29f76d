from __future__ import annotations

import json
import uuid
from typing import Any, Dict, Mapping, Optional

from ..domain.constants import PrincipalKind
from ..domain.entities import TokenRecord
from ..domain.value_objects import PrincipalRef, TokenId
from ..logging_config import get_logger

logger = get_logger(__name__)

# Persisted field names
FIELD_UUID = "uuid"
FIELD_TYPE = "type"
FIELD_CREATED = "created"
FIELD_ACCESSED = "accessed"
FIELD_PRINCIPAL_TYPE = "principal"
FIELD_ENTITY = "entity"
FIELD_APPLICATION = "application"
FIELD_STATE = "state"

REQUIRED_FIELDS = (FIELD_UUID, FIELD_TYPE, FIELD_CREATED, FIELD_ACCESSED)


def record_to_fields(record: TokenRecord) -> Dict[str, str]:
    """
    Flatten a TokenRecord into the string mapping the stores persist.

    State values with no JSON form (UUIDs, datetimes, ...) are stored as
    their string form and come back as strings.
    """
    fields = {
        FIELD_UUID: record.token_id.canonical,
        FIELD_TYPE: record.label,
        FIELD_CREATED: str(record.created),
        FIELD_ACCESSED: str(record.accessed),
        FIELD_STATE: json.dumps(
            record.state or {}, separators=(",", ":"), sort_keys=True, default=str
        ),
    }
    principal = record.principal
    if principal is not None:
        fields[FIELD_PRINCIPAL_TYPE] = principal.kind.value
        fields[FIELD_ENTITY] = str(principal.principal_id)
        if principal.scope_id is not None:
            fields[FIELD_APPLICATION] = str(principal.scope_id)
    return fields


def record_from_fields(fields: Mapping[str, Any]) -> Optional[TokenRecord]:
    """
    Rebuild a TokenRecord from persisted fields.

    Returns None when any required field is missing (a partially written
    or partially expired record). An unknown principal type is dropped and
    the record is returned without a principal.
    """
    values = {_text(key): _text(value) for key, value in fields.items()}
    if not all(values.get(name) for name in REQUIRED_FIELDS):
        return None

    raw_state = values.get(FIELD_STATE)
    state = json.loads(raw_state) if raw_state else {}

    return TokenRecord(
        token_id=TokenId.parse(values[FIELD_UUID]),
        label=values[FIELD_TYPE],
        created=int(values[FIELD_CREATED]),
        accessed=int(values[FIELD_ACCESSED]),
        principal=_principal_from_fields(values),
        state=state,
    )


def _principal_from_fields(values: Mapping[str, str]) -> Optional[PrincipalRef]:
    raw_kind = values.get(FIELD_PRINCIPAL_TYPE)
    if not raw_kind:
        return None
    try:
        kind = PrincipalKind(raw_kind.lower())
    except ValueError:
        logger.warning("unknown_principal_type", principal_type=raw_kind)
        return None

    entity = values.get(FIELD_ENTITY)
    if not entity:
        return None
    application = values.get(FIELD_APPLICATION)
    return PrincipalRef(
        kind=kind,
        principal_id=uuid.UUID(entity),
        scope_id=uuid.UUID(application) if application else None,
    )


def _text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)
