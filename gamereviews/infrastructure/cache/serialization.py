"""JSON text encoding of records for the cache stores."""

import json

from gamereviews.domain.errors import CacheStoreError
from gamereviews.domain.models.common import ResourceKind
from gamereviews.domain.models.records import Record, record_type_for


def serialize_record(record: Record) -> str:
    try:
        return json.dumps(record.to_payload(), sort_keys=True)
    except (TypeError, ValueError) as e:
        raise CacheStoreError(f"Cannot serialize {type(record).__name__} {record.id}: {e}") from e


def deserialize_record(kind: ResourceKind, value: str) -> Record:
    """Rebuilds a record of `kind` from its cached JSON text.

    Raises:
        CacheStoreError: If the stored text is not a valid record payload.
    """
    try:
        payload = json.loads(value)
        if not isinstance(payload, dict):
            raise TypeError(f"expected a JSON object, got {type(payload).__name__}")
        return record_type_for(kind).from_payload(payload)
    except (ValueError, KeyError, TypeError) as e:
        raise CacheStoreError(f"Corrupted cache entry for '{kind}': {e}") from e
