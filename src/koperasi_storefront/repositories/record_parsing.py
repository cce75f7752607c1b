"""Validation of raw backend records into typed entities."""

import logging
from typing import Any, Protocol, TypeVar

from pydantic import ValidationError as PydanticValidationError

from koperasi_storefront.exceptions import DataIntegrityError

logger = logging.getLogger(__name__)


class _FromRecord(Protocol):
    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Any: ...


T = TypeVar("T", bound=_FromRecord)


def parse_record(model: type[T], record: dict[str, Any], collection: str) -> T:
    """Build a typed entity from a record, rejecting malformed records.

    Args:
        model: Entity class exposing ``from_record``
        record: Raw record from the document store
        collection: Collection the record came from (for the error message)

    Returns:
        The parsed entity

    Raises:
        DataIntegrityError: If required fields are missing or invalid
    """
    try:
        parsed: T = model.from_record(record)
        return parsed
    except (KeyError, ValueError, TypeError, PydanticValidationError) as e:
        record_id = record.get("id", "<no id>")
        logger.error(f"Malformed record {record_id} in {collection}: {e}")
        raise DataIntegrityError(f"Malformed record {record_id} in {collection}") from e
