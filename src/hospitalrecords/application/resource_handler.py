"""
Generic resource handler.

The five document operations (list, get, create, update, delete) are written
once here and parameterized by a ``ResourcePolicy`` describing one entity kind:
its collection, required fields, optional-field defaults, reference fields,
numeric fields and whether it carries createdAt/updatedAt.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

import bson
from bson import ObjectId
from bson.errors import BSONError
from pymongo.errors import PyMongoError

from ..adapters.db.mongo.store import CollectionRef, DocumentStore
from ..core.utils.datetime_utils import get_current_timestamp
from ..core.utils.identifiers import is_valid_id, to_object_id
from ..domain.errors import (
    DocumentNotFoundError,
    EmptyUpdateError,
    InvalidIdentifierError,
    StoreError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)

ID_FIELD = "_id"
TIMESTAMP_FIELDS = ("createdAt", "updatedAt")

# BSON int64
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


@dataclass(frozen=True)
class ResourcePolicy:
    """Field rules for one entity kind."""

    name: str
    plural: str
    collection: str
    required: Tuple[str, ...]
    optional_defaults: Mapping[str, Any] = field(default_factory=dict)
    reference_fields: Tuple[str, ...] = ()
    numeric_fields: Tuple[str, ...] = ()
    timestamps: bool = False
    created_message: Optional[str] = None

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def immutable_fields(self) -> FrozenSet[str]:
        """Keys a caller may never write through an update."""
        if self.timestamps:
            return frozenset((ID_FIELD, *TIMESTAMP_FIELDS))
        return frozenset((ID_FIELD,))


def strip_fields(payload: Mapping[str, Any], denied: FrozenSet[str]) -> Dict[str, Any]:
    """Copy ``payload`` without the ``denied`` keys."""
    return {key: value for key, value in payload.items() if key not in denied}


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def coerce_number(value: Any) -> Any:
    """Numeric form of ``value``; integral values within int64 become ``int``."""
    if isinstance(value, bool):
        raise ValueError("booleans are not numbers")
    if isinstance(value, str):
        text = value.strip()
        try:
            value = int(text)
        except ValueError:
            value = float(text)
    if isinstance(value, int):
        if not INT64_MIN <= value <= INT64_MAX:
            raise ValueError("integer out of range")
        return value
    if not isinstance(value, float):
        raise TypeError(f"not a number: {type(value).__name__}")
    if not math.isfinite(value):
        raise ValueError("number must be finite")
    if value.is_integer() and INT64_MIN <= value <= INT64_MAX:
        return int(value)
    return value


def invalid_keys(patch: Mapping[str, Any]) -> List[str]:
    """Top-level keys that cannot be written through ``$set``."""
    # Dotted keys would address nested paths, including under immutable fields
    return [
        key for key in patch
        if not key or key.startswith("$") or "." in key or "\0" in key
    ]


class ResourceHandler:
    """CRUD operations for one collection, driven by a ``ResourcePolicy``."""

    def __init__(self, policy: ResourcePolicy, store: DocumentStore):
        self.policy = policy
        self.store = store

    def _collection(self) -> CollectionRef:
        return self.store.collection(self.policy.collection)

    def _object_id(self, document_id: str) -> ObjectId:
        if not is_valid_id(document_id):
            raise InvalidIdentifierError(f"Invalid {self.policy.name} ID format", document_id)
        return to_object_id(document_id)

    def _store_failure(self, action: str, error: PyMongoError) -> StoreError:
        logger.error(
            f"Store failure during {action} on '{self.policy.collection}': {error}",
            exc_info=True,
        )
        return StoreError(f"Failed to {action}")

    # ------------------------------------------------------------------
    # field rules
    # ------------------------------------------------------------------

    def _check_required(self, payload: Mapping[str, Any]) -> None:
        missing = [name for name in self.policy.required if is_missing(payload.get(name))]
        if missing:
            raise ValidationFailedError(
                f"{', '.join(self.policy.required)} are required", missing
            )

    def _apply_references(self, values: Dict[str, Any]) -> None:
        for name in self.policy.reference_fields:
            if name not in values:
                continue
            raw = values[name]
            if is_missing(raw):
                values[name] = None
                continue
            if not is_valid_id(raw):
                raise InvalidIdentifierError(f"Invalid {name} format", raw)
            values[name] = to_object_id(raw)

    def _apply_numbers(self, values: Dict[str, Any]) -> None:
        for name in self.policy.numeric_fields:
            if name not in values:
                continue
            try:
                values[name] = coerce_number(values[name])
            except (TypeError, ValueError):
                raise ValidationFailedError(f"{name} must be a number", [name])

    def _check_keys(self, patch: Mapping[str, Any]) -> None:
        invalid = invalid_keys(patch)
        if invalid:
            raise ValidationFailedError(f"Invalid field names: {', '.join(repr(key) for key in invalid)}", invalid)

    def _check_encodable(self, values: Mapping[str, Any]) -> None:
        """Reject values BSON cannot hold (e.g. integers beyond int64)."""
        invalid = []
        for name, value in values.items():
            try:
                bson.encode({name: value})
            except (BSONError, OverflowError):
                invalid.append(name)
        if invalid:
            raise ValidationFailedError(f"Unsupported value for {', '.join(invalid)}", invalid)

    # ------------------------------------------------------------------
    # operations
    # ------------------------------------------------------------------

    async def list(self) -> List[Dict[str, Any]]:
        try:
            return await self._collection().list_all()
        except PyMongoError as e:
            raise self._store_failure(f"fetch {self.policy.plural}", e)

    async def get(self, document_id: str) -> Dict[str, Any]:
        oid = self._object_id(document_id)
        try:
            document = await self._collection().find_by_id(oid)
        except PyMongoError as e:
            raise self._store_failure(f"fetch {self.policy.name}", e)
        if document is None:
            raise DocumentNotFoundError(self.policy.name, document_id)
        return document

    async def create(self, payload: Mapping[str, Any]) -> ObjectId:
        self._check_required(payload)

        document: Dict[str, Any] = {name: payload[name] for name in self.policy.required}
        for name, default in self.policy.optional_defaults.items():
            value = payload.get(name)
            document[name] = default if is_missing(value) else value
        for name in self.policy.reference_fields:
            document[name] = payload.get(name)

        self._apply_references(document)
        self._apply_numbers(document)
        self._check_encodable(document)

        if self.policy.timestamps:
            now = get_current_timestamp()
            document["createdAt"] = now
            document["updatedAt"] = now

        try:
            inserted_id = await self._collection().insert(document)
        except PyMongoError as e:
            raise self._store_failure(f"create {self.policy.name}", e)

        logger.info(f"Created {self.policy.name} {inserted_id}")
        return inserted_id

    async def update(self, document_id: str, payload: Mapping[str, Any]) -> None:
        oid = self._object_id(document_id)

        patch = strip_fields(payload, self.policy.immutable_fields)
        if not patch:
            raise EmptyUpdateError()
        self._check_keys(patch)

        self._apply_references(patch)
        self._apply_numbers(patch)
        self._check_encodable(patch)

        if self.policy.timestamps:
            patch["updatedAt"] = get_current_timestamp()

        try:
            outcome = await self._collection().update_by_id(oid, patch)
        except PyMongoError as e:
            raise self._store_failure(f"update {self.policy.name}", e)

        if outcome.matched == 0:
            raise DocumentNotFoundError(self.policy.name, document_id)
        logger.info(
            f"Updated {self.policy.name} {document_id} fields={sorted(patch)} modified={outcome.modified}"
        )

    async def delete(self, document_id: str) -> None:
        oid = self._object_id(document_id)
        try:
            outcome = await self._collection().delete_by_id(oid)
        except PyMongoError as e:
            raise self._store_failure(f"delete {self.policy.name}", e)

        if outcome.deleted == 0:
            raise DocumentNotFoundError(self.policy.name, document_id)
        logger.info(f"Deleted {self.policy.name} {document_id}")
