"""
Base document class for all stored entities.

Every entity kept in a collection carries:
- id: unique ObjectId, stored as ``_id``
- extra elements: fields not declared on the model, kept as-is so that
  schema-less documents survive a read-modify-write cycle
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, ClassVar

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import DocstoreSerializationError


class Document(BaseModel):
    """
    Base document class.

    Subclasses declare their schema as regular pydantic fields. The
    collection defaults to the class name; set ``collection_name`` to
    override it.
    """

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        arbitrary_types_allowed=True,
        validate_assignment=True,
    )

    collection_name: ClassVar[str | None] = None

    id: ObjectId | None = Field(default=None, alias="_id")

    @field_validator("id", mode="before")
    @classmethod
    def parse_id(cls, v: Any) -> ObjectId | None:
        if v is None or isinstance(v, ObjectId):
            return v
        if isinstance(v, str):
            try:
                return ObjectId(v)
            except InvalidId as e:
                raise ValueError(str(e)) from e
        raise ValueError(f"Cannot use {type(v).__name__} as a document id")

    @property
    def extra_elements(self) -> Mapping[str, Any]:
        """Fields present on the stored document but not declared on the model."""
        return MappingProxyType(self.model_extra or {})

    @classmethod
    def get_collection_name(cls) -> str:
        return cls.collection_name or cls.__name__

    def ensure_id(self) -> ObjectId:
        """Assign a new ObjectId if none is set and return the id."""
        if self.id is None:
            self.id = ObjectId()
        return self.id

    def to_mongo(self) -> dict[str, Any]:
        """Serialize declared fields (by stored name) plus extra elements."""
        declared = set(type(self).model_fields)
        data = self.model_dump(by_alias=True, include=declared)
        # an extra key may share a declared field's python name (a stored "id" next to "_id")
        data.update(self.model_extra or {})
        if self.id is None:
            data.pop("_id", None)
        return data

    @classmethod
    def from_mongo(cls, raw: Mapping[str, Any]) -> Document:
        try:
            return cls.model_validate(dict(raw))
        except ValidationError as e:
            raise DocstoreSerializationError(
                f"Cannot load {cls.__name__} from stored document: {e}",
                collection=cls.get_collection_name(),
            ) from e
