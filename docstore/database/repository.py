"""
MongoRepository Generic Class

Common CRUD and query operations for any Document subclass, backed by
one collection of a MongoContext.

Methods (all coroutines):
- add(entity) / add_range(entities): Insert, assigning ids when unset
- delete(id | filter): Remove one document by id, or every match
- update(entity, id): Replace the stored document if it exists
- select(id): Find by id, None when missing
- list(filter): Restartable async query over matches
- count(filter) / any(filter): Aggregate checks
- first_or_default(filter) / single_or_default(filter): Single lookups

Policies:
- Missing ids are never an error: delete and update are no-ops that
  report False (update raises DocstoreNotFoundError only with must_exist=True)
- single_or_default raises DocstoreMultipleResultsError on two or more matches
- Driver errors are translated to the Docstore* hierarchy and never retried

Subclasses set document_model and may add entity-specific queries.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any, ClassVar, Generic, TypeVar

from bson import ObjectId
from bson.errors import InvalidBSON, InvalidDocument, InvalidId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import ConnectionFailure

from .context import MongoContext
from .document import Document
from .exceptions import (
    DocstoreConnectionError,
    DocstoreMultipleResultsError,
    DocstoreNotFoundError,
    DocstoreSerializationError,
)
from .filters import Filter, FilterLike, to_query

logger = logging.getLogger(__name__)

TDocument = TypeVar("TDocument", bound=Document)

DocumentId = ObjectId | str
SortSpec = Sequence[tuple[str, int]]


class MongoRepository(Generic[TDocument]):
    """Generic repository bound to one collection."""

    document_model: ClassVar[type[Document] | None] = None

    def __init__(
        self,
        context: MongoContext,
        model: type[TDocument] | None = None,
        collection_name: str | None = None,
    ):
        model = model or self.document_model  # type: ignore[assignment]
        if not (isinstance(model, type) and issubclass(model, Document)):
            raise TypeError(
                f"{type(self).__name__} needs a Document subclass as its model, "
                f"got {model!r}"
            )

        self.context = context
        self.model: type[TDocument] = model  # type: ignore[assignment]
        self.collection_name = collection_name or model.get_collection_name()
        self.collection: AsyncIOMotorCollection = context.get_collection(
            self.collection_name
        )

    # ------------------------------------------------------------------
    # Translation helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _driver_errors(self) -> Iterator[None]:
        try:
            yield
        except ConnectionFailure as e:
            raise DocstoreConnectionError(
                f"Lost connection while accessing {self.collection_name}: {e}",
                collection=self.collection_name,
            ) from e
        except (InvalidDocument, InvalidBSON) as e:
            raise DocstoreSerializationError(
                f"Cannot encode document for {self.collection_name}: {e}",
                collection=self.collection_name,
            ) from e

    def _coerce_id(self, id: DocumentId) -> ObjectId:
        if isinstance(id, ObjectId):
            return id
        try:
            return ObjectId(id)
        except (InvalidId, TypeError) as e:
            raise DocstoreSerializationError(
                f"Invalid document id {id!r}: {e}", collection=self.collection_name
            ) from e

    def _resolve(self, name: str, value: Any) -> tuple[str, Any]:
        """Map a model field name to its stored name, coercing id values."""
        head, _, tail = name.partition(".")
        model_field = self.model.model_fields.get(head)
        if model_field is not None and model_field.alias:
            head = model_field.alias
        stored = f"{head}.{tail}" if tail else head
        if stored == "_id" and isinstance(value, str) and ObjectId.is_valid(value):
            value = ObjectId(value)
        return stored, value

    def _query(self, filter: FilterLike | None) -> dict[str, Any]:
        return to_query(filter, self._resolve)

    def _sort(self, sort: SortSpec | None) -> list[tuple[str, int]] | None:
        if not sort:
            return None
        return [(self._resolve(name, None)[0], direction) for name, direction in sort]

    def _encode(self, entity: TDocument) -> dict[str, Any]:
        if not isinstance(entity, self.model):
            raise TypeError(
                f"{type(self).__name__} stores {self.model.__name__}, "
                f"got {type(entity).__name__}"
            )
        return entity.to_mongo()

    def _decode(self, raw: Mapping[str, Any]) -> TDocument:
        return self.model.from_mongo(raw)  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def add(self, entity: TDocument) -> ObjectId:
        document = self._encode(entity)
        entity_id = document["_id"] = entity.ensure_id()
        with self._driver_errors():
            await self.collection.insert_one(document)
        logger.debug(f"Inserted {entity_id} into {self.collection_name}")
        return entity_id

    async def add_range(self, entities: Iterable[TDocument]) -> list[ObjectId]:
        entities = list(entities)
        if not entities:
            return []

        documents = [self._encode(entity) for entity in entities]
        ids = [entity.ensure_id() for entity in entities]
        for document, entity_id in zip(documents, ids):
            document["_id"] = entity_id
        with self._driver_errors():
            await self.collection.insert_many(documents, ordered=False)
        logger.debug(f"Inserted {len(ids)} documents into {self.collection_name}")
        return ids

    async def delete(self, target: DocumentId | FilterLike) -> bool | int:
        """
        Delete by id or by filter.

        Returns:
            For an id: True if a document was removed.
            For a filter: the number of documents removed.
        """
        if isinstance(target, (Filter, Mapping)):
            with self._driver_errors():
                result = await self.collection.delete_many(self._query(target))
            logger.debug(
                f"Deleted {result.deleted_count} documents from {self.collection_name}"
            )
            return result.deleted_count

        with self._driver_errors():
            result = await self.collection.delete_one({"_id": self._coerce_id(target)})
        return result.deleted_count == 1

    async def update(
        self,
        entity: TDocument,
        id: DocumentId,
        must_exist: bool = False,
    ) -> bool:
        """
        Replace the document stored under ``id`` with ``entity``.

        The entity's id is set to ``id``. Nothing is inserted when no
        document matches.

        Returns:
            True if a document was replaced.

        Raises:
            DocstoreNotFoundError: no match and must_exist is set
        """
        object_id = self._coerce_id(id)
        document = self._encode(entity)
        entity.id = document["_id"] = object_id
        with self._driver_errors():
            result = await self.collection.replace_one({"_id": object_id}, document)

        if result.matched_count == 0:
            if must_exist:
                raise DocstoreNotFoundError(
                    f"No document {object_id} in {self.collection_name}",
                    collection=self.collection_name,
                )
            return False
        logger.debug(f"Replaced {object_id} in {self.collection_name}")
        return True

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def select(self, id: DocumentId) -> TDocument | None:
        with self._driver_errors():
            raw = await self.collection.find_one({"_id": self._coerce_id(id)})
        return self._decode(raw) if raw is not None else None

    def list(
        self,
        filter: FilterLike | None = None,
        sort: SortSpec | None = None,
        skip: int = 0,
        limit: int = 0,
    ) -> DocumentQuery[TDocument]:
        """Return a lazy query; nothing is sent until it is iterated."""
        return DocumentQuery(self, self._query(filter), self._sort(sort), skip, limit)

    async def count(self, filter: FilterLike | None = None) -> int:
        with self._driver_errors():
            return await self.collection.count_documents(self._query(filter))

    async def any(self, filter: FilterLike | None = None) -> bool:
        with self._driver_errors():
            raw = await self.collection.find_one(
                self._query(filter), projection={"_id": 1}
            )
        return raw is not None

    async def first_or_default(
        self,
        filter: FilterLike | None = None,
        sort: SortSpec | None = None,
    ) -> TDocument | None:
        """First match in store order, or in ``sort`` order when given."""
        matches = await self.list(filter, sort=sort, limit=1).to_list()
        return matches[0] if matches else None

    async def single_or_default(self, filter: FilterLike | None = None) -> TDocument | None:
        matches = await self.list(filter, limit=2).to_list()
        if len(matches) > 1:
            raise DocstoreMultipleResultsError(
                f"Expected at most one document in {self.collection_name}, "
                f"found several for {self._query(filter)}",
                collection=self.collection_name,
            )
        return matches[0] if matches else None


class DocumentQuery(Generic[TDocument]):
    """
    Finite, restartable query over a collection.

    Each ``async for`` (or ``to_list``) runs the query again, so results
    reflect the collection at iteration time.
    """

    def __init__(
        self,
        repository: MongoRepository[TDocument],
        query: dict[str, Any],
        sort: list[tuple[str, int]] | None = None,
        skip: int = 0,
        limit: int = 0,
    ):
        self.repository = repository
        self.query = query
        self.sort = sort
        self.skip = skip
        self.limit = limit

    def _find_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {}
        if self.sort:
            options["sort"] = self.sort
        if self.skip:
            options["skip"] = self.skip
        if self.limit:
            options["limit"] = self.limit
        return options

    async def __aiter__(self) -> AsyncIterator[TDocument]:
        repository = self.repository
        with repository._driver_errors():
            cursor = repository.collection.find(self.query, **self._find_options())
            async for raw in cursor:
                yield repository._decode(raw)

    async def to_list(self) -> list[TDocument]:
        return [entity async for entity in self]
