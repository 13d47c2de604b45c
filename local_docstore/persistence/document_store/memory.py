import copy
import threading
import typing as t
from collections.abc import Mapping

from loguru import logger
from pydantic import ValidationError

from local_docstore.errors import InvalidRequest, NotFound, UnknownType
from local_docstore.guid import GuidGenerator
from local_docstore.persistence.document_store.base import BaseDocumentStore
from local_docstore.types.document import BulkCreateResult, Document, Fields, ListResult


Snapshot = t.Dict[str, t.Dict[str, t.Dict[str, t.Any]]]


class InMemoryDocumentStore(BaseDocumentStore):
    r"""
    An in-memory document store, mimicking a single hosted database instance. Does not keep any indexes beyond the
    type buckets, so listing a type is :math:`\mathcal{O}(n)` in the size of that type.

    Every operation holds one re-entrant lock for its whole check-then-mutate sequence, so a store can be shared
    between threads. In particular, minting a document's guid and inserting the document happen atomically.

    Parameters
    ----------
    read_only : bool, optional
        If ``True``, create, update, and delete calls raise :class:`~local_docstore.errors.ReadOnlyError`.
        :meth:`hydrate` is still allowed, so a read only store can be used to inspect a snapshot.
    guids : GuidGenerator, optional
        The generator new documents get their guids from.
    """

    def __init__(self, *, read_only=False, guids: t.Optional[GuidGenerator] = None):
        super().__init__(read_only)
        # Documents in the db can be resolved via `self._db[type_][guid]`.
        self._db: t.Dict[str, t.Dict[str, Document]] = {}
        self.guids = guids if guids is not None else GuidGenerator()
        self._lock = threading.RLock()

    def create(
        self, type_: str, fields: t.Union[Fields, t.List[Fields]]
    ) -> t.Union[Document, BulkCreateResult]:
        self.assert_can_edit()
        self.require(type=type_, fields=fields)
        # A single object is treated as a one element list, to simplify processing.
        batch = [fields] if isinstance(fields, Mapping) else list(fields)
        for item in batch:
            if not isinstance(item, Mapping):
                raise InvalidRequest(f"cannot create a document from a {type(item).__name__}; fields must be a mapping")

        with self._lock:
            docs = [self._build(self.guids.mint(), type_, item) for item in batch]
            collection = self._db.setdefault(type_, {})
            for doc in docs:
                collection[doc.guid] = doc

        if len(docs) == 1:
            return docs[0].model_copy(deep=True)
        return BulkCreateResult(status="OK", count=len(batch))

    def read(self, type_: str, guid: str) -> t.Optional[Document]:
        self.require(type=type_, guid=guid)
        with self._lock:
            collection = self._db.get(type_)
            if collection is None:
                raise UnknownType(type_)
            doc = collection.get(guid)
            return doc.model_copy(deep=True) if doc is not None else None

    def update(self, type_: str, guid: str, fields: Fields) -> Document:
        self.assert_can_edit()
        self.require(type=type_, guid=guid, fields=fields)
        if not isinstance(fields, Mapping):
            raise InvalidRequest("update takes a single mapping of fields")
        with self._lock:
            doc = self._db.get(type_, {}).get(guid)
            if doc is None:
                raise NotFound(type_, guid)
            # A complete replacement: keys missing from `fields` are dropped.
            doc = self._build(guid, doc.type, fields)
            self._db[type_][guid] = doc
            return doc.model_copy(deep=True)

    def delete(self, type_: str, guid: str) -> t.Optional[Document]:
        self.assert_can_edit()
        self.require(type=type_, guid=guid)
        with self._lock:
            collection = self._db.get(type_)
            if collection is None:
                return None
            return collection.pop(guid, None)

    def list(self, type_: str) -> ListResult:
        self.require(type=type_)
        with self._lock:
            collection = self._db.get(type_)
            if collection is None:
                raise UnknownType(type_)
            docs = [doc.model_copy(deep=True) for doc in collection.values()]
        return ListResult(count=len(docs), list=docs)

    def types(self) -> t.List[str]:
        """The names of every type that has been created, including ones that are now empty."""
        with self._lock:
            return [type_ for type_ in self._db]

    def __len__(self) -> int:
        with self._lock:
            return sum(len(collection) for collection in self._db.values())

    def export(self) -> Snapshot:
        """
        Returns the whole content of the store as JSON-compatible primitives, keyed by type and then by guid. This
        is the structure a snapshot file holds.
        """
        with self._lock:
            return {
                type_: {guid: doc.to_dict() for guid, doc in collection.items()}
                for type_, collection in self._db.items()
            }

    def hydrate(self, data: t.Mapping[str, t.Mapping[str, t.Any]]):
        """
        Replaces the whole content of the store with ``data``, a structure produced by :meth:`export`. Every loaded
        guid is registered with the guid generator so it will never be minted again. Raises a pydantic
        ``ValidationError`` and leaves the store untouched if ``data`` holds a malformed document.
        """
        db: t.Dict[str, t.Dict[str, Document]] = {}
        for type_, collection in data.items():
            db[type_] = {}
            for key, raw in collection.items():
                doc = Document.model_validate(raw)
                if doc.guid != key:
                    logger.warning("snapshot holds document {} under key {}, keeping its own guid", doc.guid, key)
                db[type_][doc.guid] = doc

        with self._lock:
            self._db = db
            for collection in db.values():
                for guid in collection:
                    self.guids.register(guid)

    @staticmethod
    def _build(guid: str, type_: str, fields: t.Mapping[str, t.Any]) -> Document:
        """Validates ``fields`` into a new document that shares no state with the caller's mapping."""
        try:
            return Document.model_validate({"guid": guid, "type": type_, "fields": copy.deepcopy(dict(fields))})
        except ValidationError as exc:
            raise InvalidRequest(f"invalid document fields: {exc}")
