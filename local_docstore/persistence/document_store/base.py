import typing as t
from abc import ABC, abstractmethod

from local_docstore.errors import MissingArgument, ReadOnlyError
from local_docstore.types.document import BulkCreateResult, Document, Fields, ListResult


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, t.Sized) and len(value) == 0)


class BaseDocumentStore(ABC):
    """
    Abstract base class for a type-partitioned store of schemaless documents.

    Parameters
    ----------
    read_only : bool
        Whether the store is read only. Inheriting classes must call the :meth:`assert_can_edit` method in each
        mutating method in order for read only checks to be enforced.
    """

    def __init__(self, read_only: bool):
        self._read_only = read_only

    @abstractmethod
    def create(
        self, type_: str, fields: t.Union[Fields, t.List[Fields]]
    ) -> t.Union[Document, BulkCreateResult]:
        """
        Creates one document per mapping in ``fields`` under ``type_``. Returns the new document when exactly one
        was created, otherwise a summary of how many were.
        """
        pass

    @abstractmethod
    def read(self, type_: str, guid: str) -> t.Optional[Document]:
        """Retrieves a document, returning ``None`` if ``type_`` exists but holds no document ``guid``."""
        pass

    @abstractmethod
    def update(self, type_: str, guid: str, fields: Fields) -> Document:
        """Replaces the fields of an existing document wholesale, and returns the updated document."""
        pass

    @abstractmethod
    def delete(self, type_: str, guid: str) -> t.Optional[Document]:
        """Deletes a document and returns it, or returns ``None`` if there was nothing to delete."""
        pass

    @abstractmethod
    def list(self, type_: str) -> ListResult:
        """Lists every document currently stored under ``type_``, in no particular order."""
        pass

    def assert_can_edit(self):
        """Raises a :class:`ReadOnlyError` if this document store is read only."""
        if self._read_only:
            raise ReadOnlyError()

    @staticmethod
    def require(**arguments):
        """Raises :class:`MissingArgument` naming every one of ``arguments`` that is ``None`` or empty."""
        missing = [name for name, value in arguments.items() if _is_blank(value)]
        if missing:
            raise MissingArgument(*missing)
