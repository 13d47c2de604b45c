import typing as t

from pydantic import AliasChoices, Field

from local_docstore.types.data import DataModel


Fields = t.Dict[str, t.Any]


class Document(DataModel):
    """A schemaless record of ``fields``, scoped under a ``type``, and addressed by a ``guid``."""

    guid: str
    type: str
    fields: Fields


class BulkCreateResult(DataModel):
    """
    What a create call returns when it created more than one document. The individual guids are deliberately not
    included, matching what the hosted service returns for bulk inserts.
    """

    status: str = "OK"
    count: int


class ListResult(DataModel):
    count: int
    list: t.List[Document]


class Request(DataModel):
    """
    A single call against the action API. ``act`` selects the operation (``action`` is accepted as an alias).
    ``fields`` is a single mapping, or for creates, optionally a list of mappings.
    """

    act: t.Optional[str] = Field(None, validation_alias=AliasChoices("act", "action"))
    type: t.Optional[str] = None
    guid: t.Optional[str] = None
    fields: t.Optional[t.Union[Fields, t.List[Fields]]] = None


class Response(DataModel):
    """
    The two-channel result of a dispatched request. On failure only ``error`` is set. On success ``error`` is
    ``None`` and ``result`` holds a :class:`Document`, a summary object, or ``None`` for an empty result.
    """

    error: t.Optional[str] = None
    result: t.Any = None

    @property
    def ok(self) -> bool:
        return self.error is None
