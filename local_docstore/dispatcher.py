import threading
import typing as t
from enum import Enum

from loguru import logger
from pydantic import ValidationError

from local_docstore.errors import DocStoreError, InvalidRequest, UnknownAction
from local_docstore.persistence.document_store.base import BaseDocumentStore
from local_docstore.types.document import Request, Response


class Action(Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    LIST = "list"
    DELETE = "delete"


class ActionDispatcher:
    """
    The entry point of the action API. Takes a request, checks its ``act`` selector, and routes the rest of the
    request to the matching document store operation.

    Example usage:

    >>> store = InMemoryDocumentStore()
    ... db = ActionDispatcher(store)
    ... res = db({"act": "create", "type": "fruit", "fields": {"name": "apple"}})
    ... db({"act": "read", "type": "fruit", "guid": res.result.guid})

    Parameters
    ----------
    store : BaseDocumentStore
        The store requests are routed to.
    ready : threading.Event, optional
        If provided, every request blocks until this event is set. Used to hold requests back until the store has
        been hydrated from its snapshot.
    """

    def __init__(self, store: BaseDocumentStore, ready: t.Optional[threading.Event] = None):
        self.store = store
        self._ready = ready
        self._routes: t.Dict[Action, t.Callable[[Request], t.Any]] = {
            Action.CREATE: lambda req: store.create(req.type, req.fields),
            Action.READ: lambda req: store.read(req.type, req.guid),
            Action.UPDATE: lambda req: store.update(req.type, req.guid, req.fields),
            Action.LIST: lambda req: store.list(req.type),
            Action.DELETE: lambda req: store.delete(req.type, req.guid),
        }

    def dispatch(self, request: t.Union[Request, t.Mapping[str, t.Any]]) -> t.Any:
        """
        Runs ``request`` against the store and returns its result. Raises a
        :class:`~local_docstore.errors.DocStoreError` subclass when the request fails.
        """
        request = self.parse(request)
        try:
            action = Action(request.act)
        except ValueError:
            raise UnknownAction(request.act)
        if self._ready is not None:
            self._ready.wait()
        return self._routes[action](request)

    def __call__(self, request: t.Union[Request, t.Mapping[str, t.Any]]) -> Response:
        """Like :meth:`dispatch`, but reports failures through the ``error`` channel of the returned response."""
        try:
            return Response(result=self.dispatch(request))
        except DocStoreError as exc:
            logger.debug("request failed with {}: {}", type(exc).__name__, exc)
            return Response(error=str(exc))

    @staticmethod
    def parse(request: t.Union[Request, t.Mapping[str, t.Any]]) -> Request:
        if isinstance(request, Request):
            return request
        try:
            return Request.model_validate(request)
        except ValidationError as exc:
            raise InvalidRequest(f"malformed request: {exc}")
