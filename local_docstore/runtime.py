import atexit
import threading
import typing as t

from loguru import logger

from local_docstore.dispatcher import ActionDispatcher
from local_docstore.persistence.document_store.memory import InMemoryDocumentStore
from local_docstore.persistence.snapshot import SnapshotGateway
from local_docstore.types.document import Request, Response


class LocalDocStore:
    """
    Owns the one document store of a local development process, along with the gateway that persists it and the
    dispatcher that serves requests against it.

    On construction the snapshot starts loading in the background; requests made before it finishes wait for it.
    :meth:`shutdown` flushes the store back to the snapshot. Call :meth:`register_exit_flush` to have that happen
    automatically when the interpreter exits, or use the instance as a context manager.

    Parameters
    ----------
    path : str, optional
        The snapshot file. Defaults to :func:`local_docstore.config.snapshot_path`.
    persist : bool, optional
        If ``False``, no snapshot is loaded or written and the store lives purely in memory.
    read_only : bool, optional
        Forwarded to :class:`InMemoryDocumentStore`.
    """

    def __init__(self, path: t.Optional[str] = None, *, persist=True, read_only=False):
        self.store = InMemoryDocumentStore(read_only=read_only)
        self.persist = persist
        if persist:
            self.gateway: t.Optional[SnapshotGateway] = SnapshotGateway(self.store, path)
            self.gateway.load_async()
            ready = self.gateway.ready
        else:
            self.gateway = None
            ready = threading.Event()
            ready.set()
        self.dispatcher = ActionDispatcher(self.store, ready)
        self._closed = False
        self._close_lock = threading.Lock()

    def __call__(self, request: t.Union[Request, t.Mapping[str, t.Any]]) -> Response:
        return self.dispatcher(request)

    def dispatch(self, request: t.Union[Request, t.Mapping[str, t.Any]]) -> t.Any:
        return self.dispatcher.dispatch(request)

    def shutdown(self):
        """Flushes the store to its snapshot. Only the first call does anything."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        if self.gateway is not None:
            # Never overwrite a snapshot that is still being read.
            self.gateway.wait_until_ready()
            self.gateway.flush()
        logger.debug("local document store shut down")

    def register_exit_flush(self):
        atexit.register(self.shutdown)

    def __enter__(self) -> "LocalDocStore":
        return self

    def __exit__(self, *exc_info):
        self.shutdown()
