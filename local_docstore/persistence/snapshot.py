import json
import os
import threading
import typing as t

from loguru import logger
from pydantic import ValidationError

from local_docstore import config
from local_docstore.persistence.document_store.memory import InMemoryDocumentStore


class SnapshotGateway:
    """
    Moves the whole content of an :class:`InMemoryDocumentStore` to and from a single JSON snapshot file. The
    gateway works at process boundaries only: :meth:`load_async` hydrates the store once at start up, and
    :meth:`flush` writes it out at shutdown.

    Failures are never fatal. A missing, unreadable, or malformed snapshot leaves the store empty, and a failed
    write is logged and otherwise ignored.

    Parameters
    ----------
    store : InMemoryDocumentStore
        The store to hydrate and flush.
    path : str, optional
        The snapshot file. Defaults to :func:`local_docstore.config.snapshot_path`.
    """

    def __init__(self, store: InMemoryDocumentStore, path: t.Optional[str] = None):
        self.store = store
        self.path = path if path is not None else config.snapshot_path()
        self.ready = threading.Event()
        self._loader: t.Optional[threading.Thread] = None

    def load(self) -> bool:
        """
        Loads the snapshot into the store, returning whether one was loaded. :attr:`ready` is set once the attempt
        is over, whether or not it succeeded.
        """
        try:
            with open(self.path) as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.info("no serialized data to load into db at {}", self.path)
            return False
        except (OSError, ValueError):
            logger.exception("could not read serialized data at {}, starting with an empty db", self.path)
            return False
        else:
            return self._hydrate(data)
        finally:
            self.ready.set()

    def _hydrate(self, data: t.Any) -> bool:
        if not isinstance(data, dict) or not all(isinstance(collection, dict) for collection in data.values()):
            logger.error("serialized data at {} is not a mapping of types to documents, ignoring it", self.path)
            return False
        try:
            self.store.hydrate(data)
        except ValidationError:
            logger.exception("serialized data at {} holds a malformed document, ignoring it", self.path)
            return False
        logger.info("loaded {} documents of {} types into db from {}", len(self.store), len(data), self.path)
        return True

    def load_async(self) -> threading.Thread:
        """Starts :meth:`load` on a background thread. Wait on :attr:`ready` before using the store."""
        if self._loader is None:
            self._loader = threading.Thread(target=self.load, name="snapshot-loader", daemon=True)
            self._loader.start()
        return self._loader

    def wait_until_ready(self, timeout: t.Optional[float] = None) -> bool:
        return self.ready.wait(timeout)

    def flush(self) -> bool:
        """
        Serializes the whole store to the snapshot file, overwriting what was there. Kept completely synchronous
        since it is primarily used while the process is exiting. Returns whether the write succeeded.
        """
        tmp_path = self.path + ".tmp"
        try:
            data = json.dumps(self.store.export())
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            # The snapshot is only ever replaced by a completely written file.
            with open(tmp_path, "w") as f:
                f.write(data)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError, RecursionError):
            logger.exception("persisting db to {} failed", self.path)
            self._discard(tmp_path)
            return False
        logger.info("persisted {} documents to {}", len(self.store), self.path)
        return True

    @staticmethod
    def _discard(path: str):
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError:
            logger.exception("could not remove leftover file {}", path)
