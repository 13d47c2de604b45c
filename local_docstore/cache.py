"""
A local, in-memory stand-in for the hosted key-value cache. It has nothing to do with the document store: it is
never persisted, and its content lasts for the life of the process at most.
"""
import threading
import time
import typing as t

from pydantic import ValidationError

from local_docstore import config
from local_docstore.errors import DocStoreError, InvalidRequest, MissingArgument, UnknownAction
from local_docstore.types.data import DataModel
from local_docstore.types.document import Response


MIN_EXPIRE = 1.0  # seconds


class CacheRequest(DataModel):
    act: t.Optional[str] = None
    key: t.Optional[str] = None
    value: t.Any = None
    expire: t.Optional[float] = None  # seconds


class ExpiringCache:
    """
    Saves, loads, and removes string values by key. Every value expires, after the ``expire`` seconds it was saved
    with, or after a default lifetime when ``expire`` is missing or under a second. Expired entries are evicted
    lazily, the next time the cache is touched.

    Parameters
    ----------
    default_expire : float, optional
        The default lifetime in seconds. Defaults to :func:`local_docstore.config.cache_expire`.
    clock : callable, optional
        Returns the current time in seconds. Defaults to :func:`time.monotonic`.
    """

    def __init__(self, default_expire: t.Optional[float] = None, clock: t.Callable[[], float] = time.monotonic):
        self.default_expire = default_expire if default_expire is not None else config.cache_expire()
        self._clock = clock
        # Entries are `key -> (value, expires_at)`.
        self._entries: t.Dict[str, t.Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def save(self, key: str, value: t.Any, expire: t.Optional[float] = None) -> str:
        """Saves the string form of ``value`` under ``key``. Always returns ``"OK"``."""
        if key is None:
            raise MissingArgument("key")
        lifetime = expire if expire is not None and expire >= MIN_EXPIRE else self.default_expire
        with self._lock:
            self._entries[key] = (str(value), self._clock() + lifetime)
        return "OK"

    def load(self, key: str) -> t.Optional[str]:
        """Returns the value saved under ``key``, or ``None`` if there is none."""
        with self._lock:
            self._evict()
            entry = self._entries.get(key)
        return entry[0] if entry is not None else None

    def remove(self, key: str) -> int:
        """Returns ``1`` if a value was removed, or ``0`` if ``key`` held nothing."""
        with self._lock:
            self._evict()
            return 1 if self._entries.pop(key, None) is not None else 0

    def _evict(self):
        now = self._clock()
        for key in [key for key, (_, expires_at) in self._entries.items() if expires_at <= now]:
            del self._entries[key]

    def __len__(self) -> int:
        with self._lock:
            self._evict()
            return len(self._entries)

    def dispatch(self, request: t.Union[CacheRequest, t.Mapping[str, t.Any]]) -> t.Any:
        if not isinstance(request, CacheRequest):
            try:
                request = CacheRequest.model_validate(request)
            except ValidationError as exc:
                raise InvalidRequest(f"malformed cache request: {exc}")
        if request.act is None:
            raise MissingArgument("act")
        if request.act == "save":
            return self.save(request.key, request.value, request.expire)
        if request.act == "load":
            return self.load(request.key)
        if request.act == "remove":
            return self.remove(request.key)
        raise UnknownAction(request.act)

    def __call__(self, request: t.Union[CacheRequest, t.Mapping[str, t.Any]]) -> Response:
        try:
            return Response(result=self.dispatch(request))
        except DocStoreError as exc:
            return Response(error=str(exc))
