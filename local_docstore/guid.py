import random
import threading
import typing as t


GUID_GROUPS = 6
GUID_LENGTH = 4 * GUID_GROUPS


class GuidGenerator:
    """
    Mints 24 character lowercase hex GUIDs, made of six 4 character groups. Every GUID this generator has issued,
    or has been told about through :meth:`register`, is remembered, and a freshly rolled GUID that collides with
    one of them is rolled again. GUIDs are never forgotten, so a deleted document's GUID is not handed out twice.

    Parameters
    ----------
    rng : random.Random, optional
        The source of randomness. Defaults to a :class:`random.SystemRandom`.
    """

    def __init__(self, rng: t.Optional[random.Random] = None):
        self._rng = rng if rng is not None else random.SystemRandom()
        self._issued: t.Set[str] = set()
        self._lock = threading.Lock()

    def _group(self) -> str:
        # Sampling from [0x10000, 0x20000) and dropping the leading "1" always leaves exactly 4 hex digits.
        return format(self._rng.randrange(0x10000, 0x20000), "x")[1:]

    def _roll(self) -> str:
        return "".join(self._group() for _ in range(GUID_GROUPS))

    def mint(self) -> str:
        """Returns a GUID that has never been issued or registered with this generator before."""
        with self._lock:
            guid = self._roll()
            while guid in self._issued:
                guid = self._roll()
            self._issued.add(guid)
            return guid

    def register(self, guid: str):
        """Marks ``guid`` as taken, e.g. because it was loaded from a snapshot."""
        with self._lock:
            self._issued.add(guid)

    def __contains__(self, guid: str) -> bool:
        return guid in self._issued

    def __len__(self) -> int:
        return len(self._issued)
