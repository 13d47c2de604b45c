"""
Environment-driven settings. Values are read when they are asked for, not at import time, so tests and callers
can change the environment (or the working directory) before building a store.
"""
import os


DEFAULT_DIR = ".fhc_local"
SNAPSHOT_FILENAME = "db.json"
DEFAULT_CACHE_EXPIRE = 86400.0  # seconds


def snapshot_path() -> str:
    """
    The file the document store is snapshotted to. ``LOCAL_DOCSTORE_SNAPSHOT`` overrides the full path. Otherwise
    the file lives in the ``LOCAL_DOCSTORE_DIR`` directory (``.fhc_local`` by default) under the current working
    directory.
    """
    override = os.getenv("LOCAL_DOCSTORE_SNAPSHOT")
    if override:
        return os.path.abspath(override)
    return os.path.join(os.getcwd(), os.getenv("LOCAL_DOCSTORE_DIR", DEFAULT_DIR), SNAPSHOT_FILENAME)


def cache_expire() -> float:
    """How long cache entries live when saved without an expiry, from ``LOCAL_DOCSTORE_CACHE_EXPIRE``."""
    value = os.getenv("LOCAL_DOCSTORE_CACHE_EXPIRE")
    if value is None:
        return DEFAULT_CACHE_EXPIRE
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"LOCAL_DOCSTORE_CACHE_EXPIRE must be a number of seconds, got {value!r}")
