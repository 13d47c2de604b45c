"""
A local, in-process stand-in for a cloud document store. Documents are schemaless mappings of fields, grouped
by a type name and addressed by a 24 character hex GUID. State can be snapshotted to disk so it survives
restarts of the local development process.
"""
from local_docstore.dispatcher import ActionDispatcher
from local_docstore.runtime import LocalDocStore
from local_docstore.types.document import Document, Request, Response


__all__ = ["ActionDispatcher", "Document", "LocalDocStore", "Request", "Response"]
