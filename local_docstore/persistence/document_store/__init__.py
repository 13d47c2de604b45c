"""
Contains the document store: a base class describing the create, read, update, list, and delete behavior the
action API exposes, and an in-memory implementation of it whose whole content can be exported to, and hydrated
from, a snapshot.
"""
