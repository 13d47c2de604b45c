import json
import os
import tempfile
from datetime import datetime
from unittest import TestCase, mock

from local_docstore.persistence.document_store.memory import InMemoryDocumentStore
from local_docstore.persistence.snapshot import SnapshotGateway


class FullDiskFile:
    """Writes a little of the data, then fails like a full disk would."""

    def __init__(self, f):
        self._f = f

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self._f.close()

    def write(self, data):
        self._f.write(data[:10])
        raise OSError("disk full")


class TestSnapshotGateway(TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, ".fhc_local", "db.json")

    def tearDown(self):
        self.tmp.cleanup()

    def _write(self, content: str):
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        with open(self.path, "w") as f:
            f.write(content)

    def test_round_trip(self):
        store = InMemoryDocumentStore()
        single = store.create("person", {"firstName": "John", "tags": ["a", "b"], "age": 27})
        store.create("person", [{"firstName": "Bob"}, {"firstName": "Jane"}])
        store.create("pet", {"name": "Rex", "nested": {"deep": [1, 2.5, None, True]}})
        store.create("empty", {"x": 1})
        store.delete("empty", store.list("empty").list[0].guid)

        # The parent directory does not exist yet; flushing should create it.
        self.assertTrue(SnapshotGateway(store, self.path).flush())
        self.assertTrue(os.path.isfile(self.path))

        fresh = InMemoryDocumentStore()
        gateway = SnapshotGateway(fresh, self.path)
        self.assertTrue(gateway.load())
        self.assertTrue(gateway.ready.is_set())
        self.assertEqual(fresh.read("person", single.guid), single)
        for type_ in ["person", "pet", "empty"]:
            before = sorted(store.list(type_).list, key=lambda doc: doc.guid)
            after = sorted(fresh.list(type_).list, key=lambda doc: doc.guid)
            self.assertEqual(before, after)
        self.assertEqual(fresh.list("empty").count, 0)  # empty types are kept too

    def test_snapshot_format(self):
        store = InMemoryDocumentStore()
        doc = store.create("person", {"firstName": "John"})
        SnapshotGateway(store, self.path).flush()
        with open(self.path) as f:
            data = json.load(f)
        expected = {"guid": doc.guid, "type": "person", "fields": {"firstName": "John"}}
        self.assertEqual(data, {"person": {doc.guid: expected}})

    def test_flush_overwrites(self):
        store = InMemoryDocumentStore()
        gateway = SnapshotGateway(store, self.path)
        doc = store.create("person", {"firstName": "John"})
        gateway.flush()
        store.delete("person", doc.guid)
        gateway.flush()
        fresh = InMemoryDocumentStore()
        SnapshotGateway(fresh, self.path).load()
        self.assertEqual(fresh.list("person").count, 0)

    def test_flush_encodes_non_json_values(self):
        store = InMemoryDocumentStore()
        doc = store.create("event", {"at": datetime(2020, 1, 2, 3, 4, 5)})
        self.assertTrue(SnapshotGateway(store, self.path).flush())
        fresh = InMemoryDocumentStore()
        SnapshotGateway(fresh, self.path).load()
        self.assertEqual(fresh.read("event", doc.guid).fields, {"at": "2020-01-02T03:04:05"})

    def test_missing_snapshot(self):
        store = InMemoryDocumentStore()
        gateway = SnapshotGateway(store, self.path)
        self.assertFalse(gateway.load())
        self.assertTrue(gateway.ready.is_set())  # ready even though nothing was loaded
        self.assertEqual(len(store), 0)

    def test_malformed_snapshot(self):
        for content in ["{not json", "[1, 2, 3]", '{"person": 5}', '{"person": {"abc": {"guid": "abc"}}}']:
            store = InMemoryDocumentStore()
            self._write(content)
            gateway = SnapshotGateway(store, self.path)
            self.assertFalse(gateway.load())
            self.assertTrue(gateway.ready.is_set())
            self.assertEqual(store.types(), [])

    def test_load_async(self):
        store = InMemoryDocumentStore()
        doc = store.create("person", {"firstName": "John"})
        SnapshotGateway(store, self.path).flush()

        fresh = InMemoryDocumentStore()
        gateway = SnapshotGateway(fresh, self.path)
        gateway.load_async()
        self.assertTrue(gateway.wait_until_ready(timeout=5))
        self.assertEqual(fresh.read("person", doc.guid), doc)

    def test_flush_failure_is_swallowed(self):
        store = InMemoryDocumentStore()
        store.create("person", {"firstName": "John"})
        # A directory where the file should be makes the write fail.
        os.makedirs(self.path)
        self.assertFalse(SnapshotGateway(store, self.path).flush())

    def test_failed_write_keeps_previous_snapshot(self):
        store = InMemoryDocumentStore()
        gateway = SnapshotGateway(store, self.path)
        doc = store.create("person", {"firstName": "John"})
        self.assertTrue(gateway.flush())

        store.create("person", {"firstName": "Bob"})

        def full_disk_open(path, mode="r", *args, **kwargs):
            f = open(path, mode, *args, **kwargs)
            return FullDiskFile(f) if "w" in mode else f

        with mock.patch("local_docstore.persistence.snapshot.open", new=full_disk_open, create=True):
            self.assertFalse(gateway.flush())
        self.assertFalse(os.path.exists(self.path + ".tmp"))  # the partial file was cleaned up

        # The last good snapshot still loads, untouched.
        fresh = InMemoryDocumentStore()
        self.assertTrue(SnapshotGateway(fresh, self.path).load())
        self.assertEqual(fresh.list("person").count, 1)
        self.assertEqual(fresh.read("person", doc.guid), doc)

    def test_unserializable_fields_are_swallowed(self):
        store = InMemoryDocumentStore()
        gateway = SnapshotGateway(store, self.path)
        doc = store.create("person", {"firstName": "John"})
        gateway.flush()

        looped = {"a": 1}
        looped["self"] = looped
        store.create("loop", looped)
        self.assertFalse(gateway.flush())

        fresh = InMemoryDocumentStore()
        SnapshotGateway(fresh, self.path).load()
        self.assertEqual(fresh.read("person", doc.guid), doc)
