import json
import os
import tempfile
import unittest
from unittest.mock import patch

from todolist.models import Task
from todolist.storage import (
    FileStore,
    MemoryStore,
    PersistenceLoadFailure,
    PersistenceSaveFailure,
    deserialize_tasks,
    serialize_tasks,
)


TASKS = [
    Task(id=1700000000002, text="write report", completed=False, created_at=1700000000002),
    Task(id=1700000000001, text="buy milk", completed=True, created_at=1700000000001),
]


class TestSerializedFormat(unittest.TestCase):
    def test_records_carry_exactly_four_fields(self) -> None:
        raw = json.loads(serialize_tasks(TASKS))
        self.assertEqual(
            raw[0],
            {"id": 1700000000002, "text": "write report", "completed": False, "createdAt": 1700000000002},
        )
        self.assertEqual([r["text"] for r in raw], ["write report", "buy milk"])

    def test_round_trip_preserves_collection(self) -> None:
        self.assertEqual(deserialize_tasks(serialize_tasks(TASKS)), TASKS)

    def test_non_ascii_text_survives(self) -> None:
        tasks = [Task(id=1, text="우유 사기", created_at=1)]
        self.assertEqual(deserialize_tasks(serialize_tasks(tasks)), tasks)

    def test_extra_keys_are_ignored(self) -> None:
        data = '[{"id": 1, "text": "a", "completed": false, "createdAt": 1, "color": "red"}]'
        self.assertEqual(deserialize_tasks(data), [Task(id=1, text="a", created_at=1)])

    def test_malformed_inputs_raise_load_failure(self) -> None:
        cases = [
            "not json",
            '{"id": 1}',
            "[1, 2]",
            '[{"id": 1, "text": "a", "completed": false}]',
            "[" * 100000,
            '[{"id": "1", "text": "a", "completed": false, "createdAt": 1}]',
            '[{"id": true, "text": "a", "completed": false, "createdAt": 1}]',
            '[{"id": 1, "text": "a", "completed": "no", "createdAt": 1}]',
            '[{"id": 1, "text": "   ", "completed": false, "createdAt": 1}]',
            '[{"id": 1, "text": "a", "completed": false, "createdAt": 1},'
            ' {"id": 1, "text": "b", "completed": false, "createdAt": 2}]',
        ]
        for data in cases:
            with self.subTest(data=data):
                with self.assertRaises(PersistenceLoadFailure):
                    deserialize_tasks(data)


class TestFileStore(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = os.path.join(self._tmp.name, "data")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_missing_file_loads_none(self) -> None:
        self.assertIsNone(FileStore(self.dir).load())

    def test_save_creates_directory_and_file_per_key(self) -> None:
        store = FileStore(self.dir, key="work")
        store.save("[]")
        self.assertEqual(store.path, os.path.join(self.dir, "work.json"))
        self.assertEqual(FileStore(self.dir, key="work").load(), "[]")
        self.assertIsNone(FileStore(self.dir).load())

    def test_unwritable_path_raises_save_failure(self) -> None:
        blocker = os.path.join(self._tmp.name, "blocker")
        with open(blocker, "w", encoding="utf-8") as f:
            f.write("")
        with self.assertRaises(PersistenceSaveFailure):
            FileStore(blocker).save("[]")

    def test_unreadable_path_raises_load_failure(self) -> None:
        store = FileStore(self.dir)
        os.makedirs(store.path)
        with self.assertRaises(PersistenceLoadFailure):
            store.load()

    def test_unencodable_text_keeps_previous_file(self) -> None:
        store = FileStore(self.dir)
        store.save('["kept"]')
        with self.assertRaises(PersistenceSaveFailure):
            store.save('["bad \ud800"]')
        self.assertEqual(store.load(), '["kept"]')
        self.assertFalse(os.path.exists(store.path + ".tmp"))

    def test_interrupted_write_keeps_previous_file(self) -> None:
        store = FileStore(self.dir)
        store.save('["kept"]')
        with patch("todolist.storage.os.replace", side_effect=OSError("No space left on device")):
            with self.assertRaises(PersistenceSaveFailure):
                store.save('["new"]')
        self.assertEqual(store.load(), '["kept"]')
        self.assertFalse(os.path.exists(store.path + ".tmp"))

    def test_blocked_temp_file_keeps_previous_file(self) -> None:
        store = FileStore(self.dir)
        store.save('["kept"]')
        os.makedirs(store.path + ".tmp")
        with self.assertRaises(PersistenceSaveFailure):
            store.save('["new"]')
        self.assertEqual(store.load(), '["kept"]')


class TestMemoryStore(unittest.TestCase):
    def test_counts_saves(self) -> None:
        store = MemoryStore()
        store.save("[]")
        self.assertEqual(store.load(), "[]")
        self.assertEqual(store.saves, 1)

    def test_failing_store_rejects_writes(self) -> None:
        store = MemoryStore(initial="[]", fail_saves=True)
        with self.assertRaises(PersistenceSaveFailure):
            store.save("[1]")
        self.assertEqual(store.load(), "[]")


if __name__ == "__main__":
    unittest.main(verbosity=2)
