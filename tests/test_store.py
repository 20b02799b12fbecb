from unittest import mock

import pytest
from bson.objectid import ObjectId
from pymongo.errors import PyMongoError, ServerSelectionTimeoutError

from entries import VocabularyEntry
from errors import StoreError, ValidationError
from store import MemoryVocabularyStore, MongoVocabularyStore, connect_store


class TestMemoryStore:
    def setup_method(self):
        self.store = MemoryVocabularyStore()
        self.changes = []
        self.store.add_listener(self.changes.append)

    def test_entries_are_scoped_per_user(self):
        self.store.insert_entry("u1", VocabularyEntry("run"))
        self.store.insert_entry("u2", VocabularyEntry("walk"))
        assert [e.term for e in self.store.fetch_entries("u1")] == ["run"]
        assert [e.term for e in self.store.fetch_entries("u2")] == ["walk"]

    def test_insert_assigns_id_owner_and_date(self):
        entry_id = self.store.insert_entry("u1", VocabularyEntry("run"))
        [entry] = self.store.fetch_entries("u1")
        assert entry.id == entry_id
        assert entry.user_id == "u1"
        assert entry.created_at

    def test_update_and_delete(self):
        entry_id = self.store.insert_entry("u1", VocabularyEntry("run"))
        self.store.update_entry("u1", entry_id, {"favorite": True, "definition": "move"})
        [entry] = self.store.fetch_entries("u1")
        assert entry.favorite is True
        assert entry.definition == "move"

        self.store.delete_entry("u1", entry_id)
        assert self.store.fetch_entries("u1") == []

    def test_other_users_entries_are_untouched(self):
        entry_id = self.store.insert_entry("u1", VocabularyEntry("run"))
        self.store.delete_entry("u2", entry_id)
        self.store.update_entry("u2", entry_id, {"favorite": True})
        [entry] = self.store.fetch_entries("u1")
        assert entry.favorite is False

    def test_update_rejects_unknown_fields(self):
        entry_id = self.store.insert_entry("u1", VocabularyEntry("run"))
        with pytest.raises(ValidationError):
            self.store.update_entry("u1", entry_id, {"user_id": "u2"})

    def test_listeners_hear_every_mutation(self):
        entry_id = self.store.insert_entry("u1", VocabularyEntry("run"))
        self.store.update_entry("u1", entry_id, {"favorite": True})
        self.store.delete_entry("u1", entry_id)
        assert self.changes == ["u1", "u1", "u1"]

    def test_temporary_words(self):
        first = self.store.insert_temporary_word("u1", "ephemeral")
        self.store.insert_temporary_word("u1", "transient")
        assert {w.word for w in self.store.fetch_temporary_words("u1")} == {"ephemeral", "transient"}
        self.store.delete_temporary_word("u1", first)
        assert [w.word for w in self.store.fetch_temporary_words("u1")] == ["transient"]
        assert self.changes == []

    def test_upsert_user(self):
        assert self.store.upsert_user({"sub": "u1", "email": "a@example.com"})
        assert self.store.upsert_user({"sub": "u1", "email": "b@example.com"})
        assert self.store.users["u1"]["email"] == "b@example.com"
        assert not self.store.upsert_user({"sub": "u2"})


class TestMongoStore:
    def setup_method(self):
        self.db = mock.MagicMock()
        self.store = MongoVocabularyStore(self.db)
        self.changes = []
        self.store.add_listener(self.changes.append)

    def test_fetch_is_scoped_and_converts_ids(self):
        oid = ObjectId()
        self.db.vocabulary.find.return_value.sort.return_value = [
            {"_id": oid, "user_id": "u1", "word": "run", "star": True},
        ]
        [entry] = self.store.fetch_entries("u1")
        self.db.vocabulary.find.assert_called_once_with({"user_id": "u1"})
        assert entry.id == str(oid)
        assert entry.favorite is True

    def test_update_maps_fields_and_scopes_by_user(self):
        oid = ObjectId()
        self.store.update_entry("u1", str(oid), {"favorite": False})
        self.db.vocabulary.update_one.assert_called_once_with(
            {"_id": oid, "user_id": "u1"}, {"$set": {"star": False}}
        )
        assert self.changes == ["u1"]

    def test_insert_entries_batches(self):
        ids = [ObjectId(), ObjectId()]
        self.db.vocabulary.insert_many.return_value.inserted_ids = ids
        result = self.store.insert_entries("u1", [VocabularyEntry("a"), VocabularyEntry("b")])
        [docs], _ = self.db.vocabulary.insert_many.call_args
        assert [d["word"] for d in docs] == ["a", "b"]
        assert all(d["user_id"] == "u1" and "id" not in d for d in docs)
        assert result == [str(i) for i in ids]

    def test_driver_errors_become_store_errors(self):
        self.db.vocabulary.find.side_effect = PyMongoError("boom")
        with pytest.raises(StoreError):
            self.store.fetch_entries("u1")

    def test_failed_update_does_not_notify(self):
        self.db.vocabulary.update_one.side_effect = PyMongoError("boom")
        with pytest.raises(StoreError):
            self.store.update_entry("u1", str(ObjectId()), {"favorite": True})
        assert self.changes == []

    def test_bad_id_is_a_store_error(self):
        with pytest.raises(StoreError):
            self.store.delete_entry("u1", "not-an-object-id")


def test_connect_store_falls_back_to_memory():
    config = {"MONGO_HOST": "localhost", "MONGO_PORT": 27017, "MONGO_DB": "test", "MONGO_TIMEOUT_MS": 1}
    with mock.patch("store.pymongo.MongoClient") as client:
        client.return_value.server_info.side_effect = ServerSelectionTimeoutError("down")
        assert isinstance(connect_store(config), MemoryVocabularyStore)


def test_connect_store_uses_mongo():
    config = {"MONGO_HOST": "localhost", "MONGO_PORT": 27017, "MONGO_DB": "test", "MONGO_TIMEOUT_MS": 1}
    with mock.patch("store.pymongo.MongoClient"):
        assert isinstance(connect_store(config), MongoVocabularyStore)
