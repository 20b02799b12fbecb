import datetime
import logging
import uuid

import pymongo
from bson.errors import InvalidId
from bson.objectid import ObjectId
from pymongo.errors import PyMongoError

from entries import TemporaryWord, VocabularyEntry, fields_to_document, utcnow_iso
from errors import StoreError

logger = logging.getLogger(__name__)


class VocabularyStore:
    """Shared listener plumbing for the store backends.

    Listeners are called with the user id after every successful mutation of
    that user's vocabulary.
    """

    def __init__(self):
        self._listeners = []

    def add_listener(self, listener):
        self._listeners.append(listener)

    def _changed(self, user_id):
        for listener in self._listeners:
            listener(user_id)


class MemoryVocabularyStore(VocabularyStore):
    """Keeps everything in process memory. Used when MongoDB is unavailable."""

    def __init__(self):
        super().__init__()
        self.users = {}
        self.vocabulary = {}
        self.temporary_words = {}

    def upsert_user(self, userinfo):
        user_id = userinfo.get("sub")
        if not user_id or not userinfo.get("email"):
            return False
        user = self.users.setdefault(user_id, {"auth_id": user_id, "created_at": utcnow_iso()})
        user.update({
            "email": userinfo.get("email"),
            "name": userinfo.get("name"),
            "picture": userinfo.get("picture"),
            "last_login": utcnow_iso(),
        })
        return True

    def fetch_entries(self, user_id):
        docs = sorted(self.vocabulary.get(user_id, []), key=lambda d: d["created_at"], reverse=True)
        return [VocabularyEntry.from_document(doc) for doc in docs]

    def insert_entry(self, user_id, entry):
        return self.insert_entries(user_id, [entry])[0]

    def insert_entries(self, user_id, entries):
        docs = self.vocabulary.setdefault(user_id, [])
        ids = []
        for entry in entries:
            doc = entry.to_document()
            doc["id"] = uuid.uuid4().hex
            doc["user_id"] = user_id
            doc["created_at"] = utcnow_iso()
            docs.append(doc)
            ids.append(doc["id"])
        self._changed(user_id)
        return ids

    def update_entry(self, user_id, entry_id, fields):
        changes = fields_to_document(fields)
        for doc in self.vocabulary.get(user_id, []):
            if doc["id"] == entry_id:
                doc.update(changes)
        self._changed(user_id)

    def delete_entry(self, user_id, entry_id):
        docs = self.vocabulary.get(user_id, [])
        self.vocabulary[user_id] = [doc for doc in docs if doc["id"] != entry_id]
        self._changed(user_id)

    def fetch_temporary_words(self, user_id):
        docs = sorted(self.temporary_words.get(user_id, []), key=lambda d: d["created_at"], reverse=True)
        return [TemporaryWord.from_document(doc) for doc in docs]

    def insert_temporary_word(self, user_id, word):
        doc = TemporaryWord(word, uuid.uuid4().hex, user_id, utcnow_iso()).to_document()
        self.temporary_words.setdefault(user_id, []).append(doc)
        return doc["id"]

    def delete_temporary_word(self, user_id, word_id):
        docs = self.temporary_words.get(user_id, [])
        self.temporary_words[user_id] = [doc for doc in docs if doc["id"] != word_id]


def _object_id(value):
    try:
        return ObjectId(value)
    except (InvalidId, TypeError) as ex:
        raise StoreError(f"Invalid id: {value}") from ex


def _from_mongo(doc):
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return doc


class MongoVocabularyStore(VocabularyStore):
    def __init__(self, db):
        super().__init__()
        self.db = db

    def upsert_user(self, userinfo):
        user_id = userinfo.get("sub")
        email = userinfo.get("email")
        if not user_id or not email:
            return False

        user_data = {
            "auth_id": user_id,
            "email": email,
            "name": userinfo.get("name"),
            "picture": userinfo.get("picture"),
            "last_login": datetime.datetime.now(datetime.timezone.utc),
        }
        try:
            result = self.db.users.update_one(
                {"auth_id": user_id},
                {"$set": user_data, "$setOnInsert": {"created_at": user_data["last_login"]}},
                upsert=True,
            )
        except PyMongoError as ex:
            raise StoreError("Cannot save user") from ex
        if result.upserted_id is not None:
            logger.info("Created new user: %s", email)
        else:
            logger.info("Updated existing user: %s", email)
        return True

    def fetch_entries(self, user_id):
        try:
            docs = list(self.db.vocabulary.find({"user_id": user_id}).sort("created_at", pymongo.DESCENDING))
        except PyMongoError as ex:
            raise StoreError("Cannot read vocabulary") from ex
        return [VocabularyEntry.from_document(_from_mongo(doc)) for doc in docs]

    def insert_entry(self, user_id, entry):
        return self.insert_entries(user_id, [entry])[0]

    def insert_entries(self, user_id, entries):
        docs = []
        for entry in entries:
            doc = entry.to_document()
            doc.pop("id")
            doc["user_id"] = user_id
            doc["created_at"] = utcnow_iso()
            docs.append(doc)
        if not docs:
            return []
        try:
            result = self.db.vocabulary.insert_many(docs)
        except PyMongoError as ex:
            raise StoreError("Cannot add words") from ex
        self._changed(user_id)
        return [str(inserted_id) for inserted_id in result.inserted_ids]

    def update_entry(self, user_id, entry_id, fields):
        changes = fields_to_document(fields)
        try:
            self.db.vocabulary.update_one(
                {"_id": _object_id(entry_id), "user_id": user_id},
                {"$set": changes},
            )
        except PyMongoError as ex:
            raise StoreError("Cannot update word") from ex
        self._changed(user_id)

    def delete_entry(self, user_id, entry_id):
        try:
            self.db.vocabulary.delete_one({"_id": _object_id(entry_id), "user_id": user_id})
        except PyMongoError as ex:
            raise StoreError("Cannot delete word") from ex
        self._changed(user_id)

    def fetch_temporary_words(self, user_id):
        try:
            docs = list(self.db.temporary_words.find({"user_id": user_id}).sort("created_at", pymongo.DESCENDING))
        except PyMongoError as ex:
            raise StoreError("Cannot read temporary words") from ex
        return [TemporaryWord.from_document(_from_mongo(doc)) for doc in docs]

    def insert_temporary_word(self, user_id, word):
        try:
            result = self.db.temporary_words.insert_one(
                {"user_id": user_id, "word": word, "created_at": utcnow_iso()}
            )
        except PyMongoError as ex:
            raise StoreError("Cannot save temporary word") from ex
        return str(result.inserted_id)

    def delete_temporary_word(self, user_id, word_id):
        try:
            self.db.temporary_words.delete_one({"_id": _object_id(word_id), "user_id": user_id})
        except PyMongoError as ex:
            raise StoreError("Cannot delete temporary word") from ex


def connect_store(config):
    """Connect to MongoDB, falling back to the in-memory store if it is unreachable."""
    try:
        mongo = pymongo.MongoClient(
            host=config["MONGO_HOST"],
            port=config["MONGO_PORT"],
            serverSelectionTimeoutMS=config["MONGO_TIMEOUT_MS"],
        )
        mongo.server_info()  # Triggers the exception if connection to the database is unsuccessful
    except PyMongoError as ex:
        logger.error("Cannot connect to MongoDB, keeping data in memory: %s", ex)
        return MemoryVocabularyStore()
    logger.info("Connected to MongoDB successfully")
    return MongoVocabularyStore(mongo[config["MONGO_DB"]])
