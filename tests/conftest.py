import pytest

from app import create_app
from config import Config
from entries import VocabularyEntry
from store import MemoryVocabularyStore

USER_ID = "auth0|learner"


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    AUTH0_CLIENT_ID = "client"
    AUTH0_CLIENT_SECRET = "secret"
    AUTH0_DOMAIN = "example.auth0.com"
    GOOGLE_CLIENT_ID = None
    GOOGLE_CLIENT_SECRET = None
    REVIEW_SETTLE_DELAY = 0.2
    DICTIONARY_API_URL = "https://api.dictionaryapi.dev/api/v2/entries/en/"


class ManualScheduler:
    """Stands in for threading.Timer; callbacks run only when fired."""

    def __init__(self):
        self.pending = []

    def __call__(self, delay, callback):
        timer = ManualTimer(self, delay, callback)
        self.pending.append(timer)
        return timer

    def fire_all(self):
        timers, self.pending = self.pending, []
        for timer in timers:
            timer.callback()


class ManualTimer:
    def __init__(self, scheduler, delay, callback):
        self.scheduler = scheduler
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True
        if self in self.scheduler.pending:
            self.scheduler.pending.remove(self)


def make_entry(entry_id, term, favorite=False, **fields):
    return VocabularyEntry(term, favorite=favorite, id=entry_id, **fields)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def store():
    return MemoryVocabularyStore()


@pytest.fixture
def app(store, scheduler):
    return create_app(TestConfig, store=store, schedule=scheduler)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(client):
    with client.session_transaction() as sess:
        sess["user"] = {"userinfo": {"sub": USER_ID, "email": "learner@example.com"}}
    return client
