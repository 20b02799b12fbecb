from os import environ as env

from dotenv import find_dotenv, load_dotenv

ENV_FILE = find_dotenv()
if ENV_FILE:
    load_dotenv(ENV_FILE)


class Config:
    """Flask settings, read from the environment (or a .env file)."""
    SECRET_KEY = env.get("APP_SECRET_KEY") or "dev-only-secret"

    # MongoDB connection
    MONGO_HOST = env.get("MONGO_HOST", "localhost")
    MONGO_PORT = int(env.get("MONGO_PORT", 27017))
    MONGO_DB = env.get("MONGO_DB", "vocabstack")
    MONGO_TIMEOUT_MS = int(env.get("MONGO_TIMEOUT_MS", 1000))

    # Auth0 (Google is optional)
    AUTH0_CLIENT_ID = env.get("AUTH0_CLIENT_ID")
    AUTH0_CLIENT_SECRET = env.get("AUTH0_CLIENT_SECRET")
    AUTH0_DOMAIN = env.get("AUTH0_DOMAIN")
    GOOGLE_CLIENT_ID = env.get("GOOGLE_CLIENT_ID")
    GOOGLE_CLIENT_SECRET = env.get("GOOGLE_CLIENT_SECRET")

    # Seconds a card stays face-up before the next one is shown
    REVIEW_SETTLE_DELAY = float(env.get("REVIEW_SETTLE_DELAY", 0.2))
    # Review decks kept in memory before the least recently used is dropped
    REVIEW_MAX_DECKS = int(env.get("REVIEW_MAX_DECKS", 1000))

    DICTIONARY_API_URL = env.get(
        "DICTIONARY_API_URL", "https://api.dictionaryapi.dev/api/v2/entries/en/"
    )
    DICTIONARY_TIMEOUT = float(env.get("DICTIONARY_TIMEOUT", 10))
