from urllib.parse import quote

import requests
from flask import current_app

from entries import PARTS_OF_SPEECH


def lookup_definition(word):
    """Look a word up in the public dictionary API.

    Returns ``{"definition": ..., "part_of_speech": ...}`` taken from the first
    meaning, or None when the word is unknown or the service can't be reached.
    """
    word = (word or "").strip()
    if not word:
        return None

    url = current_app.config["DICTIONARY_API_URL"] + quote(word)
    try:
        r = requests.get(url, timeout=current_app.config["DICTIONARY_TIMEOUT"])
        r.raise_for_status()
        data = r.json()
    except (requests.RequestException, ValueError) as ex:
        current_app.logger.warning("Failed to fetch definition for %r: %s", word, ex)
        return None

    # Unknown words come back as an object with a "title", not a list
    if not isinstance(data, list) or not data:
        return None

    meanings = data[0].get("meanings") or [{}]
    meaning = meanings[0]
    definitions = meaning.get("definitions") or [{}]
    part_of_speech = meaning.get("partOfSpeech") or "noun"
    if part_of_speech not in PARTS_OF_SPEECH:
        part_of_speech = "noun"

    return {
        "definition": definitions[0].get("definition", ""),
        "part_of_speech": part_of_speech,
    }
