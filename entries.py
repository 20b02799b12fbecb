# File used for
#     - storing vocabulary entries and temporary words as plain objects
#     - converting them to and from the documents kept in the store and in backups
#     - validating submitted forms and filtering the vocabulary table

import datetime

from errors import ValidationError

PARTS_OF_SPEECH = ["noun", "verb", "adjective", "adverb", "idiom", "phrase"]

# attribute name -> document key
FIELD_KEYS = {
    "id": "id",
    "user_id": "user_id",
    "term": "word",
    "definition": "meaning",
    "translation": "chinese",
    "part_of_speech": "pos",
    "notes": "notes",
    "favorite": "star",
    "created_at": "created_at",
}

EDITABLE_FIELDS = ["term", "definition", "translation", "part_of_speech", "notes", "favorite"]
TEXT_FIELDS = ["term", "definition", "translation", "part_of_speech", "notes"]


def utcnow_iso():
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def _text(value):
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class VocabularyEntry:
    def __init__(self, term, definition="", translation="", part_of_speech="noun",
                 notes="", favorite=False, id=None, user_id=None, created_at=None):
        self.id = id
        self.user_id = user_id
        self.term = _text(term)
        self.definition = _text(definition)
        self.translation = _text(translation)
        self.part_of_speech = _text(part_of_speech) or "noun"
        self.notes = _text(notes)
        self.favorite = favorite is True
        self.created_at = created_at

    @classmethod
    def from_document(cls, doc):
        return cls(
            doc.get("word", ""),
            doc.get("meaning", ""),
            doc.get("chinese", ""),
            doc.get("pos", "noun"),
            doc.get("notes", ""),
            doc.get("star", False),
            id=doc.get("id"),
            user_id=doc.get("user_id"),
            created_at=doc.get("created_at"),
        )

    def to_document(self):
        return {key: getattr(self, attr) for attr, key in FIELD_KEYS.items()}

    def copy(self):
        return VocabularyEntry.from_document(self.to_document())

    def __repr__(self):
        return f"VocabularyEntry({self.id!r}, {self.term!r})"


class TemporaryWord:
    def __init__(self, word, id=None, user_id=None, created_at=None):
        self.id = id
        self.user_id = user_id
        self.word = word
        self.created_at = created_at

    @classmethod
    def from_document(cls, doc):
        return cls(doc.get("word", ""), doc.get("id"), doc.get("user_id"), doc.get("created_at"))

    def to_document(self):
        return {"id": self.id, "user_id": self.user_id, "word": self.word, "created_at": self.created_at}


def clean_fields(fields):
    """Check a partial update before it reaches the store and return it with the term stripped."""
    if not isinstance(fields, dict) or not fields:
        raise ValidationError("Nothing to update")

    cleaned = {}
    for attr, value in fields.items():
        if attr not in EDITABLE_FIELDS:
            raise ValidationError(f"'{attr}' cannot be changed")
        if attr == "favorite":
            if not isinstance(value, bool):
                raise ValidationError("'favorite' must be true or false")
        elif not isinstance(value, str):
            raise ValidationError(f"'{attr}' must be text")
        cleaned[attr] = value

    if "term" in cleaned:
        cleaned["term"] = cleaned["term"].strip()
        if not cleaned["term"]:
            raise ValidationError("Please enter a word")
    if "part_of_speech" in cleaned and cleaned["part_of_speech"] not in PARTS_OF_SPEECH:
        raise ValidationError(f"Unknown part of speech: {cleaned['part_of_speech']}")
    return cleaned


def fields_to_document(fields):
    """Map a dict of entry attributes to document keys."""
    return {FIELD_KEYS[attr]: value for attr, value in clean_fields(fields).items()}


def validate_document(doc):
    """Reject stored-format records whose fields have the wrong type."""
    if not isinstance(doc, dict):
        raise ValidationError("not a word record")
    for attr in TEXT_FIELDS:
        key = FIELD_KEYS[attr]
        if key in doc and not isinstance(doc[key], str):
            raise ValidationError(f"'{key}' must be text")
    if "star" in doc and not isinstance(doc["star"], bool):
        raise ValidationError("'star' must be true or false")
    if not doc.get("word", "").strip():
        raise ValidationError("no word")


def _form_text(form, key):
    value = form.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"'{key}' must be text")
    return value.strip()


def entry_from_form(form):
    """Build an entry from submitted form data (or a JSON object of the same shape)."""
    if not hasattr(form, "get"):
        raise ValidationError("Expected a word record")

    term = _form_text(form, "term")
    if not term:
        raise ValidationError("Please enter a word")

    part_of_speech = _form_text(form, "part_of_speech") or "noun"
    if part_of_speech not in PARTS_OF_SPEECH:
        raise ValidationError(f"Unknown part of speech: {part_of_speech}")

    return VocabularyEntry(
        term,
        _form_text(form, "definition"),
        _form_text(form, "translation"),
        part_of_speech,
        _form_text(form, "notes"),
        form.get("favorite") in (True, "true", "on", "1"),
    )


def filter_entries(entries, search="", part_of_speech="all"):
    """Table filter: term and definition match case-insensitively, translation as typed."""
    needle = (search or "").lower()
    matches = []
    for entry in entries:
        matches_search = (
            needle in entry.term.lower()
            or needle in entry.definition.lower()
            or (search or "") in entry.translation
        )
        matches_pos = part_of_speech in (None, "", "all") or entry.part_of_speech == part_of_speech
        if matches_search and matches_pos:
            matches.append(entry)
    return matches
