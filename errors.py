# Error kinds surfaced to the user by the web layer


class VocabError(Exception):
    """Base class for errors shown to the user."""


class StoreError(VocabError):
    """The entry store could not complete a request."""


class ParseError(VocabError):
    """A backup file could not be read."""


class ValidationError(VocabError):
    """A submitted entry is missing a required field."""
