import pytest

from conftest import make_entry
from entries import VocabularyEntry, clean_fields, entry_from_form, fields_to_document, filter_entries
from errors import ValidationError


@pytest.fixture
def words():
    return [
        make_entry("1", "Serendipity", definition="a happy accident", translation="机缘巧合"),
        make_entry("2", "run", definition="move quickly", translation="跑", part_of_speech="verb"),
        make_entry("3", "break a leg", definition="good luck", part_of_speech="idiom"),
    ]


def test_document_uses_stored_keys():
    entry = make_entry("1", "run", favorite=True, definition="move quickly", part_of_speech="verb")
    doc = entry.to_document()
    assert doc["word"] == "run"
    assert doc["meaning"] == "move quickly"
    assert doc["pos"] == "verb"
    assert doc["star"] is True
    assert VocabularyEntry.from_document(doc).term == "run"


def test_missing_document_fields_default():
    entry = VocabularyEntry.from_document({"word": "run"})
    assert entry.definition == ""
    assert entry.part_of_speech == "noun"
    assert entry.favorite is False


def test_entry_from_form_requires_term():
    with pytest.raises(ValidationError):
        entry_from_form({"term": "   ", "definition": "nothing"})


def test_entry_from_form_rejects_unknown_part_of_speech():
    with pytest.raises(ValidationError):
        entry_from_form({"term": "run", "part_of_speech": "preposition"})


def test_entry_from_form_strips_values():
    entry = entry_from_form({"term": " run ", "definition": " move ", "part_of_speech": "verb"})
    assert entry.term == "run"
    assert entry.definition == "move"
    assert entry.part_of_speech == "verb"
    assert entry.favorite is False


def test_fields_to_document_maps_names():
    assert fields_to_document({"favorite": True, "term": "x"}) == {"star": True, "word": "x"}
    with pytest.raises(ValidationError):
        fields_to_document({"user_id": "someone-else"})


def test_search_is_case_insensitive_on_term_and_definition(words):
    assert [e.id for e in filter_entries(words, "SERENDIP")] == ["1"]
    assert [e.id for e in filter_entries(words, "Quickly")] == ["2"]


def test_search_matches_translation(words):
    assert [e.id for e in filter_entries(words, "跑")] == ["2"]


def test_part_of_speech_filter(words):
    assert [e.id for e in filter_entries(words, "", "idiom")] == ["3"]
    assert len(filter_entries(words, "", "all")) == 3
    assert filter_entries(words, "run", "noun") == []


def test_stored_values_of_the_wrong_type_are_normalised():
    entry = VocabularyEntry.from_document({"word": 123, "meaning": None, "notes": [], "star": "yes"})
    assert entry.term == "123"
    assert entry.definition == ""
    assert isinstance(entry.notes, str)
    assert entry.favorite is False
    assert filter_entries([entry], "x") == []


@pytest.mark.parametrize("fields", [
    None,
    [],
    ["favorite"],
    {},
    {"term": None},
    {"term": "   "},
    {"definition": 5},
    {"favorite": "true"},
    {"part_of_speech": "bogus"},
])
def test_clean_fields_rejects_bad_updates(fields):
    with pytest.raises(ValidationError):
        clean_fields(fields)


def test_clean_fields_strips_term():
    assert clean_fields({"term": " run ", "favorite": False}) == {"term": "run", "favorite": False}


def test_entry_from_form_rejects_non_text_values():
    with pytest.raises(ValidationError):
        entry_from_form({"term": 123})
    with pytest.raises(ValidationError):
        entry_from_form(["term"])
