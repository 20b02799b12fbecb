from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for

from dictionary import lookup_definition
from entries import PARTS_OF_SPEECH, entry_from_form, filter_entries
from errors import StoreError, ValidationError
from users import current_user_id, login_required

bp = Blueprint("vocabulary", __name__)

EMPTY_FORM = {
    "term": "",
    "definition": "",
    "translation": "",
    "part_of_speech": "noun",
    "notes": "",
}


def get_store():
    return current_app.extensions["vocab_store"]


def render_add_form(form, status=200):
    try:
        temp_words = get_store().fetch_temporary_words(current_user_id())
    except StoreError as ex:
        current_app.logger.error("Error reading temporary words: %s", ex)
        temp_words = []
    return render_template(
        "add-word.html", form=form, temp_words=temp_words, parts_of_speech=PARTS_OF_SPEECH
    ), status


def fill_from_dictionary(form):
    found = lookup_definition(form["term"])
    if found is None:
        flash(f'No definition found for "{form["term"]}"', "error")
        return form
    return dict(form, **found)


@bp.route("/add")
@login_required
def add_word():
    return render_add_form(dict(EMPTY_FORM))


@bp.route("/add", methods=["POST"])
@login_required
def submit_word():
    form = dict(EMPTY_FORM)
    form.update({key: request.form.get(key, "") for key in EMPTY_FORM})
    action = request.form.get("action", "save")

    if action == "lookup":
        if not form["term"].strip():
            return render_add_form(form)
        return render_add_form(fill_from_dictionary(form))

    if action == "temp":
        word = form["term"].strip()
        if word:
            try:
                get_store().insert_temporary_word(current_user_id(), word)
                flash("Added to temporary list", "success")
            except StoreError as ex:
                flash(f"Error adding temporary word: {ex}", "error")
                return render_add_form(form, 500)
        return redirect(url_for("vocabulary.add_word"))

    try:
        entry = entry_from_form(form)
        get_store().insert_entry(current_user_id(), entry)
    except ValidationError as ex:
        flash(str(ex), "error")
        return render_add_form(form, 400)
    except StoreError as ex:
        current_app.logger.error("Error adding word: %s", ex)
        flash(f"Error adding word: {ex}", "error")
        return render_add_form(form, 500)

    flash("Word added successfully!", "success")
    return redirect(url_for("vocabulary.add_word"))


@bp.route("/temp/<word_id>/use", methods=["POST"])
@login_required
def use_temp_word(word_id):
    form = dict(EMPTY_FORM, term=request.form.get("word", ""))
    form = fill_from_dictionary(form)
    try:
        get_store().delete_temporary_word(current_user_id(), word_id)
    except StoreError as ex:
        flash(f"Error removing temporary word: {ex}", "error")
    return render_add_form(form)


@bp.route("/temp/<word_id>/delete", methods=["POST"])
@login_required
def delete_temp_word(word_id):
    try:
        get_store().delete_temporary_word(current_user_id(), word_id)
    except StoreError as ex:
        flash(f"Error removing temporary word: {ex}", "error")
    return redirect(url_for("vocabulary.add_word"))


@bp.route("/words")
@login_required
def word_table():
    search = request.args.get("q", "")
    part_of_speech = request.args.get("pos", "all")
    try:
        entries = get_store().fetch_entries(current_user_id())
    except StoreError as ex:
        current_app.logger.error("Error reading vocabulary: %s", ex)
        flash(f"Cannot load your words: {ex}", "error")
        entries = []

    return render_template(
        "word-table.html",
        entries=filter_entries(entries, search, part_of_speech),
        search=search,
        pos=part_of_speech,
        parts_of_speech=PARTS_OF_SPEECH,
    )


def back_to_table():
    return redirect(url_for(
        "vocabulary.word_table",
        q=request.form.get("q", ""),
        pos=request.form.get("pos", "all"),
    ))


@bp.route("/words/<entry_id>/star", methods=["POST"])
@login_required
def star_word(entry_id):
    favorite = request.form.get("favorite") == "true"
    try:
        get_store().update_entry(current_user_id(), entry_id, {"favorite": favorite})
    except StoreError as ex:
        flash(f"Error updating word: {ex}", "error")
    return back_to_table()


@bp.route("/words/<entry_id>/edit")
@login_required
def edit_word(entry_id):
    try:
        entries = get_store().fetch_entries(current_user_id())
    except StoreError as ex:
        flash(f"Cannot load your words: {ex}", "error")
        return redirect(url_for("vocabulary.word_table"))

    for entry in entries:
        if entry.id == entry_id:
            form = {key: getattr(entry, key) for key in EMPTY_FORM}
            return render_template(
                "edit-word.html", entry_id=entry_id, form=form, parts_of_speech=PARTS_OF_SPEECH
            )
    return redirect(url_for("vocabulary.word_table"))


@bp.route("/words/<entry_id>/edit", methods=["POST"])
@login_required
def update_word(entry_id):
    form = {key: request.form.get(key, "") for key in EMPTY_FORM}
    try:
        entry = entry_from_form(form)
        get_store().update_entry(current_user_id(), entry_id, {
            "term": entry.term,
            "definition": entry.definition,
            "translation": entry.translation,
            "part_of_speech": entry.part_of_speech,
            "notes": entry.notes,
        })
    except ValidationError as ex:
        flash(str(ex), "error")
        return render_template(
            "edit-word.html", entry_id=entry_id, form=form, parts_of_speech=PARTS_OF_SPEECH
        ), 400
    except StoreError as ex:
        flash(f"Error updating word: {ex}", "error")
        return render_template(
            "edit-word.html", entry_id=entry_id, form=form, parts_of_speech=PARTS_OF_SPEECH
        ), 500
    return redirect(url_for("vocabulary.word_table"))


@bp.route("/words/<entry_id>/delete", methods=["POST"])
@login_required
def delete_word(entry_id):
    try:
        get_store().delete_entry(current_user_id(), entry_id)
    except StoreError as ex:
        flash(f"Error deleting word: {ex}", "error")
    return back_to_table()
