import json

from flask import Blueprint, Response, current_app, request

from entries import clean_fields, entry_from_form
from errors import StoreError, ValidationError
from users import current_user_id, login_required

bp = Blueprint("api", __name__, url_prefix="/api")


def json_response(data, status=200):
    return Response(
        response=json.dumps(data),
        status=status,
        mimetype="application/json"
    )


def view_to_json(view):
    return {
        "has_cards": view.has_cards,
        "position": view.position,
        "total": view.total,
        "flipped": view.flipped,
        "transitioning": view.transitioning,
        "entry": view.entry.to_document() if view.entry else None,
    }


def get_store():
    return current_app.extensions["vocab_store"]


#==================================#

@bp.route("/vocabulary", methods=["GET"])
@login_required
def get_vocabulary():
    try:
        entries = get_store().fetch_entries(current_user_id())
        return json_response([entry.to_document() for entry in entries])
    except StoreError as ex:
        current_app.logger.error("Cannot read vocabulary: %s", ex)
        return json_response({"message": "cannot read vocabulary"}, 500)

#==================================#

@bp.route("/vocabulary", methods=["POST"])
@login_required
def create_entry():
    try:
        entry = entry_from_form(request.get_json(silent=True) or request.form)
        entry_id = get_store().insert_entry(current_user_id(), entry)
        return json_response({"message": "word created", "id": entry_id}, 201)
    except ValidationError as ex:
        return json_response({"message": str(ex)}, 400)
    except StoreError as ex:
        current_app.logger.error("Cannot create word: %s", ex)
        return json_response({"message": "cannot create word"}, 500)

#==================================#

@bp.route("/vocabulary/<entry_id>", methods=["PATCH"])
@login_required
def update_entry(entry_id):
    try:
        fields = clean_fields(request.get_json(silent=True))
    except ValidationError as ex:
        return json_response({"message": str(ex)}, 400)
    try:
        get_store().update_entry(current_user_id(), entry_id, fields)
        return json_response({"message": "word updated", "id": entry_id})
    except StoreError as ex:
        current_app.logger.error("Cannot update word %s: %s", entry_id, ex)
        return json_response({"message": "cannot update"}, 500)

#==================================#

@bp.route("/vocabulary/<entry_id>", methods=["DELETE"])
@login_required
def delete_entry(entry_id):
    try:
        get_store().delete_entry(current_user_id(), entry_id)
        return json_response({"message": "word deleted", "id": entry_id})
    except StoreError as ex:
        current_app.logger.error("Cannot delete word %s: %s", entry_id, ex)
        return json_response({"message": "cannot delete word"}, 500)

#==================================#

def deck_command(command=None):
    try:
        deck = current_app.extensions["review_sessions"].current(current_user_id())
        if command is not None:
            getattr(deck, command)()
        return json_response(view_to_json(deck.view()))
    except StoreError as ex:
        current_app.logger.error("Review %s failed: %s", command or "view", ex)
        return json_response({"message": str(ex)}, 500)


@bp.route("/review", methods=["GET"])
@login_required
def get_review():
    return deck_command()


@bp.route("/review/flip", methods=["POST"])
@login_required
def flip_card():
    return deck_command("flip")


@bp.route("/review/advance", methods=["POST"])
@login_required
def advance_card():
    return deck_command("advance")


@bp.route("/review/favorite", methods=["POST"])
@login_required
def favorite_card():
    return deck_command("toggle_favorite")
