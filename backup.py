# File used for
#     - encoding a user's vocabulary to a JSON backup document
#     - decoding a backup back into new entries (ids, owners and dates are dropped,
#       so importing the same file twice creates duplicates)

import datetime
import json

from flask import Blueprint, Response, current_app, flash, redirect, render_template, request, url_for

from entries import VocabularyEntry, validate_document
from errors import ParseError, StoreError, ValidationError
from users import current_user_id, login_required

BACKUP_VERSION = "2.0"

# keys a restored item must not carry over
STRIPPED_KEYS = ("id", "created_at", "user_id")

bp = Blueprint("backup", __name__, url_prefix="/backup")


def encode_backup(entries, now=None):
    now = now or datetime.datetime.now(datetime.timezone.utc)
    return json.dumps({
        "version": BACKUP_VERSION,
        "date": now.isoformat(),
        "items": [entry.to_document() for entry in entries],
    }, indent=2, ensure_ascii=False)


def decode_backup(text):
    """Parse a backup into entries ready to be inserted. Nothing is stored here."""
    try:
        data = json.loads(text)
    except ValueError as ex:
        raise ParseError("Invalid JSON file") from ex

    items = data.get("items") if isinstance(data, dict) else None
    if not isinstance(items, list):
        items = []

    entries = []
    for i, item in enumerate(items):
        try:
            validate_document(item)
        except ValidationError as ex:
            raise ParseError(f"Item {i + 1}: {ex}") from ex
        record = {key: value for key, value in item.items() if key not in STRIPPED_KEYS}
        entries.append(VocabularyEntry.from_document(record))
    return entries


def import_backup(store, user_id, text):
    """Decode the whole file first, then insert everything in one batch."""
    entries = decode_backup(text)
    if entries:
        store.insert_entries(user_id, entries)
    return len(entries)


@bp.route("")
@login_required
def backup_page():
    return render_template("backup.html")


@bp.route("/export")
@login_required
def export():
    try:
        entries = current_app.extensions["vocab_store"].fetch_entries(current_user_id())
    except StoreError as ex:
        flash(f"Export failed: {ex}", "error")
        return redirect(url_for("backup.backup_page"))

    today = datetime.date.today().isoformat()
    return Response(
        response=encode_backup(entries),
        status=200,
        mimetype="application/json",
        headers={"Content-Disposition": f"attachment; filename=vocab_backup_{today}.json"},
    )


@bp.route("/import", methods=["POST"])
@login_required
def restore():
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        flash("Please choose a backup file", "error")
        return redirect(url_for("backup.backup_page"))

    try:
        text = upload.read().decode("utf-8")
        count = import_backup(current_app.extensions["vocab_store"], current_user_id(), text)
    except UnicodeDecodeError:
        flash("Invalid JSON file", "error")
    except ParseError as ex:
        flash(str(ex), "error")
    except StoreError as ex:
        current_app.logger.error("Import failed: %s", ex)
        flash(f"Import failed: {ex}", "error")
    else:
        flash(f"Import successful! Added {count} words.", "success")
    return redirect(url_for("backup.backup_page"))
