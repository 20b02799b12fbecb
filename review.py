from flask import Blueprint, current_app, flash, redirect, render_template, url_for

from errors import StoreError
from review_deck import EMPTY_VIEW
from users import current_user_id, login_required

bp = Blueprint("review", __name__, url_prefix="/review")


def current_deck():
    return current_app.extensions["review_sessions"].current(current_user_id())


@bp.route("")
@login_required
def review():
    try:
        view = current_deck().view()
    except StoreError as ex:
        current_app.logger.error("Error loading review deck: %s", ex)
        flash(f"Cannot load your words: {ex}", "error")
        view = EMPTY_VIEW
    return render_template(
        "review.html",
        view=view,
        refresh_after=current_app.config["REVIEW_SETTLE_DELAY"],
    )


@bp.route("/flip", methods=["POST"])
@login_required
def flip():
    try:
        current_deck().flip()
    except StoreError as ex:
        flash(f"Cannot load your words: {ex}", "error")
    return redirect(url_for("review.review"))


@bp.route("/next", methods=["POST"])
@login_required
def advance():
    try:
        current_deck().advance()
    except StoreError as ex:
        flash(f"Cannot load your words: {ex}", "error")
    return redirect(url_for("review.review"))


@bp.route("/star", methods=["POST"])
@login_required
def toggle_favorite():
    try:
        current_deck().toggle_favorite()
    except StoreError as ex:
        current_app.logger.error("Error updating favorite: %s", ex)
        flash(f"Error updating word: {ex}", "error")
    return redirect(url_for("review.review"))
