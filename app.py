from flask import Flask, redirect, render_template, session, url_for

import api
import backup
import review
import users
import vocabulary
from config import Config
from review_deck import ReviewSessions
from store import connect_store


def create_app(config_class=Config, store=None, schedule=None):
    """Build the Flask app.

    ``store`` defaults to MongoDB (or the in-memory store when MongoDB is down);
    ``schedule`` replaces the timer used by the review deck's settle delay.
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    if store is None:
        store = connect_store(app.config)
    app.extensions["vocab_store"] = store

    sessions = ReviewSessions(
        store, app.config["REVIEW_SETTLE_DELAY"], max_decks=app.config["REVIEW_MAX_DECKS"]
    )
    if schedule is not None:
        sessions.schedule = schedule
    app.extensions["review_sessions"] = sessions

    users.init_oauth(app)

    app.register_blueprint(users.bp)
    app.register_blueprint(vocabulary.bp)
    app.register_blueprint(review.bp)
    app.register_blueprint(backup.bp)
    app.register_blueprint(api.bp)

    @app.route("/")
    def index():
        if session.get("user"):
            return redirect(url_for("vocabulary.add_word"))
        return render_template("index.html")

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=3000, debug=True)
