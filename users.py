from functools import wraps
from urllib.parse import quote_plus, urlencode

from authlib.integrations.flask_client import OAuth
from flask import Blueprint, current_app, jsonify, redirect, request, session, url_for

from errors import StoreError

bp = Blueprint("users", __name__)


def init_oauth(app):
    oauth = OAuth(app)
    app.extensions["oauth"] = oauth
    oauth.register(
        "auth0",
        client_id=app.config["AUTH0_CLIENT_ID"],
        client_secret=app.config["AUTH0_CLIENT_SECRET"],
        client_kwargs={
            "scope": "openid profile email",
        },
        server_metadata_url=f'https://{app.config["AUTH0_DOMAIN"]}/.well-known/openid-configuration'
    )

    # Google OAuth configuration (optional)
    if app.config["GOOGLE_CLIENT_ID"] and app.config["GOOGLE_CLIENT_SECRET"]:
        oauth.register(
            "google",
            client_id=app.config["GOOGLE_CLIENT_ID"],
            client_secret=app.config["GOOGLE_CLIENT_SECRET"],
            client_kwargs={
                "scope": "openid profile email",
            },
            server_metadata_url="https://accounts.google.com/.well-known/openid-configuration"
        )


def _oauth():
    return current_app.extensions["oauth"]


def current_user_id():
    user = session.get("user")
    if not user:
        return None
    return user.get("userinfo", {}).get("sub")


def login_required(view):
    """Redirect anonymous visitors to sign in (or answer 401 on the JSON API)."""
    @wraps(view)
    def wrapped(*args, **kwargs):
        if current_user_id() is None:
            if request.path.startswith("/api/"):
                return jsonify({"message": "not signed in"}), 401
            return redirect(url_for("users.login"))
        return view(*args, **kwargs)
    return wrapped


def _sign_in(token):
    session["user"] = token

    # Create or update user in database
    if token and "userinfo" in token:
        try:
            current_app.extensions["vocab_store"].upsert_user(token["userinfo"])
        except StoreError as ex:
            current_app.logger.error("Error creating/updating user: %s", ex)

    return redirect(url_for("vocabulary.add_word"))


@bp.route("/login")
def login():
    return _oauth().auth0.authorize_redirect(
        redirect_uri=url_for("users.callback", _external=True)
    )


@bp.route("/login/google")
def google_login():
    if current_app.config["GOOGLE_CLIENT_ID"]:
        return _oauth().google.authorize_redirect(
            redirect_uri=url_for("users.google_callback", _external=True)
        )
    return redirect(url_for("users.login"))


@bp.route("/callback", methods=["GET", "POST"])
def callback():
    return _sign_in(_oauth().auth0.authorize_access_token())


@bp.route("/callback/google", methods=["GET", "POST"])
def google_callback():
    if current_app.config["GOOGLE_CLIENT_ID"]:
        return _sign_in(_oauth().google.authorize_access_token())
    return redirect(url_for("users.login"))


@bp.route("/logout")
def logout():
    user_id = current_user_id()
    if user_id:
        current_app.extensions["review_sessions"].discard(user_id)
    session.clear()
    return redirect(
        "https://" + current_app.config["AUTH0_DOMAIN"]
        + "/v2/logout?"
        + urlencode(
            {
                "returnTo": url_for("index", _external=True),
                "client_id": current_app.config["AUTH0_CLIENT_ID"],
            },
            quote_via=quote_plus,
        )
    )
