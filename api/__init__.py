import logging

from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config
from .errors import register_error_handlers
from models import storage  # DBStorage singleton (scoped_session)
from models.credential_store import SQLCredentialStore
from utils.accounts import AccountService
from utils.security import CredentialHasher, TokenCodec, TokenConfig
from utils.sessions import SessionManager

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Sociala API",
        "version": "1.0.0",
        "description": "REST API for the Sociala feed: accounts, posts, likes, comments and image uploads.",
    },
    "basePath": "/",
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the access token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def build_session_manager(config) -> SessionManager:
    """Wire the session core from config. Raises ConfigurationError on bad token settings."""
    hasher = CredentialHasher(
        time_cost=config.get("ARGON2_TIME_COST"),
        memory_cost=config.get("ARGON2_MEMORY_COST"),
        parallelism=config.get("ARGON2_PARALLELISM"),
    )
    codec = TokenCodec(TokenConfig.from_mapping(config))
    accounts = AccountService(storage, hasher)
    return SessionManager(codec, SQLCredentialStore(storage), hasher, accounts)


def create_app(config_name: str | None = None, overrides: dict | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    `overrides` is applied on top of the selected config class (tests use it
    for DATABASE_URL and UPLOAD_FOLDER).
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(app.config["LOG_LEVEL"])

    # The refresh cookie is sent cross-origin, so CORS must allow credentials
    CORS(
        app,
        resources={r"/*": {"origins": app.config["CORS_ORIGINS"].split(",")}},
        supports_credentials=True,
    )

    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    register_error_handlers(app)

    storage.reload(app.config["DATABASE_URL"])

    sessions = build_session_manager(app.config)
    app.extensions["sessions"] = sessions
    app.extensions["accounts"] = sessions.accounts

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .posts import bp as posts_bp
    from .comments import bp as comments_bp
    from .uploads import bp as uploads_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(posts_bp)
    app.register_blueprint(comments_bp)
    app.register_blueprint(uploads_bp)

    @app.after_request
    def add_security_headers(response):
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        return response

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to Sociala API",
            "docs": "/apidocs/",
            "health": "/health",
        }, 200

    return app
