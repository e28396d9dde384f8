"""
API gateway: wires the services together and mounts the user and admin blueprints.
This is the local entrypoint for development.
"""

import atexit
import logging
from dataclasses import dataclass
from typing import Any, Optional

import click
from flask import Flask
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from campushub.admin_service.routes import admin_bp
from campushub.auth_service.accounts import AccountWorkflow
from campushub.auth_service.credentials import CredentialService
from campushub.auth_service.guard import AccessGuard
from campushub.config import Config, load_config
from campushub.database.db_connection import Database
from campushub.database.init_db import init_db
from campushub.database.store import PostgresStore
from campushub.errors import CampusHubError
from campushub.events_service.manager import EventManager
from campushub.events_service.registrations import RegistrationWorkflow
from campushub.notifications.email_service import EmailService
from campushub.notifications.notifier import Notifier
from campushub.responses import error_response
from campushub.user_service.routes import user_bp

# Basic console logging during API requests
logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")


@dataclass
class Services:
    config: Config
    store: Any
    credentials: CredentialService
    guard: AccessGuard
    notifier: Notifier
    accounts: AccountWorkflow
    registrations: RegistrationWorkflow
    events: EventManager


def build_services(config: Config, store: Any = None, email_service: Optional[EmailService] = None) -> Services:
    """
    Construct every service from explicit configuration.

    Args:
        config (Config): Settings.
        store: Persistence; a PostgresStore on DATABASE_URL when omitted.
        email_service (EmailService, optional): Delivery backend; built from config when omitted.
    """
    if store is None:
        config.validate()
        store = PostgresStore(Database(config.database_url))

    credentials = CredentialService(config.jwt_secret, config.token_expiration_minutes)

    if email_service is None:
        email_service = EmailService(
            from_email=config.email_from,
            from_name=config.email_from_name,
            region=config.aws_region,
            development_mode=config.email_development_mode,
            timeout_seconds=config.email_timeout_seconds,
        )
    notifier = Notifier(email_service, audience=store.list_account_emails, synchronous=config.sync_notifications)

    return Services(
        config=config,
        store=store,
        credentials=credentials,
        guard=AccessGuard(credentials, store),
        notifier=notifier,
        accounts=AccountWorkflow(store, credentials, notifier),
        registrations=RegistrationWorkflow(store, notifier),
        events=EventManager(store, notifier, notify_on_update=config.notify_on_event_update),
    )


def register_error_handlers(app: Flask) -> None:
    """Render every failure in the `{success: false, msg}` envelope."""

    @app.errorhandler(CampusHubError)
    def handle_campushub_error(err: CampusHubError):
        if err.status_code >= 500:
            logging.error(f"{type(err).__name__}: {err.msg}")
        return error_response(err)

    @app.errorhandler(HTTPException)
    def handle_http_error(err: HTTPException):
        return {"success": False, "msg": err.description or err.name}, err.code

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception):
        logging.exception(f"Unhandled error: {err}")
        return {"success": False, "msg": "Server error"}, 500


def register_commands(app: Flask, services: Services) -> None:
    @app.cli.command("init-db")
    def init_db_command() -> None:
        """Create the CampusHub tables."""
        missing = init_db(services.store.database)
        if missing:
            raise click.ClickException(f"Missing tables: {', '.join(missing)}")
        click.echo("Database initialised.")

    @app.cli.command("reconcile")
    def reconcile_command() -> None:
        """Rebuild event attendee lists from registrations."""
        repaired = services.events.reconcile()
        click.echo(f"Repaired {len(repaired)} event(s).")
        for event_id in repaired:
            click.echo(f"  {event_id}")


def create_app(config: Optional[Config] = None, store: Any = None, email_service: Optional[EmailService] = None) -> Flask:
    """
    Application factory for creating the Flask app.

    Returns:
        Flask: The configured Flask application.
    """
    config = config or load_config()
    services = build_services(config, store=store, email_service=email_service)

    app = Flask(__name__)
    app.extensions["campushub"] = services

    CORS(app, resources={
        r"/*": {
            "origins": config.cors_origins,
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
            "supports_credentials": True,
        }
    })

    # --- REGISTER BLUEPRINTS ---
    app.register_blueprint(user_bp, url_prefix="/user")
    app.register_blueprint(admin_bp, url_prefix="/admin")
    logging.info("All blueprints registered successfully.")

    register_error_handlers(app)
    register_commands(app, services)

    if not config.sync_notifications:
        services.notifier.start()
        atexit.register(services.notifier.stop)

    # --- BASIC HEALTH CHECKPOINTS ---
    @app.route("/")
    def ping():
        """
        Root URL for simple 'online' check.
        """
        return {"success": True, "status": "gateway_ok"}, 200

    @app.route("/health")
    def health():
        """
        Health check endpoint.
        """
        return {"success": True, "status": "ok"}, 200

    return app


if __name__ == "__main__":
    app = create_app()
    port = app.extensions["campushub"].config.gateway_port
    app.run(host="0.0.0.0", port=port, debug=True)
