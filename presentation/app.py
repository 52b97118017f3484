"""Flask application factory for the Google Calendar gateway."""

import logging
from functools import partial
from pathlib import Path
from typing import Optional

from flask import Flask, Response, jsonify

from config import Config
from application import EventConnector
from domain import ConnectorOptions
from infrastructure import CredentialRegistry, GoogleCalendarRepository
from monitoring import HealthChecker
from .routes import register_event_routes


logger = logging.getLogger(__name__)


def load_swagger_doc(location: str) -> bytes:
    """Read the swagger document, falling back to an empty one."""
    try:
        return Path(location).read_bytes()
    except OSError as e:
        logger.warning(f"Could not read swagger doc: {e}")
        return b'{}'


def create_app(
    config: Config,
    credential_registry: CredentialRegistry,
    client_factory=None
) -> Flask:
    """Create Flask application with dependency injection.

    ``client_factory(credentials)`` builds the remote calendar client; it
    defaults to a Google Calendar client configured from ``config``.
    """
    app = Flask(__name__)
    app.config['CONFIG'] = config
    app.config['CREDENTIAL_REGISTRY'] = credential_registry

    if client_factory is None:
        client_factory = partial(
            GoogleCalendarRepository,
            calendar_id=config.calendar.calendar_id,
            base_url=config.calendar.base_url,
            timeout=config.calendar.timeout
        )

    def build_connector(domain: str, options: Optional[ConnectorOptions] = None) -> EventConnector:
        return EventConnector(
            domain,
            credential_registry,
            client_factory,
            options=options,
            timezone=config.calendar.timezone
        )

    health_checker = HealthChecker(credential_registry)
    swagger_doc = load_swagger_doc(config.docs.swagger_location)

    # Routes
    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint."""
        summary = health_checker.get_health_summary()
        summary['service'] = 'Google Calendar Gateway'
        return jsonify(summary), 200 if summary['healthy'] else 503

    @app.route('/api-doc', methods=['GET'])
    def api_doc():
        """Serve the swagger document."""
        return Response(swagger_doc, mimetype='application/json; charset=utf-8')

    register_event_routes(app, build_connector)

    # Error handlers
    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'error': 'method not allowed'}), 405

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal server error: {error}")
        return jsonify({'error': 'internal server error'}), 500

    logger.info(f"Serving {len(credential_registry)} domain(s): {', '.join(credential_registry.domains)}")
    return app
