"""
NGO supply routing – main application entry point

* Flask app serving the route calculation and autocomplete endpoints.
* Flask-SocketIO namespace `/supply/ws` driving the supply request dialog:
  the browser owns the Leaflet map and replays the overlay commands it
  receives; route state lives here, one dialog per connection.
"""

import os
import logging

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from dotenv import load_dotenv

# --------------------------------------------------------------------------- #
# Environment & logging
# --------------------------------------------------------------------------- #
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

from ngo_supply.api.config import get_port, get_websocket_config, validate_routing_config  # noqa: E402
from ngo_supply.routes.routing import create_routing_blueprint  # noqa: E402
from ngo_supply.routes.websocket import register_websocket_handlers, NAMESPACE  # noqa: E402


def create_app(route_service=None, places=None, backend_factory=None, route_service_factory=None):
    """Build the Flask app and its Socket.IO server.

    The optional collaborators replace the Google and backend clients,
    mainly for tests.
    """
    app = Flask(__name__)

    flask_secret_key = os.getenv("FLASK_SECRET_KEY") or os.urandom(32).hex()
    if "FLASK_SECRET_KEY" not in os.environ:
        logger.warning("No FLASK_SECRET_KEY found. Generated a temporary key.")
    app.secret_key = flask_secret_key

    try:
        validate_routing_config()
    except ValueError as e:
        logger.warning(f"Routing configuration incomplete: {e}")

    ws_config = get_websocket_config()

    # CORS for local dev / cross‑origin front‑end requests
    CORS(app, origins=ws_config["cors_allowed_origins"], supports_credentials=True)

    socketio = SocketIO(
        app,
        cors_allowed_origins=ws_config["cors_allowed_origins"],
        async_mode="threading",
        ping_interval=ws_config["ping_interval"],
        ping_timeout=ws_config["ping_timeout"],
        logger=False,
        engineio_logger=False,
    )

    blueprint_kwargs = {"route_service": route_service, "places": places}
    handler_kwargs = {}
    if backend_factory is not None:
        blueprint_kwargs["backend_factory"] = backend_factory
        handler_kwargs["backend_factory"] = backend_factory
    if route_service_factory is not None:
        handler_kwargs["route_service_factory"] = route_service_factory

    app.register_blueprint(create_routing_blueprint(**blueprint_kwargs))
    register_websocket_handlers(socketio, **handler_kwargs)

    @app.route("/debug")
    def debug():
        """Simple JSON health endpoint."""
        return {
            "status": "ok",
            "socketio_initialized": True,
            "endpoints": {
                "calculate_route": "/calculate-route",
                "websocket_namespace": NAMESPACE,
            },
        }

    logger.info("Socket.IO initialised (async_mode=threading)")
    return app, socketio


# --------------------------------------------------------------------------- #
# Local development runner ( `python main.py` )
# --------------------------------------------------------------------------- #
if __name__ == "__main__":
    app, socketio = create_app()
    port = get_port()
    logger.info("Starting supply routing app on http://localhost:%d", port)
    socketio.run(app, host="0.0.0.0", port=port, debug=False, allow_unsafe_werkzeug=True)
