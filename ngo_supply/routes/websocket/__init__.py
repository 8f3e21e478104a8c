# ngo_supply/routes/websocket/__init__.py
"""WebSocket route handlers initialization."""

import logging

from .base import NAMESPACE
from .dialog import DialogHandler

logger = logging.getLogger(__name__)


def register_websocket_handlers(socketio, **handler_kwargs):
    """Register all WebSocket event handlers with SocketIO.

    Args:
        socketio: Flask-SocketIO instance
        handler_kwargs: Factories forwarded to DialogHandler
    """
    logger.info("Registering WebSocket handlers...")

    try:
        dialog_handler = DialogHandler(socketio, NAMESPACE, **handler_kwargs)

        logger.info(f"Registering dialog handler for namespace: {NAMESPACE}")
        dialog_handler.register_handlers()

        logger.info("WebSocket handlers registered successfully")

    except Exception as e:
        logger.error(f"Failed to register WebSocket handlers: {e}")
        logger.exception("WebSocket registration error:")
        raise


__all__ = ['register_websocket_handlers', 'NAMESPACE']
