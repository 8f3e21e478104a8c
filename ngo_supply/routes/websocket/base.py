# ngo_supply/routes/websocket/base.py
"""Shared plumbing for handlers scoped to one client's request dialog."""

import logging
from flask import request
from flask_socketio import emit

from ngo_supply.api.errors import SupplyRoutingError
from ngo_supply.api.services.request_dialog import get_dialog_manager
from ngo_supply.routes import NAMESPACE

logger = logging.getLogger(__name__)

NO_DIALOG_MESSAGE = "No request dialog is open"


class BaseWebSocketHandler:
    """Emits to the calling client and reports dialog errors uniformly."""

    def __init__(self, socketio, namespace=NAMESPACE):
        self.socketio = socketio
        self.namespace = namespace

    def emit_to_client(self, event, data, room=None):
        """Emit to the calling client, or to ``room`` outside a request."""
        try:
            if room:
                self.socketio.emit(event, data, room=room, namespace=self.namespace)
            else:
                emit(event, data, namespace=self.namespace)
        except Exception as e:
            logger.error(f"Failed to emit {event}: {e}")

    def current_dialog(self, event_name):
        """The caller's open dialog; reports an error to them when there is none."""
        dialog = get_dialog_manager().get(request.sid)
        if dialog is None:
            self.handle_error(NO_DIALOG_MESSAGE, event_name)
        return dialog

    def emit_draft(self, dialog):
        self.emit_to_client("draft_updated", {
            "items": dialog.draft.to_list(),
            "warehouse_id": dialog.draft.warehouse_id,
        })

    def log_event(self, event_name, data=None):
        if data:
            logger.info(f"[WS] {event_name} - Client: {request.sid}, Data: {data}")
        else:
            logger.info(f"[WS] {event_name} - Client: {request.sid}")

    def handle_error(self, error, event_name=""):
        """Log ``error`` and send it to the client as an ``error`` event.

        Domain errors carry their class name as ``code`` so the dialog can
        tell a validation problem from a provider or backend failure.
        """
        if isinstance(error, SupplyRoutingError):
            message, code = error.message, type(error).__name__
        else:
            message, code = str(error), None
        logger.error(f"[WS] Error in {event_name} - Client: {request.sid}, Error: {message}")
        self.emit_to_client("error", {"message": message, "event": event_name, "code": code})
