# ngo_supply/routes/websocket/dialog.py
"""WebSocket handlers for the supply request dialog and its route map."""

import logging
from flask import request

from ngo_supply.api.backend import BackendClient
from ngo_supply.api.config import get_map_config
from ngo_supply.api.errors import BackendError, SupplyRoutingError
from ngo_supply.api.services.map_service import SocketIOMapProvider
from ngo_supply.api.services.request_dialog import get_dialog_manager
from ngo_supply.api.services.route_service import RouteCalculationService

from .base import BaseWebSocketHandler, NAMESPACE

logger = logging.getLogger(__name__)


class DialogHandler(BaseWebSocketHandler):
    """Handles the request dialog: items, routes and submission."""

    def __init__(self, socketio, namespace=NAMESPACE,
                 backend_factory=BackendClient,
                 route_service_factory=RouteCalculationService):
        super().__init__(socketio, namespace)
        self.backend_factory = backend_factory
        self.route_service_factory = route_service_factory

    def _emit_routes(self, event, dialog, **extra):
        snapshot = dialog.snapshot()
        data = {
            "routes": snapshot["routes"],
            "primary_index": snapshot["primary_index"],
            "selected_index": snapshot["selected_index"],
            "selected_route": snapshot["selected_route"],
        }
        data.update(extra)
        self.emit_to_client(event, data)

    def register_handlers(self):
        """Register dialog-related event handlers."""

        @self.socketio.on("open_dialog", namespace=self.namespace)
        def handle_open_dialog(data=None):
            """Open a fresh dialog, replacing any dialog this client had open."""
            data = data or {}
            sid = request.sid
            self.log_event("open_dialog", data)

            try:
                provider = SocketIOMapProvider(self.socketio, room=sid, namespace=self.namespace)
                dialog = get_dialog_manager().open(
                    sid,
                    provider,
                    route_service=self.route_service_factory(),
                    backend=self.backend_factory(),
                    ngo_id=data.get("ngo_id"),
                )
                self.emit_to_client("dialog_opened", {
                    "dialog_id": dialog.dialog_id,
                    "map": get_map_config(),
                })
            except Exception as exc:
                self.handle_error(exc, "open_dialog")

        @self.socketio.on("map_ready", namespace=self.namespace)
        def handle_map_ready(data=None):
            """The browser created the Leaflet map for this dialog."""
            dialog = self.current_dialog("map_ready")
            if dialog is None:
                return
            dialog.map.mark_ready()
            dialog.map.invalidate_size()

        @self.socketio.on("toggle_item", namespace=self.namespace)
        def handle_toggle_item(data):
            """Select or deselect a warehouse item; drops computed routes."""
            dialog = self.current_dialog("toggle_item")
            if dialog is None:
                return

            try:
                had_routes = bool(dialog.routes.routes)
                changed = dialog.toggle_item(
                    int(data["item_id"]),
                    int(data["ware_house_id"]),
                    int(data.get("max_quantity", 0)),
                    bool(data.get("checked", True)),
                )
                if changed and had_routes:
                    self.emit_to_client("routes_cleared", {"reason": "items_changed"})
                self.emit_draft(dialog)
            except SupplyRoutingError as exc:
                self.handle_error(exc, "toggle_item")
            except (KeyError, TypeError, ValueError) as exc:
                self.handle_error(f"Invalid item selection: {exc}", "toggle_item")

        @self.socketio.on("update_quantity", namespace=self.namespace)
        def handle_update_quantity(data):
            dialog = self.current_dialog("update_quantity")
            if dialog is None:
                return

            try:
                item = dialog.update_quantity(int(data["item_id"]), int(data["quantity"]))
            except (KeyError, TypeError, ValueError) as exc:
                self.handle_error(f"Invalid quantity: {exc}", "update_quantity")
                return
            if item is None:
                self.handle_error(f"Item {data['item_id']} is not selected", "update_quantity")
                return
            self.emit_draft(dialog)

        @self.socketio.on("calculate_routes", namespace=self.namespace)
        def handle_calculate_routes(data):
            """Fetch alternatives, draw them and highlight the shortest."""
            dialog = self.current_dialog("calculate_routes")
            if dialog is None:
                return

            data = data or {}
            self.log_event("calculate_routes", data)
            try:
                result = dialog.calculate_routes(data.get("start", ""), data.get("end", ""))
            except SupplyRoutingError as exc:
                self.handle_error(exc, "calculate_routes")
                return

            if result is None:
                if not dialog.map.is_ready():
                    self.handle_error("Map is not ready yet, please try again", "calculate_routes")
                return

            self._emit_routes(
                "routes_calculated",
                dialog,
                sequence=result.sequence,
                default_index=result.default_index,
            )

        @self.socketio.on("select_route", namespace=self.namespace)
        def handle_select_route(data):
            """The user clicked a route on the map or in the list."""
            dialog = self.current_dialog("select_route")
            if dialog is None:
                return

            try:
                index = int((data or {})["index"])
                applied = dialog.select_route(index)
            except SupplyRoutingError as exc:
                self.handle_error(exc, "select_route")
                return
            except (KeyError, TypeError, ValueError) as exc:
                self.handle_error(f"Invalid route index: {exc}", "select_route")
                return

            if applied:
                self._emit_routes("route_selected", dialog)

        @self.socketio.on("submit_request", namespace=self.namespace)
        def handle_submit_request(data=None):
            """Create the supply request from the draft and the chosen route."""
            dialog = self.current_dialog("submit_request")
            if dialog is None:
                return

            try:
                created = dialog.submit()
            except SupplyRoutingError as exc:
                self.handle_error(exc, "submit_request")
                return

            self.emit_to_client("request_created", {"request": created})

            try:
                requests_list = dialog.backend.list_supply_requests()
                self.emit_to_client("supply_requests", {"requests": requests_list})
            except BackendError as exc:
                logger.warning(f"Could not refresh supply requests: {exc.message}")

        @self.socketio.on("close_dialog", namespace=self.namespace)
        def handle_close_dialog(data=None):
            closed = get_dialog_manager().close(request.sid)
            self.emit_to_client("dialog_closed", {"closed": closed})

        @self.socketio.on("disconnect", namespace=self.namespace)
        def handle_disconnect(reason=None):
            """Drop the client's dialog when its socket goes away."""
            if get_dialog_manager().close(request.sid):
                self.log_event("disconnect", {"dialog_closed": True})
