# ngo_supply/api/services/request_dialog.py
"""Lifecycle of the "create supply request" dialog."""

import logging
import threading
from typing import Any, Dict, Optional

from ngo_supply.api.backend import BackendClient
from ngo_supply.api.errors import BackendError
from ngo_supply.api.models import RouteCalculationResult, SupplyRequestPayload
from ngo_supply.api.services.map_service import MapProvider
from ngo_supply.api.services.request_assembler import SupplyRequestDraft, assemble
from ngo_supply.api.services.route_selection import RouteSelectionStateMachine
from ngo_supply.api.services.route_service import RouteCalculationService

logger = logging.getLogger(__name__)


class RequestDialog:
    """One open request dialog: its draft, its map and its routes.

    Changing which items are selected throws away computed routes and any
    calculation still in flight.
    """

    def __init__(self, dialog_id: str, map_provider: MapProvider,
                 route_service: Optional[RouteCalculationService] = None,
                 backend: Optional[BackendClient] = None,
                 ngo_id: Optional[int] = None,
                 padding: Optional[int] = None):
        self.dialog_id = dialog_id
        self.ngo_id = ngo_id
        self.backend = backend

        self.draft = SupplyRequestDraft()
        self.map = map_provider
        self.routes = RouteSelectionStateMachine(map_provider, padding=padding)
        self.route_service = route_service or RouteCalculationService()

    def _invalidate_routes(self) -> None:
        self.route_service.next_sequence()
        self.routes.clear()

    # Item selection
    def toggle_item(self, item_id: int, warehouse_id: int, max_quantity: int,
                    checked: bool) -> bool:
        """Select or deselect an item; returns True when the selection changed."""
        if checked:
            changed = self.draft.add_item(item_id, warehouse_id, max_quantity)
        else:
            changed = self.draft.remove_item(item_id)
        if changed:
            self._invalidate_routes()
        return changed

    def update_quantity(self, item_id: int, quantity: int):
        return self.draft.update_quantity(item_id, quantity)

    # Routes
    def calculate_routes(self, start: str, end: str,
                         ready_timeout: Optional[float] = None) -> Optional[RouteCalculationResult]:
        return self.route_service.calculate_and_display(start, end, self.routes, ready_timeout)

    def select_route(self, index: int) -> bool:
        return self.routes.highlight(index)

    # Submission
    def build_payload(self) -> SupplyRequestPayload:
        return assemble(self.draft.items, self.routes, self.routes.selected_index, ngo_id=self.ngo_id)

    def submit(self) -> Any:
        """Send the request to the backend and reset the dialog on success.

        Raises:
            IncompleteSelection: items or route missing
            BackendError: the backend rejected the request
        """
        payload = self.build_payload()
        if self.backend is None:
            raise BackendError("No backend configured for submission.")
        created = self.backend.create_supply_request(payload.to_dict())
        logger.info(f"Dialog {self.dialog_id} submitted supply request")
        self.reset()
        return created

    def reset(self) -> None:
        self.draft.clear()
        self._invalidate_routes()

    def close(self) -> None:
        self.reset()
        if self.backend is not None:
            self.backend.close()
        logger.debug(f"Dialog {self.dialog_id} closed")

    def snapshot(self) -> Dict[str, Any]:
        selected = self.routes.selected_route
        return {
            "dialog_id": self.dialog_id,
            "items": self.draft.to_list(),
            "warehouse_id": self.draft.warehouse_id,
            "state": self.routes.state.value,
            "routes": [route.to_dict() for route in self.routes.routes],
            "primary_index": self.routes.primary_index,
            "selected_index": self.routes.selected_index,
            "selected_route": selected.to_dict() if selected else None,
        }


class DialogManager:
    """Open dialogs keyed by client; at most one per client."""

    def __init__(self):
        self.dialogs: Dict[str, RequestDialog] = {}
        self.lock = threading.RLock()
        logger.info("DialogManager initialized")

    def open(self, client_id: str, map_provider: MapProvider, **kwargs) -> RequestDialog:
        """Open a fresh dialog for ``client_id``, closing any previous one."""
        with self.lock:
            previous = self.dialogs.pop(client_id, None)
            if previous is not None:
                logger.info(f"Replacing open dialog for client {client_id}")
                previous.close()

            dialog = RequestDialog(client_id, map_provider, **kwargs)
            self.dialogs[client_id] = dialog
            logger.info(f"Opened request dialog for client {client_id}")
            return dialog

    def get(self, client_id: str) -> Optional[RequestDialog]:
        with self.lock:
            return self.dialogs.get(client_id)

    def close(self, client_id: str) -> bool:
        with self.lock:
            dialog = self.dialogs.pop(client_id, None)
        if dialog is None:
            return False
        dialog.close()
        return True

    def get_stats(self) -> Dict[str, Any]:
        with self.lock:
            return {
                "open_dialogs": len(self.dialogs),
                "with_routes": sum(1 for d in self.dialogs.values() if d.routes.routes),
            }


# Global dialog manager instance
_dialog_manager = None


def get_dialog_manager() -> DialogManager:
    """Get the global DialogManager instance."""
    global _dialog_manager
    if _dialog_manager is None:
        _dialog_manager = DialogManager()
    return _dialog_manager


__all__ = ["RequestDialog", "DialogManager", "get_dialog_manager"]
