# ngo_supply/api/services/request_assembler.py
"""Service layer for building supply requests from the dialog's selections."""

import logging
from typing import List, Optional, Sequence

from ngo_supply.api.errors import (
    IncompleteSelection,
    MixedWarehouseSelection,
    ValidationError,
)
from ngo_supply.api.models import ItemSelection, SupplyRequestPayload
from ngo_supply.api.services.route_selection import (
    RouteSelectionStateMachine,
    SelectionState,
)

logger = logging.getLogger(__name__)


class SupplyRequestDraft:
    """Items an NGO user has picked so far, all from one warehouse."""

    def __init__(self):
        self._items: List[ItemSelection] = []

    @property
    def items(self) -> List[ItemSelection]:
        return list(self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items

    @property
    def warehouse_id(self) -> Optional[int]:
        return self._items[0].warehouse_id if self._items else None

    def get(self, item_id: int) -> Optional[ItemSelection]:
        for item in self._items:
            if item.item_id == item_id:
                return item
        return None

    def add_item(self, item_id: int, warehouse_id: int, max_quantity: int,
                 quantity: int = 1) -> bool:
        """Select an item. Returns False if it was already selected.

        Raises:
            MixedWarehouseSelection: the item lives in another warehouse
            ValidationError: nothing of the item is in stock
        """
        if self.get(item_id) is not None:
            return False
        if max_quantity < 1:
            raise ValidationError(f"Item {item_id} is out of stock")
        if self._items and warehouse_id != self.warehouse_id:
            raise MixedWarehouseSelection(
                f"Item {item_id} is in warehouse {warehouse_id}, "
                f"but the request already uses warehouse {self.warehouse_id}"
            )

        self._items.append(ItemSelection(
            item_id=item_id,
            warehouse_id=warehouse_id,
            max_quantity=max_quantity,
            quantity=_clamp(quantity, max_quantity),
        ))
        logger.debug(f"Selected item {item_id} from warehouse {warehouse_id}")
        return True

    def remove_item(self, item_id: int) -> bool:
        """Deselect an item. Returns False if it was not selected."""
        item = self.get(item_id)
        if item is None:
            return False
        self._items.remove(item)
        return True

    def update_quantity(self, item_id: int, quantity: int) -> Optional[ItemSelection]:
        """Set the requested quantity, clamped to 1..max_quantity."""
        item = self.get(item_id)
        if item is None:
            return None
        item.quantity = _clamp(quantity, item.max_quantity)
        return item

    def clear(self) -> None:
        self._items = []

    def to_list(self) -> List[dict]:
        return [item.to_dict() for item in self._items]


def _clamp(quantity: int, max_quantity: int) -> int:
    return max(1, min(int(quantity), max_quantity))


def assemble(items: Sequence[ItemSelection],
             route_set: RouteSelectionStateMachine,
             highlighted_index: Optional[int],
             ngo_id: Optional[int] = None) -> SupplyRequestPayload:
    """Package the selected items and the highlighted route into one payload.

    The warehouse comes from the first item; every item shares it.

    Raises:
        IncompleteSelection: no items, no displayed routes, or an invalid index
        MixedWarehouseSelection: items come from more than one warehouse
    """
    if not items:
        raise IncompleteSelection("Please select at least one item.")
    if route_set is None or route_set.state is not SelectionState.DISPLAYED:
        raise IncompleteSelection("Please calculate a route first.")
    if not route_set.is_valid_index(highlighted_index):
        raise IncompleteSelection(f"Route {highlighted_index!r} is not one of the calculated routes.")

    warehouse_id = items[0].warehouse_id
    if any(item.warehouse_id != warehouse_id for item in items):
        raise MixedWarehouseSelection()

    route = route_set.routes[highlighted_index]
    payload = SupplyRequestPayload(
        warehouse_id=warehouse_id,
        items=[ItemSelection(i.item_id, i.warehouse_id, i.max_quantity, i.quantity) for i in items],
        route=route,
        ngo_id=ngo_id,
    )
    logger.info(
        f"Assembled supply request: {len(items)} item(s) from warehouse {warehouse_id}, "
        f"route {highlighted_index} ({route.distance_km_text} km, charge {route.charge})"
    )
    return payload


__all__ = ["SupplyRequestDraft", "assemble"]
