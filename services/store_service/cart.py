"""
Shopping cart state.

The cart belongs to the browser session, not the server: it is a pure
reducer over immutable ``CartState`` values plus a ``CartStore`` that
persists the item list after every action and rehydrates it on start.
Only slugs and quantities leave the cart; checkout re-prices everything.
"""

import json
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Optional, Protocol, Union

from libs.common.logging import get_logger
from pydantic import Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from services.store_service.models import Product
from services.store_service.models.base import ContentModel

logger = get_logger(__name__)


class CartItem(ContentModel):
    product: Product
    quantity: int = Field(1, ge=1)
    variant_id: Optional[str] = None

    def matches(self, slug: str, variant_id: Optional[str]) -> bool:
        return self.product.slug == slug and self.variant_id == variant_id


class CartState(ContentModel):
    items: list[CartItem] = []
    is_open: bool = False


_ITEMS_ADAPTER = TypeAdapter(list[CartItem])


# ============================================================================
# ACTIONS
# ============================================================================


@dataclass(frozen=True)
class AddItem:
    product: Product
    quantity: int = 1
    variant_id: Optional[str] = None

    def __post_init__(self):
        if self.quantity < 1:
            raise ValueError("quantity must be at least 1")


@dataclass(frozen=True)
class RemoveItem:
    product_slug: str
    variant_id: Optional[str] = None


@dataclass(frozen=True)
class UpdateQuantity:
    product_slug: str
    quantity: int
    variant_id: Optional[str] = None


@dataclass(frozen=True)
class ClearCart:
    pass


@dataclass(frozen=True)
class ToggleCart:
    pass


@dataclass(frozen=True)
class OpenCart:
    pass


@dataclass(frozen=True)
class CloseCart:
    pass


@dataclass(frozen=True)
class LoadCart:
    items: tuple[CartItem, ...]


CartAction = Union[
    AddItem,
    RemoveItem,
    UpdateQuantity,
    ClearCart,
    ToggleCart,
    OpenCart,
    CloseCart,
    LoadCart,
]


def _without(items: list[CartItem], slug: str, variant_id: Optional[str]):
    return [item for item in items if not item.matches(slug, variant_id)]


def cart_reducer(state: CartState, action: CartAction) -> CartState:
    """Return the next cart state; ``state`` itself is never mutated."""
    if isinstance(action, AddItem):
        slug = action.product.slug
        items = list(state.items)
        for index, item in enumerate(items):
            if item.matches(slug, action.variant_id):
                items[index] = item.model_copy(
                    update={"quantity": item.quantity + action.quantity}
                )
                return state.model_copy(update={"items": items})
        items.append(
            CartItem(
                product=action.product,
                quantity=action.quantity,
                variant_id=action.variant_id,
            )
        )
        return state.model_copy(update={"items": items})

    if isinstance(action, RemoveItem):
        items = _without(state.items, action.product_slug, action.variant_id)
        return state.model_copy(update={"items": items})

    if isinstance(action, UpdateQuantity):
        if action.quantity <= 0:
            items = _without(state.items, action.product_slug, action.variant_id)
        else:
            items = [
                item.model_copy(update={"quantity": action.quantity})
                if item.matches(action.product_slug, action.variant_id)
                else item
                for item in state.items
            ]
        return state.model_copy(update={"items": items})

    if isinstance(action, ClearCart):
        return state.model_copy(update={"items": []})
    if isinstance(action, ToggleCart):
        return state.model_copy(update={"is_open": not state.is_open})
    if isinstance(action, OpenCart):
        return state.model_copy(update={"is_open": True})
    if isinstance(action, CloseCart):
        return state.model_copy(update={"is_open": False})
    if isinstance(action, LoadCart):
        return state.model_copy(update={"items": list(action.items)})

    return state


# ============================================================================
# DERIVED VALUES
# ============================================================================


def item_count(state: CartState) -> int:
    return sum(item.quantity for item in state.items)


def subtotal(state: CartState) -> float:
    """Sum of price x quantity in major units, from the cart's snapshots."""
    total = sum(
        (Decimal(str(item.product.pricing.price)) * item.quantity for item in state.items),
        Decimal("0"),
    )
    return float(total)


def get_item_quantity(
    state: CartState, product_slug: str, variant_id: Optional[str] = None
) -> int:
    for item in state.items:
        if item.matches(product_slug, variant_id):
            return item.quantity
    return 0


# ============================================================================
# PERSISTENCE
# ============================================================================


class CartStorage(Protocol):
    def load(self) -> Optional[str]: ...

    def save(self, data: str) -> None: ...


class MemoryCartStorage:
    def __init__(self, data: Optional[str] = None):
        self.data = data

    def load(self) -> Optional[str]:
        return self.data

    def save(self, data: str) -> None:
        self.data = data


class FileCartStorage:
    """Keeps the serialized cart in a single file."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def load(self) -> Optional[str]:
        if not self.path.is_file():
            return None
        return self.path.read_text(encoding="utf-8")

    def save(self, data: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(data, encoding="utf-8")


class CartStore:
    """Dispatches cart actions and persists the item list after each one."""

    def __init__(self, storage: CartStorage):
        self.storage = storage
        self.state = CartState()
        self._rehydrate()

    def _rehydrate(self) -> None:
        try:
            saved = self.storage.load()
            if not saved:
                return
            items = _ITEMS_ADAPTER.validate_json(saved)
        except (OSError, ValueError, PydanticValidationError) as e:
            logger.warning("Discarding unreadable saved cart: %s", e)
            return
        self.state = cart_reducer(self.state, LoadCart(items=tuple(items)))

    def _persist(self) -> None:
        payload = [
            item.model_dump(mode="json", by_alias=True, exclude_none=True)
            for item in self.state.items
        ]
        try:
            self.storage.save(json.dumps(payload))
        except OSError as e:
            logger.error("Error saving cart: %s", e)

    def dispatch(self, action: CartAction) -> CartState:
        self.state = cart_reducer(self.state, action)
        self._persist()
        return self.state

    # Convenience wrappers

    def add_item(
        self, product: Product, quantity: int = 1, variant_id: Optional[str] = None
    ) -> CartState:
        return self.dispatch(AddItem(product, quantity, variant_id))

    def remove_item(self, product_slug: str, variant_id: Optional[str] = None) -> CartState:
        return self.dispatch(RemoveItem(product_slug, variant_id))

    def update_quantity(
        self, product_slug: str, quantity: int, variant_id: Optional[str] = None
    ) -> CartState:
        return self.dispatch(UpdateQuantity(product_slug, quantity, variant_id))

    def clear_cart(self) -> CartState:
        return self.dispatch(ClearCart())

    def toggle_cart(self) -> CartState:
        return self.dispatch(ToggleCart())

    def open_cart(self) -> CartState:
        return self.dispatch(OpenCart())

    def close_cart(self) -> CartState:
        return self.dispatch(CloseCart())

    @property
    def items(self) -> list[CartItem]:
        return self.state.items

    @property
    def is_open(self) -> bool:
        return self.state.is_open

    @property
    def item_count(self) -> int:
        return item_count(self.state)

    @property
    def subtotal(self) -> float:
        return subtotal(self.state)

    def get_item_quantity(self, product_slug: str, variant_id: Optional[str] = None) -> int:
        return get_item_quantity(self.state, product_slug, variant_id)

    def to_checkout_payload(
        self, success_url: Optional[str] = None, cancel_url: Optional[str] = None
    ) -> dict:
        """Request body for POST /api/checkout: slugs and quantities only."""
        items = []
        for item in self.state.items:
            entry = {"product": {"slug": item.product.slug}, "quantity": item.quantity}
            if item.variant_id:
                entry["variantId"] = item.variant_id
            items.append(entry)
        payload: dict = {"items": items}
        if success_url:
            payload["successUrl"] = success_url
        if cancel_url:
            payload["cancelUrl"] = cancel_url
        return payload
