"""
Cart aggregate.

A buyer's cart is a plain state object: the lines in insertion order plus the
running ``total_items`` and ``total_amount``. Every mutator funnels through
``_apply_delta`` so the running totals can never drift from the lines.
"""

from dataclasses import dataclass, field, fields, replace
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

UNKNOWN_SHOP = "Unknown Shop"

FEE_FIELDS = (
    "delivery_fee_local",
    "delivery_fee_uptown",
    "delivery_fee_outoftown",
    "delivery_fee_countrywide",
    "runner_fee",
    "transport_fee",
    "free_delivery_threshold",
)


@dataclass
class CartLine:
    """
    A product snapshot with the quantity the buyer wants.

    Fee fields are per unit and optional; the fee calculator treats anything
    missing or non-numeric as zero.
    """

    product_id: str
    name: str
    price: Decimal
    shop_id: str
    shop_name: str = UNKNOWN_SHOP
    quantity: int = 1
    in_stock: bool = True
    image: str = ""
    delivery_fee_local: Optional[Any] = None
    delivery_fee_uptown: Optional[Any] = None
    delivery_fee_outoftown: Optional[Any] = None
    delivery_fee_countrywide: Optional[Any] = None
    runner_fee: Optional[Any] = None
    transport_fee: Optional[Any] = None
    free_delivery_threshold: Optional[Any] = None

    def __post_init__(self):
        self.product_id = str(self.product_id)
        self.shop_id = str(self.shop_id)
        self.price = Decimal(str(self.price))
        if not self.price.is_finite():
            raise ValueError(f"Invalid price {self.price} for product {self.product_id}")
        self.shop_name = self.shop_name or UNKNOWN_SHOP
        for name in FEE_FIELDS:
            value = getattr(self, name)
            if isinstance(value, str):
                try:
                    setattr(self, name, Decimal(value))
                except InvalidOperation:
                    pass  # left as-is, the fee calculator counts it as zero

    @property
    def extended_price(self) -> Decimal:
        return self.price * self.quantity

    @classmethod
    def from_product(cls, product, quantity: int = 1) -> "CartLine":
        """Snapshot a catalog Product (with its shop) into a cart line."""
        return cls(
            product_id=str(product.id),
            name=product.name,
            price=product.price,
            shop_id=str(product.shop_id),
            shop_name=product.shop.name if product.shop_id else UNKNOWN_SHOP,
            quantity=quantity,
            in_stock=product.in_stock,
            image=product.image_url,
            **{name: getattr(product, name) for name in FEE_FIELDS},
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            data[f.name] = str(value) if isinstance(value, Decimal) else value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CartLine":
        names = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in names})


@dataclass
class ShopGroup:
    shop_id: str
    shop_name: str
    items: List[CartLine] = field(default_factory=list)
    subtotal: Decimal = Decimal("0")


class Cart:
    """
    Shopping cart keyed by product id.

    Example:
        >>> cart = Cart()
        >>> cart.add_item(line, 2)
        >>> cart.set_quantity(line.product_id, 0)  # removes the line
        >>> cart.total_items
        0
    """

    def __init__(self, lines: Optional[List[CartLine]] = None):
        self._lines: Dict[str, CartLine] = {}
        self.total_items = 0
        self.total_amount = Decimal("0")
        for line in lines or []:
            self.add_item(line, line.quantity)

    def __len__(self):
        return len(self._lines)

    def __contains__(self, product_id) -> bool:
        return str(product_id) in self._lines

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def get(self, product_id) -> Optional[CartLine]:
        return self._lines.get(str(product_id))

    def add_item(self, product: CartLine, quantity: Optional[int] = None) -> CartLine:
        """
        Add ``quantity`` units of ``product`` (default 1).

        An existing line for the same product grows; otherwise a copy of
        ``product`` is appended with the requested quantity.
        """
        quantity = 1 if quantity is None else int(quantity)
        if quantity < 1:
            raise ValueError(f"Quantity must be at least 1, got {quantity}")

        line = self._lines.get(product.product_id)
        if line is None:
            line = replace(product, quantity=0)
            self._lines[line.product_id] = line
        self._apply_delta(line, quantity)
        return line

    def remove_item(self, product_id) -> bool:
        line = self._lines.get(str(product_id))
        if line is None:
            return False
        self._apply_delta(line, -line.quantity)
        return True

    def set_quantity(self, product_id, quantity: int) -> Optional[CartLine]:
        """
        Set the quantity of an existing line; zero or less removes it.

        Raises:
            KeyError: If the product is not in the cart and quantity > 0
        """
        if quantity <= 0:
            self.remove_item(product_id)
            return None

        line = self._lines.get(str(product_id))
        if line is None:
            raise KeyError(str(product_id))
        self._apply_delta(line, int(quantity) - line.quantity)
        return line

    def clear(self) -> None:
        for line in self.lines:
            self._apply_delta(line, -line.quantity)

    def items_grouped_by_shop(self) -> List[ShopGroup]:
        """One group per shop in first-seen order, covering every line once."""
        groups: Dict[str, ShopGroup] = {}
        for line in self._lines.values():
            group = groups.get(line.shop_id)
            if group is None:
                group = groups[line.shop_id] = ShopGroup(shop_id=line.shop_id, shop_name=line.shop_name)
            group.items.append(line)
            group.subtotal += line.extended_price
        return list(groups.values())

    def recalculate(self):
        """Totals recomputed from scratch: (total_items, total_amount)."""
        total_items = sum(line.quantity for line in self._lines.values())
        total_amount = sum((line.extended_price for line in self._lines.values()), Decimal("0"))
        return total_items, total_amount

    def to_payload(self) -> Dict[str, Any]:
        return {
            "lines": [line.to_dict() for line in self._lines.values()],
            "total_items": self.total_items,
            "total_amount": str(self.total_amount),
        }

    @classmethod
    def from_payload(cls, payload: Optional[Dict[str, Any]]) -> "Cart":
        return cls([CartLine.from_dict(data) for data in (payload or {}).get("lines", [])])

    def _apply_delta(self, line: CartLine, delta: int) -> None:
        line.quantity += delta
        self.total_items += delta
        self.total_amount += line.price * delta
        if line.quantity <= 0:
            del self._lines[line.product_id]
