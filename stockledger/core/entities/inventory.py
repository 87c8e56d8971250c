"""Inventory domain entities."""

from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class SignRule(str, Enum):
    """How a movement type turns an entered magnitude into a signed delta."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    AS_GIVEN = "as_given"

    def apply(self, quantity: Decimal) -> Decimal:
        if self is SignRule.POSITIVE:
            return abs(quantity)
        if self is SignRule.NEGATIVE:
            return -abs(quantity)
        return quantity


class MovementType(str, Enum):
    """Types of stock movements."""

    ADJUSTMENT = "adjustment"
    PURCHASE = "purchase"
    DAMAGE = "damage"
    EXPIRY = "expiry"
    TRANSFER = "transfer"

    @property
    def sign_rule(self) -> SignRule:
        return _SIGN_RULES[self]

    @property
    def accepts_expiry_date(self) -> bool:
        """Whether additions of this type may carry an expiry hint."""
        return self in (MovementType.PURCHASE, MovementType.ADJUSTMENT)

    def normalize(self, quantity: Decimal) -> Decimal:
        """Apply this type's sign convention to an entered quantity."""
        return self.sign_rule.apply(Decimal(quantity))


_SIGN_RULES: dict[MovementType, SignRule] = {
    MovementType.ADJUSTMENT: SignRule.AS_GIVEN,
    MovementType.PURCHASE: SignRule.POSITIVE,
    MovementType.DAMAGE: SignRule.NEGATIVE,
    MovementType.EXPIRY: SignRule.NEGATIVE,
    MovementType.TRANSFER: SignRule.AS_GIVEN,
}

_missing_rules = set(MovementType) - set(_SIGN_RULES)
if _missing_rules:
    raise RuntimeError(f"Movement types without a sign rule: {sorted(_missing_rules)}")


class StockStatus(str, Enum):
    """Stock level classification of a snapshot."""

    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class InventorySnapshot(BaseModel):
    """Current on-hand quantity of a product, store-wide or at one location."""

    id: int | None = None
    product_id: int  # FK → products.id
    location_id: int | None = None  # None = store-wide
    quantity: Decimal = Decimal("0")
    reorder_level: Decimal = Field(default=Decimal("0"), ge=0)
    earliest_expiry: date | None = None
    last_updated: datetime = Field(default_factory=utcnow)

    # Joined from the catalog on reads
    product_name: str | None = None

    @property
    def key(self) -> tuple[int, int | None]:
        return (self.product_id, self.location_id)


class StockMovement(BaseModel):
    """Immutable record of one quantity change."""

    id: int | None = None
    product_id: int  # FK → products.id
    location_id: int | None = None
    movement_type: MovementType
    quantity: Decimal  # signed
    reason: str | None = None
    user_id: int | None = None
    reference_id: int | None = None  # purchase order item or transfer id
    expiry_date: date | None = None
    timestamp: datetime = Field(default_factory=utcnow)


class LedgerEntry(BaseModel):
    """Snapshot and movement produced by one ledger write."""

    snapshot: InventorySnapshot
    movement: StockMovement


class BalanceDrift(BaseModel):
    """A snapshot whose quantity disagrees with the sum of its movements."""

    product_id: int
    location_id: int | None = None
    snapshot_quantity: Decimal
    movement_total: Decimal

    @property
    def difference(self) -> Decimal:
        return self.snapshot_quantity - self.movement_total
