"""Adjust Stock Use Case: manual adjustments, damage and expiry write-offs."""

from dataclasses import dataclass, field
from decimal import Decimal

from stockledger.application.dto.requests import AdjustStockRequest
from stockledger.application.dto.responses import (
    AdjustStockResponse,
    MovementResponse,
    SnapshotResponse,
    StockPreviewResponse,
)
from stockledger.application.retry import run_with_conflict_retry
from stockledger.config import get_logger
from stockledger.core.entities.inventory import InventorySnapshot, StockMovement
from stockledger.core.exceptions import ProductNotFoundError, ValidationError
from stockledger.core.services import StockLedger, StockPolicy, StockWarning

logger = get_logger(__name__)


@dataclass
class AdjustStockResult:
    """Result of an adjustment."""

    snapshot: InventorySnapshot
    movement: StockMovement
    warnings: list[StockWarning] = field(default_factory=list)


@dataclass
class StockPreview:
    """Projected quantity for an adjustment that has not been written."""

    product_id: int
    location_id: int | None
    current_quantity: Decimal
    delta: Decimal
    projected_quantity: Decimal
    reorder_level: Decimal
    warnings: list[StockWarning] = field(default_factory=list)


class AdjustStockUseCase:
    """Record a signed stock change after normalizing it by movement type."""

    def __init__(
        self,
        ledger: StockLedger | None = None,
        policy: StockPolicy | None = None,
        conflict_retries: int | None = None,
    ):
        self._ledger = ledger
        self._policy = policy
        self._conflict_retries = conflict_retries

    async def _get_ledger(self) -> StockLedger:
        if self._ledger is None:
            from stockledger.application.services import get_stock_ledger

            self._ledger = await get_stock_ledger()
        return self._ledger

    def _get_policy(self) -> StockPolicy:
        if self._policy is None:
            from stockledger.application.services import get_stock_policy

            self._policy = get_stock_policy()
        return self._policy

    @staticmethod
    def normalize(request: AdjustStockRequest) -> Decimal:
        """
        Signed delta for the request.

        Raises:
            ValidationError: If the delta is zero or an expiry date is given
                for anything but a purchase or a positive adjustment.
        """
        delta = request.type.normalize(request.quantity)
        if delta == 0:
            raise ValidationError("quantity", "Quantity must be non-zero", request.quantity)
        if request.expiry_date is not None and not (
            request.type.accepts_expiry_date and delta > 0
        ):
            raise ValidationError(
                "expiry_date",
                "Expiry date is only accepted for purchases and positive adjustments",
                request.expiry_date,
            )
        return delta

    async def execute(self, request: AdjustStockRequest) -> AdjustStockResult:
        """Execute the adjustment, re-running once on a write conflict."""
        delta = self.normalize(request)
        logger.info(
            "adjust_stock_started",
            product_id=request.product_id,
            location_id=request.location_id,
            type=request.type.value,
            delta=str(delta),
        )
        return await run_with_conflict_retry(
            self._apply, request, delta, retries=self._conflict_retries
        )

    async def _apply(self, request: AdjustStockRequest, delta: Decimal) -> AdjustStockResult:
        ledger = await self._get_ledger()
        policy = self._get_policy()

        async with ledger.transaction() as conn:
            current = await ledger.inventory_store.get_snapshot(
                request.product_id, request.location_id, conn=conn
            )
            policy.check(
                request.product_id,
                current.quantity if current else Decimal("0"),
                delta,
                location_id=request.location_id,
            )
            entry = await ledger.apply_movement(
                request.product_id,
                request.type,
                delta,
                request.user_id,
                location_id=request.location_id,
                reason=request.reason,
                reference_id=request.reference_id,
                expiry_date=request.expiry_date,
                conn=conn,
            )

        warnings = policy.warnings_for(entry.snapshot.quantity, entry.snapshot.reorder_level)
        logger.info(
            "stock_adjusted",
            product_id=request.product_id,
            location_id=request.location_id,
            movement_id=entry.movement.id,
            new_qty=str(entry.snapshot.quantity),
            warnings=[w.value for w in warnings],
        )
        return AdjustStockResult(
            snapshot=entry.snapshot,
            movement=entry.movement,
            warnings=warnings,
        )

    async def preview(self, request: AdjustStockRequest) -> StockPreview:
        """Projected quantity and warnings, without writing anything."""
        delta = self.normalize(request)
        ledger = await self._get_ledger()

        product = await ledger.catalog_store.get_product(request.product_id)
        if product is None:
            raise ProductNotFoundError(request.product_id)

        snapshot = await ledger.inventory_store.get_snapshot(
            request.product_id, request.location_id
        )
        current = snapshot.quantity if snapshot else Decimal("0")
        reorder_level = (
            snapshot.reorder_level
            if snapshot
            else product.reorder_level or ledger.default_reorder_level
        )
        projected = current + delta

        return StockPreview(
            product_id=request.product_id,
            location_id=request.location_id,
            current_quantity=current,
            delta=delta,
            projected_quantity=projected,
            reorder_level=reorder_level,
            warnings=StockPolicy.warnings_for(projected, reorder_level),
        )

    def to_response(self, result: AdjustStockResult) -> AdjustStockResponse:
        """Convert result to API response."""
        return AdjustStockResponse(
            snapshot=SnapshotResponse.from_entity(result.snapshot),
            movement=MovementResponse.from_entity(result.movement),
            warnings=[w.value for w in result.warnings],
        )

    @staticmethod
    def preview_to_response(preview: StockPreview) -> StockPreviewResponse:
        return StockPreviewResponse(
            product_id=preview.product_id,
            location_id=preview.location_id,
            current_quantity=preview.current_quantity,
            delta=preview.delta,
            projected_quantity=preview.projected_quantity,
            reorder_level=preview.reorder_level,
            warnings=[w.value for w in preview.warnings],
        )
