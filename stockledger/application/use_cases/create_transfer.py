"""Create Transfer Use Case."""

from collections import defaultdict
from decimal import Decimal

from stockledger.application.dto.requests import CreateTransferRequest
from stockledger.application.retry import run_with_conflict_retry
from stockledger.application.use_cases.transfer_base import TransferUseCase
from stockledger.config import get_logger, get_settings
from stockledger.core.entities.inventory import utcnow
from stockledger.core.entities.transfer import StockTransfer, StockTransferItem
from stockledger.core.exceptions import (
    LocationNotFoundError,
    ProductNotFoundError,
    ValidationError,
)

logger = get_logger(__name__)


class CreateTransferUseCase(TransferUseCase):
    """Create a pending transfer. No stock moves until completion."""

    @staticmethod
    def _validate(request: CreateTransferRequest) -> None:
        if request.from_location_id == request.to_location_id:
            raise ValidationError(
                "to_location_id",
                "Source and destination locations must be different",
                request.to_location_id,
            )
        if not request.items:
            raise ValidationError("items", "Transfer must contain at least one item")
        for index, item in enumerate(request.items):
            if item.quantity <= 0:
                raise ValidationError(
                    f"items[{index}].quantity",
                    "Quantity must be greater than zero",
                    item.quantity,
                )

    async def execute(self, request: CreateTransferRequest) -> StockTransfer:
        """Execute create transfer use case."""
        self._validate(request)
        logger.info(
            "create_transfer_started",
            from_location_id=request.from_location_id,
            to_location_id=request.to_location_id,
            items=len(request.items),
        )
        return await run_with_conflict_retry(
            self._create, request, retries=self._conflict_retries
        )

    async def _create(self, request: CreateTransferRequest) -> StockTransfer:
        store = await self._get_transfer_store()
        ledger = await self._get_ledger()
        policy = self._get_policy()
        catalog = ledger.catalog_store

        async with ledger.transaction() as conn:
            for field_name, location_id in (
                ("from_location_id", request.from_location_id),
                ("to_location_id", request.to_location_id),
            ):
                location = await catalog.get_location(location_id, conn=conn)
                if location is None:
                    raise LocationNotFoundError(location_id)
                if not location.is_active:
                    raise ValidationError(
                        field_name, f"Location {location_id} is inactive", location_id
                    )

            requested: dict[int, Decimal] = defaultdict(Decimal)
            for item in request.items:
                if await catalog.get_product(item.product_id, conn=conn) is None:
                    raise ProductNotFoundError(item.product_id)
                requested[item.product_id] += item.quantity

            if not policy.allow_negative_stock:
                for product_id, quantity in requested.items():
                    snapshot = await ledger.inventory_store.get_snapshot(
                        product_id, request.from_location_id, conn=conn
                    )
                    policy.check(
                        product_id,
                        snapshot.quantity if snapshot else Decimal("0"),
                        -quantity,
                        location_id=request.from_location_id,
                    )

            now = utcnow()
            transfer = StockTransfer(
                transfer_number=await store.next_transfer_number(
                    get_settings().ledger.transfer_number_prefix, now.date(), conn=conn
                ),
                from_location_id=request.from_location_id,
                to_location_id=request.to_location_id,
                notes=request.notes,
                requested_by_id=request.requested_by_id,
                requested_at=now,
                items=[
                    StockTransferItem(
                        product_id=item.product_id,
                        quantity=item.quantity,
                        notes=item.notes,
                    )
                    for item in request.items
                ],
            )
            transfer = await store.create_transfer(transfer, conn=conn)

        logger.info(
            "transfer_created",
            transfer_id=transfer.id,
            transfer_number=transfer.transfer_number,
        )
        return transfer
