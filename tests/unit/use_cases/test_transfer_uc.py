"""Tests for the stock transfer workflow against a temporary database."""

import re
from decimal import Decimal

import pytest

from stockledger.application.dto.requests import (
    CancelTransferRequest,
    CompleteTransferRequest,
    CreateTransferRequest,
    DispatchTransferRequest,
    ReceivedItemRequest,
    TransferItemRequest,
)
from stockledger.application.use_cases import (
    CancelTransferUseCase,
    CompleteTransferUseCase,
    CreateTransferUseCase,
    DispatchTransferUseCase,
)
from stockledger.core.entities import MovementQuery, MovementType, TransferStatus
from stockledger.core.exceptions import (
    ConflictError,
    InsufficientStockError,
    InvalidTransitionError,
    LocationNotFoundError,
    ProductNotFoundError,
    TransferItemNotFoundError,
    TransferNotFoundError,
    ValidationError,
)
from stockledger.core.services import StockPolicy


@pytest.fixture
def collaborators(transfer_store, ledger):
    return {"transfer_store": transfer_store, "ledger": ledger, "policy": StockPolicy()}


@pytest.fixture
def create_uc(collaborators):
    return CreateTransferUseCase(**collaborators)


@pytest.fixture
def dispatch_uc(collaborators):
    return DispatchTransferUseCase(**collaborators)


@pytest.fixture
def complete_uc(collaborators):
    return CompleteTransferUseCase(**collaborators)


@pytest.fixture
def cancel_uc(collaborators):
    return CancelTransferUseCase(**collaborators)


def _create_request(catalog, *lines, **overrides) -> CreateTransferRequest:
    data = {
        "from_location_id": catalog.warehouse.id,
        "to_location_id": catalog.store.id,
        "requested_by_id": 4,
        "items": [
            TransferItemRequest(product_id=product.id, quantity=Decimal(qty))
            for product, qty in lines
        ],
    }
    data.update(overrides)
    return CreateTransferRequest(**data)


async def _stock_warehouse(ledger, catalog, product, quantity):
    await ledger.apply_movement(
        product.id, MovementType.PURCHASE, Decimal(quantity), 1,
        location_id=catalog.warehouse.id,
    )


def _received(transfer, *quantities):
    return [
        ReceivedItemRequest(item_id=item.id, received_quantity=Decimal(qty))
        for item, qty in zip(transfer.items, quantities)
    ]


class TestCreateTransfer:
    async def test_creates_pending_transfer(self, create_uc, catalog, inventory_store):
        transfer = await create_uc.execute(
            _create_request(catalog, (catalog.milk, "10"), (catalog.bread, "2"), notes="restock")
        )

        assert transfer.id is not None
        assert transfer.status == TransferStatus.PENDING
        assert re.fullmatch(r"ST-\d{8}-00001", transfer.transfer_number)
        assert [i.quantity for i in transfer.items] == [Decimal("10"), Decimal("2")]
        assert all(i.id is not None for i in transfer.items)
        assert (await inventory_store.list_movements(MovementQuery())).total == 0

    async def test_numbers_are_sequential_per_day(self, create_uc, catalog):
        first = await create_uc.execute(_create_request(catalog, (catalog.milk, "1")))
        second = await create_uc.execute(_create_request(catalog, (catalog.milk, "1")))

        assert first.transfer_number.endswith("-00001")
        assert second.transfer_number.endswith("-00002")
        assert first.transfer_number[:-5] == second.transfer_number[:-5]

    async def test_same_location_rejected(self, create_uc, catalog):
        request = _create_request(
            catalog, (catalog.milk, "1"), to_location_id=catalog.warehouse.id
        )
        with pytest.raises(ValidationError) as exc_info:
            await create_uc.execute(request)
        assert exc_info.value.details["field"] == "to_location_id"

    async def test_empty_items_rejected(self, create_uc, catalog):
        with pytest.raises(ValidationError):
            await create_uc.execute(_create_request(catalog))

    async def test_non_positive_quantity_rejected(self, create_uc, catalog):
        with pytest.raises(ValidationError):
            await create_uc.execute(_create_request(catalog, (catalog.milk, "0")))

    async def test_inactive_location_rejected(self, create_uc, catalog):
        request = _create_request(
            catalog, (catalog.milk, "1"), to_location_id=catalog.closed.id
        )
        with pytest.raises(ValidationError):
            await create_uc.execute(request)

    async def test_unknown_location(self, create_uc, catalog):
        with pytest.raises(LocationNotFoundError):
            await create_uc.execute(
                _create_request(catalog, (catalog.milk, "1"), from_location_id=9999)
            )

    async def test_unknown_product(self, create_uc, catalog, transfer_store):
        request = _create_request(catalog)
        request.items = [TransferItemRequest(product_id=9999, quantity=Decimal("1"))]
        with pytest.raises(ProductNotFoundError):
            await create_uc.execute(request)

    async def test_strict_policy_checks_source_stock(
        self, transfer_store, ledger, strict_policy, catalog
    ):
        await _stock_warehouse(ledger, catalog, catalog.milk, "5")
        use_case = CreateTransferUseCase(
            transfer_store=transfer_store, ledger=ledger, policy=strict_policy
        )

        with pytest.raises(InsufficientStockError):
            await use_case.execute(
                _create_request(catalog, (catalog.milk, "3"), (catalog.milk, "3"))
            )
        transfer = await use_case.execute(_create_request(catalog, (catalog.milk, "5")))
        assert transfer.status == TransferStatus.PENDING


class TestDispatchTransfer:
    async def test_dispatch(self, create_uc, dispatch_uc, catalog, inventory_store):
        created = await create_uc.execute(_create_request(catalog, (catalog.milk, "4")))

        transfer = await dispatch_uc.execute(
            DispatchTransferRequest(transfer_id=created.id, approved_by_id=9)
        )

        assert transfer.status == TransferStatus.IN_TRANSIT
        assert transfer.approved_by_id == 9
        assert transfer.approved_at is not None
        assert (await inventory_store.list_movements(MovementQuery())).total == 0

    async def test_dispatch_twice_is_conflict(self, create_uc, dispatch_uc, catalog):
        created = await create_uc.execute(_create_request(catalog, (catalog.milk, "4")))
        request = DispatchTransferRequest(transfer_id=created.id, approved_by_id=9)
        await dispatch_uc.execute(request)

        with pytest.raises(InvalidTransitionError):
            await dispatch_uc.execute(request)

    async def test_unknown_transfer(self, dispatch_uc):
        with pytest.raises(TransferNotFoundError):
            await dispatch_uc.execute(DispatchTransferRequest(transfer_id=404, approved_by_id=1))


class TestCompleteTransfer:
    async def test_moves_stock_between_locations(
        self, create_uc, dispatch_uc, complete_uc, ledger, inventory_store, catalog
    ):
        await _stock_warehouse(ledger, catalog, catalog.milk, "30")
        created = await create_uc.execute(_create_request(catalog, (catalog.milk, "10")))
        await dispatch_uc.execute(
            DispatchTransferRequest(transfer_id=created.id, approved_by_id=2)
        )

        result = await complete_uc.execute(
            CompleteTransferRequest(
                transfer_id=created.id,
                completed_by_id=3,
                received_items=_received(created, "10"),
            )
        )

        assert result.transfer.status == TransferStatus.COMPLETED
        assert result.transfer.completed_by_id == 3
        assert [e.movement.quantity for e in result.entries] == [Decimal("-10"), Decimal("10")]
        assert all(e.movement.movement_type == MovementType.TRANSFER for e in result.entries)
        assert all(e.movement.reference_id == created.id for e in result.entries)

        source = await inventory_store.get_snapshot(catalog.milk.id, catalog.warehouse.id)
        destination = await inventory_store.get_snapshot(catalog.milk.id, catalog.store.id)
        assert (source.quantity, destination.quantity) == (Decimal("20"), Decimal("10"))

    async def test_completing_twice_is_conflict(
        self, create_uc, complete_uc, ledger, transfer_store, inventory_store, catalog
    ):
        await _stock_warehouse(ledger, catalog, catalog.milk, "30")
        created = await create_uc.execute(_create_request(catalog, (catalog.milk, "10")))
        request = CompleteTransferRequest(
            transfer_id=created.id, completed_by_id=3, received_items=_received(created, "10")
        )
        await complete_uc.execute(request)

        with pytest.raises(ConflictError) as exc_info:
            await complete_uc.execute(request)

        assert isinstance(exc_info.value, InvalidTransitionError)
        assert exc_info.value.details["status"] == "completed"
        source = await inventory_store.get_snapshot(catalog.milk.id, catalog.warehouse.id)
        destination = await inventory_store.get_snapshot(catalog.milk.id, catalog.store.id)
        assert (source.quantity, destination.quantity) == (Decimal("20"), Decimal("10"))
        assert (await inventory_store.list_movements(MovementQuery())).total == 3
        stored = await transfer_store.get_transfer(created.id)
        assert (stored.status, stored.completed_by_id) == (TransferStatus.COMPLETED, 3)

    async def test_complete_directly_from_pending(
        self, create_uc, complete_uc, ledger, catalog
    ):
        await _stock_warehouse(ledger, catalog, catalog.bread, "8")
        created = await create_uc.execute(_create_request(catalog, (catalog.bread, "8")))

        result = await complete_uc.execute(
            CompleteTransferRequest(
                transfer_id=created.id, completed_by_id=1, received_items=_received(created, "8")
            )
        )
        assert result.transfer.status == TransferStatus.COMPLETED

    async def test_short_receipt_records_discrepancy(
        self, create_uc, complete_uc, ledger, inventory_store, catalog
    ):
        await _stock_warehouse(ledger, catalog, catalog.milk, "30")
        created = await create_uc.execute(_create_request(catalog, (catalog.milk, "10")))

        result = await complete_uc.execute(
            CompleteTransferRequest(
                transfer_id=created.id, completed_by_id=1, received_items=_received(created, "8")
            )
        )

        item = result.transfer.items[0]
        assert item.received_quantity == Decimal("8")
        assert item.discrepancy == Decimal("2")
        source = await inventory_store.get_snapshot(catalog.milk.id, catalog.warehouse.id)
        destination = await inventory_store.get_snapshot(catalog.milk.id, catalog.store.id)
        assert (source.quantity, destination.quantity) == (Decimal("20"), Decimal("8"))

    async def test_unreceived_lines_move_nothing(
        self, create_uc, complete_uc, ledger, inventory_store, catalog
    ):
        await _stock_warehouse(ledger, catalog, catalog.milk, "10")
        await _stock_warehouse(ledger, catalog, catalog.bread, "10")
        created = await create_uc.execute(
            _create_request(catalog, (catalog.milk, "5"), (catalog.bread, "5"))
        )

        result = await complete_uc.execute(
            CompleteTransferRequest(
                transfer_id=created.id,
                completed_by_id=1,
                received_items=_received(created, "5", "0"),
            )
        )

        assert len(result.entries) == 2
        bread = await inventory_store.get_snapshot(catalog.bread.id, catalog.warehouse.id)
        assert bread.quantity == Decimal("10")
        assert result.transfer.items[1].discrepancy == Decimal("5")

    async def test_nothing_received_rejected(self, create_uc, complete_uc, catalog):
        created = await create_uc.execute(_create_request(catalog, (catalog.milk, "5")))
        with pytest.raises(ValidationError):
            await complete_uc.execute(
                CompleteTransferRequest(
                    transfer_id=created.id,
                    completed_by_id=1,
                    received_items=_received(created, "0"),
                )
            )

    async def test_over_receipt_rejected(self, create_uc, complete_uc, catalog):
        created = await create_uc.execute(_create_request(catalog, (catalog.milk, "5")))
        with pytest.raises(ValidationError):
            await complete_uc.execute(
                CompleteTransferRequest(
                    transfer_id=created.id,
                    completed_by_id=1,
                    received_items=_received(created, "6"),
                )
            )

    async def test_unknown_item(self, create_uc, complete_uc, catalog):
        created = await create_uc.execute(_create_request(catalog, (catalog.milk, "5")))
        with pytest.raises(TransferItemNotFoundError):
            await complete_uc.execute(
                CompleteTransferRequest(
                    transfer_id=created.id,
                    completed_by_id=1,
                    received_items=[
                        ReceivedItemRequest(item_id=9999, received_quantity=Decimal("1"))
                    ],
                )
            )

    async def test_strict_policy_blocks_and_leaves_transfer_pending(
        self, create_uc, transfer_store, ledger, strict_policy, inventory_store, catalog
    ):
        created = await create_uc.execute(_create_request(catalog, (catalog.milk, "5")))
        strict = CompleteTransferUseCase(
            transfer_store=transfer_store, ledger=ledger, policy=strict_policy
        )

        with pytest.raises(InsufficientStockError):
            await strict.execute(
                CompleteTransferRequest(
                    transfer_id=created.id,
                    completed_by_id=1,
                    received_items=_received(created, "5"),
                )
            )

        stored = await transfer_store.get_transfer(created.id)
        assert stored.status == TransferStatus.PENDING
        assert (await inventory_store.list_movements(MovementQuery())).total == 0

    async def test_result_to_response(self, create_uc, complete_uc, ledger, catalog):
        await _stock_warehouse(ledger, catalog, catalog.milk, "5")
        created = await create_uc.execute(_create_request(catalog, (catalog.milk, "5")))
        result = await complete_uc.execute(
            CompleteTransferRequest(
                transfer_id=created.id, completed_by_id=1, received_items=_received(created, "4")
            )
        )

        response = complete_uc.result_to_response(result)
        assert response.transfer.status == "completed"
        assert len(response.movements) == 2


class TestCancelTransfer:
    async def test_cancel_appends_reason(self, create_uc, cancel_uc, catalog, inventory_store):
        created = await create_uc.execute(
            _create_request(catalog, (catalog.milk, "5"), notes="weekly restock")
        )

        transfer = await cancel_uc.execute(
            CancelTransferRequest(transfer_id=created.id, cancelled_by_id=2, reason="van broke")
        )

        assert transfer.status == TransferStatus.CANCELLED
        assert transfer.notes == "weekly restock\nCancelled: van broke"
        assert (await inventory_store.list_movements(MovementQuery())).total == 0

    async def test_cancel_in_transit(self, create_uc, dispatch_uc, cancel_uc, catalog):
        created = await create_uc.execute(_create_request(catalog, (catalog.milk, "5")))
        await dispatch_uc.execute(DispatchTransferRequest(transfer_id=created.id, approved_by_id=1))

        transfer = await cancel_uc.execute(CancelTransferRequest(transfer_id=created.id))
        assert transfer.status == TransferStatus.CANCELLED
        assert transfer.notes is None

    async def test_cancelled_transfer_cannot_complete(
        self, create_uc, cancel_uc, complete_uc, ledger, transfer_store, inventory_store, catalog
    ):
        await _stock_warehouse(ledger, catalog, catalog.milk, "5")
        created = await create_uc.execute(_create_request(catalog, (catalog.milk, "5")))
        await cancel_uc.execute(CancelTransferRequest(transfer_id=created.id, reason="wrong"))

        with pytest.raises(ConflictError):
            await complete_uc.execute(
                CompleteTransferRequest(
                    transfer_id=created.id,
                    completed_by_id=1,
                    received_items=_received(created, "5"),
                )
            )

        stored = await transfer_store.get_transfer(created.id)
        assert stored.status == TransferStatus.CANCELLED
        source = await inventory_store.get_snapshot(catalog.milk.id, catalog.warehouse.id)
        assert source.quantity == Decimal("5")

    async def test_completed_transfer_cannot_cancel(
        self, create_uc, complete_uc, cancel_uc, ledger, catalog
    ):
        await _stock_warehouse(ledger, catalog, catalog.milk, "5")
        created = await create_uc.execute(_create_request(catalog, (catalog.milk, "5")))
        await complete_uc.execute(
            CompleteTransferRequest(
                transfer_id=created.id, completed_by_id=1, received_items=_received(created, "5")
            )
        )

        with pytest.raises(InvalidTransitionError):
            await cancel_uc.execute(CancelTransferRequest(transfer_id=created.id))
