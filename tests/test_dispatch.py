# tests/test_dispatch.py
import asyncio
from decimal import Decimal
from uuid import uuid4
from refillr.models.order import OrderStatus
from refillr.models.result import ErrorKind
from .fakes import CUSTOMER, offset_north

RIDERS = [f"rider-{n}" for n in range(10)]

async def test_concurrent_accepts_have_one_winner(db, merchant, dispatch_service):
    for rider_id in RIDERS:
        db.add_rider(rider_id)
    order = db.add_order(merchant)

    results = await asyncio.gather(*[
        dispatch_service.accept_order(rider_id, order.order_id) for rider_id in RIDERS
    ])

    winners = [rider_id for rider_id, result in zip(RIDERS, results) if result.success]
    assert len(winners) == 1
    losers = [result for result in results if not result.success]
    assert all(r.error == ErrorKind.ORDER_NO_LONGER_AVAILABLE for r in losers)
    assert all(r.message == "Order is no longer available" for r in losers)

    stored = db.order_rows[order.order_id]
    assert stored.status == OrderStatus.ACCEPTED
    assert stored.rider_id == winners[0]
    assert stored.accepted_at is not None
    assert db.update_attempts == len(RIDERS)

async def test_accept_returns_order_id(db, merchant, dispatch_service):
    db.add_rider("rider-1")
    order = db.add_order(merchant)

    result = await dispatch_service.accept_order("rider-1", str(order.order_id))

    assert result.success
    assert result.value == order.order_id

async def test_accept_unknown_order(db, dispatch_service):
    db.add_rider("rider-1")

    result = await dispatch_service.accept_order("rider-1", uuid4())

    assert result.error == ErrorKind.ORDER_NOT_FOUND
    assert result.message == "Order not found"

async def test_accept_requires_rider_profile(db, merchant, dispatch_service):
    order = db.add_order(merchant)

    result = await dispatch_service.accept_order(CUSTOMER, order.order_id)

    assert result.error == ErrorKind.MUST_REGISTER_AS_RIDER
    assert db.order_rows[order.order_id].status == OrderStatus.PENDING
    assert db.update_attempts == 0

async def test_accept_cancelled_order(db, merchant, dispatch_service):
    db.add_rider("rider-1")
    order = db.add_order(merchant, status=OrderStatus.CANCELLED)

    result = await dispatch_service.accept_order("rider-1", order.order_id)

    assert result.error == ErrorKind.ORDER_NO_LONGER_AVAILABLE

async def test_accept_malformed_id(db, dispatch_service):
    db.add_rider("rider-1")

    result = await dispatch_service.accept_order("rider-1", "42")

    assert result.error == ErrorKind.VALIDATION

async def test_dispatch_then_deliver(db, merchant, dispatch_service):
    db.add_rider("rider-1")
    order = db.add_order(merchant)
    await dispatch_service.accept_order("rider-1", order.order_id)

    dispatched = await dispatch_service.mark_dispatched("rider-1", order.order_id)
    assert dispatched.success
    assert dispatched.value.status == OrderStatus.DISPATCHED
    assert dispatched.value.dispatched_at is not None

    delivered = await dispatch_service.mark_delivered("rider-1", order.order_id)
    assert delivered.success
    assert delivered.value.status == OrderStatus.DELIVERED
    assert delivered.value.delivered_at is not None
    assert delivered.value.rider_id == "rider-1"

async def test_repeated_steps_leave_order_unchanged(db, merchant, dispatch_service):
    db.add_rider("rider-1")
    order = db.add_order(merchant)
    await dispatch_service.accept_order("rider-1", order.order_id)
    await dispatch_service.mark_dispatched("rider-1", order.order_id)

    again = await dispatch_service.mark_dispatched("rider-1", order.order_id)
    assert not again
    assert again.error == ErrorKind.NOT_PERMITTED

    await dispatch_service.mark_delivered("rider-1", order.order_id)
    snapshot = db.order_rows[order.order_id]

    again = await dispatch_service.mark_delivered("rider-1", order.order_id)
    assert not again
    assert db.order_rows[order.order_id] == snapshot

async def test_only_assigned_rider_advances(db, merchant, dispatch_service):
    db.add_rider("rider-1")
    db.add_rider("rider-2")
    order = db.add_order(merchant)
    await dispatch_service.accept_order("rider-1", order.order_id)

    result = await dispatch_service.mark_dispatched("rider-2", order.order_id)

    assert result.error == ErrorKind.NOT_PERMITTED
    assert db.order_rows[order.order_id].status == OrderStatus.ACCEPTED

async def test_deliver_requires_dispatch_first(db, merchant, dispatch_service):
    db.add_rider("rider-1")
    order = db.add_order(merchant)
    await dispatch_service.accept_order("rider-1", order.order_id)

    result = await dispatch_service.mark_delivered("rider-1", order.order_id)

    assert result.error == ErrorKind.NOT_PERMITTED
    assert db.order_rows[order.order_id].status == OrderStatus.ACCEPTED

async def test_refill_from_request_to_doorstep(db, merchant, order_service, dispatch_service):
    """A customer orders, two riders race, the winner delivers"""
    db.add_rider("rider-a")
    db.add_rider("rider-b")
    request = {
        "merchant_id": str(merchant.merchant_id),
        "tank_brand": "Gasul",
        "tank_size": "11kg",
        "quantity": 2,
        "delivery_location": offset_north(merchant.location, 1000).model_dump(),
        "delivery_address": "123 Burgos Ave",
    }

    created = await order_service.create_order(CUSTOMER, request)
    order_id = created.value
    assert db.order_rows[order_id].total_price == Decimal("1600")
    assert db.order_rows[order_id].status == OrderStatus.PENDING

    first, second = await asyncio.gather(
        dispatch_service.accept_order("rider-a", order_id),
        dispatch_service.accept_order("rider-b", order_id),
    )
    assert [first.success, second.success].count(True) == 1
    winner = "rider-a" if first.success else "rider-b"
    loser = "rider-b" if first.success else "rider-a"

    assert not await dispatch_service.mark_dispatched(loser, order_id)
    assert await dispatch_service.mark_dispatched(winner, order_id)
    assert await dispatch_service.mark_delivered(winner, order_id)
    assert not await dispatch_service.mark_delivered(winner, order_id)

    seen = await order_service.get_order_by_id(CUSTOMER, order_id)
    assert seen.value.status == OrderStatus.DELIVERED
    assert seen.value.rider_id == winner

    cancel = await order_service.cancel_order(CUSTOMER, order_id)
    assert cancel.error == ErrorKind.NOT_PERMITTED
