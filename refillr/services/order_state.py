# refillr/services/order_state.py
"""Order lifecycle: legal transitions, who may trigger them, what they stamp.

Every transition is later executed as a conditional update keyed on the
status the decision was based on, so a decision made here is only applied
if the persisted order is still in that status.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, NamedTuple, Optional, Set
import pytz
from ..models.order import Order, OrderStatus, TERMINAL_STATUSES

class ActorRole(str, Enum):
    """Relationship of a caller to a particular order"""
    CUSTOMER = "customer"
    MERCHANT_OWNER = "merchant_owner"
    ASSIGNED_RIDER = "assigned_rider"
    # Any registered rider, used only by the claim path
    RIDER = "rider"

class Transition(NamedTuple):
    source: OrderStatus
    target: OrderStatus
    roles: FrozenSet[ActorRole]

_CANCELLERS = frozenset({ActorRole.MERCHANT_OWNER, ActorRole.ASSIGNED_RIDER})

TRANSITIONS = (
    Transition(OrderStatus.PENDING, OrderStatus.ACCEPTED, frozenset({ActorRole.MERCHANT_OWNER})),
    Transition(OrderStatus.PENDING, OrderStatus.ACCEPTED, frozenset({ActorRole.RIDER})),
    Transition(OrderStatus.ACCEPTED, OrderStatus.DISPATCHED, frozenset({ActorRole.ASSIGNED_RIDER})),
    Transition(OrderStatus.DISPATCHED, OrderStatus.DELIVERED, frozenset({ActorRole.ASSIGNED_RIDER})),
    Transition(OrderStatus.PENDING, OrderStatus.CANCELLED, frozenset({ActorRole.CUSTOMER}) | _CANCELLERS),
    Transition(OrderStatus.ACCEPTED, OrderStatus.CANCELLED, _CANCELLERS),
    Transition(OrderStatus.DISPATCHED, OrderStatus.CANCELLED, _CANCELLERS),
    Transition(OrderStatus.IN_TRANSIT, OrderStatus.CANCELLED, _CANCELLERS),
)

# Timestamp column stamped when an order enters each status
TIMESTAMP_FIELDS = {
    OrderStatus.ACCEPTED: "accepted_at",
    OrderStatus.DISPATCHED: "dispatched_at",
    OrderStatus.DELIVERED: "delivered_at",
    OrderStatus.CANCELLED: "cancelled_at",
}

def roles_for(order: Order, caller_id: str, is_merchant_owner: bool) -> Set[ActorRole]:
    """Roles the caller holds on this order (possibly several, possibly none)"""
    roles = set()
    if order.customer_id == caller_id:
        roles.add(ActorRole.CUSTOMER)
    if order.rider_id is not None and order.rider_id == caller_id:
        roles.add(ActorRole.ASSIGNED_RIDER)
    if is_merchant_owner:
        roles.add(ActorRole.MERCHANT_OWNER)
    return roles

def find_transition(source: OrderStatus, target: OrderStatus, roles) -> Optional[Transition]:
    if source in TERMINAL_STATUSES:
        return None
    for transition in TRANSITIONS:
        if (transition.source == source and transition.target == target
                and transition.roles & set(roles)):
            return transition
    return None

def can_transition(source: OrderStatus, target: OrderStatus, roles) -> bool:
    return find_transition(source, target, roles) is not None

def transition_changes(target: OrderStatus, rider_id: Optional[str] = None,
                       cancellation_reason: Optional[str] = None,
                       now: Optional[datetime] = None) -> Dict[str, Any]:
    """Column values written when an order enters `target`"""
    changes: Dict[str, Any] = {"status": target}
    changes[TIMESTAMP_FIELDS[target]] = now or datetime.now(pytz.utc)
    if target == OrderStatus.ACCEPTED and rider_id:
        changes["rider_id"] = rider_id
    if target == OrderStatus.CANCELLED:
        changes["cancellation_reason"] = cancellation_reason
    return changes

def plan_transition(order: Order, target: OrderStatus, roles,
                    rider_id: Optional[str] = None,
                    cancellation_reason: Optional[str] = None,
                    now: Optional[datetime] = None) -> Optional[Dict[str, Any]]:
    """Changes to apply if `roles` may move `order` to `target`, else None"""
    if find_transition(order.status, target, roles) is None:
        return None
    return transition_changes(target, rider_id, cancellation_reason, now)
