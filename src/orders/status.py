"""Order status lifecycle.

    PENDING -> PROCESSING -> SHIPPED -> DELIVERED

Each status has at most one successor and DELIVERED is terminal. The table
below is the single source of truth; transitions are checked by membership,
so a request for the current status is rejected like any other illegal move.
"""
from enum import Enum
from typing import Dict, FrozenSet

from src.orders.exceptions import IllegalTransition


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"


TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
}


def allowed_transitions(status) -> FrozenSet[OrderStatus]:
    return TRANSITIONS[OrderStatus(status)]


def ensure_transition(current, requested) -> OrderStatus:
    """Return ``requested`` as an OrderStatus or raise IllegalTransition."""
    current = OrderStatus(current)
    requested = OrderStatus(requested)
    if requested not in TRANSITIONS[current]:
        raise IllegalTransition(current.value, requested.value)
    return requested
