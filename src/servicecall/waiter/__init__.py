"""Waiters: poll an operation until a model-declared condition holds."""

from servicecall.waiter.acceptors import Outcome, first_match, matches
from servicecall.waiter.waiter import ResourceWaiter, Waiter, WaiterState

__all__ = [
    "Outcome",
    "ResourceWaiter",
    "Waiter",
    "WaiterState",
    "first_match",
    "matches",
]
