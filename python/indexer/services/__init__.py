"""Projection services.

This module contains the projector handlers and the event router that
dispatches ledger events to them. Hosts go through the router; the handlers
themselves assume the payload type has already been checked.
"""

from indexer.services.router import (
    EventType,
    apply_event,
    apply_raw_event,
    parse_event,
    route_event,
)

__all__ = [
    "EventType",
    "apply_event",
    "apply_raw_event",
    "parse_event",
    "route_event",
]
