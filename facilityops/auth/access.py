"""
Facility access policy.

Every facility-scoped resource asks the same question through this module:
may ``actor`` perform ``action`` on something that belongs to ``facility_id``?
Privileged roles may touch any facility; everybody else is confined to the
facilities listed in their ``managed_facilities``.
"""

import logging
from typing import List, Optional

from ..core.errors import ForbiddenError, ValidationError
from ..models.user import PRIVILEGED_ROLES

logger = logging.getLogger(__name__)

ACTIONS = ("create", "read", "update", "delete")


def is_privileged(actor: dict) -> bool:
    return actor.get("role") in PRIVILEGED_ROLES


def managed_facilities(actor: dict) -> List[str]:
    return list(actor.get("managed_facilities") or [])


def can_access(actor: dict, facility_id: Optional[str], action: str = "read") -> bool:
    if action not in ACTIONS:
        raise ValueError(f"Unknown action: {action}")
    if is_privileged(actor):
        return True
    allowed = bool(facility_id) and facility_id in managed_facilities(actor)
    if not allowed:
        logger.warning(
            f"[Access] {actor.get('email')} ({actor.get('role')}) denied {action} on facility {facility_id}"
        )
    return allowed


def ensure_access(actor: dict, facility_id: Optional[str], action: str = "read") -> None:
    if not can_access(actor, facility_id, action):
        raise ForbiddenError("You can only access resources of your managed facilities")


def resolve_create_facility(actor: dict, requested: Optional[str]) -> str:
    """Pick the facility a new resource belongs to."""
    if is_privileged(actor):
        if not requested:
            raise ValidationError("facility_id is required")
        return requested

    if requested:
        ensure_access(actor, requested, "create")
        return requested

    facilities = managed_facilities(actor)
    if not facilities:
        raise ValidationError("No managed facilities found")
    return facilities[0]


def scope_filters(actor: dict, requested: Optional[str] = None) -> Optional[list]:
    """
    Firestore filters restricting a list query to what ``actor`` may read.

    Returns None when the actor manages nothing, meaning the result is empty.
    """
    if requested:
        ensure_access(actor, requested, "read")
        return [("facility_id", "==", requested)]

    if is_privileged(actor):
        return []

    facilities = managed_facilities(actor)
    if not facilities:
        return None
    if len(facilities) == 1:
        return [("facility_id", "==", facilities[0])]
    return [("facility_id", "in", facilities)]


# Firestore rejects an ``in`` filter with more values than this
IN_FILTER_LIMIT = 30


def scope_filter_batches(actor: dict, requested: Optional[str] = None) -> List[list]:
    """
    ``scope_filters`` split into queries Firestore will accept.

    A manager of many facilities gets one ``in`` query per batch of
    ``IN_FILTER_LIMIT`` facilities. An empty list means nothing is readable.
    """
    filters = scope_filters(actor, requested)
    if filters is None:
        return []
    if not filters or filters[0][1] != "in":
        return [filters]

    field, _, facilities = filters[0]
    return [
        [(field, "in", facilities[start:start + IN_FILTER_LIMIT])]
        for start in range(0, len(facilities), IN_FILTER_LIMIT)
    ]
