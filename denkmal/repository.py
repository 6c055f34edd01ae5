"""
Monument Repository.

Responsibilities:
- Read queries against the monument dataset.
- Translating SQLAlchemy failures into StorageError.

Non-Responsibilities:
- No scoring.
- No ranking.

Invariant:
Repositories must not encode search decisions. Substring predicates are
case-insensitive and treat the token literally (no LIKE wildcards).
"""

import functools
from datetime import date
from typing import Callable, List, Optional, Tuple

from sqlalchemy import String, func
from sqlalchemy.exc import SQLAlchemyError

from .database import (
    Address,
    Dating,
    District,
    Monument,
    MonumentType,
    Participant,
    address_rel,
    participant_rel,
)
from .errors import StorageError


def storage_errors(func_: Callable) -> Callable:
    """Re-raise SQLAlchemy errors from the wrapped query as StorageError."""
    @functools.wraps(func_)
    def wrapper(*args, **kwargs):
        try:
            return func_(*args, **kwargs)
        except SQLAlchemyError as e:
            raise StorageError(f"{func_.__name__} failed: {e}") from e
    return wrapper


def _contains(column, token: str):
    return func.unicode_lower(column, type_=String).contains(token.lower(), autoescape=True)


class MonumentRepository:
    """Read access to monuments and their catalog tables."""

    def __init__(self, session):
        self.session = session

    # Substring search

    @storage_errors
    def monuments_with_name_containing(self, token: str) -> List[Monument]:
        return (
            self.session.query(Monument)
            .filter(_contains(Monument.name, token))
            .all()
        )

    @storage_errors
    def monuments_with_street_containing(self, token: str) -> List[Tuple[Monument, str]]:
        """Return (monument, street) for every address whose street matches."""
        rows = (
            self.session.query(Monument, Address.street)
            .join(address_rel, address_rel.c.monument_id == Monument.id)
            .join(Address, Address.id == address_rel.c.address_id)
            .filter(_contains(Address.street, token))
            .all()
        )
        return [(monument, street) for monument, street in rows]

    @storage_errors
    def monuments_with_participant_containing(self, token: str) -> List[Tuple[Monument, str]]:
        """Return (monument, participant name) for every matching participant."""
        rows = (
            self.session.query(Monument, Participant.name)
            .join(participant_rel, participant_rel.c.monument_id == Monument.id)
            .join(Participant, Participant.id == participant_rel.c.participant_id)
            .filter(_contains(Participant.name, token))
            .all()
        )
        return [(monument, name) for monument, name in rows]

    # Catalog

    @storage_errors
    def all_monuments(self) -> List[Monument]:
        return self.session.query(Monument).order_by(Monument.id).all()

    @storage_errors
    def all_districts(self) -> List[District]:
        return self.session.query(District).order_by(District.id).all()

    @storage_errors
    def all_types(self) -> List[MonumentType]:
        return self.session.query(MonumentType).order_by(MonumentType.id).all()

    @storage_errors
    def all_participants(self) -> List[Participant]:
        return self.session.query(Participant).order_by(Participant.id).all()

    @storage_errors
    def monuments_in_area(
        self,
        latitude: float,
        longitude: float,
        latitude_delta: float,
        longitude_delta: float,
    ) -> List[Monument]:
        """
        Monuments with at least one address strictly inside a bounding box.

        Args:
            latitude: Latitude of the box centre
            longitude: Longitude of the box centre
            latitude_delta: Half height of the box in degrees
            longitude_delta: Half width of the box in degrees
        """
        return (
            self.session.query(Monument)
            .join(address_rel, address_rel.c.monument_id == Monument.id)
            .join(Address, Address.id == address_rel.c.address_id)
            .filter(
                Address.longitude > longitude - longitude_delta,
                Address.longitude < longitude + longitude_delta,
                Address.latitude > latitude - latitude_delta,
                Address.latitude < latitude + latitude_delta,
            )
            .distinct()
            .order_by(Monument.id)
            .all()
        )

    @storage_errors
    def min_date(self) -> Optional[date]:
        """Earliest start or end date of any dating, None if no dates are known."""
        candidates = [
            self.session.query(func.min(Dating.date_from)).scalar(),
            self.session.query(func.min(Dating.date_to)).scalar(),
        ]
        known = [d for d in candidates if d is not None]
        return min(known) if known else None

    @storage_errors
    def max_date(self) -> Optional[date]:
        """Latest start or end date of any dating, None if no dates are known."""
        candidates = [
            self.session.query(func.max(Dating.date_from)).scalar(),
            self.session.query(func.max(Dating.date_to)).scalar(),
        ]
        known = [d for d in candidates if d is not None]
        return max(known) if known else None
