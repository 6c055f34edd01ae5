"""
Per-facet field matchers.

A matcher turns one search token into candidate matches: every monument
whose designated field contains the token, paired with the score of that
field value against the token. Order is whatever the database returns;
ranking happens later.
"""

from typing import List, Tuple

from .database import Monument
from .repository import MonumentRepository
from .scoring import score

BY_NAME = "byName"
BY_LOCATION = "byLocation"
BY_PARTICIPANT = "byParticipant"

FACETS = (BY_NAME, BY_LOCATION, BY_PARTICIPANT)

Candidate = Tuple[float, Monument]


class FieldMatcher:
    """Base matcher. Subclasses fetch (monument, field value) rows."""

    facet = ""
    supported = True

    def __init__(self, repository: MonumentRepository):
        self.repository = repository

    def rows(self, token: str) -> List[Tuple[Monument, str]]:
        raise NotImplementedError

    def match(self, token: str) -> List[Candidate]:
        return [(score(value, token), monument) for monument, value in self.rows(token)]


class NameMatcher(FieldMatcher):
    facet = BY_NAME

    def rows(self, token: str) -> List[Tuple[Monument, str]]:
        return [(m, m.name) for m in self.repository.monuments_with_name_containing(token)]


class LocationMatcher(FieldMatcher):
    """Matches the street of any address linked to a monument."""

    facet = BY_LOCATION

    def rows(self, token: str) -> List[Tuple[Monument, str]]:
        return self.repository.monuments_with_street_containing(token)


class ParticipantMatcher(FieldMatcher):
    """Matches the name of any participant linked to a monument."""

    facet = BY_PARTICIPANT

    def rows(self, token: str) -> List[Tuple[Monument, str]]:
        return self.repository.monuments_with_participant_containing(token)


class UnsupportedFieldMatcher(FieldMatcher):
    """
    Stand-in for a facet that is switched off.

    Always yields no candidates and never raises, so the facet stays in
    the result with an empty list while `supported` tells callers why.
    """

    supported = False

    def __init__(self, repository: MonumentRepository, facet: str):
        super().__init__(repository)
        self.facet = facet

    def rows(self, token: str) -> List[Tuple[Monument, str]]:
        return []


def build_matchers(repository: MonumentRepository, participant_search: bool = True) -> dict:
    """
    Create one matcher per facet.

    Args:
        repository: Storage access shared by all matchers
        participant_search: Query participants, or stub the facet out

    Returns:
        Dict of facet key -> FieldMatcher, in FACETS order
    """
    participant = (
        ParticipantMatcher(repository)
        if participant_search
        else UnsupportedFieldMatcher(repository, BY_PARTICIPANT)
    )
    return {
        BY_NAME: NameMatcher(repository),
        BY_LOCATION: LocationMatcher(repository),
        BY_PARTICIPANT: participant,
    }
