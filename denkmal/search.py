"""
Search service: ranked full-text search over monuments.

One SearchService is built at start-up around the process-wide session
and passed to whoever needs it. A search tokenizes the query once, then
runs every facet (name, location, participant) through its matcher and
the ranker independently.
"""

from typing import Dict, List, Optional

from .config import Settings
from .errors import StorageError
from .logger import StructuredLogger, get_logger
from .matchers import FACETS, Candidate, build_matchers
from .normalize import tokenize
from .ranking import GROUP_KEYS, rank
from .repository import MonumentRepository


class SearchService:
    """Entry point for monument search and the in-memory search history."""

    def __init__(
        self,
        session,
        settings: Optional[Settings] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        self.settings = settings or Settings()
        self.logger = logger or get_logger()
        self.repository = MonumentRepository(session)
        self.matchers = build_matchers(
            self.repository, participant_search=self.settings.participant_search
        )
        self.group_key = GROUP_KEYS[self.settings.group_by]
        self._history: List[str] = []

    def search(self, query: str) -> Dict[str, List[Candidate]]:
        """
        Search monuments by name, location and participant.

        Args:
            query: Raw query, words separated by spaces

        Returns:
            Dict with keys "byName", "byLocation", "byParticipant", each a list
            of (aggregate score, monument) sorted by score descending

        Raises:
            StorageError: If any facet query fails; the whole search aborts
        """
        # Sorted so candidate order, and with it tie order, is reproducible
        tokens = sorted(tokenize(query))
        self.logger.debug("Search started", query=query, tokens=tokens)
        self.logger.record_search(len(tokens))

        results: Dict[str, List[Candidate]] = {}
        for facet in FACETS:
            matcher = self.matchers[facet]
            try:
                candidates = [c for token in tokens for c in matcher.match(token)]
            except StorageError as e:
                self.logger.record_storage_failure(type(e.__cause__ or e).__name__)
                self.logger.error("Search failed", query=query, facet=facet, error=str(e))
                raise
            results[facet] = rank(candidates, key=self.group_key)
            self.logger.record_facet(facet, len(candidates), len(results[facet]))

        self.logger.info(
            "Search complete",
            query=query,
            results={facet: len(ranked) for facet, ranked in results.items()},
        )
        return results

    def facet_availability(self) -> Dict[str, bool]:
        """Which facets actually query the database."""
        return {facet: self.matchers[facet].supported for facet in FACETS}

    def record_history(self, entry: str) -> None:
        self._history.append(entry)

    def get_history(self) -> List[str]:
        return list(self._history)
