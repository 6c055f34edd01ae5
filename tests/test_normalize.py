"""
Tests for query tokenization.
"""

from denkmal.normalize import tokenize


class TestTokenize:
    """Test splitting queries into tokens."""

    def test_duplicates_collapse_and_lowercase(self):
        """Repeated words collapse and every token is lowercased."""
        assert tokenize("Brandenburg Schiller Tor Tor") == {"brandenburg", "schiller", "tor"}

    def test_dedup_is_case_insensitive(self):
        """Words differing only in case are one token."""
        assert tokenize("Tor TOR tor") == {"tor"}

    def test_empty_query(self):
        """Empty input yields no tokens."""
        assert tokenize("") == set()

    def test_only_spaces(self):
        """A query of spaces yields no tokens."""
        assert tokenize("   ") == set()

    def test_consecutive_spaces_drop_empty_tokens(self):
        """Leading, trailing and repeated spaces do not produce empty tokens."""
        assert tokenize("  Neue   Wache ") == {"neue", "wache"}

    def test_splits_on_space_only(self):
        """Tabs, hyphens and punctuation stay inside a token."""
        assert tokenize("Charlottenburg-Wilmersdorf\tMitte") == {"charlottenburg-wilmersdorf\tmitte"}

    def test_umlauts_lowercased(self):
        """Non-ASCII letters are lowercased too."""
        assert tokenize("ÄGYPTISCHES Museum") == {"ägyptisches", "museum"}
