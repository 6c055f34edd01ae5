from typing import Set


def tokenize(query: str) -> Set[str]:
    """
    Split a raw search query into lowercase word tokens.

    Only the single space character separates tokens. Empty pieces from
    leading, trailing or repeated spaces are dropped, so an empty query
    yields an empty set.
    """
    return {word.lower() for word in query.split(" ") if word}
