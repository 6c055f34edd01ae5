"""
Similarity score between a matched field value and a search token.

The score is the share of the field covered by occurrences of the token:
every case-insensitive occurrence is removed and the remainder counts as
mismatch.
"""

from .errors import DegenerateInputError


def score(field_value: str, token: str) -> float:
    """
    Score how much of field_value is made up of token.

    Args:
        field_value: Text of the matched column (monument name, street, ...)
        token: Lowercase search token

    Returns:
        1.0 when the field equals the token, 0.0 when the token does not occur

    Raises:
        DegenerateInputError: If field_value is empty
    """
    if not field_value:
        raise DegenerateInputError("Cannot score an empty field value")

    mismatch = field_value.lower().replace(token.lower(), "")
    return 1 - len(mismatch) / len(field_value)
