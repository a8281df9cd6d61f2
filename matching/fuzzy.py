"""Fuzzy Matching Policy.

Three-tier matching shared by every record search domain:

1. Exact equality of the trimmed, lower-cased strings
2. Containment: either string contains the other
3. Token similarity: any pair of whitespace-separated words is equal, or
   both words have at least 3 characters and similarity above 0.7

The first tier that fires wins. A record with several searchable fields
matches when any one (search term, field value) pair matches.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from matching.similarity import calculate_string_similarity


# Word-level similarity must be strictly above this value
TOKEN_SIMILARITY_THRESHOLD = 0.7

# Words shorter than this only match on equality
MIN_TOKEN_LENGTH = 3


@dataclass(frozen=True)
class FieldMatch:
    """A search term paired with the record field it is compared against.

    Either side may be None; such pairs never match.
    """
    search_term: Optional[str]
    field_value: Optional[str]


def normalize_term(value: Optional[str]) -> str:
    """Trim and lower-case a value for comparison ("" for None)."""
    if value is None:
        return ""
    return value.strip().lower()


def is_fuzzy_match(search_term: Optional[str], field_value: Optional[str]) -> bool:
    """Check one search term against one field value.

    Args:
        search_term: Term supplied by the caller
        field_value: Value stored on the record

    Returns:
        True if any matching tier fires

    Examples:
        >>> is_fuzzy_match("John", "John Smith")
        True
        >>> is_fuzzy_match("Smyth", "Smith")
        True
        >>> is_fuzzy_match("Acme", "Initech")
        False
    """
    search = normalize_term(search_term)
    value = normalize_term(field_value)

    if not search or not value:
        return False

    # Tier 1: exact
    if value == search:
        return True

    # Tier 2: containment in either direction
    if search in value or value in search:
        return True

    # Tier 3: word-level similarity
    search_words = search.split()
    field_words = value.split()

    for search_word in search_words:
        for field_word in field_words:
            if search_word == field_word:
                return True

            if len(search_word) >= MIN_TOKEN_LENGTH and len(field_word) >= MIN_TOKEN_LENGTH:
                similarity = calculate_string_similarity(search_word, field_word)
                if similarity > TOKEN_SIMILARITY_THRESHOLD:
                    return True

    return False


def matches_any(search_term: Optional[str], field_values: Iterable[Optional[str]]) -> bool:
    """Check one search term against several field values (logical OR)."""
    return any(is_fuzzy_match(search_term, value) for value in field_values)


def matches_any_field(pairs: Iterable[FieldMatch]) -> bool:
    """Check a record's designated (term, field) pairs (logical OR).

    A record matches as soon as one pair matches, even when several search
    terms were supplied.
    """
    return any(is_fuzzy_match(pair.search_term, pair.field_value) for pair in pairs)
