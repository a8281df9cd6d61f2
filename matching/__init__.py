"""Matching - Shared string similarity and fuzzy matching.

This package provides the domain-agnostic matching used by every record
resolver (customers, employees, companies):
- Levenshtein edit distance and the similarity score derived from it
- Three-tier fuzzy matching (exact, containment, token similarity)

Usage:
    from matching import is_fuzzy_match, matches_any_field, FieldMatch

    if matches_any_field([
        FieldMatch("sales", employee.department),
        FieldMatch("engineer", employee.job_title),
    ]):
        ...
"""

from matching.similarity import levenshtein_distance, calculate_string_similarity
from matching.fuzzy import (
    FieldMatch,
    TOKEN_SIMILARITY_THRESHOLD,
    is_fuzzy_match,
    matches_any,
    matches_any_field,
    normalize_term,
)

__all__ = [
    # Similarity
    "levenshtein_distance",
    "calculate_string_similarity",
    # Fuzzy matching
    "FieldMatch",
    "TOKEN_SIMILARITY_THRESHOLD",
    "is_fuzzy_match",
    "matches_any",
    "matches_any_field",
    "normalize_term",
]
