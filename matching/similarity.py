"""String Similarity Utilities.

Edit-distance based similarity used by the fuzzy matcher. Both functions
are pure and compare strings as given; callers lower-case the operands
before calling.

Examples:
    "smith" vs "smyth" -> distance 1, similarity 0.8
    "sales" vs "sales" -> distance 0, similarity 1.0
"""

from typing import List


def levenshtein_distance(s1: str, s2: str) -> int:
    """Classic Levenshtein distance with unit costs.

    Fills a (len(s1)+1) x (len(s2)+1) table where cell [i][j] holds the
    distance between the first i characters of s1 and the first j
    characters of s2.

    Args:
        s1: First string
        s2: Second string

    Returns:
        Minimum number of insertions, deletions and substitutions

    Examples:
        >>> levenshtein_distance("kitten", "sitting")
        3
    """
    rows = len(s1) + 1
    cols = len(s2) + 1
    dp: List[List[int]] = [[0] * cols for _ in range(rows)]

    for i in range(rows):
        dp[i][0] = i
    for j in range(cols):
        dp[0][j] = j

    for i in range(1, rows):
        for j in range(1, cols):
            if s1[i - 1] == s2[j - 1]:
                dp[i][j] = dp[i - 1][j - 1]
            else:
                dp[i][j] = 1 + min(dp[i - 1][j], dp[i][j - 1], dp[i - 1][j - 1])

    return dp[rows - 1][cols - 1]


def calculate_string_similarity(s1: str, s2: str) -> float:
    """Similarity score from 0.0 to 1.0 derived from edit distance.

    Computed as ``1 - distance / max(len(s1), len(s2))``. Two empty
    strings are identical and score 1.0.

    Args:
        s1: First string
        s2: Second string

    Returns:
        Similarity score from 0.0 to 1.0
    """
    max_len = max(len(s1), len(s2))
    if max_len == 0:
        return 1.0

    distance = levenshtein_distance(s1, s2)
    return 1.0 - (distance / max_len)
