"""String similarity scoring for fuzzy record comparison."""

from typing import List, Sequence
from functools import lru_cache

from core.errors import InvalidArgumentError

# Winkler prefix bonus
PREFIX_SCALE = 0.1
MAX_PREFIX_LENGTH = 4


@lru_cache(maxsize=10000)
def jaro_winkler_similarity(s1: str, s2: str) -> float:
    """
    Calculate Jaro-Winkler similarity between two strings.

    Strings are compared case-insensitively after trimming. An empty
    input never scores, even against another empty input.

    Args:
        s1: First string
        s2: Second string

    Returns:
        float: Similarity score between 0 and 1
    """
    if not s1 or not s2:
        return 0.0
    if s1 == s2:
        return 1.0

    str1 = s1.strip().lower()
    str2 = s2.strip().lower()
    if str1 == str2:
        return 1.0

    len1 = len(str1)
    len2 = len(str2)

    match_distance = max(len1, len2) // 2 - 1
    if match_distance < 0:
        return 0.0

    str1_matches = [False] * len1
    str2_matches = [False] * len2
    matches = 0

    for i in range(len1):
        start = max(0, i - match_distance)
        end = min(i + match_distance + 1, len2)
        for j in range(start, end):
            if str2_matches[j] or str1[i] != str2[j]:
                continue
            str1_matches[i] = True
            str2_matches[j] = True
            matches += 1
            break

    if matches == 0:
        return 0.0

    transpositions = 0
    k = 0
    for i in range(len1):
        if not str1_matches[i]:
            continue
        while not str2_matches[k]:
            k += 1
        if str1[i] != str2[k]:
            transpositions += 1
        k += 1

    jaro = (
        matches / len1 +
        matches / len2 +
        (matches - transpositions / 2) / matches
    ) / 3

    prefix_length = 0
    max_prefix = min(MAX_PREFIX_LENGTH, len1, len2)
    while prefix_length < max_prefix and str1[prefix_length] == str2[prefix_length]:
        prefix_length += 1

    return min(1.0, jaro + prefix_length * PREFIX_SCALE * (1 - jaro))


def _check_lengths(values1: Sequence[str], values2: Sequence[str]) -> None:
    if len(values1) != len(values2):
        raise InvalidArgumentError(
            f"Value arrays must have the same length "
            f"({len(values1)} != {len(values2)})"
        )


def calculate_field_similarities(
    values1: Sequence[str],
    values2: Sequence[str]
) -> List[float]:
    """
    Similarity of each positional pair of values.

    Returns:
        List[float]: Scores between 0 and 100, one per position

    Raises:
        InvalidArgumentError: If the sequences differ in length
    """
    _check_lengths(values1, values2)
    return [
        jaro_winkler_similarity(v1, v2) * 100
        for v1, v2 in zip(values1, values2)
    ]


def calculate_average_similarity(
    values1: Sequence[str],
    values2: Sequence[str]
) -> float:
    """
    Mean similarity across positional pairs of values.

    Returns:
        float: Score between 0 and 100; 0 for empty sequences

    Raises:
        InvalidArgumentError: If the sequences differ in length
    """
    _check_lengths(values1, values2)
    if not values1:
        return 0.0
    total = sum(jaro_winkler_similarity(v1, v2) for v1, v2 in zip(values1, values2))
    return total / len(values1) * 100
