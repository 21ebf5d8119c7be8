"""String similarity used to suggest option names in error messages."""

from __future__ import annotations

SUGGESTION_THRESHOLD = 0.7


def jaro(a: str, b: str) -> float:
    """Return the Jaro similarity of *a* and *b* in ``[0.0, 1.0]``."""
    if a == b:
        return 1.0
    len_a, len_b = len(a), len(b)
    if not len_a or not len_b:
        return 0.0

    window = max(max(len_a, len_b) // 2 - 1, 0)
    matched_a = [False] * len_a
    matched_b = [False] * len_b

    matches = 0
    for i, ch in enumerate(a):
        lo = max(0, i - window)
        hi = min(i + window + 1, len_b)
        for j in range(lo, hi):
            if not matched_b[j] and b[j] == ch:
                matched_a[i] = matched_b[j] = True
                matches += 1
                break

    if not matches:
        return 0.0

    # Half the number of matched characters that are out of order.
    transpositions = 0
    j = 0
    for i in range(len_a):
        if not matched_a[i]:
            continue
        while not matched_b[j]:
            j += 1
        if a[i] != b[j]:
            transpositions += 1
        j += 1
    transpositions //= 2

    return (
        matches / len_a
        + matches / len_b
        + (matches - transpositions) / matches
    ) / 3.0


def similar(a: str, b: str, threshold: float = SUGGESTION_THRESHOLD) -> bool:
    return jaro(a, b) > threshold


def suggest(unknown: list[str], candidates: list[str]) -> list[tuple[str, str]]:
    """Pair each unknown key with every candidate it closely resembles."""
    return [(u, c) for u in unknown for c in candidates if similar(u, c)]
