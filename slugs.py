"""Tournament slugs for the Only Noobs series on start.gg."""

from typing import Dict, List

SERIES_PREFIX = "only-noobs"
FIRST_INDEX = 1
LAST_INDEX = 199
CLASSIFY_SLUG = "only-noobs-200"

# The organizer published these editions under a different slug.
SLUG_OVERRIDES: Dict[int, str] = {
    4: "onlynoobs-4",
    11: "onlynoobs-11",
    34: "onlynoobs-34-1",
    49: "onlynoobs-49",
    102: "only-noobs-102-1",
    171: "only-noobs-171-1",
}


def tournament_slug(n: int) -> str:
    if n < 1:
        raise ValueError(f"Tournament index must be >= 1, got {n}")
    if n == 1:
        return SERIES_PREFIX
    return SLUG_OVERRIDES.get(n, f"{SERIES_PREFIX}-{n}")


def series_slugs(first: int = FIRST_INDEX, last: int = LAST_INDEX) -> List[str]:
    if last < first:
        raise ValueError(f"last ({last}) must be >= first ({first})")
    return [tournament_slug(n) for n in range(first, last + 1)]
