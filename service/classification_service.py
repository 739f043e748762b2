import logging
import unicodedata
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set, Tuple

import query as q
from repos.discriminator_repository import DiscriminatorRepository
from service.startgg_service import StartGGService

logger = logging.getLogger(__name__)


def name_sort_key(name: str) -> Tuple[str, str, str]:
    """Collation key close to ICU root order, independent of the host locale.

    Compares base letters first, then accents, then case with lowercase first.
    """
    folded = name.casefold()
    base = "".join(c for c in unicodedata.normalize("NFKD", folded) if not unicodedata.combining(c))
    return base, folded, name.swapcase()


@dataclass
class ClassificationResult:
    valid: List[Tuple[str, int]] = field(default_factory=list)
    invalid: List[str] = field(default_factory=list)


def classify_participants(
    participants: Iterable[Dict],
    winner_discriminators: Set[str],
    frequencies: Dict[str, int],
) -> ClassificationResult:
    """Split participants into valid (seen before, never won) and invalid.

    Valid entries carry their tournament count and are ordered by count
    descending, then name. Invalid entries are ordered by name.
    """
    result = ClassificationResult()
    for node in participants:
        user = node.get("user") or {}
        discriminator = user.get("discriminator")
        if not discriminator:
            continue
        gamer_tag = node.get("gamerTag") or ""
        if discriminator not in winner_discriminators and discriminator in frequencies:
            result.valid.append((gamer_tag, frequencies[discriminator]))
        else:
            result.invalid.append(gamer_tag)

    result.valid.sort(key=lambda entry: (-entry[1], name_sort_key(entry[0])))
    result.invalid.sort(key=name_sort_key)
    return result


def format_valid(result: ClassificationResult) -> str:
    lines = [f"{name},{count}" for name, count in result.valid]
    return f"valid ({len(result.valid)}):\n" + "\n".join(lines)


def format_invalid(result: ClassificationResult) -> str:
    return f"\ninvalid ({len(result.invalid)}):\n" + "\n".join(result.invalid)


def format_report(result: ClassificationResult) -> str:
    return format_valid(result) + "\n" + format_invalid(result)


class ClassificationService:
    """Checks a tournament's entrants against the persisted discriminator snapshots."""

    def __init__(self, service: StartGGService, repository: DiscriminatorRepository):
        self.service = service
        self.repository = repository

    def classify(self, slug: str) -> ClassificationResult:
        winners = self.repository.load_winners()
        frequencies = self.repository.load_frequencies()
        logger.info("Loaded %s discriminators and %s winners", len(frequencies), len(winners))

        tournament = q.fetch_discriminators(self.service, slug, rate_limited=False)
        participants = (tournament.get("participants") or {}).get("nodes") or []
        result = classify_participants(participants, winners, frequencies)
        logger.info("%s: %s valid, %s invalid", slug, len(result.valid), len(result.invalid))
        return result
