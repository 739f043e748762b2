import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Set

import query as q
from service.startgg_service import StartGGService

logger = logging.getLogger(__name__)


@dataclass
class DiscriminatorAggregate:
    counts: Dict[str, int] = field(default_factory=dict)
    tags: Dict[str, str] = field(default_factory=dict)
    # dict keys keep winners in discovery order
    winners: Dict[str, None] = field(default_factory=dict)

    def add_participant(self, discriminator: str, gamer_tag: str) -> None:
        self.counts[discriminator] = self.counts.get(discriminator, 0) + 1
        self.tags[discriminator] = gamer_tag

    def add_winner(self, discriminator: str) -> None:
        self.winners[discriminator] = None

    @property
    def winner_set(self) -> Set[str]:
        return set(self.winners)


def _discriminator(node: Optional[Dict]) -> Optional[str]:
    user = (node or {}).get("user") or {}
    return user.get("discriminator") or None


class TournamentProcessor:
    """Folds tournament participants and event winners into an aggregate."""

    def __init__(self, service: StartGGService):
        self.service = service

    def add_discriminators_for_slug(self, aggregate: DiscriminatorAggregate, slug: str) -> None:
        tournament = q.fetch_discriminators(self.service, slug)

        participants = (tournament.get("participants") or {}).get("nodes") or []
        added = 0
        for node in participants:
            discriminator = _discriminator(node)
            gamer_tag = node.get("gamerTag")
            if discriminator and gamer_tag:
                aggregate.add_participant(discriminator, gamer_tag)
                added += 1

        for event in tournament.get("events") or []:
            nodes = (event.get("standings") or {}).get("nodes") or []
            if not nodes:
                continue
            top = nodes[0]
            discriminator = _discriminator(top.get("player"))
            if top.get("placement") == 1 and discriminator:
                aggregate.add_winner(discriminator)
                logger.info("%s: %s", slug, discriminator)

        logger.debug("Processed %s: %s participants with discriminators", slug, added)

    def process_slugs(self, slugs: Iterable[str]) -> DiscriminatorAggregate:
        aggregate = DiscriminatorAggregate()
        for slug in slugs:
            logger.info("Processing tournament %s...", slug)
            self.add_discriminators_for_slug(aggregate, slug)
        logger.info(
            "Aggregated %s discriminators and %s winners",
            len(aggregate.counts),
            len(aggregate.winners),
        )
        return aggregate
