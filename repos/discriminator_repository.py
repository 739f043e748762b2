import json
import logging
from pathlib import Path
from typing import Dict, Set, Union

from repos.tournament_processor import DiscriminatorAggregate

logger = logging.getLogger(__name__)

DISCRIMINATORS_FILE = "discriminators.json"
WINNERS_FILE = "winnerDiscriminators.json"
ENTRANTS_FILE = "entrants.csv"


class DiscriminatorRepository:
    """Reads and writes the discriminator snapshots in a directory."""

    def __init__(self, directory: Union[str, Path] = "."):
        self._dir = Path(directory)

    @property
    def discriminators_path(self) -> Path:
        return self._dir / DISCRIMINATORS_FILE

    @property
    def winners_path(self) -> Path:
        return self._dir / WINNERS_FILE

    @property
    def entrants_path(self) -> Path:
        return self._dir / ENTRANTS_FILE

    def save(self, aggregate: DiscriminatorAggregate) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        pairs = [[discriminator, count] for discriminator, count in aggregate.counts.items()]
        self.discriminators_path.write_text(json.dumps(pairs), encoding="utf-8")
        self.winners_path.write_text(json.dumps(list(aggregate.winners)), encoding="utf-8")
        lines = [f"{tag},{aggregate.counts.get(discriminator)}" for discriminator, tag in aggregate.tags.items()]
        self.entrants_path.write_text("\n".join(lines), encoding="utf-8")
        logger.info("Wrote %s, %s and %s", self.discriminators_path, self.winners_path, self.entrants_path)

    def load_frequencies(self) -> Dict[str, int]:
        rows = json.loads(self.discriminators_path.read_text(encoding="utf-8"))
        if not isinstance(rows, list):
            raise ValueError(f"{self.discriminators_path} must contain a JSON array of [discriminator, count] pairs")
        frequencies: Dict[str, int] = {}
        for row in rows:
            if not isinstance(row, list) or len(row) != 2:
                raise ValueError(f"Malformed entry in {self.discriminators_path}: {row!r}")
            frequencies[str(row[0])] = int(row[1])
        return frequencies

    def load_winners(self) -> Set[str]:
        rows = json.loads(self.winners_path.read_text(encoding="utf-8"))
        if not isinstance(rows, list):
            raise ValueError(f"{self.winners_path} must contain a JSON array of discriminators")
        return {str(r) for r in rows}
