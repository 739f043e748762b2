from typing import Any, Dict, Tuple

from service.startgg_service import GraphQlError, StartGGService

tournament_query = """
query TournamentQuery($slug: String) {
  tournament(slug: $slug) {
    name
    participants(query: {}) {
      pageInfo {
        total
      }
    }
  }
}
"""

## Participants with their user discriminator, plus the top standing of every event
discriminators_query = """
query DiscriminatorsQuery($slug: String) {
  tournament(slug: $slug) {
    participants(query: {perPage: 499}) {
      nodes {
        gamerTag
        user {
          discriminator
        }
      }
    }
    events {
      standings(query: {perPage: 1}) {
        nodes {
          player {
            user {
              discriminator
            }
          }
          placement
        }
      }
    }
  }
}
"""


def _tournament(data: Dict[str, Any], slug: str) -> Dict[str, Any]:
    tournament = (data or {}).get("tournament")
    if tournament is None:
        raise GraphQlError(f"Tournament not found: {slug}")
    return tournament


def fetch_discriminators(service: StartGGService, slug: str, *, rate_limited: bool = True) -> Dict[str, Any]:
    data = service.run_query(discriminators_query, {"slug": slug}, rate_limited=rate_limited)
    return _tournament(data, slug)


def fetch_participant_total(service: StartGGService, slug: str) -> Tuple[str, int]:
    """Return the tournament name and its total participant count."""
    tournament = _tournament(service.run_query(tournament_query, {"slug": slug}), slug)
    page_info = (tournament.get("participants") or {}).get("pageInfo") or {}
    return tournament.get("name"), int(page_info.get("total") or 0)
