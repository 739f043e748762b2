"""Pytest configuration and shared fakes for the start.gg client."""

import os
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# The project modules live at the repo root
_root = Path(__file__).parent.parent
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))


def make_response(status_code=200, body=None, reason="OK"):
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.reason = reason
    response.json.return_value = body if body is not None else {}
    return response


def participant(tag, discriminator):
    return {"gamerTag": tag, "user": {"discriminator": discriminator} if discriminator else None}


def standing(discriminator, placement=1):
    return {"player": {"user": {"discriminator": discriminator}}, "placement": placement}


def tournament_body(participants, events=()):
    return {
        "data": {
            "tournament": {
                "participants": {"nodes": list(participants)},
                "events": [{"standings": {"nodes": nodes}} for nodes in events],
            }
        }
    }


@pytest.fixture
def session():
    return MagicMock()


def pytest_collection_modifyitems(config, items):
    if os.getenv("STARTGG_API_KEY"):
        return
    skip_online = pytest.mark.skip(reason="STARTGG_API_KEY not set")
    for item in items:
        if "online" in item.keywords:
            item.add_marker(skip_online)
