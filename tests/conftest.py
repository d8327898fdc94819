"""Shared fixtures for the bptf-prices test suite."""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

# Ensure src/ is importable
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from bptf_prices.client import EconomyClient
from bptf_prices.config import ClientConfig

TEST_KEY = "0123456789abcdef01234567"


# ── Helper factories ─────────────────────────────────────

def make_response(body=None, status=200, url="https://backpack.tf/api/test",
                  json_error=False):
    """Shorthand for a requests.Response-like mock."""
    resp = MagicMock()
    resp.status_code = status
    resp.url = url
    if json_error:
        resp.json.side_effect = ValueError("Expecting value")
    else:
        resp.json.return_value = body
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} Error")
    else:
        resp.raise_for_status.return_value = None
    return resp


def make_session(*responses):
    """A Session mock whose get() returns each response in turn
    (or the single response for every call)."""
    session = MagicMock()
    session.headers = {}
    if len(responses) == 1:
        session.get.return_value = responses[0]
    else:
        session.get.side_effect = list(responses)
    return session


# ── Fixtures ─────────────────────────────────────────────

@pytest.fixture
def session():
    """Session returning an empty successful envelope."""
    return make_session(make_response({"response": {"success": 1}}))


@pytest.fixture
def client(session):
    """EconomyClient wired to the `session` fixture (no network)."""
    c = EconomyClient(config=ClientConfig(api_key=TEST_KEY), session=session)
    yield c
    c.close()


def sent_query(session, call_index=-1):
    """The ordered query pairs passed to session.get for one call."""
    call = session.get.call_args_list[call_index]
    return call.kwargs["params"]
