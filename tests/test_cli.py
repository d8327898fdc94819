"""Tests for cli.py — argument parsing and command dispatch (no network)."""

import json
from concurrent.futures import Future
from unittest.mock import MagicMock

import pytest

from bptf_prices.cli import build_parser, load_config, run
from bptf_prices.config import API_KEY_ENV
from bptf_prices.errors import InvalidParameter, UpstreamError


def _resolved(value):
    fut = Future()
    fut.set_result(value)
    return fut


def _rejected(exc):
    fut = Future()
    fut.set_exception(exc)
    return fut


@pytest.fixture
def fake_client():
    return MagicMock()


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_currencies_dispatch(fake_client, capsys):
    fake_client.get_currencies.return_value = _resolved({"currencies": {"keys": {}}})
    args = build_parser().parse_args(["currencies", "--raw", "2"])
    assert run(args, fake_client) == 0
    fake_client.get_currencies.assert_called_once_with({"raw": 2})
    assert json.loads(capsys.readouterr().out) == {"currencies": {"keys": {}}}


def test_history_only_passes_given_fields(fake_client):
    fake_client.get_price_history.return_value = _resolved({"history": []})
    args = build_parser().parse_args(
        ["history", "--item", "Mann Co. Supply Crate Key", "--quality", "Strange"])
    assert run(args, fake_client) == 0
    fake_client.get_price_history.assert_called_once_with(
        {"item": "Mann Co. Supply Crate Key", "quality": "Strange"})


def test_special_items_command_name(fake_client):
    fake_client.get_special_items.return_value = _resolved({"items": []})
    args = build_parser().parse_args(["special-items"])
    assert run(args, fake_client) == 0
    fake_client.get_special_items.assert_called_once_with({})


def test_global_options():
    args = build_parser().parse_args(["--api-key", "k", "--debug", "prices", "--since", "5"])
    assert args.api_key == "k"
    assert args.debug
    assert args.since == 5


def test_invalid_parameter_exit_code(fake_client, capsys):
    fake_client.get_prices.side_effect = InvalidParameter("raw", 3, "{1, 2}")
    args = build_parser().parse_args(["prices", "--raw", "3"])
    assert run(args, fake_client) == 1
    assert capsys.readouterr().out == ""


def test_upstream_error_exit_code(fake_client):
    fake_client.get_currencies.return_value = _rejected(UpstreamError("HTTP 503"))
    args = build_parser().parse_args(["currencies"])
    assert run(args, fake_client) == 1


# ── Config loading ───────────────────────────────────────

def test_api_key_flag_wins_over_env(monkeypatch):
    monkeypatch.setenv(API_KEY_ENV, "envkey")
    args = build_parser().parse_args(["--api-key", "flagkey", "currencies"])
    assert load_config(args).api_key == "flagkey"


def test_env_key_used_without_flag(monkeypatch):
    monkeypatch.setenv(API_KEY_ENV, "envkey")
    args = build_parser().parse_args(["currencies"])
    assert load_config(args).api_key == "envkey"


def test_api_key_flag_keeps_env_defaults(monkeypatch):
    """--api-key goes through from_env, so every other field is the same."""
    monkeypatch.setenv(API_KEY_ENV, "envkey")
    args = build_parser().parse_args(["--api-key", "flagkey", "currencies"])
    cfg = load_config(args)
    env_cfg = load_config(build_parser().parse_args(["currencies"]))
    assert (cfg.api_base, cfg.timeout_sec, cfg.max_workers, cfg.user_agent) == \
        (env_cfg.api_base, env_cfg.timeout_sec, env_cfg.max_workers, env_cfg.user_agent)
