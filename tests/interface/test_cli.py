"""Tests for CLI commands: help, study, queue, serve and config show."""

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from fakes import FakeGateway, make_items
from lexiqueue.application.config import resolve_config
from lexiqueue.interface.cli import app

runner = CliRunner()


@pytest.fixture
def fake_gateway(mock_home):
    gateway = FakeGateway(pages=[make_items("a", "b"), []], session={"xpEarned": 20})
    with patch("lexiqueue.application.factory.get_review_gateway", return_value=gateway):
        yield gateway


def test_cli_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "study" in result.stdout
    assert "queue" in result.stdout
    assert "serve" in result.stdout


# --- Study ---


def test_study_runs_until_complete(fake_gateway):
    result = runner.invoke(app, ["study"], input="\ng\n\ng\n")

    assert result.exit_code == 0, result.output
    assert "term-a" in result.stdout
    assert "tr-a" in result.stdout
    assert "Session complete!" in result.stdout
    assert "Reviewed: 2" in result.stdout
    assert [s.word_id for s in fake_gateway.submissions] == ["a", "b"]
    assert fake_gateway.list_calls[0]["reset_session"] is True
    assert fake_gateway.closed


def test_study_again_requeues_card(fake_gateway):
    result = runner.invoke(app, ["study"], input="\na\n\nq\n")

    assert result.exit_code == 0, result.output
    assert "Lapses: 1" in result.stdout
    assert "Session complete!" not in result.stdout
    assert len(fake_gateway.submissions) == 1


def test_study_reports_failed_commit(fake_gateway):
    fake_gateway.submit_error = RuntimeError("offline")

    result = runner.invoke(app, ["study"], input="\ng\n\nq\n")

    assert result.exit_code == 0, result.output
    assert "Not saved" in result.stdout
    assert "Reviewed: 0" in result.stdout


def test_study_exits_when_fetch_fails(fake_gateway):
    fake_gateway.list_error = RuntimeError("no network")

    result = runner.invoke(app, ["study"])

    assert result.exit_code == 1
    assert "no network" in result.stdout
    assert fake_gateway.closed


def test_study_passes_mode_and_category(fake_gateway):
    runner.invoke(app, ["study", "--mode", "review", "--category", "food"], input="\nq\n")
    call = fake_gateway.list_calls[0]
    assert call["mode"] == "review"
    assert call["category"] == "food"


# --- Queue ---


def test_queue_lists_terms(fake_gateway):
    result = runner.invoke(app, ["queue"])

    assert result.exit_code == 0, result.output
    assert "Cards: 2" in result.stdout
    assert "term-b" in result.stdout
    assert fake_gateway.submissions == []


def test_queue_json_output(fake_gateway):
    result = runner.invoke(app, ["queue", "--json", "--limit", "5"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["queue"] == ["term-a", "term-b"]
    assert data["sessionMeta"]["xpEarned"] == 20
    assert fake_gateway.list_calls[0]["limit"] == 5


# --- Serve ---


@patch("uvicorn.run")
def test_serve_command(mock_run):
    result = runner.invoke(app, ["serve", "--port", "9000"])

    assert result.exit_code == 0
    mock_run.assert_called_once_with(
        "lexiqueue.server:app", host="127.0.0.1", port=9000, reload=False
    )


# --- Config ---


def test_config_show_masks_token(mock_home, monkeypatch):
    monkeypatch.setenv("LEXIQUEUE_TOKEN", "super-secret")
    monkeypatch.setenv("LEXIQUEUE_LIMIT", "12")

    result = runner.invoke(app, ["config", "show"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["token"] == "***"
    assert data["limit"] == 12
    assert "super-secret" not in result.stdout


def test_verbosity_flag_reaches_config(fake_gateway):
    with patch("lexiqueue.interface.cli.resolve_config", wraps=resolve_config) as mock_resolve:
        result = runner.invoke(app, ["-vv", "queue"])

    assert result.exit_code == 0, result.output
    assert mock_resolve.call_args.args[0]["verbose"] == 2
