"""Tests for the x-plugin command line."""

from __future__ import annotations

import json

import pytest

from x_plugin.cli import build_parser, main
from x_plugin.config import ENV_MAPPING


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for env_var in ENV_MAPPING.values():
        monkeypatch.delenv(env_var, raising=False)


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_serve_defaults():
    args = build_parser().parse_args(["serve"])
    assert args.transport == "stdio"
    assert args.port == 8000


def test_tools_names(capsys, tmp_path):
    assert main(["--env-file", str(tmp_path / "none.env"), "tools", "--names"]) == 0

    lines = capsys.readouterr().out.split()
    assert lines[0] == "x_get_profile"
    assert lines[-1] == "x_get_trends"
    assert len(lines) == 9


def test_tools_definitions(capsys, tmp_path):
    assert main(["--env-file", str(tmp_path / "none.env"), "tools"]) == 0

    definitions = json.loads(capsys.readouterr().out)
    assert definitions[3]["name"] == "x_search_tweets"
    assert definitions[3]["parameters"]["required"] == ["query"]


def test_call_invalid_json(capsys, tmp_path):
    code = main(["--env-file", str(tmp_path / "none.env"), "call", "x_get_tweet", "-p", "{bad"])

    assert code == 2
    assert "Invalid --params JSON" in capsys.readouterr().err


def test_call_params_must_be_object(tmp_path):
    code = main(["--env-file", str(tmp_path / "none.env"), "call", "x_get_tweet", "-p", "[1]"])
    assert code == 2


def test_call_without_credentials(capsys, tmp_path):
    code = main(
        ["--env-file", str(tmp_path / "none.env"), "call", "x_get_tweet", "-p", '{"id": "1"}']
    )

    assert code == 1
    assert "X_API_KEY" in json.loads(capsys.readouterr().out)["error"]
