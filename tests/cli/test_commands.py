"""CLI command tests using Click CliRunner.

Strategy: patch build_session so each command talks to a mocked proxy
transport instead of a running server.
"""

import json
from unittest.mock import patch

import httpx
import pytest
from click.testing import CliRunner
from rich.console import Console

from brews import BrewListView, BrewSession, ProxyClient
from cli.main import cli

BREWS = [
    {
        "id": "recB1",
        "fields": {
            "Coffee Name": "Kiamabara",
            "Brewer": "V60",
            "Brew Date": "2025-03-02T08:00:00.000Z",
            "Dose": 15,
            "Drink Weight": 250,
            "Enjoyment Rating": 8,
            "Created By": "ana@example.com",
        },
    },
    {
        "id": "recB2",
        "fields": {"Coffee Name": "Gesha Village", "Brewer": "Origami", "Created By": "ben@example.com"},
    },
]

COFFEES = [{"id": "recC1", "fields": {"Name/Producer": "Kiamabara", "Roaster": "Tim Wendelboe", "Opened": True}}]


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def proxy():
    """Canned proxy answers keyed by action; overwrite entries per test."""
    state = {
        "responses": {
            "list": (200, {"records": BREWS}),
            "listUserCoffees": (200, {"records": COFFEES, "isPersonal": False}),
            "getUserConfig": (200, {"hasPersonalBase": False}),
            "create": (200, {"id": "recNEW", "fields": {}}),
        },
        "requests": [],
    }

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        state["requests"].append(body)
        status, payload = state["responses"][body["action"]]
        return httpx.Response(status, json=payload)

    def build(config, token):
        client = ProxyClient(
            config.client.proxy_url, client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
        )
        return BrewSession(
            client=client, token=token, view=BrewListView(page_size=config.client.page_size)
        )

    with patch("cli.main.build_session", side_effect=build), patch("cli.main.console", Console(width=200)):
        yield state


def _actions(proxy):
    return [body["action"] for body in proxy["requests"]]


class TestBrews:
    def test_lists_history(self, runner, proxy):
        result = runner.invoke(cli, ["brews"])
        assert result.exit_code == 0, result.output
        assert "Kiamabara" in result.output
        assert "Gesha Village" in result.output
        assert "Page 1 of 1 (2 brews)" in result.output

    def test_filter(self, runner, proxy):
        result = runner.invoke(cli, ["brews", "--creator", "ben@example.com"])
        assert result.exit_code == 0, result.output
        assert "Gesha Village" in result.output
        assert "Kiamabara" not in result.output

    def test_facets(self, runner, proxy):
        result = runner.invoke(cli, ["brews", "--facets"])
        assert result.exit_code == 0
        assert "Origami, V60" in result.output

    def test_empty(self, runner, proxy):
        proxy["responses"]["list"] = (200, {"records": []})
        result = runner.invoke(cli, ["brews"])
        assert "No brews yet" in result.output

    def test_page_size_from_config(self, runner, proxy, tmp_path):
        config = tmp_path / "brewlog.yaml"
        config.write_text("client:\n  page_size: 1\n")
        result = runner.invoke(cli, ["--config", str(config), "brews", "--page", "2"])
        assert result.exit_code == 0, result.output
        assert "Page 2 of 2 (2 brews)" in result.output

    def test_proxy_error_exits_1(self, runner, proxy):
        proxy["responses"]["list"] = (404, {"error": "Could not find table Coffee Brews"})
        result = runner.invoke(cli, ["brews"])
        assert result.exit_code == 1
        assert "Could not find table" in result.output


class TestCoffees:
    def test_lists_open_coffees(self, runner, proxy):
        result = runner.invoke(cli, ["coffees"])
        assert result.exit_code == 0, result.output
        assert "recC1" in result.output
        assert "Tim Wendelboe" in result.output
        assert _actions(proxy) == ["listUserCoffees"]

    def test_logged_in_reads_user_config(self, runner, proxy):
        result = runner.invoke(cli, ["--token", "a.b.c", "coffees"])
        assert result.exit_code == 0, result.output
        assert _actions(proxy) == ["getUserConfig", "listUserCoffees"]


class TestLog:
    ARGS = ["log", "--coffee", "recC1", "--brewer", "V60", "--dose", "15", "--drink-weight", "250", "--rating", "8"]

    def test_requires_token(self, runner, proxy):
        result = runner.invoke(cli, self.ARGS, env={"BREWLOG_TOKEN": ""})
        assert result.exit_code == 1
        assert "requires a token" in result.output
        assert proxy["requests"] == []

    def test_saves_brew(self, runner, proxy):
        result = runner.invoke(cli, ["--token", "a.b.c", *self.ARGS, "--notes", "jammy"])
        assert result.exit_code == 0, result.output
        assert "Brew saved successfully!" in result.output
        create = proxy["requests"][-1]
        assert create["action"] == "create"
        assert create["data"]["fields"]["Coffee"] == ["recC1"]
        assert create["data"]["fields"]["Notes & Tasting"] == "jammy"

    def test_unknown_coffee(self, runner, proxy):
        args = ["--token", "a.b.c", *self.ARGS]
        args[args.index("recC1")] = "recNOPE"
        result = runner.invoke(cli, args)
        assert result.exit_code == 1
        assert "not found" in result.output
        assert "create" not in _actions(proxy)

    def test_invalid_rating(self, runner, proxy):
        args = ["--token", "a.b.c", *self.ARGS]
        args[args.index("8")] = "12"
        result = runner.invoke(cli, args)
        assert result.exit_code == 1
        assert "Invalid enjoyment" in result.output

    def test_expired_token(self, runner, proxy):
        proxy["responses"]["getUserConfig"] = (401, {"error": "Token expired"})
        result = runner.invoke(cli, ["--token", "a.b.c", *self.ARGS])
        assert result.exit_code == 1
        assert "session has expired" in result.output

    def test_forbidden(self, runner, proxy):
        proxy["responses"]["create"] = (403, {"error": "Access denied"})
        result = runner.invoke(cli, ["--token", "a.b.c", *self.ARGS])
        assert result.exit_code == 1
        assert "not authorized to log brews" in result.output


class TestWhoami:
    def test_anonymous(self, runner, proxy):
        result = runner.invoke(cli, ["whoami"], env={"BREWLOG_TOKEN": ""})
        assert "Not logged in" in result.output
        assert proxy["requests"] == []

    def test_personal(self, runner, proxy):
        proxy["responses"]["getUserConfig"] = (
            200,
            {"hasPersonalBase": True, "baseId": "appME", "apiKey": "patME"},
        )
        result = runner.invoke(cli, ["--token", "a.b.c", "whoami"])
        assert "Personal catalog" in result.output
        assert "appME" in result.output


def test_bad_config_exits(runner, tmp_path):
    config = tmp_path / "brewlog.yaml"
    config.write_text("client:\n  page_size: 0\n")
    result = runner.invoke(cli, ["--config", str(config), "brews"])
    assert result.exit_code == 1
    assert "Config error" in result.output
