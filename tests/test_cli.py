import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from conftest import FakeTransport, respond
from linkup.cli import cli, split_csv


@pytest.fixture(scope="session")
def runner():
    return CliRunner()


@pytest.fixture
def env(monkeypatch):
    for name in ("LINKUP_BASE_URL", "LINKUP_USER_AGENT", "LINKUP_MAX_RETRIES",
                 "LINKUP_MIN_BACKOFF", "LINKUP_MAX_BACKOFF", "LINKUP_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LINKUP_API_KEY", "test-key")
    monkeypatch.setenv("LINKUP_MIN_BACKOFF", "0.001")
    monkeypatch.setenv("LINKUP_MAX_BACKOFF", "0.001")


@pytest.fixture
def invoke(runner, env, tmp_path):
    """Run the CLI against a scripted transport."""
    def _invoke(args, *steps):
        transport = FakeTransport(*steps)
        with patch("linkup.api.client.RequestsTransport", return_value=transport):
            result = runner.invoke(
                cli, ["--config", str(tmp_path / "none.yaml"), *args], obj={}
            )
        return result, transport
    return _invoke


def test_search_prints_indented_json(invoke):
    result, transport = invoke(
        ["search", "-q", "hello", "--include", "go.dev, ,example.com", "--sources"],
        respond(200, b'{"ok":true}'),
    )
    assert result.exit_code == 0, result.output
    assert result.output == '{\n  "ok": true\n}\n'
    body = json.loads(transport.calls[0].body)
    assert body["q"] == "hello"
    assert body["includeDomains"] == ["go.dev", "example.com"]
    assert body["includeSources"] is True


def test_search_non_json_payload_printed_raw(invoke):
    result, _ = invoke(["search", "-q", "hello"], respond(200, b"plain text"))
    assert result.exit_code == 0
    assert result.output == "plain text\n"


def test_search_with_schema(invoke):
    result, transport = invoke(
        ["search", "-q", "x", "--output", "structured", "--schema", '{"type":"object"}'],
        respond(200, b"{}"),
    )
    assert result.exit_code == 0, result.output
    assert json.loads(transport.calls[0].body)["structuredOutputSchema"] == '{"type":"object"}'


def test_missing_api_key_exits_2(invoke, monkeypatch):
    monkeypatch.delenv("LINKUP_API_KEY")
    result, transport = invoke(["balance"], respond(200, b'{"balance":1}'))
    assert result.exit_code == 2
    assert "missing LINKUP_API_KEY" in result.output
    assert transport.calls == []


def test_api_error_exits_1(invoke):
    result, _ = invoke(["search", "-q", "x"], respond(422, b'{"message":"bad param"}'))
    assert result.exit_code == 1
    assert "error: linkup api error: bad param (status=422)" in result.output


def test_fetch(invoke):
    result, transport = invoke(
        ["fetch", "--url", "https://go.dev", "--render"],
        respond(200, b'{"markdown":"# Go"}'),
    )
    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {"markdown": "# Go"}
    assert json.loads(transport.calls[0].body) == {"url": "https://go.dev", "renderJs": True}


def test_fetch_without_url_fails(invoke):
    result, transport = invoke(["fetch"], respond(200))
    assert result.exit_code == 1
    assert "fetch url is empty" in result.output
    assert transport.calls == []


def test_balance(invoke):
    result, transport = invoke(["balance", "--base", "http://local.test/"], respond(200, b'{"balance": 3}'))
    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {"balance": 3.0}
    assert transport.calls[0].url == "http://local.test/credits/balance"


def test_retries_flag(invoke):
    result, transport = invoke(["balance", "--retries", "0"], respond(503))
    assert result.exit_code == 1
    assert "linkup: http 503" in result.output
    assert len(transport.calls) == 1


def test_unauthorized(invoke):
    result, _ = invoke(["balance"], respond(401))
    assert result.exit_code == 1
    assert "unauthorized" in result.output


def test_split_csv():
    assert split_csv("") == []
    assert split_csv(None) == []
    assert split_csv(" a, b ,,c ") == ["a", "b", "c"]
