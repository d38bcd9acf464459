from __future__ import annotations

from typing import Any, Dict, List

import httpx
import pytest
import typer
from typer.testing import CliRunner

from cli.app import app
from cli.client import ApiClient
from cli.config import CLIConfig, load_config


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.status_payload: Dict[str, Any] = {
            "temperature": 21.5,
            "humidity": 40.0,
            "lastFetched": "2024-06-01T12:00:00Z",
            "sunrise": "05:12:00",
            "sunset": "21:31:00",
            "freshness": "fresh",
        }
        self.overrides: List[Dict[str, Any]] = []
        self.closed = False

    def get_status(self) -> Dict[str, Any]:
        return self.status_payload

    def override(self, temperature: float, humidity: float, sunrise: str, sunset: str) -> Dict[str, Any]:
        self.overrides.append(
            {"temperature": temperature, "humidity": humidity, "sunrise": sunrise, "sunset": sunset}
        )
        payload = dict(self.status_payload)
        payload.update(temperature=temperature, humidity=humidity)
        return payload

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


def _install_stub(monkeypatch, stub: StubClient) -> None:
    def factory(config):
        stub.config = config
        return stub

    monkeypatch.setattr("cli.app.ApiClient", factory)


def test_show_command(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["--base-url", "http://station.local:9000/", "show"])

    assert result.exit_code == 0
    assert "temperature: 21.5" in result.stdout
    assert "sunrise: 05:12:00" in result.stdout
    assert "freshness: fresh" in result.stdout
    assert stub.config.base_url == "http://station.local:9000"
    assert stub.closed is True


def test_show_command_without_fetch(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None)
    stub.status_payload.update(lastFetched=None, freshness="persisted_stale")
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["show"])

    assert result.exit_code == 0
    assert "last_fetched: never" in result.stdout
    assert "freshness: persisted_stale" in result.stdout


def test_override_command(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(
        app,
        ["override", "--temperature", "18.5", "--humidity", "55", "--sunrise", "06:00", "--sunset", "20:30"],
    )

    assert result.exit_code == 0
    assert "Override accepted" in result.stdout
    assert "temperature: 18.5" in result.stdout
    assert stub.overrides == [
        {"temperature": 18.5, "humidity": 55.0, "sunrise": "06:00", "sunset": "20:30"}
    ]
    assert stub.closed is True


def test_override_command_requires_all_values(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["override", "--temperature", "18.5"])

    assert result.exit_code != 0
    assert stub.overrides == []


def test_load_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "http://example.test/")
    monkeypatch.setenv("CLI_REQUEST_TIMEOUT", "-3")

    config = load_config()

    assert config == CLIConfig(base_url="http://example.test", timeout=10.0)


def test_api_client_reports_validation_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            422,
            json={"detail": [{"loc": ["body", "sunrise"], "msg": "Value error, invalid"}]},
        )

    client = ApiClient(CLIConfig(base_url="http://station.test"))
    client.close()
    client._client = httpx.Client(  # type: ignore[attr-defined]
        base_url="http://station.test", transport=httpx.MockTransport(handler)
    )

    with pytest.raises(typer.Exit) as excinfo:
        client.override(temperature=1.0, humidity=2.0, sunrise="x", sunset="20:00")

    assert excinfo.value.exit_code == 1
    client.close()
