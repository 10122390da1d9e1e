import pytest
import requests
import responses

from ec2_imds.cli import main
from ec2_imds.config_loader import ENV_OVERRIDES

BASE_URL = "http://169.254.169.254"
TOKEN_URL = f"{BASE_URL}/api/token"


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    for variable in ENV_OVERRIDES:
        monkeypatch.delenv(variable, raising=False)
    return str(tmp_path / "imds.yaml")


@responses.activate
def test_get_prints_payload(config_path, capsys):
    responses.add(responses.PUT, TOKEN_URL, body="token-1")
    responses.add(responses.GET, f"{BASE_URL}/meta-data/instance-id", body="i-abc")

    assert main(["get", "instance-id", "--config", config_path]) == 0
    assert capsys.readouterr().out == "i-abc\n"


@responses.activate
def test_get_uses_ipv6_override(config_path, capsys):
    responses.add(responses.PUT, "http://[fd00:ec2::254]/api/token", body="token-1")
    responses.add(
        responses.GET,
        "http://[fd00:ec2::254]/meta-data/public-ipv4",
        body="203.0.113.10",
    )

    assert main(["get", "public-ipv4", "--config", config_path, "--ip-version", "ipv6"]) == 0
    assert capsys.readouterr().out == "203.0.113.10\n"


@responses.activate
def test_get_not_found_exits_with_error(config_path, capsys):
    responses.add(responses.PUT, TOKEN_URL, body="token-1")
    responses.add(responses.GET, f"{BASE_URL}/meta-data/public-hostname", status=404)

    assert main(["get", "public-hostname", "--config", config_path]) == 1
    assert capsys.readouterr().out == ""


def test_get_unknown_command(config_path):
    assert main(["get", "kernel-id", "--config", config_path]) == 2


@responses.activate
def test_token_reports_failure(config_path):
    responses.add(
        responses.PUT,
        TOKEN_URL,
        body=requests.exceptions.ConnectionError("no route to host"),
    )

    assert main(["token", "--config", config_path]) == 1


@responses.activate
def test_token_does_not_print_token(config_path, capsys):
    responses.add(responses.PUT, TOKEN_URL, body="secret-token")

    assert main(["token", "--config", config_path, "--token-ttl", "60"]) == 0
    out = capsys.readouterr().out
    assert "secret-token" not in out
    assert "ttl=60s" in out
    assert [call.request.method for call in responses.calls] == ["PUT"]


@responses.activate
def test_token_retries_when_initial_fetch_failed(config_path, capsys):
    responses.add(
        responses.PUT,
        TOKEN_URL,
        body=requests.exceptions.ConnectTimeout("timed out"),
    )
    responses.add(responses.PUT, TOKEN_URL, body="late-token")

    assert main(["token", "--config", config_path]) == 0
    assert len(responses.calls) == 2
    assert "late-token" not in capsys.readouterr().out


def test_list_commands_is_default(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "instance-id\t/meta-data/instance-id" in out
    assert "list-versions\t/\n" in out
