import json

import httpx
import pytest

from at_connect import cli
from at_connect.client import AtClient


def _patch_client(monkeypatch, handler):
    def factory(config):
        return AtClient(config=config, transport=httpx.MockTransport(handler))

    monkeypatch.setattr(cli, "AtClient", factory)


def test_network_lookup_runs_offline(monkeypatch, capsys):
    monkeypatch.delenv("AFRICASTALKING_API_KEY", raising=False)
    cli.main(["network", "63902"])

    output = json.loads(capsys.readouterr().out)
    assert output == {
        "code": "63902",
        "name": "Safaricom Kenya",
        "country": "Kenya",
        "known": True,
    }


def test_missing_credentials_exit_with_code_2(monkeypatch):
    monkeypatch.delenv("AFRICASTALKING_API_KEY", raising=False)
    monkeypatch.delenv("AFRICASTALKING_USERNAME", raising=False)
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["balance"])
    assert exc_info.value.code == 2


def test_balance_prints_json(monkeypatch, capsys):
    _patch_client(
        monkeypatch,
        lambda request: httpx.Response(200, json={"UserData": {"balance": "KES 10.00"}}),
    )
    cli.main(["--api-key", "key", "--username", "sandbox", "balance"])

    assert json.loads(capsys.readouterr().out) == {"balance": "KES 10.00"}


def test_send_sms_with_multiple_recipients(monkeypatch, capsys):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(201, json={"SMSMessageData": {"Message": "Sent", "Recipients": []}})

    _patch_client(monkeypatch, handler)
    cli.main(
        ["--api-key", "key", "--username", "sandbox", "send-sms", "Hi", "+254711000111", "+254722000222"]
    )

    assert b"to=%2B254711000111%2C%2B254722000222" in seen[0].content
    assert json.loads(capsys.readouterr().out)["message"] == "Sent"


def test_sdk_error_exits_with_code_1(monkeypatch, capsys):
    _patch_client(monkeypatch, lambda request: httpx.Response(500, json={"ErrorMessage": "boom"}))
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--api-key", "key", "--username", "sandbox", "--timeout", "5", "balance"])

    assert exc_info.value.code == 1
    assert "boom" in capsys.readouterr().err


def test_send_data_builds_bundle_request(monkeypatch, capsys):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(201, json={"entries": [{"phoneNumber": "+254711000111", "status": "Queued"}]})

    _patch_client(monkeypatch, handler)
    cli.main(
        ["--api-key", "key", "--username", "sandbox", "send-data", "datatest", "+254711000111", "2", "--unit", "GB"]
    )

    body = json.loads(seen[0].content)
    assert body["productName"] == "datatest"
    assert body["recipients"][0]["quantity"] == 2
    assert body["recipients"][0]["unit"] == "GB"
    assert json.loads(capsys.readouterr().out)["entries"][0]["status"] == "Queued"
