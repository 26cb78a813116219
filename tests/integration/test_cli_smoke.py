import json
from pathlib import Path

import pytest

from infrascan import cli
from infrascan.common.constants import EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS
from infrascan.common.http import HttpRequestError


class FakeHttpClient:
    fail_fragment: str | None = None

    def __init__(self, **_kwargs):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *_exc):
        return None

    def close(self):
        return None

    def post_form_json(self, _url, *, data, **_kwargs):
        if self.fail_fragment is not None and self.fail_fragment in data["data"]:
            raise HttpRequestError("HTTP status: 500", status_code=500)
        return {"elements": [{"type": "node", "id": 1, "lat": 1.0, "lon": 2.0}]}


@pytest.fixture
def fake_client(monkeypatch):
    FakeHttpClient.fail_fragment = None
    monkeypatch.setattr(cli, "HttpClient", FakeHttpClient)
    return FakeHttpClient


@pytest.mark.integration
def test_cli_snapshot_writes_full_payload(tmp_path: Path, fake_client):
    output = tmp_path / "out" / "snapshot.json"
    exit_code = cli.main(
        [
            "snapshot",
            "--lat",
            "1.0",
            "--lon",
            "2.0",
            "--radius",
            "250",
            "--config",
            "config/infrascan.yml",
            "--output",
            str(output),
            "--request-id",
            "req-test",
            "--log-file",
            str(tmp_path / "logs" / "req-test.log.jsonl"),
        ]
    )

    assert exit_code == EXIT_SUCCESS
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["radius"] == 250.0
    assert payload["summary"]["roads"] == "1 roads"
    assert payload["raw"]["roads"]["elements"][0]["id"] == 1
    assert (tmp_path / "logs" / "req-test.log.jsonl").exists()


@pytest.mark.integration
def test_cli_summary_only_and_partial_exit(capsys, fake_client):
    fake_client.fail_fragment = '["railway"]'
    exit_code = cli.main(["snapshot", "--lat", "1", "--lon", "2", "--summary-only"])

    assert exit_code == EXIT_PARTIAL
    payload = json.loads(capsys.readouterr().out)
    assert "raw" not in payload
    assert payload["summary"]["railways"] == "Error fetching data: 500"


@pytest.mark.integration
def test_cli_all_failed_is_hard_fail(tmp_path: Path, fake_client):
    fake_client.fail_fragment = "[out:json]"
    output = tmp_path / "snapshot.json"
    assert cli.main(["snapshot", "--lat", "1", "--lon", "2", "--output", str(output)]) == EXIT_HARD_FAIL
    assert json.loads(output.read_text(encoding="utf-8"))["summary"]["roads"] == "Error fetching data: 500"


@pytest.mark.integration
def test_cli_rejects_invalid_location(fake_client):
    assert cli.main(["snapshot", "--lat", "95", "--lon", "2"]) == EXIT_HARD_FAIL


@pytest.mark.integration
def test_cli_raw_data_groups_providers(capsys, fake_client):
    exit_code = cli.main(["raw-data", "--lat", "1", "--lon", "2", "--radius", "300"])

    assert exit_code == EXIT_SUCCESS
    payload = json.loads(capsys.readouterr().out)
    assert list(payload) == ["infrastructure"]
    assert payload["infrastructure"]["summary"]["roads"] == "1 roads"
