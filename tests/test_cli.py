from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from s3db import cli
from s3db.testing.memory_store import InMemoryObjectClient

BASE = ["--bucket", "b1", "--collection", "c1"]


def _run(capsys: pytest.CaptureFixture[str], client: InMemoryObjectClient, *argv: str) -> tuple[int, str, str]:
    code = cli.main([*BASE, *argv], client=client)
    captured = capsys.readouterr()
    return code, captured.out, captured.err


def test_put_get_ids_delete(tmp_path: Path, capsys, client: InMemoryObjectClient) -> None:
    client.put_object("b1", "c1/")
    source = tmp_path / "doc.json"
    source.write_text(json.dumps({"id": "u1", "title": "A"}), encoding="utf-8")

    code, out, _ = _run(capsys, client, "put", str(source))
    assert code == 0
    assert json.loads(out) == {"id": "u1"}

    code, out, _ = _run(capsys, client, "get", "u1")
    assert json.loads(out) == {"id": "u1", "title": "A"}

    code, out, _ = _run(capsys, client, "ids")
    assert json.loads(out) == ["u1"]

    code, out, _ = _run(capsys, client, "delete", "u1")
    assert json.loads(out) == {"deleted": "u1"}
    assert client.keys("b1") == ["c1/"]


def test_put_from_stdin(monkeypatch: pytest.MonkeyPatch, capsys, client: InMemoryObjectClient) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO('{"title": "B"}'))
    code, out, _ = _run(capsys, client, "--auto-create", "put", "-")
    assert code == 0
    doc_id = json.loads(out)["id"]
    assert f"c1/{doc_id}/data.json" in client.keys("b1")


def test_media_commands(tmp_path: Path, capsys, client: InMemoryObjectClient) -> None:
    client.put_object("b1", "c1/")
    image = tmp_path / "cover.png"
    image.write_bytes(b"png")

    code, out, _ = _run(capsys, client, "upload-media", "u1", str(image))
    assert json.loads(out) == {"id": "u1", "uploaded": ["cover.png"]}
    assert client.content_type("b1", "c1/u1/cover.png") == "image/png"

    code, out, _ = _run(capsys, client, "media", "u1")
    assert [entry["name"] for entry in json.loads(out)] == ["cover.png"]

    code, out, _ = _run(capsys, client, "delete-media", "u1", "cover.png")
    assert code == 0
    assert "c1/u1/cover.png" not in client.keys("b1")


def test_url_command(capsys, client: InMemoryObjectClient) -> None:
    client.put_object("b1", "c1/")
    code, out, _ = _run(capsys, client, "url", "u1", "--expires-in", "30")
    assert json.loads(out) == {"url": "https://signed.example/b1/c1/u1/data.json?X-Amz-Expires=30"}


def test_errors_exit_non_zero(capsys, client: InMemoryObjectClient) -> None:
    code, out, err = _run(capsys, client, "ids")
    assert code == 1
    assert out == ""
    assert "NotFoundError" in err

    client.put_object("b1", "c1/")
    code, _, err = _run(capsys, client, "delete", "ghost")
    assert code == 1
    assert "ghost" in err


def test_missing_credentials_reported(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    for name in ("S3_DB_REGION", "S3_DB_ACCESS_KEY_ID", "S3_DB_SECRET_ACCESS_KEY"):
        monkeypatch.delenv(name, raising=False)
    code = cli.main([*BASE, "ids"])
    assert code == 1
    assert "ConfigurationError" in capsys.readouterr().err


def test_missing_document_file_reported(tmp_path: Path, capsys, client: InMemoryObjectClient) -> None:
    client.put_object("b1", "c1/")
    code, out, err = _run(capsys, client, "put", str(tmp_path / "missing.json"))
    assert code == 1
    assert out == ""
    assert "ValidationError" in err
    assert "missing.json" in err
    assert client.keys("b1") == ["c1/"]


def test_missing_media_file_reported(tmp_path: Path, capsys, client: InMemoryObjectClient) -> None:
    client.put_object("b1", "c1/")
    code, _, err = _run(capsys, client, "upload-media", "u1", str(tmp_path / "gone.png"))
    assert code == 1
    assert "ValidationError" in err
    assert "gone.png" in err
    assert client.keys("b1") == ["c1/"]
