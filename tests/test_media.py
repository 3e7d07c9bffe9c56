from __future__ import annotations

from pathlib import Path

from s3db.media import MediaFile, guess_content_type


def test_guess_content_type() -> None:
    assert guess_content_type("cover.jpg") == "image/jpeg"
    assert guess_content_type("cover.JPG") == "image/jpeg"
    assert guess_content_type("archive") == "application/octet-stream"
    assert guess_content_type("cover.jpg", "image/avif") == "image/avif"


def test_from_path_reads_file(tmp_path: Path) -> None:
    path = tmp_path / "scan.pdf"
    path.write_bytes(b"%PDF-1.7")

    media = MediaFile.from_path(path)
    assert media.name == "scan.pdf"
    assert media.body == b"%PDF-1.7"
    assert media.resolved_content_type == "application/pdf"

    renamed = MediaFile.from_path(path, name="original.pdf", content_type="application/x-pdf")
    assert renamed.name == "original.pdf"
    assert renamed.resolved_content_type == "application/x-pdf"


def test_repr_omits_body() -> None:
    assert "secret-bytes" not in repr(MediaFile("a.bin", b"secret-bytes"))
