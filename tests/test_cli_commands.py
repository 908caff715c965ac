from __future__ import annotations

import hashlib
import json
from pathlib import Path

import pytest

from sigmf_toolkit import Recording, __version__, cli, create_archive, read_archive, write_samples


def _write_pair(directory: Path, name: str, recording: Recording, data: bytes) -> Path:
    meta_path = directory / f"{name}.sigmf-meta"
    meta_path.write_text(recording.to_json(), encoding="utf-8")
    (directory / f"{name}.sigmf-data").write_bytes(data)
    return meta_path


def _recording() -> Recording:
    recording = Recording("ci16_le", sample_rate=100.0)
    recording.add_capture(0, frequency=1e6)
    return recording


def test_validate_valid_metadata(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    meta = _write_pair(tmp_path, "rec", _recording(), b"")

    assert cli.main(["validate", str(meta), "--json"]) == 0

    output = json.loads(capsys.readouterr().out)
    assert output == {"rec": {"valid": True, "errors": []}}


def test_validate_reports_errors_and_exit_status(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    meta = tmp_path / "bad.sigmf-meta"
    meta.write_text(
        json.dumps({"global": {"core:datatype": "cx32_le", "core:version": "1.2.0"}, "captures": []}),
        encoding="utf-8",
    )

    assert cli.main(["validate", str(meta)]) == 1

    out = capsys.readouterr().out
    assert "bad: INVALID" in out
    assert "global.core:datatype: is not a valid datatype" in out


def test_validate_archive(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    archive = tmp_path / "session.sigmf"
    archive.write_bytes(create_archive([{"name": "a", "metadata": _recording()}, {"name": "b", "metadata": _recording()}]))

    assert cli.main(["validate", str(archive), "--json"]) == 0
    assert sorted(json.loads(capsys.readouterr().out)) == ["a", "b"]


def test_validate_missing_global_is_an_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    meta = tmp_path / "x.sigmf-meta"
    meta.write_text("{}", encoding="utf-8")

    assert cli.main(["validate", str(meta)]) == 2
    assert "missing or invalid global" in capsys.readouterr().err


def test_info_uses_sibling_data_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    meta = _write_pair(tmp_path, "rec", _recording(), write_samples(list(range(400)), "ci16_le"))

    assert cli.main(["info", str(meta), "--json"]) == 0

    summary = json.loads(capsys.readouterr().out)["rec"]
    assert summary["sample_count"] == 200
    assert summary["duration_s"] == pytest.approx(2.0)
    assert summary["captures"] == 1


def test_pack_and_unpack(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    src = tmp_path / "src"
    src.mkdir()
    first = _write_pair(src, "one", _recording(), b"\x01\x02\x03\x04")
    second = src / "two.sigmf-meta"
    second.write_text(_recording().to_json(), encoding="utf-8")
    archive = tmp_path / "bundle.sigmf"

    assert cli.main(["pack", str(first), str(second), "--output", str(archive), "--name", "bundle"]) == 0
    entries = read_archive(archive)
    assert [entry.name for entry in entries] == ["one", "two"]
    assert entries[0].data == b"\x01\x02\x03\x04"
    assert entries[1].data == b""

    out_dir = tmp_path / "out"
    assert cli.main(["unpack", str(archive), str(out_dir)]) == 0
    assert (out_dir / "one.sigmf-data").read_bytes() == b"\x01\x02\x03\x04"
    restored = Recording.from_json((out_dir / "two.sigmf-meta").read_text(encoding="utf-8"))
    assert restored.to_metadata() == _recording().to_metadata()
    assert "Extracted 2 recording(s)" in capsys.readouterr().out


def test_hash_and_verify(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    data = b"sigmf" * 100
    recording = _recording()
    recording.sha512 = hashlib.sha512(data).hexdigest().upper()
    meta = _write_pair(tmp_path, "rec", recording, data)
    data_path = tmp_path / "rec.sigmf-data"

    assert cli.main(["hash", str(data_path)]) == 0
    assert capsys.readouterr().out.strip() == hashlib.sha512(data).hexdigest()

    assert cli.main(["hash", str(data_path), "--meta", str(meta)]) == 0
    assert capsys.readouterr().out.startswith("OK ")

    data_path.write_bytes(b"tampered")
    assert cli.main(["hash", str(data_path), "--meta", str(meta)]) == 1
    assert capsys.readouterr().out.startswith("MISMATCH")


def test_hash_without_recorded_digest(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    meta = _write_pair(tmp_path, "rec", _recording(), b"abc")

    assert cli.main(["hash", str(tmp_path / "rec.sigmf-data"), "--meta", str(meta)]) == 1
    assert "no core:sha512" in capsys.readouterr().err


def test_samples_preview(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "rec.sigmf-data"
    path.write_bytes(write_samples([1, -1, 2, -2, 3, -3], "ci16_le"))

    assert cli.main(["samples", str(path), "--datatype", "ci16_le", "--offset", "1", "--count", "5", "--json"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["sample_count"] == 2
    assert payload["samples"] == [[2.0, -2.0], [3.0, -3.0]]


def test_samples_rejects_bad_datatype(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "rec.sigmf-data"
    path.write_bytes(b"\x00" * 4)

    assert cli.main(["samples", str(path), "--datatype", "cq16"]) == 2
    assert "Invalid datatype" in capsys.readouterr().err


def test_settings_file_is_honoured(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    settings = tmp_path / "settings.yaml"
    settings.write_text("json_indent: 0\n", encoding="utf-8")
    archive = tmp_path / "a.sigmf"
    archive.write_bytes(create_archive([{"name": "r", "metadata": _recording()}]))
    out_dir = tmp_path / "out"

    assert cli.main(["--config", str(settings), "unpack", str(archive), str(out_dir)]) == 0
    assert (out_dir / "r.sigmf-meta").read_text(encoding="utf-8").startswith('{\n"global"')


def test_version_command(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["version"]) == 0
    assert capsys.readouterr().out.strip() == __version__


def test_package_exposes_version_and_metadata_module() -> None:
    import sigmf_toolkit

    assert isinstance(sigmf_toolkit.__version__, str)
    assert sigmf_toolkit.__version__
    assert sigmf_toolkit.metadata.SIGMF_VERSION == sigmf_toolkit.SIGMF_VERSION
