import json
from pathlib import Path

import pytest

from core import util
from output.json_sink import JsonSink


def test_sink_stamps_envelope(tmp_path: Path):
    path = tmp_path / "nested" / "out.ndjson"
    sink = JsonSink(str(path), "node_energy", "2.0")
    sink.write({"seq": 1})
    sink.write({"seq": 2, "record_type": "node_energy"})
    lines = [json.loads(l) for l in path.read_text(encoding="utf-8").splitlines()]
    assert lines == [
        {"record_type": "node_energy", "schema_version": "2.0", "seq": 1},
        {"record_type": "node_energy", "schema_version": "2.0", "seq": 2},
    ]


def test_sink_rejects_other_record_types(tmp_path: Path):
    path = tmp_path / "out.ndjson"
    sink = JsonSink(str(path), "node_energy")
    with pytest.raises(ValueError):
        sink.write({"record_type": "snapshot"})
    assert not path.exists()


def test_cpu_arch_falls_back_to_unknown(monkeypatch):
    monkeypatch.setattr(util.platform, "machine", lambda: "")
    assert util.cpu_arch() == "unknown"
    monkeypatch.setattr(util.platform, "machine", lambda: "aarch64")
    assert util.cpu_arch() == "aarch64"


def test_finite_int():
    assert util.finite_int(3.9) == 3
    assert util.finite_int(float("nan")) == 0
    assert util.finite_int(float("inf"), default=-1) == -1
