from __future__ import annotations

import json
from pathlib import Path

from rawgraph.replay.cli import load_responses, main


def _write(tmp_path: Path, name: str, payload) -> Path:
    path = tmp_path / name
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def _hits(*rows):
    return {"hits": {"total": len(rows), "hits": [{"_source": row} for row in rows]}}


def test_load_responses_shapes(tmp_path: Path):
    single = _write(tmp_path, "single.json", _hits())
    listed = _write(tmp_path, "listed.json", [_hits(), _hits()])
    keyed = _write(tmp_path, "keyed.json", {"logs-a": _hits()})
    assert list(load_responses(single)) == ["segment-0"]
    assert list(load_responses(listed)) == ["segment-0", "segment-1"]
    assert list(load_responses(keyed)) == ["logs-a"]


def test_replay_prints_series(tmp_path: Path, capsys):
    responses = _write(
        tmp_path,
        "responses.json",
        [
            _hits({"ts": "2020-01-01T00:01:00Z", "cpu": 20}),
            _hits({"ts": "2020-01-01T00:00:00Z", "cpu": 10, "mem": 1}),
        ],
    )
    code = main([str(responses), "--time-field", "ts", "--series", "cpu", "mem"])
    assert code == 0
    result = json.loads(capsys.readouterr().out)
    assert result["hits"] == 2
    assert result["renders"] == 2
    cpu, mem = result["series"]
    assert cpu["points"] == [[1577836860000, 20], [1577836800000, 10]]
    assert mem["hit_count"] == 1


def test_replay_reports_error(tmp_path: Path, capsys):
    responses = _write(tmp_path, "responses.json", [{"error": {"reason": "shard failure"}}])
    output = tmp_path / "out.json"
    code = main([str(responses), "--output", str(output)])
    assert code == 1
    assert json.loads(output.read_text(encoding="utf-8"))["error"] == "shard failure"
    assert "shard failure" in capsys.readouterr().err
