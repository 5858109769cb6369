from __future__ import annotations

import json
from pathlib import Path

from grouptable.io import log, paths


def test_logs_dir_prefers_env(monkeypatch, tmp_path):
    target = tmp_path / "primary"
    monkeypatch.setenv("GROUPTABLE_LOG_DIR", str(target))
    resolved = Path(paths.logs_dir())
    assert resolved == target.resolve()
    assert target.exists()


def test_logs_dir_defaults_to_cwd(monkeypatch, tmp_path):
    monkeypatch.delenv("GROUPTABLE_LOG_DIR", raising=False)
    monkeypatch.chdir(tmp_path)
    assert paths.logs_dir() == (tmp_path / ".logs").resolve()


def test_temp_root_override(monkeypatch, tmp_path):
    monkeypatch.setenv("GROUPTABLE_TMP", str(tmp_path))
    assert paths.temp_root() == tmp_path


def test_append_jsonl_is_sorted_and_lf_terminated(monkeypatch, tmp_path):
    monkeypatch.setenv("GROUPTABLE_LOG_DIR", str(tmp_path))
    log.append_jsonl("events.jsonl", {"b": 2, "a": "é"})
    log.append_jsonl("events.jsonl", {"c": 3})
    raw = (tmp_path / "events.jsonl").read_bytes()
    assert raw == '{"a":"é","b":2}\n{"c":3}\n'.encode("utf-8")
    assert [json.loads(x) for x in raw.decode("utf-8").splitlines()] == [{"a": "é", "b": 2}, {"c": 3}]


def test_feature_guard_false_suppresses(monkeypatch, tmp_path):
    monkeypatch.setenv("GROUPTABLE_LOG_DIR", str(tmp_path))
    log.append_jsonl("events.jsonl", {"a": 1}, feature_guard=False)
    assert not (tmp_path / "events.jsonl").exists()
