import json
import os
from typing import Any

from . import paths


def stable_json_dumps(obj: Any) -> str:
    """Deterministic JSON for log lines: sorted keys, UTF-8, compact separators."""
    return json.dumps(obj, sort_keys=True, ensure_ascii=False, separators=(",", ":"), default=repr)


def append_jsonl(filename: str, record: dict, *, feature_guard: bool | None = None) -> None:
    """Append one JSON record to `filename` under the logs directory.

    Callers pass the feature flag as `feature_guard`; False suppresses the write.
    """
    if feature_guard is False:
        return
    path = os.path.join(paths.logs_dir(), os.path.basename(str(filename)))
    # Binary append with a single LF keeps lines identical across platforms.
    line = (stable_json_dumps(record) + "\n").encode("utf-8")
    with open(path, "ab") as f:
        f.write(line)
