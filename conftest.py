"""Root conftest: pins test settings before debate_room.config is imported."""
from __future__ import annotations

import os
from pathlib import Path

ENV_FILE = Path(__file__).resolve().parent / ".env.test"


def _read_env(path: Path) -> dict[str, str]:
    values: dict[str, str] = {}
    for raw in path.read_text().splitlines():
        line = raw.strip()
        if line and not line.startswith("#") and "=" in line:
            key, _, value = line.partition("=")
            values[key.strip()] = value.strip()
    return values


if ENV_FILE.exists():
    for key, value in _read_env(ENV_FILE).items():
        os.environ.setdefault(key, value)

# Never let a developer's judge endpoint leak into the suite.
os.environ["JUDGE_URL"] = ""
