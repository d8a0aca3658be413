from __future__ import annotations

import shlex
import shutil
import sys
from typing import Iterable


class SnowglobeError(RuntimeError):
    pass


class UnknownSceneError(SnowglobeError):
    pass


def log(msg: str) -> None:
    print(f"[snowglobe] {msg}", flush=True)


def log_cmd(cmd: Iterable[str]) -> None:
    log("▶ " + " ".join(shlex.quote(c) for c in cmd))


def die(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)
    raise SystemExit(1)


def which_ffmpeg() -> str | None:
    return shutil.which("ffmpeg")


def clamp01(value: float) -> float:
    return float(max(0.0, min(1.0, value)))


def safe_slug(text: str) -> str:
    out = text.strip().lower().replace(" ", "_")
    return "".join(ch for ch in out if ch.isalnum() or ch in "._-")


def bool_flag(value: str) -> bool:
    v = str(value).strip().lower()
    if v in {"1", "true", "yes", "y", "on"}:
        return True
    if v in {"0", "false", "no", "n", "off"}:
        return False
    raise ValueError(f"Expected a boolean value, got {value!r}")
