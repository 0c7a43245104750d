"""Utility helpers for logging, rounding, and filesystem output."""

from __future__ import annotations

import json
import logging
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Any, Iterable


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(log_file: Path | None = None, verbose: bool = False) -> None:
    """Configure root logging to console and optionally a file."""
    level = logging.DEBUG if verbose else logging.INFO
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)


def write_text(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def to_json_script(payload: Any) -> str:
    """Serialize for embedding inside a <script> element."""
    text = json.dumps(payload, ensure_ascii=False, separators=(",", ":"), sort_keys=True)
    return text.replace("</", "<\\/")


def percent(numerator: int, denominator: int, digits: int = 0) -> float:
    """Percentage rounded half up, 0 when the denominator is empty."""
    if denominator <= 0:
        return 0.0
    raw = Decimal(numerator) * 100 / Decimal(denominator)
    quantum = Decimal(1).scaleb(-digits)
    return float(raw.quantize(quantum, rounding=ROUND_HALF_UP))


def format_report_lines(
    infos: Iterable[str],
    warnings: Iterable[str],
    errors: Iterable[str],
    *,
    ok_line: str | None = None,
) -> list[str]:
    lines: list[str] = []
    lines.extend(f"[INFO] {msg}" for msg in infos)
    lines.extend(f"[WARN] {msg}" for msg in warnings)
    errors = list(errors)
    lines.extend(f"[ERROR] {msg}" for msg in errors)
    if not errors and ok_line:
        lines.append(f"[OK] {ok_line}")
    return lines
