from __future__ import annotations

import json
import re
from pathlib import Path

_COMMENT = re.compile(r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*.*?\*/', re.DOTALL)
_TRAILING_COMMA = re.compile(r'("(?:\\.|[^"\\])*")|,(?=\s*[\]}])')


def _keep_strings(match: re.Match[str]) -> str:
    return match.group(1) or ""


def strip_jsonc(text: str) -> str:
    """Drop // and /* */ comments, then trailing commas, leaving string literals untouched."""
    without_comments = _COMMENT.sub(_keep_strings, text)
    return _TRAILING_COMMA.sub(_keep_strings, without_comments)


def load_json_or_jsonc(config_path: Path) -> dict:
    raw = Path(config_path).read_text(encoding="utf-8")
    try:
        data = json.loads(strip_jsonc(raw))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid config file {config_path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("Top-level config must be an object")
    return data
