from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator

MAX_SEARCH_DEPTH = 1024
DEFAULT_SCRIPT_SUFFIX = ".plugin.py"


def _raise(error: OSError) -> None:
    raise error


def find_plugin_sources(
    input_dir: Path,
    *,
    suffix: str = DEFAULT_SCRIPT_SUFFIX,
    max_depth: int = MAX_SEARCH_DEPTH,
) -> Iterator[Path]:
    """Lazily yield files under ``input_dir`` whose name ends with ``suffix``.

    Files directly inside ``input_dir`` are at depth 1. Nothing deeper than
    ``max_depth`` is visited. Yield order follows the directory walk.
    """
    root = Path(input_dir)
    base_depth = len(root.parts)
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        depth = len(Path(dirpath).parts) - base_depth
        if depth + 1 >= max_depth:
            dirnames.clear()
        if depth + 1 > max_depth:
            continue
        for filename in filenames:
            if filename.endswith(suffix):
                yield Path(dirpath) / filename
