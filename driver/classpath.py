from __future__ import annotations

import logging
import os
import sys
import sysconfig
from pathlib import Path
from typing import Any, Iterable, Protocol
from urllib.parse import urlparse
from urllib.request import url2pathname

from .errors import ClasspathResolutionError

logger = logging.getLogger("plugin_compiler")


class ExecutionContext(Protocol):
    def boot_locations(self) -> list[str] | None: ...

    def loaded_binary_locations(self) -> list[Any] | None: ...


class CurrentExecutionContext:
    """Introspects the running interpreter."""

    def boot_locations(self) -> list[str] | None:
        if getattr(sys, "frozen", False):
            return None
        paths = sysconfig.get_paths()
        locations: list[str] = []
        for key in ("stdlib", "platstdlib"):
            value = paths.get(key)
            if value and value not in locations:
                locations.append(value)
        return locations or None

    def loaded_binary_locations(self) -> list[Any] | None:
        path = getattr(sys, "path", None)
        if not isinstance(path, list):
            return None
        return list(path)


def location_to_path(location: Any) -> Path:
    if isinstance(location, Path):
        return location
    if not isinstance(location, str):
        raise ClasspathResolutionError(f"Location returned by the execution context is not a path: {location!r}")
    if location == "":
        return Path.cwd()

    parsed = urlparse(location)
    if parsed.scheme == "file":
        if parsed.netloc not in ("", "localhost"):
            raise ClasspathResolutionError(f"Location returned by the execution context is invalid: {location}")
        return Path(url2pathname(parsed.path))
    # a single letter scheme is a windows drive, not a url
    if parsed.scheme and len(parsed.scheme) > 1:
        raise ClasspathResolutionError(f"Location returned by the execution context is invalid: {location}")
    return Path(os.fspath(location))


def current_classpath(context: ExecutionContext) -> list[Path]:
    locations = context.loaded_binary_locations()
    if locations is None:
        raise ClasspathResolutionError("Unable to resolve classpath for the current execution context")
    return [location_to_path(location) for location in locations]


def assemble_classpath(context: ExecutionContext, extra_entries: Iterable[Path | str] = ()) -> list[Path]:
    """Build the compile classpath: boot locations, then the process's own, then ``extra_entries``.

    Entries are searched in order, so earlier ones shadow later ones. Duplicates are kept.
    """
    classpath: list[Path] = []

    boot = context.boot_locations()
    if boot is None:
        logger.warning("Boot class path is not supported, must be supplied on the command line")
    else:
        classpath.extend(Path(location) for location in boot)

    classpath.extend(current_classpath(context))
    classpath.extend(Path(entry) for entry in extra_entries)
    return classpath


def split_classpath(value: str) -> list[Path]:
    return [Path(part) for part in value.split(":") if part]
