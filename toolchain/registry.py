from __future__ import annotations

from typing import Any

from .base import CheckHandler


class CheckRegistry:
    """Analysis checks, run in the order they were registered."""

    def __init__(self) -> None:
        self._handlers: dict[str, CheckHandler] = {}

    def register(self, name: str, handler: CheckHandler) -> None:
        key = name.strip()
        if not key:
            raise ValueError("Check name cannot be empty")
        if key in self._handlers:
            raise ValueError(f"Check already registered: {key}")
        self._handlers[key] = handler

    def get(self, name: str) -> CheckHandler:
        if name not in self._handlers:
            raise KeyError(f"Unknown analysis check: {name}")
        return self._handlers[name]

    def names(self) -> list[str]:
        return list(self._handlers)


registry = CheckRegistry()


def register_check(name: str):
    def wrapper(func: CheckHandler) -> CheckHandler:
        registry.register(name, func)
        return func

    return wrapper


def run_check(name: str, ctx: Any) -> None:
    handler = registry.get(name)
    handler(ctx)
