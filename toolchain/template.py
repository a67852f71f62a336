"""Script templates: the annotated base classes plugin scripts compile into."""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from typing import Any, Callable

_TEMPLATE_ATTR = "__script_template__"


def script_template(*, file_extension: str, receiver: str = "plugin"):
    """Mark a class as a script template.

    Scripts whose file name ends with ``file_extension`` compile into a subclass
    of the decorated class. Inside the script body the instance is bound to the
    name given by ``receiver``.
    """
    if not file_extension.startswith("."):
        raise ValueError(f"Script file extension must start with '.': {file_extension}")
    if not receiver.isidentifier():
        raise ValueError(f"Script receiver must be an identifier: {receiver}")

    def wrapper(cls: type) -> type:
        setattr(cls, _TEMPLATE_ATTR, {"file_extension": file_extension, "receiver": receiver})
        return cls

    return wrapper


@dataclass(frozen=True, slots=True)
class ScriptDefinition:
    base_module: str
    base_name: str
    file_extension: str
    receiver: str

    @property
    def qualified_base(self) -> str:
        return f"{self.base_module}.{self.base_name}"

    def is_script(self, file_name: str) -> bool:
        return file_name.endswith(self.file_extension)

    @classmethod
    def from_annotated_template(cls, template: type) -> "ScriptDefinition":
        # Only the class's own annotation counts, subclasses must be annotated again.
        annotation = template.__dict__.get(_TEMPLATE_ATTR)
        if not isinstance(annotation, dict):
            raise ValueError(f"{template.__module__}.{template.__qualname__} is not annotated with @script_template")
        return cls(
            base_module=template.__module__,
            base_name=template.__qualname__,
            file_extension=annotation["file_extension"],
            receiver=annotation["receiver"],
        )

    @classmethod
    def load(cls, reference: str) -> "ScriptDefinition":
        module_name, sep, class_name = reference.partition(":")
        if not sep or not module_name or not class_name:
            raise ValueError(f"Script template must look like 'module:Class', got: {reference}")
        module = importlib.import_module(module_name)
        template = getattr(module, class_name, None)
        if not isinstance(template, type):
            raise ValueError(f"Script template class not found: {reference}")
        return cls.from_annotated_template(template)


@script_template(file_extension=".plugin.py", receiver="plugin")
class PluginScript:
    """Default base class for plugin scripts.

    Scripts register handlers on the implicit ``plugin`` receiver::

        @plugin.on("login")
        def greet(player):
            ...
    """

    def __init__(self, context: Any = None) -> None:
        self.context = context
        self.handlers: dict[str, list[Callable[..., Any]]] = {}

    def on(self, event: str):
        def wrapper(func: Callable[..., Any]) -> Callable[..., Any]:
            self.handlers.setdefault(event, []).append(func)
            return func

        return wrapper

    def dispatch(self, event: str, *args: Any, **kwargs: Any) -> list[Any]:
        return [handler(*args, **kwargs) for handler in self.handlers.get(event, [])]
