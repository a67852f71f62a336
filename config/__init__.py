from .parser import load_json_or_jsonc, strip_jsonc
from .settings import CompilerSettings, load_settings, settings_from_mapping

__all__ = [
    "CompilerSettings",
    "load_json_or_jsonc",
    "load_settings",
    "settings_from_mapping",
    "strip_jsonc",
]
