from __future__ import annotations

import importlib
from typing import Any, Mapping

from ..errors import ConfigLoadError
from .script import ScriptSubmodule
from .static import StaticSubmodule

__all__ = ["ScriptSubmodule", "StaticSubmodule", "build_submodule", "load_object"]


def load_object(path: str) -> Any:
    """Import ``package.module:Attribute``."""
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigLoadError(f"Expected 'module:Attribute', got {path!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigLoadError(f"Cannot import {module_name}: {e}") from e
    try:
        return getattr(module, attr)
    except AttributeError as e:
        raise ConfigLoadError(f"{module_name} has no attribute {attr!r}") from e


def build_submodule(name: str, spec: Mapping[str, Any]) -> Any:
    """Build a submodule adapter from its control-file entry."""

    if not isinstance(spec, Mapping):
        raise ConfigLoadError(f"submodules.{name} must be a mapping")

    if "command" in spec:
        command = spec["command"]
        if isinstance(command, str):
            command = [command]
        return ScriptSubmodule(
            name=name,
            argv=tuple(str(a) for a in command),
            timeout_s=spec.get("timeout"),
        )
    if "class" in spec:
        factory = load_object(str(spec["class"]))
        try:
            return factory(**dict(spec.get("args") or {}))
        except Exception as e:
            raise ConfigLoadError(f"submodules.{name}: cannot build {spec['class']}: {e}") from e
    if "static" in spec:
        return StaticSubmodule.from_mapping(dict(spec["static"] or {}))

    raise ConfigLoadError(f"submodules.{name}: expected one of command, class, static")
