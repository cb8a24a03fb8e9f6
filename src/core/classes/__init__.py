"""Cœur de la gestion des classes (serveurs, registre, menu de rôles).

Les imports sont effectués de manière lazy : `db.*` importe les modèles de ce
package, et le registre importe `db.*`.
"""
from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # aide mypy/IDE sans exécuter les imports au runtime initial
	from .models import Class, Server  # noqa: F401
	from .registry import ClassRegistry  # noqa: F401

__all__ = ["Class", "Server", "ClassRegistry"]


def __getattr__(name: str):  # lazy resolution
	if name in {"Class", "Server"}:
		mod = import_module("core.classes.models")
		return getattr(mod, name)
	if name == "ClassRegistry":
		mod = import_module("core.classes.registry")
		return getattr(mod, name)
	raise AttributeError(name)
