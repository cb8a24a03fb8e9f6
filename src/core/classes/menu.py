"""
Logique pure du menu de choix des classes (sans appel Discord).

- Tri « naturel » des noms (Class 2 avant Class 10)
- Découpage des options en pages de 25 (limite Discord par Select)
- Calcul du nouvel ensemble de rôles d'un membre après soumission d'un Select
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Collection, Iterable, List, Sequence, Set

from .models import Class

# Limite Discord : options par Select
MAX_OPTIONS = 25

BUTTON_CUSTOM_ID = "class_menu_button"
SELECT_CUSTOM_ID_PREFIX = "class_menu_select_"

_DIGITS_RE = re.compile(r"(\d+)")


@dataclass(frozen=True)
class MenuOption:
    label: str
    value: str
    default: bool


def natural_key(name: str):
    """Clé de tri alphanumérique : les suites de chiffres sont comparées comme des nombres."""
    parts = _DIGITS_RE.split(name.casefold())
    return [(0, int(p), "") if p.isdigit() else (1, 0, p) for p in parts]


def sort_classes(classes: Iterable[Class]) -> List[Class]:
    return sorted(classes, key=lambda c: natural_key(c.name))


def paginate(options: Sequence[MenuOption], size: int = MAX_OPTIONS) -> List[List[MenuOption]]:
    return [list(options[i:i + size]) for i in range(0, len(options), size)]


def build_menu_pages(classes: Iterable[Class], member_role_ids: Collection[int]) -> List[List[MenuOption]]:
    """Options du menu, triées et paginées ; cochées si le membre possède déjà le rôle."""
    held = set(member_role_ids)
    options = [
        MenuOption(label=c.name[:100], value=str(c.role), default=c.role in held)
        for c in sort_classes(classes)
    ]
    return paginate(options)


def select_custom_id(index: int) -> str:
    return f"{SELECT_CUSTOM_ID_PREFIX}{index}"


def parse_select_index(custom_id: str) -> int | None:
    """Index du Select pour un custom_id du menu, None si le composant n'en fait pas partie."""
    if not custom_id.startswith(SELECT_CUSTOM_ID_PREFIX):
        return None
    suffix = custom_id[len(SELECT_CUSTOM_ID_PREFIX):]
    return int(suffix) if suffix.isdigit() else None


def parse_role_ids(values: Iterable[str]) -> Set[int]:
    """Convertit les valeurs d'options en ids de rôle.

    Les valeurs sont générées par le bot : une valeur invalide lève ValueError.
    """
    return {int(v) for v in values}


def compute_member_roles(current: Iterable[int], shown: Iterable[int], selected: Iterable[int]) -> Set[int]:
    """Nouveaux rôles du membre : (actuels − affichés dans ce Select) ∪ sélectionnés.

    Les rôles des autres Selects (non affichés ici) sont conservés tels quels.
    """
    return (set(current) - set(shown)) | set(selected)


__all__ = [
    "MAX_OPTIONS", "BUTTON_CUSTOM_ID", "SELECT_CUSTOM_ID_PREFIX", "MenuOption", "natural_key",
    "sort_classes", "paginate", "build_menu_pages", "select_custom_id", "parse_select_index",
    "parse_role_ids", "compute_member_roles",
]
