"""
Textes et helpers pour les commandes `/class` et `/config`.
"""
from __future__ import annotations

from typing import Iterable, Sequence

from core.classes.menu import sort_classes
from core.classes.models import Class


def role_mention(role_id: int) -> str:
    return f"<@&{role_id}>"


def channel_mention(channel_id: int) -> str:
    return f"<#{channel_id}>"


def fmt_class_list(classes: Iterable[Class], mention: bool) -> str:
    ordered = sort_classes(classes)
    names = [role_mention(c.role) if mention else c.name for c in ordered]
    return f"{len(ordered)} classe(s) : " + ", ".join(names)


def fmt_class_info(cls: Class, role_label: str, category_name: str) -> str:
    lines = [
        f"Nom : \"{cls.name}\"",
        f"Nom court : \"{cls.short_name}\"",
        f"Rôle : {role_label}",
        f"Catégorie : `{category_name}`",
        "Salons texte : " + (", ".join(channel_mention(c) for c in sorted(cls.text_channels)) or "-"),
        "Salons vocaux : " + (", ".join(channel_mention(c) for c in sorted(cls.voice_channels)) or "-"),
    ]
    return "**Infos classe :**\n>>> " + "\n".join(lines)


def fmt_errors(errs: Sequence[Exception]) -> str:
    return "Erreurs :\n" + "\n".join(f"• {e}" for e in errs)


def msg_no_class() -> str: return "Aucune classe sur ce serveur."
def msg_class_created(name: str) -> str: return f"Classe \"{name}\" créée."
def msg_class_tracked(name: str) -> str: return f"Classe \"{name}\" désormais suivie."
def msg_class_untracked(name: str) -> str: return f"Classe \"{name}\" n'est plus suivie."
def msg_class_deleted(name: str) -> str: return f"Classe \"{name}\" supprimée."
def msg_delete_failed() -> str: return "Echec de la suppression de la classe en base."
def msg_menu_posted() -> str: return "Menu publié."
def msg_refrole_set(role_id: int) -> str: return f"{role_mention(role_id)} est maintenant le rôle de référence de ce serveur."
def msg_refrole_show(role_id: int) -> str: return f"Rôle de référence : {role_mention(role_id)}"
def msg_refrole_none() -> str: return "Aucun rôle de référence défini."
def msg_internal_error() -> str: return "Erreur interne."


__all__ = [name for name in globals().keys() if name.startswith(('msg_', 'fmt_')) or name.endswith('_mention')]
