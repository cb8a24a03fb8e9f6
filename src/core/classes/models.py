from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Set


def normalize_short_name(name: str) -> str:
    """Nom court utilisé dans les noms de salons : espaces supprimés, minuscules."""
    return "".join(name.split()).lower()


@dataclass
class Server:
    """Configuration d'un serveur (une ligne `servers` par guild).

    admin_roles : déclaré, pas encore exploité par les commandes.
    refrole     : rôle sous lequel les rôles de classe sont insérés dans la hiérarchie.
    """

    server_id: int
    admin_roles: Set[int] = field(default_factory=set)
    refrole: Optional[int] = None


@dataclass
class Class:
    """Classe suivie : un rôle, une catégorie et ses salons texte/vocaux."""

    server_id: int
    name: str
    short_name: str
    role: int
    category: int
    text_channels: Set[int] = field(default_factory=set)
    voice_channels: Set[int] = field(default_factory=set)
