"""
Erreurs métier de la gestion des classes.

Chaque erreur porte le message destiné à l'utilisateur (`str(err)`), envoyé tel quel
par les commandes. Les erreurs de transport (`ApiError`, `DatabaseError`) conservent
l'exception d'origine dans `cause` pour le diagnostic.
"""
from __future__ import annotations

import functools

import asyncpg


class ClassError(Exception):
    """Base de toutes les erreurs remontées par le registre des classes."""

    message = "Erreur inconnue."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


# Configuration
class NoRefrole(ClassError):
    message = "Aucun rôle de référence (refrole) n'est défini pour ce serveur."


class InvalidRefrole(ClassError):
    message = "Le rôle de référence configuré pour ce serveur n'existe plus."


# Contexte
class NoServer(ClassError):
    message = "Cette commande ne peut être utilisée que dans un serveur."


# Validation / conflits
class ClassExists(ClassError):
    message = "Une classe portant ce nom est déjà suivie."


class RoleExists(ClassError):
    message = "Un rôle portant ce nom existe déjà."


class CategoryExists(ClassError):
    message = "Une catégorie portant ce nom existe déjà."


class RoleInUse(ClassError):
    def __init__(self, class_name: str):
        self.class_name = class_name
        super().__init__(f"Ce rôle est déjà utilisé par la classe {class_name}.")


# Références invalides
class InvalidRole(ClassError):
    message = "Le rôle indiqué n'existe pas sur ce serveur."


class InvalidChannel(ClassError):
    def __init__(self, mention: str):
        self.mention = mention
        super().__init__(f"Le salon {mention} n'existe pas sur ce serveur.")


class InvalidChannelType(ClassError):
    def __init__(self, mention: str):
        self.mention = mention
        super().__init__(f"Le salon {mention} n'est pas d'un type valide.")


class InvalidClass(ClassError):
    message = "Aucune classe n'est associée à ce rôle."


class EmptyName(ClassError):
    message = "Le nom de la classe ne peut pas être vide."


# Transport
class ApiError(ClassError):
    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Erreur Discord: {cause}")


class DatabaseError(ClassError):
    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Erreur base de données: {cause}")


__all__ = [
    "ClassError", "NoRefrole", "InvalidRefrole", "NoServer", "ClassExists", "RoleExists",
    "CategoryExists", "RoleInUse", "InvalidRole", "InvalidChannel", "InvalidChannelType",
    "InvalidClass", "EmptyName", "ApiError", "DatabaseError",
]


def translate_db_errors(func):
    """Décorateur pour les accès base : convertit les erreurs asyncpg/réseau en `DatabaseError`."""
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            raise DatabaseError(e) from e
    return wrapper


__all__.append("translate_db_errors")
