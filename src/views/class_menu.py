"""
Composants UI du menu de choix des classes.

Ce module fournit :
- ClassMenuButton : vue du message public, un bouton qui ouvre le menu
- ClassMenuSelects : vue éphémère, un Select par page de 25 classes

Les callbacks des composants ne font rien : les interactions sont traitées sans état par
`events/class_menu.py` à partir des données portées par chaque évènement (custom_id,
options du Select, valeurs choisies). Le menu reste donc utilisable après redémarrage.

Contraintes Discord :
- Un Select accepte 1 à 25 options
- max_values ne doit pas dépasser le nombre d'options affichées
- 5 lignes de composants maximum par message
"""
from __future__ import annotations

import discord
from typing import Sequence

from core.classes.menu import BUTTON_CUSTOM_ID, MenuOption, select_custom_id

BUTTON_LABEL = "Click here to choose classes!"
BUTTON_EMOJI = "\N{MEMO}"
# Lignes de composants par message (un Select occupe une ligne entière)
MAX_SELECTS = 5


class ClassMenuButton(discord.ui.View):
    """Vue persistante (timeout=None, custom_id fixe) postée par `/class menu`."""

    def __init__(self):
        super().__init__(timeout=None)
        self.add_item(discord.ui.Button(
            label=BUTTON_LABEL,
            style=discord.ButtonStyle.primary,
            emoji=BUTTON_EMOJI,
            custom_id=BUTTON_CUSTOM_ID,
        ))


class ClassMenuSelects(discord.ui.View):
    """Vue avec un Select par page d'options.

    Chaque Select est indépendant : min_values=0 pour pouvoir tout décocher,
    max_values = taille de la page.
    """

    def __init__(self, pages: Sequence[Sequence[MenuOption]]):
        super().__init__()
        # Au-delà de MAX_SELECTS pages, le message ne peut pas tout afficher
        shown = pages[:MAX_SELECTS]
        for idx, page in enumerate(shown):
            placeholder = "Choisir des classes" if len(shown) == 1 else f"Choisir des classes ({idx + 1}/{len(shown)})"
            self.add_item(discord.ui.Select(
                custom_id=select_custom_id(idx),
                placeholder=placeholder,
                min_values=0,
                max_values=len(page),
                options=[discord.SelectOption(label=o.label, value=o.value, default=o.default) for o in page],
            ))


__all__ = ["ClassMenuButton", "ClassMenuSelects", "BUTTON_LABEL", "MAX_SELECTS"]
