"""
Configuration centralisée du logging pour le bot Discord.

Objectifs :
- Un seul setup idempotent (évite la duplication des handlers)
- Déduplication des messages identiques rapprochés (reconnexions gateway, retries)
- Format et niveaux configurables via variables d'environnement :
  LOG_LEVEL, LOG_FORMAT, LOG_DISCORD_LEVEL (loggers `discord.*` bavards)
"""
from __future__ import annotations

import logging
import os
import threading
import time

_INITIALIZED = False

DEFAULT_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEFAULT_FORMAT = os.getenv("LOG_FORMAT", "[%(asctime)s] %(levelname)s %(name)s: %(message)s")
DISCORD_LEVEL = os.getenv("LOG_DISCORD_LEVEL", "WARNING").upper()

# Fenêtre pendant laquelle un message identique est ignoré
DEDUP_WINDOW_SECONDS = 30.0
_MAX_TRACKED = 5000


class _DeduplicateFilter(logging.Filter):
    """Ignore un message déjà émis (même logger, niveau et texte) dans la fenêtre."""

    def __init__(self, window: float = DEDUP_WINDOW_SECONDS):
        super().__init__()
        self.window = window
        self._lock = threading.Lock()
        self._last_seen: dict[tuple[str, int, str], float] = {}

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        # Les traces d'exception sont toujours conservées
        if record.exc_info:
            return True
        try:
            rendered = record.getMessage()
        except Exception:  # noqa: BLE001
            rendered = str(record.msg)
        key = (record.name, record.levelno, rendered)
        now = time.monotonic()
        with self._lock:
            last = self._last_seen.get(key)
            if last is not None and now - last < self.window:
                return False
            self._last_seen[key] = now
            if len(self._last_seen) > _MAX_TRACKED:
                self._last_seen.clear()
        return True


def setup_logging(force: bool = False) -> None:
    global _INITIALIZED
    if _INITIALIZED and not force:
        return

    root = logging.getLogger()
    if force:
        for h in list(root.handlers):
            root.removeHandler(h)
    if not root.handlers:
        root.addHandler(logging.StreamHandler())
    formatter = logging.Formatter(DEFAULT_FORMAT)
    for h in root.handlers:
        if not any(isinstance(f, _DeduplicateFilter) for f in h.filters):
            h.addFilter(_DeduplicateFilter())
        h.setFormatter(formatter)
    root.setLevel(getattr(logging, DEFAULT_LEVEL, logging.INFO))

    for name in ("discord.gateway", "discord.http", "discord.client"):
        logging.getLogger(name).setLevel(getattr(logging, DISCORD_LEVEL, logging.WARNING))
    _INITIALIZED = True


__all__ = ["setup_logging"]
