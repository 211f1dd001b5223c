"""
Completion Placeholders
=======================

Args alternatives may contain placeholder tokens that stand for a live
list of values. Registering "%team%" with a supplier of Team objects
and a stringify function makes every "%team%" in an args alternative
complete to the current team names:

    placeholders.register("%team%", roster.teams, lambda t: t.name)
    command.add_args_alternative("%team% confirm")

Suppliers are called on every resolve(); nothing is cached here. The
completion engine deduplicates within a single request only.

The wildcard token "%*%" is reserved. It matches any single argument
and never contributes suggestions, so it cannot be a placeholder.
"""

from __future__ import annotations

import logging
import threading
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping

logger = logging.getLogger(__name__)

WILDCARD_TOKEN = "%*%"

Supplier = Callable[[], Iterable[Any]]
Stringify = Callable[[Any], str]


class ReservedTokenError(ValueError):
    """The placeholder token is the reserved wildcard token."""


class PlaceholderRegistry:
    """token → (supplier, stringify), resolved lazily."""

    def __init__(self):
        self._lock = threading.Lock()
        self._placeholders: Mapping[str, tuple[Supplier, Stringify]] = MappingProxyType({})

    def register(self, token: str, supplier: Supplier, stringify: Stringify = str) -> None:
        """Register a placeholder token.

        Raises
        ------
        ReservedTokenError
            If token is WILDCARD_TOKEN.
        """
        if token == WILDCARD_TOKEN:
            raise ReservedTokenError(
                f"Placeholder token cannot be the wildcard token '{WILDCARD_TOKEN}'"
            )

        with self._lock:
            placeholders = dict(self._placeholders)
            if token in placeholders:
                logger.warning(f"Replacing existing placeholder: {token}")
            placeholders[token] = (supplier, stringify)
            self._placeholders = MappingProxyType(placeholders)

        logger.debug(f"Registered placeholder: {token}")

    def resolve(self, token: str) -> list[str]:
        """Current candidate strings for a token, in supplier order.

        Raises
        ------
        KeyError
            If the token is not registered.
        """
        supplier, stringify = self._placeholders[token]
        return [stringify(item) for item in supplier()]

    def tokens(self) -> list[str]:
        return list(self._placeholders)

    def __contains__(self, token: str) -> bool:
        return token in self._placeholders

    def __len__(self) -> int:
        return len(self._placeholders)
