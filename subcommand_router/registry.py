"""
Command Registry
================

Stores registered commands, indexed two ways:

    (parent, key) → Command      key = lowercased name or alias
    parent        → [Command]    registration order, each command once

Names and aliases share one lookup table per parent, so an alias can
never shadow another command's name. A colliding key is rejected with
DuplicateKeyError and nothing from that command is inserted.

Thread Safety
-------------
register() builds new tables and swaps them in under a lock. Readers
(lookup, list, keys) never take the lock: they always see either the
old or the new snapshot, never a half-registered command.

The price is paid on the write side: every register() copies the
parent's key table and the parent index, so one insertion is O(n) in
the commands already registered and n registrations are O(n²).
Lookups stay O(1). Registration happens a few dozen times at startup;
dispatch and completion happen on every keystroke.
"""

from __future__ import annotations

import logging
import threading
from types import MappingProxyType
from typing import Mapping, Optional

from subcommand_router.command import Command

logger = logging.getLogger(__name__)


class DuplicateKeyError(ValueError):
    """A name or alias is already registered under the same parent."""


class CommandRegistry:
    """In-memory (parent, name-or-alias) → Command table."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_key: Mapping[str, Mapping[str, Command]] = MappingProxyType({})
        self._by_parent: Mapping[str, tuple[Command, ...]] = MappingProxyType({})

    def register(self, command: Command) -> None:
        """Add a command under its parent and freeze it.

        Raises
        ------
        DuplicateKeyError
            If the name or any alias is already taken under the parent,
            or the command repeats one of its own keys.
        ValueError
            If the command's argument bounds are invalid.
        """
        with self._lock:
            table = dict(self._by_key.get(command.parent, {}))

            new_keys: list[str] = []
            for key in command.keys():
                key = key.lower()
                if key in table:
                    raise DuplicateKeyError(
                        f"Command name collision: '{command.parent} {key}' is already "
                        f"registered to '{table[key].name}'"
                    )
                if key in new_keys:
                    raise DuplicateKeyError(
                        f"Command name collision: '{command.parent} {key}' is listed "
                        f"twice by '{command.name}'"
                    )
                new_keys.append(key)

            command.freeze()

            for key in new_keys:
                table[key] = command

            by_key = dict(self._by_key)
            by_key[command.parent] = MappingProxyType(table)
            by_parent = dict(self._by_parent)
            by_parent[command.parent] = by_parent.get(command.parent, ()) + (command,)

            self._by_key = MappingProxyType(by_key)
            self._by_parent = MappingProxyType(by_parent)

        logger.debug(f"Registered command: {command.parent} {command.name} (keys: {', '.join(new_keys)})")

    def lookup(self, parent: str, key: str) -> Optional[Command]:
        """The command for a name or alias, or None."""
        table = self._by_key.get(parent)
        if table is None:
            return None
        return table.get(key.lower())

    def contains(self, parent: str, key: str) -> bool:
        return self.lookup(parent, key) is not None

    def list(self, parent: str) -> list[Command]:
        """Commands under a parent in registration order (empty if unknown)."""
        return list(self._by_parent.get(parent, ()))

    def keys(self, parent: str) -> list[str]:
        """Every name and alias registered under a parent."""
        return list(self._by_key.get(parent, {}))

    def parents(self) -> list[str]:
        return list(self._by_parent)

    def __len__(self) -> int:
        return sum(len(commands) for commands in self._by_parent.values())
