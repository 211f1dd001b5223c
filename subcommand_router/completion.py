"""
Tab Completion
==============

Suggests completions for a partially typed sub-command line.

    tokens typed after the parent      suggestions come from
    ─────────────────────────────      ─────────────────────────────
    ["cr"]                             names/aliases starting with "cr"
    ["delete", "R"]                    args alternatives at position 0
    ["delete", "Red", ""]              args alternatives at position 1

The last token is always the fragment under the cursor (possibly "").

Matching an args alternative
----------------------------
An alternative such as "%team% confirm" is split on spaces. It is a
candidate source when:

- no more args are typed than it has tokens, and
- every token before the cursor equals the typed arg, or is a
  registered placeholder, or is the wildcard "%*%".

The token at the cursor then contributes:

- wildcard     → nothing
- placeholder  → its resolved values starting with the fragment
                 (case-insensitive); resolved at most once per call
- literal      → itself, if it starts with the fragment
                 (case-insensitive)

Results keep args-alternative order and are not deduplicated beyond
the per-call placeholder rule.
"""

from __future__ import annotations

import logging
from typing import Sequence

from subcommand_router.command import Command
from subcommand_router.placeholders import WILDCARD_TOKEN, PlaceholderRegistry
from subcommand_router.registry import CommandRegistry
from subcommand_router.senders import CommandSender

logger = logging.getLogger(__name__)


class CompletionEngine:
    """Computes completion suggestions from the registry and placeholders."""

    def __init__(self, registry: CommandRegistry, placeholders: PlaceholderRegistry):
        self._registry = registry
        self._placeholders = placeholders

    def complete(self, sender: CommandSender, parent: str, args: Sequence[str]) -> list[str]:
        """Suggestions for the last token of args (sub-command first)."""
        if not args:
            return []

        if len(args) == 1:
            return self.complete_subcommand(sender, parent, args[0])

        command = self._registry.lookup(parent, args[0])
        if command is None or not command.is_permitted(sender):
            return []
        return self.complete_arguments(command, args[1:])

    def complete_subcommand(self, sender: CommandSender, parent: str, fragment: str) -> list[str]:
        """Names and aliases under parent the sender may use, starting with fragment."""
        result = []
        for command in self._registry.list(parent):
            if not command.is_permitted(sender):
                continue
            for key in command.keys():
                if key.startswith(fragment):
                    result.append(key)
        return result

    def complete_arguments(self, command: Command, args: Sequence[str]) -> list[str]:
        """Suggestions for the last of args, walking every args alternative."""
        result: list[str] = []
        if not args:
            return result

        cursor = len(args) - 1
        fragment = args[cursor].lower()
        used_placeholders: set[str] = set()

        for alternative in command.args_alternatives:
            pattern = alternative.split(" ")
            if len(args) > len(pattern):
                continue
            if not self._prefix_matches(pattern, args, cursor):
                continue

            token = pattern[cursor]
            if token == WILDCARD_TOKEN:
                continue

            if token in self._placeholders:
                if token in used_placeholders:
                    continue
                used_placeholders.add(token)
                candidates = self._placeholders.resolve(token)
                logger.debug(f"Resolved placeholder {token}: {len(candidates)} candidates")
                result.extend(c for c in candidates if c.lower().startswith(fragment))
            elif token.lower().startswith(fragment):
                result.append(token)

        return result

    def _prefix_matches(self, pattern: Sequence[str], args: Sequence[str], cursor: int) -> bool:
        for typed, token in zip(args[:cursor], pattern):
            if typed == token or token == WILDCARD_TOKEN or token in self._placeholders:
                continue
            return False
        return True
