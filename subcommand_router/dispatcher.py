"""
Command Dispatcher
==================

The routing table for sub-commands, and the one object a host talks to.

Role in the System
------------------
The host owns the top-level commands ("parents", e.g. /team). Every
time a user runs one, the host hands the dispatcher the sender, the
parent name and the argument tokens:

    User types: "/team create Red red"
                  ↓
    Host calls dispatch(sender, "team", ["create", "Red", "red"])
                  ↓
    Looks up ("team", "create") in the registry → found!
                  ↓
    Command.handle(sender, ["Red", "red"]) → validation → execute
                  ↓
    Reply sent to the sender, dispatch() returns True

    User types: "/team frobnicate"
                  ↓
    ("team", "frobnicate") not registered → dispatch() returns False
                  ↓
    Host applies its own fallback ("Unknown command")

Design Decisions
----------------
- Sub-command keys are case-insensitive (/team CREATE works).
- No tokens at all routes to the default sub-command ("help").
- An unknown sub-command is the only silent outcome. Every other
  failure (bad arg count, player only, no permission) is answered
  with a formatted message and dispatch() returns True.
- Registration problems (name collisions, the reserved wildcard used
  as a placeholder, undeclared parents) are logged and reported by a
  False return. One broken feature module must not stop the others
  from registering.
- The dispatcher owns its registries. There is no module-level
  instance; build one at the application root and pass it to the
  feature modules that register commands.

Usage
-----
    dispatcher = CommandDispatcher(parents=["team"])
    dispatcher.register_help_command("team")
    dispatcher.register(CreateTeamCommand(roster))
    dispatcher.register_placeholder("%team%", roster.teams, lambda t: t.name)

    # Host command hook:
    handled = dispatcher.dispatch(sender, "team", args)

    # Host tab-completion hook:
    suggestions = dispatcher.complete(sender, "team", args)
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional, Sequence, Union

from subcommand_router.command import Command, Handler, HandlerCommand, Requirement
from subcommand_router.completion import CompletionEngine
from subcommand_router.formatting import CommandError, MessageFormatter
from subcommand_router.help import HelpCommand
from subcommand_router.permissions import PermissionTree
from subcommand_router.placeholders import PlaceholderRegistry, Stringify, Supplier
from subcommand_router.registry import CommandRegistry
from subcommand_router.senders import CommandSender

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """Registers, validates, dispatches and completes sub-commands.

    Parameters
    ----------
    parents : iterable of str or None
        Top-level commands declared by the host. Commands for any other
        parent are refused. None accepts every parent.
    formatter : MessageFormatter or None
        Bound to every registered command that has no formatter yet.
    default_subcommand : str
        Sub-command used when no tokens are given.

    Thread Safety
    -------------
    dispatch() and complete() only read registry snapshots and are safe
    to call from several threads. Registration is meant for startup but
    may happen later; readers never see a half-registered command.
    """

    def __init__(
        self,
        parents: Optional[Iterable[str]] = None,
        formatter: Optional[MessageFormatter] = None,
        default_subcommand: str = "help",
    ):
        self.registry = CommandRegistry()
        self.placeholders = PlaceholderRegistry()
        self.permissions = PermissionTree()
        self.formatter = formatter or MessageFormatter()
        self.completion = CompletionEngine(self.registry, self.placeholders)
        self.default_subcommand = default_subcommand
        self._parents: Optional[set[str]] = set(parents) if parents is not None else None

    @classmethod
    def from_config(cls, config) -> CommandDispatcher:
        """Build a dispatcher from a RouterConfig.

        Declares config.router.parents (if any) and registers a help
        command for each when config.router.register_help is set.
        """
        dispatcher = cls(
            parents=config.router.parents or None,
            formatter=MessageFormatter.from_config(config),
            default_subcommand=config.router.default_subcommand,
        )
        if config.router.register_help:
            for parent in config.router.parents:
                dispatcher.register_help_command(
                    parent,
                    header=config.help.header,
                    show_aliases=config.help.show_aliases,
                    commands_per_page=config.help.commands_per_page,
                    hide_unpermitted=config.help.hide_unpermitted,
                )
        return dispatcher

    # ─── Registration ───────────────────────────────────────────────

    def declare_parent(self, parent: str) -> None:
        """Declare a top-level command after construction."""
        if self._parents is not None:
            self._parents.add(parent)

    def parents(self) -> list[str]:
        """Declared parents, or every parent with commands if none were declared."""
        if self._parents is not None:
            return sorted(self._parents)
        return self.registry.parents()

    def register(self, command: Command) -> bool:
        """Register a command and its permission.

        Returns
        -------
        bool
            True on success. False if the parent is not declared, the
            command is already registered, or a key collides; the
            reason is logged.
        """
        if self._parents is not None and command.parent not in self._parents:
            logger.warning(
                f'Could not register the command "{command.parent} {command.name}". '
                f'The parent command "{command.parent}" is not declared'
            )
            return False

        if command.frozen:
            logger.error(f"Command '{command.parent} {command.name}' is already registered")
            return False

        if command.formatter is None:
            command.formatter = self.formatter

        try:
            self.registry.register(command)
        except ValueError as e:
            logger.error(f"Rejected command '{command.parent} {command.name}': {e}")
            return False

        if command.permission:
            self.permissions.ensure_registered(
                command.permission, f"Use /{command.parent} {command.name}"
            )
        return True

    def register_placeholder(
        self, token: str, supplier: Supplier, stringify: Stringify = str
    ) -> bool:
        """Register a completion placeholder. False (logged) if the token is reserved."""
        try:
            self.placeholders.register(token, supplier, stringify)
        except ValueError as e:
            logger.error(f"Rejected placeholder '{token}': {e}")
            return False
        return True

    def register_help_command(
        self,
        parent: str,
        header: Optional[str] = None,
        show_aliases: bool = True,
        commands_per_page: int = 9,
        hide_unpermitted: bool = True,
    ) -> bool:
        """Register the standard paged help command under a parent."""
        return self.register(
            HelpCommand(
                self.registry,
                parent,
                header=header,
                show_aliases=show_aliases,
                commands_per_page=commands_per_page,
                hide_unpermitted=hide_unpermitted,
            )
        )

    def command(
        self,
        parent: str,
        name: str,
        *,
        aliases: Sequence[str] = (),
        args_usage: str = "",
        args_alternatives: Sequence[str] = (),
        min_args: int = 0,
        max_args: int = 0,
        player_only: bool = False,
        permission: Optional[str] = None,
        description: str = "",
        requirement: Optional[Requirement] = None,
    ) -> Callable[[Handler], Handler]:
        """Decorator registering a plain function as a sub-command.

        Usage:
            @dispatcher.command("team", "list", aliases=["ls"], max_args=0)
            def list_teams(sender, args):
                "Lists all teams"
                return ", ".join(roster.names())

        The function is returned unchanged. Registration failures are
        logged, as with register().
        """

        def decorator(func: Handler) -> Handler:
            cmd = HandlerCommand(parent, name, func)
            for alias in aliases:
                cmd.add_alias(alias)
            for alternative in args_alternatives:
                cmd.add_args_alternative(alternative)
            cmd.set_arg_bounds(min_args, max_args)
            cmd.args_usage = args_usage
            cmd.player_only = player_only
            cmd.permission = permission
            cmd.requirement = requirement
            cmd.description = description or (func.__doc__ or "").strip().split("\n")[0]
            self.register(cmd)
            return func

        return decorator

    # ─── Lookup ─────────────────────────────────────────────────────

    def lookup(self, parent: str, key: str) -> Optional[Command]:
        return self.registry.lookup(parent, key)

    def list_commands(self, parent: str) -> list[Command]:
        """Commands under a parent in registration order."""
        return self.registry.list(parent)

    # ─── Dispatch ───────────────────────────────────────────────────

    def dispatch(
        self, sender: CommandSender, parent: str, args: Union[Sequence[str], str]
    ) -> bool:
        """Route one invocation of a parent command.

        Parameters
        ----------
        sender : CommandSender
            Who ran the command. Receives every reply.
        parent : str
            The top-level command name.
        args : sequence of str, or str
            Tokens after the parent. A string is split on whitespace.

        Returns
        -------
        bool
            False only when the sub-command is unknown (nothing is sent).
        """
        tokens = args.split() if isinstance(args, str) else list(args)

        key = self.default_subcommand
        sub_args: list[str] = []
        if tokens:
            key = tokens[0].lower()
            sub_args = tokens[1:]

        command = self.registry.lookup(parent, key)
        if command is None:
            logger.debug(f"Unhandled sub-command: {parent} {key}")
            return False

        logger.debug(f"Dispatching {parent} {command.name} for {sender.name} with {len(sub_args)} args")
        try:
            command.handle(sender, sub_args)
        except Exception:
            logger.exception(f"Error executing command {parent} {command.name}")
            sender.send_message(command.error_message(CommandError.UNKNOWN))
        return True

    def handle_line(self, sender: CommandSender, line: str) -> bool:
        """Dispatch a raw "/parent sub args" line.

        Lines without a leading '/' and lines for undeclared parents
        return False, so the caller can treat them as ordinary input.
        """
        stripped = line.strip()
        if not stripped.startswith("/"):
            return False

        parts = stripped[1:].split()
        if not parts:
            return False

        parent = parts[0].lower()
        if parent not in self.parents():
            return False

        return self.dispatch(sender, parent, parts[1:])

    # ─── Completion ─────────────────────────────────────────────────

    def complete(
        self, sender: CommandSender, parent: str, args: Sequence[str]
    ) -> list[str]:
        """Completion suggestions for the last token of args."""
        return self.completion.complete(sender, parent, args)

    def complete_line(self, sender: CommandSender, line: str) -> list[str]:
        """Completion suggestions for a raw line being typed.

        The line is split on spaces, so a trailing space means an empty
        fragment for the next token. Repeated spaces before that
        fragment count as one. While the parent itself is being typed,
        declared parents are suggested.
        """
        if not line.startswith("/"):
            return []

        *head, fragment = line[1:].split(" ")
        tokens = [token for token in head if token] + [fragment]
        if len(tokens) == 1:
            fragment = tokens[0].lower()
            return [p for p in self.parents() if p.startswith(fragment)]

        parent = tokens[0].lower()
        if parent not in self.parents():
            return []
        return self.complete(sender, parent, tokens[1:])
