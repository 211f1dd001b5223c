"""
Command Contract
================

Base class for every sub-command the router can dispatch.

A Command describes one sub-command living under a parent command
(the top-level name the host registers, e.g. "team"). It is configured
in its constructor, frozen when the dispatcher registers it, and then
only read.

    /team create Red red
     ^^^^ ^^^^^^ ^^^^^^^
     │    │      └─ args, validated against min_args / max_args
     │    └─ name (or one of its aliases), case-insensitive
     └─ parent

Validation Pipeline
-------------------
handle() checks, strictly in this order:

    1. too many args      → TOO_MANY_ARGUMENTS + surplus input + usage
    2. too few args       → TOO_FEW_ARGUMENTS + usage
    3. player only        → PLAYER_ONLY
    4. is_permitted()     → NO_PERMISSION
    5. execute(sender, args) → optional reply, sent verbatim

args_alternatives never take part in validation. They only feed tab
completion and documentation.

Extending
---------
    class RenameCommand(Command):
        def __init__(self):
            super().__init__("team", "rename")
            self.add_alias("rn")
            self.args_usage = "<team> <new-name>"
            self.add_args_alternative("%team% %*%")
            self.set_arg_bounds(2, 2)
            self.permission = "teams.command.rename"
            self.description = "Renames a team"

        def execute(self, sender, args):
            ...
            return self.success_message("Team renamed")

For commands that only need a function, see HandlerCommand or the
CommandDispatcher.command() decorator.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Union

from subcommand_router.formatting import CommandError, MessageFormatter, Style
from subcommand_router.senders import CommandSender

NEW_LINE = "\n"

Requirement = Callable[[CommandSender], bool]
Handler = Callable[[CommandSender, Sequence[str]], Optional[str]]

_FALLBACK_FORMATTER = MessageFormatter()


class CommandUsageError(Exception):
    """Raised by a handler when the arguments it was given are unusable.

    The command replies with the message followed by its correct usage.
    """


@dataclass(frozen=True)
class ValidationFailure:
    """Why an invocation was rejected before reaching execute()."""
    error: CommandError
    relevant_input: Optional[str] = None
    with_usage: bool = False


class Command(ABC):
    """Base class for all sub-commands.

    Parameters
    ----------
    parent : str
        Top-level command this sub-command belongs to.
    name : str
        Canonical sub-command name, unique within the parent.
    formatter : MessageFormatter or None
        Styling and error wording. When None, the dispatcher's
        formatter is bound at registration.
    """

    def __init__(self, parent: str, name: str, formatter: Optional[MessageFormatter] = None):
        self._frozen = False
        self.parent = parent
        self.name = name
        self.aliases: list[str] = []
        self.args_usage = ""
        self.args_alternatives: list[str] = []
        self.min_args = 0
        self.max_args = 0
        self.player_only = False
        self.description = ""
        self.permission: Optional[str] = None
        self.requirement: Optional[Requirement] = None
        self.formatter = formatter

    def __setattr__(self, key, value):
        if not key.startswith("_") and getattr(self, "_frozen", False):
            raise RuntimeError(
                f"Command '{self.parent} {self.name}' is registered and can no longer be changed"
            )
        super().__setattr__(key, value)

    # ─── Builder ────────────────────────────────────────────────────

    def add_alias(self, alias: str) -> Command:
        self._check_mutable()
        self.aliases.append(alias)
        return self

    def add_args_alternative(self, args_alternative: str) -> Command:
        """Add an example argument shape, e.g. "%team% confirm"."""
        self._check_mutable()
        self.args_alternatives.append(args_alternative)
        return self

    def set_arg_bounds(self, min_args: int, max_args: int) -> Command:
        if min_args < 0 or max_args < 0:
            raise ValueError(f"Argument bounds must be non-negative, got {min_args}..{max_args}")
        if min_args > max_args:
            raise ValueError(f"min_args ({min_args}) cannot exceed max_args ({max_args})")
        self.min_args = min_args
        self.max_args = max_args
        return self

    def freeze(self) -> None:
        """Lock the command. Called by the registry on registration."""
        if self._frozen:
            return
        self.set_arg_bounds(self.min_args, self.max_args)
        if self.formatter is None:
            self.formatter = _FALLBACK_FORMATTER
        self.aliases = tuple(self.aliases)
        self.args_alternatives = tuple(self.args_alternatives)
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RuntimeError(
                f"Command '{self.parent} {self.name}' is registered and can no longer be changed"
            )

    def keys(self) -> list[str]:
        """Lookup keys: the name followed by every alias."""
        return [self.name, *self.aliases]

    # ─── Execution ──────────────────────────────────────────────────

    def validate(self, sender: CommandSender, args: Sequence[str]) -> Optional[ValidationFailure]:
        """Run the validation pipeline. None means the command may execute."""
        if len(args) > self.max_args:
            surplus = " ".join(args[self.max_args:])
            return ValidationFailure(CommandError.TOO_MANY_ARGUMENTS, surplus, with_usage=True)
        if len(args) < self.min_args:
            return ValidationFailure(CommandError.TOO_FEW_ARGUMENTS, with_usage=True)
        if self.player_only and not sender.is_player:
            return ValidationFailure(CommandError.PLAYER_ONLY)
        if not self.is_permitted(sender):
            return ValidationFailure(CommandError.NO_PERMISSION)
        return None

    def handle(self, sender: CommandSender, args: Sequence[str]) -> None:
        """Validate, execute and deliver the reply to the sender."""
        failure = self.validate(sender, args)
        if failure is not None:
            if failure.with_usage:
                sender.send_message(self.error_message_with_usage(failure.error, failure.relevant_input))
            else:
                sender.send_message(self.error_message(failure.error, failure.relevant_input))
            return

        try:
            reply = self.execute(sender, list(args))
        except CommandUsageError as e:
            reply = self.error_message_with_usage(str(e))

        if reply is not None:
            sender.send_message(reply)

    @abstractmethod
    def execute(self, sender: CommandSender, args: list[str]) -> Optional[str]:
        """Run the command. Return the reply to send, or None for no reply."""
        ...

    def is_permitted(self, sender: CommandSender) -> bool:
        """Whether the sender may use this command.

        Unrestricted commands and operators always pass; otherwise the
        sender must hold the permission. A requirement, if set, must
        hold as well. Subclasses may override to add conditions.
        """
        if self.permission and not sender.is_operator:
            if not sender.has_permission(self.permission):
                return False
        if self.requirement is not None:
            return self.requirement(sender)
        return True

    def can_use(self, sender: CommandSender) -> bool:
        """is_permitted() plus the player-only restriction."""
        if self.player_only and not sender.is_player:
            return False
        return self.is_permitted(sender)

    # ─── Messages ───────────────────────────────────────────────────

    @property
    def _fmt(self) -> MessageFormatter:
        return self.formatter or _FALLBACK_FORMATTER

    def success_message(self, message: str) -> str:
        return self._fmt.style(Style.SUCCESS, message)

    def error_message(
        self, error: Union[CommandError, str], relevant_input: Optional[str] = None
    ) -> str:
        """Styled error line: the message, then ": <input>" when given."""
        message = self._fmt.message(error) if isinstance(error, CommandError) else error
        if relevant_input:
            message = f"{message}: {relevant_input}"
        return self._fmt.style(Style.ERROR, message)

    def error_message_with_usage(
        self, error: Union[CommandError, str], relevant_input: Optional[str] = None
    ) -> str:
        """error_message() followed by the correct usage on a new line."""
        return (
            self.error_message(error, relevant_input)
            + self._fmt.style(Style.USAGE_LABEL, " Correct usage:")
            + NEW_LINE
            + self.usage()
        )

    def usage(self, viewer: Optional[CommandSender] = None, show_aliases: bool = False) -> str:
        """Usage line, e.g. "/team create <name> <color>".

        With a viewer that cannot use the command, the command part is
        rendered in the COMMAND_NO_PERMISSION style.
        """
        role = Style.COMMAND
        if viewer is not None and not self.can_use(viewer):
            role = Style.COMMAND_NO_PERMISSION

        head = f"/{self.parent} {self.name}"
        if show_aliases:
            head += "".join(f",{alias}" for alias in self.aliases)

        line = self._fmt.style(role, head)
        if self.args_usage:
            line += self._fmt.style(Style.ARGS_USAGE, f" {self.args_usage}")
        return line

    def styled_description(self) -> str:
        return self._fmt.style(Style.DESCRIPTION, self.description)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.parent!r}, {self.name!r})"


class HandlerCommand(Command):
    """A Command whose execute() is a plain function.

        def list_teams(sender, args):
            return "Red, Blue"

        cmd = HandlerCommand("team", "list", list_teams)
    """

    def __init__(
        self,
        parent: str,
        name: str,
        handler: Handler,
        formatter: Optional[MessageFormatter] = None,
    ):
        super().__init__(parent, name, formatter)
        self._handler = handler

    def execute(self, sender: CommandSender, args: list[str]) -> Optional[str]:
        return self._handler(sender, args)
