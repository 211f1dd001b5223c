"""
Message Styling
===============

Every line the router sends back to a sender is tagged with a semantic
style role (error, success, usage...). How a role is rendered is decided
by a MessageFormatter, so the same command set can talk to an ANSI
terminal, a plain log file or a test double without changes.

The formatter also owns the wording of the predefined CommandError
messages, so a deployment can reword them from its config file.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class Style(Enum):
    """Semantic roles for styled message segments."""
    ERROR = "error"
    SUCCESS = "success"
    USAGE_LABEL = "usage_label"
    COMMAND = "command"
    COMMAND_NO_PERMISSION = "command_no_permission"
    ARGS_USAGE = "args_usage"
    DESCRIPTION = "description"


class CommandError(Enum):
    """Input errors reported back to the sender.

    The value is the default message. MessageFormatter.message()
    returns the (possibly overridden) text for a given error.
    """
    ILLEGAL_CHARACTERS = "Contains illegal characters"
    INVALID_ARGUMENT = "Invalid argument"
    NO_PERMISSION = "You do not have permission for this command"
    NOT_A_COLOR = "Not a color"
    NOT_A_NUMBER = "Not a number"
    PLAYER_ONLY = "Only players can do this"
    TOO_FEW_ARGUMENTS = "Not enough input"
    TOO_MANY_ARGUMENTS = "Too much input"
    UNKNOWN = "Something went wrong"

    @property
    def key(self) -> str:
        """Config key for this error (e.g. "not_a_number")."""
        return self.name.lower()


ANSI_RESET = "\033[0m"

# ANSI SGR codes, picked to read like a classic chat console
DEFAULT_CODES: dict[Style, str] = {
    Style.ERROR: "\033[91m",                  # bright red
    Style.SUCCESS: "\033[92m",                # bright green
    Style.USAGE_LABEL: "\033[93m",            # yellow
    Style.COMMAND: "\033[96m",                # aqua
    Style.COMMAND_NO_PERMISSION: "\033[31m",  # dark red
    Style.ARGS_USAGE: "\033[36m",             # dark aqua
    Style.DESCRIPTION: "\033[93m",            # yellow
}


class MessageFormatter:
    """Renders style roles and CommandError messages.

    Parameters
    ----------
    codes : dict[Style, str] or None
        Prefix code per style role. None means DEFAULT_CODES.
        An empty dict (or color=False) renders plain text.
    messages : dict[CommandError, str] or None
        Overrides for the default CommandError messages.
    color : bool
        When False, no codes are emitted at all.
    """

    def __init__(
        self,
        codes: Optional[dict[Style, str]] = None,
        messages: Optional[dict[CommandError, str]] = None,
        color: bool = True,
    ):
        self._codes = dict(DEFAULT_CODES if codes is None else codes) if color else {}
        self._messages = dict(messages or {})

    @classmethod
    def plain(cls) -> MessageFormatter:
        """A formatter that emits no style codes."""
        return cls(color=False)

    @classmethod
    def from_config(cls, config) -> MessageFormatter:
        """Build a formatter from a RouterConfig (messages + styles sections).

        Unknown style roles and message keys are logged and skipped.
        """
        codes = dict(DEFAULT_CODES)
        for role_name, code in config.styles.codes.items():
            try:
                codes[Style(role_name)] = code
            except ValueError:
                logger.warning(f"Ignoring unknown style role: {role_name}")

        messages = {}
        for key, text in config.messages.items():
            try:
                messages[CommandError[key.upper()]] = text
            except KeyError:
                logger.warning(f"Ignoring unknown message key: {key}")

        return cls(codes=codes, messages=messages, color=config.styles.color)

    def style(self, role: Style, text: str) -> str:
        """Wrap text in the code for a style role."""
        code = self._codes.get(role, "")
        if not code:
            return text
        return f"{code}{text}{ANSI_RESET}"

    def message(self, error: CommandError) -> str:
        """Text for a CommandError, honoring overrides."""
        return self._messages.get(error, error.value)

    def set_message(self, error: CommandError, text: str) -> None:
        self._messages[error] = text
