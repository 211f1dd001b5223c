"""
Sub-command Router
==================

A command routing and tab-completion engine for hosts that expose
top-level commands ("parents") with many sub-commands:

    /team create Red red
    /team join Red
    /team help 2

Architecture Overview
---------------------
The host registers its parent commands itself and forwards every
invocation and every tab-completion request to one CommandDispatcher.

    ┌──────────────┐ dispatch()  ┌──────────────────┐ lookup  ┌─────────────────┐
    │  Host        │────────────►│  Command         │────────►│ CommandRegistry │
    │  (console,   │ complete()  │  Dispatcher      │         └─────────────────┘
    │   chat, web) │◄────────────│                  │
    └──────────────┘  replies    └────────┬─────────┘
                                          │
               ┌──────────────────────────┼────────────────────────┐
               ▼                          ▼                        ▼
      ┌─────────────────┐      ┌────────────────────┐    ┌──────────────────┐
      │ Command.handle  │      │ CompletionEngine   │    │ PermissionTree   │
      │ (validation →   │      │  + Placeholder     │    │ (a.b.* → a.b.c)  │
      │  execute)       │      │    Registry        │    └──────────────────┘
      └─────────────────┘      └────────────────────┘

Only an unknown sub-command is silent (dispatch() returns False and
the host applies its own fallback). Every other failure is answered
with a formatted error message.

Extending
---------
1. Subclass Command (or use the CommandDispatcher.command decorator)
2. Configure name, aliases, arg bounds, permission in the constructor
3. Implement execute(sender, args) -> Optional[str]
4. dispatcher.register(MyCommand())

See teams.py for a complete feature module.

Module Structure
----------------
    subcommand_router/
    ├── __init__.py        ← This file.
    ├── command.py         ← Command contract, validation pipeline, messages
    ├── registry.py        ← (parent, name/alias) → Command
    ├── placeholders.py    ← %placeholder% → live candidate lists
    ├── permissions.py     ← wildcard permission tree
    ├── completion.py      ← tab completion
    ├── dispatcher.py      ← the façade the host talks to
    ├── help.py            ← paged /<parent> help
    ├── senders.py         ← CommandSender protocol, console + player
    ├── formatting.py      ← style roles, CommandError wording
    ├── config_manager.py  ← YAML configuration
    ├── teams.py           ← sample feature module (/team ...)
    └── demo.py            ← interactive shell

Dependencies
------------
PyYAML for configuration. Everything else is standard library.
"""

from subcommand_router.command import Command, CommandUsageError, HandlerCommand
from subcommand_router.completion import CompletionEngine
from subcommand_router.dispatcher import CommandDispatcher
from subcommand_router.formatting import CommandError, MessageFormatter, Style
from subcommand_router.help import HelpCommand, paginate
from subcommand_router.permissions import Permission, PermissionTree
from subcommand_router.placeholders import (
    WILDCARD_TOKEN,
    PlaceholderRegistry,
    ReservedTokenError,
)
from subcommand_router.registry import CommandRegistry, DuplicateKeyError
from subcommand_router.senders import CommandSender, ConsoleSender, PlayerSender

__all__ = [
    'Command',
    'CommandDispatcher',
    'CommandError',
    'CommandRegistry',
    'CommandSender',
    'CommandUsageError',
    'CompletionEngine',
    'ConsoleSender',
    'DuplicateKeyError',
    'HandlerCommand',
    'HelpCommand',
    'MessageFormatter',
    'Permission',
    'PermissionTree',
    'PlaceholderRegistry',
    'PlayerSender',
    'ReservedTokenError',
    'Style',
    'WILDCARD_TOKEN',
    'paginate',
]
