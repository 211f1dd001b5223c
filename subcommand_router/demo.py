#!/usr/bin/env python3
"""
Sub-command Router: Interactive Demo

This simulates a host's command loop with the team commands
installed. Type slash-commands or anything else. Try:

    /team
    /team create Red red
    /team join Red
    /team ? 2
    /as console
    /as alice
    hello this is normal chat
    /quit

Tab completes sub-commands and arguments when readline is available.
"""

import logging

from subcommand_router.config_manager import ConsoleSection, setup_configuration
from subcommand_router.dispatcher import CommandDispatcher
from subcommand_router.senders import ConsoleSender, PlayerSender
from subcommand_router.teams import PARENT, TeamRoster, install_team_commands

try:
    import readline
except ImportError:  # Windows without pyreadline
    readline = None


def setup_logging(console: ConsoleSection) -> None:
    """Set up logging based on console mode"""
    if console.verbose:
        logging.basicConfig(level=logging.DEBUG, format='🐛 %(name)s: %(message)s')
    elif console.quiet:
        logging.basicConfig(level=logging.WARNING, format='⚠️  %(message)s')
    else:
        logging.basicConfig(level=logging.INFO, format='ℹ️  %(message)s')


def build_dispatcher(config) -> tuple[CommandDispatcher, TeamRoster]:
    """Application root: one dispatcher, the team module installed."""
    if PARENT not in config.router.parents:
        config.router.parents.append(PARENT)

    dispatcher = CommandDispatcher.from_config(config)
    roster = TeamRoster()
    install_team_commands(dispatcher, roster)
    return dispatcher, roster


def install_completer(dispatcher: CommandDispatcher, current) -> None:
    """Hook dispatcher.complete_line() into readline."""
    if readline is None:
        return

    matches: list[str] = []

    def completer(text, state):
        if state == 0:
            line = readline.get_line_buffer()[:readline.get_endidx()]
            matches[:] = dispatcher.complete_line(current(), line)
            if " " not in line:
                matches[:] = [f"/{m}" for m in matches]
        return matches[state] if state < len(matches) else None

    readline.set_completer_delims(" ")
    readline.set_completer(completer)
    readline.parse_and_bind("tab: complete")


def main(argv=None):
    config, should_exit, _ = setup_configuration(argv)
    if should_exit:
        return

    setup_logging(config.console)
    dispatcher, _ = build_dispatcher(config)

    console = ConsoleSender()
    players = {}
    sender = PlayerSender(
        "alice",
        permissions={"teams.command.*"},
        tree=dispatcher.permissions,
    )
    players[sender.name] = sender

    install_completer(dispatcher, lambda: sender)

    print("=" * 60)
    print("  Sub-command Router: Demo")
    print(f"  Type /{PARENT} for commands, /as <name> to switch, /quit to exit")
    print("=" * 60)
    print()

    while True:
        try:
            line = input(f"{sender.name}> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nbye!")
            break

        if not line:
            continue

        if line.lower() == "/quit":
            print("bye!")
            break

        if line.lower().startswith("/as "):
            who = line[4:].strip()
            if who.lower() == "console":
                sender = console
            else:
                sender = players.setdefault(
                    who, PlayerSender(who, tree=dispatcher.permissions)
                )
            print(f"  now acting as {sender.name}")
            continue

        if not dispatcher.handle_line(sender, line):
            if line.startswith("/"):
                print("  Unknown command. Type /team help for help.")
            else:
                print(f"  [chat] {line}")


if __name__ == "__main__":
    main()
