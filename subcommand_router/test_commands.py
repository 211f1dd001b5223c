"""
Tests for the sub-command router: registry, dispatch pipeline,
permissions and help.

Run with:  python -m pytest subcommand_router -v
"""

import logging
import threading

import pytest

from subcommand_router.command import Command, CommandUsageError, HandlerCommand
from subcommand_router.dispatcher import CommandDispatcher
from subcommand_router.formatting import ANSI_RESET, CommandError, MessageFormatter, Style
from subcommand_router.help import HelpCommand, paginate
from subcommand_router.permissions import PermissionTree, wildcard_parent
from subcommand_router.placeholders import (
    WILDCARD_TOKEN,
    PlaceholderRegistry,
    ReservedTokenError,
)
from subcommand_router.registry import CommandRegistry, DuplicateKeyError
from subcommand_router.senders import ConsoleSender, PlayerSender


class RecordingSender:
    """CommandSender test double that keeps every message."""

    def __init__(self, name="steve", permissions=(), operator=False, player=True):
        self._name = name
        self.permissions = set(permissions)
        self._operator = operator
        self._player = player
        self.messages = []

    @property
    def name(self):
        return self._name

    @property
    def is_operator(self):
        return self._operator

    @property
    def is_player(self):
        return self._player

    def has_permission(self, permission):
        return permission in self.permissions

    def send_message(self, text):
        self.messages.append(text)


class EchoCommand(Command):
    """Replies with its arguments and remembers every call."""

    def __init__(self, name="echo", parent="test", min_args=0, max_args=2, reply="ok"):
        super().__init__(parent, name)
        self.args_usage = "[a] [b]"
        self.set_arg_bounds(min_args, max_args)
        self.calls = []
        self._reply = reply

    def execute(self, sender, args):
        self.calls.append(list(args))
        return self._reply


@pytest.fixture
def dispatcher():
    return CommandDispatcher(parents=["test"], formatter=MessageFormatter.plain())


@pytest.fixture
def player():
    return RecordingSender()


# ============================================================
# CommandRegistry
# ============================================================

class TestRegistry:
    """Tests for the (parent, key) → Command table."""

    def test_name_and_alias_resolve_to_same_instance(self):
        registry = CommandRegistry()
        cmd = EchoCommand()
        cmd.add_alias("e")
        cmd.add_alias("say")
        registry.register(cmd)

        assert registry.lookup("test", "echo") is cmd
        assert registry.lookup("test", "e") is cmd
        assert registry.lookup("test", "say") is cmd

    def test_lookup_is_case_insensitive(self):
        registry = CommandRegistry()
        cmd = EchoCommand()
        registry.register(cmd)
        assert registry.lookup("test", "ECHO") is cmd

    def test_unknown_parent_or_key(self):
        registry = CommandRegistry()
        registry.register(EchoCommand())
        assert registry.lookup("nope", "echo") is None
        assert registry.lookup("test", "nope") is None
        assert registry.list("nope") == []

    def test_duplicate_name_raises(self):
        registry = CommandRegistry()
        first = EchoCommand()
        registry.register(first)
        with pytest.raises(DuplicateKeyError, match="collision"):
            registry.register(EchoCommand())
        assert registry.lookup("test", "echo") is first
        assert registry.keys("test") == ["echo"]
        assert registry.list("test") == [first]

    def test_alias_colliding_with_name_inserts_nothing(self):
        registry = CommandRegistry()
        first = EchoCommand("echo")
        registry.register(first)

        second = EchoCommand("shout")
        second.add_alias("echo")
        with pytest.raises(DuplicateKeyError):
            registry.register(second)

        assert registry.lookup("test", "shout") is None
        assert registry.lookup("test", "echo") is first
        assert not second.frozen

    def test_command_repeating_its_own_alias_rejected(self):
        registry = CommandRegistry()
        cmd = EchoCommand()
        cmd.add_alias("Echo")
        with pytest.raises(DuplicateKeyError, match="twice"):
            registry.register(cmd)

    def test_same_key_under_different_parents(self):
        registry = CommandRegistry()
        a = EchoCommand(parent="one")
        b = EchoCommand(parent="two")
        registry.register(a)
        registry.register(b)
        assert registry.lookup("one", "echo") is a
        assert registry.lookup("two", "echo") is b
        assert sorted(registry.parents()) == ["one", "two"]

    def test_list_keeps_registration_order_once_per_command(self):
        registry = CommandRegistry()
        commands = [EchoCommand(n) for n in ("zeta", "alpha", "mid")]
        commands[0].add_alias("z")
        for cmd in commands:
            registry.register(cmd)

        assert registry.list("test") == commands
        assert len(registry) == 3
        assert len(registry.keys("test")) == 4

    def test_register_publishes_new_snapshot(self):
        registry = CommandRegistry()
        first = EchoCommand("first")
        registry.register(first)
        snapshot = registry._by_key["test"]

        registry.register(EchoCommand("second"))

        assert dict(snapshot) == {"first": first}
        assert registry._by_key["test"] is not snapshot
        assert registry.keys("test") == ["first", "second"]

    def test_registered_command_is_frozen(self):
        registry = CommandRegistry()
        cmd = EchoCommand()
        registry.register(cmd)

        with pytest.raises(RuntimeError):
            cmd.permission = "x.y"
        with pytest.raises(RuntimeError):
            cmd.add_alias("again")
        with pytest.raises(RuntimeError):
            cmd.add_args_alternative("a b")

    def test_invalid_bounds(self):
        with pytest.raises(ValueError, match="cannot exceed"):
            EchoCommand(min_args=3, max_args=1)
        with pytest.raises(ValueError, match="non-negative"):
            EchoCommand(min_args=-1, max_args=1)

    def test_bounds_checked_on_register(self):
        cmd = EchoCommand()
        cmd.min_args = 5
        with pytest.raises(ValueError):
            CommandRegistry().register(cmd)


# ============================================================
# Dispatch pipeline
# ============================================================

class TestDispatch:
    """Tests for CommandDispatcher.dispatch() and the validation order."""

    def test_max_args_boundary_succeeds(self, dispatcher, player):
        cmd = EchoCommand(max_args=2)
        dispatcher.register(cmd)
        assert dispatcher.dispatch(player, "test", ["echo", "a", "b"])
        assert cmd.calls == [["a", "b"]]
        assert player.messages == ["ok"]

    def test_too_many_arguments_reports_surplus(self, dispatcher, player):
        cmd = EchoCommand(max_args=2)
        dispatcher.register(cmd)
        assert dispatcher.dispatch(player, "test", ["echo", "a", "b", "c", "d"])
        assert cmd.calls == []
        assert player.messages == [
            "Too much input: c d Correct usage:\n/test echo [a] [b]"
        ]

    def test_one_over_max(self, dispatcher, player):
        dispatcher.register(EchoCommand(max_args=0))
        dispatcher.dispatch(player, "test", ["echo", "extra"])
        assert player.messages[0].startswith("Too much input: extra")

    def test_min_args_boundary_succeeds(self, dispatcher, player):
        cmd = EchoCommand(min_args=2, max_args=3)
        dispatcher.register(cmd)
        dispatcher.dispatch(player, "test", ["echo", "a", "b"])
        assert cmd.calls == [["a", "b"]]

    def test_too_few_arguments(self, dispatcher, player):
        cmd = EchoCommand(min_args=2, max_args=3)
        dispatcher.register(cmd)
        assert dispatcher.dispatch(player, "test", ["echo", "a"])
        assert cmd.calls == []
        assert player.messages == [
            "Not enough input Correct usage:\n/test echo [a] [b]"
        ]

    def test_player_only_checked_before_permission(self, dispatcher):
        cmd = EchoCommand()
        cmd.player_only = True
        cmd.permission = "test.command.echo"
        dispatcher.register(cmd)

        console = RecordingSender(player=False)
        dispatcher.dispatch(console, "test", ["echo"])
        assert console.messages == ["Only players can do this"]
        assert cmd.calls == []

    def test_player_only_rejects_operator_console(self, dispatcher):
        cmd = EchoCommand()
        cmd.player_only = True
        dispatcher.register(cmd)

        messages = []
        dispatcher.dispatch(ConsoleSender(output=messages.append), "test", ["echo"])
        assert messages == ["Only players can do this"]

    def test_no_permission(self, dispatcher, player):
        cmd = EchoCommand()
        cmd.permission = "test.command.echo"
        dispatcher.register(cmd)

        assert dispatcher.dispatch(player, "test", ["echo"])
        assert player.messages == ["You do not have permission for this command"]
        assert cmd.calls == []

    def test_operator_bypasses_permission(self, dispatcher):
        cmd = EchoCommand()
        cmd.permission = "test.command.echo"
        dispatcher.register(cmd)

        op = RecordingSender(operator=True)
        dispatcher.dispatch(op, "test", ["echo"])
        assert op.messages == ["ok"]

    def test_held_permission_executes(self, dispatcher):
        cmd = EchoCommand()
        cmd.permission = "test.command.echo"
        dispatcher.register(cmd)

        sender = RecordingSender(permissions={"test.command.echo"})
        dispatcher.dispatch(sender, "test", ["echo"])
        assert cmd.calls == [[]]

    def test_empty_permission_is_unrestricted(self, dispatcher, player):
        cmd = EchoCommand()
        cmd.permission = ""
        dispatcher.register(cmd)
        dispatcher.dispatch(player, "test", ["echo"])
        assert cmd.calls == [[]]

    def test_unknown_subcommand_is_silent(self, dispatcher, player):
        dispatcher.register(EchoCommand())
        assert dispatcher.dispatch(player, "test", ["nope", "x"]) is False
        assert player.messages == []

    def test_unknown_parent_is_silent(self, dispatcher, player):
        assert dispatcher.dispatch(player, "other", ["echo"]) is False
        assert player.messages == []

    def test_empty_input_routes_to_help(self, dispatcher, player):
        dispatcher.register_help_command("test")
        assert dispatcher.dispatch(player, "test", [])
        assert "/test help" in player.messages[0]

    def test_empty_input_without_help_is_unhandled(self, dispatcher, player):
        dispatcher.register(EchoCommand())
        assert dispatcher.dispatch(player, "test", []) is False

    def test_subcommand_key_lowercased(self, dispatcher, player):
        cmd = EchoCommand()
        dispatcher.register(cmd)
        assert dispatcher.dispatch(player, "test", ["EcHo", "A"])
        assert cmd.calls == [["A"]]

    def test_raw_string_args(self, dispatcher, player):
        cmd = EchoCommand()
        dispatcher.register(cmd)
        dispatcher.dispatch(player, "test", "  echo   a  b ")
        assert cmd.calls == [["a", "b"]]

    def test_alias_dispatch(self, dispatcher, player):
        cmd = EchoCommand()
        cmd.add_alias("e")
        dispatcher.register(cmd)
        dispatcher.dispatch(player, "test", ["e"])
        assert cmd.calls == [[]]

    def test_none_reply_sends_nothing(self, dispatcher, player):
        dispatcher.register(EchoCommand(reply=None))
        assert dispatcher.dispatch(player, "test", ["echo"])
        assert player.messages == []

    def test_usage_error_from_handler(self, dispatcher, player):
        def handler(sender, args):
            raise CommandUsageError("Bad input")

        cmd = HandlerCommand("test", "boom", handler)
        cmd.args_usage = "<x>"
        cmd.set_arg_bounds(0, 1)
        dispatcher.register(cmd)

        dispatcher.dispatch(player, "test", ["boom"])
        assert player.messages == ["Bad input Correct usage:\n/test boom <x>"]

    def test_unexpected_handler_error_is_reported(self, dispatcher, player, caplog):
        def handler(sender, args):
            raise RuntimeError("kaboom")

        dispatcher.register(HandlerCommand("test", "boom", handler))

        with caplog.at_level(logging.ERROR):
            assert dispatcher.dispatch(player, "test", ["boom"])
        assert player.messages == ["Something went wrong"]
        assert "test boom" in caplog.text

    def test_requirement_strategy(self, dispatcher):
        cmd = EchoCommand()
        cmd.requirement = lambda sender: sender.name == "alex"
        dispatcher.register(cmd)

        steve = RecordingSender("steve")
        alex = RecordingSender("alex")
        dispatcher.dispatch(steve, "test", ["echo"])
        dispatcher.dispatch(alex, "test", ["echo"])
        assert steve.messages == ["You do not have permission for this command"]
        assert alex.messages == ["ok"]

    def test_requirement_applies_to_operators(self, dispatcher):
        cmd = EchoCommand()
        cmd.requirement = lambda sender: False
        dispatcher.register(cmd)
        op = RecordingSender(operator=True)
        dispatcher.dispatch(op, "test", ["echo"])
        assert op.messages == ["You do not have permission for this command"]

    def test_overridden_is_permitted(self, dispatcher, player):
        class Closed(EchoCommand):
            open = False

            def is_permitted(self, sender):
                return super().is_permitted(sender) and Closed.open

        dispatcher.register(Closed())
        dispatcher.dispatch(player, "test", ["echo"])
        Closed.open = True
        dispatcher.dispatch(player, "test", ["echo"])
        assert player.messages == ["You do not have permission for this command", "ok"]

    def test_custom_error_message(self, player):
        formatter = MessageFormatter.plain()
        formatter.set_message(CommandError.NO_PERMISSION, "Nope")
        dispatcher = CommandDispatcher(formatter=formatter)
        cmd = EchoCommand()
        cmd.permission = "x"
        dispatcher.register(cmd)
        dispatcher.dispatch(player, "test", ["echo"])
        assert player.messages == ["Nope"]


# ============================================================
# Registration through the dispatcher
# ============================================================

class TestDispatcherRegistration:
    """Registration errors are logged, never raised."""

    def test_duplicate_is_rejected_and_logged(self, dispatcher, caplog):
        first = EchoCommand()
        assert dispatcher.register(first)
        with caplog.at_level(logging.ERROR):
            assert dispatcher.register(EchoCommand()) is False
        assert "collision" in caplog.text
        assert dispatcher.lookup("test", "echo") is first

    def test_other_commands_still_register_after_a_failure(self, dispatcher):
        dispatcher.register(EchoCommand("a"))
        dispatcher.register(EchoCommand("a"))
        assert dispatcher.register(EchoCommand("b"))
        assert [c.name for c in dispatcher.list_commands("test")] == ["a", "b"]

    def test_undeclared_parent_refused(self, dispatcher, caplog):
        with caplog.at_level(logging.WARNING):
            assert dispatcher.register(EchoCommand(parent="other")) is False
        assert "not declared" in caplog.text
        assert dispatcher.list_commands("other") == []

    def test_declare_parent_later(self, dispatcher):
        dispatcher.declare_parent("other")
        assert dispatcher.register(EchoCommand(parent="other"))

    def test_no_declared_parents_accepts_any(self):
        dispatcher = CommandDispatcher()
        assert dispatcher.register(EchoCommand(parent="anything"))
        assert dispatcher.parents() == ["anything"]

    def test_registering_twice_refused(self, dispatcher):
        cmd = EchoCommand()
        assert dispatcher.register(cmd)
        assert dispatcher.register(cmd) is False

    def test_formatter_bound_on_register(self, dispatcher):
        cmd = EchoCommand()
        dispatcher.register(cmd)
        assert cmd.formatter is dispatcher.formatter

    def test_permission_registered_in_tree(self, dispatcher):
        cmd = EchoCommand()
        cmd.permission = "test.command.echo"
        dispatcher.register(cmd)

        assert "test.command.echo" in dispatcher.permissions
        node = dispatcher.permissions.get("test.command.echo")
        assert node.description == "Use /test echo"
        parent = dispatcher.permissions.get("test.command.*")
        assert parent.children == {"test.command.echo": True}

    def test_wildcard_placeholder_rejected(self, dispatcher, caplog):
        with caplog.at_level(logging.ERROR):
            assert dispatcher.register_placeholder(WILDCARD_TOKEN, list) is False
        assert WILDCARD_TOKEN not in dispatcher.placeholders

    def test_decorator_registration(self, dispatcher, player):
        @dispatcher.command("test", "hello", aliases=["hi"], min_args=0, max_args=1,
                            args_usage="[name]")
        def hello(sender, args):
            """Says hello

            More text that is not part of the description.
            """
            return f"hello {args[0] if args else sender.name}"

        cmd = dispatcher.lookup("test", "hi")
        assert cmd.description == "Says hello"
        assert cmd.usage() == "/test hello [name]"

        dispatcher.dispatch(player, "test", ["hi", "bob"])
        dispatcher.dispatch(player, "test", ["hello"])
        assert player.messages == ["hello bob", "hello steve"]
        assert hello(player, []) == "hello steve"


# ============================================================
# Line-level entry point
# ============================================================

class TestHandleLine:

    def test_non_command_line(self, dispatcher, player):
        dispatcher.register(EchoCommand())
        assert dispatcher.handle_line(player, "hello everyone") is False

    def test_slash_in_middle(self, dispatcher, player):
        assert dispatcher.handle_line(player, "the test/echo ratio") is False

    def test_known_parent(self, dispatcher, player):
        cmd = EchoCommand()
        dispatcher.register(cmd)
        assert dispatcher.handle_line(player, "/TEST echo a")
        assert cmd.calls == [["a"]]

    def test_unknown_parent(self, dispatcher, player):
        assert dispatcher.handle_line(player, "/other echo") is False

    def test_bare_slash(self, dispatcher, player):
        assert dispatcher.handle_line(player, "/") is False


# ============================================================
# Messages and usage
# ============================================================

class TestMessages:

    def test_usage_with_aliases(self):
        cmd = EchoCommand()
        cmd.add_alias("e")
        cmd.add_alias("say")
        cmd.formatter = MessageFormatter.plain()
        assert cmd.usage(show_aliases=True) == "/test echo,e,say [a] [b]"
        assert cmd.usage() == "/test echo [a] [b]"

    def test_usage_without_args_usage(self):
        cmd = EchoCommand()
        cmd.args_usage = ""
        cmd.formatter = MessageFormatter.plain()
        assert cmd.usage() == "/test echo"

    def test_usage_style_depends_on_viewer(self):
        formatter = MessageFormatter(codes={
            Style.COMMAND: "<c>",
            Style.COMMAND_NO_PERMISSION: "<x>",
            Style.ARGS_USAGE: "<a>",
        })
        cmd = EchoCommand()
        cmd.permission = "test.command.echo"
        cmd.formatter = formatter

        allowed = RecordingSender(permissions={"test.command.echo"})
        denied = RecordingSender()
        assert cmd.usage(allowed) == f"<c>/test echo{ANSI_RESET}<a> [a] [b]{ANSI_RESET}"
        assert cmd.usage(denied) == f"<x>/test echo{ANSI_RESET}<a> [a] [b]{ANSI_RESET}"
        assert cmd.usage() == f"<c>/test echo{ANSI_RESET}<a> [a] [b]{ANSI_RESET}"

    def test_usage_disabled_for_console_on_player_only(self):
        formatter = MessageFormatter(codes={Style.COMMAND: "<c>", Style.COMMAND_NO_PERMISSION: "<x>"})
        cmd = EchoCommand()
        cmd.player_only = True
        cmd.formatter = formatter
        assert cmd.usage(ConsoleSender()).startswith("<x>")

    def test_error_message_with_input(self):
        cmd = EchoCommand()
        cmd.formatter = MessageFormatter.plain()
        assert cmd.error_message(CommandError.NOT_A_NUMBER, "abc") == "Not a number: abc"
        assert cmd.error_message(CommandError.NOT_A_NUMBER) == "Not a number"
        assert cmd.error_message("Custom") == "Custom"

    def test_styled_messages(self):
        formatter = MessageFormatter(codes={Style.ERROR: "<e>", Style.SUCCESS: "<s>"})
        cmd = EchoCommand()
        cmd.formatter = formatter
        assert cmd.success_message("done") == f"<s>done{ANSI_RESET}"
        assert cmd.error_message("bad") == f"<e>bad{ANSI_RESET}"

    def test_color_disabled(self):
        formatter = MessageFormatter(color=False)
        assert formatter.style(Style.ERROR, "plain") == "plain"


# ============================================================
# PermissionTree
# ============================================================

class TestPermissionTree:

    def test_wildcard_parent(self):
        assert wildcard_parent("a.b.c") == "a.b.*"
        assert wildcard_parent("a") == "*"

    def test_creates_wildcard_ancestor(self):
        tree = PermissionTree()
        tree.ensure_registered("a.b.c", "Use c")
        assert tree.get("a.b.c").description == "Use c"
        assert tree.get("a.b.*").children == {"a.b.c": True}

    def test_idempotent(self):
        once = PermissionTree()
        once.ensure_registered("a.b.c", "Use c")

        twice = PermissionTree()
        twice.ensure_registered("a.b.c", "Use c")
        twice.ensure_registered("a.b.c", "Use c")

        assert sorted(once.names()) == sorted(twice.names())
        assert len(twice) == 2
        for name in once.names():
            assert once.get(name) == twice.get(name)

    def test_siblings_share_wildcard(self):
        tree = PermissionTree()
        tree.ensure_registered("a.b.c")
        tree.ensure_registered("a.b.d")
        assert tree.get("a.b.*").children == {"a.b.c": True, "a.b.d": True}

    def test_single_segment_hangs_under_root(self):
        tree = PermissionTree()
        tree.ensure_registered("reload")
        assert tree.get("*").children == {"reload": True}

    def test_wildcard_grant_implies_children(self):
        tree = PermissionTree()
        tree.ensure_registered("a.b.c")
        assert tree.implies({"a.b.*"}, "a.b.c")
        assert not tree.implies({"a.x.*"}, "a.b.c")
        assert tree.implies({"a.b.c"}, "a.b.c")

    def test_negated_child(self):
        tree = PermissionTree()
        tree.ensure_registered("a.b.c")
        tree.set_child("a.b.*", "a.b.c", False)
        assert not tree.implies({"a.b.*"}, "a.b.c")
        assert tree.implies({"a.b.*", "a.b.c"}, "a.b.c")

    def test_player_sender_uses_tree(self, dispatcher):
        cmd = EchoCommand()
        cmd.permission = "test.command.echo"
        dispatcher.register(cmd)

        messages = []
        player = PlayerSender("alex", permissions={"test.command.*"},
                              tree=dispatcher.permissions, output=messages.append)
        dispatcher.dispatch(player, "test", ["echo"])
        assert messages == ["ok"]

    def test_player_sender_without_tree(self):
        player = PlayerSender("alex", permissions={"a.b.*"})
        assert player.has_permission("a.b.*")
        assert not player.has_permission("a.b.c")

    def test_published_nodes_are_read_only(self):
        tree = PermissionTree()
        tree.ensure_registered("a.b.c")
        with pytest.raises(TypeError):
            tree.get("a.b.*").children["a.b.d"] = True

    def test_registration_while_checking_permissions(self, dispatcher):
        player = PlayerSender("alex", permissions={"a.b.*"}, tree=dispatcher.permissions)
        stop = threading.Event()
        errors = []

        def check():
            while not stop.is_set():
                try:
                    player.has_permission("a.b.zzz")
                except Exception as e:
                    errors.append(repr(e))
                    return

        readers = [threading.Thread(target=check) for _ in range(4)]
        for reader in readers:
            reader.start()
        try:
            for i in range(2000):
                cmd = EchoCommand(name=f"c{i}")
                cmd.permission = f"a.b.c{i}"
                assert dispatcher.register(cmd)
        finally:
            stop.set()
            for reader in readers:
                reader.join()

        assert errors == []
        assert len(dispatcher.permissions.get("a.b.*").children) == 2000
        assert player.has_permission("a.b.c1999")


# ============================================================
# PlaceholderRegistry
# ============================================================

class TestPlaceholderRegistry:

    def test_reserved_token(self):
        with pytest.raises(ReservedTokenError):
            PlaceholderRegistry().register(WILDCARD_TOKEN, list)

    def test_resolve_is_lazy_and_ordered(self):
        names = ["b", "a"]
        registry = PlaceholderRegistry()
        registry.register("%n%", lambda: names)
        names.append("c")
        assert registry.resolve("%n%") == ["b", "a", "c"]

    def test_stringify(self):
        registry = PlaceholderRegistry()
        registry.register("%num%", lambda: [1, 2], lambda n: f"#{n}")
        assert registry.resolve("%num%") == ["#1", "#2"]

    def test_unknown_token(self):
        with pytest.raises(KeyError):
            PlaceholderRegistry().resolve("%nope%")


# ============================================================
# Help
# ============================================================

class TestPaginate:

    def test_pages(self):
        items = list(range(10))
        first = paginate(items, 9, 1)
        second = paginate(items, 9, 2)
        assert first.content == list(range(9))
        assert second.content == [9]
        assert first.total_pages == second.total_pages == 2

    def test_unlimited_page_size(self):
        page = paginate(list(range(5)), 0, 1)
        assert page.content == list(range(5))
        assert page.total_pages == 1

    def test_out_of_range(self):
        assert paginate([1, 2], 1, 0).content == []
        assert paginate([1, 2], 1, 3).content == []

    def test_empty(self):
        assert paginate([], 5, 1).total_pages == 0


class TestHelp:

    @pytest.fixture
    def loaded(self, dispatcher):
        dispatcher.register_help_command("test", header="Commands %page%", commands_per_page=2)
        for name in ("one", "two", "three"):
            dispatcher.register(EchoCommand(name))
        secret = EchoCommand("secret")
        secret.permission = "test.secret"
        secret.description = "Hidden"
        dispatcher.register(secret)
        return dispatcher

    def test_player_pages_hide_unpermitted(self, loaded, player):
        loaded.dispatch(player, "test", ["help"])
        loaded.dispatch(player, "test", ["?", "2"])
        first, second = player.messages
        assert first.startswith("Commands 1/2\n/test help,? [page=1] Shows a list")
        assert "/test one" in first
        assert "/test two" in second and "/test three" in second
        assert "secret" not in first + second

    def test_console_sees_everything_on_one_page(self, loaded):
        messages = []
        loaded.dispatch(ConsoleSender(output=messages.append), "test", ["help"])
        (text,) = messages
        assert text.startswith("\nCommands 1/1\n")
        assert "/test secret [a] [b] Hidden" in text

    def test_page_out_of_bounds(self, loaded, player):
        loaded.dispatch(player, "test", ["help", "3"])
        assert player.messages == ["Page must be between 1 and 2"]

    def test_not_a_number(self, loaded, player):
        loaded.dispatch(player, "test", ["help", "abc"])
        assert player.messages == ["Not a number: abc Correct usage:\n/test help [page=1]"]

    def test_too_many_args(self, loaded, player):
        loaded.dispatch(player, "test", ["help", "1", "2"])
        assert player.messages[0].startswith("Too much input: 2")

    def test_lists_commands_registered_after_help(self, dispatcher, player):
        dispatcher.register_help_command("test")
        dispatcher.register(EchoCommand("late"))
        dispatcher.dispatch(player, "test", [])
        assert "/test late" in player.messages[0]

    def test_show_unpermitted_when_not_hidden(self, player):
        registry = CommandRegistry()
        help_cmd = HelpCommand(registry, "test", hide_unpermitted=False,
                               formatter=MessageFormatter.plain())
        registry.register(help_cmd)
        secret = EchoCommand("secret")
        secret.permission = "test.secret"
        registry.register(secret)

        help_cmd.handle(player, [])
        assert "/test secret" in player.messages[0]
