"""
Shared handlers and actors for the herald test-suite.

Contents
- RecordingActor: collects every line sent to it and answers permission
  checks from a fixed set.
- Plugin: host context object exposing a method commands can call.
- MyHandler: the reference command set (hello, greet, say, foo, bar, secret,
  garply) together with its sub-command handlers FooHandler and BarHandler.
- my_completer: completes "ZerothAngel" for string parameters.
"""
from herald import (
    ACTOR,
    CONTEXT,
    HELP,
    SESSION,
    Flag,
    ParseError,
    Positional,
    Rest,
    SessionValue,
    command,
    require,
    subcommand,
)
from herald.utils import startswith


class RecordingActor:
    """Actor double: records sent lines, grants a fixed set of permissions."""

    def __init__(self, name="tester", permissions=()):
        self.name = name
        self.permissions = set(permissions)
        self.lines = []

    def send_line(self, text):
        self.lines.append(text)

    def has_permission(self, permission):
        return permission in self.permissions

    def drain(self):
        lines, self.lines = self.lines, []
        return lines

    def __repr__(self):
        return f"RecordingActor({self.name!r})"


class Plugin:
    def test(self, actor):
        actor.send_line("yay!")


class FooHandler:
    @command("hello")
    def hello(self, actor=ACTOR):
        actor.send_line("Hello from the foo sub-command!")


class BarHandler:
    @command("greet")
    def greet(
            self,
            actor=ACTOR,
            name=SessionValue("name", type=str),
            option=Flag("-o", type=str, value_name="option"),
    ):
        actor.send_line(f"Hello, {name}")
        if option is not None:
            actor.send_line(f"With option = {option}!")


class MyHandler:
    def __init__(self):
        self.foo_handler = FooHandler()
        self.bar_handler = BarHandler()

    @command("hello", "greetings")
    def hello(self, actor=ACTOR, flag=Flag("-f")):
        actor.send_line("Hello World!")
        if flag:
            actor.send_line("With flag!")

    @command("greet")
    def greet(self, actor=ACTOR, name=Positional(completer="myCompleter"), option=Flag("-o", type=str)):
        actor.send_line(f"Hello, {name}")
        if option is not None:
            actor.send_line(f"With option = {option}!")

    @command("say")
    def say(self, actor=ACTOR, args=Rest(completer="myCompleter")):
        actor.send_line(" ".join(args))

    @subcommand("foo", children=FooHandler)
    def foo(self, args=Rest()):
        if not args:
            raise ParseError("Missing sub-command")
        return self.foo_handler

    @subcommand("bar", children=BarHandler)
    def bar(self, actor=ACTOR, help=HELP, session=SESSION, name=Positional(), args=Rest()):
        if not args:
            help.for_command("greet", self.bar_handler).show()
            return None
        session["name"] = name
        return self.bar_handler

    @require("foo.secret")
    @command("secret")
    def secret(self, actor=ACTOR, plugin=CONTEXT):
        actor.send_line("Spike has a crush on Rarity")
        plugin.test(actor)

    @command("garply")
    def garply(
            self,
            actor=ACTOR,
            flag=Flag("-f", "--flag"),
            option=Flag("-o", "--option", type=str),
            t=Flag("-t", type=str),
    ):
        actor.send_line(f"{'have' if flag else 'no'} flag with option = {option}")
        if t is not None:
            actor.send_line(t)


def my_completer(type, argument, actor, partial):
    if type is str and startswith("ZerothAngel", partial):
        return ["ZerothAngel"]
    return []
