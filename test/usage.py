"""
Usage rendering and help builder tests.

Scope
- InvocationChain rendering: flags, value names, required and optional
  positionals, rest markers, descriptions and custom markers.
- Permission-aware rendering stops at the first forbidden link.
- HelpBuilder lines for siblings, sub-command children and whole handlers.
- Parameter description lines, and help lookups leaving the sub-command
  cache untouched.

Conventions
- Test method names follow CamelCase per project convention.
- Plain strings are compared; styles are checked on a single segment.
"""
import unittest
from unittest import TestCase

from fixtures import BarHandler, MyHandler, RecordingActor

from herald import (
    ACTOR,
    HELP,
    Dispatcher,
    Flag,
    Positional,
    Rest,
    UsageOptions,
    command,
    require,
    subcommand,
)
from herald.faults import ConfigurationError
from herald.usage import InvocationChain, Link, describe


class Admin:
    @command("list", description="list the entries")
    def list(self, verbose=Flag("-v", "--verbose"), page=Positional(type=int, optional=True)):
        pass

    @require("admin.purge")
    @command("purge", description="remove every entry")
    def purge(self, actor=ACTOR, confirm=Positional()):
        pass


class Manual:
    def __init__(self):
        self.admin = Admin()

    @subcommand("admin", description="administration")
    def admin_(self, help=HELP, args=Rest()):
        if not args:
            help.for_handler(self.admin).show()
            return None
        return self.admin

    @command("usage")
    def usage(self, help=HELP, everything=Flag("-a")):
        help.for_command("manual", permissions=not everything).for_command("usage").show()

    @require("staff")
    @command("manual", description="read the manual")
    def manual(self, topic=Positional(optional=True)):
        pass

    @command("broken")
    def broken(self, help=HELP):
        help.for_command("nope")


class Page:
    @command("read", description="read a page")
    def read(self, number=Positional(type=int, descr="page number")):
        pass


class Notebook:
    @command("note", description="write a note")
    def note(self, pin=Flag("-p", descr="pin the note"), title=Positional(descr="note title"),
             body=Rest(descr="the note text")):
        pass

    @command("notes")
    def notes(self, help=HELP):
        help.for_command("note").show()

    @subcommand("page")
    def page(self, help=HELP, args=Rest()):
        if not args:
            help.for_command("read", Page()).show()
            return None
        return Page()


class ChainRenderTest(TestCase):
    """Render chains built from the reference commands."""

    def chain(self, *labels, handler=MyHandler):
        return InvocationChain((label, getattr(handler, label)) for label in labels)

    def testSingleLinks(self):
        self.assertEqual(self.chain("hello").usage(), "/hello [-f]")
        self.assertEqual(self.chain("greet").usage(), "/greet [-o <value>] <name>")
        self.assertEqual(self.chain("say").usage(), "/say [args...]")
        self.assertEqual(self.chain("garply").usage(), "/garply [-f] [-o <value>] [-t <value>]")

    def testOptionalPositional(self):
        self.assertEqual(self.chain("list", handler=Admin).usage(), "/list [-v] [page]")

    def testDescription(self):
        chain = self.chain("list", handler=Admin)
        self.assertEqual(chain.usage(description=True), "/list [-v] [page] - list the entries")
        self.assertEqual(self.chain("hello").usage(description=True), "/hello [-f]")

    def testSeveralLinks(self):
        chain = InvocationChain().extend("bar", MyHandler.bar).extend("greet", BarHandler.greet)
        self.assertEqual(str(chain), "/bar <name> [args...] greet [-o <option>]")

    def testPermissionAwareRendering(self):
        chain = InvocationChain().extend("admin", Manual.admin_).extend("purge", Admin.purge)
        actor = RecordingActor()

        def allowed(actor, permission):
            return actor.has_permission(permission)

        self.assertEqual(chain.usage(actor=actor, check=allowed), "/admin [args...]")
        actor.permissions.add("admin.purge")
        self.assertEqual(chain.usage(actor=actor, check=allowed), "/admin [args...] purge <confirm>")

    def testCustomMarkers(self):
        options = UsageOptions(prefix="!", flag_start="{", flag_end="}", value_start="=", value_end="",
                               optional_start="(", optional_end=")", delimiter=": ")
        chain = self.chain("list", handler=Admin)
        self.assertEqual(chain.usage(options, description=True), "!list {-v} (page): list the entries")
        self.assertEqual(self.chain("garply").usage(options), "!garply {-f} {-o =value} {-t =value}")

    def testStyles(self):
        options = UsageOptions(styles={"label": "bold red"})
        text = self.chain("hello").render(options)
        self.assertEqual(text.plain, "/hello [-f]")
        self.assertIn("bold red", [str(span.style) for span in text.spans])

    def testUnknownStyleKind(self):
        with self.assertRaises(ValueError):
            UsageOptions(styles={"nope": "red"})
        with self.assertRaises(TypeError):
            UsageOptions(prefix=1)

    def testChainIsImmutable(self):
        chain = self.chain("hello")
        extended = chain.extend("greet", MyHandler.greet)
        self.assertEqual(len(chain), 1)
        self.assertEqual(len(extended), 2)
        self.assertEqual(extended.last, Link("greet", MyHandler.greet))
        self.assertEqual(chain, self.chain("hello"))
        self.assertEqual(hash(chain), hash(self.chain("hello")))
        self.assertIsNone(InvocationChain().last)
        self.assertEqual(InvocationChain().usage(), "/")


class HelpBuilderTest(TestCase):
    """Help lines sent by commands through Special(HELP)."""

    def setUp(self):
        self.dispatcher = Dispatcher(Manual())
        self.actor = RecordingActor()

    def testForHandler(self):
        self.dispatcher.execute(self.actor, "admin", [])
        self.assertEqual(self.actor.drain(), ["/admin [args...] list [-v] [page] - list the entries"])

        self.actor.permissions.add("admin.purge")
        self.dispatcher.execute(self.actor, "admin", [])
        self.assertEqual(self.actor.drain(), [
            "/admin [args...] list [-v] [page] - list the entries",
            "/admin [args...] purge <confirm> - remove every entry",
        ])

    def testForCommandSiblings(self):
        self.dispatcher.execute(self.actor, "usage", [])
        self.assertEqual(self.actor.drain(), ["/usage [-a]"])

        self.dispatcher.execute(self.actor, "usage", ["-a"])
        self.assertEqual(self.actor.drain(), ["/manual [topic] - read the manual", "/usage [-a]"])

        self.actor.permissions.add("staff")
        self.dispatcher.execute(self.actor, "usage", [])
        self.assertEqual(self.actor.drain(), ["/manual [topic] - read the manual", "/usage [-a]"])

    def testUnknownCommand(self):
        with self.assertRaises(ConfigurationError):
            self.dispatcher.execute(self.actor, "broken", [])


class ParameterDescriptionTest(TestCase):
    """Parameters carrying a descr get their own help lines."""

    def setUp(self):
        self.dispatcher = Dispatcher(Notebook())
        self.actor = RecordingActor()

    def testDescribe(self):
        self.assertEqual([line.plain for line in describe(Notebook.note)], [
            "    [-p] - pin the note",
            "    <title> - note title",
            "    [body...] - the note text",
        ])
        self.assertEqual(describe(MyHandler.greet), [])

    def testDescribeWithMarkers(self):
        options = UsageOptions(required_start="{", required_end="}", delimiter=": ")
        self.assertEqual([line.plain for line in describe(Page.read, options)], ["    {number}: page number"])

    def testHelpLines(self):
        self.dispatcher.execute(self.actor, "notes", [])
        self.assertEqual(self.actor.drain(), [
            "/note [-p] <title> [body...] - write a note",
            "    [-p] - pin the note",
            "    <title> - note title",
            "    [body...] - the note text",
        ])

        self.dispatcher.execute(self.actor, "page", [])
        self.assertEqual(self.actor.drain(), [
            "/page [args...] read <number> - read a page",
            "    <number> - page number",
        ])

    def testHandlerLookupsLeaveCacheAlone(self):
        for _ in range(50):
            self.dispatcher.execute(self.actor, "page", [])
        self.assertEqual(len(self.actor.drain()), 100)
        self.assertEqual(len(self.dispatcher.registry._children), 0)

        for _ in range(50):
            self.dispatcher.execute(self.actor, "page", ["read", "1"])
        self.assertLessEqual(len(self.dispatcher.registry._children), 1)


if __name__ == "__main__":
    unittest.main()
