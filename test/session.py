"""
Session and host collaborator tests.

Scope
- CommandSession mapping behavior and the typed accessor.
- Value conversion (including the boolean words) and custom converters.
- Host line delivery and permission checks; ConsoleHost output.

Conventions
- Test method names follow CamelCase per project convention.
"""
import io
import unittest
from unittest import TestCase

from rich.console import Console
from rich.text import Text

from fixtures import RecordingActor

from herald import CommandSession, ConsoleHost, Host
from herald.host import to_bool


class SessionTest(TestCase):
    def testMapping(self):
        session = CommandSession()
        session["name"] = "zed"
        self.assertIn("name", session)
        self.assertEqual(len(session), 1)
        self.assertEqual(dict(session), {"name": "zed"})
        del session["name"]
        self.assertNotIn("name", session)

    def testTypedValue(self):
        session = CommandSession({"count": 3})
        self.assertEqual(session.value("count", int), 3)
        self.assertEqual(session.value("count"), 3)
        with self.assertRaises(TypeError):
            session.value("count", str)

    def testMissingValue(self):
        session = CommandSession()
        with self.assertRaises(KeyError):
            session.value("missing")
        self.assertIsNone(session.value("missing", str, None))

    def testStringKeys(self):
        with self.assertRaises(TypeError):
            CommandSession()[1] = "one"


class HostTest(TestCase):
    def testBooleans(self):
        for text in ("true", "YES", "on", "1"):
            with self.subTest(text=text):
                self.assertTrue(to_bool(text))
        for text in ("false", "No", "OFF", "0"):
            with self.subTest(text=text):
                self.assertFalse(to_bool(text))
        with self.assertRaises(ValueError):
            to_bool("maybe")

    def testParseValue(self):
        host = Host()
        self.assertEqual(host.parse_value(int, "42"), 42)
        self.assertEqual(host.parse_value(float, "0.5"), 0.5)
        self.assertEqual(host.parse_value(str, "x"), "x")
        with self.assertRaises(ValueError):
            host.parse_value(int, "x")
        with self.assertRaises(TypeError):
            host.parse_value(complex, "1j")

    def testCustomConverters(self):
        host = Host(converters={complex: complex})
        self.assertIn(complex, host.types)
        self.assertEqual(host.parse_value(complex, "1j"), 1j)
        with self.assertRaises(TypeError):
            Host(converters={"complex": complex})
        with self.assertRaises(TypeError):
            Host(converters={complex: "complex"})

    def testDelegatesToActor(self):
        host = Host(context="ctx")
        actor = RecordingActor(permissions={"a"})
        host.send_line(actor, Text("styled", style="red"))
        host.send_line(actor, "plain")
        self.assertEqual(actor.lines, ["styled", "plain"])
        self.assertTrue(host.has_permission(actor, "a"))
        self.assertFalse(host.has_permission(actor, "b"))
        self.assertEqual(host.context, "ctx")


class ConsoleHostTest(TestCase):
    def setUp(self):
        self.stream = io.StringIO()
        self.console = Console(file=self.stream, width=120, color_system=None)

    def testPrintsVerbatim(self):
        host = ConsoleHost(console=self.console)
        host.send_line("operator", "/hello [-f]")
        host.send_line("operator", Text("done", style="green"))
        self.assertEqual(self.stream.getvalue(), "/hello [-f]\ndone\n")

    def testPermissions(self):
        host = ConsoleHost(console=self.console, permissions={"a"})
        self.assertTrue(host.has_permission("operator", "a"))
        self.assertFalse(host.has_permission("operator", "b"))
        self.assertTrue(ConsoleHost(permissions={"*"}).has_permission("operator", "b"))
        with self.assertRaises(TypeError):
            ConsoleHost(permissions="a")


if __name__ == "__main__":
    unittest.main()
