"""
Parser behavioral tests (flag phase, clusters, positionals, residual).

Scope
- Boolean and value-taking flags, aliases and the "--" terminator.
- Clusters of single-letter flags, with values bound in letter order.
- Missing values, unknown flags, missing positionals.
- Commands without flags treat dash tokens as ordinary tokens.

Conventions
- Test method names follow CamelCase per project convention.
- Commands are taken from the reference handler in fixtures.
"""
import unittest
from unittest import TestCase

from fixtures import MyHandler

from herald import Flag, Positional, Rest, command
from herald.faults import MissingArgumentError, MissingValueError, UnknownFlagError
from herald.parsing import Scanner, parse


@command("copy")
def copy(source=Positional(), target=Positional(optional=True), verbose=Flag("-v", "--verbose"), extra=Rest()):
    pass


class ParsingTest(TestCase):
    """Parse token sequences against declared commands."""

    def setUp(self):
        self.garply = MyHandler.garply
        self.greet = MyHandler.greet
        self.say = MyHandler.say

    def testNoTokens(self):
        parsed = parse(self.garply, [])
        self.assertEqual(dict(parsed.values), {})
        self.assertEqual(parsed.present, frozenset())
        self.assertEqual(parsed.rest, ())

    def testBooleanFlagAliases(self):
        for token in ("-f", "--flag"):
            with self.subTest(token=token):
                parsed = parse(self.garply, [token])
                self.assertIn("-f", parsed.present)
                self.assertIn("-f", parsed)

    def testValueFlagAliases(self):
        for token in ("-o", "--option"):
            with self.subTest(token=token):
                self.assertEqual(parse(self.garply, [token, "blah"]).get("-o"), "blah")

    def testFlagsInAnyOrder(self):
        for tokens in (["-f", "-o", "blah"], ["-o", "blah", "-f"]):
            with self.subTest(tokens=tokens):
                parsed = parse(self.garply, tokens)
                self.assertIn("-f", parsed.present)
                self.assertEqual(parsed.get("-o"), "blah")

    def testMissingValue(self):
        for tokens in (["-o"], ["-fo"], ["-of"]):
            with self.subTest(tokens=tokens):
                with self.assertRaises(MissingValueError) as context:
                    parse(self.garply, tokens)
                self.assertEqual(context.exception.flag, "-o")

    def testMissingValueKeepsAlias(self):
        with self.assertRaises(MissingValueError) as context:
            parse(self.garply, ["--option"])
        self.assertEqual(context.exception.flag, "-o")
        self.assertEqual(context.exception.token, "--option")

    def testClusterWithValue(self):
        for tokens in (["-fo", "blah"], ["-of", "blah"]):
            with self.subTest(tokens=tokens):
                parsed = parse(self.garply, tokens)
                self.assertIn("-f", parsed.present)
                self.assertEqual(parsed.get("-o"), "blah")

    def testClusterValuesBindInLetterOrder(self):
        parsed = parse(self.garply, ["-oft", "blah", "garply"])
        self.assertEqual((parsed.get("-o"), parsed.get("-t")), ("blah", "garply"))

        parsed = parse(self.garply, ["-tfo", "blah", "garply"])
        self.assertEqual((parsed.get("-t"), parsed.get("-o")), ("blah", "garply"))

    def testClusterMissingSecondValue(self):
        with self.assertRaises(MissingValueError) as context:
            parse(self.garply, ["-oft", "blah"])
        self.assertEqual(context.exception.flag, "-t")

    def testValueTakenVerbatim(self):
        parsed = parse(self.garply, ["-o", "-f"])
        self.assertEqual(parsed.get("-o"), "-f")
        self.assertNotIn("-f", parsed.present)

    def testUnknownFlag(self):
        for tokens in (["-x"], ["-fx"], ["--nope"], ["-"]):
            with self.subTest(tokens=tokens):
                with self.assertRaises(UnknownFlagError):
                    parse(self.garply, tokens)

    def testLongNamesAreNotClustered(self):
        with self.assertRaises(UnknownFlagError) as context:
            parse(self.garply, ["--fo"])
        self.assertEqual(context.exception.flag, "--fo")

    def testMissingPositional(self):
        for tokens in ([], ["-o", "foo"]):
            with self.subTest(tokens=tokens):
                with self.assertRaises(MissingArgumentError) as context:
                    parse(self.greet, tokens)
                self.assertEqual(context.exception.name, "name")

    def testPositionalAfterFlags(self):
        parsed = parse(self.greet, ["-o", "foo", "bar", "garply"])
        self.assertEqual(parsed.get("name"), "bar")
        self.assertEqual(parsed.get("-o"), "foo")
        self.assertEqual(parsed.rest, ("garply",))

    def testTerminatorEndsFlagPhase(self):
        parsed = parse(self.greet, ["--", "-garply"])
        self.assertEqual(parsed.get("name"), "-garply")

    def testPositionalEndsFlagPhase(self):
        parsed = parse(copy, ["a", "-v"])
        self.assertEqual(parsed.get("source"), "a")
        self.assertEqual(parsed.get("target"), "-v")
        self.assertNotIn("-v", parsed.present)

    def testOptionalPositionalMayBeAbsent(self):
        parsed = parse(copy, ["-v", "a"])
        self.assertEqual(parsed.get("source"), "a")
        self.assertIsNone(parsed.get("target"))
        self.assertNotIn("target", parsed)

    def testResidualAfterPositionals(self):
        parsed = parse(copy, ["a", "b", "c", "d"])
        self.assertEqual(parsed.rest, ("c", "d"))

    def testCommandWithoutFlagsKeepsDashTokens(self):
        parsed = parse(self.say, ["-Hello", "there"])
        self.assertEqual(parsed.rest, ("-Hello", "there"))

    def testScannerState(self):
        scanner = Scanner(self.garply)
        self.assertTrue(scanner.flagging)
        scanner.feed("-o")
        self.assertEqual([flag.name for flag, _ in scanner.pending], ["-o"])
        scanner.feed("blah")
        self.assertFalse(scanner.pending)
        scanner.feed("--")
        self.assertFalse(scanner.flagging)

    def testNonStringToken(self):
        with self.assertRaises(TypeError):
            parse(self.garply, [1])


if __name__ == "__main__":
    unittest.main()
