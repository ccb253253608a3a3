"""
Help rendering tests (usage lines, description, sections, layout).

Conventions
- Test method names follow CamelCase per project convention.
- Assertions use Command.help(), the plain-text rendering.
"""

from __future__ import annotations

import re
import unittest
from unittest import TestCase

from clasp import Command, Option, Flag, Parameter, Subcommand

DETAIL = "  %-20s %s"


class TestUsage(TestCase):
    """Usage lines, explicit and derived."""

    def testBareCommand(self):
        class Bare(Command):
            pass

        self.assertEqual(Bare("cmd").help(), "Usage: cmd\n")

    def testDerivedUsageWithOptions(self):
        class Cook(Command):
            pass

        Cook.option(["-f", "--flavour"], "FLAVOUR", "Flavour of the month")
        Cook.option(["-c", "--color"], "COLOR", "Preferred hue")
        Cook.parameter("[ARG] ...", "extra arguments", attribute_name="arguments")

        text = Cook("cmd").help()
        self.assertIn("Usage: cmd [OPTIONS] [ARG] ...\n", text)
        self.assertRegex(text, r"--flavour FLAVOUR +Flavour of the month")
        self.assertRegex(text, r"--color COLOR +Preferred hue")

    def testDerivedUsageWithSubcommands(self):
        class Speak(Command):
            pass

        class Main(Command):
            speak = Subcommand("speak", Speak, "say something")

        self.assertEqual(Main("main").help(), "\n".join([
            "Usage: main SUBCOMMAND [ARGS] ...",
            "",
            "Subcommands:",
            DETAIL % ("speak", "say something"),
            "",
        ]))

    def testExplicitUsage(self):
        class Blah(Command):
            pass

        Blah.usage("FOO BAR ...")
        self.assertIn("blah FOO BAR ...\n", Blah("blah").help())

    def testMultipleUsages(self):
        class Put(Command, usage="THIS HERE"):
            pass

        Put.usage("THAT THERE")
        text = Put("put").help()
        self.assertIn("Usage: put THIS HERE\n", text)
        self.assertIn("       put THAT THERE\n", text)

    def testUsageKeywordAcceptsSequence(self):
        class Put(Command, usage=["THIS HERE", "THAT THERE"]):
            pass

        self.assertEqual(Put.usages(), ["THIS HERE", "THAT THERE"])
        with self.assertRaises(TypeError):
            class Broken(Command, usage=[1]):  # NOQA: F-841
                pass


class TestDescription(TestCase):
    """Descriptions from describe(), docstrings and the descr keyword."""

    def testDescribeNormalizesIndentation(self):
        class Punt(Command):
            pass

        Punt.describe("""
            Punt is an example command.  It doesn't do much, really.

            The prefix at the beginning of this description should be normalised
            to flush left.
        """)
        text = Punt("punt").help()
        self.assertRegex(text, re.compile(r"^Punt is an example command", re.M))
        self.assertRegex(text, re.compile(r"^The prefix", re.M))
        self.assertTrue(text.startswith("Usage: punt\n\nPunt is"))

    def testDocstringIsDescription(self):
        class Cook(Command):
            """
            Cook something tasty.
            """

        self.assertEqual(Cook.description(), "Cook something tasty.")

    def testDescrKeywordWins(self):
        class Cook(Command, descr="Explicit."):
            """Implicit."""

        self.assertEqual(Cook.description(), "Explicit.")

    def testDescriptionIsNotInherited(self):
        class Cook(Command):
            """Cook something tasty."""

        class Bake(Cook):
            pass

        self.assertIsNone(Bake.description())


class TestSections(TestCase):
    """Parameters, Subcommands and Options sections."""

    def testFullLayout(self):
        class Cook(Command):
            """
            Cook something tasty.
            """
            flavour = Option("-f", "--flavour", metavar="FLAVOUR", descr="Flavour of the month", default="vanilla")
            nuts = Flag("-n", "--[no-]nuts", descr="Nuts (or not)")
            dish = Parameter("DISH", descr="what to cook")

        self.assertEqual(Cook("cook").help(), "\n".join([
            "Usage: cook [OPTIONS] DISH",
            "",
            "Cook something tasty.",
            "",
            "Parameters:",
            DETAIL % ("DISH", "what to cook"),
            "",
            "Options:",
            DETAIL % ("-f, --flavour FLAVOUR", "Flavour of the month (default: vanilla)"),
            DETAIL % ("-n, --[no-]nuts", "Nuts (or not)"),
            DETAIL % ("-h, --help", "print help"),
            "",
        ]))

    def testDefaultIsDescribed(self):
        class Cluster(Command):
            pass

        Cluster.option("--nodes", "N", "number of nodes", default=2)
        self.assertIn("number of nodes (default: 2)", Cluster("cmd").help())

    def testRowsWithoutDescriptionHaveNoTrailingSpace(self):
        class Copy(Command):
            pass

        Copy.parameter("SOURCE")
        self.assertIn("\n  SOURCE\n", Copy("cp").help())

    def testUndescribedDeclarations(self):
        class Nodes(Command):
            nodes = Option("--nodes", default=2)
            verbose = Flag("--verbose")

        class Main(Command):
            nodes = Subcommand("nodes", Nodes)

        text = Nodes("cmd").help()
        self.assertIn(DETAIL % ("--nodes NODES", "(default: 2)") + "\n", text)
        self.assertIn("\n  --verbose\n", text)
        self.assertNotIn("None", text)
        self.assertIn("\n  nodes\n", Main("main").help())

    def testClaimedHelpSwitchIsNotListed(self):
        class Measure(Command):
            height = Option("-h", "--height", metavar="N", descr="height in cm")

        text = Measure("measure").help()
        self.assertIn(DETAIL % ("-h, --height N", "height in cm") + "\n", text)
        self.assertIn(DETAIL % ("--help", "print help") + "\n", text)
        self.assertNotIn("-h, --help", text)

    def testShadowedOptionsAreStillListed(self):
        class Base(Command):
            color = Option("--color", metavar="COLOR", descr="Preferred hue")

        class Derived(Base):
            hue = Option("--color", metavar="HUE", descr="Preferred hue, upper-cased")

        text = Derived("cmd").help()
        self.assertIn("--color COLOR", text)
        self.assertIn("--color HUE", text)

    def testColorfulRenderKeepsPlainText(self):
        class Cook(Command, colorful=True):
            nuts = Flag("--nuts", descr="Nuts")

        command = Cook("cook")
        rendered = command.render()
        self.assertEqual(rendered.plain, command.help())
        self.assertTrue(rendered.spans)
        self.assertTrue(command.colorful)

    def testColorfulIsInherited(self):
        class Base(Command, colorful=True):
            pass

        class Derived(Base):
            pass

        self.assertTrue(Derived("cmd").colorful)
        self.assertFalse(Command("cmd").colorful)


if __name__ == "__main__":
    unittest.main()
