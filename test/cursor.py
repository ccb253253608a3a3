"""
Token cursor tests (classification and consumption).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from clasp import NoValueError
from clasp.tokens import Tokens, is_terminator, is_long, is_cluster, is_switch


class TestClassification(TestCase):
    """Token shapes as seen by the parser."""

    def testTerminator(self):
        self.assertTrue(is_terminator("--"))
        self.assertFalse(is_terminator("---"))
        self.assertFalse(is_long("--"))
        self.assertFalse(is_cluster("--"))

    def testLongOption(self):
        self.assertTrue(is_long("--flavour"))
        self.assertTrue(is_long("--flavour=strawberry"))
        self.assertFalse(is_long("-f"))

    def testShortCluster(self):
        self.assertTrue(is_cluster("-n"))
        self.assertTrue(is_cluster("-nf"))
        self.assertFalse(is_cluster("--nuts"))

    def testLoneDashIsPositional(self):
        self.assertFalse(is_switch("-"))
        self.assertFalse(is_switch("file.txt"))


class TestTokens(TestCase):
    """Front-consuming cursor behavior."""

    def testPeekAndConsume(self):
        tokens = Tokens(["a", "b"])
        self.assertEqual(tokens.peek(), "a")
        self.assertEqual(tokens.consume(), "a")
        self.assertEqual(len(tokens), 1)
        self.assertEqual(tokens.consume(), "b")
        self.assertIsNone(tokens.peek())
        self.assertTrue(tokens.empty())

    def testConsumeOnEmptyRaisesNoValue(self):
        with self.assertRaises(NoValueError):
            Tokens().consume()

    def testDrainTakesEverythingInOrder(self):
        tokens = Tokens(("x", "y", "z"))
        self.assertEqual(tokens.drain(), ["x", "y", "z"])
        self.assertFalse(tokens)

    def testIterationDoesNotConsume(self):
        tokens = Tokens(["x", "y"])
        self.assertEqual(list(tokens), ["x", "y"])
        self.assertEqual(len(tokens), 2)

    def testRejectsStringsAndNonStrings(self):
        with self.assertRaises(TypeError):
            Tokens("abc")
        with self.assertRaises(TypeError):
            Tokens(["a", 1])


if __name__ == "__main__":
    unittest.main()
