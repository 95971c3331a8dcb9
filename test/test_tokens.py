"""
Tests for the Tokens sequence and its consumed mask.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from optbind import Tokens


class TestTokens(TestCase):

    def testSequenceBehavior(self):
        tokens = Tokens(["-n", "5", "rest"])
        self.assertEqual(len(tokens), 3)
        self.assertEqual(tokens[0], "-n")
        self.assertEqual(tokens[-1], "rest")
        self.assertEqual(tokens[1:], ["5", "rest"])
        self.assertEqual(list(tokens), ["-n", "5", "rest"])

    def testRejectsBareString(self):
        with self.assertRaises(TypeError):
            Tokens("-n 5")

    def testRejectsNonStringItems(self):
        with self.assertRaises(TypeError):
            Tokens(["-n", 5])

    def testEmptyTokensStartConsumed(self):
        tokens = Tokens(["", "x"])
        self.assertTrue(tokens.consumed(0))
        self.assertFalse(tokens.consumed(1))

    def testBlankHidesToken(self):
        tokens = Tokens(["-n", "5"])
        tokens.blank(1)
        self.assertEqual(tokens[1], "")
        self.assertEqual(tokens[0:2], ["-n", ""])
        self.assertTrue(tokens.consumed(1))

    def testBlankTwiceIsNoop(self):
        tokens = Tokens(["-n"])
        tokens.blank(0)
        tokens.blank(0)
        self.assertEqual(list(tokens), [""])

    def testRewriteReplacesText(self):
        tokens = Tokens(["-vq"])
        tokens.rewrite(0, "-q")
        self.assertEqual(tokens[0], "-q")
        self.assertFalse(tokens.consumed(0))

    def testRewriteToBareDashConsumes(self):
        tokens = Tokens(["-v"])
        tokens.rewrite(0, "-")
        self.assertTrue(tokens.consumed(0))
        self.assertEqual(tokens[0], "")

    def testRewriteConsumedIsNoop(self):
        tokens = Tokens(["-vq"])
        tokens.blank(0)
        tokens.rewrite(0, "-q")
        self.assertEqual(tokens[0], "")

    def testOriginalIsKept(self):
        tokens = Tokens(["-vq", "x"])
        tokens.rewrite(0, "-q")
        tokens.blank(1)
        self.assertEqual(tokens.original, ("-vq", "x"))

    def testPendingAndRemaining(self):
        tokens = Tokens(["a", "b", "c"])
        tokens.blank(1)
        self.assertEqual(list(tokens.pending()), [(0, "a"), (2, "c")])
        self.assertEqual(tokens.remaining(), ["a", "c"])

    def testRepr(self):
        tokens = Tokens(["a", "b"])
        tokens.blank(0)
        self.assertEqual(repr(tokens), "tokens(['', 'b'])")


if __name__ == "__main__":
    unittest.main()
