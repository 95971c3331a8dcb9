"""
Default applier behavioral tests (exact type checks, copies, resource defaults).

Scope
- Validate that defaults apply only to unmatched options.
- Validate exact runtime type checks (a bool is not an int, an int is not a float).
- Validate list defaults are copied into the slot.
- Validate resource defaults: opened from identifier strings, lists all-or-nothing.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import os
import tempfile
import unittest
from unittest import TestCase
from unittest.mock import patch

from optbind import Option, DefaultTypeMismatchError, ResourceOpenError, UnsupportedTypeError
from optbind import slots
from optbind.slots import Slot, Bool, Int, Float, String, Resource, IntList, FloatList, StringList, ResourceList


class Custom(Slot):
    def __init__(self):
        super().__init__(None)


class TestScalarDefaults(TestCase):
    """Behavioral tests for scalar defaults."""

    def testMatchingDefaultsApply(self):
        for slot, default in ((Bool(), True), (Int(), 3), (Float(), 1.5), (String(), "x")):
            with self.subTest(slot=slot):
                o = Option("--value", slot=slot, default=default)
                o.apply_default()
                self.assertEqual(o.value, default)
                self.assertIs(type(o.value), type(default))

    def testCounterTakesIntegerDefault(self):
        o = Option("-v", slot=Int(counter=True), default=2)
        o.apply_default()
        self.assertEqual(o.value, 2)

    def testNoDefaultKeepsInitialValue(self):
        o = Option("-n", slot=Int())
        o.apply_default()
        self.assertEqual(o.value, 0)
        self.assertFalse(o.matched)

    def testBoolIsNotAnInteger(self):
        o = Option("-n", slot=Int(), default=True)
        with self.assertRaises(DefaultTypeMismatchError) as context:
            o.apply_default()
        self.assertEqual(context.exception.options["expected"], "int")

    def testIntegerIsNotAFloat(self):
        o = Option("-r", slot=Float(), default=1)
        with self.assertRaises(DefaultTypeMismatchError) as context:
            o.apply_default()
        self.assertIn("cannot use default of type 'int' as type 'float'", str(context.exception))
        self.assertEqual(o.value, 0.0)

    def testStringRejectsNonString(self):
        with self.assertRaises(DefaultTypeMismatchError):
            Option("--name", slot=String(), default=5).apply_default()

    def testMatchedOptionSkipsDefault(self):
        o = Option("-n", slot=Int(), default="not an int")
        o.bind(["1"])
        o.apply_default()
        self.assertEqual(o.value, 1)

    def testForeignSlotDefaultIsUnsupported(self):
        with self.assertRaises(UnsupportedTypeError):
            Option("--custom", slot=Custom(), default="x").apply_default()


class TestListDefaults(TestCase):
    """Behavioral tests for list defaults."""

    def testListDefaultIsCopied(self):
        default = ["a", "b"]
        o = Option("-s", slot=StringList(), default=default)
        o.apply_default()
        self.assertEqual(o.value, ["a", "b"])
        o.value.append("c")
        self.assertEqual(default, ["a", "b"])

    def testNumericListDefaults(self):
        o = Option("-i", slot=IntList(), default=[1, 2])
        o.apply_default()
        self.assertEqual(o.value, [1, 2])
        o = Option("-f", slot=FloatList(), default=[0.5])
        o.apply_default()
        self.assertEqual(o.value, [0.5])

    def testListElementsChecked(self):
        with self.assertRaises(DefaultTypeMismatchError) as context:
            Option("-i", slot=IntList(), default=[1, True]).apply_default()
        self.assertEqual(context.exception.options["expected"], "list[int]")

    def testTupleIsNotAList(self):
        with self.assertRaises(DefaultTypeMismatchError):
            Option("-s", slot=StringList(), default=("a",)).apply_default()


class TestResourceDefaults(TestCase):
    """Behavioral tests for Resource and ResourceList defaults."""

    def setUp(self):
        self.directory = tempfile.TemporaryDirectory()
        self.addCleanup(self.directory.cleanup)

    def path(self, name, content=Ellipsis):
        path = os.path.join(self.directory.name, name)
        if content is not Ellipsis:
            with open(path, "w", encoding="utf-8") as file:
                file.write(content)
        return path

    def testResourceDefaultIsOpened(self):
        o = Option("--file", slot=Resource(encoding="utf-8"), default=self.path("a.txt", "alpha"))
        o.apply_default()
        self.addCleanup(o.value.close)
        self.assertEqual(o.value.read(), "alpha")

    def testResourceDefaultMustBeIdentifier(self):
        with self.assertRaises(DefaultTypeMismatchError):
            Option("--file", slot=Resource(), default=3).apply_default()

    def testResourceDefaultMissingFails(self):
        o = Option("--file", slot=Resource(), default=self.path("missing.txt"))
        with self.assertRaises(ResourceOpenError):
            o.apply_default()
        self.assertIsNone(o.value)

    def testResourceListDefaultOpensAll(self):
        o = Option("-i", slot=ResourceList(), default=[self.path("a.txt", "a"), self.path("b.txt", "b")])
        o.apply_default()
        for handle in o.value:
            self.addCleanup(handle.close)
        self.assertEqual([handle.read() for handle in o.value], ["a", "b"])

    def testResourceListDefaultRollsBack(self):
        opened = []

        def recording(identifier, slot):
            handle = slots.acquire(identifier, slot)
            opened.append(handle)
            return handle

        o = Option("-i", slot=ResourceList(), default=[
            self.path("a.txt", "a"),
            self.path("missing.txt"),
            self.path("c.txt", "c"),
        ])
        with patch("optbind.options.acquire", side_effect=recording):
            with self.assertRaises(ResourceOpenError) as context:
                o.apply_default()
        for handle in opened:
            self.addCleanup(handle.close)
        self.assertEqual(o.value, [])
        self.assertEqual(len(opened), 1)
        self.assertTrue(opened[0].closed)
        self.assertEqual(context.exception.options["releases"], ())
        self.assertIsInstance(context.exception.__cause__, FileNotFoundError)


if __name__ == "__main__":
    unittest.main()
