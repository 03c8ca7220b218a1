"""
Faults module tests (codes, equality, rendering, trigger).

Scope
- Validate the fault hierarchy and its stable codes.
- Validate rendering through rich (plain and fancy) and the trigger() contract.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from rich.console import Console

from nestargs.faults import (
    FaultCode,
    ArgumentSyntaxError,
    UnrecognizedArgumentError,
    UnclaimedOptionError,
    MissingValueError,
    InvalidValueError,
    SchemaConflictError,
    trigger,
)


def render(renderable):
    console = Console(file=io.StringIO(), width=200, color_system=None)
    console.print(renderable)
    return console.file.getvalue()


class TestHierarchy(TestCase):
    """Every parse failure is an ArgumentSyntaxError."""

    def testSubclasses(self):
        for fault in (
            UnrecognizedArgumentError,
            UnclaimedOptionError,
            MissingValueError,
            InvalidValueError,
            SchemaConflictError,
        ):
            with self.subTest(fault=fault.__name__):
                self.assertTrue(issubclass(fault, ArgumentSyntaxError))
                self.assertIsInstance(fault.code, FaultCode)

    def testTokenCarried(self):
        self.assertEqual(UnrecognizedArgumentError("bad", token="-x").token, "-x")
        self.assertIsNone(ArgumentSyntaxError("bad").token)

    def testEquality(self):
        self.assertEqual(MissingValueError("m", token="-t"), MissingValueError("m", token="-t"))
        self.assertNotEqual(MissingValueError("m", token="-t"), MissingValueError("m", token="-s"))
        self.assertNotEqual(MissingValueError("m", token="-t"), InvalidValueError("m", token="-t"))

    def testReplaceMergesOptions(self):
        fault = UnrecognizedArgumentError("bad", token="-x").__replace__(prog="tool")
        self.assertEqual(fault.options["prog"], "tool")
        self.assertEqual(fault.token, "-x")

    def testCodeNormalizedToNumber(self):
        self.assertEqual(FaultCode.MISSING_VALUE.normalize(), "21103")


class TestRendering(TestCase):
    """rich rendering of faults."""

    def testHeaderMessageAndHint(self):
        fault = UnrecognizedArgumentError("unrecognized argument '-x'", token="-x", hint="check the spelling", prog="tool")
        output = render(fault)
        self.assertIn("[ tool — 21101 | Unrecognized Argument ]", output)
        self.assertIn("unrecognized argument '-x'", output)
        self.assertIn("check the spelling", output)

    def testUsageAppended(self):
        output = render(MissingValueError("missing", usage="usage: tool [-t <text>]"))
        self.assertIn("usage: tool [-t <text>]", output)

    def testFancyPanel(self):
        output = render(InvalidValueError("invalid", fancy=True, prog="tool"))
        self.assertIn("Invalid Value", output)
        self.assertIn("invalid", output)


class TestTrigger(TestCase):
    """trigger() raises outside shell mode."""

    def testRaisesWithOptions(self):
        with self.assertRaises(UnclaimedOptionError) as context:
            trigger(UnclaimedOptionError("left over", token="-q"), prog="tool")
        self.assertEqual(context.exception.options["prog"], "tool")

    def testRejectsNonFault(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"))


if __name__ == "__main__":
    unittest.main()
