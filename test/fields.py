"""
Fields module behavioral tests (descriptor construction and metadata).

Scope
- Validate Option: aliases, flag vs. value-taking, metavar defaults.
- Validate Parameter: ordinals, metavar defaults.
- Validate SubCommand and CommandGroup: literals, case names, nested schemas.
- Validate field binding through __set_name__ and the read-only metadata.

Conventions
- Test method names follow CamelCase per project convention.
- Never pass explicit None for metadata; omit instead.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from nestargs import command, Command, Option, Parameter, SubCommand, CommandGroup
from nestargs.utils import Unset


class TestOption(TestCase):
    """Behavioral tests for Option descriptors."""

    def testBoolOptionIsFlag(self):
        self.assertFalse(Option("-v", "--verbose", type=bool).takes_value)

    def testDefaultOptionTakesValue(self):
        self.assertTrue(Option("-t", "--string-option").takes_value)

    def testNamesKeepDeclarationOrder(self):
        self.assertEqual(Option("--verbose", "-v", type=bool).names, ("--verbose", "-v"))

    def testNamesRequired(self):
        with self.assertRaises(TypeError):
            Option()

    def testNameMustLookLikeFlag(self):
        with self.assertRaises(ValueError):
            Option("verbose")

    def testDuplicateNamesRejected(self):
        with self.assertRaises(ValueError):
            Option("-v", "-v", type=bool)

    def testFlagRejectsMetavar(self):
        with self.assertRaises(TypeError):
            Option("-v", type=bool, metavar="LEVEL")

    def testTypeMustBeCallable(self):
        with self.assertRaises(TypeError):
            Option("-n", type=3)

    def testMetavarDefaultsToCamelCasedField(self):
        self.assertEqual(Option("-t", field="string_option").metavar, "stringOption")

    def testExplicitMetavar(self):
        self.assertEqual(Option("-t", field="string_option", metavar="TEXT").metavar, "TEXT")

    def testFieldMustBeIdentifier(self):
        with self.assertRaises(ValueError):
            Option("-t", field="string-option")

    def testEmptyDescrRejected(self):
        with self.assertRaises(ValueError):
            Option("-t", descr="   ")

    def testDescrDefaultsToNone(self):
        self.assertIsNone(Option("-t").descr)

    def testMetadataIsReadOnly(self):
        option = Option("-t")
        with self.assertRaises(AttributeError):
            option.names = ("-x",)

    def testReprMentionsTypename(self):
        self.assertTrue(repr(Option("-v", type=bool)).startswith("option("))


class TestParameter(TestCase):
    """Behavioral tests for Parameter descriptors."""

    def testOrdinal(self):
        self.assertEqual(Parameter(2).ordinal, 2)

    def testNegativeOrdinalRejected(self):
        with self.assertRaises(ValueError):
            Parameter(-1)

    def testBoolOrdinalRejected(self):
        with self.assertRaises(TypeError):
            Parameter(True)

    def testMetavarDefaultsToField(self):
        self.assertEqual(Parameter(0, "source").metavar, "source")

    def testMetavarWithoutField(self):
        self.assertEqual(Parameter(1).metavar, "arg1")


class TestSubCommand(TestCase):
    """Behavioral tests for SubCommand descriptors."""

    def testLiteralWithoutCommand(self):
        subcommand = SubCommand("run")
        self.assertEqual(subcommand.name, "run")
        self.assertIs(subcommand.command, Unset)

    def testFlagShapedLiteralRejected(self):
        with self.assertRaises(ValueError):
            SubCommand("-run")

    def testWhitespaceLiteralRejected(self):
        with self.assertRaises(ValueError):
            SubCommand("run fast")

    def testCommandClassIsDerived(self):
        @command("run")
        class Run:
            fast = Option("--fast", type=bool)

        self.assertIs(SubCommand("run", Run).command, Run.__command__())

    def testCommandMustBeSchema(self):
        with self.assertRaises(TypeError):
            SubCommand("run", object())


class TestCommandGroup(TestCase):
    """Behavioral tests for CommandGroup descriptors."""

    def testCaseNamesFromCases(self):
        group = CommandGroup(Command("first"), Command("second"))
        self.assertEqual(group.names, ("first", "second"))

    def testCasesRequired(self):
        with self.assertRaises(TypeError):
            CommandGroup()

    def testDuplicateCasesRejected(self):
        with self.assertRaises(ValueError):
            CommandGroup(Command("first"), Command("first"))

    def testNestedSchemaIsUnion(self):
        group = CommandGroup(Command("first"), name="action")
        self.assertTrue(group.command.union)
        self.assertEqual(group.command.name, "action")


class TestBinding(TestCase):
    """Field identifiers learned from the class body."""

    def testSetNameBindsField(self):
        class Holder:
            verbose = Option("-v", type=bool)

        self.assertEqual(Holder.verbose.field, "verbose")

    def testExplicitFieldMustMatch(self):
        with self.assertRaises((TypeError, RuntimeError)):
            class Holder:
                verbose = Option("-v", field="loud", type=bool)


if __name__ == "__main__":
    unittest.main()
