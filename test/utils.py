"""
Tests for the internal utilities.

This module verifies the guarantees the other layers rely on:
- The `Unset` sentinel is a falsy, final, per-process singleton.
- `coalesce` only replaces `Unset`, never other falsy values.
- `rename` and `mirror` produce well-named callables and read-only views.
- `camelize` turns field identifiers into help placeholders.
"""
import copy
import unittest
from unittest import TestCase

from nestargs.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` sentinel.
    """

    def testSingleton(self) -> None:
        """
        The constructor returns the module-level instance on every call.
        """
        self.assertIs(UnsetType(), Unset)

    def testFalsy(self) -> None:
        self.assertFalse(Unset)

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testCopyPreservesSingleton(self) -> None:
        """
        copy() and deepcopy() do not produce new instances.
        """
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testUnionWithTypes(self) -> None:
        """
        `str | Unset` builds a union usable with isinstance().
        """
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("text", str | Unset)
        self.assertNotIsInstance(3, str | Unset)

    def testFinal(self) -> None:
        with self.assertRaises(TypeError):
            class Derived(UnsetType):  # NOQA: F-841
                pass


class CoalesceTest(TestCase):
    """
    Test suite for `coalesce`.
    """

    def testReplacesUnset(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testKeepsFalseyValues(self) -> None:
        # None, 0 and "" are real values.
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertEqual(coalesce("", "fallback"), "")


class RenameTest(TestCase):

    def testDirectForm(self) -> None:
        function = rename(lambda: None, "named")
        self.assertEqual((function.__name__, function.__qualname__), ("named", "named"))

    def testDecoratorForm(self) -> None:
        @rename("other")
        def function():
            pass

        self.assertEqual(function.__name__, "other")

    def testRejectsNonCallable(self) -> None:
        with self.assertRaises(TypeError):
            rename(3, "named")


class MirrorTest(TestCase):

    def testReadOnlyDetachedView(self) -> None:
        """
        The mirrored property exposes a copy; the backing list stays private.
        """
        class Holder:
            values = mirror("values")

            def __init__(self):
                self._values = [1, 2]

        holder = Holder()
        self.assertEqual(holder.values, (1, 2))
        with self.assertRaises(AttributeError):
            holder.values = ()
        self.assertEqual(holder._values, [1, 2])


class CamelizeTest(TestCase):

    def testSnakeCase(self) -> None:
        self.assertEqual(camelize("string_option"), "stringOption")

    def testSingleWord(self) -> None:
        self.assertEqual(camelize("verbose"), "verbose")

    def testExtraUnderscores(self) -> None:
        self.assertEqual(camelize("_dest__path_"), "destPath")


if __name__ == "__main__":
    unittest.main()
