"""
Tests for the Unset sentinel and the small helpers of protopt.utils.

This module verifies:
- Singleton identity, falsy semantics and representation of Unset.
- coalesce() only replaces Unset.
- rename() in both forms, and mirror() read-only snapshots.
- Finality (UnsetType cannot be subclassed).
"""
import unittest
from types import MappingProxyType
from unittest import TestCase

from protopt.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `UnsetType` singleton.
    """

    def testSingleton(self) -> None:
        self.assertIs(UnsetType(), Unset)

    def testFalsy(self) -> None:
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertEqual(repr(Unset), "Unset")

    def testUnion(self) -> None:
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("text", Unset | str)
        self.assertNotIsInstance(None, str | Unset)

    def testFinal(self) -> None:
        with self.assertRaises(TypeError):
            class Derived(UnsetType):  # NOQA: F-811
                pass


class HelpersTest(TestCase):
    """
    coalesce(), rename() and mirror().
    """

    def testCoalesce(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        for value in (None, 0, "", False):
            with self.subTest(value=value):
                self.assertIs(coalesce(value, "fallback"), value)

    def testRename(self) -> None:
        def function():
            pass

        self.assertIs(rename(function, "renamed"), function)
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

        @rename("decorated")
        def other():
            pass

        self.assertEqual(other.__name__, "decorated")

    def testRenameErrors(self) -> None:
        with self.assertRaises(TypeError):
            rename(42, "name")
        with self.assertRaises(TypeError):
            rename(print, 42)
        with self.assertRaises(TypeError):
            rename()

    def testMirror(self) -> None:
        class Holder:
            items = mirror("items")
            table = mirror("table")
            tags = mirror("tags")

            def __init__(self):
                self._items = ["a"]
                self._table = {"k": "v"}
                self._tags = {"x"}

        holder = Holder()
        self.assertEqual(holder.items, ("a",))
        self.assertIsInstance(holder.table, MappingProxyType)
        self.assertEqual(holder.tags, frozenset({"x"}))
        with self.assertRaises(AttributeError):
            holder.items = ()


if __name__ == '__main__':
    unittest.main()
