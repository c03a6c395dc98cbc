"""
Tests for the internal helpers.

This module verifies that:
- Unset is a falsy, final, pickle-stable singleton distinct from None.
- coalesce() only replaces Unset.
- mirror() hands out copies of mutable containers.
- invoke()/resolve() absorb the difference between plain and coroutine callables.
- lines() joins sequences of lines and passes other content through.
- SpecType derives type names, read-only properties and a stable repr.
"""
import copy
import pickle
import unittest
from unittest import IsolatedAsyncioTestCase, TestCase

from parley.utils import *


class UnsetTest(TestCase):
    def testSingleton(self) -> None:
        self.assertIs(UnsetType(), Unset)

    def testFalsy(self) -> None:
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testCopyAndPickle(self) -> None:
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testFinalClass(self) -> None:
        with self.assertRaises(TypeError):
            type("UnsetSubtype", (UnsetType,), {})

    def testUnionInIsinstance(self) -> None:
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("x", Unset | str)


class HelpersTest(TestCase):
    def testCoalesce(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertIsNone(coalesce(Unset))

    def testRename(self) -> None:
        @rename("renamed")
        def original():
            pass

        self.assertEqual((original.__name__, original.__qualname__), ("renamed", "renamed"))
        with self.assertRaises(TypeError):
            rename(42, "name")

    def testMirrorCopiesContainers(self) -> None:
        class Holder:
            values = mirror("values")

            def __init__(self):
                self._values = [1, {"a": [2]}]

        holder = Holder()
        holder.values.append(3)
        holder.values[1]["a"].append(4)
        self.assertEqual(holder.values, [1, {"a": [2]}])
        with self.assertRaises(AttributeError):
            holder.values = []

    def testLines(self) -> None:
        self.assertEqual(lines(["a", "b"]), "a\nb")
        self.assertEqual(lines(("a",)), "a")
        self.assertEqual(lines("ab"), "ab")
        self.assertIsNone(lines(None))


class InvokeTest(IsolatedAsyncioTestCase):
    async def testPlainCallable(self) -> None:
        self.assertEqual(await invoke(lambda x: x + 1, 1), 2)

    async def testCoroutineFunction(self) -> None:
        async def double(x):
            return x * 2

        self.assertEqual(await invoke(double, 4), 8)

    async def testResolve(self) -> None:
        async def value():
            return "v"

        self.assertEqual(await resolve(value()), "v")
        self.assertEqual(await resolve("v"), "v")


class SpecTypeTest(TestCase):
    def setUp(self) -> None:
        class SampleSpec(metaclass=SpecType):
            __introspectable__ = ("name", "tags")
            __displayable__ = ("name",)

            def __init__(self, name, tags):
                self._name = name
                self._tags = tags

        self.SampleSpec = SampleSpec

    def testTypename(self) -> None:
        self.assertEqual(self.SampleSpec.__typename__, "sample-spec")

    def testReadOnlyProperties(self) -> None:
        spec = self.SampleSpec("x", ["a"])
        spec.tags.append("b")
        self.assertEqual(spec.tags, ["a"])
        with self.assertRaises(AttributeError):
            spec.name = "y"

    def testRepr(self) -> None:
        spec = self.SampleSpec("x", ["a"])
        self.assertEqual(repr(spec), "sample-spec(name='x')")
        self.assertEqual(list(spec.__rich_repr__()), [("name", "x")])

    def testDisplayableDefaultsToUnset(self) -> None:
        self.assertIs(SpecType.__displayable__, Unset)


if __name__ == "__main__":
    unittest.main()
