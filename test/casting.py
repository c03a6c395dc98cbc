# python
"""
Type casting behavioral tests.

Scope
- Validate the interpreter (cast) for every kind of type spec: named types,
  enumerations, patterns, plain and async casters, and __cast__ objects.
- Validate the combinators (Choices, Regex, Union, Tuple, Validate, Range, Compose),
  including nesting and the order in which they try their operands.
- Validate that ordinary invalid input is a miss (None), never an exception.

Conventions
- Test method names follow CamelCase per project convention.
- Messages are irrelevant to the casters under test and are passed as None.
"""

from __future__ import annotations

import re
import unittest
from decimal import Decimal
from unittest import IsolatedAsyncioTestCase

from parley import Choices, Compose, Match, Range, Regex, Tuple, TypeResolver, Union, Validate, cast, istype


class CastTestCase(IsolatedAsyncioTestCase):
    def setUp(self):
        self.resolver = TypeResolver()

    async def cast(self, type, phrase, previous=None):
        return await cast(type, self.resolver, phrase, None, {} if previous is None else previous)


class TestNamedTypes(CastTestCase):
    """Named types go through the resolver."""

    async def testIntegerHit(self):
        self.assertEqual(await self.cast("integer", "42"), 42)

    async def testIntegerMiss(self):
        self.assertIsNone(await self.cast("integer", "forty-two"))

    async def testUnknownNameFallsBackToPhrase(self):
        self.assertEqual(await self.cast("mystery", "raw"), "raw")

    async def testUnknownNameEmptyPhraseIsMiss(self):
        self.assertIsNone(await self.cast("mystery", ""))

    async def testRegisteredLaterIsHonored(self):
        self.resolver.register("even", lambda phrase, message, previous: int(phrase) if int(phrase) % 2 == 0 else None)
        self.assertEqual(await self.cast("even", "4"), 4)
        self.assertIsNone(await self.cast("even", "3"))


class TestEnumerations(CastTestCase):
    """Lists of alias groups resolve to the canonical member."""

    async def testCaseInsensitiveAlias(self):
        self.assertEqual(await self.cast([("yes", "y"), ("no", "n")], "Y"), "yes")

    async def testPlainStringEntries(self):
        self.assertEqual(await self.cast(["red", "green"], "GREEN"), "green")

    async def testMiss(self):
        self.assertIsNone(await self.cast(["red", "green"], "blue"))

    async def testChoicesSensitive(self):
        choices = Choices("Alpha", "Beta", sensitive=True)
        self.assertEqual(await self.cast(choices, "Alpha"), "Alpha")
        self.assertIsNone(await self.cast(choices, "alpha"))

    def testChoicesRejectsEmptyGroup(self):
        with self.assertRaises(ValueError):
            Choices(())

    def testChoicesRequiresGroups(self):
        with self.assertRaises(TypeError):
            Choices()


class TestPatterns(CastTestCase):
    """Regular expressions produce Match records."""

    async def testCompiledPattern(self):
        result = await self.cast(re.compile(r"\d+"), "abc 123 def")
        self.assertIsInstance(result, Match)
        self.assertEqual(result.match.group(), "123")
        self.assertEqual(result.matches, ())

    async def testEveryCollectsAllMatches(self):
        result = await self.cast(Regex(r"\d", every=True), "a1b2c3")
        self.assertEqual([match.group() for match in result.matches], ["1", "2", "3"])

    async def testPatternMiss(self):
        self.assertIsNone(await self.cast(Regex(r"^\d+$"), "12a"))

    def testRegexFlagsWithCompiledPatternRejected(self):
        with self.assertRaises(TypeError):
            Regex(re.compile("a"), flags=re.IGNORECASE)


class TestCallables(CastTestCase):
    """Plain and coroutine casters."""

    async def testValueErrorIsMiss(self):
        self.assertIsNone(await self.cast(int, "nope"))
        self.assertEqual(await self.cast(int, "12"), 12)
        self.assertEqual(await self.cast(float, "2.5"), 2.5)
        self.assertIsNone(await self.cast(float, ""))

    async def testRegisteredClassGetsPhraseOnly(self):
        self.resolver.register("decimal", Decimal)
        self.assertEqual(await self.cast("decimal", "1.50"), Decimal("1.50"))

    async def testCoroutineCaster(self):
        async def shout(phrase, message, previous):
            return phrase.upper() or None

        self.assertEqual(await self.cast(shout, "hey"), "HEY")

    async def testCasterSeesPrevious(self):
        def offset(phrase, message, previous):
            return int(phrase) + previous["base"]

        self.assertEqual(await self.cast(offset, "2", {"base": 40}), 42)

    async def testOtherExceptionsPropagate(self):
        def broken(phrase, message, previous):
            raise RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            await self.cast(broken, "x")

    async def testCastProtocolObject(self):
        class Doubled:
            async def __cast__(self, resolver, phrase, message, previous):
                value = await cast("integer", resolver, phrase, message, previous)
                return None if value is None else value * 2

        self.assertEqual(await self.cast(Doubled(), "21"), 42)

    def testIsType(self):
        self.assertTrue(istype("integer"))
        self.assertTrue(istype(["a", ("b", "c")]))
        self.assertTrue(istype(re.compile("a")))
        self.assertTrue(istype(Union("integer")))
        self.assertFalse(istype(42))
        self.assertFalse(istype([]))
        self.assertFalse(istype(["a", ()]))


class TestCombinators(CastTestCase):
    """Union, Tuple, Validate, Range and Compose."""

    async def testUnionFirstHitWins(self):
        seen = []

        def record(phrase, message, previous):
            seen.append(phrase)
            return "later"

        self.assertEqual(await self.cast(Union("integer", record), "5"), 5)
        self.assertEqual(seen, [])

    async def testUnionFallsThrough(self):
        self.assertEqual(await self.cast(Union([("all", "*")], "integer"), "*"), "all")
        self.assertEqual(await self.cast(Union([("all", "*")], "integer"), "8"), 8)
        self.assertIsNone(await self.cast(Union([("all", "*")], "integer"), "none"))

    async def testTupleCollectsEveryResult(self):
        self.assertEqual(await self.cast(Tuple("integer", "number"), "3"), [3, 3.0])

    async def testTupleMissWhenAnyMisses(self):
        self.assertIsNone(await self.cast(Tuple("integer", "number"), "3.5"))

    async def testValidatePredicate(self):
        even = Validate("integer", lambda value, phrase, message, previous: value % 2 == 0)
        self.assertEqual(await self.cast(even, "4"), 4)
        self.assertIsNone(await self.cast(even, "5"))

    async def testValidateAsyncPredicate(self):
        async def short(value, phrase, message, previous):
            return len(value) <= 3

        self.assertEqual(await self.cast(Validate("string", short), "abc"), "abc")
        self.assertIsNone(await self.cast(Validate("string", short), "abcd"))

    async def testRangeExclusive(self):
        bounded = Range("integer", 1, 10)
        self.assertEqual(await self.cast(bounded, "1"), 1)
        self.assertIsNone(await self.cast(bounded, "10"))

    async def testRangeInclusive(self):
        self.assertEqual(await self.cast(Range("integer", 1, 10, inclusive=True), "10"), 10)

    async def testRangeIncomparableIsMiss(self):
        self.assertIsNone(await self.cast(Range("string", 1, 10), "abc"))

    async def testComposeFeedsFirstIntoSecond(self):
        self.assertEqual(await self.cast(Compose("lowercase", ["yes", "no"]), "YES"), "yes")

    async def testComposeStringifiesValues(self):
        self.assertEqual(await self.cast(Compose("integer", "charCodes"), "12"), [49, 50])

    async def testComposeVoidHandling(self):
        fallback = lambda phrase, message, previous: "empty" if phrase == "" else phrase
        self.assertEqual(await self.cast(Compose("integer", fallback), "x"), "empty")
        self.assertIsNone(await self.cast(Compose("integer", fallback, ignore_void=False), "x"))

    async def testNesting(self):
        spec = Union(Range("integer", 0, 5), Compose("uppercase", Choices("A", "B", sensitive=True)))
        self.assertEqual(await self.cast(spec, "3"), 3)
        self.assertEqual(await self.cast(spec, "b"), "B")
        self.assertIsNone(await self.cast(spec, "9"))

    def testOperandsMustBeTypeSpecs(self):
        with self.assertRaises(TypeError):
            Union(42)
        with self.assertRaises(TypeError):
            Validate("integer", "not callable")

    def testRepr(self):
        self.assertEqual(repr(Range("integer", 1, 5, inclusive=True)), "Range('integer', 1, 5, inclusive=True)")
        self.assertEqual(repr(Union("integer", "url")), "Union('integer', 'url')")


if __name__ == "__main__":
    unittest.main()
