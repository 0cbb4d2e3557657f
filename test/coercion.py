"""
Coercion module behavioral tests (token → typed value, zero-values).

Scope
- Validate the rule order: str, numeric family, bool, enum, generic fallback.
- Validate nullable unwrapping and the memoized zero-value function.
- Validate that every failure surfaces as InvalidArgumentValueError with the
  parameter name, token and type name, chained from the parser exception.

Conventions
- Test method names follow CamelCase per project convention.
"""
import datetime
import enum
import unittest
from decimal import Decimal
from typing import Optional
from unittest import TestCase

from tiller.coercion import coerce, zero, unwrap, typename
from tiller.faults import FaultCode, InvalidArgumentValueError


class Priority(enum.Enum):
    Low = 1
    Medium = 2
    High = 3


class Level(enum.IntEnum):
    DEBUG = 10
    INFO = 20


class TestCoerce(TestCase):
    """Behavioral tests for coerce()."""

    def testStringIsIdentity(self):
        self.assertEqual(coerce("hello world", str), "hello world")
        self.assertEqual(coerce("", str), "")

    def testIntegers(self):
        self.assertEqual(coerce("42", int), 42)
        self.assertEqual(coerce("-5", int), -5)

    def testFloatsAreLocaleInvariant(self):
        self.assertEqual(coerce("3.14", float), 3.14)
        self.assertEqual(coerce("-10.5", float), -10.5)

    def testDecimal(self):
        self.assertEqual(coerce("123.456", Decimal), Decimal("123.456"))

    def testBooleanLiterals(self):
        self.assertIs(coerce("true", bool), True)
        self.assertIs(coerce("false", bool), False)

    def testBooleanIsCaseSensitive(self):
        with self.assertRaises(InvalidArgumentValueError):
            coerce("True", bool)
        with self.assertRaises(InvalidArgumentValueError):
            coerce("yes", bool)

    def testEnumNameMatchIsCaseInsensitive(self):
        self.assertIs(coerce("High", Priority), Priority.High)
        self.assertIs(coerce("high", Priority), Priority.High)
        self.assertIs(coerce("LOW", Priority), Priority.Low)

    def testIntEnumGoesThroughNameMatch(self):
        self.assertIs(coerce("info", Level), Level.INFO)
        with self.assertRaises(InvalidArgumentValueError):
            coerce("20", Level)

    def testUnknownEnumMember(self):
        with self.assertRaises(InvalidArgumentValueError):
            coerce("Urgent", Priority)

    def testNullableUnwrapped(self):
        self.assertEqual(coerce("7", int | None), 7)
        self.assertEqual(coerce("7", Optional[int]), 7)

    def testFallbackUsesIsoFormat(self):
        self.assertEqual(coerce("2024-01-15", datetime.date), datetime.date(2024, 1, 15))
        self.assertEqual(
            coerce("2024-01-15T10:30:00", datetime.datetime),
            datetime.datetime(2024, 1, 15, 10, 30),
        )

    def testFallbackUsesConstructor(self):
        self.assertEqual(coerce("0x1f", lambda token: int(token, 16)), 31)
        self.assertEqual(coerce("12", complex), complex(12))

    def testFailureCarriesContext(self):
        with self.assertRaises(InvalidArgumentValueError) as context:
            coerce("notAnInt", int, "count")
        fault = context.exception
        self.assertEqual(fault.options["name"], "count")
        self.assertEqual(fault.options["value"], "notAnInt")
        self.assertEqual(fault.options["type"], "int")
        self.assertIs(fault.code, FaultCode.INVALID_ARGUMENT_VALUE)
        self.assertIsInstance(fault.__cause__, ValueError)
        self.assertIn("notAnInt", str(fault))

    def testDecimalFailureIsWrapped(self):
        with self.assertRaises(InvalidArgumentValueError):
            coerce("abc", Decimal, "amount")

    def testSignalingNanRejected(self):
        with self.assertRaises(InvalidArgumentValueError):
            coerce("sNaN", Decimal, "amount")
        with self.assertRaises(InvalidArgumentValueError):
            coerce("NaN", Decimal, "amount")

    def testNumericLiteralsAreStrict(self):
        for token, type in (("1_000", int), ("\u0663", int), ("1_0.5", float), ("inf", float), ("", int)):
            with self.subTest(token=token, type=type):
                with self.assertRaises(InvalidArgumentValueError):
                    coerce(token, type)
        self.assertEqual(coerce("+7", int), 7)
        self.assertEqual(coerce("1e3", float), 1000.0)
        self.assertEqual(coerce(".5", Decimal), Decimal(".5"))

    def testNonStringTokenRejected(self):
        with self.assertRaises(TypeError):
            coerce(5, int)


class TestZero(TestCase):
    """Behavioral tests for zero() and unwrap()."""

    def testNumericAndBoolean(self):
        self.assertEqual(zero(int), 0)
        self.assertEqual(zero(float), 0.0)
        self.assertEqual(zero(Decimal), Decimal(0))
        self.assertIs(zero(bool), False)

    def testReferenceLikeTypesAreNone(self):
        self.assertIsNone(zero(str))
        self.assertIsNone(zero(Priority))
        self.assertIsNone(zero(datetime.date))

    def testNullableIsNone(self):
        self.assertIsNone(zero(int | None))
        self.assertIsNone(zero(Optional[bool]))

    def testUnwrap(self):
        self.assertEqual(unwrap(int | None), (int, True))
        self.assertEqual(unwrap(int), (int, False))
        self.assertEqual(unwrap(int | str), (int | str, False))

    def testTypename(self):
        self.assertEqual(typename(int), "int")
        self.assertEqual(typename(int | None), "int | None")
        self.assertEqual(typename(Priority), "Priority")


if __name__ == "__main__":
    unittest.main()
