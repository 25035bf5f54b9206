"""
Arguments module behavioral tests (descriptors and overrides).

Scope
- Validate Option, Flag and Choice construction: defaults, normalization and
  metadata constraints (names, descriptions, choices, defaults).
- Validate Overrides: field validation and application on a descriptor.
- Validate nominal identity: equal names never make equal descriptors.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (Option, Flag, Choice, Overrides).
"""

from __future__ import annotations

import enum
import unittest
from unittest import TestCase

from bosun import Option, Flag, Choice, Overrides


class Color(enum.Enum):
    RED = 1
    GREEN = 2


class TestOption(TestCase):
    """Behavioral tests for value-bearing options."""

    def testOptionDefaults(self):
        option = Option("--mode")
        self.assertEqual(option.name, "--mode")
        self.assertIsNone(option.descr)
        self.assertIsNone(option.default)
        self.assertEqual(option.choices, ())
        self.assertFalse(option.required)
        self.assertFalse(option.warn_on_invalid)
        self.assertFalse(option.hidden)
        self.assertTrue(option.valued)

    def testOptionDescrIsTrimmed(self):
        self.assertEqual(Option("--mode", "  build flavor  ").descr, "build flavor")

    def testOptionEmptyDescrRejected(self):
        with self.assertRaises(ValueError):
            Option("--mode", "   ")

    def testOptionNameMustBeString(self):
        with self.assertRaises(TypeError):
            Option(42)

    def testOptionNameCannotBeEmpty(self):
        with self.assertRaises(ValueError):
            Option("")

    def testOptionNameRejectsWhitespaceAndEquals(self):
        for name in ("--mo de", "--mode=x", "\t--mode"):
            with self.subTest(name=name), self.assertRaises(ValueError):
                Option(name)

    def testOptionNameHasNoPrefixConvention(self):
        for name in ("-m", "--mode", "/m", "mode"):
            with self.subTest(name=name):
                self.assertEqual(Option(name).name, name)

    def testOptionChoicesKeepOrder(self):
        option = Option("--mode", choices=["release", "debug"])
        self.assertEqual(option.choices, ("release", "debug"))

    def testOptionDuplicateChoicesRejected(self):
        with self.assertRaises(ValueError):
            Option("--mode", choices=("debug", "debug"))

    def testOptionBareStringChoicesRejected(self):
        with self.assertRaises(TypeError):
            Option("--mode", choices="debug")

    def testOptionNonStringChoiceRejected(self):
        with self.assertRaises(TypeError):
            Option("--jobs", choices=(1, 2))

    def testOptionDefaultMustBeString(self):
        with self.assertRaises(TypeError):
            Option("--jobs", default=4)

    def testOptionIsReadOnly(self):
        option = Option("--mode")
        with self.assertRaises(AttributeError):
            option.name = "--other"

    def testOptionsWithSameNameAreDistinct(self):
        one, two = Option("--mode"), Option("--mode")
        self.assertNotEqual(one, two)
        self.assertEqual(len({one, two}), 2)

    def testOptionRepr(self):
        self.assertTrue(repr(Option("--mode")).startswith("option(name='--mode'"))


class TestFlag(TestCase):
    """Behavioral tests for presence-only flags."""

    def testFlagConstants(self):
        flag = Flag("--verbose", "chatty output")
        self.assertFalse(flag.valued)
        self.assertFalse(flag.required)
        self.assertEqual(flag.choices, ())
        self.assertIsNone(flag.default)
        self.assertEqual(flag.descr, "chatty output")

    def testFlagHidden(self):
        self.assertTrue(Flag("--trace", hidden=True).hidden)

    def testFlagRejectsOptionFields(self):
        with self.assertRaises(TypeError):
            Flag("--verbose", required=True)

    def testFlagNameRejectsWhitespaceAndEquals(self):
        for name in ("--ver bose", "--verbose=yes"):
            with self.subTest(name=name), self.assertRaises(ValueError):
                Flag(name)


class TestChoice(TestCase):
    """Behavioral tests for enum-backed options."""

    def testChoiceChoicesAreLowerCasedMemberNames(self):
        color = Choice("--color", Color)
        self.assertEqual(color.choices, ("red", "green"))
        self.assertIs(color.enum, Color)
        self.assertTrue(color.valued)

    def testChoiceKeepsOptionFields(self):
        color = Choice("--color", Color, "paint", required=True, default="red")
        self.assertTrue(color.required)
        self.assertEqual(color.default, "red")
        self.assertEqual(color.descr, "paint")

    def testChoiceRejectsExplicitChoices(self):
        with self.assertRaises(TypeError):
            Choice("--color", Color, choices=("red",))

    def testChoiceRequiresEnum(self):
        with self.assertRaises(TypeError):
            Choice("--color", str)


class TestOverrides(TestCase):
    """Behavioral tests for per-attachment overrides."""

    def testOverridesApplyOnTopOfDescriptor(self):
        mode = Option("--mode", "build flavor", choices=("debug", "release"))
        effective = Overrides(required=True, default="debug").apply(mode)
        self.assertTrue(effective["required"])
        self.assertEqual(effective["default"], "debug")
        self.assertEqual(effective["name"], "--mode")
        self.assertEqual(effective["choices"], ("debug", "release"))
        self.assertEqual(effective["descr"], "build flavor")

    def testOverridesNeverMutateDescriptor(self):
        mode = Option("--mode")
        Overrides(required=True).apply(mode)
        self.assertFalse(mode.required)

    def testOverridesOnFlagAcceptDescrAndHidden(self):
        effective = Overrides(descr="louder", hidden=True).apply(Flag("--verbose"))
        self.assertEqual(effective["descr"], "louder")
        self.assertTrue(effective["hidden"])

    def testOverridesCannotRequireFlag(self):
        with self.assertRaises(TypeError):
            Overrides(required=True).apply(Flag("--verbose"))

    def testOverridesRequiredMustBeBoolean(self):
        with self.assertRaises(TypeError):
            Overrides(required="yes")

    def testOverridesEmptyDescrRejected(self):
        with self.assertRaises(ValueError):
            Overrides(descr=" ")


if __name__ == "__main__":
    unittest.main()
