"""
Parser behavioral tests (descent, scanning, validation).

Scope
- Validate command descent with interleaved tokens.
- Validate option scanning: value forms, nearest scope wins, duplicates,
  unexpected and additional tokens, help short-circuit.
- Validate post-scan validation: defaults, required options, choices as errors
  or warnings.
- Validate the build --mode scenario end to end.

Conventions
- Test method names follow CamelCase per project convention.
- Faults are asserted from ParseResult; the parser never raises for user input.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from bosun import Command, Option, Flag, Overrides, parse, descend
from bosun.faults import (
    DuplicatedOptionError,
    UnexpectedArgumentError,
    MissingArgumentError,
    InvalidValueError,
    InvalidValueWarning,
)


def noop(context, token):
    pass


class TreeCase(TestCase):
    """Shared tree: tool [--verbose] -> build [--mode (required), --jobs=1] -> release [--force]."""

    def setUp(self):
        self.verbose = Flag("--verbose")
        self.mode = Option("--mode", "build flavor", required=True, choices=("debug", "release"))
        self.jobs = Option("--jobs", default="1")
        self.force = Flag("--force")
        self.release = Command(noop, "release", options=[self.force])
        self.build = Command(noop, "build", options=[self.mode, self.jobs], commands=[self.release])
        self.tool = Command(name="tool", options=[self.verbose], commands=[self.build])
        self.root = self.tool.tree()

    def parse(self, *tokens):
        return parse(self.root, tokens)


class TestDescent(TreeCase):
    """Behavioral tests for command resolution."""

    def testDescentFollowsNames(self):
        chain, consumed = descend(self.root, ["build", "release"])
        self.assertEqual([node.name for node in chain], ["tool", "build", "release"])
        self.assertEqual(consumed, {0, 1})

    def testDescentSkipsInterleavedTokens(self):
        chain, consumed = descend(self.root, ["--verbose", "build", "--mode=debug", "release"])
        self.assertEqual([node.name for node in chain], ["tool", "build", "release"])
        self.assertEqual(consumed, {1, 3})

    def testDescentOnlyMatchesCurrentChildren(self):
        chain, _ = descend(self.root, ["release", "build"])
        self.assertEqual([node.name for node in chain], ["tool", "build"])

    def testLaterCommandNameIsAlwaysAPathSegment(self):
        result = self.parse("build", "--mode=debug", "release")
        self.assertEqual(result.context.command.name, "release")

    def testNoTokensResolvesRoot(self):
        result = self.parse()
        self.assertTrue(result.ok)
        self.assertIs(result.context.command, self.root)


class TestScanning(TreeCase):
    """Behavioral tests for option matching."""

    def testValueForms(self):
        result = self.parse("build", "--mode=release", "--jobs=")
        self.assertTrue(result.ok)
        self.assertEqual(result.context.try_get_option(self.mode), "release")
        self.assertEqual(result.context.try_get_option(self.jobs), "")

    def testAncestorOptionsAreInScope(self):
        result = self.parse("build", "release", "--verbose", "--force", "--mode=debug")
        self.assertTrue(result.ok)
        self.assertTrue(result.context.has_flag(self.verbose))
        self.assertTrue(result.context.has_flag(self.force))

    def testOptionsMayPrecedeTheirCommand(self):
        result = self.parse("--mode=debug", "build")
        self.assertTrue(result.ok)
        self.assertEqual(result.context.get_option(self.mode), "debug")

    def testDescendantOptionsAreOutOfScope(self):
        result = self.parse("build", "--mode=debug", "--force")
        self.assertFalse(result.ok)
        self.assertEqual(len(result.faults), 1)
        self.assertIsInstance(result.faults[0], UnexpectedArgumentError)
        self.assertEqual(result.faults[0].message, "unexpected argument: --force")

    def testDuplicateOptionReported(self):
        result = self.parse("build", "--mode=debug", "--mode=release")
        self.assertEqual([type(fault) for fault in result.faults], [DuplicatedOptionError])
        self.assertEqual(result.faults[0].message, "option specified more than once: --mode")
        self.assertEqual(result.context.try_get_option(self.mode), "debug")

    def testDuplicateFlagReported(self):
        result = self.parse("--verbose", "--verbose")
        self.assertIsInstance(result.faults[0], DuplicatedOptionError)

    def testFaultsAccumulate(self):
        result = self.parse("build", "--what", "--verbose", "--verbose")
        self.assertEqual(
            [type(fault) for fault in result.faults],
            [UnexpectedArgumentError, DuplicatedOptionError, MissingArgumentError],
        )

    def testPrefixIsNotAMatch(self):
        result = self.parse("build", "--mode=debug", "--modes=x")
        self.assertIsInstance(result.faults[0], UnexpectedArgumentError)

    def testNearestScopeWins(self):
        outer = Option("--level")
        inner = Option("--level")
        leaf = Command(noop, "leaf", options=[inner])
        root = Command(name="tool", options=[outer], commands=[leaf]).tree()

        result = parse(root, ["leaf", "--level=3"])
        self.assertTrue(result.ok)
        self.assertEqual(result.context.try_get_option(inner), "3")
        self.assertIsNone(result.context.try_get_option(outer))

    def testFlagAcceptsValueForm(self):
        result = self.parse("--verbose=yes")
        self.assertTrue(result.ok)
        self.assertTrue(result.context.has_flag(self.verbose))

    def testAdditionalTokensAreKept(self):
        run = Command(noop, "run", additional=True)
        root = Command(name="tool", commands=[run]).tree()
        result = parse(root, ["run", "a.out", "--fast"])
        self.assertTrue(result.ok)
        self.assertEqual(result.context.additional, ("a.out", "--fast"))

    def testAdditionalIsDecidedByTheLeaf(self):
        root = Command(name="tool", additional=True, commands=[Command(noop, "run")]).tree()
        result = parse(root, ["run", "extra"])
        self.assertIsInstance(result.faults[0], UnexpectedArgumentError)


class TestHelp(TreeCase):
    """Behavioral tests for the help short-circuit."""

    def testHelpWinsOverFaults(self):
        for token in ("-?", "--help"):
            with self.subTest(token=token):
                result = self.parse("build", "--bogus", token)
                self.assertTrue(result.help)
                self.assertFalse(result.ok)
                self.assertEqual(result.context.command.name, "build")

    def testHelpSkipsValidation(self):
        result = self.parse("build", "--help")
        self.assertEqual(result.faults, ())
        self.assertNotIn(self.jobs, result.context)

    def testHelpStopsScanning(self):
        result = self.parse("--help", "--verbose")
        self.assertNotIn(self.verbose, result.context)


class TestValidation(TreeCase):
    """Behavioral tests for defaults, requiredness and choices."""

    def testDefaultIsSynthesized(self):
        result = self.parse("build", "--mode=debug")
        self.assertEqual(result.context.get_option(self.jobs, int), 1)

    def testGivenValueBeatsDefault(self):
        result = self.parse("build", "--mode=debug", "--jobs=8")
        self.assertEqual(result.context.get_option(self.jobs), "8")

    def testMissingRequired(self):
        result = self.parse("build")
        self.assertEqual([type(fault) for fault in result.faults], [MissingArgumentError])
        self.assertEqual(result.faults[0].message, "missing required argument: --mode")

    def testRequiredWithDefaultIsSatisfied(self):
        mode = Option("--mode", required=True, default="debug")
        root = Command(noop, "tool", options=[mode]).tree()
        result = parse(root, [])
        self.assertTrue(result.ok)
        self.assertEqual(result.context.get_option(mode), "debug")

    def testOverriddenRequirednessIsUsed(self):
        root = Command(noop, "tool", options=[(self.mode, Overrides(required=False))]).tree()
        self.assertTrue(parse(root, []).ok)

    def testChoicesAreCaseInsensitive(self):
        result = self.parse("build", "--mode=RELEASE")
        self.assertTrue(result.ok)
        self.assertEqual(result.context.get_option(self.mode), "RELEASE")

    def testInvalidChoiceIsAnError(self):
        result = self.parse("build", "--mode=fast")
        self.assertEqual([type(fault) for fault in result.faults], [InvalidValueError])
        self.assertEqual(result.faults[0].message, "--mode=fast is invalid. Valid values are: debug, release")

    def testBareValuedOptionFailsChoices(self):
        result = self.parse("build", "--mode")
        self.assertEqual(result.faults[0].message, "--mode= is invalid. Valid values are: debug, release")

    def testInvalidChoiceCanWarn(self):
        level = Option("--level", choices=("low", "high"), warn_on_invalid=True)
        root = Command(noop, "tool", options=[level]).tree()
        result = parse(root, ["--level=extreme"])
        self.assertTrue(result.ok)
        self.assertEqual([type(warning) for warning in result.warnings], [InvalidValueWarning])
        self.assertEqual(result.warnings[0].message, "--level=extreme is invalid. Valid values are: low, high")
        self.assertEqual(result.context.get_option(level), "extreme")

    def testInvalidDefaultIsReported(self):
        level = Option("--level", choices=("low", "high"), default="medium")
        root = Command(noop, "tool", options=[level]).tree()
        self.assertIsInstance(parse(root, []).faults[0], InvalidValueError)


class TestBuildScenario(TestCase):
    """The canonical root -> build --mode walkthrough."""

    def setUp(self):
        self.mode = Option("--mode", "build flavor", required=True, choices=("debug", "release"))
        self.build = Command(noop, "build", options=[self.mode])
        self.root = Command(name="tool", commands=[self.build]).tree()

    def testValidMode(self):
        result = parse(self.root, ["build", "--mode=release"])
        self.assertTrue(result.ok)
        self.assertEqual(result.context.command.name, "build")
        self.assertEqual(result.context.get_option(self.mode), "release")

    def testInvalidMode(self):
        result = parse(self.root, ["build", "--mode=fast"])
        self.assertFalse(result.ok)
        self.assertIn("Valid values are: debug, release", result.faults[0].message)

    def testHelp(self):
        result = parse(self.root, ["build", "--help"])
        self.assertTrue(result.help)
        self.assertEqual(result.context.command.name, "build")
        self.assertTrue(result.context.command.options[0].required)


if __name__ == "__main__":
    unittest.main()
