"""
Faults behavioral tests (codes, triggering, rendering).

Scope
- FaultCode normalization and getdoc() lookups.
- trigger(): option merging via copy.replace, raise vs. warn outside shell mode.
- Shell mode: rich rendering to the stderr console, exit status for errors.
- Console.trigger(): console flags and program name flow into rendered faults.

Conventions
- Test method names follow CamelCase per project convention.
- Rich output is captured with Console.capture() on the faults module console.
"""
import copy
import unittest
from unittest import TestCase

from switchyard import Console, faults
from switchyard.faults import (
    CommandException,
    CommandWarning,
    DiscardedTokenWarning,
    FaultCode,
    NoMatchingCommandError,
    getdoc,
    trigger,
)


def fault(kind=NoMatchingCommandError, **options):
    return kind(
        "no command matches -x",
        title="no matching command",
        code=FaultCode.NO_MATCHING_COMMAND,
        hint="check the options",
        **options
    )


class TestFaultCodes(TestCase):
    """Behavioral tests for FaultCode helpers."""

    def testNormalizeDefaultsToNumber(self):
        self.assertEqual(FaultCode.NO_MATCHING_COMMAND.normalize(), "11101")
        self.assertEqual(FaultCode.DISCARDED_TOKEN.normalize(), "12111")

    def testGetdoc(self):
        self.assertIsNone(getdoc(FaultCode.UNREACHABLE_COMMAND))
        with self.assertRaises(TypeError):
            getdoc(12121)


class TestTrigger(TestCase):
    """Behavioral tests for trigger() outside shell mode."""

    def testHierarchy(self):
        self.assertTrue(issubclass(NoMatchingCommandError, CommandException))
        self.assertTrue(issubclass(DiscardedTokenWarning, CommandWarning))
        self.assertTrue(issubclass(CommandWarning, Warning))

    def testErrorsRaise(self):
        with self.assertRaises(NoMatchingCommandError) as context:
            trigger(fault(), extra=1)
        self.assertEqual(context.exception.options["extra"], 1)
        self.assertEqual(str(context.exception), "no command matches -x")

    def testWarningsWarn(self):
        with self.assertWarns(DiscardedTokenWarning) as context:
            trigger(fault(DiscardedTokenWarning), token="-")
        self.assertEqual(context.warning.options["token"], "-")

    def testReplaceMergesOptions(self):
        original = fault(shell=False)
        replaced = copy.replace(original, shell=True)
        self.assertIsNot(replaced, original)
        self.assertTrue(replaced.options["shell"])
        self.assertFalse(original.options["shell"])
        self.assertEqual(replaced.message, original.message)

    def testOptionsAreReadOnly(self):
        with self.assertRaises(TypeError):
            fault().options["shell"] = True

    def testRejectsNonFaults(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("x"))


class TestShellRendering(TestCase):
    """Behavioral tests for rich rendering in shell mode."""

    def testErrorPrintsAndExits(self):
        with faults.console.capture() as capture:
            with self.assertRaises(SystemExit) as context:
                trigger(fault(), shell=True)
        self.assertEqual(context.exception.code, 1)
        output = capture.get()
        self.assertIn("11101", output)
        self.assertIn("No Matching Command", output)
        self.assertIn("no command matches -x", output)
        self.assertIn("→ check the options", output)

    def testWarningPrintsWithoutExit(self):
        with faults.console.capture() as capture:
            trigger(fault(DiscardedTokenWarning), shell=True, fancy=True)
        self.assertIn("no command matches -x", capture.get())

    def testConsoleNameInHeader(self):
        cli = Console("deploy", shell=True, colorful=True)
        with faults.console.capture() as capture:
            cli.run(["--"])
        output = capture.get()
        self.assertIn("deploy", output)
        self.assertIn("12111", output)
        self.assertIn("'--'", output)

    def testStrictConsoleExitsInShellMode(self):
        cli = Console("deploy", shell=True, strict=True)
        with faults.console.capture() as capture:
            with self.assertRaises(SystemExit):
                cli.dispatch([], [])
        self.assertIn("an empty command line", capture.get())


if __name__ == "__main__":
    unittest.main()
