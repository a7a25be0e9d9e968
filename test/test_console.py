"""
Console behavioral tests (registration, dispatch phases, chaining, callbacks, runners).

Scope
- Registration: command()/append() in both forms, single-assignment callbacks.
- Registration-order dispatch: first match wins, complete=True runs every match.
- Chaining: a handler's returned arguments feed the commands after it.
- Typed-order dispatch (ordered=True): any/subset commands per typed option,
  subset option consumption, exact commands afterwards.
- Finalization: completion vs failure, strict mode, silent default.
- Runners: run() over argv-like lists and prompt strings, invoke(), console().

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (Console, console, invoke, option, pattern).
"""
import unittest
from unittest import TestCase

from switchyard import (
    Argument,
    Command,
    Console,
    MatchMode,
    OptionMap,
    console,
    invoke,
    option,
    pattern,
    OPT_ANY,
    OPT_SUBSET,
    NoMatchingCommandError,
    DiscardedTokenWarning,
    UnreachableCommandWarning,
)


class Recorder:
    """Collects completion/failure callbacks."""

    def __init__(self):
        self.completions = []
        self.failures = 0

    def completion(self, arguments, options):
        self.completions.append((arguments, options))

    def failure(self):
        self.failures += 1


def make(**options):
    recorder = Recorder()
    return Console("tool", recorder.completion, recorder.failure, **options), recorder


class TestRegistration(TestCase):
    """Behavioral tests for building consoles."""

    def testDecoratorFormReturnsCommand(self):
        cli = Console("tool")

        @cli.command([option("-v")], [pattern(str)])
        def verbose(arguments, options):
            pass

        self.assertIsInstance(verbose, Command)
        self.assertEqual(cli.commands, (verbose,))

    def testDirectForm(self):
        cli = Console("tool")
        command = cli.command([option("-v")], [], lambda arguments, options: None)
        self.assertIs(cli.commands[0], command)
        self.assertIs(cli.append(Command([], [], lambda arguments, options: None)), cli.commands[1])

    def testAppendRejectsNonCommands(self):
        with self.assertRaises(TypeError):
            Console("tool").append(lambda arguments, options: None)

    def testCallbacksRegisterOnce(self):
        cli = Console("tool")

        @cli.completed
        def done(arguments, options):
            pass

        @cli.failed
        def oops():
            pass

        self.assertIs(cli.completion, done)
        self.assertIs(cli.failure, oops)
        with self.assertRaises(TypeError):
            cli.completed(done)
        with self.assertRaises(TypeError):
            cli.failed(oops)
        with self.assertRaises(TypeError):
            Console("tool").failed(1)

    def testConstructorValidation(self):
        self.assertEqual(Console("  tool ").name, "tool")
        with self.assertRaises(ValueError):
            Console(" ")
        with self.assertRaises(TypeError):
            Console(1)
        with self.assertRaises(TypeError):
            Console("tool", completion=1)
        self.assertIsNone(Console("tool").completion)
        self.assertTrue(Console().name)

    def testUnreachableCommandWarns(self):
        cli = Console("tool")
        with self.assertWarns(UnreachableCommandWarning):
            cli.command([OPT_ANY], [], lambda arguments, options: None)
        self.assertEqual(len(cli.commands), 1)

    def testFactoryRegistersCommands(self):
        first = Command([option("-a")], [], lambda arguments, options: None)
        second = Command([option("-b")], [], lambda arguments, options: None)
        cli = console(first, second, name="tool", strict=True)
        self.assertEqual(cli.name, "tool")
        self.assertEqual(cli.commands, (first, second))
        self.assertTrue(cli.strict)


class TestScenarios(TestCase):
    """End-to-end dispatch scenarios."""

    def testExactFlagCompletesOrFails(self):
        cli, recorder = make()
        cli.command([option("-v")], [], lambda arguments, options: None)

        self.assertTrue(cli.dispatch([option("-v")], []))
        self.assertEqual(recorder.completions, [((), OptionMap())])
        self.assertEqual(recorder.failures, 0)

        self.assertFalse(cli.dispatch([], []))
        self.assertEqual(recorder.failures, 1)
        self.assertEqual(len(recorder.completions), 1)

    def testStringInputRejectsInteger(self):
        cli, recorder = make()
        cli.command([], [pattern(str)], lambda arguments, options: None)

        self.assertTrue(cli.run(["hello"]))
        self.assertFalse(cli.run(["42"]))
        self.assertEqual(recorder.failures, 1)

    def testSubsetCommand(self):
        cli, recorder = make()
        cli.command([OPT_SUBSET, option("-a"), option("-b")], [], lambda arguments, options: None)

        self.assertTrue(cli.run(["-abc"]))
        self.assertFalse(cli.run(["-a"]))

    def testChainingFeedsLaterCommands(self):
        cli, recorder = make()
        seen = []
        cli.command([option("-v")], [pattern(str)], lambda arguments, options: ["x"])
        cli.command([option("-v")], [pattern("x")], lambda arguments, options: seen.append(arguments))

        self.assertTrue(cli.run(["-v", "hello"], complete=True))
        self.assertEqual(seen, [(Argument.string("x"),)])
        (arguments, _), = recorder.completions
        self.assertEqual(arguments, (Argument.string("x"),))

    def testEmptyResultKeepsArguments(self):
        cli, recorder = make()
        seen = []
        cli.command([], [pattern(int)], lambda arguments, options: [])
        cli.command([], [pattern(int)], lambda arguments, options: seen.append(arguments))

        cli.run(["7"], complete=True)
        self.assertEqual(seen, [(Argument.int(7),)])

    def testFirstRegisteredWins(self):
        cli, recorder = make()
        fired = []
        cli.command([option("-v")], [], lambda arguments, options: fired.append("first"))
        cli.command([option("-v")], [], lambda arguments, options: fired.append("second"))

        cli.run(["-v"])
        self.assertEqual(fired, ["first"])

        fired.clear()
        cli.run(["-v"], complete=True)
        self.assertEqual(fired, ["first", "second"])

    def testHandlerReceivesOptionValues(self):
        cli, recorder = make()
        received = []
        cli.command([option("-c--count")], [], lambda arguments, options: received.append(options))

        cli.run(["--count=3"])
        self.assertEqual(received[0][option("c")].value, 3)

    def testInvalidHandlerResultPropagates(self):
        cli, recorder = make()
        cli.command([], [], lambda arguments, options: 5)
        with self.assertRaises(TypeError):
            cli.dispatch([], [])

    def testDispatchAcceptsRawValues(self):
        cli, recorder = make()
        cli.command([], [pattern(str), pattern(int)], lambda arguments, options: None)
        self.assertTrue(cli.dispatch([], ["a", 1]))

    def testDispatchRejectsNonOptions(self):
        with self.assertRaises(TypeError):
            Console("tool").dispatch(["-v"], [])


class TestOrderedDispatch(TestCase):
    """Typed-order dispatch of any/subset commands."""

    def testTypedOrderDrivesSubsetCommands(self):
        cli, recorder = make()
        fired = []
        cli.command([option("-x")], [], lambda arguments, options: fired.append("x"), mode=MatchMode.SUBSET)
        cli.command([option("-y")], [], lambda arguments, options: fired.append("y"), mode=MatchMode.SUBSET)

        self.assertTrue(cli.run(["-y", "-x"], ordered=True))
        self.assertEqual(fired, ["y", "x"])

        fired.clear()
        cli.run(["-y", "-x"], complete=True)
        self.assertEqual(fired, ["x", "y"])

    def testAnyCommandRunsPerTypedOption(self):
        cli, recorder = make()
        fired = []
        cli.command([OPT_ANY, option("-a"), option("-b")], [], lambda arguments, options: fired.append(1))

        cli.run(["-ab", "-c"], ordered=True)
        self.assertEqual(len(fired), 2)

    def testSubsetOptionsAreConsumed(self):
        cli, recorder = make()
        fired = []
        cli.command([OPT_SUBSET, option("-a"), option("-b")], [], lambda arguments, options: fired.append("ab"))
        cli.command([OPT_SUBSET, option("-a")], [], lambda arguments, options: fired.append("a"))

        cli.run(["-ab"], ordered=True)
        self.assertEqual(fired, ["ab"])

    def testConsumptionHappensEvenWithoutArgumentMatch(self):
        cli, recorder = make()
        fired = []
        cli.command([OPT_SUBSET, option("-a"), option("-b")], [pattern(int)], lambda arguments, options: fired.append("ab"))
        cli.command([OPT_SUBSET, option("-a")], [pattern(str)], lambda arguments, options: fired.append("a"))

        self.assertFalse(cli.run(["-ab", "hello"], ordered=True))
        self.assertEqual(fired, [])
        self.assertEqual(recorder.failures, 1)

    def testExactCommandsRunAfterwards(self):
        cli, recorder = make()
        fired = []
        cli.command([option("-a")], [], lambda arguments, options: fired.append("exact"))
        cli.command([OPT_ANY, option("-a")], [], lambda arguments, options: fired.append("any"))

        cli.run(["-a"], ordered=True)
        self.assertEqual(fired, ["any", "exact"])

    def testOrderedImpliesComplete(self):
        cli, recorder = make()
        fired = []
        cli.command([option("-v")], [], lambda arguments, options: fired.append(1))
        cli.command([option("-v")], [], lambda arguments, options: fired.append(2))

        cli.run(["-v"], ordered=True)
        self.assertEqual(fired, [1, 2])


class TestFinalization(TestCase):
    """Completion/failure and strict mode."""

    def testSilentWithoutCallbacks(self):
        cli = Console("tool")
        self.assertFalse(cli.dispatch([], []))

    def testStrictRaisesWithoutFailureCallback(self):
        cli = Console("tool", strict=True)
        with self.assertRaises(NoMatchingCommandError) as context:
            cli.dispatch([option("-v")], [Argument.int(3)])
        self.assertIn("-v 3", context.exception.message)

    def testStrictMessageSpellsAbsentPayloadByKind(self):
        cli = Console("tool", strict=True)
        with self.assertRaises(NoMatchingCommandError) as context:
            cli.dispatch([], [Argument.string(), Argument.float(1.5)])
        self.assertIn("(string) 1.5", context.exception.message)
        self.assertNotIn("None", context.exception.message)

    def testFailureCallbackWinsOverStrict(self):
        cli, recorder = make(strict=True)
        self.assertFalse(cli.dispatch([], []))
        self.assertEqual(recorder.failures, 1)

    def testCompletionReceivesEmptyOptionMap(self):
        cli, recorder = make()
        cli.command([option("-v")], [], lambda arguments, options: None)
        cli.run(["-v"])
        (_, options), = recorder.completions
        self.assertEqual(len(options), 0)


class TestRunners(TestCase):
    """run(), invoke() and discarded tokens."""

    def testPromptString(self):
        cli, recorder = make()
        seen = []
        cli.command([option("-v")], [pattern(str)], lambda arguments, options: seen.append(arguments[0].value))

        self.assertTrue(cli.run("-v 'hello world'"))
        self.assertEqual(seen, ["hello world"])

    def testIterablePromptIsTrimmed(self):
        cli, recorder = make()
        cli.command([option("-v")], [], lambda arguments, options: None)
        self.assertTrue(cli.run([" -v ", "  "]))

    def testRejectsBadPrompts(self):
        with self.assertRaises(TypeError):
            Console("tool").run(42)
        with self.assertRaises(TypeError):
            Console("tool").run(["-v", 1])

    def testDiscardedTokenWarns(self):
        cli, recorder = make()
        cli.command([option("-v")], [], lambda arguments, options: None)
        with self.assertWarns(DiscardedTokenWarning) as context:
            self.assertTrue(cli.run(["-v", "--"]))
        self.assertEqual(context.warning.options["token"], "--")
        self.assertEqual(context.warning.options["index"], 2)

    def testInvoke(self):
        cli, recorder = make()
        cli.command([option("-v")], [], lambda arguments, options: None)
        self.assertTrue(invoke(cli, ["-v"]))
        self.assertTrue(invoke(cli, "-v", complete=True))

    def testInvokeRejectsPlainObjects(self):
        with self.assertRaises(TypeError):
            invoke(object(), "-v")


if __name__ == "__main__":
    unittest.main()
