"""
Switchyard command layer: register command patterns and dispatch to them.

What this module provides
- MatchMode: how a command's options relate to the options the user typed.
  • EXACT:  the user typed exactly the command's options (no more, no less).
  • ANY:    the user typed at least one of the command's options.
  • SUBSET: the user typed every one of the command's options (extras allowed).

- Command: an immutable (options, inputs, handler) pattern.
  • validoptions(actual): option-set matching under the command's mode.
  • validarguments(actual): positional matching (exact arity, per-slot type patterns).
  • responseoptions(actual): the option → value map a handler receives.
  • Calling a command runs its handler and normalizes the returned argument list.

- Console: ordered command registry plus completion/failure callbacks.
  • dispatch(options, arguments): the matching algorithm over tokenized input.
  • run(prompt): tokenize sys.argv / a prompt string / tokens, then dispatch.

- Factories and helpers:
  • console(*commands, ...): build a Console with commands already registered.
  • invoke(console, prompt): convenience runner.

Dispatch in short
- Registration order is priority order. By default the first matching command wins.
- complete=True keeps going after a match; each handler may return a replacement
  argument list that later commands are matched against (chaining).
- ordered=True first walks the options in the order the user typed them and runs the
  ANY/SUBSET commands they select, then runs the EXACT commands in registration order.
- Nothing matched → failure(); otherwise completion(arguments, OptionMap()).

Quick start
    from switchyard import Console, option, pattern

    cli = Console("todo")

    @cli.command([option("-a--add")], [pattern(str)])
    def add(arguments, options):
        print("adding", arguments[0].value)

    @cli.failed
    def usage():
        print("usage: todo --add TEXT")

    if __name__ == "__main__":
        cli.run()

Design notes
- Per-run state (current arguments, matched flag, consumed subset options) is an
  immutable pipeline value folded through the commands; consoles and commands are
  never mutated by dispatch.
- The OPT_ANY / OPT_SUBSET markers are still understood in option lists, but the
  mode is stored explicitly on the command and the markers are stripped.
"""
import functools
import itertools
import os.path
import shlex
import sys
from collections.abc import Iterable
from enum import Enum
from typing import NamedTuple

from .arguments import Argument, ArgumentInput
from .faults import *
from .options import Option, OptionMap, OPT_ANY, OPT_SUBSET
from .tokens import tokenize
from .utils import *


class MatchMode(Enum):
    EXACT = "exact"
    ANY = "any"
    SUBSET = "subset"

    def __repr__(self):
        return f"{type(self).__name__}.{self.name}"


@functools.cache  # Memoize to avoid recomputing common ordinals in messages
def _ordinal(number):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth") for nicer phrasing.
    - Other numbers use numeric ordinals with correct English suffixes.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, 113th, …)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def _process_options(cls, metadata):
    """
    Validate the option list and resolve the match mode.

    Rules
    - options: iterable of Option (OPT_ANY / OPT_SUBSET markers allowed).
    - mode: Unset | MatchMode. When Unset, it is derived from the markers
      (OPT_ANY wins over OPT_SUBSET, no marker means EXACT). When given, any
      marker present must agree with it.
    - markers are removed from the stored option list.
    """
    if not isinstance(options := metadata["options"], Iterable) or isinstance(options, str):
        raise TypeError(f"{cls.__typename__} 'options' must be an iterable of options")

    options = list(options)
    for option in options:
        if not isinstance(option, Option):
            raise TypeError(f"{cls.__typename__} 'options' must contain only options")

    if any(option is OPT_ANY for option in options):
        derived = MatchMode.ANY
    elif any(option is OPT_SUBSET for option in options):
        derived = MatchMode.SUBSET
    else:
        derived = Unset

    if (mode := metadata["mode"]) is Unset:
        mode = coalesce(derived, MatchMode.EXACT)
    elif not isinstance(mode, MatchMode):
        raise TypeError(f"{cls.__typename__} 'mode' must be a match-mode")
    elif derived is not Unset and derived is not mode:
        raise ValueError(f"{cls.__typename__} 'mode' contradicts the {derived.value!r} marker in 'options'")

    metadata["options"] = [option for option in options if not option.sentinel]
    metadata["mode"] = mode


def _process_inputs(cls, metadata):
    """
    Validate the positional pattern list and the handler.
    """
    if not isinstance(inputs := metadata["inputs"], Iterable) or isinstance(inputs, str):
        raise TypeError(f"{cls.__typename__} 'inputs' must be an iterable of argument-inputs")

    inputs = list(inputs)
    for input in inputs:
        if not isinstance(input, ArgumentInput):
            raise TypeError(f"{cls.__typename__} 'inputs' must contain only argument-inputs (see pattern())")
    metadata["inputs"] = inputs

    if not callable(metadata["handler"]):
        raise TypeError(f"{cls.__typename__} 'handler' must be callable")


class Command(metaclass=Introspectable):
    """
    Registered command pattern: options, positional inputs, and a handler.

    Properties
    - options: tuple of required option identities (markers stripped).
    - inputs: tuple of ArgumentInput, one per positional slot.
    - mode: MatchMode.
    - matchany / subset: derived booleans for the ANY / SUBSET modes.
    - handler: callable(arguments, options) -> None | Iterable of arguments.

    Commands are immutable after construction.
    """

    __introspectable__ = (
        "options",
        "inputs",
        "mode",
        "handler",
    )

    __displayable__ = (
        "options",
        "inputs",
        "mode",
    )

    def __new__(cls, options=(), inputs=(), handler=Unset, *, mode=Unset):
        """
        Construct a command pattern.

        Parameters
        - options: Iterable[Option]
          Required option identities; may include OPT_ANY / OPT_SUBSET markers.
        - inputs: Iterable[ArgumentInput]
          Positional type patterns; arity must match exactly at dispatch time.
        - handler: Callable[[tuple[Argument, ...], OptionMap], Iterable | None]
        - mode: Unset | MatchMode
          Explicit match mode; derived from the markers when Unset.

        Raises
        - TypeError/ValueError on malformed options, inputs, handler or mode.
        """
        metadata = {
            "options": options,
            "inputs": inputs,
            "handler": handler,
            "mode": mode,
        }
        _process_options(cls, metadata)
        _process_inputs(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def matchany(self):
        return self._mode is MatchMode.ANY

    @property
    def subset(self):
        return self._mode is MatchMode.SUBSET

    def validoptions(self, actual, /):
        """
        Match the user's options against this command's options.

        - EXACT:  same options on both sides (same count, each side contained in the other).
        - ANY:    at least one user option is one of ours (never true with no options).
        - SUBSET: each of our options was typed by the user; extras are allowed.
        """
        actual = tuple(actual)
        match self._mode:
            case MatchMode.ANY:
                return any(option in self._options for option in actual)
            case MatchMode.SUBSET:
                return all(option in actual for option in self._options)
            case _:
                return (
                    len(actual) == len(self._options) and
                    all(option in self._options for option in actual) and
                    all(option in actual for option in self._options)
                )

    def validarguments(self, actual, /):
        """
        Match positional arguments against the input patterns.

        Arity must be identical; no inputs and no arguments is a match.
        """
        actual = tuple(actual)
        if len(actual) != len(self._inputs):
            return False
        return all(argument.represents(input) for input, argument in zip(self._inputs, actual))

    def responseoptions(self, actual, /):
        """
        Build the option → value map handed to the handler.

        - an option typed without a value maps to Argument.int(1) (presence marker);
        - an option typed with a value maps, under the declared option, to that value,
          provided this command declares the option.
        """
        items = []
        for option in actual:
            if option.argument is None:
                items.append((option, Argument.int(1)))
                continue
            for declared in self._options:
                if declared == option:
                    items.append((declared, option.argument))
                    break
        return OptionMap(items)

    def __call__(self, arguments, options, /):
        """
        Run the handler and normalize its result.

        Returns
        - tuple of Argument: the replacement argument list (empty when the handler
          returned None or an empty iterable, meaning "keep the current arguments").

        Raises
        - TypeError: when the handler returns something other than None or an
          iterable of arguments / int / float / str values.
        """
        result = self._handler(tuple(arguments), options)
        if result is None:
            return ()
        if isinstance(result, str | bytes) or not isinstance(result, Iterable):
            raise TypeError(f"{type(self).__typename__} handler must return None or an iterable of arguments")
        return tuple(map(Argument.of, result))


class _Pipeline(NamedTuple):
    """
    Immutable dispatch state for one run.

    - arguments: current positional arguments (replaced by chaining).
    - matched: whether any command ran.
    - consumed: options already claimed by a SUBSET command in the ordered pass.
    """
    arguments: tuple
    matched: bool = False
    consumed: tuple = ()

    def advance(self, command, options):
        """
        Run `command` and fold its result into a new pipeline value.
        """
        chained = command(self.arguments, command.responseoptions(options))
        return self._replace(arguments=chained or self.arguments, matched=True)


class Console(metaclass=Introspectable):
    """
    Command registry and dispatcher.

    Properties
    - name: program name (defaults to the basename of sys.argv[0]).
    - commands: tuple of registered commands, in registration order.
    - completion: callable(arguments, options) run after a successful dispatch, or None.
    - failure: callable() run when no command matched, or None.
    - shell, fancy, colorful: fault rendering flags (see switchyard.faults).
    - strict: raise/render NoMatchingCommandError when nothing matched and no
      failure callback is registered.

    Registration is the only mutation: command(), append(), completed(), failed().
    """

    __introspectable__ = (
        "name",
        "commands",
        "completion",
        "failure",
        "shell",
        "fancy",
        "colorful",
        "strict",
    )

    __displayable__ = (
        "name",
        "commands",
        "shell",
        "fancy",
        "colorful",
        "strict",
    )

    def __new__(
            cls,
            name=Unset,
            /,
            completion=Unset,
            failure=Unset,
            *,
            shell=False,
            fancy=False,
            colorful=False,
            strict=False
    ):
        """
        Construct an empty console.

        Parameters
        - name: Unset | str
          Program name shown in faults. Defaults to the basename of sys.argv[0].
        - completion: Unset | callable(arguments, options)
        - failure: Unset | callable()
        - shell: render faults with rich and exit instead of raising.
        - fancy: render faults inside panels.
        - colorful: colorize fault output.
        - strict: report "no command matched" as a fault when no failure callback exists.
        """
        if name is Unset:
            name = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "switchyard"
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} 'name' cannot be empty")

        for field, callback in (("completion", completion), ("failure", failure)):
            if callback is not Unset and not callable(callback):
                raise TypeError(f"{cls.__typename__} '{field}' must be callable")

        self = super().__new__(cls)
        self._name = name
        self._commands = []
        self._completion = completion
        self._failure = failure
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._strict = bool(strict)
        return self

    def append(self, command, /):
        """
        Register an already built command (last in priority).

        Returns the command, so append() can be chained or used in expressions.
        """
        if not isinstance(command, Command):
            raise TypeError(f"{type(self).__typename__} append() argument must be a command")

        if command.matchany and not command.options:
            self.trigger(UnreachableCommandWarning(
                "command registered at %s position matches any of no options and can never run"
                % _ordinal(len(self._commands) + 1),
                title="unreachable command",
                code=FaultCode.UNREACHABLE_COMMAND,
                hint="list at least one option, or use the exact mode to match an empty option set",
                command=command,
                docs=getdoc(FaultCode.UNREACHABLE_COMMAND)
            ))

        self._commands.append(command)
        return command

    def command(self, options=(), inputs=(), handler=Unset, *, mode=Unset):
        """
        Build and register a command, or return a decorator that will.

        Forms
        - console.command([option("-v")], [], handler) -> Command
        - @console.command([option("-v")], [pattern(str)])
          def handler(arguments, options): ...
          (the decorated name is bound to the registered Command)
        """
        @rename("command")
        def wrapper(handler, /):
            return self.append(Command(options, inputs, handler, mode=mode))

        return wrapper(handler) if handler is not Unset else wrapper

    def completed(self, callback, /):
        """
        Register the completion callback (once); usable as a decorator.
        """
        if not callable(callback):
            raise TypeError(f"{type(self).__typename__} completion must be callable")
        if self._completion is not Unset:
            raise TypeError(f"{type(self).__typename__} completion cannot be overridden")
        self._completion = callback
        return callback

    def failed(self, callback, /):
        """
        Register the failure callback (once); usable as a decorator.
        """
        if not callable(callback):
            raise TypeError(f"{type(self).__typename__} failure must be callable")
        if self._failure is not Unset:
            raise TypeError(f"{type(self).__typename__} failure cannot be overridden")
        self._failure = callback
        return callback

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this console's rendering flags merged in.
        """
        trigger(fault, **options, console=self, shell=self._shell, fancy=self._fancy, colorful=self._colorful)

    def _visit(self, options, pipeline, candidate, /):
        """
        Ordered-pass step: one (typed option, command) pair.

        - ANY commands are selected when the typed option is one of theirs.
        - SUBSET commands are selected when the typed option is one of theirs, all
          their options were typed, and the option was not claimed yet; selecting one
          claims all of its options, whether or not its positionals match.
        - EXACT commands are left to the registration-order pass.
        """
        option, command = candidate
        match command.mode:
            case MatchMode.ANY:
                selected = option in command.options
            case MatchMode.SUBSET:
                selected = (
                    option in command.options and
                    option not in pipeline.consumed and
                    command.validoptions(options)
                )
                if selected:
                    pipeline = pipeline._replace(consumed=pipeline.consumed + command.options)
            case _:
                return pipeline

        if selected and command.validarguments(pipeline.arguments):
            return pipeline.advance(command, options)
        return pipeline

    def dispatch(self, options, arguments, /, *, complete=False, ordered=False):
        """
        Match tokenized input against the registered commands and run handlers.

        Parameters
        - options: Iterable[Option], in the order the user typed them.
        - arguments: Iterable[Argument | int | float | str], positional values.
        - complete: keep dispatching after the first match (chaining results).
        - ordered: run ANY/SUBSET commands in typed-option order first; implies complete.

        Returns
        - True when at least one command ran, False otherwise.
        """
        options = tuple(options)
        for option in options:
            if not isinstance(option, Option):
                raise TypeError("dispatch() first argument must be an iterable of options")

        complete = complete or ordered
        pipeline = _Pipeline(tuple(map(Argument.of, arguments)))

        if ordered:
            pipeline = functools.reduce(
                functools.partial(self._visit, options),
                itertools.product(options, self._commands),
                pipeline
            )

        for command in self._commands:
            if ordered and command.mode is not MatchMode.EXACT:
                continue
            if command.validoptions(options) and command.validarguments(pipeline.arguments):
                pipeline = pipeline.advance(command, options)
                if not complete:
                    break

        if not pipeline.matched:
            if self._failure is not Unset:
                self._failure()
            elif self._strict:
                self.trigger(NoMatchingCommandError(
                    "no command matches %s" % (
                        " ".join([*map(str, options), *map(str, pipeline.arguments)])
                        or "an empty command line"
                    ),
                    title="no matching command",
                    code=FaultCode.NO_MATCHING_COMMAND,
                    hint="check the options and the number and kind of arguments",
                    options=options,
                    arguments=pipeline.arguments,
                    docs=getdoc(FaultCode.NO_MATCHING_COMMAND)
                ))
            return False

        if self._completion is not Unset:
            self._completion(pipeline.arguments, OptionMap())
        return True

    def run(self, prompt=Unset, /, *, complete=False, ordered=False):
        """
        Tokenize a command line and dispatch it.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; split via shlex.split.
          • Iterable[str]: pre-tokenized sequence; items are trimmed, empty ones dropped.
        - complete, ordered: see dispatch().

        Tokens that spell no option are discarded with a DiscardedTokenWarning.
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            def _sanitized(iterable):
                for item in iterable:
                    if not isinstance(item, str):
                        raise TypeError("run() argument must be a string or an iterable of strings")
                    if item := item.strip():
                        yield item
            tokens = list(_sanitized(prompt))
        else:
            raise TypeError("run() argument must be a string or an iterable of strings")

        tokens = tokenize(tokens)
        for index, token in tokens.discarded:
            self.trigger(DiscardedTokenWarning(
                "token %r at %s position names no option and was discarded" % (token, _ordinal(index)),
                title="discarded token",
                code=FaultCode.DISCARDED_TOKEN,
                hint="spell options as -x, -xyz, --name or --name=value",
                token=token,
                index=index,
                docs=getdoc(FaultCode.DISCARDED_TOKEN)
            ))

        return self.dispatch(tokens.options, tokens.arguments, complete=complete, ordered=ordered)

    def __invoke__(self, prompt=Unset, /, **options):
        return self.run(prompt, **options)


def console(*commands, **options):
    """
    Build a Console and register the given commands in order.

    Parameters
    - *commands: Command instances (registration order = priority order).
    - **options: forwarded to Console (name is accepted as a keyword here).
    """
    name = options.pop("name", Unset)
    result = Console(name, **options)
    for command in commands:
        result.append(command)
    return result


def invoke(object, prompt=Unset, /, **options):
    """
    Convenience runner for consoles.

    Parameters
    - object: an instance providing __invoke__(prompt, **options).
    - prompt: Unset (sys.argv[1:]), a shell-like string, or an iterable of strings.
    - **options: complete / ordered, forwarded to Console.run().

    Raises
    - TypeError: when 'object' cannot be invoked.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt, **options)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


__all__ = (
    "MatchMode",
    "Command",
    "Console",
    "console",
    "invoke",
)
