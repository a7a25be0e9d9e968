r"""
Switchyard value model: positional type patterns and concrete values.

Overview
- ArgumentInput: a *type pattern* a positional value must satisfy.
  • ArgumentInput.any(int | float | str): any value of that primitive kind.
  • ArgumentInput.exact(literal): only that literal (kind inferred from the literal).
  • pattern(x): shorthand used at registration sites (types → any, literals → exact).

- Argument: a *concrete value* with a primitive kind (int, float, str).
  • Argument.int(...), Argument.float(...), Argument.string(...): explicit factories.
    Omitting the payload builds an "absent" argument (slot present, value unknown).
  • Argument.parse(text): integer parse, then float parse, then plain string.
  • Argument.of(value): wrap an already typed Python value (no string parsing).

Matching
- Argument.represents(pattern):
  • any-pattern  → kinds match.
  • exact-pattern → kinds match and payloads are equal (an absent payload never matches).

Equality
- Argument equality is a *weak* relation: same kind and (either payload absent or
  payloads equal). An absent payload acts as a wildcard, which makes the relation
  non-transitive; for that reason arguments are unhashable.
- ArgumentInput equality is structural and patterns are hashable.

Quick example:
    >>> from switchyard.arguments import Argument, ArgumentInput, pattern
    >>> Argument.parse("42").represents(ArgumentInput.any(int))
    True
    >>> Argument.parse("4.2").represents(pattern(int))
    False
    >>> Argument.string("x") == Argument.string()
    True

Public API
- Classes: ArgumentInput, Argument
- Functions: pattern
"""
import builtins
import re

from rich.text import Text

from .utils import *

# Primitive kinds understood by the engine, with their user-facing names.
_KINDS = {
    builtins.int: "int",
    builtins.float: "float",
    builtins.str: "string",
}

# Accepted integer spelling: optional sign, ASCII decimal digits only.
_INTEGER = re.compile(r"[+-]?[0-9]+")

# Accepted float spelling: decimal/exponent literals and the inf/nan words.
_REAL = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE
)


def _sanitize_kind(cls, kind, /):
    """
    Internal: validate a primitive kind (int, float or str).
    """
    if not isinstance(kind, type) or kind not in _KINDS:
        raise TypeError(f"{cls.__typename__} kind must be int, float or str")
    return kind


def _sanitize_literal(cls, kind, literal, /):
    """
    Internal: validate a literal against its kind and normalize it.

    Rules
    - bool is never accepted (it is an int subclass, but not an engine kind).
    - float kinds accept ints and store them as floats.
    - every other kind requires an exact type match.
    """
    if isinstance(literal, bool):
        raise TypeError(f"{cls.__typename__} literal cannot be a bool")
    if kind is builtins.float and type(literal) is builtins.int:
        return builtins.float(literal)
    if type(literal) is not kind:
        raise TypeError(f"{cls.__typename__} literal must be of type {_KINDS[kind]}")
    return literal


class ArgumentInput(metaclass=Introspectable):
    """
    Type pattern for one positional argument.

    Variants
    - any(kind): matches any Argument of that kind.
    - exact(literal): matches only an Argument of the literal's kind whose
      payload equals the literal.

    Properties
    - kind: int | float | str
    - literal: the exact literal, or None for any-patterns.
    - isexact: True for exact-patterns.

    Instances are immutable, hashable, and compare structurally.
    """

    __introspectable__ = (
        "kind",
        "literal",
        "isexact",
    )

    def __new__(cls, kind, literal=Unset, /):
        """
        Construct a pattern from a kind and an optional literal.

        Prefer the any()/exact() factories or pattern() at registration sites.

        Raises
        - TypeError: when kind is not int/float/str or the literal does not fit the kind.
        """
        self = super().__new__(cls)
        self._kind = _sanitize_kind(cls, kind)
        self._isexact = literal is not Unset
        self._literal = _sanitize_literal(cls, kind, literal) if self._isexact else None
        return self

    @classmethod
    def any(cls, kind, /):
        """
        Pattern matching any value of `kind` (int, float or str).
        """
        return cls(kind)

    @classmethod
    def exact(cls, literal, /):
        """
        Pattern matching only `literal`; its Python type selects the kind.
        """
        if isinstance(literal, bool) or type(literal) not in _KINDS:
            raise TypeError(f"{cls.__typename__} literal must be an int, a float or a string")
        return cls(type(literal), literal)

    def __eq__(self, other):
        if not isinstance(other, ArgumentInput):
            return NotImplemented
        return (self._kind, self._isexact, self._literal) == (other._kind, other._isexact, other._literal)

    def __hash__(self):
        return hash((self._kind, self._isexact, self._literal))

    def __rich_repr__(self):
        yield "kind", _KINDS[self._kind]
        if self._isexact:
            yield "literal", self._literal


class Argument(metaclass=Introspectable):
    """
    Concrete positional value: an int, a float, or a string.

    A payload may be absent ("slot present, value unknown"); such arguments are
    only built internally and act as wildcards under equality.

    Accessors
    - kind: int | float | str
    - value: payload, or None when absent.
    - absent: True when the payload is absent.
    - intvalue / floatvalue / stringvalue: payload when the kind matches,
      otherwise 0 / 0.0 / "".
    """

    __introspectable__ = (
        "kind",
    )

    def __new__(cls, kind, value=Unset, /):
        """
        Construct an argument from a kind and an optional payload.

        Prefer the int()/float()/string()/parse()/of() factories.
        """
        self = super().__new__(cls)
        self._kind = _sanitize_kind(cls, kind)
        self._value = value if value is Unset else _sanitize_literal(cls, kind, value)
        return self

    @property
    def value(self):
        return coalesce(self._value)

    @property
    def absent(self):
        return self._value is Unset

    @property
    def intvalue(self):
        return coalesce(self._value, 0) if self._kind is builtins.int else 0

    @property
    def floatvalue(self):
        return coalesce(self._value, 0.0) if self._kind is builtins.float else 0.0

    @property
    def stringvalue(self):
        return coalesce(self._value, "") if self._kind is builtins.str else ""

    def represents(self, pattern, /):
        """
        Return True when this argument satisfies `pattern`.

        - Kinds must match.
        - Any-patterns accept every payload (absent included).
        - Exact-patterns require a present payload equal to the literal.
        """
        if not isinstance(pattern, ArgumentInput):
            raise TypeError("represents() argument must be an argument-input")
        if self._kind is not pattern.kind:
            return False
        if not pattern.isexact:
            return True
        return self._value is not Unset and self._value == pattern.literal

    def __eq__(self, other):
        if not isinstance(other, Argument):
            return NotImplemented
        if self._kind is not other._kind:
            return False
        # An absent payload on either side acts as a wildcard.
        return self._value is Unset or other._value is Unset or self._value == other._value

    __hash__ = None

    def __str__(self):
        """
        Command-line spelling of the payload, or "(kind)" when it is absent.
        """
        if self._value is Unset:
            return f"({_KINDS[self._kind]})"
        return str(self._value)

    def __rich__(self):
        if self._value is Unset:
            return Text(f"({_KINDS[self._kind]})", style="dim")
        return Text(repr(self._value), style={
            builtins.int: "cyan",
            builtins.float: "magenta",
            builtins.str: "green",
        }[self._kind])

    def __rich_repr__(self):
        yield "kind", _KINDS[self._kind]
        if self._value is not Unset:
            yield "value", self._value

    @classmethod
    def parse(cls, text, /):
        """
        Build an argument from raw command-line text.

        Order
        - base-10 integer (optional sign, ASCII digits),
        - float (decimal or exponent form, inf/infinity/nan),
        - otherwise the text itself as a string.
        """
        if not isinstance(text, builtins.str):
            raise TypeError("parse() argument must be a string")
        if _INTEGER.fullmatch(text):
            return cls(builtins.int, builtins.int(text))
        if _REAL.fullmatch(text):
            return cls(builtins.float, builtins.float(text))
        return cls(builtins.str, text)

    @classmethod
    def of(cls, value, /):
        """
        Wrap an already typed Python value; arguments pass through unchanged.

        Strings are kept as strings (no numeric parsing, see parse()).
        """
        if isinstance(value, Argument):
            return value
        if isinstance(value, bool) or type(value) not in _KINDS:
            raise TypeError("of() argument must be an argument, an int, a float or a string")
        return cls(type(value), value)

    @classmethod
    def int(cls, value=Unset, /):
        return cls(builtins.int, value)

    @classmethod
    def float(cls, value=Unset, /):
        return cls(builtins.float, value)

    @classmethod
    def string(cls, value=Unset, /):
        return cls(builtins.str, value)


def pattern(object, /):
    """
    Registration shorthand for ArgumentInput.

    - int / float / str (the types) → ArgumentInput.any(type)
    - an ArgumentInput              → returned unchanged
    - any other literal             → ArgumentInput.exact(literal)

    Example
        console.command([option("--name")], [pattern(str), pattern("add")], handler)
    """
    if isinstance(object, ArgumentInput):
        return object
    if isinstance(object, type):
        return ArgumentInput.any(object)
    return ArgumentInput.exact(object)


__all__ = (
    # Classes
    "ArgumentInput",
    "Argument",

    # Functions
    "pattern",
)
