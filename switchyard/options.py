"""
Switchyard option identities.

What this module provides
- Option: identity of a command-line switch, made of an optional one-character
  flag (-v), an optional long name (--verbose) and an optional attached value
  (--count=5).
- option(text): string-form constructor ("-v", "--verbose", "-v--verbose", "v", "verbose").
- OPT_ANY / OPT_SUBSET: reserved markers a command pattern may list to select the
  "matches any" or "is a subset" semantics.
- OPT_HELP: a conventional -h/--help identity (a normal option, no engine behavior).
- OptionMap: read-only mapping from options to arguments, looked up by option identity.

Identity
- Two options are the same switch when both have a flag and the flags match, or
  both have a long name and the long names match. The attached value never takes
  part in identity. The relation is not transitive (-v ~ -v/--verbose ~ --verbose,
  but -v !~ --verbose), so options are unhashable and collections of options are
  plain sequences searched with ==.
- OPT_ANY and OPT_SUBSET only equal themselves.

Example
    >>> from switchyard.options import option, OptionMap
    >>> option("-v--verbose") == option("--verbose")
    True
    >>> option("-v") == option("--verbose")
    False
"""
import re
from collections.abc import Mapping

from .arguments import Argument
from .utils import *


def _sanitize_name(cls, name, field, /):
    """
    Internal: validate a flag character or a long name.
    """
    if name is Unset:
        return name
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} '{field}' must be a string")
    if field == "flag" and len(name) != 1:
        raise ValueError(f"{cls.__typename__} 'flag' must be a single character")
    if not name or name.startswith("-") or "=" in name or name.isspace():
        raise ValueError(f"{cls.__typename__} '{field}' must be a valid switch name")
    return name


class Option(metaclass=Introspectable):
    """
    Identity of a command-line switch.

    Properties
    - flag: single character or None.
    - long: long name (without dashes) or None.
    - argument: attached Argument or None.
    - sentinel: True for the OPT_ANY / OPT_SUBSET markers.

    Equality
    - Weak identity (see identifies()); markers compare by identity only.
    """

    __introspectable__ = (
        "flag",
        "long",
        "argument",
    )

    def __new__(cls, flag=Unset, long=Unset, argument=Unset):
        """
        Construct an option identity.

        Parameters
        - flag: Unset | str of length 1
        - long: Unset | non-empty str (no leading dash, no '=')
        - argument: Unset | Argument | int | float | str (wrapped via Argument.of)

        Raises
        - TypeError: when neither a flag nor a long name is given, or on wrong types.
        - ValueError: on malformed names.
        """
        if flag is Unset and long is Unset:
            raise TypeError(f"{cls.__typename__} must specify a flag or a long name")

        self = super().__new__(cls)
        self._flag = _sanitize_name(cls, flag, "flag")
        self._long = _sanitize_name(cls, long, "long")
        self._argument = argument if argument is Unset else Argument.of(argument)
        self._marker = Unset
        return self

    @classmethod
    def _marked(cls, marker, /):
        """
        Internal: build a reserved marker option (no flag, no long name).
        """
        self = super().__new__(cls)
        self._flag = self._long = self._argument = Unset
        self._marker = marker
        return self

    @property
    def sentinel(self):
        return self._marker is not Unset

    def identifies(self, other, /):
        """
        Return True when `other` names the same switch.

        - flags present on both sides and equal, or
        - long names present on both sides and equal.
        The attached value is ignored.
        """
        if not isinstance(other, Option):
            raise TypeError("identifies() argument must be an option")
        if self._marker is not Unset or other._marker is not Unset:
            return self is other
        if self._flag is not Unset and other._flag is not Unset and self._flag == other._flag:
            return True
        if self._long is not Unset and other._long is not Unset and self._long == other._long:
            return True
        return False

    def __eq__(self, other):
        if not isinstance(other, Option):
            return NotImplemented
        return self.identifies(other)

    __hash__ = None

    def __str__(self):
        """
        Command-line spelling, e.g. "-v/--verbose" or "--count=5".
        """
        if self._marker is not Unset:
            return self._marker
        names = []
        if self._flag is not Unset:
            names.append("-" + self._flag)
        if self._long is not Unset:
            names.append("--" + self._long)
        spelling = "/".join(names)
        if self._argument is not Unset:
            spelling += "=%s" % coalesce(self._argument.value, "")
        return spelling

    def __repr__(self):
        if self._marker is not Unset:
            return self._marker
        return f"{type(self).__typename__}({str(self)!r})"

    def __rich_repr__(self):
        if self._marker is not Unset:
            yield "marker", self._marker
            return
        for name in type(self).__introspectable__:
            if (object := getattr(self, name)) is not None:
                yield name, object

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self


def option(text, /, argument=Unset):
    """
    Build an Option from its string form.

    Accepted forms
    - "-v"           → flag v
    - "--verbose"    → long name verbose (inner dashes allowed: "--dry-run")
    - "-v--verbose"  → flag v and long name verbose
    - "v" / "verbose" (no leading dash) → flag when one character, long name otherwise;
      such text is taken whole ("help-h" → long name help-h)

    A single dash introduces exactly one flag character, so "-ab" is rejected
    (use "-a" and "-b", or "--ab").

    Parameters
    - text: str
    - argument: optional value attached to the option (see Option).

    Raises
    - ValueError: when the text does not spell a switch.
    """
    if not isinstance(text, str):
        raise TypeError("option() argument must be a string")

    if not text.startswith("-"):
        if len(text) == 1:
            return Option(text, Unset, argument)
        return Option(Unset, text or Unset, argument)

    if not (match := re.fullmatch(r"(?:-(?P<flag>[^\s=-]))?(?:--(?P<long>[^\s=]+))?", text)):
        raise ValueError(f"option() argument {text!r} is not a valid switch spelling")

    return Option(
        match["flag"] or Unset,
        match["long"] or Unset,
        argument
    )


def _breadth(option, /):
    """
    Internal: number of spellings (flag, long name) an option carries.
    """
    return (option.flag is not None) + (option.long is not None)


class OptionMap(Mapping):
    """
    Read-only mapping from options to arguments, keyed by option identity.

    Lookups use weak option equality, so a value recorded under -c/--count can be
    read with option("c"), option("count") or option("-c--count").

    Setting a key that identifies existing keys replaces their value in place and
    folds them into one entry, keyed by whichever option names more spellings
    (construction only; the mapping is immutable afterwards).
    """

    __slots__ = ("_keys", "_values")

    def __init__(self, items=(), /):
        keys, values = [], []
        for key, value in items.items() if isinstance(items, Mapping) else items:
            if not isinstance(key, Option):
                raise TypeError("option-map keys must be options")
            value = Argument.of(value)

            if not (matches := [index for index, existing in enumerate(keys) if existing == key]):
                keys.append(key)
                values.append(value)
                continue

            first, *rest = matches
            keys[first] = max((keys[index] for index in matches), key=_breadth)
            if _breadth(key) > _breadth(keys[first]):
                keys[first] = key
            values[first] = value
            for index in reversed(rest):
                del keys[index], values[index]

        self._keys = tuple(keys)
        self._values = tuple(values)

    def __getitem__(self, key, /):
        if isinstance(key, Option):
            for existing, value in zip(self._keys, self._values):
                if existing == key:
                    return value
        raise KeyError(key)

    def __iter__(self):
        return iter(self._keys)

    def __len__(self):
        return len(self._keys)

    def __eq__(self, other):
        if not isinstance(other, Mapping):
            return NotImplemented
        if len(self) != len(other):
            return False
        for key, value in zip(self._keys, self._values):
            try:
                if other[key] != value:
                    return False
            except KeyError:
                return False
        return True

    __hash__ = None

    def __repr__(self):
        return "option-map({%s})" % ", ".join(
            f"{str(key)!r}: {value!r}" for key, value in zip(self._keys, self._values)
        )

    def __rich_repr__(self):
        for key, value in zip(self._keys, self._values):
            yield str(key), value


OPT_ANY = Option._marked("OPT_ANY")
"""Marker: the command matches when any of its options is present."""

OPT_SUBSET = Option._marked("OPT_SUBSET")
"""Marker: the command matches when all of its options are present, extras allowed."""

OPT_HELP = Option("h", "help")
"""Conventional -h/--help identity (no engine-level behavior)."""


__all__ = (
    # Classes
    "Option",
    "OptionMap",

    # Functions
    "option",

    # Constants
    "OPT_ANY",
    "OPT_SUBSET",
    "OPT_HELP",
)
