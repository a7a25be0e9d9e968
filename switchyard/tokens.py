"""
Switchyard tokenizer: split an argument vector into options and positionals.

Rules
- "--name=value" → long option 'name' carrying Argument.parse(value)
- "--name"       → long option 'name'
- "-x=value"     → flag 'x' carrying Argument.parse(value)
- "-name=value"  → long option 'name' carrying Argument.parse(value)
- "-xyz"         → flags 'x', 'y', 'z'
- anything not starting with '-' → positional, Argument.parse(token)

Tokens that spell no switch ("-", "--", "-=v", "---x", "-a b" clusters with
non-name characters) are not fatal: they are reported in Tokens.discarded as
(position, token) pairs, positions being 1-based, and the caller decides what
to tell the user.

Example
    >>> tokenize(["--count=2", "-vq", "build"]).options
    (option('--count=2'), option('-v'), option('-q'))
"""
from typing import NamedTuple

from .arguments import Argument
from .options import Option
from .utils import Unset


class Tokens(NamedTuple):
    options: tuple
    arguments: tuple
    discarded: tuple


def _resolve_switch(token):
    """
    Turn one dash-prefixed token into a list of options (empty when malformed).
    """
    double = token.startswith("--")
    body = token[2:] if double else token[1:]

    try:
        if "=" in body:
            name, _, value = body.partition("=")
            if not name:
                return []
            if len(name) == 1 and not double:
                return [Option(name, Unset, Argument.parse(value))]
            return [Option(Unset, name, Argument.parse(value))]

        if not body:
            return []
        if double:
            return [Option(Unset, body)]
        return [Option(flag) for flag in body]
    except ValueError:
        return []


def tokenize(tokens, /):
    """
    Split raw tokens into (options, arguments, discarded).

    Parameters
    - tokens: Iterable[str] (for example sys.argv[1:])

    Returns
    - Tokens: options in typed order, positional arguments in typed order,
      and the (position, token) pairs that spelled no switch.
    """
    options, arguments, discarded = [], [], []

    for index, token in enumerate(tokens, 1):
        if not isinstance(token, str):
            raise TypeError("tokenize() argument must be an iterable of strings")
        if not token.startswith("-"):
            arguments.append(Argument.parse(token))
        elif resolved := _resolve_switch(token):
            options.extend(resolved)
        else:
            discarded.append((index, token))

    return Tokens(tuple(options), tuple(arguments), tuple(discarded))


__all__ = (
    "Tokens",
    "tokenize",
)
