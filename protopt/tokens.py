r"""
Protopt argument tokenizer.

split() classifies one raw command-line argument. An argument is
"option-shaped" when it starts with one of the indicators '--', '-' or '/',
followed by a name that contains neither ':' nor '=', optionally followed by
one separator (':' or '=') and an inline value:

    --name        -> Token("--", "name", None, None)
    -n=value      -> Token("-", "n", "=", "value")
    /n:           -> Token("/", "n", ":", "")
    value         -> None

The classification is pure: no registry lookup happens here, so "-abc" is
reported as the name "abc" and it is up to the option set to decide whether it
is a registered name, a boolean toggle or a bundle of single letters.
"""
import re
from typing import NamedTuple

_PATTERN = re.compile(r"(?P<flag>--|-|/)(?P<name>[^:=]+)(?:(?P<separator>[:=])(?P<value>.*))?", re.DOTALL)


class Token(NamedTuple):
    """
    parts of an option-shaped argument.

    - flag: the leading indicator ("--", "-" or "/").
    - name: the option name, without indicator, separator or value.
    - separator: ":" or "=" when an inline value follows, else None.
    - value: the inline value ("" when the separator ends the argument), else None.
    """
    flag: str
    name: str
    separator: str | None
    value: str | None


def split(argument, /):
    """
    Split an option-shaped argument into a Token, or return None.

    Raises
    - TypeError when argument is not a string.
    """
    if not isinstance(argument, str):
        raise TypeError("split() argument must be a string")
    if not (match := _PATTERN.fullmatch(argument)):
        return None
    return Token(match["flag"], match["name"], match["separator"], match["value"])


__all__ = (
    "Token",
    "split",
)
