r"""
Protopt prototype grammar: compile option format strings into metadata.

Overview
- ValueType: whether an option takes no value, an optional value or a required value.
- parse_separators(text): parse the key/value separator spec that follows a
  type marker ("=" or ":") into a list of separator tokens.
- Prototype: the compiled, immutable form of a prototype string.

Grammar
    prototype   ::= alias ('|' alias)*
    alias       ::= name (marker sepspec)?
    marker      ::= '=' | ':'
    sepspec     ::= (plainchar | '{' text '}')*
    name        ::= any non-empty run without '=' or ':'

- Each '|'-delimited name is an alias of the same option. The names never
  include a leading indicator ('-', '--' or '/'); all three are accepted on
  the command line for any name.
- '=' marks a required value, ':' an optional one. The marker needs to appear
  on one alias only, but every alias that has one must use the same character.
- The separator spec splits a single argument into several values and only
  makes sense for options with more than one value slot. It defaults to ':'
  and '='. "{}" disables splitting: each value must be its own argument.
- "<>" is the default handler: it receives every argument that no other
  option claims, so it cannot require values.

Quick example:
    >>> spec = Prototype("D|define=", 2)
    >>> spec.names, spec.type, spec.separators
    (('D', 'define'), <ValueType.REQUIRED: 2>, (':', '='))
    >>> Prototype("x=", 2).separators == Prototype("x={}", 2).separators
    False

Public API
- Classes: ValueType, Prototype
- Functions: parse_separators
"""
import functools
import operator
from enum import IntEnum

from .faults import *
from .utils import *

_TERMINATORS = ("=", ":")

_DEFAULT_SEPARATORS = (":", "=")

DEFAULT_HANDLER = "<>"


class ValueType(IntEnum):
    """
    value requirement of an option.
    """
    NONE = 0
    OPTIONAL = 1
    REQUIRED = 2


def parse_separators(text, /, source=Unset):
    """
    Parse a separator spec into its ordered list of separator tokens.

    Rules
    - '{' opens a multi-character token collected verbatim until '}'.
    - a '{' inside an open token, a '}' with no open token, or a trailing
      open '{' are errors.
    - any other character outside braces is a one-character token.
    - an empty spec yields an empty list (callers supply the defaults).

    Parameters
    - text: str
      the characters following the type marker of a single alias.
    - source: Unset | str
      the whole alias segment, quoted in error messages (defaults to text).

    Raises
    - IllFormedSeparatorError on unbalanced or nested braces.

    Examples
    - parse_separators("")        -> []
    - parse_separators(",;")      -> [",", ";"]
    - parse_separators("{=>},")   -> ["=>", ","]
    - parse_separators("{}")      -> [""]
    """
    separators = []
    start = -1

    def fail():
        source_ = coalesce(source, text)
        return IllFormedSeparatorError(
            "ill-formed name/value separator found in %r" % source_,
            parameter="separator",
            source=source_
        )

    for index, char in enumerate(text):
        match char:
            case "{":
                if start != -1:
                    raise fail()
                start = index + 1
            case "}":
                if start == -1:
                    raise fail()
                separators.append(text[start:index])
                start = -1
            case _:
                if start == -1:
                    separators.append(char)

    if start != -1:
        raise fail()

    return separators


class PrototypeType(type):
    """
    Metaclass that exposes compiled metadata as read-only properties.

    - every name listed in __introspectable__ becomes a mirror() property over
      the private "_name" field set during compilation.
    - __repr__/__rich_repr__ list the introspectable fields for diagnostics.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__name__.lower()}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class Prototype(metaclass=PrototypeType):
    """
    Compiled option prototype (immutable once built).

    Properties
    - prototype: the source format string.
    - names: tuple of aliases; the first one is the primary name.
    - type: ValueType.
    - count: maximum number of values an occurrence may carry.
    - separators: tuple of separator tokens, or None when values are not split.

    Compiling the same (prototype, count) twice yields equal objects.
    """

    __introspectable__ = (
        "prototype",
        "names",
        "type",
        "count",
        "separators",
    )

    def __init__(self, prototype, /, count=1):
        """
        Compile a prototype string.

        Parameters
        - prototype: str
          non-empty format string (see the module grammar).
        - count: int
          maximum number of values per occurrence (>= 0, default 1).

        Raises
        - TypeError: prototype is not a string or count is not an integer.
        - EmptyPrototypeError, EmptyNameError, ConflictingTypesError,
          IllFormedSeparatorError, SeparatorsNotAllowedError,
          DefaultHandlerValuesError: malformed prototype.
        - ValueCountError: count is negative or inconsistent with the type.
        """
        if not isinstance(prototype, str):
            raise TypeError("option 'prototype' must be a string")
        if not prototype:
            raise EmptyPrototypeError("option 'prototype' cannot be the empty string", source=prototype)
        if not isinstance(count, int) or isinstance(count, bool):
            raise TypeError("option 'count' must be an integer")
        if count < 0:
            raise ValueCountError("option 'count' cannot be negative (got %d)" % count, source=str(count))

        self._prototype = prototype
        self._count = count
        self._names = prototype.split("|")
        self._separators = None
        self._type = self._compile()

        if self._count == 0 and self._type is not ValueType.NONE:
            raise ValueCountError(
                "cannot provide a 'count' of 0 for options taking %s values" % self._type.name.lower(),
                source=str(count)
            )
        if self._type is ValueType.NONE and self._count > 1:
            raise ValueCountError(
                "cannot provide a 'count' of %d for options taking no value" % count,
                source=str(count)
            )
        if DEFAULT_HANDLER in self._names and (
                (len(self._names) == 1 and self._type is not ValueType.NONE) or
                (len(self._names) > 1 and self._count > 1)
        ):
            raise DefaultHandlerValuesError(
                "the default option handler %r cannot require values" % DEFAULT_HANDLER,
                source=prototype
            )

        self._names = tuple(self._names)

    def _compile(self):
        type = None
        separators = []
        for index, name in enumerate(self._names):
            if not name:
                raise EmptyNameError("empty option names are not supported", source=self._prototype)

            end = min((position for position in map(name.find, _TERMINATORS) if position != -1), default=-1)
            if end == -1:
                continue

            self._names[index] = name[:end]
            if type is not None and type != name[end]:
                raise ConflictingTypesError(
                    "conflicting option types: %r vs. %r" % (type, name[end]),
                    source=self._prototype
                )
            type = name[end]
            separators.extend(parse_separators(name[end + 1:], source=name))

        if type is None:
            return ValueType.NONE

        if self._count <= 1 and separators:
            raise SeparatorsNotAllowedError(
                "cannot provide key/value separators for options taking %d value(s)" % self._count,
                source=self._prototype
            )
        if self._count > 1:
            if not separators:
                self._separators = _DEFAULT_SEPARATORS
            elif separators == [""]:
                self._separators = None
            else:
                self._separators = tuple(separators)

        return ValueType.REQUIRED if type == "=" else ValueType.OPTIONAL

    def get_names(self):
        """
        return a fresh list of the option aliases (primary name first).
        """
        return list(self._names)

    def get_separators(self):
        """
        return a fresh list of the separator tokens (empty when values are not split).
        """
        return list(self._separators or ())

    def __eq__(self, other):
        if not isinstance(other, Prototype):
            return NotImplemented
        return (
            self._names == other._names and
            self._type is other._type and
            self._count == other._count and
            self._separators == other._separators
        )

    def __hash__(self):
        return hash((self._names, self._type, self._count, self._separators))

    def __str__(self):
        return self._prototype


__all__ = (
    "ValueType",
    "Prototype",
    "parse_separators",
    "DEFAULT_HANDLER",
)

# Keep the metaclass out of star-imports; subclasses reach it through type(Prototype).
del PrototypeType
