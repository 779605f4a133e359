"""
Protopt faults (build-time errors, parse-time faults) and rendering.

Scope
- Prototype errors: raised synchronously while compiling or registering an
  option. They are plain ValueError/KeyError subclasses because they report a
  programming mistake in the option table, never a user mistake on the command
  line. Each one names the offending parameter ("prototype", "count",
  "separator") and the offending text.
- Usage errors: NoActiveOptionError / ValueIndexError, raised when the value
  accumulator is read outside of a handler or past its declared slots.
- FaultCode: canonical, stable numeric identifiers for parse-time faults.
- OptionException: base type for every parse-time fault. Carries a message and
  a read-only options mapping, and knows how to render itself through rich.
- trigger(): central entry point to surface a parse-time fault (respecting
  shell/fancy/colorful).

UX goals
- Name-first messages: every parse fault quotes the option exactly as the user
  typed it ("-f", "--file", "/f") so it can be reproduced.
- Soft but technical language: short titles, one-sentence bodies, a single hint.

Integration
- OptionSet.trigger(fault, **ctx) merges its runtime flags and calls trigger().
- In non-shell mode the fault is raised; in shell mode it is rendered on stderr
  and the process exits with status 1.
"""
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class PrototypeError(ValueError):
    """
    malformed option prototype (grammar error).

    attributes
    - message: human readable explanation.
    - parameter: which registration parameter is at fault ("prototype",
      "count" or "separator").
    - source: the offending text (whole prototype or alias segment), or None.
    """

    def __init__(self, message, /, *, parameter="prototype", source=Unset):
        super().__init__(message)
        self.message = message
        self.parameter = parameter
        self.source = coalesce(source)


class EmptyPrototypeError(PrototypeError): ...
class EmptyNameError(PrototypeError): ...
class ConflictingTypesError(PrototypeError): ...
class IllFormedSeparatorError(PrototypeError): ...
class SeparatorsNotAllowedError(PrototypeError): ...
class DefaultHandlerValuesError(PrototypeError): ...


class ValueCountError(PrototypeError):
    """
    inconsistent maximum value count for the declared value type.
    """

    def __init__(self, message, /, *, parameter="count", source=Unset):
        super().__init__(message, parameter=parameter, source=source)


class DuplicateNameError(KeyError):
    """
    an option name (primary or alias) is already registered in the set.
    """

    def __init__(self, name, /):
        super().__init__(name)
        self.name = name
        self.message = "an option named %r is already registered" % name

    def __str__(self):
        return self.message


class NoActiveOptionError(RuntimeError):
    """
    option values were read while no option was being completed.
    """


class ValueIndexError(IndexError):
    """
    option value index is outside the declared value slots.
    """


class FaultCode(IntEnum):
    """
    canonical fault codes for parse-time faults (stable identifiers).

    grouping (by high-level domain)
    - values (2110x)
      • MISSING_REQUIRED_VALUE, TOO_MANY_VALUES
    - bundling (2111x)
      • UNREGISTERED_BUNDLE
    - conversion (2112x)
      • CONVERSION_FAILED

    normalize() allows host remapping to custom labels while keeping
    code-stability.
    """
    # --- value errors (2110x) ---
    MISSING_REQUIRED_VALUE = 21101
    TOO_MANY_VALUES        = 21102

    # --- bundling errors (2111x) ---
    UNREGISTERED_BUNDLE    = 21111

    # --- conversion errors (2112x) ---
    CONVERSION_FAILED      = 21121

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class OptionException(Exception):
    """
    base type for parse-time faults.

    options (all optional, merged in by trigger())
    - option: display name of the offending option as typed ("-f", "--file").
    - code: FaultCode of the fault.
    - title: short title for the header.
    - hint: one-sentence suggestion.
    - cause: exception chained as __cause__ when the fault is raised.
    - shell, fancy, colorful, prog: runtime rendering flags.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def option(self):
        return self.options.get("option")

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = text(getattr(main, "__prog__", self.options.get("prog", "protopt")), styler("prog-name"))
        code = self.options.get("code")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if code else "-", styler("code")),
            " | ",
            text(self.options.get("title", "error").title(), styler("error-title")),
            " ]"
        )
        message = text(coalesce(self.message, ""), styler("error-message"))
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if fancy:
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from self.options.get("cause")
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class MissingRequiredValueError(OptionException): ...
class TooManyValuesError(OptionException): ...
class UnregisteredBundleError(OptionException): ...
class ConversionError(OptionException): ...


def trigger(fault, /, **options):
    """
    surface a parse-time fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see OptionException).
    - options are merged into a copy of the fault before triggering, so the
      original fault object is never mutated.
    - in shell mode, rendering happens via rich console; otherwise, the fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "PrototypeError",
    "EmptyPrototypeError",
    "EmptyNameError",
    "ConflictingTypesError",
    "IllFormedSeparatorError",
    "SeparatorsNotAllowedError",
    "DefaultHandlerValuesError",
    "ValueCountError",
    "DuplicateNameError",
    "NoActiveOptionError",
    "ValueIndexError",
    "FaultCode",
    "OptionException",
    "MissingRequiredValueError",
    "TooManyValuesError",
    "UnregisteredBundleError",
    "ConversionError",
    "trigger",
)
