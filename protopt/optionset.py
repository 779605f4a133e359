"""
Protopt option set: option registry, registration API and parser.

What this module provides
- OptionSet: an ordered, name-keyed collection of Option objects.
  • Every alias of an option resolves to the same entry; aliases are unique
    across the whole set; registration, removal and replacement keep the
    alias index consistent (all or nothing).
  • add()/add_pair()/add_values(): register a handler directly or as a decorator.
  • parse(arguments): dispatch arguments to the registered handlers and return
    the arguments nobody claimed ("extras").

How parse() reads arguments
- "--" stops option processing: the remaining arguments are extras (or go to
  the default handler "<>"), even if they look like options.
- while an option collects values, the next arguments are its values, taken
  verbatim (they are never re-read as options).
- "-name", "--name" and "/name" all select the option registered as "name";
  "name=value" / "name:value" carry an inline value.
- "-name+" / "-name-" toggle a no-value option on (value is the argument) or
  off (value is None).
- "-abc" runs the single-letter options a, b and c; the first letter taking a
  value consumes the rest of the argument ("-Dkey=value", "-abf", "file").
- anything else is an extra, unless a default handler "<>" is registered, in
  which case that handler receives it.
- when the arguments run out, an option still collecting values is completed
  with what it has.

Quick start
    from protopt import OptionSet

    options = OptionSet()
    options.add("v|verbose", lambda value: ...)
    options.add("n|count=", print, type=int)

    @options.add_pair("D=", descr="define {0:NAME} as {1:VALUE}")
    def define(name, value): ...

    extras = options.parse(["-v", "--count=3", "-DDEBUG=1", "file.txt"])
"""
import re
import shlex
import sys
from collections.abc import Iterable

from rich.console import Console

from .faults import *
from .help import render
from .options import Handler, Option
from .prototypes import DEFAULT_HANDLER, ValueType
from .tokens import split
from .utils import *
from .values import Context

stdout = Console()


def _explode(value, separators, /):
    """
    split an inline value on any of the separators, keeping empty pieces.

    at each position the first matching separator (in declaration order) wins;
    empty separators never split.
    """
    if not (separators := [separator for separator in separators or () if separator]):
        return [value]
    return re.split("|".join(map(re.escape, separators)), value)


class OptionSet:
    """
    Ordered, name-keyed registry of options and the parser that runs them.

    Parameters
    - localizer: Unset | Callable[[str], str]
      applied to every message template of a parse fault (and to the help
      output) before formatting. Defaults to the identity.
    - shell: bool
      when True, parse faults are printed on stderr and the process exits
      with status 1 instead of raising.
    - fancy: bool
      render printed faults inside a panel.
    - colorful: bool
      colorize printed faults.

    Collection protocol
    - len(options), iter(options) (registration order), name/option in options.
    - options[name] (any alias) / options[index].
    - del options[name | index], options[index] = option, insert(), remove().
    """

    def __init__(self, localizer=Unset, /, *, shell=False, fancy=False, colorful=True):
        if localizer is not Unset and not callable(localizer):
            raise TypeError("option set 'localizer' must be callable")
        self._localizer = coalesce(localizer, str)
        self._items = []
        self._names = {}
        self.shell = bool(shell)
        self.fancy = bool(fancy)
        self.colorful = bool(colorful)

    @property
    def localizer(self):
        return self._localizer

    def localize(self, message, /):
        """
        return the localized form of a message template.
        """
        return self._localizer(message)

    def trigger(self, fault, /, **options):
        """
        surface a parse fault with this set's runtime flags merged in.
        """
        trigger(fault, **options, shell=self.shell, fancy=self.fancy, colorful=self.colorful)

    # --- registry -------------------------------------------------------------

    def _link(self, option):
        added = []
        try:
            for name in option.names:
                if name in self._names:
                    raise DuplicateNameError(name)
                self._names[name] = option
                added.append(name)
        except DuplicateNameError:
            # all-or-nothing: drop the aliases this option managed to claim
            for name in added:
                del self._names[name]
            raise

    def _unlink(self, option):
        for name in option.names:
            del self._names[name]

    def _position(self, option):
        for index, item in enumerate(self._items):
            if item is option:
                return index
        raise ValueError("option is not registered in this set")

    def insert(self, index, option, /):
        """
        register an option at a given position.

        Raises
        - TypeError when option is not an Option.
        - DuplicateNameError when any alias is already taken (set unchanged).
        """
        if not isinstance(option, Option):
            raise TypeError("insert() argument must be an option")
        self._link(option)
        self._items.insert(index, option)

    def remove(self, option, /):
        """
        unregister an option and all of its aliases.
        """
        del self[self._position(option)]

    def keys(self):
        """
        return the primary names in registration order.
        """
        return [option.names[0] for option in self._items]

    def get(self, name, default=None, /):
        return self._names.get(name, default)

    def __len__(self):
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items))

    def __contains__(self, item):
        if isinstance(item, str):
            return item in self._names
        if isinstance(item, Option):
            return any(option is item for option in self._items)
        return False

    def __getitem__(self, key):
        match key:
            case str():
                return self._names[key]
            case int():
                return self._items[key]
            case _:
                raise TypeError("option set indices must be names or integers")

    def __delitem__(self, key):
        match key:
            case str():
                index = self._position(self._names[key])
            case int():
                index = key
            case _:
                raise TypeError("option set indices must be names or integers")
        self._unlink(self._items[index])
        del self._items[index]

    def __setitem__(self, index, option):
        if not isinstance(index, int):
            raise TypeError("option set assignment requires an integer index")
        if not isinstance(option, Option):
            raise TypeError("option set items must be options")
        previous = self._items[index]
        self._unlink(previous)
        try:
            self._link(option)
        except DuplicateNameError:
            self._link(previous)
            raise
        self._items[index] = option

    # --- registration ---------------------------------------------------------

    def _register(self, prototype, callback, descr, /, **metadata):
        # compiled before the callback is known: grammar errors surface at the
        # registration call, even in decorator form
        option = Option(prototype, Unset, descr, **metadata)

        @rename("register")
        def wrapper(callback, /):
            if not callable(callback):
                raise TypeError("@register() must be applied to a callable")
            if option._callback is not Unset:
                raise TypeError("@register() must be applied only once")
            option._callback = callback
            self.insert(len(self._items), option)
            return option

        if callback is Unset:
            return wrapper
        wrapper(callback)
        return self

    def add(self, source, callback=Unset, /, descr=Unset, *, type=Unset):
        """
        Register an option.

        Forms
        - add(option): register a pre-built Option; returns the set.
        - add(prototype, callback, descr=..., type=...): register a single-value
          handler, callback(value); returns the set (chainable).
        - @add(prototype, descr=..., type=...): decorator form; the decorated
          function is replaced by its Option (still callable).

        The value handed to callback is converted with `type` (default str);
        a missing value is handed over as None.
        """
        if isinstance(source, Option):
            if callback is not Unset or descr is not Unset or type is not Unset:
                raise TypeError("add() takes a single argument when given an option")
            self.insert(len(self._items), source)
            return self
        return self._register(source, callback, descr, handler=Handler.SINGLE, type=type)

    def add_pair(self, prototype, callback=Unset, /, descr=Unset, *, type=Unset):
        """
        Register a two-value handler, callback(key, value).

        `type` is one converter for both values or a (key, value) pair of
        converters. Direct form returns the set; decorator form returns the Option.
        """
        return self._register(prototype, callback, descr, handler=Handler.PAIR, type=type)

    def add_values(self, prototype, callback=Unset, /, descr=Unset, *, count=1):
        """
        Register a handler receiving the Values accumulator, callback(values).

        `count` is the maximum number of values per occurrence. Direct form
        returns the set; decorator form returns the Option.
        """
        return self._register(prototype, callback, descr, handler=Handler.VALUES, count=count)

    # --- parsing --------------------------------------------------------------

    def create_context(self):
        """
        build the context of a parse() call (override to extend it).
        """
        return Context(self)

    def parse(self, arguments=Unset):
        """
        Dispatch arguments to the registered handlers.

        Parameters
        - arguments:
          • Unset: read sys.argv[1:].
          • str: shell-like string, split with shlex.split.
          • Iterable[str]: pre-tokenized arguments, used verbatim.

        Returns
        - list[str]: the extras, in their original order.

        Raises
        - TypeError on a non-string argument.
        - OptionException subclasses on parse faults (outside shell mode); the
          whole call is aborted, no partial result is returned.
        """
        if arguments is Unset:
            arguments = sys.argv[1:]
        elif isinstance(arguments, str):
            arguments = shlex.split(arguments)
        elif not isinstance(arguments, Iterable):
            raise TypeError("parse() argument must be a string or an iterable of strings")

        context = self.create_context()
        process = True
        extras = []
        default = self._names.get(DEFAULT_HANDLER)

        for argument in arguments:
            if not isinstance(argument, str):
                raise TypeError("parse() argument must be a string or an iterable of strings")
            context.index += 1
            if process and context.option is None and argument == "--":
                process = False
                continue
            if not process or not self._parse(argument, context):
                self._unprocessed(extras, default, argument, context)

        if context.option is not None:
            context.option.invoke(context)

        return extras

    def _unprocessed(self, extras, default, argument, context):
        if default is None:
            extras.append(argument)
            return
        context.bind(default, DEFAULT_HANDLER)
        context.values.append(argument)
        default.invoke(context)

    def _parse(self, argument, context):
        if context.option is not None:
            self._parse_value(argument, context)
            return True

        if not (token := split(argument)):
            return False

        flag, name, separator, value = token

        if name not in self._names:
            return (
                self._parse_bool(argument, name, context) or
                self._parse_bundle(flag, name + (separator or "") + (value or ""), context)
            )

        option = self._names[name]
        context.bind(option, flag + name)
        match option.type:
            case ValueType.NONE:
                context.values.append(name)
                option.invoke(context)
            case ValueType.OPTIONAL | ValueType.REQUIRED:
                self._parse_value(value, context)
        return True

    def _parse_value(self, value, context):
        option = context.option
        values = context.values
        if value is not None:
            for piece in _explode(value, option.separators):
                values.append(piece)

        if len(values) == option.count or option.type is ValueType.OPTIONAL:
            option.invoke(context)
        elif len(values) > option.count:
            self.trigger(TooManyValuesError(
                self.localize("found %d option values for option %r when expecting %d") % (
                    len(values), context.name, option.count
                ),
                title="too many values",
                code=FaultCode.TOO_MANY_VALUES,
                option=context.name,
                found=len(values),
                expected=option.count,
                hint="pass at most %d value(s) to %s" % (option.count, context.name),
            ))

    def _parse_bool(self, argument, name, context):
        if not name or name[-1] not in "+-":
            return False
        option = self._names.get(name[:-1])
        if option is None or option.type is not ValueType.NONE:
            return False
        context.bind(option, argument)
        context.values.append(argument if name[-1] == "+" else None)
        option.invoke(context)
        return True

    def _parse_bundle(self, flag, name, context):
        if flag != "-":
            return False
        for index, char in enumerate(name):
            input = flag + char
            if char not in self._names:
                if index == 0:
                    # not a bundle at all: leave it to the caller as an extra
                    return False
                return self.trigger(UnregisteredBundleError(
                    self.localize("cannot bundle unregistered option %r") % input,
                    title="unregistered bundled option",
                    code=FaultCode.UNREGISTERED_BUNDLE,
                    option=input,
                    bundle=flag + name,
                    hint="pass %s on its own or register it" % input,
                ))

            option = self._names[char]
            context.bind(option, input)
            if option.type is ValueType.NONE:
                context.values.append(name)
                option.invoke(context)
                continue
            # the first value-taking letter consumes the rest of the bundle
            self._parse_value(name[index + 1:] or None, context)
            return True
        return True

    # --- help -----------------------------------------------------------------

    def __rich__(self):
        return render(self)

    def print_help(self, console=Unset):
        """
        print the option descriptions table (stdout console by default).
        """
        coalesce(console, stdout).print(self)

    def __repr__(self):
        return "option-set(%s)" % ", ".join(map(repr, self.keys()))


__all__ = (
    "OptionSet",
)
