r"""
Protopt options: compiled prototypes bound to a completion handler.

Overview
- Handler: the closed set of handler shapes an option can be bound to.
  • VALUES: callback(values) receives the Values accumulator itself.
  • SINGLE: callback(value) receives the first value, converted (1 slot).
  • PAIR:   callback(key, value) receives the first two values, converted (2 slots).
- Option: a Prototype plus a description, a handler shape, converters and the
  callback. Option.invoke(context) is the completion protocol: it runs the
  callback exactly once for the current occurrence and then resets the parse
  context so nothing leaks into the next option.

Conversion
- converters are plain `str -> T` callables (int, float, pathlib.Path, an Enum
  class, ...), applied once per value at completion time.
- a missing value (None) is handed to the callback as None, unconverted.
- any exception raised by a converter becomes a ConversionError naming the
  value, the converter and the option as typed on the command line.

Quick example:
    >>> seen = []
    >>> Option("n|count=", seen.append, handler=Handler.SINGLE, type=int)
    option(prototype='n|count=', names=('n', 'count'), ...)
"""
from enum import Enum

from rich.text import Text

from .faults import *
from .prototypes import Prototype
from .utils import *


class Handler(Enum):
    """
    shape of the callback bound to an option.
    """
    VALUES = "values"
    SINGLE = "single"
    PAIR = "pair"


_SLOTS = {
    Handler.SINGLE: 1,
    Handler.PAIR: 2,
}


def _sanitize_descr(descr, /):
    """
    Internal: validate an option description.

    - Unset becomes None.
    - strings are trimmed and must not be empty; rich Text is kept as-is.
    """
    if not isinstance(descr, str | Text | Unset):
        raise TypeError("option 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError("option 'descr' cannot be empty")
    return coalesce(descr)


def _sanitize_converters(handler, type, /):
    """
    Internal: normalize the `type` argument into one converter per value slot.

    - VALUES handlers receive raw values: no converter may be given.
    - a single callable is used for every slot.
    - an iterable must provide exactly one callable per slot.
    """
    if handler is Handler.VALUES:
        if type is not Unset:
            raise TypeError("option 'type' cannot be used with a values handler")
        return ()
    slots = _SLOTS[handler]
    if type is Unset:
        return (str,) * slots
    if callable(type):
        return (type,) * slots
    try:
        converters = tuple(type)
    except TypeError:
        raise TypeError("option 'type' must be callable or an iterable of callables") from None
    if len(converters) != slots:
        raise ValueError("option 'type' must provide %d converter(s), got %d" % (slots, len(converters)))
    if not all(map(callable, converters)):
        raise TypeError("option 'type' converters must be callable")
    return converters


class Option(Prototype):
    """
    Named option: compiled prototype + description + bound handler.

    Properties (read-only)
    - prototype, names, type, count, separators: see Prototype.
    - descr: description shown in help, or None.
    - handler: Handler shape.
    - converters: tuple of converters, one per slot (empty for VALUES).

    Options compare by identity: two options compiled from the same prototype
    are still different registrations.
    """

    __introspectable__ = Prototype.__introspectable__ + (
        "descr",
        "handler",
        "converters",
    )

    def __init__(self, prototype, callback, /, descr=Unset, *, count=Unset, handler=Handler.VALUES, type=Unset):
        """
        Construct an Option.

        Parameters
        - prototype: str
          option format string (see protopt.prototypes).
        - callback: Unset | Callable
          completion handler, called according to `handler`. When Unset the
          option is a no-op until a callback is bound (decorator forms).
        - descr: Unset | str | Text
          description for help output; "{0:NAME}" markers name the value slots.
        - count: Unset | int
          maximum value count. Only meaningful for VALUES handlers (default 1);
          SINGLE and PAIR fix it to 1 and 2.
        - handler: Handler
          callback shape.
        - type: Unset | Callable | Iterable[Callable]
          converter(s) for SINGLE/PAIR handlers (default str).

        Raises
        - TypeError/ValueError on invalid metadata, plus every compilation
          error of Prototype.
        """
        if callback is not Unset and not callable(callback):
            raise TypeError("option 'callback' must be callable")
        if not isinstance(handler, Handler):
            raise TypeError("option 'handler' must be a Handler")
        if handler is not Handler.VALUES and count not in (Unset, _SLOTS[handler]):
            raise ValueError("%s handlers take exactly %d value(s)" % (handler.value, _SLOTS[handler]))

        self._descr = _sanitize_descr(descr)
        self._handler = handler
        self._converters = _sanitize_converters(handler, type)
        self._callback = callback

        super().__init__(prototype, coalesce(count, _SLOTS.get(handler, 1)))

    def invoke(self, context, /):
        """
        Complete the current occurrence of this option.

        Runs the callback with the accumulated values, then resets the
        context (option, name and values), even when the callback fails.
        """
        try:
            if self._callback is Unset:
                return
            match self._handler:
                case Handler.VALUES:
                    self._callback(context.values)
                case Handler.SINGLE:
                    self._callback(self._convert(context, 0))
                case Handler.PAIR:
                    self._callback(self._convert(context, 0), self._convert(context, 1))
        finally:
            context.reset()

    def _convert(self, context, index, /):
        if (value := context.values[index]) is None:
            return None
        converter = self._converters[index]
        try:
            return converter(value)
        except Exception as exception:
            options = context.options
            typename = getattr(converter, "__name__", repr(converter))
            options.trigger(ConversionError(
                options.localize("could not convert string %r to type %s for option %r") % (value, typename, context.name),
                title="invalid value",
                code=FaultCode.CONVERSION_FAILED,
                option=context.name,
                value=value,
                hint="check the value given to %s" % context.name,
                cause=exception,
            ))

    def __call__(self, *args, **kwargs):
        """
        Forward to the bound callback (keeps decorated functions callable).
        """
        if self._callback is Unset:
            return
        return self._callback(*args, **kwargs)

    __eq__ = object.__eq__
    __hash__ = object.__hash__


__all__ = (
    "Handler",
    "Option",
)
