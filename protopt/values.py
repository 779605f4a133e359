"""
Protopt parse context and value accumulator.

- Context: the mutable state of one OptionSet.parse() call. It tracks the
  option currently being satisfied, the exact text that triggered it (for
  messages), the index of the argument being processed, and the values
  accumulated so far.
- Values: the accumulator. The option set appends to it while an option
  occurrence collects its values; handlers read it through indexing.

Reading rules (Values[i])
- no option is being completed     → NoActiveOptionError
- i outside 0..count-1              → ValueIndexError
- required option, i not supplied   → MissingRequiredValueError (parse fault)
- optional option, i not supplied   → None

The required-value check happens on read: an option declared with
two required slots whose handler only looks at the first one does not fail
when a single value was given.
"""
from collections.abc import Sequence

from .faults import *
from .prototypes import ValueType


class Values(Sequence):
    """
    accumulated values of the option occurrence being completed.
    """

    def __init__(self, context, /):
        self._context = context
        self._values = []

    @property
    def context(self):
        """
        the parse context owning these values (option, name, index).
        """
        return self._context

    def append(self, value, /):
        self._values.append(value)

    def clear(self):
        self._values.clear()

    def tolist(self):
        return list(self._values)

    def __len__(self):
        return len(self._values)

    def __iter__(self):
        return iter(self._values)

    def __contains__(self, value):
        return value in self._values

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self[position] for position in range(*index.indices(len(self._values)))]
        if not isinstance(index, int):
            raise TypeError("option value indices must be integers")
        self._check(index)
        return self._values[index] if index < len(self._values) else None

    def _check(self, index):
        option = self._context.option
        if option is None:
            raise NoActiveOptionError("no option is being completed")
        if not 0 <= index < option.count:
            raise ValueIndexError("option value index %d out of range (%d slot(s))" % (index, option.count))
        if option.type is ValueType.REQUIRED and index >= len(self._values):
            options = self._context.options
            options.trigger(MissingRequiredValueError(
                options.localize("missing required value for option %r") % self._context.name,
                title="missing required value",
                code=FaultCode.MISSING_REQUIRED_VALUE,
                option=self._context.name,
                index=index,
                hint="pass a value after %s (for example: %s VALUE)" % (self._context.name, self._context.name),
            ))

    def __repr__(self):
        return "values(%s)" % ", ".join(map(repr, self._values))

    def __str__(self):
        return ", ".join(map(str, self._values))


class Context:
    """
    state of one parse() call.

    attributes
    - options: the OptionSet being parsed against.
    - option: the Option currently collecting values, or None.
    - name: the flag+name text that triggered `option` ("-f", "--file"), or None.
    - index: position of the argument being processed (starts at -1).
    - values: the Values accumulator.
    """

    def __init__(self, options, /):
        self.options = options
        self.option = None
        self.name = None
        self.index = -1
        self.values = Values(self)

    def bind(self, option, name, /):
        self.option = option
        self.name = name

    def reset(self):
        self.option = None
        self.name = None
        self.values.clear()

    def __repr__(self):
        return "context(option=%r, name=%r, index=%r, values=%r)" % (self.option, self.name, self.index, self.values)


__all__ = (
    "Values",
    "Context",
)
