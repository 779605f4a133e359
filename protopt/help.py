"""
Protopt help output: lay the registered options out as a two-column table.

Columns
- prototype: the aliases as typed on the command line ("-n, --count") followed
  by value placeholders:
    n|count=        ->  -n, --count=VALUE
    o|output:       ->  -o, --output[=VALUE]
    D=  (2 values)  ->  -D=VALUE1:VALUE2   (first separator, or a space)
  single-letter aliases get "-", longer ones "--"; the default handler "<>"
  never shows up.
- description: the option description with its value-name markers removed.

Value-name markers
- "{0:NAME}" names the first value slot, "{1:NAME}" the second, and so on;
  for single-value options "{NAME}" works too. The rendered description keeps
  only NAME. "{{" and "}}" produce literal braces.

Wrapping and column alignment are left to rich.
"""
from rich.table import Table
from rich.text import Text

from .prototypes import DEFAULT_HANDLER, ValueType


def _plain(descr, /):
    return descr.plain if isinstance(descr, Text) else descr


def _argument_name(index, count, descr, /):
    default = "VALUE" if count == 1 else "VALUE%d" % (index + 1)
    if descr is None:
        return default
    for marker in ("{0:", "{") if count == 1 else ("{%d:" % index,):
        if (start := descr.find(marker)) == -1:
            continue
        if (end := descr.find("}", start)) == -1:
            continue
        return descr[start + len(marker):end]
    return default


def describe(descr, /):
    """
    Strip value-name markers from a description.

    Raises
    - ValueError on a lone closing brace.

    Examples
    - describe("set {0:NAME} to {1:VALUE}") -> "set NAME to VALUE"
    - describe("literal {{braces}}")        -> "literal {braces}"
    """
    if descr is None:
        return ""
    descr = _plain(descr)
    output = []
    start = -1
    index = 0
    while index < len(descr):
        match char := descr[index]:
            case "{":
                if index == start:
                    output.append("{")
                    start = -1
                elif start < 0:
                    start = index + 1
            case "}":
                if start < 0:
                    if index + 1 == len(descr) or descr[index + 1] != "}":
                        raise ValueError("invalid option description: %r" % descr)
                    index += 1
                    output.append("}")
                else:
                    output.append(descr[start:index])
                    start = -1
            case ":" if start >= 0:
                start = index + 1
            case _:
                if start < 0:
                    output.append(char)
        index += 1
    return "".join(output)


def prototype(option, /, localize=str):
    """
    Render the names + placeholders column of an option, or None when the
    option has no displayable name.
    """
    if not (names := [name for name in option.names if name != DEFAULT_HANDLER]):
        return None

    text = ("  " if len(names[0]) == 1 else "      ") + ", ".join(
        ("-" if len(name) == 1 else "--") + name for name in names
    )
    if option.type is ValueType.NONE:
        return text

    descr = _plain(option.descr)
    if option.type is ValueType.OPTIONAL:
        text += localize("[")
    text += localize("=" + _argument_name(0, option.count, descr))
    separator = option.separators[0] if option.separators else " "
    for index in range(1, option.count):
        text += localize(separator + _argument_name(index, option.count, descr))
    if option.type is ValueType.OPTIONAL:
        text += localize("]")
    return text


def render(options, /):
    """
    Build the help table of an option set.

    Only reads (names, type, count, separators, descr) of each option; the
    set is never modified.
    """
    localize = getattr(options, "localize", str)
    table = Table(box=None, show_header=False, show_edge=False, pad_edge=False, padding=(0, 2))
    table.add_column("prototype", no_wrap=True)
    table.add_column("description", overflow="fold")
    for option in options:
        if (text := prototype(option, localize)) is None:
            continue
        table.add_row(Text(text), Text(localize(describe(option.descr))))
    return table


__all__ = (
    "describe",
    "prototype",
    "render",
)
