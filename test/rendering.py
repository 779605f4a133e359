"""
Help table and fault rendering tests (rich integration).

Scope
- Validate value-name markers and the placeholder column.
- Validate the help table printed through a rich console.
- Validate fault rendering (header, message, hint, panel, host hooks).
"""
import io
import unittest
from unittest import TestCase

from rich.console import Console
from rich.text import Text

from protopt import OptionSet, Option, Handler, FaultCode, MissingRequiredValueError
from protopt.help import describe, prototype


def noop(*values):
    pass


def render(renderable, width=100):
    console = Console(file=io.StringIO(), color_system=None, width=width)
    with console.capture() as capture:
        console.print(renderable)
    return capture.get()


class DescribeTest(TestCase):
    """Value-name markers in option descriptions."""

    def testMarkersAreStripped(self):
        self.assertEqual(describe("set {0:NAME} to {1:VALUE}"), "set NAME to VALUE")
        self.assertEqual(describe("the {FILE} to read"), "the FILE to read")

    def testEscapedBraces(self):
        self.assertEqual(describe("literal {{braces}}"), "literal {braces}")

    def testLoneClosingBrace(self):
        with self.assertRaises(ValueError):
            describe("oops }")

    def testMissingDescription(self):
        self.assertEqual(describe(None), "")
        self.assertEqual(describe(Text("plain {0:X}")), "plain X")


class PrototypeColumnTest(TestCase):
    """Names and value placeholders of the help table."""

    def testNoValue(self):
        self.assertEqual(prototype(Option("v|verbose", noop)), "  -v, --verbose")
        self.assertEqual(prototype(Option("verbose|v", noop)), "      --verbose, -v")

    def testRequiredAndOptional(self):
        self.assertEqual(prototype(Option("f|file=", noop)), "  -f, --file=VALUE")
        self.assertEqual(prototype(Option("o|output:", noop)), "  -o, --output[=VALUE]")

    def testNamedValue(self):
        self.assertEqual(prototype(Option("f|file=", noop, "read {FILE}")), "  -f, --file=FILE")

    def testSeveralValues(self):
        self.assertEqual(
            prototype(Option("D=", noop, "define {0:NAME} as {1:VALUE}", handler=Handler.PAIR)),
            "  -D=NAME:VALUE"
        )
        self.assertEqual(prototype(Option("D={}", noop, count=2)), "  -D=VALUE1 VALUE2")
        self.assertEqual(prototype(Option("x:,", noop, count=2)), "  -x[=VALUE1,VALUE2]")

    def testDefaultHandlerIsHidden(self):
        self.assertIsNone(prototype(Option("<>", noop)))
        self.assertEqual(prototype(Option("<>|rest", noop)), "      --rest")

    def testLocalizedPlaceholders(self):
        option = Option("f=", noop)
        self.assertEqual(prototype(option, str.lower), "  -f=value")


class HelpTableTest(TestCase):
    """The option set renders itself as a help table."""

    def setUp(self):
        self.options = (
            OptionSet()
            .add("v|verbose", noop, "print more [bold]details[/bold]")
            .add("n|count=", noop, "repeat {N} times", type=int)
            .add_pair("D=", noop, "define {0:NAME} as {1:VALUE}")
            .add("<>", noop)
        )

    def testTableContent(self):
        output = render(self.options)
        lines = [line.rstrip() for line in output.splitlines() if line.strip()]
        self.assertEqual(len(lines), 3)
        self.assertIn("-v, --verbose", lines[0])
        self.assertTrue(lines[0].endswith("print more [bold]details[/bold]"))
        self.assertIn("-n, --count=N", lines[1])
        self.assertTrue(lines[1].endswith("repeat N times"))
        self.assertIn("-D=NAME:VALUE", lines[2])
        self.assertTrue(lines[2].endswith("define NAME as VALUE"))

    def testPrintHelp(self):
        buffer = io.StringIO()
        self.options.print_help(Console(file=buffer, color_system=None, width=100))
        self.assertIn("--verbose", buffer.getvalue())

    def testRenderingLeavesSetUnchanged(self):
        render(self.options)
        self.assertEqual(self.options.keys(), ["v", "n", "D", "<>"])


class FaultRenderingTest(TestCase):
    """Rich rendering of parse faults."""

    def setUp(self):
        self.fault = MissingRequiredValueError(
            "missing required value for option '-f'",
            title="missing required value",
            code=FaultCode.MISSING_REQUIRED_VALUE,
            option="-f",
            hint="pass a value after -f",
            colorful=False,
        )

    def testPlainRendering(self):
        output = render(self.fault)
        self.assertIn("21101 | Missing Required Value ]", output)
        self.assertIn("missing required value for option '-f'", output)
        self.assertIn("→ pass a value after -f", output)

    def testFancyRendering(self):
        output = render(self.fault.__replace__(fancy=True))
        self.assertIn("Missing Required Value", output)
        self.assertIn("╭", output)

    def testReplaceKeepsOriginal(self):
        copy = self.fault.__replace__(shell=True)
        self.assertIsNot(copy, self.fault)
        self.assertTrue(copy.options["shell"])
        self.assertNotIn("shell", self.fault.options)
        self.assertIs(type(copy), MissingRequiredValueError)

    def testOptionsAreReadOnly(self):
        with self.assertRaises(TypeError):
            self.fault.options["code"] = None

    def testHostCodes(self):
        main = __import__("__main__")
        main.__codes__ = {FaultCode.MISSING_REQUIRED_VALUE: "E-MISSING"}
        try:
            self.assertEqual(FaultCode.MISSING_REQUIRED_VALUE.normalize(), "E-MISSING")
            self.assertIn("E-MISSING", render(self.fault))
        finally:
            del main.__codes__
        self.assertEqual(FaultCode.TOO_MANY_VALUES.normalize(), "21102")


if __name__ == '__main__':
    unittest.main()
