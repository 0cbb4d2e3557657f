"""
Rendering module behavioral tests (global and per-command help).

Scope
- Global help: title, USAGE, alphabetical COMMANDS with aliases, footer.
- Command help: usage line, description, aliases, arguments before options.
- colorful=False changes styles only, never the plain text.

Conventions
- Test method names follow CamelCase per project convention.
- Assertions run against Text.plain so they never depend on a terminal.
"""
import unittest
from unittest import TestCase

from tiller import Argument, Option, Command, CommandRegistry
from tiller.rendering import render_help, render_command_help


def build(source=Argument("source", descr="Where to read from"),
          target=Argument("target", required=False),
          jobs: int = Option("-j", "--jobs", descr="Parallel jobs"),
          quiet: bool = Option("--quiet")):
    pass


def undocumented():
    pass


class TestRenderHelp(TestCase):
    """Behavioral tests for render_help()."""

    def setUp(self):
        self.registry = CommandRegistry()
        self.registry.register(Command(build, descr="Build the project", aliases=("b",)))
        self.registry.register(Command(undocumented, name="zap"))
        self.registry.register(Command(undocumented, name="apply", descr="Apply changes"))

    def testSections(self):
        plain = render_help(self.registry, "app", "A sample application").plain
        lines = plain.splitlines()
        self.assertEqual(lines[0], "app - A sample application")
        self.assertIn("USAGE:", lines)
        self.assertIn("  app <command> [options] [arguments]", lines)
        self.assertIn("COMMANDS:", lines)
        self.assertEqual(lines[-1], "Use 'app <command> --help' for more information about a command.")

    def testTitleWithoutDescription(self):
        self.assertEqual(render_help(self.registry, "app").plain.splitlines()[0], "app")

    def testCommandsAreAlphabetical(self):
        lines = render_help(self.registry, "app").plain.splitlines()
        start = lines.index("COMMANDS:") + 1
        names = [line.split()[0] for line in lines[start:start + 3]]
        self.assertEqual(names, ["apply", "build", "zap"])

    def testAliasesAndDescriptions(self):
        plain = render_help(self.registry, "app").plain
        self.assertIn("build (b)", plain)
        self.assertIn("Build the project", plain)
        # Undocumented commands are still listed.
        self.assertIn("  zap", plain)

    def testColorlessHasSamePlainText(self):
        colorful = render_help(self.registry, "app", "Sample")
        plain = render_help(self.registry, "app", "Sample", colorful=False)
        self.assertEqual(colorful.plain, plain.plain)
        self.assertFalse(any(span.style for span in plain.spans))


class TestRenderCommandHelp(TestCase):
    """Behavioral tests for render_command_help()."""

    def setUp(self):
        self.command = Command(build, descr="Build the project", aliases=("b", "mk"))

    def testSectionsInOrder(self):
        lines = render_command_help(self.command, "app").plain.splitlines()
        self.assertEqual(lines[0], "Usage: app build [OPTIONS] [ARGUMENTS]")
        self.assertIn("Build the project", lines)
        self.assertIn("Aliases: b, mk", lines)
        self.assertLess(lines.index("Arguments:"), lines.index("Options:"))

    def testArgumentRows(self):
        plain = render_command_help(self.command, "app").plain
        self.assertIn("SOURCE (required)", plain)
        self.assertIn("TARGET (optional)", plain)
        self.assertIn("Where to read from", plain)

    def testOptionRows(self):
        plain = render_command_help(self.command, "app").plain
        self.assertIn("-j, --jobs", plain)
        self.assertIn("Parallel jobs", plain)
        self.assertIn("--quiet", plain)

    def testMinimalCommand(self):
        plain = render_command_help(Command(undocumented), "app").plain
        self.assertEqual(plain, "Usage: app undocumented [OPTIONS] [ARGUMENTS]")


if __name__ == "__main__":
    unittest.main()
