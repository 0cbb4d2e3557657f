"""
Help rendering: pure functions from the registry and command model to rich Text.

Palette keys
- program-name, descr-section, section-label, usage-section
- command-name, command-alias, command-description
- argument-name, argument-tag, option-name, argument-description
- footer

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry.
- colorful=False drops every style; Text.plain is identical either way.
"""
from collections import defaultdict

from rich.text import Text

PADDING = 2   # Leading spaces before the first column
INDENT = 15   # Minimum width of the name column


def _palette(colorful):
    styles = defaultdict(str, {
        # === Head sections ===
        "program-name": "bold #FF4D94",  # MAGENTA-PINK brand pop
        "descr-section": "italic #A3A3A3",  # Neutral gray
        "section-label": "bold #FFFFFF",  # Pure white headers
        "usage-section": "bold #36C5F0",  # SKY-BLUE

        # === Commands ===
        "command-name": "bold #36C5F0",
        "command-alias": "#36C5F0 dim",
        "command-description": "#9CA3AF",

        # === Arguments / options ===
        "argument-name": "bold #FFD600",  # AMBER for positionals
        "argument-tag": "#FFD600 dim",
        "option-name": "bold #00E6FF",  # CYAN for options
        "argument-description": "#9CA3AF",  # Muted gray

        # === Footer ===
        "footer": "#737373",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    return styler


def _columns(rows, descr_style, styler):
    """
    Lay out (name Text, description) rows with a shared description column.
    """
    width = max([INDENT] + [len(name) + PADDING for name, _ in rows])
    lines = Text()
    for name, descr in rows:
        line = Text(" " * PADDING).append(name)
        if descr:
            line.append(" " * (width - len(name))).append(str(descr), styler(descr_style))
        lines.append(line).append("\n")
    return lines


def render_help(registry, name, /, descr=None, *, colorful=True):
    """
    Top-level help: title, USAGE, the alphabetical COMMANDS list and a footer.
    """
    styler = _palette(colorful)
    text = Text()

    text.append(name, styler("program-name"))
    if descr:
        text.append(" - ").append(str(descr), styler("descr-section"))
    text.append("\n\n")

    text.append("USAGE:", styler("section-label")).append("\n")
    text.append(" " * PADDING).append(f"{name} <command> [options] [arguments]", styler("usage-section"))
    text.append("\n\n")

    text.append("COMMANDS:", styler("section-label")).append("\n")
    rows = []
    for command in registry.all().values():
        label = Text(command.name, styler("command-name"))
        if command.aliases:
            label.append(f" ({", ".join(command.aliases)})", styler("command-alias"))
        rows.append((label, command.descr))
    text.append(_columns(rows, "command-description", styler))

    text.append("\n")
    text.append(f"Use '{name} <command> --help' for more information about a command.", styler("footer"))
    return text


def render_command_help(command, name, /, *, colorful=True):
    """
    Per-command help: usage line, description, aliases, then positional
    arguments (in position order) before options.
    """
    styler = _palette(colorful)
    text = Text()

    text.append("Usage: ", styler("section-label"))
    text.append(f"{name} {command.name} [OPTIONS] [ARGUMENTS]", styler("usage-section"))
    text.append("\n")

    if command.descr:
        text.append("\n").append(str(command.descr), styler("descr-section")).append("\n")

    if command.aliases:
        text.append("\n").append("Aliases: ", styler("section-label"))
        text.append(", ".join(command.aliases), styler("command-alias")).append("\n")

    if positionals := sorted(command.positionals, key=lambda parameter: parameter.position):
        text.append("\n").append("Arguments:", styler("section-label")).append("\n")
        rows = []
        for parameter in positionals:
            label = Text(parameter.name.upper(), styler("argument-name"))
            label.append(" (required)" if parameter.required else " (optional)", styler("argument-tag"))
            rows.append((label, parameter.descr))
        text.append(_columns(rows, "argument-description", styler))

    if options := command.options:
        text.append("\n").append("Options:", styler("section-label")).append("\n")
        rows = []
        for parameter in options:
            label = Text(", ".join(parameter.flags), styler("option-name"))
            rows.append((label, parameter.descr))
        text.append(_columns(rows, "argument-description", styler))

    text.rstrip()
    return text


__all__ = (
    "render_help",
    "render_command_help",
)
