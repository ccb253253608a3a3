"""
Clasp help renderer.

render() builds the help screen of a command definition as a rich Text. The
plain rendering (Text.plain) is the stable contract:

    Usage: cook [OPTIONS] DISH
           cook --list

    Cook something tasty.

    Parameters:
      DISH                 what to cook

    Options:
      -f, --flavour FLAVOUR Flavour of the month (default: vanilla)
      -h, --help           print help

Palette keys
- usage-label, program-name, usage-section, description-section
- group-label, argument-name, argument-description

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry.
- When colorful is False, styling is suppressed and only plain text remains.
"""
from collections import defaultdict

from rich.text import Text

DETAIL_WIDTH = 20

HELP_SWITCHES = ("-h", "--help")


def render(definition, invocation_path, /, *, colorful=False):
    """
    Render the help screen of a command class for the given invocation path.

    Sections, in order, each omitted when empty: usage lines, description,
    Parameters, Subcommands, Options. The built-in help switches a declared
    option did not take over close the Options section.
    """
    registry = definition.__registry__
    styles = defaultdict(str, {
        "usage-label": "bold #00E6FF",  # CYAN → signature info color
        "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
        "usage-section": "bold #36C5F0",  # SKY-BLUE → softer than cyan
        "description-section": "italic #A3A3A3",  # Neutral gray
        "group-label": "bold #FFFFFF",  # Pure white headers
        "argument-name": "bold #FFD600",  # AMBER for names and metavars
        "argument-description": "#9CA3AF",  # Muted gray
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def row(left, right):
        line = Text("  ")
        line.append(left, styler("argument-name"))
        line.append(" " * max(DETAIL_WIDTH - len(left), 0) + " ")
        line.append(right, styler("argument-description"))
        line.rstrip()
        return line

    lines = []
    for index, usage in enumerate(definition.usages()):
        line = Text()
        if index == 0:
            line.append("Usage", styler("usage-label")).append(": ")
        else:
            line.append(" " * len("Usage: "))
        line.append(invocation_path, styler("program-name"))
        if usage:
            line.append(" ").append(usage, styler("usage-section"))
        lines.append(line)

    if description := definition.description():
        lines.append(Text())
        lines.extend(Text(line, styler("description-section")) for line in description.splitlines())

    sections = [
        ("Parameters", [parameter.help for parameter in registry.parameters]),
        ("Subcommands", [subcommand.help for subcommand in registry.subcommands]),
        ("Options", [option.help for option in registry.options]),
    ]
    unclaimed = [switch for switch in HELP_SWITCHES if registry.find_option(switch) is None]
    if sections[2][1] and unclaimed:
        sections[2][1].append((", ".join(unclaimed), "print help"))

    for label, rows in sections:
        if not rows:
            continue
        lines.append(Text())
        lines.append(Text.assemble((label, styler("group-label")), ":"))
        lines.extend(row(left, right) for left, right in rows)

    return Text("\n").join(lines).append("\n")


__all__ = (
    "HELP_SWITCHES",
    "render",
)
