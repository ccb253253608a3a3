"""
Clasp faults (usage errors, argument errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing usage
  fault. Codes are grouped by domain to keep copy consistent and make logs and
  searches predictable.
- CommandException: base type that carries message + options and knows how to
  render itself (rich) in the driver's "ERROR / See" form.
- UsageError / HelpWanted: what the parser raises towards the driver.
- ArgumentError / NoValueError: what converters, accessors and the token cursor
  raise; translated into UsageError at a single seam (clasp.binder).

Propagation
- ArgumentError never leaks past Command.parse(); it becomes a UsageError
  prefixed with the declaration kind and name ("option '--color': ...").
- Anything else (TypeError from a bad declaration, bugs in execute()) is not a
  fault and propagates unmodified.

Integration
- The driver (Command.main) catches UsageError, prints it through rich on
  stderr, and exits with status 1. HelpWanted prints help on stdout instead.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical usage-fault codes (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_SUBCOMMAND, MISSING_SUBCOMMAND
    - switches (1111x)
      • UNKNOWN_SWITCH, FLAG_ASSIGNMENT, MISSING_VALUE
    - positionals (1112x)
      • MISSING_PARAMETER, TOO_MANY_ARGUMENTS
    - delegated (1113x)
      • INVALID_VALUE (converter or attribute writer refused a value)
    - signalled (1119x)
      • SIGNALLED (raised by application code through signal_usage_error)

    the host application can provide a __codes__ mapping in __main__ to relabel
    codes; see normalize().
    """
    # --- routing errors (1110x) ---
    UNKNOWN_SUBCOMMAND = 11102
    MISSING_SUBCOMMAND = 11103

    # --- switch errors (1111x) ---
    UNKNOWN_SWITCH     = 11112
    FLAG_ASSIGNMENT    = 11113
    MISSING_VALUE      = 11117

    # --- positional errors (1112x) ---
    MISSING_PARAMETER  = 11121
    TOO_MANY_ARGUMENTS = 11141

    # --- delegated errors (1113x) ---
    INVALID_VALUE      = 11131

    # --- application errors (1119x) ---
    SIGNALLED          = 11199

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    base of every fault raised towards the driver.

    carries a human-readable message plus read-only options (context such as
    the failing command, the fault code, the offending token). options are
    merged in later with __replace__ so the raising site does not need to know
    everything the renderer shows.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return "" if self.message is Unset else self.message

    @property
    def command(self):
        """
        the command instance the fault was raised for (None when unknown).
        """
        return self.options.get("command")

    @property
    def code(self):
        return self.options.get("code")

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", getattr(self.command, "colorful", False))

        styles = defaultdict(str, {
            "error-label": "bold #FF4DA6",  # friendly pinky label
            "error-message": "#C8C8D0",  # soft light gray message
            "see-label": "#9CE19C dim",  # gentle green
            "see-command": "italic #9CE19C",
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        lines = [Text.assemble(("ERROR", styler("error-label")), ": ", (str(self), styler("error-message")))]
        if self.command is not None:
            lines.append(Text.assemble(
                ("See", styler("see-label")),
                ": ",
                ("'%s --help'" % self.command.invocation_path, styler("see-command")),
            ))
        return Group(*lines)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        replacement = type(self)(self.message, **{**self.options, **overrides})
        replacement.__cause__ = self.__cause__
        return replacement


class UsageError(CommandException):
    """
    the user invoked the command wrongly (unknown switch, missing or extra
    positional argument, rejected value, unknown subcommand).
    """


class HelpWanted(CommandException):
    """
    the built-in help switch was given; the driver prints help and stops.
    """


class ArgumentError(ValueError):
    """
    a value was refused by a converter or an attribute writer.

    raise it (or any ValueError) from a `type=` converter or from a property
    setter; the parser reports it as a UsageError naming the declaration.
    """


class NoValueError(ArgumentError):
    """
    the token cursor ran dry while a value was still required.
    """

    def __init__(self, message="no value provided", /):
        super().__init__(message)


__all__ = (
    "FaultCode",
    "CommandException",
    "UsageError",
    "HelpWanted",
    "ArgumentError",
    "NoValueError",
)
