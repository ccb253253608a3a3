"""
Clasp command layer: declare, parse, and run CLI commands.

What this module provides
- Command: base class of every command definition.
  • Declarations in the class body (Option, Flag, Parameter, Subcommand) or through
    the class-level calls option()/parameter()/subcommand()/usage()/describe().
  • Subclasses inherit every declaration of their bases and may add or shadow switches;
    the bases are never modified.
  • parse() binds raw tokens to attributes; run() parses then executes; main() is the
    process driver (prints usage errors and help, exits with status 1 on errors).

- invoke(definition, prompt): convenience runner around Command.main().

Parsing rules
- Options come first: long options ("--flavour x", "--flavour=x"), short options
  ("-f x", "-fx") and clusters of short flags ("-nf x") are resolved until the first
  positional token. A lone "-" is positional.
- "--" ends option parsing; it is discarded and every token after it is positional.
- Parameters then consume the positional tokens in declaration order; leftovers are
  "too many arguments".
- With subcommands, the first positional token names the subcommand and everything
  after it belongs to that subcommand.
- "-h"/"--help" raise HelpWanted unless a declared option claims the switch.

Quick start
    from clasp import Command, Option, Flag, Parameter

    class Speak(Command):
        \"\"\"Say something.\"\"\"
        loud = Flag("-l", "--loud", descr="say it loud")
        times = Option("-n", "--times", metavar="N", type=int, default=1, descr="how many times")
        words = Parameter("WORD ...", descr="words to say", attribute_name="words")

        def execute(self):
            message = " ".join(self.words)
            for _ in range(self.times):
                print(message.upper() if self.loud else message)

    if __name__ == "__main__":
        Speak.main()
"""
import functools
import logging
import operator
import os
import re
import shlex
import sys
import weakref
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from rich.console import Console

from . import help
from .arguments import *
from .binder import *
from .faults import *
from .registry import Registry
from .tokens import *
from .utils import *

logger = logging.getLogger(__name__)

_DECLARATIONS = Option | Flag | Parameter | Subcommand


class CommandType(type):
    """
    Metaclass that turns class bodies into command definitions.

    Responsibilities
    - Give every command class its own Registry, seeded with a copy of the
      nearest base's registry, and declare the Option/Flag/Parameter/Subcommand
      objects found in the class body, in definition order.
    - Record the class-level help metadata: description (own docstring or the
      `descr` keyword), explicit usage lines (`usage` keyword) and the
      `colorful` rendering switch (inherited unless given).
    - Provide stable, readable __repr__/__rich_repr__ implementations for commands.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens).
    - __introspectable__ lists instance properties that are mirrored read-only
      from their "_name" backing fields.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, *, descr=Unset, usage=Unset, colorful=Unset, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
            **options,
        )

        parent = next((vars(base)["__registry__"] for base in self.__mro__[1:] if "__registry__" in vars(base)), None)
        self.__registry__ = Registry(parent)
        for key, value in namespace.items():
            if isinstance(value, _DECLARATIONS):
                _sanitize_attribute(value, key)
                self.__registry__.declare(value)

        if not isinstance(descr, str | Unset):
            raise TypeError("command 'descr' must be a string")
        description = coalesce(descr, namespace.get("__doc__"))
        self.__description__ = normalize(description) or None if description is not None else None

        if isinstance(usage, str):
            usage = [usage]
        elif usage is Unset:
            usage = []
        elif not isinstance(usage, Iterable) or not all(isinstance(line, str) for line in usage):
            raise TypeError("command 'usage' must be a string or an iterable of strings")
        self.__usages__ = [line.strip() for line in usage]

        if colorful is not Unset:
            self.__colorful__ = bool(colorful)

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - cook(invocation_path='cook')
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield a sequence of (name, object) pairs for pretty printers.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self

    def __init__(self, name, bases, namespace, **options):
        super().__init__(name, bases, namespace)


class Command(metaclass=CommandType):
    """
    Base class of command definitions.

    Lifecycle
    - One instance per invocation (and one per subcommand level), created with the
      invocation path used in help and error messages, a shared context mapping,
      and optionally the parent command (kept as a weak reference).
    - parse(arguments) binds values; execute() is the command's behavior; run()
      does both; main() wraps run() for use as a program entry point.

    Values
    - Declared attributes read from the instance's value mapping through the
      declarations themselves (generated accessors), falling back to defaults.
    - Declarations with an explicit attribute name (and no accessor on the class)
      are plain instance attributes, initialized to their defaults; a property of
      that name on the class acts as a custom write accessor and may raise
      ValueError/ArgumentError to reject a value.

    Extension points
    - execute(): required for leaf commands; commands with subcommands run the
      selected subcommand by default.
    - signal_usage_error(message): report a usage problem detected in execute().
    """

    __introspectable__ = (
        "invocation_path",
    )

    __colorful__ = False

    def __init__(self, invocation_path, context=None, parent_command=None):
        """
        Create a command instance.

        Parameters
        - invocation_path: str
          How the user invoked this command (program name, plus subcommand names).
        - context: Mapping | None
          Lookup data shared by every command of the tree (default: empty).
        - parent_command: Command | None
          The command that dispatched to this one.
        """
        if not isinstance(invocation_path, str):
            raise TypeError("command 'invocation_path' must be a string")
        if context is not None and not isinstance(context, Mapping):
            raise TypeError("command 'context' must be a mapping")
        if parent_command is not None and not isinstance(parent_command, Command):
            raise TypeError("command 'parent_command' must be a command")

        self._invocation_path = invocation_path
        self._context = {} if context is None else context
        self._parent_command = weakref.ref(parent_command) if parent_command is not None else None
        self._values = {}
        self._remaining = Tokens()
        self._subcommand = None
        self._subcommand_arguments = ()
        self._accumulating = set()

        for declaration in (*self.__registry__.options, *self.__registry__.parameters):
            if not hasattr(type(self), name := declaration.attribute_name):
                setattr(self, name, declaration.initial)

    @property
    def context(self):
        return MappingProxyType(self._context)

    @property
    def parent_command(self):
        """
        the command that dispatched to this one (None for the root, or once it is gone).
        """
        return self._parent_command() if self._parent_command is not None else None

    @property
    def colorful(self):
        return type(self).__colorful__

    @property
    def remaining_arguments(self):
        """
        tokens not consumed by the last parse (subcommand arguments included).
        """
        return tuple(self._remaining) or self._subcommand_arguments

    @property
    def subcommand_name(self):
        return self._subcommand.name if self._subcommand is not None else None

    @property
    def subcommand_arguments(self):
        return self._subcommand_arguments

    # ── Declaration API ───────────────────────────────────────────────────────

    @classmethod
    def _declare(cls, declaration):
        _sanitize_attribute(declaration)
        cls.__registry__.declare(declaration)
        if not isinstance(declaration, Subcommand) and declaration._attribute_name is Unset:
            declaration._settle(name := declaration.attribute_name)
            setattr(cls, name, declaration)
        return declaration

    @classmethod
    def option(cls, switches, metavar, descr=Unset, /, **options):
        """
        Declare an option (or a flag, when metavar is the Flag class).

        Examples
        - Cook.option("--flavour", "FLAVOUR", "Flavour of the month", default="vanilla")
        - Cook.option(["-n", "--[no-]nuts"], Flag, "Nuts (or not)")
        - Cook.option("--topping", "TOPPING", "extra toppings", multivalued=True)

        Without attribute_name, the declaration is installed on the class under
        the inferred name ("flavour", "nuts", "topping_list").
        """
        names = (switches,) if isinstance(switches, str) else tuple(switches)
        if metavar is Flag:
            return cls._declare(Flag(*names, descr=descr, **options))
        return cls._declare(Option(*names, metavar=metavar, descr=descr, **options))

    @classmethod
    def parameter(cls, name, descr=Unset, /, **options):
        """
        Declare a positional parameter ("X", "[X]", "X ..." or "[X] ...").
        """
        return cls._declare(Parameter(name, descr, **options))

    @classmethod
    def subcommand(cls, name, descr, definition, /):
        """
        Declare a subcommand implemented by a Command subclass (or a factory returning one).
        """
        return cls._declare(Subcommand(name, definition, descr))

    @classmethod
    def usage(cls, text, /):
        """
        Add an explicit usage line; explicit lines replace the derived one.
        """
        if not isinstance(text, str):
            raise TypeError("usage() argument must be a string")
        cls.__usages__.append(text.strip())

    @classmethod
    def describe(cls, text, /):
        if not isinstance(text, str):
            raise TypeError("describe() argument must be a string")
        cls.__description__ = normalize(text) or None

    @classmethod
    def usages(cls):
        """
        Usage lines for help: the explicit ones, else one derived from declarations.
        """
        if cls.__usages__:
            return list(cls.__usages__)
        registry, parts = cls.__registry__, []
        if registry.options:
            parts.append("[OPTIONS]")
        if registry.subcommands:
            parts.append("SUBCOMMAND [ARGS] ...")
        parts.extend(parameter.name for parameter in registry.parameters)
        return [" ".join(parts)]

    @classmethod
    def description(cls):
        return cls.__description__

    # ── Parsing ───────────────────────────────────────────────────────────────

    def parse(self, arguments):
        """
        Bind raw argument tokens to this command's declared attributes.

        Multivalued options start over on every parse: their first occurrence
        replaces the default (or the previous parse's values), later ones append.

        Raises
        - UsageError: unknown switch, missing or rejected value, missing or extra
          positional argument, missing or unknown subcommand.
        - HelpWanted: the built-in help switch was given.
        Faults always carry this command (for "See: '<path> --help'").
        """
        self._remaining = tokens = Tokens(arguments)
        self._subcommand, self._subcommand_arguments = None, ()
        self._accumulating = set()
        try:
            self._parse_options(tokens)
            if self.__registry__.subcommands:
                self._parse_subcommand(tokens)
            else:
                self._parse_parameters(tokens)
        except CommandException as fault:
            if fault.command is not None:
                raise
            raise fault.__replace__(command=self) from fault.__cause__

    def _parse_options(self, tokens):
        while tokens:
            token = tokens.peek()
            if is_terminator(token):
                tokens.consume()
                return
            if not is_switch(token):
                return
            tokens.consume()
            if is_long(token):
                switch, separator, value = token.partition("=")
                self._handle(switch, tokens, value if separator else Unset)
                continue
            cluster = token[1:]
            while cluster:
                switch, cluster = "-" + cluster[0], cluster[1:]
                if self._handle(switch, tokens, cluster or Unset, clustered=True):
                    break

    def _handle(self, switch, tokens, inline, *, clustered=False):
        """
        Resolve one switch and bind its value.

        Returns True when the inline text was used as the option's value (short
        options inside a cluster), False when it is still to be read as switches.
        """
        option = self.__registry__.find_option(switch)
        if option is None:
            if switch in help.HELP_SWITCHES:
                raise HelpWanted()
            raise UsageError("No such option '%s'" % switch, code=FaultCode.UNKNOWN_SWITCH)
        if option.is_flag:
            if inline is not Unset and not clustered:
                raise UsageError("option '%s': no value expected" % switch, code=FaultCode.FLAG_ASSIGNMENT)
            inline = Unset
        with translated(option, switch):
            value = option.consume(switch, tokens, inline)
        logger.debug("resolved %r as %r", switch, option)
        accumulate = option.attribute_name in self._accumulating
        if option.multivalued:
            self._accumulating.add(option.attribute_name)
        bind(self, option, value, switch=switch, accumulate=accumulate)
        return not option.is_flag

    def _parse_parameters(self, tokens):
        for parameter in self.__registry__.parameters:
            with translated(parameter):
                value = parameter.consume(tokens)
            bind(self, parameter, value)
        if tokens:
            raise UsageError("too many arguments", code=FaultCode.TOO_MANY_ARGUMENTS)

    def _parse_subcommand(self, tokens):
        if not tokens:
            raise UsageError("no subcommand specified", code=FaultCode.MISSING_SUBCOMMAND)
        name = tokens.consume()
        if (subcommand := self.__registry__.find_subcommand(name)) is None:
            raise UsageError("No such sub-command '%s'" % name, code=FaultCode.UNKNOWN_SUBCOMMAND)
        self._subcommand = subcommand
        self._subcommand_arguments = tuple(tokens.drain())
        logger.debug("selected subcommand %r with %r", name, self._subcommand_arguments)

    # ── Execution ─────────────────────────────────────────────────────────────

    def execute(self):
        """
        The command's behavior; runs with every declared attribute bound.

        Commands with subcommands run the selected one: a fresh instance of its
        definition, invoked as "<path> <name>", sharing this command's context.
        """
        if self._subcommand is None:
            raise NotImplementedError(f"{type(self).__name__} must implement execute()")
        instance = self._subcommand.definition(
            self._invocation_path + " " + self._subcommand.name,
            self._context,
            self,
        )
        logger.debug("dispatching to %r", instance)
        return instance.run(self._subcommand_arguments)

    def run(self, arguments):
        self.parse(arguments)
        return self.execute()

    def signal_usage_error(self, message, /):
        """
        Abort with a UsageError for this command (from execute(), typically).
        """
        raise UsageError(message, command=self, code=FaultCode.SIGNALLED)

    # ── Help ──────────────────────────────────────────────────────────────────

    def render(self):
        """
        The help screen as rich Text (styled when the command is colorful).
        """
        return help.render(type(self), self._invocation_path, colorful=self.colorful)

    def help(self):
        """
        The help screen as plain text.
        """
        return help.render(type(self), self._invocation_path).plain

    # ── Driver ────────────────────────────────────────────────────────────────

    @classmethod
    def main(cls, arguments=None, *, invocation_path=None, context=None):
        """
        Run this command as a program.

        Parameters
        - arguments:
          • None: read tokens from sys.argv[1:].
          • str: shell-like string; split via shlex.split.
          • Iterable[str]: pre-tokenized sequence.
        - invocation_path: defaults to the basename of sys.argv[0].
        - context: mapping shared by the command tree.

        Behavior
        - HelpWanted: the help of the command that raised it goes to stdout.
        - UsageError: "ERROR: <message>" and "See: '<path> --help'" go to stderr,
          then the process exits with status 1.
        - Anything else propagates.
        """
        if arguments is None:
            arguments = sys.argv[1:]
        elif isinstance(arguments, str):
            arguments = shlex.split(arguments)
        if invocation_path is None:
            invocation_path = os.path.basename(sys.argv[0])

        command = cls(invocation_path, context)
        try:
            return command.run(arguments)
        except HelpWanted as fault:
            Console(highlight=False, soft_wrap=True).print(fault.command.render(), end="")
        except UsageError as fault:
            logger.debug("usage error %s: %s", fault.code.normalize() if fault.code is not None else None, fault)
            Console(stderr=True, highlight=False, soft_wrap=True).print(fault)
            sys.exit(1)


def _sanitize_attribute(declaration, name=None, /):
    """
    Internal: refuse attribute names that would replace the Command API.

    Names Command itself defines (help, context, run, description, ...) and
    underscore names (instance state) are reserved; declarations that would
    land on one must pick another with attribute_name=.

    Raises
    - TypeError: when the attribute name is reserved.
    """
    if name is None:
        if isinstance(declaration, Subcommand):
            return
        name = declaration.attribute_name
    if name.startswith("_") or hasattr(Command, name):
        raise TypeError(
            f"{type(declaration).__typename__} {declaration.name!r} cannot bind attribute {name!r}"
            f" (reserved by Command); pass attribute_name= to choose another"
        )


def invoke(definition, prompt=None, /, **options):
    """
    Convenience runner: definition.main(prompt, **options).

    Raises
    - TypeError: when definition is not a Command subclass.
    """
    if not isinstance(definition, type) or not issubclass(definition, Command):
        raise TypeError("invoke() first argument must be a command class")
    return definition.main(prompt, **options)


__all__ = (
    "Command",
    "invoke",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del CommandType
