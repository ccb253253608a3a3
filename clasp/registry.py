"""
Clasp registry: the declarations owned by one command definition.

A Registry keeps Options, Parameters and Subcommands in declaration order and
indexes them for lookup. A child registry starts as a copy of its parent's
entries and then grows on its own, so a subclass can add or shadow switches
without ever touching the parent definition.

lookup rules
- switches and subcommand names resolve to the last declaration that claimed
  them; shadowed declarations stay in the ordered lists (help still shows them).
- parameters are matched positionally, in the order they were declared.

structural rules (checked on every declare, raised as TypeError)
- parameters and subcommands are mutually exclusive within one registry.
- nothing may follow a variadic parameter.
- a required parameter may not follow an optional or variadic one.
- only one trailing parameter may be optional without a default (or variadic).
"""
import logging

from .arguments import *
from .utils import Unset

logger = logging.getLogger(__name__)


class Registry:
    """
    Ordered, inheritance-merged declarations of a command definition.
    """
    __slots__ = ("_options", "_parameters", "_subcommands", "_switches", "_names")

    def __init__(self, parent=None, /):
        if parent is not None and not isinstance(parent, Registry):
            raise TypeError("registry parent must be a Registry")
        self._options = list(parent._options) if parent is not None else []
        self._parameters = list(parent._parameters) if parent is not None else []
        self._subcommands = list(parent._subcommands) if parent is not None else []
        self._switches = dict(parent._switches) if parent is not None else {}
        self._names = dict(parent._names) if parent is not None else {}

    def __bool__(self):
        return bool(self._options or self._parameters or self._subcommands)

    def __repr__(self):
        return "registry(options=%d, parameters=%d, subcommands=%d)" % (
            len(self._options),
            len(self._parameters),
            len(self._subcommands),
        )

    @property
    def options(self):
        return tuple(self._options)

    @property
    def parameters(self):
        return tuple(self._parameters)

    @property
    def subcommands(self):
        return tuple(self._subcommands)

    def declare(self, declaration, /):
        """
        add a declaration (Option, Flag, Parameter or Subcommand) and return it.
        """
        match declaration:
            case Option() | Flag():
                self._declare_option(declaration)
            case Parameter():
                self._declare_parameter(declaration)
            case Subcommand():
                self._declare_subcommand(declaration)
            case _:
                raise TypeError(f"cannot declare {type(declaration).__name__!r} objects")
        logger.debug("declared %r", declaration)
        return declaration

    def _declare_option(self, option):
        self._options.append(option)
        for switch in option.switches:
            if switch in self._switches:
                logger.debug("switch %r now resolves to %r", switch, option)
            self._switches[switch] = option

    def _declare_parameter(self, parameter):
        if self._subcommands:
            raise TypeError("cannot declare parameters on a command with subcommands")
        if self._parameters:
            last = self._parameters[-1]
            if last.variadic:
                raise TypeError(f"parameter {parameter.name!r} cannot follow variadic parameter {last.name!r}")
            if parameter.required and not last.required:
                raise TypeError(f"required parameter {parameter.name!r} cannot follow optional parameter {last.name!r}")
            if _open(parameter) and any(map(_open, self._parameters)):
                raise TypeError(f"parameter {parameter.name!r} cannot trail another optional parameter without a default")
        self._parameters.append(parameter)

    def _declare_subcommand(self, subcommand):
        if self._parameters:
            raise TypeError("cannot declare subcommands on a command with parameters")
        self._subcommands.append(subcommand)
        self._names[subcommand.name] = subcommand

    def find_option(self, switch, /):
        """
        the option or flag currently claiming the switch, else None.
        """
        return self._switches.get(switch)

    def find_subcommand(self, name, /):
        return self._names.get(name)


def _open(parameter):
    return parameter.variadic or (parameter.optional and parameter.default is Unset)


__all__ = (
    "Registry",
)
