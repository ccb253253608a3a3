r"""
Clasp argument declarations.

Overview
- Declarations
  • Option[_T]: named, value-bearing switch with one or more aliases (e.g., -f/--flavour).
  • Flag: named, presence-only switch bound to a boolean; "--[no-]name" adds a negated form.
  • Parameter[_T]: positional value, matched in declaration order ("X", "[X]", "X ...", "[X] ...").
  • Subcommand: a named nested command definition that takes over the remaining tokens.

- Accessors
  • Option, Flag and Parameter are data descriptors. Placed in a command class body
    (or installed by Command.option()/Command.parameter()), a declaration is the
    generated accessor for its attribute: reads come from the instance's value
    mapping (falling back to the declared default), writes go into it.

- Consume protocol (raw string in, converted value out)
  • Option.consume(switch, tokens, inline): the inline "=value" or the next token.
  • Flag.consume(switch, tokens, inline): True, or False for a negated switch.
  • Parameter.consume(tokens): one token, an optional token, or every remaining token.
  Converter failures (ValueError, ArgumentError) propagate to the caller (see clasp.binder).

Metadata (sanitized on construction)
- Shared
  • descr: Unset | str | Text (short help), non-empty when provided.
  • attribute_name: Unset | str (identifier); inferred from the display name when Unset.
  • default: any value; Unset means "no default" (help omits "(default: ...)").
- Option / Parameter
  • type: Callable converter applied to each raw string.
- Option / Flag
  • names: "-x" short forms and "--long-name" long forms; flags may use "--[no-]name".
- Option
  • metavar: str label shown in help; multivalued: repeated occurrences accumulate.

Validation highlights
- Short names are a dash and one letter or digit; long names are r"--[^\W\d_](-?[^\W_]+)*".
- Names must be unique within a declaration; "[no-]" is reserved for flags.
- Parameter names are "NAME", "[NAME]", "NAME ..." or "[NAME] ...".

Quick example:
    >>> from clasp.arguments import Option, Flag, Parameter
    >>> flavour = Option("-f", "--flavour", metavar="FLAVOUR", descr="Flavour of the month")
    >>> nuts = Flag("-n", "--[no-]nuts", descr="Nuts (or not)")
    >>> words = Parameter("WORD ...", descr="words to say")

Public API
- Classes: Option, Flag, Parameter, Subcommand
"""
import functools
import operator
import re
from collections.abc import Iterable
from typing import Generic, TypeVar

from rich.text import Text

from .utils import *

_T = TypeVar("_T")


class ArgumentType(type):
    """
    Metaclass that turns declarations into introspectable descriptors.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and help output.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages ("option 'names' must ...").
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - option(names=('-f', '--flavour'), metavar='FLAVOUR', ...)
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


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate shared declaration metadata.

    - descr: optional short description. If omitted (Unset), it becomes None.
      If provided, it must be a non-empty string after trimming.
    - attribute_name: optional explicit attribute identifier. When provided it
      must be a valid Python identifier; when Unset it is inferred later.

    Raises
    - TypeError: if 'descr' or 'attribute_name' have the wrong type.
    - ValueError: if they are strings but empty or not identifiers.
    """
    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if not isinstance(attribute_name := metadata["attribute_name"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'attribute_name' must be a string")
    elif isinstance(attribute_name, str) and not attribute_name.isidentifier():
        raise ValueError(f"{cls.__typename__} 'attribute_name' must be a valid identifier")


def _sanitize_named_metadata(cls, metadata, /, *, negatable=False):
    r"""
    Internal: validate and expand switch names for Option and Flag.

    Accepted forms
    - short: "-x" (one letter or digit, so it can take part in clusters like "-nf")
    - long: "--name", "--long-name" (unicode letters allowed)
    - negatable long (flags only): "--[no-]name" → "--name" and "--no-name"

    Produces
    - names: the declared forms, in order (used for help rows).
    - switches: every recognised token, in order.
    - negations: the subset of switches that bind False.

    Raises
    - TypeError: when names are missing or contain non-string entries.
    - ValueError: when a name is malformed, negation is used on an option,
      or a switch appears twice.
    """
    if not metadata["names"]:
        raise TypeError(f"{cls.__typename__} must specify at least one name")

    names = []
    switches = []
    negations = []
    for name in metadata["names"]:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} names cannot be empty-strings")

        if match := re.fullmatch(r"--(?P<negation>\[no-\])?(?P<stem>[^\W\d_](-?[^\W_]+)*)", name):
            if match["negation"]:
                if not negatable:
                    raise ValueError(f"{cls.__typename__} names cannot be negatable ('[no-]' is for flags)")
                expanded = ["--" + match["stem"], "--no-" + match["stem"]]
                negations.append("--no-" + match["stem"])
            else:
                expanded = [name]
        elif re.fullmatch(r"-[^\W_]", name):
            expanded = [name]
        else:
            raise ValueError(f"{cls.__typename__} names must be valid switches like '-x' or '--name' (got {name!r})")

        for switch in expanded:
            if switch in switches:
                raise ValueError(f"{cls.__typename__} names cannot contain duplicates")
            switches.append(switch)
        names.append(name)

    metadata["names"] = names
    metadata["switches"] = switches
    metadata["negations"] = negations


def _sanitize_converter(cls, metadata, /):
    if not callable(metadata["type"]):
        raise TypeError(f"{cls.__typename__} 'type' must be callable")


def _sanitize_collection_default(cls, metadata, /):
    """
    Internal: a list-valued declaration needs a list-like default.

    Strings are rejected even though they are iterable ("ab" is not ['a', 'b']).
    """
    default = metadata["default"]
    if default is not Unset and (isinstance(default, str | bytes) or not isinstance(default, Iterable)):
        raise TypeError(f"{cls.__typename__} 'default' must be a non-string iterable when values accumulate")


class _Accessor:
    """
    Internal: the attribute-accessor half shared by Option, Flag and Parameter.

    storage convention
    - values live in the owning instance's `_values` mapping under the
      declaration's attribute name; an absent entry reads as the declared
      default (a fresh list for multivalued declarations without one).

    binding
    - __set_name__ fixes the attribute name when the declaration is assigned
      in a class body; Command.option()/parameter() call _settle() themselves.
    """

    def _settle(self, name, /):
        if self._attribute_name is not Unset and self._attribute_name != name:
            raise TypeError(
                f"{type(self).__typename__} {self.name!r} is already bound to attribute {self._attribute_name!r}"
            )
        self._attribute_name = name

    def __set_name__(self, owner, name):
        self._settle(name)

    @property
    def attribute_name(self):
        return coalesce(self._attribute_name, self._inferred)

    @property
    def initial(self):
        """
        the value an attribute holds before anything is bound to it.
        """
        if self.multivalued:
            return list(coalesce(self._default, ()))
        return coalesce(self._default, self._fallback)

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        values = instance.__dict__.setdefault("_values", {})
        if self.multivalued:
            return values.setdefault(self.attribute_name, self.initial)
        return values.get(self.attribute_name, self.initial)

    def __set__(self, instance, value):
        instance.__dict__.setdefault("_values", {})[self.attribute_name] = value

    def __delete__(self, instance):
        instance.__dict__.setdefault("_values", {}).pop(self.attribute_name, None)


class Option(_Accessor, Generic[_T], metaclass=ArgumentType):
    """
    Named, value-bearing option declaration.

    Highlights
    - Generic over the payload type _T (converter provided via 'type').
    - Aliases via 'names' (e.g., "-f", "--flavour"); the value follows the switch
      as the next token ("--flavour vanilla"), after "=" ("--flavour=vanilla"),
      or glued to a short switch ("-fvanilla").
    - multivalued: every occurrence appends to a list instead of overwriting.
    - Help/UX metadata: metavar, descr, default (shown as "(default: ...)").
    """

    __introspectable__ = (
        "names",
        "switches",
        "metavar",
        "type",
        "default",
        "descr",
        "multivalued",
    )
    __displayable__ = (
        "names",
        "metavar",
        "default",
        "descr",
        "multivalued",
    )

    is_flag = False

    def __init__(
            self,
            *names,
            metavar=Unset,
            type=str,
            default=Unset,
            descr=Unset,
            attribute_name=Unset,
            multivalued=False,
    ):
        """
        Construct an Option declaration.

        Parameters
        - names: one or more str ("-f", "--flavour").
        - metavar: Unset | str
          Label for the value in help. Defaults to the upper-cased long name.
        - type: Callable[[str], _T]
          Converter applied to the raw string; raising ValueError rejects it.
        - default: Any
          Value read back while the option was never given.
        - descr: Unset | str
          Short description for help.
        - attribute_name: Unset | str
          Attribute that receives the value; inferred from the long name
          (plus "_list" when multivalued) if Unset.
        - multivalued: bool
          Accumulate occurrences into a list.
        """
        metadata = {
            "names": names,
            "metavar": metavar,
            "type": type,
            "default": default,
            "descr": descr,
            "attribute_name": attribute_name,
            "multivalued": bool(multivalued),
        }
        _sanitize_metadata(Option, metadata)
        _sanitize_named_metadata(Option, metadata)
        _sanitize_converter(Option, metadata)
        if metadata["multivalued"]:
            _sanitize_collection_default(Option, metadata)

        if not isinstance(metavar, str | Unset):
            raise TypeError("option 'metavar' must be a string")
        elif isinstance(metavar, str) and not (metavar := metavar.strip()):
            raise ValueError("option 'metavar' cannot be empty")

        self._names = metadata["names"]
        self._switches = metadata["switches"]
        self._type = type
        self._default = default
        self._descr = metadata["descr"]
        self._attribute_name = attribute_name
        self._multivalued = metadata["multivalued"]

        self._inferred = attributize(self.name) + "_list" * self._multivalued
        self._metavar = coalesce(metavar, self._inferred.removesuffix("_list").upper())
        self._fallback = None

    @property
    def name(self):
        """
        canonical display name: the first long name, else the first name.
        """
        return next((name for name in self._names if name.startswith("--")), self._names[0])

    @property
    def help(self):
        """
        (left, right) columns of this option's help row.
        """
        left = ", ".join(self._names) + " " + self._metavar
        right = self._descr or ""
        if self._default is not Unset:
            right = ("%s (default: %s)" % (right, self._default)).strip()
        return left, right

    def consume(self, switch, tokens, inline=Unset):
        """
        produce this option's converted value.

        the inline value (text after "=" or glued to a short switch) wins;
        otherwise the next token is taken verbatim, whatever it looks like.
        NoValueError when the cursor is empty.
        """
        raw = tokens.consume() if inline is Unset else inline
        return self._type(raw)


class Flag(_Accessor, metaclass=ArgumentType):
    """
    Named, presence-only switch bound to a boolean.

    Highlights
    - Supports aliases via 'names' (e.g., "-v", "--verbose").
    - "--[no-]name" declares both "--name" (binds True) and "--no-name" (binds False).
    - Never consumes a following token; "--flag=value" is a usage error.
    - Reads back the default (False unless given) while never matched.
    """

    __introspectable__ = (
        "names",
        "switches",
        "negations",
        "default",
        "descr",
    )

    is_flag = True
    multivalued = False

    def __init__(self, *names, default=Unset, descr=Unset, attribute_name=Unset):
        metadata = {
            "names": names,
            "default": default,
            "descr": descr,
            "attribute_name": attribute_name,
        }
        _sanitize_metadata(Flag, metadata)
        _sanitize_named_metadata(Flag, metadata, negatable=True)

        self._names = metadata["names"]
        self._switches = metadata["switches"]
        self._negations = metadata["negations"]
        self._default = default
        self._descr = metadata["descr"]
        self._attribute_name = attribute_name

        self._inferred = attributize(self.name)
        self._fallback = False

    @property
    def name(self):
        return next((name for name in self._names if name.startswith("--")), self._names[0])

    @property
    def help(self):
        right = self._descr or ""
        if self._default is not Unset:
            right = ("%s (default: %s)" % (right, self._default)).strip()
        return ", ".join(self._names), right

    def consume(self, switch, tokens, inline=Unset):
        """
        True for a positive switch, False for a negated one; never reads tokens.

        inline is accepted for protocol symmetry with Option.consume and ignored;
        the parser rejects "--flag=value" before a flag is consumed.
        """
        return switch not in self._negations


class Parameter(_Accessor, Generic[_T], metaclass=ArgumentType):
    """
    Positional value declaration.

    Forms (from the display name)
    - "NAME": required, consumes exactly one token.
    - "[NAME]": optional, consumes one token when available, else the default.
    - "NAME ..." / "[NAME] ...": variadic, consumes every remaining token
      (converted one by one) into a list; must be the last parameter.

    Parameters are consumed left to right in declaration order.
    """

    __introspectable__ = (
        "name",
        "type",
        "default",
        "descr",
        "optional",
        "variadic",
    )

    is_flag = False

    def __init__(self, name, /, descr=Unset, *, type=str, default=Unset, attribute_name=Unset):
        metadata = {
            "name": name,
            "type": type,
            "default": default,
            "descr": descr,
            "attribute_name": attribute_name,
        }
        _sanitize_metadata(Parameter, metadata)
        _sanitize_converter(Parameter, metadata)

        if not isinstance(name, str):
            raise TypeError("parameter 'name' must be a string")
        elif not (match := re.fullmatch(r"(?P<bracketed>\[(?P<inner>[^\[\]\s]+)\]|[^\[\]\s]+)(?P<ellipsis>\s+\.\.\.)?", name.strip())):
            raise ValueError(f"parameter 'name' must look like NAME, [NAME], NAME ... or [NAME] ... (got {name!r})")
        elif match["ellipsis"]:
            _sanitize_collection_default(Parameter, metadata)

        self._name = name.strip()
        self._type = type
        self._default = default
        self._descr = metadata["descr"]
        self._attribute_name = attribute_name
        self._variadic = bool(match["ellipsis"])
        self._optional = bool(match["inner"]) or self._variadic

        self._inferred = attributize(self._name) + "_list" * self._variadic
        self._fallback = None

    @property
    def multivalued(self):
        return self._variadic

    @property
    def required(self):
        return not self._optional

    @property
    def help(self):
        return self._name, self._descr or ""

    def consume(self, tokens):
        """
        produce this parameter's converted value from the front of the cursor.

        required → one token (NoValueError when empty); optional → one token or
        the default; variadic → a list of every remaining token.
        """
        if self._variadic:
            values = [self._type(token) for token in tokens.drain()]
            return values if values or self._default is Unset else list(self._default)
        if self._optional and not tokens:
            return coalesce(self._default, None)
        return self._type(tokens.consume())


class Subcommand(metaclass=ArgumentType):
    """
    Named nested command.

    'definition' is a Command subclass, or a zero-argument callable returning
    one (handy for definitions that appear later in the module). Names match
    exactly and case-sensitively.
    """

    __introspectable__ = (
        "name",
        "descr",
    )

    def __init__(self, name, definition, /, descr=Unset):
        metadata = {"descr": descr, "attribute_name": Unset}
        _sanitize_metadata(Subcommand, metadata)
        if not isinstance(name, str):
            raise TypeError("subcommand 'name' must be a string")
        elif not re.fullmatch(r"[^\s-]\S*", name := name.strip()):
            raise ValueError(f"subcommand 'name' must be a single word not starting with '-' (got {name!r})")
        if not callable(definition):
            raise TypeError("subcommand 'definition' must be a command class or a factory")
        self._name = name
        self._descr = metadata["descr"]
        self._definition = definition

    @property
    def definition(self):
        """
        the resolved command class (factories are called on every access).
        """
        definition = self._definition
        if not isinstance(definition, type):
            definition = definition()
        if not isinstance(definition, type) or not hasattr(definition, "__registry__"):
            raise TypeError(f"subcommand {self._name!r} definition must resolve to a command class")
        return definition

    @property
    def help(self):
        return self._name, self._descr or ""


__all__ = (
    "Option",
    "Flag",
    "Parameter",
    "Subcommand",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del ArgumentType
