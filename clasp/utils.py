"""
Clasp utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the declaration, registry and command layers.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support the higher-level arguments/commands layers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/""/[].

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated wrappers for clean tracebacks and help.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr) with fresh copies
    for containers to discourage accidental mutation of declaration state.

- attributize(text)
  • Turn a display name ("--dry-run", "[FILE] ...") into an attribute identifier ("dry_run", "file").

- normalize(text)
  • Flush a (possibly indented) description block to the left and trim surrounding blank lines.

Usage guidance
- Prefer Unset for API defaults when None is a meaningful user value; materialize with coalesce().
- Use rename() on dynamic callables so help/tracebacks remain readable.
- Use mirror() to expose internal state safely as read-only properties.

Quick examples
    >>> one = coalesce(Unset, "fallback")  # "fallback"
    >>> two = coalesce(None, "fallback")    # None  (None is preserved)
    >>> attributize("--[no-]dry-run")
    'dry_run'
"""
import builtins
import functools
import inspect
import re
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    This is used when None is a legitimate user value (an option default of None,
    for instance), but the API needs a way to distinguish “not provided” from
    “provided as None”. A single instance, Unset, is exposed for use as the default
    in internal parameters.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in annotations (e.g., str | UnsetType).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Support reversed PEP 604 unions when UnsetType appears on the right.
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve an internal Unset sentinel to a concrete default.

    This returns the given object unless it is the Unset sentinel, in which case
    the provided default is returned. Importantly, falsey values like None, 0, "",
    or [] are preserved as-is; they are not treated as “unset”.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - Function form: rename(callable, name) -> callable
    - Decorator form: rename(name) -> (decorator)

    Notes
    - This utility does not alter behavior beyond metadata; it only updates
      __name__ and __qualname__ for nicer diagnostics.
    - Some built-in or C-implemented callables are not updatable and will
      raise TypeError.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _immortalize(object):
    """
    Recursively copy container values, processing nested items.

    - Sequence (non-string): a new tuple with each element processed.
    - Mapping: a new dict, keys preserved, values processed.
    - Set: a new frozenset with each element processed.
    - Anything else: returned as-is.
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(map(_immortalize, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_immortalize, object.values())))
    elif isinstance(object, Set):
        return frozenset(map(_immortalize, object))
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The generated property reads from an attribute named "_{name}" on the
    instance, and returns copies for container types so declaration state
    cannot be mutated through the public API.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


def attributize(text, /):
    """
    Derive an attribute identifier from a declaration's display name.

    rules
    - leading dashes and the negation marker "[no-]" are dropped ("--[no-]nuts" → "nuts").
    - optional brackets and a trailing " ..." are dropped ("[FILE] ..." → "file").
    - the result is lowercased and every non-word character becomes "_".

    errors
    - ValueError when nothing usable remains (e.g., "--" or "[]").
    """
    if not isinstance(text, str):
        raise TypeError("attributize() argument must be a string")
    text = re.sub(r"\s*\.\.\.$", "", text.strip())
    text = re.sub(r"^\[(.*)\]$", r"\1", text)
    text = text.lstrip("-").replace("[no-]", "")
    if not (name := re.sub(r"\W", "_", text.lower())):
        raise ValueError("attributize() argument must contain an identifier")
    if name[0].isdigit():
        name = "_" + name
    return name


def normalize(text, /):
    """
    Normalize a description block for help output.

    The indentation shared by the body lines is removed (so docstrings and
    triple-quoted blocks can be written indented alongside the code) and
    surrounding blank lines and whitespace are stripped.
    """
    if not isinstance(text, str):
        raise TypeError("normalize() argument must be a string")
    return inspect.cleandoc(text).strip()


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Notes
- Singleton: there is only one Unset instance.
- Distinct from None: equality and identity checks must not treat it as None.
- Falsey: bool(Unset) is False, but it is not equivalent to None or 0.
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "attributize",
    "normalize",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
