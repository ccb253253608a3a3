"""
Clasp binder: writes resolved values onto command instances.

This is the only place where value-level failures become usage errors. Any
ValueError (ArgumentError and NoValueError included) raised while a value is
produced or written is re-raised as a UsageError naming the declaration:

    option '--color': invalid literal for int() with base 10: 'red'
    parameter 'Y': no value provided

Every other exception propagates untouched.
"""
import contextlib
import logging

from .arguments import *
from .faults import *

logger = logging.getLogger(__name__)


def describe(declaration, switch=None, /):
    """
    the "<kind> '<name>'" prefix used in usage error messages.

    options are named by the switch the user actually typed, when known.
    """
    if isinstance(declaration, Parameter):
        return "parameter '%s'" % declaration.name
    return "option '%s'" % (switch or declaration.name)


@contextlib.contextmanager
def translated(declaration, switch=None, /):
    """
    re-raise ValueError from the managed block as a UsageError.

    NoValueError maps to MISSING_VALUE (options) or MISSING_PARAMETER
    (parameters); anything else to INVALID_VALUE.
    """
    try:
        yield
    except NoValueError as error:
        code = FaultCode.MISSING_PARAMETER if isinstance(declaration, Parameter) else FaultCode.MISSING_VALUE
        raise UsageError("%s: %s" % (describe(declaration, switch), error), code=code) from error
    except ValueError as error:
        raise UsageError("%s: %s" % (describe(declaration, switch), error), code=FaultCode.INVALID_VALUE) from error


def bind(instance, declaration, value, /, switch=None, *, accumulate=False):
    """
    write a value to the declaration's attribute on the instance.

    multivalued options bind a one-element list, or append to what is already
    bound when accumulate is set (later occurrences within one parse), so a
    default is replaced rather than extended. everything else overwrites.
    writes go through setattr, so properties defined by the command (explicit
    attribute names) act as custom write accessors.
    """
    name = declaration.attribute_name
    with translated(declaration, switch):
        if isinstance(declaration, Option) and declaration.multivalued:
            previous = getattr(instance, name, None) if accumulate else None
            value = [*(previous or ()), value]
        setattr(instance, name, value)
    logger.debug("bound %s to %r", describe(declaration, switch), value)
    return value


__all__ = (
    "describe",
    "translated",
    "bind",
)
