"""
Clasp token cursor.

A Tokens instance is a mutable, front-consuming view over the raw arguments
still to be parsed for one command instance. The parser classifies tokens with
the module-level predicates; the cursor itself never interprets them.

classification
- terminator: exactly "--"; everything after it is positional.
- long option: starts with "--" (and is not the terminator), e.g. "--flavour=x".
- short cluster: starts with "-" and is not exactly "-", e.g. "-nf".
- anything else (including a lone "-") is positional.
"""
from collections import deque
from collections.abc import Iterable

from .faults import NoValueError

TERMINATOR = "--"


def is_terminator(token, /):
    return token == TERMINATOR


def is_long(token, /):
    return token.startswith("--") and token != TERMINATOR


def is_cluster(token, /):
    return token.startswith("-") and not token.startswith("--") and token != "-"


def is_switch(token, /):
    """
    true for any option-looking token (long option or short cluster).
    """
    return is_long(token) or is_cluster(token)


class Tokens:
    """
    Mutable cursor over raw argument tokens.

    Behavior
    - peek(): the front token without consuming it (None when empty).
    - consume(): remove and return the front token; NoValueError when empty.
    - drain(): remove and return everything left, in order.
    - truthiness and len() reflect what remains.
    """
    __slots__ = ("_tokens",)

    def __init__(self, tokens=(), /):
        if isinstance(tokens, str) or not isinstance(tokens, Iterable):
            raise TypeError("tokens must be an iterable of strings")
        self._tokens = deque()
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("tokens must be an iterable of strings")
            self._tokens.append(token)

    def peek(self):
        return self._tokens[0] if self._tokens else None

    def consume(self):
        try:
            return self._tokens.popleft()
        except IndexError:
            raise NoValueError() from None

    def drain(self):
        tokens = list(self._tokens)
        self._tokens.clear()
        return tokens

    def empty(self):
        return not self._tokens

    def __bool__(self):
        return bool(self._tokens)

    def __len__(self):
        return len(self._tokens)

    def __iter__(self):
        return iter(tuple(self._tokens))

    def __repr__(self):
        return f"tokens({list(self._tokens)!r})"


__all__ = (
    "TERMINATOR",
    "is_terminator",
    "is_long",
    "is_cluster",
    "is_switch",
    "Tokens",
)
