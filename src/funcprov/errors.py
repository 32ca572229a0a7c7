"""
Error types raised while parsing names, selectors and alias sets, and while
resolving functions through a provider chain.

Every error is a deterministic function of its input, so messages are stable
enough to assert on verbatim.
"""

from typing import Any, Dict, List, Optional, Sequence


class ProviderError(Exception):
    """Base class for all funcprov errors."""
    pass


class InvalidNameError(ProviderError, ValueError):
    """Raised when text violates the identifier character or length rules."""

    def __init__(self, text: str, position: int, reason: Optional[str] = None):
        self.text = text
        self.position = position
        if reason is None:
            if position < len(text):
                reason = f"Invalid character {text[position]!r} at {position}"
            else:
                reason = "Invalid name"
        super().__init__(f"{reason} in {text!r}")


class ParseError(ProviderError, ValueError):
    """Raised when selector or alias-set text is malformed."""

    def __init__(self, message: str, text: str = "", position: Optional[int] = None):
        self.text = text
        self.position = position
        super().__init__(message)


class UnknownNameError(ProviderError, LookupError):
    """Raised when a name or selector cannot be resolved by a provider."""

    def __init__(self, name: Any):
        self.name = name
        super().__init__(f"Unknown function {name}")


class AliasArgumentMismatchError(ProviderError, ValueError):
    """Raised when an alias is resolved with values; aliases carry their own."""

    def __init__(self, name: Any, values: Sequence[Any]):
        self.name = name
        self.values = list(values)
        super().__init__(f"Alias {name} should have no values, got {len(self.values)}")


class NameCollisionError(ProviderError, ValueError):
    """
    Raised when two or more aggregated providers advertise the same name.

    Properties:
        collisions: name -> canonical tokens of every owner, both sorted
    """

    def __init__(self, collisions: Dict[Any, List[str]]):
        self.collisions = collisions
        super().__init__(
            ", ".join(
                f"{name} ({', '.join(tokens)})"
                for name, tokens in collisions.items()
            )
        )


class EmptyProviderSetError(ProviderError, ValueError):
    """Raised when aggregating zero providers."""

    def __init__(self):
        super().__init__("Providers cannot be empty")


class DuplicateNameError(ProviderError, ValueError):
    """Raised when a set would hold two entries with the same name."""

    def __init__(self, names: Sequence[Any]):
        self.names = list(names)
        super().__init__("Duplicate names: " + ", ".join(str(n) for n in self.names))


__all__ = [
    "ProviderError",
    "InvalidNameError",
    "ParseError",
    "UnknownNameError",
    "AliasArgumentMismatchError",
    "NameCollisionError",
    "EmptyProviderSetError",
    "DuplicateNameError",
]
