"""
Identifier Model

Defines the value types every other layer is built on:
    - CaseSensitivity (how names compare)
    - Name (a validated function identifier)
    - Info (a name paired with its canonical token)
    - NamedSortedSet (immutable sorted set unique by name)
    - InfoSet (the catalog a provider advertises)

ARCHITECTURAL RULE:
    These objects are immutable.
    Every "mutator" returns a new value, or the same instance when
    nothing changed, so values can be shared freely between providers.
"""

from dataclasses import dataclass
from enum import Enum
from functools import total_ordering
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from funcprov.errors import DuplicateNameError, InvalidNameError, ParseError


class CaseSensitivity(str, Enum):
    """
    Controls equality and ordering of names.

    Passed explicitly into every constructor that compares names;
    never held as global state.
    """

    SENSITIVE = "sensitive"
    INSENSITIVE = "insensitive"

    def fold(self, text: str) -> str:
        """Return the comparison key for text under this mode."""
        if self is CaseSensitivity.INSENSITIVE:
            return text.lower()
        return text

    @staticmethod
    def default() -> "CaseSensitivity":
        from funcprov.config import settings

        return settings.default_case_sensitivity


def _resolve_case_sensitivity(case_sensitivity: Optional[CaseSensitivity]) -> CaseSensitivity:
    if case_sensitivity is None:
        return CaseSensitivity.default()
    return CaseSensitivity(case_sensitivity)


def is_name_start(c: str) -> bool:
    return c.isascii() and c.isalpha()


def is_name_part(c: str) -> bool:
    return c.isascii() and (c.isalnum() or c in "-._")


def scan_name(text: str, start: int = 0) -> int:
    """
    Return the index just past the name starting at `start`.

    Returns `start` when no name begins there.
    """
    if start >= len(text) or not is_name_start(text[start]):
        return start
    end = start + 1
    while end < len(text) and is_name_part(text[end]):
        end += 1
    return end


@total_ordering
@dataclass(frozen=True, eq=False)
class Name:
    """
    A case-sensitivity aware function identifier.

    Examples:
        - abs
        - text-format
        - number.parse

    Properties:
        value: The raw identifier text, exactly as given
        case_sensitivity: How this name compares to other names

    Two names compare insensitively when either of them is insensitive.
    Across modes this is not transitive: Name("A", SENSITIVE) and
    Name("a", SENSITIVE) both equal Name("a", INSENSITIVE) but differ from
    each other. Sets and providers fold every name by their own mode, so
    a catalog never mixes the two.

    Raises:
        InvalidNameError: If the first character is not an ASCII letter,
            a later character is not a letter, digit, '-', '.' or '_',
            or the length is outside 1..name_max_length
    """

    value: str
    case_sensitivity: Optional[CaseSensitivity] = None

    def __post_init__(self):
        if not isinstance(self.value, str):
            raise TypeError(f"Name value must be str, got {type(self.value).__name__}")
        object.__setattr__(self, "case_sensitivity", _resolve_case_sensitivity(self.case_sensitivity))
        _check_name(self.value)

    def with_case_sensitivity(self, case_sensitivity: CaseSensitivity) -> "Name":
        if self.case_sensitivity is case_sensitivity:
            return self
        return Name(self.value, case_sensitivity)

    def _keys(self, other: "Name") -> Tuple[str, str]:
        if CaseSensitivity.INSENSITIVE in (self.case_sensitivity, other.case_sensitivity):
            return self.value.lower(), other.value.lower()
        return self.value, other.value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Name):
            return NotImplemented
        mine, theirs = self._keys(other)
        return mine == theirs

    def __lt__(self, other: "Name") -> bool:
        if not isinstance(other, Name):
            return NotImplemented
        mine, theirs = self._keys(other)
        return mine < theirs

    def __hash__(self) -> int:
        # equal under either mode implies equal lower-case text
        return hash(self.value.lower())

    def __str__(self) -> str:
        return self.value


def _check_name(text: str) -> None:
    from funcprov.config import settings

    if not text:
        raise InvalidNameError(text, 0, "Empty name")
    if len(text) > settings.name_max_length:
        raise InvalidNameError(
            text,
            settings.name_max_length,
            f"Name length {len(text)} exceeds {settings.name_max_length}",
        )
    if not is_name_start(text[0]):
        raise InvalidNameError(text, 0)
    for i in range(1, len(text)):
        if not is_name_part(text[i]):
            raise InvalidNameError(text, i)


def as_name(name: Any, case_sensitivity: Optional[CaseSensitivity] = None) -> Name:
    """Accept a Name or plain text, returning a Name under the given mode."""
    case_sensitivity = _resolve_case_sensitivity(case_sensitivity)
    if isinstance(name, Name):
        return name.with_case_sensitivity(case_sensitivity)
    if isinstance(name, str):
        return Name(name, case_sensitivity)
    raise TypeError(f"Expected Name or str, got {type(name).__name__}")


def _valid_token(token: str, reserved: str = ",") -> bool:
    """Tokens are non empty and hold no whitespace or reserved separator characters."""
    return bool(token) and not any(c.isspace() or c in reserved for c in token)


@total_ordering
@dataclass(frozen=True)
class Info:
    """
    A Name paired with its canonical token.

    The token is opaque (typically a URL): it is only compared and
    printed, never fetched. Renaming views use it to recognise the
    "same" function under a different name.

    Text form:
        <token> <name>
        https://example.com/functions/abs abs

    Ordered by name.
    """

    name: Name
    token: str

    def __post_init__(self):
        if not isinstance(self.name, Name):
            raise TypeError(f"Info name must be Name, got {type(self.name).__name__}")
        if not _valid_token(self.token):
            raise ValueError(f"Invalid canonical token {self.token!r}")

    @staticmethod
    def parse(text: str, case_sensitivity: Optional[CaseSensitivity] = None) -> "Info":
        parts = text.split()
        if len(parts) != 2:
            raise ParseError(f"Expected '<token> <name>' got {text!r}", text)
        token, name = parts
        return Info(Name(name, case_sensitivity), token)

    def with_name(self, name: Name) -> "Info":
        if name.value == self.name.value and name.case_sensitivity is self.name.case_sensitivity:
            return self
        return Info(name, self.token)

    def text(self) -> str:
        return f"{self.token} {self.name}"

    def __lt__(self, other: "Info") -> bool:
        if not isinstance(other, Info):
            return NotImplemented
        return (self.name, self.token) < (other.name, other.token)

    def __str__(self) -> str:
        return self.text()


class NamedSortedSet:
    """
    Immutable set of entries sorted and unique by name.

    Entries must expose `name` (a Name) and `with_name(name)`.
    Every entry name is converted to the set's case sensitivity, so
    two entries whose names only differ by case collide in an
    insensitive set.

    Operations return `self` whenever the result would hold exactly
    the same entries; this is identity, not merely equality.

    Subclasses set SEPARATOR and provide _entry_text().
    """

    SEPARATOR = ","

    _empties: Dict[Tuple[type, CaseSensitivity], "NamedSortedSet"] = {}

    def __init__(self, entries: Tuple[Any, ...], case_sensitivity: CaseSensitivity):
        # use of() or empty(); entries are already sorted and unique
        self._entries = entries
        self._case_sensitivity = case_sensitivity
        self._index = {case_sensitivity.fold(e.name.value): e for e in entries}

    @classmethod
    def empty(cls, case_sensitivity: Optional[CaseSensitivity] = None):
        case_sensitivity = _resolve_case_sensitivity(case_sensitivity)
        key = (cls, case_sensitivity)
        empty = NamedSortedSet._empties.get(key)
        if empty is None:
            empty = NamedSortedSet._empties.setdefault(key, cls((), case_sensitivity))
        return empty

    @classmethod
    def of(cls, entries: Iterable[Any] = (), case_sensitivity: Optional[CaseSensitivity] = None):
        """
        Build a set from entries.

        Raises:
            DuplicateNameError: If two different entries share a name
        """
        case_sensitivity = _resolve_case_sensitivity(case_sensitivity)
        by_name: Dict[str, Any] = {}
        duplicates: List[Name] = []
        for entry in entries:
            entry = entry.with_name(entry.name.with_case_sensitivity(case_sensitivity))
            key = case_sensitivity.fold(entry.name.value)
            existing = by_name.get(key)
            if existing is None:
                by_name[key] = entry
            elif existing != entry:
                duplicates.append(entry.name)
        if duplicates:
            raise DuplicateNameError(sorted(set(duplicates)))
        if not by_name:
            return cls.empty(case_sensitivity)
        return cls(tuple(sorted(by_name.values(), key=lambda e: e.name)), case_sensitivity)

    @property
    def case_sensitivity(self) -> CaseSensitivity:
        return self._case_sensitivity

    def _with_entries(self, entries: Iterable[Any]):
        after = type(self).of(entries, self._case_sensitivity)
        return self if after == self else after

    def _key(self, entry_or_name: Any) -> str:
        name = getattr(entry_or_name, "name", entry_or_name)
        if isinstance(name, Name):
            name = name.value
        return self._case_sensitivity.fold(name)

    # lookups

    def names(self) -> Tuple[Name, ...]:
        return tuple(e.name for e in self._entries)

    def get(self, name: Any) -> Optional[Any]:
        """Return the entry with the given name (Name or text), if any."""
        return self._index.get(self._key(name))

    def contains_name(self, name: Any) -> bool:
        return self._key(name) in self._index

    def first(self):
        if not self._entries:
            raise LookupError(f"{type(self).__name__} is empty")
        return self._entries[0]

    def last(self):
        if not self._entries:
            raise LookupError(f"{type(self).__name__} is empty")
        return self._entries[-1]

    # set algebra

    def concat(self, entry: Any):
        return self._with_entries(self._entries + (entry,))

    def concat_all(self, entries: Iterable[Any]):
        return self._with_entries(self._entries + tuple(entries))

    def delete(self, entry: Any):
        return self._with_entries(e for e in self._entries if e != entry)

    def delete_all(self, entries: Iterable[Any]):
        doomed = list(entries)
        return self._with_entries(e for e in self._entries if e not in doomed)

    def delete_if(self, predicate: Callable[[Any], bool]):
        return self._with_entries(e for e in self._entries if not predicate(e))

    def replace(self, old: Any, new: Any):
        if old not in self:
            return self
        return self._with_entries([e for e in self._entries if e != old] + [new])

    def sub_set(self, start: Any, stop: Any):
        """Entries named from `start` (inclusive) up to `stop` (exclusive)."""
        low, high = self._key(start), self._key(stop)
        return self._with_entries(
            e for e in self._entries if low <= self._key(e) < high
        )

    def head_set(self, stop: Any):
        high = self._key(stop)
        return self._with_entries(e for e in self._entries if self._key(e) < high)

    def tail_set(self, start: Any):
        low = self._key(start)
        return self._with_entries(e for e in self._entries if self._key(e) >= low)

    # text

    def text(self) -> str:
        return self.SEPARATOR.join(self._entry_text(e) for e in self._entries)

    def _entry_text(self, entry: Any) -> str:
        return str(entry)

    # container protocol

    def __iter__(self) -> Iterator[Any]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __contains__(self, entry: object) -> bool:
        name = getattr(entry, "name", None)
        if not isinstance(name, Name):
            return False
        return self._index.get(self._key(name)) == entry

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if type(other) is not type(self):
            return NotImplemented
        return (
            self._case_sensitivity is other._case_sensitivity
            and self._entries == other._entries
        )

    def __hash__(self) -> int:
        return hash((type(self), self._case_sensitivity, self._entries))

    def __str__(self) -> str:
        return self.text()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.text()!r}, {self._case_sensitivity.value})"


class InfoSet(NamedSortedSet):
    """
    The catalog a provider advertises: Info entries unique by name.

    Text form:
        comma separated infos, no padding
        https://example.com/abs abs,https://example.com/max max
    """

    @staticmethod
    def parse(text: str, case_sensitivity: Optional[CaseSensitivity] = None) -> "InfoSet":
        case_sensitivity = _resolve_case_sensitivity(case_sensitivity)
        if not text.strip():
            return InfoSet.empty(case_sensitivity)
        return InfoSet.of(
            (Info.parse(part, case_sensitivity) for part in text.split(InfoSet.SEPARATOR)),
            case_sensitivity,
        )

    def tokens(self) -> Tuple[str, ...]:
        return tuple(sorted({info.token for info in self}))

    def filter(self, other: "InfoSet") -> "InfoSet":
        """Keep only infos whose token also appears in other."""
        tokens = {info.token for info in other}
        return self.delete_if(lambda info: info.token not in tokens)

    def rename_if_present(self, renames: "InfoSet") -> "InfoSet":
        """Replace every info whose token matches an info in renames with that info."""
        by_token = {}
        for info in renames:
            by_token.setdefault(info.token, info)
        return self._with_entries(by_token.get(info.token, info) for info in self)

    def alias_set(self):
        """Every advertised name as a pass-through alias."""
        from funcprov.aliases import Alias, AliasSet

        return AliasSet.of(
            (Alias(info.name) for info in self),
            self.case_sensitivity,
        )


__all__ = [
    "CaseSensitivity",
    "Name",
    "Info",
    "InfoSet",
    "NamedSortedSet",
    "as_name",
    "scan_name",
    "is_name_start",
    "is_name_part",
]
