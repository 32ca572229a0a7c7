"""
Alias Sets

An alias set declares which names a provider exposes and under what name:

    abs, min, max, sum-alias sum, custom-alias custom(1) https://example.com/custom

Each comma separated entry is one of:
    name                          pass-through, exposed unchanged
    alias target                  rename, alias stands for target
    alias target(params) [token]  selector alias, alias stands for a
                                  configured target; token overrides the
                                  canonical token advertised for alias

Commas inside parentheses or string literals do not split entries.
Whitespace around commas and around the token is insignificant;
text() always joins entries with ", ".

ARCHITECTURAL RULE:
    An AliasSet is a value. It never resolves anything itself,
    providers consult it (see funcprov.views.AliasProvider).
"""

from dataclasses import dataclass
from enum import Enum
from functools import total_ordering
from typing import Any, Iterable, List, Optional, Tuple

from funcprov.errors import InvalidNameError, ParseError
from funcprov.model import (
    CaseSensitivity,
    Info,
    InfoSet,
    Name,
    NamedSortedSet,
    _resolve_case_sensitivity,
    _valid_token,
    scan_name,
)
from funcprov.selector import Selector


# separators and grouping characters of the alias set text form
ALIAS_TOKEN_RESERVED = ',()"'


class AliasKind(Enum):
    """The three shapes an alias entry can take."""

    PASS_THROUGH = "pass-through"
    RENAME = "rename"
    SELECTOR = "selector"


class AliasClaim(Enum):
    """
    How an alias set treats a name presented to it.

    PASS_THROUGH: declared as a plain name, forward it unchanged
    ALIAS: declared as an alias, use AliasSet.alias() for its target
    UNCLAIMED: not mentioned by the set at all
    """

    PASS_THROUGH = "pass-through"
    ALIAS = "alias"
    UNCLAIMED = "unclaimed"


@total_ordering
@dataclass(frozen=True)
class Alias:
    """
    One alias set entry.

    Properties:
        name: The name this entry exposes
        selector: The target; None for a pass-through
        token: Canonical token advertised for name (selector aliases only)

    An entry whose target is its own name, with no parameters and no
    token, is a pass-through: "abs abs" and "abs" are the same entry.

    Ordered by name.
    """

    name: Name
    selector: Optional[Selector] = None
    token: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.name, Name):
            raise TypeError(f"Alias name must be Name, got {type(self.name).__name__}")
        selector = self.selector
        if selector is None:
            if self.token is not None:
                raise ValueError(f"Pass-through {self.name} cannot have a token")
            return
        value_text = selector.value_text
        if value_text.strip() and not value_text.lstrip().startswith("("):
            raise ValueError(f"Alias {self.name} target {selector} must be a name or name(params)")
        if self.token is not None and not _valid_token(self.token, ALIAS_TOKEN_RESERVED):
            raise ValueError(f"Invalid canonical token {self.token!r}")
        if selector.name == self.name and not value_text.strip() and self.token is None:
            object.__setattr__(self, "selector", None)

    @property
    def kind(self) -> AliasKind:
        if self.selector is None:
            return AliasKind.PASS_THROUGH
        if not self.selector.value_text.strip() and self.token is None:
            return AliasKind.RENAME
        return AliasKind.SELECTOR

    def with_name(self, name: Name) -> "Alias":
        if name.value == self.name.value and name.case_sensitivity is self.name.case_sensitivity:
            return self
        selector = self.selector
        if selector is not None:
            selector = selector.with_name(selector.name.with_case_sensitivity(name.case_sensitivity))
        return Alias(name, selector, self.token)

    def text(self) -> str:
        kind = self.kind
        if kind is AliasKind.PASS_THROUGH:
            return self.name.value
        if kind is AliasKind.RENAME:
            return f"{self.name} {self.selector.name}"
        text = f"{self.name} {self.selector.text()}"
        if self.token is not None:
            text += f" {self.token}"
        return text

    def __lt__(self, other: "Alias") -> bool:
        if not isinstance(other, Alias):
            return NotImplemented
        return self.name < other.name

    def __str__(self) -> str:
        return self.text()


def _split_entries(text: str) -> List[Tuple[int, str]]:
    """Split on top level commas, returning (start, entry) pairs."""
    entries = []
    depth = 0
    quoted = False
    start = 0
    i = 0
    while i < len(text):
        c = text[i]
        if quoted:
            if c == "\\":
                i += 1
            elif c == '"':
                quoted = False
        elif c == '"':
            quoted = True
        elif c == "(":
            depth += 1
        elif c == ")":
            depth -= 1
            if depth < 0:
                raise ParseError(f"Unbalanced ')' at {i} in {text!r}", text, i)
        elif c == "," and depth == 0:
            entries.append((start, text[start:i]))
            start = i + 1
        i += 1

    if quoted:
        raise ParseError(f"Unterminated string in {text!r}", text, start)
    if depth:
        raise ParseError(f"Missing closing parenthesis in {text[start:].strip()!r}", text, start)
    entries.append((start, text[start:]))
    return entries


def _skip_whitespace(text: str, i: int) -> int:
    while i < len(text) and text[i].isspace():
        i += 1
    return i


def _find_close(text: str, open_at: int) -> int:
    """Index of the ')' matching the '(' at open_at; quotes respected."""
    depth = 0
    quoted = False
    i = open_at
    while i < len(text):
        c = text[i]
        if quoted:
            if c == "\\":
                i += 1
            elif c == '"':
                quoted = False
        elif c == '"':
            quoted = True
        elif c == "(":
            depth += 1
        elif c == ")":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    raise ParseError(f"Missing closing parenthesis in {text.strip()!r}", text, open_at)


def _parse_entry(entry: str, offset: int, case_sensitivity: CaseSensitivity) -> Alias:
    def fail(message: str, at: int) -> ParseError:
        return ParseError(
            f"Invalid alias {entry.strip()!r}: {message} at {offset + at}",
            entry,
            offset + at,
        )

    i = _skip_whitespace(entry, 0)
    if i == len(entry):
        raise fail("empty entry", i)

    end = scan_name(entry, i)
    if end == i:
        raise fail(f"invalid character {entry[i]!r}", i)
    if end < len(entry) and not entry[end].isspace():
        raise fail(f"invalid character {entry[end]!r}", end)
    try:
        name = Name(entry[i:end], case_sensitivity)
    except InvalidNameError as cause:
        raise fail(str(cause), i) from cause

    i = _skip_whitespace(entry, end)
    if i == len(entry):
        return Alias(name)

    target_start = i
    target_end = scan_name(entry, i)
    if target_end == i:
        raise fail(f"invalid character {entry[i]!r}", i)

    j = _skip_whitespace(entry, target_end)
    if j < len(entry) and entry[j] == "(":
        end = _find_close(entry, j) + 1
    else:
        end = target_end
        if end < len(entry) and not entry[end].isspace():
            raise fail(f"invalid character {entry[end]!r}", end)
    try:
        selector = Selector.parse(entry[target_start:end], case_sensitivity)
    except (ParseError, InvalidNameError) as cause:
        raise fail(str(cause), target_start) from cause

    token = None
    i = _skip_whitespace(entry, end)
    if i < len(entry):
        if i == end:
            raise fail(f"invalid character {entry[i]!r}", i)
        token_end = i
        while token_end < len(entry) and not entry[token_end].isspace():
            token_end += 1
        token = entry[i:token_end]
        rest = _skip_whitespace(entry, token_end)
        if rest < len(entry):
            raise fail(f"unexpected {entry[rest:].strip()!r}", rest)

    return Alias(name, selector, token)


class AliasSet(NamedSortedSet):
    """
    Sorted, immutable set of Alias entries unique by their exposed name.

    Example:
        AliasSet.parse('f1, a2 f2, a4 f3("V") https://example.com/a4')

        f1 is forwarded unchanged
        a2 stands for f2
        a4 stands for f3 configured with "V" and advertises its own token

    Canonical text joins entries with ", " and round-trips through parse().
    """

    SEPARATOR = ", "

    @staticmethod
    def parse(text: str, case_sensitivity: Optional[CaseSensitivity] = None) -> "AliasSet":
        """
        Parse alias set text.

        Raises:
            ParseError: On malformed entries, unbalanced parentheses or
                quotes, or an alias name declared twice
        """
        case_sensitivity = _resolve_case_sensitivity(case_sensitivity)
        if not text.strip():
            return AliasSet.empty(case_sensitivity)

        aliases: List[Alias] = []
        seen = {}
        for start, entry in _split_entries(text):
            alias = _parse_entry(entry, start, case_sensitivity)
            key = case_sensitivity.fold(alias.name.value)
            if key in seen:
                raise ParseError(
                    f"Duplicate alias {alias.name.value!r} in {entry.strip()!r}, "
                    f"already declared by {seen[key]!r}",
                    text,
                    start,
                )
            seen[key] = entry.strip()
            aliases.append(alias)
        return AliasSet.of(aliases, case_sensitivity)

    def _entry_text(self, entry: Alias) -> str:
        return entry.text()

    def _lookup(self, name: Any) -> Optional[Alias]:
        return self.get(name)

    def alias(self, name: Any) -> Optional[Selector]:
        """
        The target of an alias entry.

        Rename targets come back as a Selector without parameters.
        Returns None for pass-through names and names not in the set.
        """
        alias = self._lookup(name)
        if alias is None:
            return None
        return alias.selector

    def alias_or_name(self, name: Any) -> Optional[Name]:
        """
        name itself when it is a pass-through or not in the set;
        None when name is an alias (use alias() instead).
        """
        alias = self._lookup(name)
        if alias is not None and alias.selector is not None:
            return None
        if isinstance(name, Name):
            return name.with_case_sensitivity(self.case_sensitivity)
        return Name(name, self.case_sensitivity)

    def claim(self, name: Any) -> AliasClaim:
        alias = self._lookup(name)
        if alias is None:
            return AliasClaim.UNCLAIMED
        if alias.selector is None:
            return AliasClaim.PASS_THROUGH
        return AliasClaim.ALIAS

    def contains_name_or_alias(self, name: Any) -> bool:
        return self.contains_name(name)

    def alias_names(self) -> Tuple[Name, ...]:
        """Names declared as aliases (renames and selector aliases)."""
        return tuple(a.name for a in self if a.selector is not None)

    def target_names(self) -> Tuple[Name, ...]:
        """Every name this set forwards to: pass-through names and alias targets."""
        names = {}
        for alias in self:
            target = alias.name if alias.selector is None else alias.selector.name
            names.setdefault(self.case_sensitivity.fold(target.value), target)
        return tuple(sorted(names.values()))

    def merge(self, infos: InfoSet) -> InfoSet:
        """
        The catalog visible through this alias set.

        Pass-through entries keep the wrapped info only when infos has it.
        Alias entries are always advertised under the alias name, with
        the override token, else the target's token, else a token
        synthesized from the alias name.
        """
        from funcprov.config import settings

        merged: List[Info] = []
        for alias in self:
            if alias.selector is None:
                info = infos.get(alias.name)
                if info is not None:
                    merged.append(info)
                continue

            token = alias.token
            if token is None:
                target = infos.get(alias.selector.name)
                if target is not None:
                    token = target.token
                else:
                    token = settings.alias_token_prefix + alias.name.value
            merged.append(Info(alias.name, token))
        return InfoSet.of(merged, self.case_sensitivity)

    def concat_or_replace(self, alias: Alias) -> "AliasSet":
        return self._with_entries(
            [a for a in self if a.name != alias.name] + [alias]
        )

    def delete_alias_or_name_all(self, names: Iterable[Any]) -> "AliasSet":
        doomed = {self._key(n) for n in names}
        return self.delete_if(lambda a: self._key(a) in doomed)

    def keep_alias_or_name_all(self, names: Iterable[Any]) -> "AliasSet":
        kept = {self._key(n) for n in names}
        return self.delete_if(lambda a: self._key(a) not in kept)


__all__ = [
    "Alias",
    "AliasKind",
    "AliasClaim",
    "AliasSet",
]
