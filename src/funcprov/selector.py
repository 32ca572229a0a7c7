"""
Selector Language

A selector is a function Name plus raw parameter text:

    abs
    text-format @@
    number-format("#,##0.00", 2)
    wrap(upper, "<", ">")

The parameter text stays a plain string until evaluate() is called.
Parameters are evaluated left to right, each being:
    - a double quoted string literal (backslash escapes)
    - a decimal number literal
    - a name, optionally with its own parameters, resolved via one
      more call to the resolver

ROUND-TRIP GUARANTEE:
    Selector.parse(text).text() == text for every text parse accepts.
    The parameter text is stored verbatim, never re-quoted.
"""

import math
import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple

from funcprov.errors import ParseError
from funcprov.model import CaseSensitivity, Name, _resolve_case_sensitivity, scan_name


# (name, values, context) -> function
Resolver = Callable[[Name, List[Any], Any], Any]

_NUMBER_RE = re.compile(r'[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?')

_ESCAPES = {
    '"': '"',
    "'": "'",
    "\\": "\\",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "0": "\0",
}

_UNESCAPES = {v: "\\" + k for k, v in _ESCAPES.items() if k != "'"}


@dataclass(frozen=True)
class _Token:
    kind: str  # one of ( ) , string number name
    value: Any
    position: int


def _tokenize(text: str) -> List[_Token]:
    """Tokenize parameter text."""
    tokens = []
    i = 0
    while i < len(text):
        c = text[i]
        if c.isspace():
            i += 1
        elif c in "(),":
            tokens.append(_Token(c, c, i))
            i += 1
        elif c == '"':
            value, end = _read_string(text, i)
            tokens.append(_Token("string", value, i))
            i = end
        elif c.isdigit() or c in "+-.":
            match = _NUMBER_RE.match(text, i)
            if match is None:
                raise ParseError(f"Invalid number at {i} in {text!r}", text, i)
            literal = match.group(0)
            if re.fullmatch(r'[+-]?\d+', literal):
                value = int(literal)
            else:
                value = float(literal)
            tokens.append(_Token("number", value, i))
            i = match.end()
        else:
            end = scan_name(text, i)
            if end == i:
                raise ParseError(f"Invalid character {c!r} at {i} in {text!r}", text, i)
            tokens.append(_Token("name", text[i:end], i))
            i = end
    return tokens


def _read_string(text: str, start: int) -> Tuple[str, int]:
    """Read a double quoted literal starting at start; returns (value, index past closing quote)."""
    chars = []
    i = start + 1
    while i < len(text):
        c = text[i]
        if c == '"':
            return "".join(chars), i + 1
        if c == "\\":
            if i + 1 >= len(text):
                break
            escaped = _ESCAPES.get(text[i + 1])
            if escaped is None:
                raise ParseError(
                    f"Invalid escape \\{text[i + 1]} at {i} in {text!r}",
                    text,
                    i,
                )
            chars.append(escaped)
            i += 2
            continue
        chars.append(c)
        i += 1
    raise ParseError(f"Unterminated string at {start} in {text!r}", text, start)


def _parse_parameters(tokens: List[_Token], pos: int, text: str,
                      case_sensitivity: CaseSensitivity) -> Tuple[List[Any], int]:
    """Parse '(' [value (',' value)*] ')' starting at pos."""
    if pos >= len(tokens) or tokens[pos].kind != "(":
        raise ParseError(f"Expected '(' in {text!r}", text)
    open_paren = tokens[pos]
    pos += 1

    values: List[Any] = []
    if pos < len(tokens) and tokens[pos].kind == ")":
        return values, pos + 1

    while True:
        value, pos = _parse_value(tokens, pos, text, case_sensitivity)
        values.append(value)

        if pos >= len(tokens):
            raise ParseError(
                f"Missing closing parenthesis for '(' at {open_paren.position} in {text!r}",
                text,
                open_paren.position,
            )
        token = tokens[pos]
        if token.kind == ")":
            return values, pos + 1
        if token.kind != ",":
            raise ParseError(
                f"Expected ',' or ')' at {token.position} got {token.value!r} in {text!r}",
                text,
                token.position,
            )
        pos += 1


def _parse_value(tokens: List[_Token], pos: int, text: str,
                 case_sensitivity: CaseSensitivity) -> Tuple[Any, int]:
    if pos >= len(tokens):
        raise ParseError(f"Unexpected end of parameters in {text!r}", text, len(text))

    token = tokens[pos]
    if token.kind in ("string", "number"):
        return token.value, pos + 1

    if token.kind == "name":
        name = Name(token.value, case_sensitivity)
        pos += 1
        if pos < len(tokens) and tokens[pos].kind == "(":
            start = tokens[pos].position
            _, pos = _parse_parameters(tokens, pos, text, case_sensitivity)
            end = tokens[pos - 1].position + 1
            return Selector(name, text[start:end]), pos
        return Selector(name), pos

    raise ParseError(f"Unexpected {token.value!r} at {token.position} in {text!r}", text, token.position)


def parse_parameters(value_text: str, case_sensitivity: CaseSensitivity) -> List[Any]:
    """
    Parse selector parameter text into literal values.

    Nested names become zero-or-more parameter Selector objects;
    nothing is resolved here.

    Returns:
        [] for empty or whitespace-only text

    Raises:
        ParseError: If the text is not a single parenthesised parameter list
    """
    tokens = _tokenize(value_text)
    if not tokens:
        return []

    values, pos = _parse_parameters(tokens, 0, value_text, case_sensitivity)
    if pos < len(tokens):
        extra = tokens[pos]
        raise ParseError(
            f"Unexpected {extra.value!r} at {extra.position} in {value_text!r}",
            value_text,
            extra.position,
        )
    return values


def _quote(text: str) -> str:
    return '"' + "".join(_UNESCAPES.get(c, c) for c in text) + '"'


def format_value(value: Any) -> str:
    """Render a single parameter value in selector parameter syntax."""
    if isinstance(value, bool):
        raise TypeError("Boolean parameters are not supported")
    if isinstance(value, str):
        return _quote(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise ValueError(f"Unsupported number {value}")
        return repr(value)
    if isinstance(value, Selector):
        return value.text()
    if isinstance(value, Name):
        return value.value
    raise TypeError(f"Unsupported parameter type {type(value).__name__}")


def format_values(values: Sequence[Any]) -> str:
    """Render values as parenthesised parameter text, e.g. ("a", 1)."""
    return "(" + ", ".join(format_value(v) for v in values) + ")"


@dataclass(frozen=True)
class Selector:
    """
    A function Name plus raw parameter text.

    Properties:
        name: The function name
        value_text: Parameter text exactly as written after the name.
            Either empty, starting with '(' or starting with whitespace;
            Selector(name, "@@") is stored as " @@".

    Selectors are immutable and compare by name and value_text.
    """

    name: Name
    value_text: str = ""

    def __post_init__(self):
        if not isinstance(self.name, Name):
            raise TypeError(f"Selector name must be Name, got {type(self.name).__name__}")
        text = self.value_text
        if text and not (text[0] == "(" or text[0].isspace()):
            object.__setattr__(self, "value_text", " " + text)

    @staticmethod
    def parse(text: str, case_sensitivity: Optional[CaseSensitivity] = None) -> "Selector":
        """
        Parse selector text.

        The name ends at the first whitespace or '('. When the remaining
        text (ignoring leading whitespace) starts with '(' it must be a
        well formed parameter list; any other remainder is kept as raw text.

        Raises:
            ParseError: If the text does not start with a name, or the
                parameter list is malformed
            InvalidNameError: If the name is too long
        """
        case_sensitivity = _resolve_case_sensitivity(case_sensitivity)

        end = scan_name(text, 0)
        if end == 0:
            raise ParseError(f"Expected name at 0 in {text!r}", text, 0)
        if end < len(text) and not (text[end] == "(" or text[end].isspace()):
            raise ParseError(f"Invalid character {text[end]!r} at {end} in {text!r}", text, end)

        value_text = text[end:]
        if value_text.lstrip().startswith("("):
            parse_parameters(value_text, case_sensitivity)
        return Selector(Name(text[:end], case_sensitivity), value_text)

    @staticmethod
    def of(name: Any, value_text: str = "",
           case_sensitivity: Optional[CaseSensitivity] = None) -> "Selector":
        if not isinstance(name, Name):
            name = Name(name, case_sensitivity)
        return Selector(name, value_text)

    def with_name(self, name: Name) -> "Selector":
        if name.value == self.name.value and name.case_sensitivity is self.name.case_sensitivity:
            return self
        return Selector(name, self.value_text)

    def with_value_text(self, value_text: str) -> "Selector":
        different = Selector(self.name, value_text)
        return self if different == self else different

    def with_values(self, values: Sequence[Any]) -> "Selector":
        return self.with_value_text(format_values(values) if values else "")

    def parameters(self) -> List[Any]:
        """
        Parse value_text into literals and unevaluated nested Selectors.

        Raw text that is not a parameter list (e.g. " @@") has no parameters.
        """
        if not self.value_text.lstrip().startswith("("):
            return []
        return parse_parameters(self.value_text, self.name.case_sensitivity)

    def evaluate(self, resolver: Resolver, context: Any = None) -> Any:
        """
        Resolve this selector.

        Each nested name is resolved through one more resolver call
        before resolver(self.name, values, context) is invoked.
        Nothing is cached here; repeated evaluation calls the
        resolver again.
        """
        values = [_evaluate_value(v, resolver, context) for v in self.parameters()]
        return resolver(self.name, values, context)

    def text(self) -> str:
        return self.name.value + self.value_text

    def __str__(self) -> str:
        return self.text()


def _evaluate_value(value: Any, resolver: Resolver, context: Any) -> Any:
    if isinstance(value, Selector):
        return value.evaluate(resolver, context)
    return value


__all__ = [
    "Selector",
    "Resolver",
    "parse_parameters",
    "format_value",
    "format_values",
]
