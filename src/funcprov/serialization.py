"""
Serialization helpers for funcprov values (Info, InfoSet, Selector, AliasSet).

Provides lossless JSON/YAML round-trip via intermediate dict/list representation.
Every value type has its own explicit encode/decode pair; nothing is
registered globally.

Case-insensitive names are marked with a leading "@". Case-insensitive sets
start with a lone "@" element, the entry text itself is never touched:

    {"name": "@ABS", "token": ...}             insensitive Info
    ["https://example.com/abs abs"]            sensitive InfoSet
    ["@", "https://example.com/abs ABS"]       insensitive InfoSet
    ["@"]                                      empty insensitive InfoSet
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Tuple

import yaml

from funcprov.aliases import AliasSet
from funcprov.model import CaseSensitivity, Info, InfoSet, Name
from funcprov.selector import Selector

INSENSITIVE_MARKER = "@"


def _mark(text: str, case_sensitivity: CaseSensitivity) -> str:
    if case_sensitivity is CaseSensitivity.INSENSITIVE:
        return INSENSITIVE_MARKER + text
    return text


def _unmark(text: str) -> Tuple[str, CaseSensitivity]:
    if text.startswith(INSENSITIVE_MARKER):
        return text[len(INSENSITIVE_MARKER):], CaseSensitivity.INSENSITIVE
    return text, CaseSensitivity.SENSITIVE


def _marked_list(texts: List[str], case_sensitivity: CaseSensitivity) -> List[str]:
    if case_sensitivity is CaseSensitivity.SENSITIVE:
        return texts
    return [INSENSITIVE_MARKER] + texts


def _unmarked_list(items: List[str]) -> Tuple[List[str], CaseSensitivity]:
    if not isinstance(items, list):
        raise TypeError(f"Expected list, got {type(items).__name__}")
    case_sensitivity = CaseSensitivity.SENSITIVE
    if items and items[0] == INSENSITIVE_MARKER:
        items = items[1:]
        case_sensitivity = CaseSensitivity.INSENSITIVE
    if INSENSITIVE_MARKER in items:
        raise ValueError(f"Case sensitivity marker must be the first element, got {items!r}")
    return items, case_sensitivity


def info_to_dict(info: Info) -> Dict[str, Any]:
    return {"name": _mark(info.name.value, info.name.case_sensitivity), "token": info.token}


def info_from_dict(d: Dict[str, Any]) -> Info:
    name, case_sensitivity = _unmark(d["name"])
    return Info(Name(name, case_sensitivity), d["token"])


def info_set_to_list(infos: InfoSet) -> List[str]:
    return _marked_list([info.text() for info in infos], infos.case_sensitivity)


def info_set_from_list(items: List[str]) -> InfoSet:
    texts, case_sensitivity = _unmarked_list(items)
    return InfoSet.of((Info.parse(t, case_sensitivity) for t in texts), case_sensitivity)


def selector_to_dict(selector: Selector) -> Dict[str, Any]:
    return {
        "name": _mark(selector.name.value, selector.name.case_sensitivity),
        "value_text": selector.value_text,
    }


def selector_from_dict(d: Dict[str, Any]) -> Selector:
    name, case_sensitivity = _unmark(d["name"])
    return Selector.parse(name + d.get("value_text", ""), case_sensitivity)


def alias_set_to_list(aliases: AliasSet) -> List[str]:
    return _marked_list([alias.text() for alias in aliases], aliases.case_sensitivity)


def alias_set_from_list(items: List[str]) -> AliasSet:
    texts, case_sensitivity = _unmarked_list(items)
    return AliasSet.parse(AliasSet.SEPARATOR.join(texts), case_sensitivity)


def info_set_to_json(infos: InfoSet) -> str:
    return json.dumps(info_set_to_list(infos), sort_keys=True)


def info_set_from_json(s: str) -> InfoSet:
    return info_set_from_list(json.loads(s))


def info_set_to_yaml(infos: InfoSet) -> str:
    return yaml.safe_dump(info_set_to_list(infos))


def info_set_from_yaml(s: str) -> InfoSet:
    return info_set_from_list(yaml.safe_load(s))


def alias_set_to_json(aliases: AliasSet) -> str:
    return json.dumps(alias_set_to_list(aliases), sort_keys=True)


def alias_set_from_json(s: str) -> AliasSet:
    return alias_set_from_list(json.loads(s))


def alias_set_to_yaml(aliases: AliasSet) -> str:
    return yaml.safe_dump(alias_set_to_list(aliases))


def alias_set_from_yaml(s: str) -> AliasSet:
    return alias_set_from_list(yaml.safe_load(s))
