"""
Example providers for the demo script and tests.

Builds two small leaf catalogs (math and text), the three function
catalog used in the alias walkthrough, and a composed catalog that
aliases, renames and aggregates them.
"""
from typing import Any, Optional

from funcprov.aggregate import aggregate
from funcprov.model import CaseSensitivity, Info, InfoSet, Name
from funcprov.providers import BasicProvider, FunctionProvider
from funcprov.views import AliasProvider, MergedMappedProvider

MATH_URL = "https://example.com/functions/math/"
TEXT_URL = "https://example.com/functions/text/"
SCENARIO_URL = "https://example.com/functions/"

SCENARIO_ALIASES = 'f1, a2 f2, a4 f3("V") https://example.com/functions/a4'


def _total(*values: Any) -> Any:
    return sum(values)


def _concat(*values: Any) -> str:
    return "".join(str(v) for v in values)


def _wrap(prefix: str, suffix: str, text: str) -> str:
    return prefix + text + suffix


def _round_to(digits: int, number: float) -> float:
    return round(number, digits)


def _repeat(times: int, text: str) -> str:
    return text * times


def build_math_provider(case_sensitivity: Optional[CaseSensitivity] = None) -> BasicProvider:
    return BasicProvider.from_callables(
        MATH_URL,
        {
            "abs": abs,
            "max": max,
            "min": min,
            "round": _round_to,
            "sum": _total,
        },
        case_sensitivity,
    )


def build_text_provider(case_sensitivity: Optional[CaseSensitivity] = None) -> BasicProvider:
    return BasicProvider.from_callables(
        TEXT_URL,
        {
            "concat": _concat,
            "lower": str.lower,
            "repeat": _repeat,
            "upper": str.upper,
            "wrap": _wrap,
        },
        case_sensitivity,
    )


def build_scenario_provider(case_sensitivity: Optional[CaseSensitivity] = None) -> BasicProvider:
    """f1 upper-cases, f2 lower-cases, f3 prefixes its first value to its second."""
    return BasicProvider.from_callables(
        SCENARIO_URL,
        {
            "f1": str.upper,
            "f2": str.lower,
            "f3": _concat,
        },
        case_sensitivity,
    )


def build_example_catalog(case_sensitivity: Optional[CaseSensitivity] = None) -> FunctionProvider:
    """
    A composed catalog:
        - math functions, with sum exposed as total and a configured round-2
        - text functions, with upper exposed as shout
        - both merged into one provider
    """
    math_provider = build_math_provider(case_sensitivity)
    text_provider = build_text_provider(case_sensitivity)
    case_sensitivity = math_provider.case_sensitivity

    math_view = AliasProvider(
        "abs, max, min, total sum, round-2 round(2) https://example.com/functions/math/round-2",
        math_provider,
    )
    text_view = MergedMappedProvider(
        InfoSet.of([Info(Name("shout", case_sensitivity), TEXT_URL + "upper")], case_sensitivity),
        text_provider,
    )
    return aggregate([math_view, text_view])

