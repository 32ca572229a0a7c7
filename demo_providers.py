#!/usr/bin/env python3
"""
Demo: Compose providers and resolve functions through them.

Shows an aliasing view, the merged example catalog, selector evaluation
and a rejected aggregation.
"""

import logging

from funcprov.aggregate import aggregate
from funcprov.errors import AliasArgumentMismatchError, NameCollisionError
from funcprov.examples import (
    SCENARIO_ALIASES,
    build_example_catalog,
    build_math_provider,
    build_scenario_provider,
)
from funcprov.model import Name
from funcprov.providers import BasicProvider
from funcprov.selector import Selector
from funcprov.serialization import info_set_to_yaml
from funcprov.views import AliasProvider


def main():
    logging.basicConfig(level=logging.INFO)

    print("=" * 70)
    print("ALIAS VIEW")
    print("=" * 70)
    scenario = build_scenario_provider()
    view = AliasProvider(SCENARIO_ALIASES, scenario)
    print(f"  Alias set:  {view.aliases.text()}")
    print(f"  Wrapped:    {scenario}")
    print(f"  Visible:    {view}")
    print(f"  a4('x') ->  {view.resolve('a4')('x')!r}")
    try:
        view.resolve("a2", ["unexpected"])
    except AliasArgumentMismatchError as e:
        print(f"  a2 with values -> {e}")
    print()

    print("=" * 70)
    print("EXAMPLE CATALOG")
    print("=" * 70)
    catalog = build_example_catalog()
    for info in catalog.infos():
        print(f"  {info.name.value:<10} {info.token}")
    print()

    for text in ['total', 'round-2', 'wrap("<", ">")', 'shout']:
        selector = Selector.parse(text)
        function = catalog.resolve(selector)
        print(f"  {text:<20} -> {function}")
    print(f"  total(1, 2, 3)       -> {catalog.resolve('total')(1, 2, 3)}")
    print(f"  round-2(3.14159)     -> {catalog.resolve(Name('round-2'))(3.14159)}")
    print(f"  shout('hello')       -> {catalog.resolve('shout')('hello')}")
    print()

    print("=" * 70)
    print("COLLISIONS")
    print("=" * 70)
    try:
        aggregate([build_math_provider(), BasicProvider.from_callables("https://example.com/other/", {"abs": abs})])
    except NameCollisionError as e:
        print(f"  {e}")
    print()

    print("=" * 70)
    print("CATALOG YAML")
    print("=" * 70)
    print(info_set_to_yaml(catalog.infos()))


if __name__ == "__main__":
    main()
