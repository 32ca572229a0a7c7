"""
Aggregating Provider

Merges several providers into one catalog:

    aggregate([math_provider, text_provider])

Construction scans every member catalog once. A name advertised by more
than one member is a collision and construction fails with
NameCollisionError listing every colliding name with the canonical
tokens of all of its owners. After that, resolving a name is a map lookup.

ARCHITECTURAL RULE:
    The collision scan happens once, at construction.
    An AggregatingProvider is never partially built: it either holds
    every member function or does not exist.
"""

import logging
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from funcprov.errors import EmptyProviderSetError, NameCollisionError, UnknownNameError
from funcprov.model import CaseSensitivity, Info, InfoSet, Name
from funcprov.providers import FunctionProvider

logger = logging.getLogger(__name__)


def _distinct(providers: Iterable[FunctionProvider]) -> List[FunctionProvider]:
    """Members in first-seen order; the same instance counts once."""
    seen = set()
    distinct = []
    for provider in providers:
        if id(provider) not in seen:
            seen.add(id(provider))
            distinct.append(provider)
    return distinct


def _aggregate_case_sensitivity(providers: Sequence[FunctionProvider]) -> CaseSensitivity:
    # one insensitive member makes names collide regardless of case
    if all(p.case_sensitivity is CaseSensitivity.SENSITIVE for p in providers):
        return CaseSensitivity.SENSITIVE
    return CaseSensitivity.INSENSITIVE


class AggregatingProvider(FunctionProvider):
    """
    The union of several providers with no shared names.

    Every advertised name of every member is resolved once, without
    values, at construction. Resolving with values is forwarded to the
    member that owns the name.

    Raises:
        EmptyProviderSetError: If no providers are given
        NameCollisionError: If two members advertise the same name
    """

    def __init__(self, providers: Iterable[FunctionProvider], context: Any = None):
        providers = _distinct(providers)
        if not providers:
            raise EmptyProviderSetError()

        case_sensitivity = _aggregate_case_sensitivity(providers)

        owners: Dict[str, List[Tuple[Info, FunctionProvider]]] = {}
        for provider in providers:
            for info in provider.infos():
                owners.setdefault(case_sensitivity.fold(info.name.value), []).append((info, provider))

        collisions: Dict[Name, List[str]] = {}
        for owned in sorted(owners.values(), key=lambda o: o[0][0].name):
            if len(owned) > 1:
                collisions[owned[0][0].name] = sorted(info.token for info, _ in owned)
        if collisions:
            logger.debug("Aggregation rejected, %d colliding names", len(collisions))
            raise NameCollisionError(collisions)

        functions: Dict[str, Any] = {}
        owner_of: Dict[str, Tuple[Info, FunctionProvider]] = {}
        for key, [(info, provider)] in owners.items():
            functions[key] = provider.resolve_name(info.name, [], context)
            owner_of[key] = (info, provider)

        self._providers = tuple(providers)
        self._case_sensitivity = case_sensitivity
        self._functions = functions
        self._owner_of = owner_of
        self._infos = InfoSet.of((info for info, _ in owner_of.values()), case_sensitivity)
        logger.debug("Aggregated %d providers into %d functions", len(providers), len(self._infos))

    @property
    def providers(self) -> Tuple[FunctionProvider, ...]:
        return self._providers

    @property
    def case_sensitivity(self) -> CaseSensitivity:
        return self._case_sensitivity

    def resolve_name(self, name: Name, values: Sequence[Any], context: Any = None) -> Any:
        key = self._case_sensitivity.fold(name.value)
        if key not in self._functions:
            raise UnknownNameError(name)
        if not values:
            return self._functions[key]
        info, provider = self._owner_of[key]
        return provider.resolve_name(info.name, values, context)

    def infos(self) -> InfoSet:
        return self._infos


def aggregate(providers: Iterable[FunctionProvider], context: Any = None) -> FunctionProvider:
    """
    Merge providers into one.

    A single provider (after dropping repeats of the same instance) is
    returned as is, not wrapped.

    Args:
        providers: Member providers
        context: Passed to every member while resolving its catalog

    Raises:
        EmptyProviderSetError: If providers is empty
        NameCollisionError: If two members advertise the same name
    """
    providers = _distinct(providers)
    if not providers:
        raise EmptyProviderSetError()
    if len(providers) == 1:
        return providers[0]
    return AggregatingProvider(providers, context)


__all__ = ["AggregatingProvider", "aggregate"]
