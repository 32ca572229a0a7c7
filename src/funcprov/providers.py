"""
Provider Contract and Leaf Providers

A provider lists a catalog (infos) and resolves names or selectors to
functions. Composition views (funcprov.views) and the aggregating
provider (funcprov.aggregate) implement the same contract, so any of
them can wrap any other.

ARCHITECTURAL RULE:
    Providers are immutable after construction.
    resolve is synchronous and in-memory; any lazy loading belongs to
    a leaf provider, never to a view.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from funcprov.errors import DuplicateNameError, UnknownNameError
from funcprov.functions import NamedFunction
from funcprov.model import CaseSensitivity, Info, InfoSet, Name, _resolve_case_sensitivity, as_name
from funcprov.selector import Selector

logger = logging.getLogger(__name__)


class FunctionProvider(ABC):
    """
    Resolves function names and selectors and advertises a catalog.

    Subclasses implement resolve_name(), infos() and case_sensitivity.
    resolve_selector() defaults to evaluating the selector against
    resolve_name(), so nested names go through the same provider.
    """

    @property
    @abstractmethod
    def case_sensitivity(self) -> CaseSensitivity:
        ...

    @abstractmethod
    def resolve_name(self, name: Name, values: Sequence[Any], context: Any = None) -> Any:
        """
        Return the function for name configured with values.

        Raises:
            UnknownNameError: If this provider has no such function
        """

    @abstractmethod
    def infos(self) -> InfoSet:
        """Every function this provider advertises."""

    def resolve_selector(self, selector: Selector, context: Any = None) -> Any:
        return selector.evaluate(self.resolve_name, context)

    def resolve(self, target: Any, values: Sequence[Any] = (), context: Any = None) -> Any:
        """
        Resolve a Name, plain name text or Selector.

        Selectors carry their own values, so values must be empty for them.
        """
        if isinstance(target, Selector):
            if values:
                raise TypeError(f"Selector {target} takes its values from its text, got {len(values)}")
            return self.resolve_selector(target, context)
        return self.resolve_name(as_name(target, self.case_sensitivity), list(values), context)

    def __str__(self) -> str:
        return ", ".join(n.value for n in self.infos().names())


class BasicProvider(FunctionProvider):
    """
    A leaf provider over a fixed batch of functions.

    Every function is advertised with the token base_url + name.
    Resolving with values returns the function with those values bound;
    that materialization is cached per (name, values) so repeated
    selector evaluation is cheap.

    Raises:
        ValueError: If functions is empty
        DuplicateNameError: If two functions share a name
    """

    def __init__(self, base_url: str, functions: Iterable[NamedFunction],
                 case_sensitivity: Optional[CaseSensitivity] = None):
        case_sensitivity = _resolve_case_sensitivity(case_sensitivity)
        functions = list(functions)
        if not functions:
            raise ValueError("Functions cannot be empty")
        if not base_url.endswith("/"):
            base_url += "/"

        name_to_function: Dict[str, NamedFunction] = {}
        duplicates: List[Name] = []
        for function in functions:
            function = function.with_name(function.name.with_case_sensitivity(case_sensitivity))
            key = case_sensitivity.fold(function.name.value)
            if key in name_to_function:
                duplicates.append(function.name)
            name_to_function[key] = function
        if duplicates:
            raise DuplicateNameError(sorted(duplicates))

        self._case_sensitivity = case_sensitivity
        self._name_to_function = name_to_function
        self._materialized: Dict[Tuple[str, Tuple[Tuple[type, Any], ...]], NamedFunction] = {}
        self._infos = InfoSet.of(
            (Info(f.name, base_url + f.name.value) for f in name_to_function.values()),
            case_sensitivity,
        )
        logger.debug("BasicProvider %s created with %d functions", base_url, len(self._infos))

    @classmethod
    def from_callables(cls, base_url: str, callables: Mapping[str, Callable[..., Any]],
                       case_sensitivity: Optional[CaseSensitivity] = None) -> "BasicProvider":
        case_sensitivity = _resolve_case_sensitivity(case_sensitivity)
        return cls(
            base_url,
            (NamedFunction(Name(name, case_sensitivity), f) for name, f in callables.items()),
            case_sensitivity,
        )

    @property
    def case_sensitivity(self) -> CaseSensitivity:
        return self._case_sensitivity

    def resolve_name(self, name: Name, values: Sequence[Any], context: Any = None) -> NamedFunction:
        key = self._case_sensitivity.fold(name.value)
        function = self._name_to_function.get(key)
        if function is None:
            raise UnknownNameError(name)
        if not values:
            return function

        # 1, 1.0 and True hash alike; the type keeps their materializations apart
        cache_key = (key, tuple((type(v), v) for v in values))
        try:
            hash(cache_key)
        except TypeError:
            return function.with_parameters(values)
        materialized = self._materialized.get(cache_key)
        if materialized is None:
            materialized = self._materialized.setdefault(cache_key, function.with_parameters(values))
        return materialized

    def infos(self) -> InfoSet:
        return self._infos


class EmptyProvider(FunctionProvider):
    """Advertises nothing and resolves nothing."""

    _instances: Dict[CaseSensitivity, "EmptyProvider"] = {}

    def __init__(self, case_sensitivity: CaseSensitivity):
        self._case_sensitivity = case_sensitivity

    @classmethod
    def of(cls, case_sensitivity: Optional[CaseSensitivity] = None) -> "EmptyProvider":
        case_sensitivity = _resolve_case_sensitivity(case_sensitivity)
        instance = cls._instances.get(case_sensitivity)
        if instance is None:
            instance = cls._instances.setdefault(case_sensitivity, cls(case_sensitivity))
        return instance

    @property
    def case_sensitivity(self) -> CaseSensitivity:
        return self._case_sensitivity

    def resolve_name(self, name: Name, values: Sequence[Any], context: Any = None) -> Any:
        raise UnknownNameError(name)

    def resolve_selector(self, selector: Selector, context: Any = None) -> Any:
        raise UnknownNameError(selector.name)

    def infos(self) -> InfoSet:
        return InfoSet.empty(self._case_sensitivity)

    def __str__(self) -> str:
        return type(self).__name__


__all__ = [
    "FunctionProvider",
    "BasicProvider",
    "EmptyProvider",
]
