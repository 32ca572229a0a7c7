"""
Composition Views

Each view wraps exactly one provider and presents a different catalog:

    AliasProvider          names, renames and configured aliases from an AliasSet
    FilteredProvider       only an explicitly declared subset
    RenamedProvider        new names matched to the wrapped catalog by token
    MergedMappedProvider   the wrapped catalog with some names renamed by token

Views share the wrapped provider, they never copy it, and hold only
state fixed at construction.
"""

import logging
import warnings
from typing import Any, Dict, Optional, Sequence, Union

from funcprov.aliases import AliasClaim, AliasSet
from funcprov.errors import AliasArgumentMismatchError, UnknownNameError
from funcprov.functions import relabel
from funcprov.model import CaseSensitivity, InfoSet, Name
from funcprov.providers import FunctionProvider
from funcprov.selector import Selector

logger = logging.getLogger(__name__)


class AliasProvider(FunctionProvider):
    """
    Exposes the wrapped provider through an AliasSet.

    Alias entries resolve their target selector against the wrapped
    provider and must be called without values. Pass-through entries
    are forwarded unchanged. Any other name is unknown, even when the
    wrapped provider has it.

    Example:
        AliasProvider('f1, a2 f2, a4 f3("V") https://example.com/a4', provider)

        a4 resolves to provider f3 configured with "V"
        f2 and f3 are only reachable through their aliases
    """

    def __init__(self, aliases: Union[AliasSet, str], provider: FunctionProvider):
        if isinstance(aliases, str):
            aliases = AliasSet.parse(aliases, provider.case_sensitivity)
        self._aliases = aliases
        self._provider = provider
        self._infos = aliases.merge(provider.infos())
        logger.debug("AliasProvider created: %r -> %d infos", aliases, len(self._infos))

    @property
    def aliases(self) -> AliasSet:
        return self._aliases

    @property
    def case_sensitivity(self) -> CaseSensitivity:
        return self._provider.case_sensitivity

    def resolve_name(self, name: Name, values: Sequence[Any], context: Any = None) -> Any:
        aliases = self._aliases
        claim = aliases.claim(name)

        if claim is AliasClaim.ALIAS:
            if values:
                raise AliasArgumentMismatchError(name, values)
            # the wrapped provider is expected to cache selector materialization
            return self._provider.resolve_selector(aliases.alias(name), context)

        if claim is AliasClaim.PASS_THROUGH:
            return self._provider.resolve_name(name, values, context)

        raise UnknownNameError(name)

    def infos(self) -> InfoSet:
        return self._infos


class FilteredProvider(FunctionProvider):
    """
    Declares exactly which functions of the wrapped provider are visible.

    infos() is the declared set as given, it is not derived from the
    wrapped provider. Every resolve checks the name, and the name of
    every nested selector parameter, against that set first.
    """

    def __init__(self, provider: FunctionProvider, infos: InfoSet):
        self._provider = provider
        self._infos = infos
        logger.debug("FilteredProvider created exposing %d infos", len(infos))

    @property
    def case_sensitivity(self) -> CaseSensitivity:
        return self._provider.case_sensitivity

    def _guard(self, name: Name) -> Name:
        if not self._infos.contains_name(name):
            raise UnknownNameError(name)
        return name

    def resolve_name(self, name: Name, values: Sequence[Any], context: Any = None) -> Any:
        return self._provider.resolve_name(self._guard(name), values, context)

    def resolve_selector(self, selector: Selector, context: Any = None) -> Any:
        self._guard(selector.name)
        return selector.evaluate(self.resolve_name, context)

    def infos(self) -> InfoSet:
        return self._infos


def _token_to_name(infos: InfoSet) -> Dict[str, Name]:
    token_to_name: Dict[str, Name] = {}
    for info in infos:
        existing = token_to_name.setdefault(info.token, info.name)
        if existing is not info.name:
            warnings.warn(
                f"Token {info.token} advertised by both {existing} and {info.name}, using {existing}",
                UserWarning,
            )
    return token_to_name


class RenamedProvider(FunctionProvider):
    """
    Presents functions of the wrapped provider under new names.

    Each new info is matched to a wrapped info with the same token.
    Only matched infos are advertised; resolving a new name forwards the
    original name and re-labels the returned function with the new name.
    """

    def __init__(self, infos: InfoSet, provider: FunctionProvider):
        case_sensitivity = provider.case_sensitivity
        token_to_original = _token_to_name(provider.infos())

        new_to_original: Dict[str, Name] = {}
        original_to_new: Dict[str, Name] = {}
        visible = []
        for info in infos:
            original = token_to_original.get(info.token)
            if original is None:
                continue
            new_to_original[case_sensitivity.fold(info.name.value)] = original
            original_to_new.setdefault(case_sensitivity.fold(original.value), info.name)
            visible.append(info)

        self._provider = provider
        self._new_to_original = new_to_original
        self._original_to_new = original_to_new
        self._infos = InfoSet.of(visible, case_sensitivity)
        logger.debug("RenamedProvider created: %d infos, %d matched", len(infos), len(visible))

    @property
    def case_sensitivity(self) -> CaseSensitivity:
        return self._provider.case_sensitivity

    def original_name(self, name: Name) -> Optional[Name]:
        return self._new_to_original.get(self.case_sensitivity.fold(name.value))

    def renamed(self, original: Name) -> Optional[Name]:
        return self._original_to_new.get(self.case_sensitivity.fold(original.value))

    def resolve_name(self, name: Name, values: Sequence[Any], context: Any = None) -> Any:
        original = self.original_name(name)
        if original is None:
            raise UnknownNameError(name)
        return relabel(self._provider.resolve_name(original, values, context), name)

    def infos(self) -> InfoSet:
        return self._infos


class MergedMappedProvider(FunctionProvider):
    """
    The wrapped catalog with some functions renamed.

    Wrapped infos whose token matches one of infos take that info's
    name; all other wrapped infos stay as they are. A renamed function
    is no longer reachable by its original name.
    """

    def __init__(self, infos: InfoSet, provider: FunctionProvider):
        case_sensitivity = provider.case_sensitivity
        provider_infos = provider.infos()

        renames: Dict[str, Name] = {}
        for info in infos:
            renames.setdefault(info.token, info.name)

        name_to_original: Dict[str, Name] = {}
        for info in provider_infos:
            name = renames.get(info.token, info.name)
            name_to_original[case_sensitivity.fold(name.value)] = info.name

        self._provider = provider
        self._name_to_original = name_to_original
        self._infos = provider_infos.rename_if_present(infos)
        logger.debug("MergedMappedProvider created with %d infos", len(self._infos))

    @property
    def case_sensitivity(self) -> CaseSensitivity:
        return self._provider.case_sensitivity

    def resolve_name(self, name: Name, values: Sequence[Any], context: Any = None) -> Any:
        original = self._name_to_original.get(self.case_sensitivity.fold(name.value))
        if original is None:
            raise UnknownNameError(name)
        return relabel(self._provider.resolve_name(original, values, context), name)

    def infos(self) -> InfoSet:
        return self._infos


__all__ = [
    "AliasProvider",
    "FilteredProvider",
    "RenamedProvider",
    "MergedMappedProvider",
]
