"""
Tests for composition views (aliasing, filtering, renaming, merged mapping).

Scenario used throughout the aliasing tests:
    wrapped provider: f1, f2, f3
    alias set:        f1, a2 f2, a4 f3("V") https://example.com/functions/a4
"""

import logging
import warnings

import pytest
from funcprov.aliases import AliasSet
from funcprov.errors import AliasArgumentMismatchError, UnknownNameError
from funcprov.examples import (
    MATH_URL,
    SCENARIO_ALIASES,
    TEXT_URL,
    build_math_provider,
    build_scenario_provider,
    build_text_provider,
)
from funcprov.model import CaseSensitivity, Info, InfoSet, Name
from funcprov.selector import Selector
from funcprov.views import AliasProvider, FilteredProvider, MergedMappedProvider, RenamedProvider

SENSITIVE = CaseSensitivity.SENSITIVE


def infos(*pairs):
    return InfoSet.of([Info(Name(name), token) for name, token in pairs], SENSITIVE)


@pytest.fixture
def scenario():
    return build_scenario_provider(SENSITIVE)


@pytest.fixture
def view(scenario):
    return AliasProvider(SCENARIO_ALIASES, scenario)


@pytest.fixture
def math():
    return build_math_provider(SENSITIVE)


class TestAliasProvider:
    """Test the aliasing view."""

    def test_infos(self, view):
        """f1 passes through, f2 and f3 hide behind a2 and a4."""
        assert view.infos().names() == (Name("a2"), Name("a4"), Name("f1"))
        assert view.infos().get("a4").token == "https://example.com/functions/a4"

    def test_selector_alias(self, view, scenario):
        """a4 is f3 configured with "V"."""
        assert view.resolve("a4") is scenario.resolve("f3", ["V"])
        assert view.resolve("a4")("x") == "Vx"

    def test_rename_alias(self, view, scenario):
        """a2 is f2."""
        assert view.resolve("a2") is scenario.resolve("f2")

    def test_alias_with_values_rejected(self, view):
        """Aliases carry their own values."""
        with pytest.raises(AliasArgumentMismatchError) as exc:
            view.resolve("a2", ["x"])
        assert exc.value.values == ["x"]
        with pytest.raises(AliasArgumentMismatchError):
            view.resolve("a4", ["x"])

    def test_alias_selector_with_values_rejected(self, view):
        """Values written in a selector count too."""
        with pytest.raises(AliasArgumentMismatchError):
            view.resolve(Selector.parse('a2("x")'))

    def test_pass_through(self, view, scenario):
        """Pass-through names are forwarded with their values."""
        assert view.resolve("f1") is scenario.resolve("f1")
        assert view.resolve("f1", ["a"]) is scenario.resolve("f1", ["a"])

    def test_hidden_targets(self, view):
        """Alias targets are not visible under their own names."""
        with pytest.raises(UnknownNameError):
            view.resolve("f2")
        with pytest.raises(UnknownNameError):
            view.resolve("f3")

    def test_unknown(self, view):
        """Names the alias set does not mention are unknown."""
        with pytest.raises(UnknownNameError):
            view.resolve("zz")

    def test_alias_equivalence(self, view, scenario):
        """Every alias resolves like its target selector on the wrapped provider."""
        for alias in view.aliases.alias_names():
            assert view.resolve(alias) is scenario.resolve(view.aliases.alias(alias))

    def test_nested_alias_in_selector(self, view, scenario):
        """Nested names go through the alias view."""
        function = view.resolve(Selector.parse("f1(a2)"))
        assert function.parameters == (scenario.resolve("f2"),)

    def test_accepts_alias_set(self, scenario):
        """A parsed AliasSet works as well as text."""
        view = AliasProvider(AliasSet.parse("f1"), scenario)
        assert view.infos().names() == (Name("f1"),)

    def test_case_sensitivity(self, view, scenario):
        """The view compares names like the wrapped provider."""
        assert view.case_sensitivity is scenario.case_sensitivity

    def test_debug_record_formats_lazily(self, scenario, caplog):
        """The construction record defers formatting to the logging handler."""
        caplog.set_level(logging.DEBUG, logger="funcprov.views")
        aliases = AliasSet.parse("f1")
        AliasProvider(aliases, scenario)

        (record,) = [r for r in caplog.records if r.name == "funcprov.views"]
        assert record.args == (aliases, 1)
        assert record.getMessage() == f"AliasProvider created: {aliases!r} -> 1 infos"


class TestFilteredProvider:
    """Test the filtering view."""

    def test_infos_are_declared(self, math):
        """infos() is the declared set."""
        declared = infos(("abs", MATH_URL + "abs"), ("max", MATH_URL + "max"))
        assert FilteredProvider(math, declared).infos() is declared

    def test_resolve_declared(self, math):
        """Declared names are forwarded."""
        view = FilteredProvider(math, infos(("abs", MATH_URL + "abs")))
        assert view.resolve("abs") is math.resolve("abs")

    def test_excluded_name(self, math):
        """Names outside the declared set are unknown even if the wrapped provider has them."""
        view = FilteredProvider(math, infos(("abs", MATH_URL + "abs")))
        with pytest.raises(UnknownNameError):
            view.resolve("min")
        with pytest.raises(UnknownNameError):
            view.resolve(Selector.parse("round(2)"))

    def test_excluded_nested_name(self, math):
        """Nested selector names are checked too."""
        view = FilteredProvider(math, infos(("max", MATH_URL + "max")))
        with pytest.raises(UnknownNameError):
            view.resolve(Selector.parse("max(min)"))

    def test_declared_superset(self, math):
        """A declared name the wrapped provider lacks fails in the wrapped provider."""
        view = FilteredProvider(math, infos(("missing", "https://example.com/missing")))
        assert view.infos().names() == (Name("missing"),)
        with pytest.raises(UnknownNameError):
            view.resolve("missing")

    def test_containment(self, math):
        """infos() never includes a name outside the declared subset."""
        declared = math.infos().filter(infos(("x", MATH_URL + "abs"), ("y", MATH_URL + "sum")))
        view = FilteredProvider(math, declared)
        assert set(view.infos().names()) <= set(declared.names())
        assert view.resolve("sum")(1, 2) == 3


class TestRenamedProvider:
    """Test the renaming view."""

    @pytest.fixture
    def renamed(self, math):
        return RenamedProvider(
            infos(
                ("absolute", MATH_URL + "abs"),
                ("rounded", MATH_URL + "round"),
                ("ghost", "https://example.com/ghost"),
            ),
            math,
        )

    def test_infos_matched_only(self, renamed):
        """Only infos with a matching token are advertised."""
        assert renamed.infos().names() == (Name("absolute"), Name("rounded"))

    def test_resolve_relabels(self, renamed):
        """The function carries the name that was asked for."""
        function = renamed.resolve("absolute")
        assert function.name == Name("absolute")
        assert function(-2) == 2

    def test_resolve_with_values(self, renamed):
        """Values are forwarded to the original function."""
        function = renamed.resolve("rounded", [2])
        assert function.name == Name("rounded")
        assert function(3.14159) == 3.14

    def test_original_names_hidden(self, renamed):
        """Original and unmatched names are unknown."""
        with pytest.raises(UnknownNameError):
            renamed.resolve("abs")
        with pytest.raises(UnknownNameError):
            renamed.resolve("ghost")

    def test_mapping(self, renamed):
        """Both directions of the mapping."""
        assert renamed.original_name(Name("absolute")) == Name("abs")
        assert renamed.renamed(Name("round")) == Name("rounded")
        assert renamed.original_name(Name("abs")) is None

    def test_duplicate_token_warns(self, math):
        """A wrapped catalog reusing a token warns and maps to the first name."""
        aliased = AliasProvider("a abs, b abs", math)
        with pytest.warns(UserWarning, match="advertised by both a and b"):
            renamed = RenamedProvider(infos(("x", MATH_URL + "abs")), aliased)
        assert renamed.original_name(Name("x")) == Name("a")
        assert renamed.resolve("x")(-5) == 5

    def test_no_warning_for_unique_tokens(self, math):
        """Unique tokens map silently."""
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            RenamedProvider(infos(("x", MATH_URL + "abs")), math)


class TestMergedMappedProvider:
    """Test the merged mapped view."""

    @pytest.fixture
    def text(self):
        return build_text_provider(SENSITIVE)

    def test_infos(self, text):
        """Renamed infos replace the originals; the rest stay."""
        view = MergedMappedProvider(infos(("shout", TEXT_URL + "upper")), text)
        assert [n.value for n in view.infos().names()] == ["concat", "lower", "repeat", "shout", "wrap"]

    def test_resolve_renamed(self, text):
        """Renamed names resolve to the original function under the new name."""
        view = MergedMappedProvider(infos(("shout", TEXT_URL + "upper")), text)
        function = view.resolve("shout")
        assert function.name == Name("shout")
        assert function("hi") == "HI"

    def test_resolve_unchanged(self, text):
        """Untouched names resolve as themselves."""
        view = MergedMappedProvider(infos(("shout", TEXT_URL + "upper")), text)
        assert view.resolve("lower") is text.resolve("lower")

    def test_original_name_hidden(self, text):
        """A renamed function is not reachable by its old name."""
        view = MergedMappedProvider(infos(("shout", TEXT_URL + "upper")), text)
        with pytest.raises(UnknownNameError):
            view.resolve("upper")

    def test_no_renames(self, text):
        """Without matching renames the catalog is unchanged."""
        view = MergedMappedProvider(InfoSet.empty(SENSITIVE), text)
        assert view.infos() is text.infos()


class TestStacking:
    """Views wrap any provider, including other views."""

    def test_filter_over_alias(self, view, scenario):
        """A filter over an alias view exposes a subset of the aliases."""
        filtered = FilteredProvider(view, view.infos().delete_if(lambda i: i.name.value == "a2"))
        assert filtered.resolve("a4") is scenario.resolve("f3", ["V"])
        with pytest.raises(UnknownNameError):
            filtered.resolve("a2")

    def test_rename_over_alias(self, view, scenario):
        """Renaming matches alias tokens."""
        renamed = RenamedProvider(infos(("v-prefix", "https://example.com/functions/a4")), view)
        function = renamed.resolve("v-prefix")
        assert function.name == Name("v-prefix")
        assert function("x") == "Vx"
