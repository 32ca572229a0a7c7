"""
Tests for alias sets.

Alias set text, e.g.:
    f1, a2 f2, a4 f3("V") tok4

We need to:
1. Parse pass-through, rename and selector entries
2. Split only on top level commas
3. Reject malformed text with ParseError naming the offending entry
4. Merge against a wrapped catalog
5. Keep canonical text stable under re-parsing
"""

import pytest
from funcprov.aliases import Alias, AliasClaim, AliasKind, AliasSet
from funcprov.errors import DuplicateNameError, ParseError
from funcprov.model import CaseSensitivity, Info, InfoSet, Name
from funcprov.selector import Selector

SCENARIO = 'f1, a2 f2, a4 f3("V") tok4'


@pytest.fixture
def aliases():
    return AliasSet.parse(SCENARIO)


@pytest.fixture
def wrapped_infos():
    return InfoSet.of([Info(Name(n), f"https://example.com/{n}") for n in ("f1", "f2", "f3")])


class TestAliasSetParse:
    """Test AliasSet.parse."""

    def test_entries_sorted(self, aliases):
        """Entries are sorted by alias name."""
        assert aliases.names() == (Name("a2"), Name("a4"), Name("f1"))

    def test_entry_kinds(self, aliases):
        """Each entry shape is recognised."""
        assert aliases.get("f1").kind is AliasKind.PASS_THROUGH
        assert aliases.get("a2").kind is AliasKind.RENAME
        assert aliases.get("a4").kind is AliasKind.SELECTOR
        assert aliases.get("a4").token == "tok4"

    def test_canonical_text(self, aliases):
        """Entries are joined with ', ' in name order."""
        assert aliases.text() == 'a2 f2, a4 f3("V") tok4, f1'

    def test_round_trip(self, aliases):
        """Re-parsing canonical text gives an equal set."""
        assert AliasSet.parse(aliases.text()) == aliases
        assert AliasSet.parse(aliases.text()).text() == aliases.text()

    def test_whitespace_insignificant(self, aliases):
        """Whitespace around commas and the token does not matter."""
        assert AliasSet.parse('  f1 ,a2   f2,  a4 f3("V")   tok4 ') == aliases

    def test_commas_inside_parameters(self):
        """Commas inside parentheses and strings do not split entries."""
        parsed = AliasSet.parse('a1 f(1, 2), a2 g("x,y")')
        assert len(parsed) == 2
        assert parsed.alias("a1").parameters() == [1, 2]
        assert parsed.alias("a2").parameters() == ["x,y"]

    def test_rename_with_token(self):
        """A plain target may carry a token."""
        parsed = AliasSet.parse("a2 f2 https://example.com/a2")
        assert parsed.get("a2").kind is AliasKind.SELECTOR
        assert parsed.text() == "a2 f2 https://example.com/a2"

    def test_self_rename_is_pass_through(self):
        """'abs abs' is the same as 'abs'."""
        parsed = AliasSet.parse("abs abs")
        assert parsed.text() == "abs"
        assert parsed.claim("abs") is AliasClaim.PASS_THROUGH

    def test_empty(self):
        """Blank text is the empty set."""
        assert AliasSet.parse("") is AliasSet.empty()
        assert AliasSet.parse("   ") is AliasSet.empty()

    @pytest.mark.parametrize("text", [
        "a1 f(1",
        'a1 f("x',
        "a1 f)",
        "1abc",
        "a1 f(1) tok extra",
        "a1 f g h",
        "f1,,f2",
        "a1 f(1)tok",
        "a1 f!",
        "a1 f(1 2)",
    ])
    def test_malformed(self, text):
        """Malformed text raises ParseError."""
        with pytest.raises(ParseError):
            AliasSet.parse(text)

    def test_duplicate_alias(self):
        """An alias declared twice is rejected, naming both entries."""
        with pytest.raises(ParseError) as exc:
            AliasSet.parse("f1, a2 f2, a2 f3")
        assert "a2 f3" in str(exc.value)
        assert "a2 f2" in str(exc.value)

    def test_duplicate_alias_case_insensitive(self):
        """Insensitive sets compare alias names folded."""
        with pytest.raises(ParseError):
            AliasSet.parse("abs, ABS", CaseSensitivity.INSENSITIVE)
        assert len(AliasSet.parse("abs, ABS", CaseSensitivity.SENSITIVE)) == 2

    def test_error_names_offending_entry(self):
        """The message quotes the bad entry."""
        with pytest.raises(ParseError) as exc:
            AliasSet.parse("f1, a2 f2 x y")
        assert "a2 f2 x y" in str(exc.value)


class TestAliasLookups:
    """Test alias(), alias_or_name() and claim()."""

    def test_alias_returns_selector(self, aliases):
        """Alias entries return their target selector."""
        assert aliases.alias("a2") == Selector(Name("f2"))
        assert aliases.alias("a4") == Selector(Name("f3"), '("V")')

    def test_alias_none_for_names(self, aliases):
        """Pass-through and unknown names have no alias."""
        assert aliases.alias("f1") is None
        assert aliases.alias("zz") is None

    def test_alias_or_name(self, aliases):
        """Names not claimed as aliases come back unchanged."""
        assert aliases.alias_or_name("f1") == Name("f1")
        assert aliases.alias_or_name("zz") == Name("zz")
        assert aliases.alias_or_name("a2") is None
        assert aliases.alias_or_name(Name("a4")) is None

    def test_claim(self, aliases):
        """Three distinct outcomes."""
        assert aliases.claim("f1") is AliasClaim.PASS_THROUGH
        assert aliases.claim("a4") is AliasClaim.ALIAS
        assert aliases.claim("f2") is AliasClaim.UNCLAIMED

    def test_contains_name_or_alias(self, aliases):
        """Targets are not names of the set."""
        assert aliases.contains_name_or_alias("a2")
        assert aliases.contains_name_or_alias("f1")
        assert not aliases.contains_name_or_alias("f2")

    def test_alias_and_target_names(self, aliases):
        """Aliases and the names they forward to."""
        assert aliases.alias_names() == (Name("a2"), Name("a4"))
        assert aliases.target_names() == (Name("f1"), Name("f2"), Name("f3"))

    def test_insensitive_lookup(self):
        """Lookups fold case in insensitive sets."""
        parsed = AliasSet.parse("Total sum", CaseSensitivity.INSENSITIVE)
        assert parsed.alias("TOTAL").name == Name("sum", CaseSensitivity.INSENSITIVE)


class TestAliasSetMerge:
    """Test merge() against a wrapped catalog."""

    def test_scenario(self, aliases, wrapped_infos):
        """f1 stays, f2 and f3 hide behind a2 and a4."""
        merged = aliases.merge(wrapped_infos)
        assert merged.names() == (Name("a2"), Name("a4"), Name("f1"))

    def test_tokens(self, aliases, wrapped_infos):
        """Override token, else the target's token."""
        merged = aliases.merge(wrapped_infos)
        assert merged.get("a4").token == "tok4"
        assert merged.get("a2").token == "https://example.com/f2"
        assert merged.get("f1") is wrapped_infos.get("f1")

    def test_missing_pass_through_dropped(self, wrapped_infos):
        """Pass-through names the wrapped catalog lacks are not advertised."""
        merged = AliasSet.parse("f1, zz").merge(wrapped_infos)
        assert merged.names() == (Name("f1"),)

    def test_synthesized_token(self, wrapped_infos):
        """Aliases of unknown targets get a token from their own name."""
        merged = AliasSet.parse("a9 missing").merge(wrapped_infos)
        assert merged.get("a9").token == "urn:alias:a9"


class TestAliasSetAlgebra:
    """Test set operations."""

    def test_empty_singleton(self):
        """One empty set per case sensitivity."""
        assert AliasSet.empty(CaseSensitivity.SENSITIVE) is AliasSet.empty(CaseSensitivity.SENSITIVE)
        assert AliasSet.empty(CaseSensitivity.SENSITIVE) is not AliasSet.empty(CaseSensitivity.INSENSITIVE)

    def test_concat(self, aliases):
        """New entries are added; existing ones keep self."""
        assert aliases.concat(Alias(Name("f1"))) is aliases
        assert aliases.concat(Alias(Name("b1"))).names()[0] == Name("a2")
        assert Name("b1") in aliases.concat(Alias(Name("b1"))).names()

    def test_concat_conflict(self, aliases):
        """A different entry with an existing name is rejected."""
        with pytest.raises(DuplicateNameError):
            aliases.concat(Alias(Name("f1"), Selector(Name("f9"))))

    def test_concat_or_replace(self, aliases):
        """Entries with the same name are replaced."""
        replaced = aliases.concat_or_replace(Alias(Name("a2"), Selector(Name("f9"))))
        assert replaced.alias("a2") == Selector(Name("f9"))
        assert len(replaced) == 3

    def test_delete(self, aliases):
        """Deleting an absent entry keeps self."""
        assert aliases.delete(Alias(Name("zz"))) is aliases
        assert aliases.delete(aliases.get("f1")).names() == (Name("a2"), Name("a4"))

    def test_delete_and_keep_by_name(self, aliases):
        """Remove or keep entries by alias name."""
        assert aliases.delete_alias_or_name_all(["a2", "f1"]).names() == (Name("a4"),)
        assert aliases.keep_alias_or_name_all([Name("a2")]).names() == (Name("a2"),)
        assert aliases.keep_alias_or_name_all(["a2", "a4", "f1"]) is aliases

    def test_replace(self, aliases):
        """Replace swaps one entry."""
        replaced = aliases.replace(aliases.get("f1"), Alias(Name("f0")))
        assert replaced.names() == (Name("a2"), Name("a4"), Name("f0"))

    def test_first_last(self, aliases):
        """Ends of the set."""
        assert aliases.first().name == Name("a2")
        assert aliases.last().name == Name("f1")

    def test_head_tail(self, aliases):
        """Slices by alias name."""
        assert aliases.head_set("b").names() == (Name("a2"), Name("a4"))
        assert aliases.tail_set("b").names() == (Name("f1"),)


class TestAlias:
    """Test Alias entries."""

    def test_pass_through_cannot_have_token(self):
        """Only selector aliases carry tokens."""
        with pytest.raises(ValueError):
            Alias(Name("a"), None, "tok")

    @pytest.mark.parametrize("token", ["https://example.com/a,b", "tok(1)", "tok)", '"tok"'])
    def test_token_with_separator(self, token):
        """Tokens cannot hold commas, parentheses or quotes of the set text."""
        with pytest.raises(ValueError):
            Alias(Name("a"), Selector.parse("f(1)"), token)

    def test_token_round_trips_through_text(self):
        """A valid override token survives text then parse."""
        aliases = AliasSet.of([Alias(Name("a"), Selector.parse("f(1)"), "https://example.com/a;b")])
        assert AliasSet.parse(aliases.text()) == aliases

    def test_target_must_be_parameter_list(self):
        """Raw value text is not a valid alias target."""
        with pytest.raises(ValueError):
            Alias(Name("a"), Selector(Name("f"), "@@"))

    def test_text(self):
        """Each kind renders its own shape."""
        assert Alias(Name("f1")).text() == "f1"
        assert Alias(Name("a2"), Selector(Name("f2"))).text() == "a2 f2"
        assert Alias(Name("a4"), Selector(Name("f3"), '("V")'), "tok4").text() == 'a4 f3("V") tok4'
