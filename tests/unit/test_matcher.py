"""
Unit tests for the query matcher.

Covers string comparison (exact / near / none), regex queries, persistent
id handling, facet and aggregate matching, and candidate ranking.
"""

import pytest

from tagmatch.config import Settings
from tagmatch.facets import NameFacet
from tagmatch.identity import IdentityStore, Player, Team
from tagmatch.matching import (
    FilterOptions,
    MatchOptions,
    Matcher,
    Strength,
    match_candidates,
    match_string,
    rank_matches,
)


class TestCompare:
    """Tests for comparing the query against one string."""

    def test_exact_ignoring_case(self):
        assert match_string("foo", "Foo") == FilterOptions.NAME

    def test_case_sensitive(self):
        assert match_string("foo", "Foo", MatchOptions(ignore_case=False)) == FilterOptions.NONE
        assert match_string("Foo", "Foo", MatchOptions(ignore_case=False)) == FilterOptions.NAME

    def test_lookalikes_are_exact(self):
        assert match_string("Splat", "Ѕрlаt") == FilterOptions.NAME

    def test_lookalikes_need_near_character_recognition(self):
        options = MatchOptions(near_character_recognition=False)
        assert match_string("Splat", "Ѕрlаt", options) == FilterOptions.NONE

    def test_containment_is_near(self):
        assert match_string("slush", "Slushie") == FilterOptions.NEAR_NAME

    def test_short_containment_is_not_near(self):
        assert match_string("sl", "Slushie") == FilterOptions.NONE

    def test_single_typo_is_near(self):
        assert match_string("Slishie", "Slushie") == FilterOptions.NEAR_NAME

    def test_unrelated(self):
        assert match_string("Slushie", "Mustard") == FilterOptions.NONE

    def test_jaro_winkler_for_long_names(self):
        settings = Settings(_env_file=None, near_match_edit_ratio=0.0, near_match_min_length=50)
        assert match_string("abcdefghij", "abcdefghik", settings=settings) == FilterOptions.NEAR_NAME
        assert match_string("abcdefghij", "zyxwvutsrq", settings=settings) == FilterOptions.NONE

    def test_near_disabled(self):
        matcher = Matcher("slush")
        assert matcher.compare("Slushie", allow_near=False) == Strength.NONE
        assert matcher.compare("Slushie") == Strength.NEAR

    def test_empty_candidate(self):
        assert Matcher("foo").compare("") == Strength.NONE
        assert Matcher("foo").compare(None) == Strength.NONE


class TestEmptyQuery:
    """An empty query is not a wildcard."""

    @pytest.mark.parametrize("query", ["", "   ", None])
    def test_matches_nothing(self, query, slushie, kraken):
        matcher = Matcher(query)
        assert matcher.valid is False
        assert matcher.match(slushie) == FilterOptions.NONE
        assert matcher.match(kraken) == FilterOptions.NONE
        assert match_candidates(query, None, [slushie]) == []


class TestRegex:
    """Tests for regular-expression queries."""

    def test_pattern_search(self):
        matcher = Matcher("^slu", MatchOptions(query_is_regex=True))
        assert matcher.compare("Slushie") == Strength.EXACT
        assert matcher.compare("Mustard") == Strength.NONE

    def test_regex_respects_case(self):
        matcher = Matcher("^slu", MatchOptions(query_is_regex=True, ignore_case=False))
        assert matcher.compare("Slushie") == Strength.NONE

    def test_no_fuzzy_step(self):
        matcher = Matcher("slishie", MatchOptions(query_is_regex=True))
        assert matcher.compare("Slushie") == Strength.NONE

    @pytest.mark.parametrize("pattern", [
        "[abc",
        "(unclosed",
        "*star",
        "a{2,1}",
        "a{4294967296}",
        "(" * 5000 + "a" + ")" * 5000,
    ])
    def test_invalid_pattern_matches_nothing(self, pattern, slushie, kraken):
        """Bad patterns never raise; every candidate is NONE."""
        options = MatchOptions(query_is_regex=True)
        matcher = Matcher(pattern, options)

        assert matcher.valid is False
        assert matcher.match(slushie) == FilterOptions.NONE
        assert matcher.match(kraken) == FilterOptions.NONE
        assert match_candidates(pattern, options, [slushie, kraken]) == []

    def test_ignore_case_folds_both_sides(self):
        options = MatchOptions(query_is_regex=True)
        assert Matcher("^STRASSE$", options).compare("Straße") == Strength.EXACT
        assert Matcher("ß", options).compare("SS") == Strength.EXACT

    def test_escapes_survive_case_folding(self):
        matcher = Matcher(r"^\S+$", MatchOptions(query_is_regex=True))
        assert matcher.compare("Slushie") == Strength.EXACT
        assert matcher.compare("Slushie KP") == Strength.NONE

    def test_persistent_ids_in_regex_mode(self, source_at):
        player = Player()
        player.add_discord_id("123456789012345678", source_at(1))
        matcher = Matcher("^1234", MatchOptions(query_is_regex=True))
        assert matcher.match_player(player) == FilterOptions.DISCORD_ID


class TestPersistentIds:
    """Persistent ids compare exactly, without lookalike folding."""

    def test_exact_id(self):
        assert Matcher("abc123").compare_persistent("abc123") == Strength.EXACT

    def test_lookalike_ids_stay_distinct(self):
        matcher = Matcher("abc123")
        # The display-name comparison folds '1' and 'l' together...
        assert matcher.compare("abcl23") == Strength.EXACT
        # ...the persistent-id comparison does not
        assert matcher.compare_persistent("abcl23") == Strength.NONE

    def test_no_near_matches(self):
        assert Matcher("abc12").compare_persistent("abc123") == Strength.NONE


class TestFacetMatching:
    """Tests for matching whole facets."""

    def test_any_value_matches(self, source_at):
        facet = NameFacet()
        facet.add("OldName", source_at(1))
        facet.add("NewName", source_at(2))

        matcher = Matcher("oldname")
        assert matcher.match_facet(facet, FilterOptions.NAME, FilterOptions.NEAR_NAME) == FilterOptions.NAME

    def test_exact_and_near_combine(self, source_at):
        facet = NameFacet()
        facet.add("Slush", source_at(1))
        facet.add("Slushie", source_at(2))

        result = Matcher("slush").match_facet(facet, FilterOptions.NAME, FilterOptions.NEAR_NAME)
        assert result == FilterOptions.NAME | FilterOptions.NEAR_NAME

    def test_disabled_reasons_are_skipped(self, source_at):
        facet = NameFacet()
        facet.add("Slushie", source_at(1))

        matcher = Matcher("slushie", MatchOptions(filter_options=FilterOptions.TWITTER))
        assert matcher.match_facet(facet, FilterOptions.NAME, FilterOptions.NEAR_NAME) == FilterOptions.NONE


class TestAggregateMatching:
    """Tests for matching players and teams."""

    def test_player_name(self, slushie):
        assert Matcher("slushie").match_player(slushie) & FilterOptions.NAME

    def test_player_discord(self, slushie):
        result = Matcher("123456789012345678").match_player(slushie)
        assert result == FilterOptions.DISCORD_ID

    def test_player_twitter_from_url(self, slushie):
        assert Matcher("slushie_spl").match_player(slushie) & FilterOptions.TWITTER

    def test_team_affiliation_needs_resolver(self, slushie, store):
        matcher = Matcher("Kraken Paradise")
        assert matcher.match_player(slushie) == FilterOptions.NONE
        assert matcher.match_player(slushie, store) == FilterOptions.TEAM

    def test_team_affiliation_by_tag(self, slushie, store):
        assert Matcher("kp").match_player(slushie, store) == FilterOptions.TEAM

    def test_unknown_team_is_skipped(self, source_at):
        player = Player.create("Orphan", source_at(1), team_id=Team().id)
        assert Matcher("anything").match_player(player, IdentityStore()) == FilterOptions.NONE

    def test_team_tag_lookalikes(self, kraken):
        assert Matcher("kp").match_team(kraken) == FilterOptions.CLAN_TAG

    def test_team_division(self, kraken, mustard):
        assert Matcher("2").match_team(kraken) == FilterOptions.DIVISION
        assert Matcher("x").match_team(mustard) == FilterOptions.DIVISION

    def test_team_persistent_id(self, kraken):
        assert Matcher("5f1a2b3c4d").match_team(kraken) == FilterOptions.BATTLEFY_PERSISTENT_ID

    def test_sources_are_opt_in(self, source_at):
        player = Player.create("Slushie", source_at(1, "LUTI Season 12"))

        assert Matcher("LUTI Season 12").match_player(player) == FilterOptions.NONE

        options = MatchOptions(filter_options=FilterOptions.ALL)
        assert Matcher("LUTI Season 12", options).match_player(player) == FilterOptions.SOURCES

    def test_filter_options_restrict_result(self, slushie, store):
        options = MatchOptions(filter_options=FilterOptions.NAME)
        matcher = Matcher("Kraken Paradise", options)
        assert matcher.match_player(slushie, store) == FilterOptions.NONE


class TestSymmetry:
    """Flipping case on either side never turns a match into a non-match."""

    @pytest.mark.parametrize("query,candidate", [
        ("slushie", "Slushie"),
        ("slush", "SlushieX"),
        ("Splat", "Ѕрlаt"),
        ("Kraken Paradize", "Kraken Paradise"),
        ("Squad", "Mustard Squad MS"),
    ])
    def test_case_flip(self, query, candidate):
        assert match_string(query, candidate)
        assert match_string(query.swapcase(), candidate)
        assert match_string(query, candidate.swapcase())
        assert match_string(query.swapcase(), candidate.swapcase())
        assert match_string(candidate, query)

    @pytest.mark.parametrize("query,candidate", [
        ("ß", "ß"),
        ("^slu", "Slushie"),
        ("straße", "Straße 7"),
    ])
    def test_case_flip_in_regex_mode(self, query, candidate):
        options = MatchOptions(query_is_regex=True)
        assert match_string(query, candidate, options)
        assert match_string(query.swapcase(), candidate, options)
        assert match_string(query, candidate.swapcase(), options)
        assert match_string(query.swapcase(), candidate.swapcase(), options)


class TestRanking:
    """Tests for ranking and match_candidates."""

    def test_rank_matches_is_stable(self):
        pairs = [("a", FilterOptions.TEAM), ("b", FilterOptions.NAME), ("c", FilterOptions.TEAM)]
        assert [c for c, _ in rank_matches(pairs)] == ["b", "a", "c"]

    def test_persistent_id_outranks_handle(self, source_at):
        by_id = Player()
        by_id.add_battlefy_persistent_id("abc123", source_at(1))
        by_name = Player.create("abc123", source_at(1))
        by_handle = Player.create("Someone", source_at(1))
        by_handle.add_twitter("abc123", source_at(1))

        results = match_candidates("abc123", MatchOptions(), [by_handle, by_name, by_id])

        assert [player for player, _ in results] == [by_id, by_name, by_handle]
        assert results[0][1] & FilterOptions.BATTLEFY_PERSISTENT_ID
        assert results[2][1] == FilterOptions.TWITTER

    def test_non_matches_are_dropped(self, slushie, source_at):
        other = Player.create("Mustard", source_at(1))
        results = match_candidates("slushie", None, [other, slushie])
        assert [player for player, _ in results] == [slushie]

    def test_limit(self, source_at):
        players = [Player.create("Slushie", source_at(i)) for i in range(5)]
        results = match_candidates("slushie", MatchOptions(limit=2), players)
        assert [player for player, _ in results] == players[:2]
