import pytest

from playoffbracket.matchup import (
    AllianceSource,
    Matchup,
    MatchupKey,
    MatchupTemplate,
    loser_source,
    winner_source,
)
from playoffbracket.models import Alliance, InMemoryMatchStore, MatchStatus

ELIM = "elimination"


def lineup(alliance_id):
    base = 100 * alliance_id
    return (base + 2, base + 1, base + 3)


def seeded_store(count):
    store = InMemoryMatchStore()
    for alliance_id in range(1, count + 1):
        store.create_alliance(Alliance(alliance_id, lineup(alliance_id)))
    return store


def played(store, name, status):
    match = store.get_match_by_name(ELIM, name)
    match.status = status
    store.update_match(match)


def refresh(matchup, store):
    """Update the matchup and return the elimination schedule."""
    matchup.update(store)
    return store.get_matches_by_type(ELIM)


def describe(match):
    return (
        match.display_name,
        match.elim_red_alliance,
        match.elim_blue_alliance,
        match.red_teams,
        match.blue_teams,
    )


def expected(name, red, blue):
    return (name, red, blue, lineup(red), lineup(blue))


def leaf(round_, group, name, wins, red, blue):
    template = MatchupTemplate(
        MatchupKey(round_, group),
        name,
        wins,
        AllianceSource(alliance_id=red),
        AllianceSource(alliance_id=blue),
    )
    return Matchup(template, red_alliance_id=red, blue_alliance_id=blue)


def fed(round_, group, name, wins, red_source, blue_source, red_matchup, blue_matchup):
    template = MatchupTemplate(MatchupKey(round_, group), name, wins, red_source, blue_source)
    return Matchup(template, red_source_matchup=red_matchup, blue_source_matchup=blue_matchup)


def display_names(matchup):
    return (
        matchup.long_display_name(),
        matchup.match_display_name(1),
        matchup.red_alliance_source_display_name(),
        matchup.blue_alliance_source_display_name(),
    )


def test_display_names_double_elimination_shape():
    m11 = fed(4, 1, "11", 1, winner_source(2, 3), winner_source(2, 4), None, None)
    m12 = fed(4, 2, "12", 1, winner_source(3, 2), winner_source(3, 1), None, None)
    m13 = fed(5, 1, "13", 1, loser_source(4, 1), winner_source(4, 2), m11, m12)
    final = fed(6, 1, "F", 2, winner_source(4, 1), winner_source(5, 1), m11, m13)

    assert display_names(final) == ("Finals", "F-1", "W 11", "W 13")
    assert display_names(m13) == ("Match 13", "13", "L 11", "W 12")
    assert m13.match_display_name(2) == "13-2"


def test_display_names_single_elimination_shape():
    qf3 = fed(2, 3, "QF3", 2, winner_source(1, 5), winner_source(1, 6), None, None)
    qf4 = fed(2, 4, "QF4", 2, winner_source(1, 7), winner_source(1, 8), None, None)
    sf1 = fed(3, 1, "SF1", 2, winner_source(2, 1), winner_source(2, 2), None, None)
    sf2 = fed(3, 2, "SF2", 2, winner_source(2, 3), winner_source(2, 4), qf3, qf4)
    final = fed(4, 1, "F", 2, winner_source(3, 1), winner_source(3, 2), sf1, sf2)

    assert display_names(final) == ("Finals", "F-1", "W SF1", "W SF2")
    assert display_names(sf2) == ("SF2", "SF2-1", "W QF3", "W QF4")
    assert sf2.match_display_name(3) == "SF2-3"
    assert qf3.red_alliance_source_display_name() == ""


@pytest.mark.parametrize(
    "wins_to_advance, red_wins, blue_wins, name, result",
    [
        (1, 0, 0, "", ("", "")),
        (1, 1, 0, "", ("red", "Red Advances 1-0")),
        (1, 0, 2, "", ("blue", "Blue Advances 2-0")),
        (3, 0, 2, "", ("blue", "Blue Leads 2-0")),
        (3, 2, 2, "", ("", "Series Tied 2-2")),
        (3, 2, 1, "", ("red", "Red Leads 2-1")),
        (3, 3, 1, "F", ("red", "Red Wins 3-1")),
        (3, 2, 4, "F", ("blue", "Blue Wins 4-2")),
        (3, 0, 0, "F", ("", "")),
    ],
)
def test_status_text(wins_to_advance, red_wins, blue_wins, name, result):
    template = MatchupTemplate(MatchupKey(0, 0), name, wins_to_advance)
    matchup = Matchup(template, red_alliance_wins=red_wins, blue_alliance_wins=blue_wins)
    assert matchup.status_text() == result


def test_winner_and_loser():
    matchup = leaf(1, 1, "1", 1, 1, 8)
    assert (matchup.winner(), matchup.loser(), matchup.is_complete()) == (0, 0, False)
    matchup.blue_alliance_wins = 1
    assert (matchup.winner(), matchup.loser(), matchup.is_complete()) == (8, 1, True)


def test_update_creates_series_and_counts_wins():
    store = seeded_store(2)
    final = leaf(1, 1, "F", 2, 1, 2)
    matches = refresh(final, store)
    assert [describe(m) for m in matches] == [expected("F-1", 1, 2), expected("F-2", 1, 2)]

    for name in ("F-1", "F-2"):
        played(store, name, MatchStatus.BLUE_WON)
    assert len(refresh(final, store)) == 2
    assert (final.winner(), final.loser()) == (2, 1)


def test_update_ties_add_matches():
    store = seeded_store(8)
    matchup = leaf(1, 1, "1", 1, 1, 8)
    matchup.update(store)
    for tied, added, count in (("1", "1-2", 2), ("1-2", "1-3", 3)):
        played(store, tied, MatchStatus.TIE)
        matches = refresh(matchup, store)
        assert len(matches) == count
        assert describe(matches[-1]) == expected(added, 1, 8)

    played(store, "1-3", MatchStatus.RED_WON)
    assert len(refresh(matchup, store)) == 3
    assert matchup.winner() == 1


def test_update_removes_and_recreates_unneeded_match():
    store = seeded_store(2)
    final = leaf(1, 1, "F", 2, 1, 2)
    final.update(store)
    played(store, "F-1", MatchStatus.RED_WON)
    played(store, "F-2", MatchStatus.TIE)
    assert len(refresh(final, store)) == 3

    played(store, "F-2", MatchStatus.RED_WON)
    assert len(refresh(final, store)) == 2
    assert final.is_complete()

    played(store, "F-2", MatchStatus.BLUE_WON)
    names = [m.display_name for m in refresh(final, store)]
    assert not final.is_complete()
    assert names == ["F-1", "F-2", "F-3"]


def test_update_propagates_winners_and_retracts_on_change():
    store = seeded_store(8)
    m1 = leaf(1, 1, "1", 1, 1, 8)
    m2 = leaf(1, 2, "2", 1, 4, 5)
    m7 = fed(2, 3, "7", 1, winner_source(1, 1), winner_source(1, 2), m1, m2)
    m7.update(store)
    assert store.get_matches_by_elim_round_group(2, 3) == []
    assert m7.red_alliance_id == 0

    played(store, "1", MatchStatus.BLUE_WON)
    played(store, "2", MatchStatus.RED_WON)
    m7.update(store)
    created = store.get_matches_by_elim_round_group(2, 3)
    assert [describe(m) for m in created] == [expected("7", 8, 4)]

    played(store, "2", MatchStatus.NOT_PLAYED)
    m7.update(store)
    assert store.get_matches_by_elim_round_group(2, 3) == []
    assert m7.blue_alliance_id == 0


def test_update_uses_loser_source():
    store = seeded_store(8)
    m1 = leaf(1, 1, "1", 1, 1, 8)
    m2 = leaf(1, 2, "2", 1, 4, 5)
    for matchup in (m1, m2):
        matchup.update(store)
    played(store, "1", MatchStatus.BLUE_WON)
    played(store, "2", MatchStatus.RED_WON)
    for matchup in (m1, m2):
        matchup.update(store)
    m5 = fed(2, 1, "5", 1, loser_source(1, 1), loser_source(1, 2), m1, m2)
    m5.update(store)
    created = store.get_matches_by_elim_round_group(2, 1)
    assert [describe(m) for m in created] == [expected("5", 1, 5)]


def test_update_refreshes_lineup_of_unplayed_matches():
    store = seeded_store(2)
    final = leaf(1, 1, "F", 2, 1, 2)
    final.update(store)
    store.update_alliance_lineup(1, (101, 104, 103))
    matches = refresh(final, store)
    assert {m.red_teams for m in matches} == {(101, 104, 103)}
    assert {m.blue_teams for m in matches} == {(202, 201, 203)}


def test_update_missing_alliance_raises():
    store = seeded_store(1)
    matchup = leaf(1, 1, "1", 1, 1, 8)
    with pytest.raises(LookupError, match="alliance 8 does not exist in the database"):
        matchup.update(store)


def test_matchup_key_str_and_order():
    assert str(MatchupKey(33, 12)) == "{Round:33 Group:12}"
    keys = [MatchupKey(3, 1), MatchupKey(2, 2), MatchupKey(2, 1)]
    assert sorted(keys) == [MatchupKey(2, 1), MatchupKey(2, 2), MatchupKey(3, 1)]