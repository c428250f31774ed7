"""The standard bracket formats: single and double elimination."""

from __future__ import annotations

from .bracket import Bracket, BracketError, new_bracket
from .matchup import AllianceSource, MatchupKey, MatchupTemplate, loser_source, winner_source


def _selected(alliance_id: int) -> AllianceSource:
    return AllianceSource(alliance_id=alliance_id)


def _template(
    round: int, group: int, name: str, wins: int, red: AllianceSource, blue: AllianceSource
) -> MatchupTemplate:
    return MatchupTemplate(
        key=MatchupKey(round, group),
        display_name=name,
        num_wins_to_advance=wins,
        red_source=red,
        blue_source=blue,
    )


SINGLE_ELIMINATION_TEMPLATES: tuple[MatchupTemplate, ...] = (
    _template(1, 1, "EF1", 2, _selected(1), _selected(16)),
    _template(1, 2, "EF2", 2, _selected(8), _selected(9)),
    _template(1, 3, "EF3", 2, _selected(4), _selected(13)),
    _template(1, 4, "EF4", 2, _selected(5), _selected(12)),
    _template(1, 5, "EF5", 2, _selected(2), _selected(15)),
    _template(1, 6, "EF6", 2, _selected(7), _selected(10)),
    _template(1, 7, "EF7", 2, _selected(3), _selected(14)),
    _template(1, 8, "EF8", 2, _selected(6), _selected(11)),
    _template(2, 1, "QF1", 2, winner_source(1, 1), winner_source(1, 2)),
    _template(2, 2, "QF2", 2, winner_source(1, 3), winner_source(1, 4)),
    _template(2, 3, "QF3", 2, winner_source(1, 5), winner_source(1, 6)),
    _template(2, 4, "QF4", 2, winner_source(1, 7), winner_source(1, 8)),
    _template(3, 1, "SF1", 2, winner_source(2, 1), winner_source(2, 2)),
    _template(3, 2, "SF2", 2, winner_source(2, 3), winner_source(2, 4)),
    _template(4, 1, "F", 2, winner_source(3, 1), winner_source(3, 2)),
)

DOUBLE_ELIMINATION_TEMPLATES: tuple[MatchupTemplate, ...] = (
    _template(1, 1, "1", 1, _selected(1), _selected(8)),
    _template(1, 2, "2", 1, _selected(4), _selected(5)),
    _template(1, 3, "3", 1, _selected(2), _selected(7)),
    _template(1, 4, "4", 1, _selected(3), _selected(6)),
    _template(2, 1, "5", 1, loser_source(1, 1), loser_source(1, 2)),
    _template(2, 2, "6", 1, loser_source(1, 3), loser_source(1, 4)),
    _template(2, 3, "7", 1, winner_source(1, 1), winner_source(1, 2)),
    _template(2, 4, "8", 1, winner_source(1, 3), winner_source(1, 4)),
    _template(3, 1, "9", 1, loser_source(2, 3), winner_source(2, 2)),
    _template(3, 2, "10", 1, loser_source(2, 4), winner_source(2, 1)),
    _template(4, 1, "11", 1, winner_source(2, 3), winner_source(2, 4)),
    _template(4, 2, "12", 1, winner_source(3, 2), winner_source(3, 1)),
    _template(5, 1, "13", 1, loser_source(4, 1), winner_source(4, 2)),
    _template(6, 1, "F", 2, winner_source(4, 1), winner_source(5, 1)),
)


def new_single_elimination_bracket(num_alliances: int) -> Bracket:
    """Single-elimination, best-of-three bracket for 2 to 16 alliances."""
    if num_alliances < 2:
        raise BracketError("Must have at least 2 alliances")
    if num_alliances > 16:
        raise BracketError("Must have at most 16 alliances")
    return new_bracket(SINGLE_ELIMINATION_TEMPLATES, MatchupKey(4, 1), num_alliances)


def new_double_elimination_bracket(num_alliances: int) -> Bracket:
    """Double-elimination bracket with a best-of-three final; exactly 8 alliances."""
    if num_alliances != 8:
        raise BracketError("Must have exactly 8 alliances")
    return new_bracket(DOUBLE_ELIMINATION_TEMPLATES, MatchupKey(6, 1), num_alliances)