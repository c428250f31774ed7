"""Match and alliance records, and the storage interface the bracket works against."""

from __future__ import annotations

import dataclasses
import itertools
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol

ELIMINATION = "elimination"

Lineup = tuple[int, int, int]


class MatchStatus(Enum):
    """Outcome of a single match."""

    NOT_PLAYED = ""
    RED_WON = "R"
    BLUE_WON = "B"
    TIE = "T"


@dataclass
class Match:
    """A single scheduled match between a red and a blue alliance."""

    id: int = 0
    match_type: str = ""
    display_name: str = ""
    time: datetime | None = None
    elim_round: int = 0
    elim_group: int = 0
    elim_instance: int = 0
    elim_red_alliance: int = 0
    elim_blue_alliance: int = 0
    red1: int = 0
    red2: int = 0
    red3: int = 0
    blue1: int = 0
    blue2: int = 0
    blue3: int = 0
    status: MatchStatus = MatchStatus.NOT_PLAYED

    def is_complete(self) -> bool:
        """Return True once the match has a result."""
        return self.status is not MatchStatus.NOT_PLAYED

    @property
    def red_teams(self) -> Lineup:
        return (self.red1, self.red2, self.red3)

    @red_teams.setter
    def red_teams(self, teams: Lineup) -> None:
        self.red1, self.red2, self.red3 = teams

    @property
    def blue_teams(self) -> Lineup:
        return (self.blue1, self.blue2, self.blue3)

    @blue_teams.setter
    def blue_teams(self, teams: Lineup) -> None:
        self.blue1, self.blue2, self.blue3 = teams


@dataclass
class Alliance:
    """A playoff alliance and the three teams it fields, in station order."""

    id: int
    lineup: Lineup = (0, 0, 0)


class MatchStore(Protocol):
    """The storage operations a bracket needs."""

    def get_alliance_by_id(self, alliance_id: int) -> Alliance | None: ...

    def create_match(self, match: Match) -> Match: ...

    def update_match(self, match: Match) -> None: ...

    def delete_match(self, match_id: int) -> None: ...

    def get_matches_by_type(self, match_type: str) -> list[Match]: ...

    def get_matches_by_elim_round_group(self, round: int, group: int) -> list[Match]: ...


def _as_lineup(teams) -> Lineup:
    lineup = tuple(teams)
    if len(lineup) != 3:
        raise ValueError(f"a lineup needs exactly 3 teams, got {len(lineup)}")
    return lineup  # type: ignore[return-value]


class InMemoryMatchStore:
    """A match store held in memory; records go in and come out as copies."""

    def __init__(self) -> None:
        self._alliances: dict[int, Alliance] = {}
        self._matches: dict[int, Match] = {}
        self._ids = itertools.count(1)

    def create_alliance(self, alliance: Alliance) -> None:
        if alliance.id in self._alliances:
            raise ValueError(f"alliance {alliance.id} already exists")
        self._alliances[alliance.id] = Alliance(alliance.id, _as_lineup(alliance.lineup))

    def get_alliance_by_id(self, alliance_id: int) -> Alliance | None:
        alliance = self._alliances.get(alliance_id)
        return None if alliance is None else dataclasses.replace(alliance)

    def update_alliance_lineup(self, alliance_id: int, lineup) -> None:
        if alliance_id not in self._alliances:
            raise KeyError(f"alliance {alliance_id} does not exist")
        self._alliances[alliance_id].lineup = _as_lineup(lineup)

    def create_match(self, match: Match) -> Match:
        match.id = next(self._ids)
        self._matches[match.id] = dataclasses.replace(match)
        return match

    def update_match(self, match: Match) -> None:
        if match.id not in self._matches:
            raise KeyError(f"match {match.id} does not exist")
        self._matches[match.id] = dataclasses.replace(match)

    def delete_match(self, match_id: int) -> None:
        if self._matches.pop(match_id, None) is None:
            raise KeyError(f"match {match_id} does not exist")

    def get_matches_by_type(self, match_type: str) -> list[Match]:
        matches = (m for m in self._matches.values() if m.match_type == match_type)
        ordered = sorted(
            matches, key=lambda m: (m.elim_round, m.elim_instance, m.elim_group, m.id)
        )
        return [dataclasses.replace(m) for m in ordered]

    def get_matches_by_elim_round_group(self, round: int, group: int) -> list[Match]:
        matches = (
            m
            for m in self._matches.values()
            if m.match_type == ELIMINATION and m.elim_round == round and m.elim_group == group
        )
        ordered = sorted(matches, key=lambda m: (m.elim_instance, m.id))
        return [dataclasses.replace(m) for m in ordered]

    def get_match_by_name(self, match_type: str, display_name: str) -> Match | None:
        for match in self._matches.values():
            if match.match_type == match_type and match.display_name == display_name:
                return dataclasses.replace(match)
        return None