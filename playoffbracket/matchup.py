"""Matchups: a series of one or more matches between the same two alliances."""

from __future__ import annotations

from dataclasses import dataclass, field

from .models import ELIMINATION, Alliance, Match, MatchStatus, MatchStore


@dataclass(frozen=True, order=True)
class MatchupKey:
    """Identifies a matchup by round and 1-based group within the round."""

    round: int
    group: int

    def __str__(self) -> str:
        return f"{{Round:{self.round} Group:{self.group}}}"


@dataclass(frozen=True)
class AllianceSource:
    """Where an alliance comes from: alliance selection, or a prior matchup's winner or loser."""

    alliance_id: int = 0
    matchup_key: MatchupKey | None = None
    use_winner: bool = False


def winner_source(round: int, group: int) -> AllianceSource:
    """Source that takes the winner of the given matchup."""
    return AllianceSource(matchup_key=MatchupKey(round, group), use_winner=True)


def loser_source(round: int, group: int) -> AllianceSource:
    """Source that takes the loser of the given matchup."""
    return AllianceSource(matchup_key=MatchupKey(round, group), use_winner=False)


@dataclass(frozen=True)
class MatchupTemplate:
    """The fixed description of a matchup within a bracket format."""

    key: MatchupKey
    display_name: str = ""
    num_wins_to_advance: int = 0
    red_source: AllianceSource = AllianceSource()
    blue_source: AllianceSource = AllianceSource()

    @property
    def round(self) -> int:
        return self.key.round

    @property
    def group(self) -> int:
        return self.key.group

    def match_display_name(self, instance: int) -> str:
        """Display name of the given match within the series."""
        if self.num_wins_to_advance > 1 or instance > 1:
            return f"{self.display_name}-{instance}"
        return self.display_name


def _source_display_name(source_matchup: Matchup | None, source: AllianceSource) -> str:
    if source_matchup is None:
        return ""
    prefix = "W" if source.use_winner else "L"
    return f"{prefix} {source_matchup.display_name}"


def _resolve_alliance(source_matchup: Matchup, source: AllianceSource) -> int:
    return source_matchup.winner() if source.use_winner else source_matchup.loser()


@dataclass(eq=False)
class Matchup:
    """The state of a matchup: its alliances, wins so far, and the matchups feeding it."""

    template: MatchupTemplate
    red_alliance_id: int = 0
    blue_alliance_id: int = 0
    red_alliance_wins: int = 0
    blue_alliance_wins: int = 0
    red_source_matchup: Matchup | None = field(default=None, repr=False)
    blue_source_matchup: Matchup | None = field(default=None, repr=False)

    @property
    def key(self) -> MatchupKey:
        return self.template.key

    @property
    def round(self) -> int:
        return self.template.round

    @property
    def group(self) -> int:
        return self.template.group

    @property
    def display_name(self) -> str:
        return self.template.display_name

    @property
    def num_wins_to_advance(self) -> int:
        return self.template.num_wins_to_advance

    def match_display_name(self, instance: int) -> str:
        return self.template.match_display_name(instance)

    def long_display_name(self) -> str:
        """Display name for the whole matchup."""
        if self.is_final():
            return "Finals"
        if self.display_name.strip().lstrip("+-").isdigit():
            return f"Match {self.display_name}"
        return self.display_name

    def red_alliance_source_display_name(self) -> str:
        return _source_display_name(self.red_source_matchup, self.template.red_source)

    def blue_alliance_source_display_name(self) -> str:
        return _source_display_name(self.blue_source_matchup, self.template.blue_source)

    def status_text(self) -> tuple[str, str]:
        """Return the leading alliance colour and a readable status of the series."""
        red, blue = self.red_alliance_wins, self.blue_alliance_wins
        win_text = "Wins" if self.is_final() else "Advances"
        if red >= self.num_wins_to_advance:
            return "red", f"Red {win_text} {red}-{blue}"
        if blue >= self.num_wins_to_advance:
            return "blue", f"Blue {win_text} {blue}-{red}"
        if red > blue:
            return "red", f"Red Leads {red}-{blue}"
        if blue > red:
            return "blue", f"Blue Leads {blue}-{red}"
        if red > 0:
            return "", f"Series Tied {red}-{blue}"
        return "", ""

    def winner(self) -> int:
        """Winning alliance ID, or 0 if not yet known."""
        if self.red_alliance_wins >= self.num_wins_to_advance:
            return self.red_alliance_id
        if self.blue_alliance_wins >= self.num_wins_to_advance:
            return self.blue_alliance_id
        return 0

    def loser(self) -> int:
        """Losing alliance ID, or 0 if not yet known."""
        if self.red_alliance_wins >= self.num_wins_to_advance:
            return self.blue_alliance_id
        if self.blue_alliance_wins >= self.num_wins_to_advance:
            return self.red_alliance_id
        return 0

    def is_complete(self) -> bool:
        return self.winner() > 0

    def is_final(self) -> bool:
        return self.display_name == "F"

    def update(self, store: MatchStore) -> None:
        """Refresh this matchup and the ones feeding it from match results.

        Counts wins and creates, updates or deletes unplayed matches as needed.
        """
        # Only follow winner links so that no matchup is visited twice.
        for child, source in (
            (self.red_source_matchup, self.template.red_source),
            (self.blue_source_matchup, self.template.blue_source),
        ):
            if child is not None and source.use_winner:
                child.update(store)

        if self.red_source_matchup is not None:
            self.red_alliance_id = _resolve_alliance(self.red_source_matchup, self.template.red_source)
        if self.blue_source_matchup is not None:
            self.blue_alliance_id = _resolve_alliance(self.blue_source_matchup, self.template.blue_source)

        matches = store.get_matches_by_elim_round_group(self.round, self.group)

        if not self.red_alliance_id or not self.blue_alliance_id:
            self.red_alliance_wins = 0
            self.blue_alliance_wins = 0
            for match in matches:
                store.delete_match(match.id)
            return

        red_alliance = self._require_alliance(store, self.red_alliance_id)
        blue_alliance = self._require_alliance(store, self.blue_alliance_id)

        self.red_alliance_wins = 0
        self.blue_alliance_wins = 0
        unplayed: list[Match] = []
        for match in matches:
            if not match.is_complete():
                changed = False
                if match.red_teams != red_alliance.lineup:
                    match.red_teams = red_alliance.lineup
                    match.elim_red_alliance = red_alliance.id
                    changed = True
                if match.blue_teams != blue_alliance.lineup:
                    match.blue_teams = blue_alliance.lineup
                    match.elim_blue_alliance = blue_alliance.id
                    changed = True
                if changed:
                    store.update_match(match)
                unplayed.append(match)
            elif match.status is MatchStatus.RED_WON:
                self.red_alliance_wins += 1
            elif match.status is MatchStatus.BLUE_WON:
                self.blue_alliance_wins += 1

        needed = max(
            self.num_wins_to_advance - max(self.red_alliance_wins, self.blue_alliance_wins), 0
        )
        if len(unplayed) > needed:
            for match in reversed(unplayed[needed:]):
                store.delete_match(match.id)
        else:
            for offset in range(needed - len(unplayed)):
                instance = len(matches) + offset + 1
                store.create_match(
                    Match(
                        match_type=ELIMINATION,
                        display_name=self.match_display_name(instance),
                        elim_round=self.round,
                        elim_group=self.group,
                        elim_instance=instance,
                        elim_red_alliance=red_alliance.id,
                        elim_blue_alliance=blue_alliance.id,
                        red1=red_alliance.lineup[0],
                        red2=red_alliance.lineup[1],
                        red3=red_alliance.lineup[2],
                        blue1=blue_alliance.lineup[0],
                        blue2=blue_alliance.lineup[1],
                        blue3=blue_alliance.lineup[2],
                    )
                )

    @staticmethod
    def _require_alliance(store: MatchStore, alliance_id: int) -> Alliance:
        alliance = store.get_alliance_by_id(alliance_id)
        if alliance is None:
            raise LookupError(f"alliance {alliance_id} does not exist in the database")
        return alliance