"""A playoff elimination bracket built from a set of matchup templates."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import datetime, timedelta

from .matchup import Matchup, MatchupKey, MatchupTemplate
from .models import ELIMINATION, MatchStore

ELIM_MATCH_SPACING_SEC = 600


class BracketError(ValueError):
    """Raised when a bracket cannot be built or queried."""


class _GraphBuilder:
    """Builds the matchup graph for one bracket, pruning matchups that cannot be played."""

    def __init__(self, templates: Iterable[MatchupTemplate], num_alliances: int) -> None:
        self._templates = {template.key: template for template in templates}
        self._num_alliances = num_alliances
        self.matchups: dict[MatchupKey, Matchup] = {}

    def _matchup(self, template: MatchupTemplate, **state) -> Matchup:
        matchup = self.matchups.get(template.key)
        if matchup is None:
            matchup = Matchup(template=template, **state)
            self.matchups[template.key] = matchup
        return matchup

    def build(self, key: MatchupKey | None, use_winner: bool) -> tuple[Matchup | None, int]:
        """Return the matchup for the key, or the alliance with a bye through it.

        A result of (None, 0) means the matchup is pruned from the bracket.
        """
        template = self._templates.get(key) if key is not None else None
        if template is None:
            raise BracketError(f"could not find template for matchup {key} in the list of templates")

        red_id = template.red_source.alliance_id
        blue_id = template.blue_source.alliance_id
        if red_id > 0 or blue_id > 0:
            # A leaf: both alliances come straight from alliance selection.
            if red_id == 0 or blue_id == 0:
                raise BracketError(
                    "both alliances must be populated either from selection or a lower round"
                )
            # Alliances beyond the tournament's size don't exist.
            if red_id > self._num_alliances:
                red_id = 0
            if blue_id > self._num_alliances:
                blue_id = 0

            if red_id and blue_id:
                return self._matchup(template, red_alliance_id=red_id, blue_alliance_id=blue_id), 0
            if not red_id and not blue_id:
                return None, 0
            if use_winner:
                return None, red_id or blue_id
            return None, 0

        red_matchup, red_bye = self.build(template.red_source.matchup_key, template.red_source.use_winner)
        blue_matchup, blue_bye = self.build(
            template.blue_source.matchup_key, template.blue_source.use_winner
        )
        red_empty = red_matchup is None and not red_bye
        blue_empty = blue_matchup is None and not blue_bye

        if red_empty and blue_empty:
            return None, 0
        if red_bye and blue_empty:
            return None, (red_bye if use_winner else 0)
        if blue_bye and red_empty:
            return None, (blue_bye if use_winner else 0)

        matchup = self._matchup(
            template,
            red_alliance_id=red_bye,
            blue_alliance_id=blue_bye,
            red_source_matchup=red_matchup,
            blue_source_matchup=blue_matchup,
        )
        return matchup, 0


class Bracket:
    """A playoff bracket: a graph of matchups culminating in the finals."""

    def __init__(self, finals_matchup: Matchup, matchups: dict[MatchupKey, Matchup]) -> None:
        self.finals_matchup = finals_matchup
        self._matchups = dict(matchups)

    def winner(self) -> int:
        """Winning alliance ID of the whole bracket, or 0 if not yet known."""
        return self.finals_matchup.winner()

    def finalist(self) -> int:
        """Finalist alliance ID of the whole bracket, or 0 if not yet known."""
        return self.finals_matchup.loser()

    def is_complete(self) -> bool:
        return self.finals_matchup.is_complete()

    def all_matchups(self) -> list[Matchup]:
        """Every matchup in the bracket, ordered by round and then group."""
        return sorted(self._matchups.values(), key=lambda matchup: matchup.key)

    def get_matchup(self, round: int, group: int) -> Matchup:
        key = MatchupKey(round, group)
        try:
            return self._matchups[key]
        except KeyError:
            raise BracketError(f"bracket does not contain matchup for key {key}") from None

    def update(self, store: MatchStore, start_time: datetime | None = None) -> None:
        """Bring every matchup up to date with match results.

        If a start time is given, unplayed matches are rescheduled from it at a fixed spacing.
        """
        self.finals_matchup.update(store)
        if start_time is None:
            return
        pending = (match for match in store.get_matches_by_type(ELIMINATION) if not match.is_complete())
        for index, match in enumerate(pending):
            match.time = start_time + timedelta(seconds=index * ELIM_MATCH_SPACING_SEC)
            store.update_match(match)

    def reverse_round_order_traversal(self) -> Iterator[Matchup]:
        """Yield matchups from the finals back to the earliest round, following winner links."""
        queue = [self.finals_matchup]
        while queue:
            # Graph depth doesn't necessarily match the round, so reorder each step.
            queue.sort(key=lambda matchup: (-matchup.round, matchup.group))
            matchup = queue.pop(0)
            yield matchup
            for child, source in (
                (matchup.red_source_matchup, matchup.template.red_source),
                (matchup.blue_source_matchup, matchup.template.blue_source),
            ):
                if child is not None and source.use_winner:
                    queue.append(child)


def new_bracket(
    templates: Iterable[MatchupTemplate], finals_key: MatchupKey, num_alliances: int
) -> Bracket:
    """Build an unpopulated bracket from the templates for the given number of alliances."""
    builder = _GraphBuilder(templates, num_alliances)
    finals, _ = builder.build(finals_key, True)
    if finals is None:
        raise BracketError(f"bracket has no playable matchup for finals key {finals_key}")
    return Bracket(finals, builder.matchups)