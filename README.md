# playoffbracket

Playoff elimination brackets for alliance-based tournaments. A bracket is built
from matchup templates. It drops the matchups that a small field never plays and
gives byes to the top seeds. Each time it is updated, it creates, fills in or
deletes the matches that follow from the results recorded so far.

The package includes two formats, in `playoffbracket.formats`:

- `new_single_elimination_bracket(num_alliances)` takes 2 to 16 alliances. Every
  series is best of three.
- `new_double_elimination_bracket(num_alliances)` takes exactly 8 alliances. Every
  match is a single game, except the final, which is best of three.

Both raise `BracketError` for an unsupported number of alliances. A tied match
counts for neither alliance, so the series gets another match.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Usage

```python
from datetime import datetime, timezone

from playoffbracket.formats import new_single_elimination_bracket
from playoffbracket.models import Alliance, InMemoryMatchStore, MatchStatus

store = InMemoryMatchStore()
for seed in range(1, 5):
    store.create_alliance(
        Alliance(id=seed, lineup=(100 * seed + 2, 100 * seed + 1, 100 * seed + 3))
    )

bracket = new_single_elimination_bracket(4)
bracket.update(store, datetime(2024, 4, 1, 9, 0, tzinfo=timezone.utc))

for match in store.get_matches_by_type("elimination"):
    print(match.display_name, match.elim_red_alliance, match.elim_blue_alliance, match.time)
```

To record a result, set the status of the match, save it, and then update the
bracket again:

```python
match = store.get_match_by_name("elimination", "SF1-1")
match.status = MatchStatus.RED_WON
store.update_match(match)
bracket.update(store)
```

`MatchStatus` has four values: `NOT_PLAYED`, `RED_WON`, `BLUE_WON` and `TIE`.

`Bracket.update(store, start_time)` can be given a start time. Every unplayed
elimination match then gets a new time, counting from that start, with
consecutive matches 600 seconds apart. If no start time is given, or it is
`None`, the times stay as they are.

Unplayed matches always take their teams from the current lineup of their
alliance. To change a lineup, call
`store.update_alliance_lineup(alliance_id, lineup)` and then update the bracket.

## Inspecting a bracket

- `bracket.all_matchups()` lists the matchups in round order, then group order.
- `bracket.get_matchup(round, group)` returns a single matchup. It raises
  `BracketError` if the bracket has no matchup with that round and group.
- `bracket.reverse_round_order_traversal()` yields matchups from the final back
  to the first round.
- `bracket.winner()` and `bracket.finalist()` return alliance IDs. Both return 0
  while the result is still open.
- `bracket.is_complete()` tells whether the tournament is over.
- A `Matchup` has the following methods:
  - `long_display_name()`
  - `red_alliance_source_display_name()` and `blue_alliance_source_display_name()`,
    which return text such as `"W SF1"` or `"L 11"`
  - `winner()`, `loser()` and `is_complete()`
  - `status_text()`, which returns a `(leader, status)` pair such as
    `("red", "Red Leads 1-0")`

Other formats can be built with `playoffbracket.bracket.new_bracket(templates,
finals_key, num_alliances)`. It takes `MatchupTemplate` objects from
`playoffbracket.matchup`. Use `winner_source` and `loser_source` to link one
matchup to another.

## Storage

A bracket reads and writes alliances and matches through the `MatchStore`
protocol in `playoffbracket.models`. The only implementation included is
`InMemoryMatchStore`, which keeps everything in memory. It hands out copies, so
a match you change stays unchanged in the store until you pass it to
`update_match`. The package has no persistent storage, command-line tool or
user interface. To keep data between runs, implement the `MatchStore` methods
over your own storage.