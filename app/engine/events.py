"""
Scoring events accepted by the match engine.

Event is a closed union: match_engine keeps one handler per member and
the test suite checks that none is missing. Undo and Reset are handled by
MatchSession since they work on the history rather than on a state value.
"""
from dataclasses import dataclass
from typing import Optional, Sequence, Mapping, Union


@dataclass(frozen=True)
class CreateTeams:
    team_a_name: Optional[str] = None
    team_b_name: Optional[str] = None
    # None keeps the catalog already held by the state
    roster_candidates: Optional[Mapping[str, Sequence[str]]] = None
    roster_size: Optional[int] = None


@dataclass(frozen=True)
class StartInnings:
    batting_team: Optional[str]
    opening_striker: Optional[str]
    opening_non_striker: Optional[str]
    starting_bowler: Optional[str]
    overs_limit: Optional[str] = None


@dataclass(frozen=True)
class RecordRun:
    runs: Union[int, str, None]


@dataclass(frozen=True)
class RecordExtra:
    kind: Optional[str]
    extra_runs: Union[int, str, None] = 0


@dataclass(frozen=True)
class RecordWicket:
    wicket_type: Optional[str]


@dataclass(frozen=True)
class SelectNewBatsman:
    name: Optional[str]


@dataclass(frozen=True)
class ActivateLastManStanding:
    pass


@dataclass(frozen=True)
class SelectBowler:
    name: Optional[str]


@dataclass(frozen=True)
class ChangeStrike:
    action: Optional[str]
    name: Optional[str] = None


@dataclass(frozen=True)
class EndInnings:
    pass


@dataclass(frozen=True)
class Undo:
    pass


@dataclass(frozen=True)
class Reset:
    pass


Event = Union[
    CreateTeams,
    StartInnings,
    RecordRun,
    RecordExtra,
    RecordWicket,
    SelectNewBatsman,
    ActivateLastManStanding,
    SelectBowler,
    ChangeStrike,
    EndInnings,
    Undo,
    Reset,
]

# Events that change the state value and are recorded in the undo history
STATE_EVENTS = (
    CreateTeams,
    StartInnings,
    RecordRun,
    RecordExtra,
    RecordWicket,
    SelectNewBatsman,
    ActivateLastManStanding,
    SelectBowler,
    ChangeStrike,
    EndInnings,
)
