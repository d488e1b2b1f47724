"""
Match state value types.

Every type here is frozen. Events produce a new MatchState with
dataclasses.replace, so unchanged players/bowlers are shared between
the live state and the snapshots kept for undo.
"""
import enum
from dataclasses import dataclass, field
from typing import Optional, Tuple, Dict


TEAM_KEYS = ("teamA", "teamB")
BALLS_PER_OVER = 6


class SetupPhase(str, enum.Enum):
    TEAMS = "teams"
    XI_SELECTION = "xi_selection"  # not used, teams go straight to innings setup
    INNINGS_SETUP = "innings_setup"
    LIVE = "live"
    FINISHED = "finished"


def format_overs(balls: int) -> str:
    return f"{balls // BALLS_PER_OVER}.{balls % BALLS_PER_OVER}"


def other_team(team_key: str) -> str:
    return "teamB" if team_key == "teamA" else "teamA"


@dataclass(frozen=True)
class PlayerStat:
    """A batsman's innings"""
    name: str
    runs: int = 0
    balls_faced: int = 0
    fours: int = 0
    sixes: int = 0
    out: bool = False
    out_reason: Optional[str] = None

    @property
    def strike_rate(self) -> float:
        if self.balls_faced == 0:
            return 0.0
        return (self.runs / self.balls_faced) * 100


@dataclass(frozen=True)
class BowlerStat:
    """A bowler's spell. total_balls counts legal deliveries only."""
    name: str
    total_balls: int = 0
    runs_conceded: int = 0
    wickets: int = 0
    maidens: int = 0
    wides: int = 0
    no_balls: int = 0

    @property
    def overs_display(self) -> str:
        return format_overs(self.total_balls)

    @property
    def economy(self) -> float:
        if self.total_balls == 0:
            return 0.0
        return self.runs_conceded / (self.total_balls / BALLS_PER_OVER)


@dataclass(frozen=True)
class FallOfWicket:
    player: str
    wicket_type: str
    score: int
    wickets: int
    overs: str


@dataclass(frozen=True)
class InningsScore:
    """First innings totals, frozen when the innings ends"""
    score: int = 0
    wickets: int = 0
    balls: int = 0
    batting_team: Optional[str] = None


@dataclass(frozen=True)
class InningsCard:
    """First innings scorecard, kept for display after the players reset"""
    players: Dict[str, PlayerStat] = field(default_factory=dict)
    bowlers: Tuple[BowlerStat, ...] = ()
    batting_order: Tuple[str, ...] = ()
    fall_of_wickets: Tuple[FallOfWicket, ...] = ()
    extras: int = 0


@dataclass(frozen=True)
class MatchState:
    """The whole scoring state of the single match being tracked"""
    match_started: bool = False
    setup_phase: SetupPhase = SetupPhase.TEAMS

    team_names: Dict[str, str] = field(
        default_factory=lambda: {"teamA": "Team A", "teamB": "Team B"}
    )
    available_players: Dict[str, Tuple[str, ...]] = field(
        default_factory=lambda: {"teamA": (), "teamB": ()}
    )
    roster_size: int = 11

    innings: int = 1
    innings1_score: InningsScore = field(default_factory=InningsScore)
    innings1_card: Optional[InningsCard] = None
    target: int = 0
    match_ball_limit: int = 0  # 0 = unlimited
    final_result: Optional[str] = None

    batting_team: Optional[str] = None
    bowling_team: Optional[str] = None

    score: int = 0
    wickets: int = 0
    balls: int = 0  # legal deliveries only
    extras: int = 0

    players: Dict[str, PlayerStat] = field(default_factory=dict)
    bowlers: Tuple[BowlerStat, ...] = ()

    striker: Optional[str] = None
    non_striker: Optional[str] = None
    current_bowler: Optional[str] = None

    awaiting_new_batsman: bool = False
    awaiting_new_bowler: bool = False
    last_over_bowler: Optional[str] = None
    last_man_standing_mode: bool = False
    innings_complete: bool = False

    batting_order: Tuple[str, ...] = ()
    fall_of_wickets: Tuple[FallOfWicket, ...] = ()

    this_over: Tuple[str, ...] = ()
    over_runs: int = 0
    over_shared: bool = False  # more than one bowler in the over in progress

    log: Tuple[str, ...] = ()

    @property
    def overs_display(self) -> str:
        return format_overs(self.balls)

    @property
    def run_rate(self) -> float:
        if self.balls == 0:
            return 0.0
        return (self.score / self.balls) * BALLS_PER_OVER

    @property
    def balls_remaining(self) -> Optional[int]:
        if not self.match_ball_limit:
            return None
        return max(0, self.match_ball_limit - self.balls)

    @property
    def required_rate(self) -> Optional[float]:
        if self.innings != 2 or self.balls_remaining is None:
            return None
        if self.balls_remaining == 0:
            return None
        remaining = max(0, self.target - self.score)
        return (remaining / self.balls_remaining) * BALLS_PER_OVER

    @property
    def is_all_out(self) -> bool:
        return self.wickets >= self.roster_size

    @property
    def is_innings_over(self) -> bool:
        if self.innings_complete or self.is_all_out:
            return True
        if self.match_ball_limit and self.balls >= self.match_ball_limit:
            return True
        return False

    def team_name(self, team_key: Optional[str]) -> str:
        if team_key is None:
            return ""
        return self.team_names.get(team_key, team_key)

    def find_bowler(self, name: str) -> Optional[BowlerStat]:
        return next((b for b in self.bowlers if b.name == name), None)
