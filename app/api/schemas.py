"""
Pydantic schemas for API request/response models
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Optional, Union


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


# Request Schemas
class TeamName(BaseModel):
    name: Optional[str] = None


class CreateTeamsRequest(CamelModel):
    team_a: Optional[TeamName] = None
    team_b: Optional[TeamName] = None
    # Overrides the loaded catalog: a list for both sides or {"teamA": [...], "teamB": [...]}
    players: Optional[Union[list[str], dict[str, list[str]]]] = None
    roster_size: Optional[int] = None


class StartInningsRequest(CamelModel):
    batting_team: Optional[str] = None
    opening_striker: Optional[str] = None
    opening_non_striker: Optional[str] = None
    starting_bowler: Optional[str] = None
    overs_limit: Optional[Union[int, float, str]] = None  # "20" or "19.3"


class ExtraRequest(CamelModel):
    type: Optional[str] = None  # wide, noball
    extra_runs: Optional[Union[int, str]] = 0


class WicketRequest(CamelModel):
    wicket_type: Optional[str] = None


class NewBatsmanRequest(CamelModel):
    name: Optional[str] = None


class LastManStandingRequest(CamelModel):
    use_last_man: bool = True


class SelectBowlerRequest(CamelModel):
    bowler: Optional[str] = None


class ChangeStrikeRequest(CamelModel):
    action: Optional[str] = None  # swap, set_striker, set_non_striker
    name: Optional[str] = None


# Match State Schemas
class PlayerStatResponse(CamelModel):
    name: str
    runs: int = 0
    balls_faced: int = 0
    fours: int = 0
    sixes: int = 0
    out: bool = False
    out_reason: Optional[str] = None
    strike_rate: str = "0.00"


class BowlerStatResponse(CamelModel):
    name: str
    total_balls: int = 0
    overs: str = "0.0"
    runs_conceded: int = 0
    wickets: int = 0
    maidens: int = 0
    wides: int = 0
    no_balls: int = 0
    economy: str = "0.00"


class FallOfWicketResponse(CamelModel):
    player: str
    wicket_type: str
    score: int
    wickets: int
    overs: str


class InningsScoreResponse(CamelModel):
    score: int = 0
    wickets: int = 0
    balls: int = 0
    batting_team: Optional[str] = None


class InningsCardResponse(CamelModel):
    players: list[PlayerStatResponse]
    bowlers: list[BowlerStatResponse]
    batting_order: list[str]
    fall_of_wickets: list[FallOfWicketResponse]
    extras: int = 0


class MatchStateResponse(CamelModel):
    match_started: bool
    setup_phase: str
    teams: dict[str, TeamName]
    available_players: dict[str, list[str]]
    roster_size: int

    innings: int
    innings1_score: InningsScoreResponse
    innings1_card: Optional[InningsCardResponse] = None
    target: int
    match_ball_limit: int
    final_result: Optional[str] = None

    batting_team: Optional[str] = None
    bowling_team: Optional[str] = None

    score: int
    wickets: int
    balls: int
    overs: str
    extras: int
    run_rate: float
    required_rate: Optional[float] = None
    balls_remaining: Optional[int] = None

    players: list[PlayerStatResponse]
    bowlers: list[BowlerStatResponse]

    striker: Optional[str] = None
    non_striker: Optional[str] = None
    current_bowler: Optional[str] = None

    awaiting_new_batsman: bool
    awaiting_new_bowler: bool
    last_over_bowler: Optional[str] = None
    last_man_standing_mode: bool
    innings_complete: bool

    batting_order: list[str]
    fall_of_wickets: list[FallOfWicketResponse]
    this_over: list[str]
    log: list[str]


class EventResponse(CamelModel):
    success: bool
    message: str
    error_kind: Optional[str] = None
    details: dict = {}
    state: MatchStateResponse


class CatalogResponse(CamelModel):
    team_a: list[str]
    team_b: list[str]
