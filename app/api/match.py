from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from typing import Optional

from app.engine.events import (
    CreateTeams, StartInnings, RecordRun, RecordExtra, RecordWicket,
    SelectNewBatsman, ActivateLastManStanding, SelectBowler, ChangeStrike,
    EndInnings, Undo, Reset,
)
from app.engine.session import MatchSession, EventOutcome
from app.engine.snapshot import snapshot
from app.catalog import normalize_catalog
from app.api.schemas import (
    CreateTeamsRequest, StartInningsRequest, ExtraRequest, WicketRequest,
    NewBatsmanRequest, LastManStandingRequest, SelectBowlerRequest,
    ChangeStrikeRequest, EventResponse, MatchStateResponse, CatalogResponse,
)

router = APIRouter(tags=["Match Scoring"])

# The one match this process tracks
_session: Optional[MatchSession] = None


def get_match_session() -> MatchSession:
    global _session
    if _session is None:
        _session = MatchSession()
    return _session


def _state_response(outcome_state) -> MatchStateResponse:
    return MatchStateResponse.model_validate(snapshot(outcome_state))


def _respond(outcome: EventOutcome):
    body = EventResponse(
        success=outcome.success,
        message=outcome.message,
        error_kind=outcome.error_kind,
        details=outcome.details,
        state=_state_response(outcome.state),
    )
    if outcome.success:
        return body
    return JSONResponse(status_code=outcome.status_code, content=body.model_dump(by_alias=True))


@router.get("/score", response_model=MatchStateResponse)
def get_score(session: MatchSession = Depends(get_match_session)):
    """Current match state"""
    return _state_response(session.state)


@router.get("/players", response_model=CatalogResponse)
def get_players(session: MatchSession = Depends(get_match_session)):
    """Candidate player names for both sides"""
    available = session.state.available_players
    return CatalogResponse(team_a=list(available["teamA"]), team_b=list(available["teamB"]))


@router.post("/createTeams", response_model=EventResponse)
def create_teams(request: CreateTeamsRequest, session: MatchSession = Depends(get_match_session)):
    candidates = normalize_catalog(request.players) if request.players is not None else None
    return _respond(session.dispatch(CreateTeams(
        team_a_name=request.team_a.name if request.team_a else None,
        team_b_name=request.team_b.name if request.team_b else None,
        roster_candidates=candidates,
        roster_size=request.roster_size,
    )))


@router.post("/setTeamsAndMatch", response_model=EventResponse)
def start_innings(request: StartInningsRequest, session: MatchSession = Depends(get_match_session)):
    """Start innings 1 or 2 with openers and a bowler"""
    return _respond(session.dispatch(StartInnings(
        batting_team=request.batting_team,
        opening_striker=request.opening_striker,
        opening_non_striker=request.opening_non_striker,
        starting_bowler=request.starting_bowler,
        overs_limit=request.overs_limit,
    )))


@router.post("/run/{value}", response_model=EventResponse)
def record_run(value: str, session: MatchSession = Depends(get_match_session)):
    return _respond(session.dispatch(RecordRun(runs=value)))


@router.post("/extras", response_model=EventResponse)
def record_extra(request: ExtraRequest, session: MatchSession = Depends(get_match_session)):
    return _respond(session.dispatch(RecordExtra(kind=request.type, extra_runs=request.extra_runs)))


@router.post("/wicket", response_model=EventResponse)
def record_wicket(request: WicketRequest, session: MatchSession = Depends(get_match_session)):
    return _respond(session.dispatch(RecordWicket(wicket_type=request.wicket_type)))


@router.post("/newBatsman", response_model=EventResponse)
def new_batsman(request: NewBatsmanRequest, session: MatchSession = Depends(get_match_session)):
    return _respond(session.dispatch(SelectNewBatsman(name=request.name)))


@router.post("/lastManStanding", response_model=EventResponse)
def last_man_standing(
    request: Optional[LastManStandingRequest] = None,
    session: MatchSession = Depends(get_match_session),
):
    if request is not None and not request.use_last_man:
        outcome = EventOutcome(
            success=False,
            message="useLastMan must be true",
            state=session.state,
            error_kind="validation",
            status_code=400,
        )
        return _respond(outcome)
    return _respond(session.dispatch(ActivateLastManStanding()))


@router.post("/selectBowler", response_model=EventResponse)
def select_bowler(request: SelectBowlerRequest, session: MatchSession = Depends(get_match_session)):
    return _respond(session.dispatch(SelectBowler(name=request.bowler)))


@router.post("/changeStrike", response_model=EventResponse)
def change_strike(request: ChangeStrikeRequest, session: MatchSession = Depends(get_match_session)):
    """Manual strike override: swap, set_striker or set_non_striker"""
    return _respond(session.dispatch(ChangeStrike(action=request.action, name=request.name)))


@router.post("/endInnings", response_model=EventResponse)
def end_innings(session: MatchSession = Depends(get_match_session)):
    """End innings 1, or terminate the match during innings 2"""
    return _respond(session.dispatch(EndInnings()))


@router.post("/undo", response_model=EventResponse)
def undo(session: MatchSession = Depends(get_match_session)):
    return _respond(session.dispatch(Undo()))


@router.post("/reset", response_model=EventResponse)
def reset(session: MatchSession = Depends(get_match_session)):
    return _respond(session.dispatch(Reset()))
