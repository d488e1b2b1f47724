"""
Ball-by-ball scoring engine.

apply_event(state, event) is the single entry point: it validates the
event against the current state and returns a Transition holding the next
state value. Validation always happens before anything is built, so a
raised MatchError leaves the caller's state untouched.
"""
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional, Tuple

from app.engine.errors import PreconditionError, ValidationError, ConflictError
from app.engine.events import (
    CreateTeams, StartInnings, RecordRun, RecordExtra, RecordWicket,
    SelectNewBatsman, ActivateLastManStanding, SelectBowler, ChangeStrike,
    EndInnings,
)
from app.engine.state import (
    MatchState, SetupPhase, PlayerStat, BowlerStat, FallOfWicket,
    InningsScore, InningsCard, TEAM_KEYS, BALLS_PER_OVER,
    format_overs, other_team,
)

logger = logging.getLogger(__name__)

EXTRA_TYPES = ("wide", "noball")
STRIKE_ACTIONS = ("swap", "set_striker", "set_non_striker")


@dataclass
class Transition:
    """Result of an accepted event"""
    state: MatchState
    message: str
    details: dict = field(default_factory=dict)


def _clean(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_count(value, error_message: str) -> int:
    """Parse a non-negative whole number from an int or a numeric string"""
    if isinstance(value, bool):
        raise ValidationError(error_message)
    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        try:
            number = int(value.strip())
        except ValueError:
            raise ValidationError(error_message)
    else:
        raise ValidationError(error_message)
    if number < 0:
        raise ValidationError(error_message)
    return number


def parse_overs_limit(value) -> int:
    """
    Convert an overs limit such as "20" or "19.3" into legal balls.
    None, "" and 0 mean unlimited and give 0.
    """
    if isinstance(value, bool):
        raise ValidationError(f"Invalid overs limit '{value}'")
    if value is None:
        return 0
    if isinstance(value, int):
        if value < 0:
            raise ValidationError(f"Invalid overs limit '{value}'")
        return value * BALLS_PER_OVER

    text = str(value).strip()
    if not text:
        return 0
    overs_part, _, balls_part = text.partition(".")
    try:
        overs = int(overs_part)
        balls = int(balls_part) if balls_part else 0
    except ValueError:
        raise ValidationError(f"Invalid overs limit '{value}'")
    if overs < 0 or len(balls_part) > 1 or not 0 <= balls < BALLS_PER_OVER:
        raise ValidationError(f"Invalid overs limit '{value}'")
    return overs * BALLS_PER_OVER + balls


def _stamp(state: MatchState, *messages: str) -> MatchState:
    now = datetime.now().strftime("%H:%M:%S")
    return replace(state, log=state.log + tuple(f"{now} - {m}" for m in messages))


def _player(state: MatchState, name: str) -> PlayerStat:
    return state.players.get(name) or PlayerStat(name=name)


def _with_player(state: MatchState, stat: PlayerStat) -> dict:
    players = dict(state.players)
    players[stat.name] = stat
    return players


def _bowler(state: MatchState, name: str) -> BowlerStat:
    return state.find_bowler(name) or BowlerStat(name=name)


def _with_bowler(state: MatchState, stat: BowlerStat) -> Tuple[BowlerStat, ...]:
    if state.find_bowler(stat.name) is None:
        return state.bowlers + (stat,)
    return tuple(stat if b.name == stat.name else b for b in state.bowlers)


def _with_batting_order(state: MatchState, name: str) -> Tuple[str, ...]:
    if name in state.batting_order:
        return state.batting_order
    return state.batting_order + (name,)


def _swap_strike(state: MatchState) -> MatchState:
    # no partner to rotate with in last man standing, or while a crease end is empty
    if state.last_man_standing_mode or not state.striker or not state.non_striker:
        return state
    return replace(state, striker=state.non_striker, non_striker=state.striker)


def _rotate_for_runs(state: MatchState) -> MatchState:
    swapped = _swap_strike(state)
    if swapped is state:
        return state
    return _stamp(swapped, "Strike rotated (odd runs)")


def _require_scoring(state: MatchState):
    if state.setup_phase == SetupPhase.FINISHED:
        raise PreconditionError("Match already finished")
    if state.innings_complete:
        raise PreconditionError("Innings complete, awaiting end of innings")
    if state.awaiting_new_batsman:
        raise PreconditionError("Awaiting new batsman selection")
    if state.awaiting_new_bowler:
        raise PreconditionError("Awaiting next bowler selection")
    if not state.match_started:
        raise PreconditionError("Match not started")
    if not state.striker or not state.current_bowler:
        raise PreconditionError("Striker/bowler not set")


def _complete_over(state: MatchState, rotate: bool) -> MatchState:
    """Close the over just finished and pause until the next bowler is picked"""
    bowlers = state.bowlers
    if state.over_runs == 0 and not state.over_shared and state.current_bowler:
        spell = _bowler(state, state.current_bowler)
        bowlers = _with_bowler(state, replace(spell, maidens=spell.maidens + 1))

    state = replace(
        state,
        bowlers=bowlers,
        awaiting_new_bowler=True,
        last_over_bowler=state.current_bowler,
        match_started=False,
        over_runs=0,
        over_shared=False,
    )
    if rotate:
        state = _swap_strike(state)
    return _stamp(state, f"End of over {format_overs(state.balls)} - awaiting next bowler")


def match_result(state: MatchState, innings_over: bool = False) -> Optional[str]:
    """Result of the chase, or None while it is still open"""
    if state.innings != 2:
        return None
    if state.score >= state.target:
        wickets_left = max(0, state.roster_size - state.wickets)
        return f"{state.team_name(state.batting_team)} WIN by {wickets_left} wickets!"
    if innings_over or state.is_innings_over:
        runs_short = state.target - 1 - state.score
        if runs_short == 0:
            return "Match tied!"
        return f"{state.team_name(state.bowling_team)} WIN by {runs_short} runs!"
    return None


def _finish(state: MatchState, result: str) -> MatchState:
    logger.info("Match finished: %s", result)
    state = replace(
        state,
        final_result=result,
        match_started=False,
        setup_phase=SetupPhase.FINISHED,
        innings_complete=True,
        awaiting_new_batsman=False,
        awaiting_new_bowler=False,
    )
    return _stamp(state, result)


def _after_delivery(state: MatchState, innings_over: bool = False) -> Tuple[MatchState, Optional[str]]:
    """Shared end-of-ball checks: chase result, then end of innings"""
    result = match_result(state, innings_over)
    if result:
        return _finish(state, result), result

    if innings_over or state.is_innings_over:
        state = replace(
            state,
            innings_complete=True,
            match_started=False,
            awaiting_new_batsman=False,
            awaiting_new_bowler=False,
        )
        state = _stamp(
            state,
            f"Innings {state.innings} complete: {state.score}/{state.wickets} "
            f"({state.overs_display} ov) - awaiting end of innings",
        )
    return state, None


def _delivery_transition(state: MatchState, result: Optional[str], message: str) -> Transition:
    if result:
        return Transition(state, "Match ended", {"finalResult": result})
    return Transition(state, message)


# Event handlers

def create_teams(state: MatchState, event: CreateTeams) -> Transition:
    roster_size = state.roster_size
    if event.roster_size is not None:
        roster_size = _parse_count(event.roster_size, "rosterSize must be a whole number")
        if roster_size < 2:
            raise ValidationError("rosterSize must be at least 2")

    available = state.available_players
    if event.roster_candidates is not None:
        available = {
            key: tuple(event.roster_candidates.get(key, ()))
            for key in TEAM_KEYS
        }

    team_names = {
        "teamA": _clean(event.team_a_name) or "Team A",
        "teamB": _clean(event.team_b_name) or "Team B",
    }
    new_state = MatchState(
        setup_phase=SetupPhase.INNINGS_SETUP,
        team_names=team_names,
        available_players=available,
        roster_size=roster_size,
    )
    new_state = _stamp(new_state, f"Teams created: {team_names['teamA']} vs {team_names['teamB']}")
    return Transition(new_state, "Teams created")


def start_innings(state: MatchState, event: StartInnings) -> Transition:
    if state.setup_phase == SetupPhase.FINISHED:
        raise PreconditionError("Match already finished")
    if state.setup_phase != SetupPhase.INNINGS_SETUP:
        raise PreconditionError("Innings can only be started during innings setup")

    batting = _clean(event.batting_team)
    striker = _clean(event.opening_striker)
    non_striker = _clean(event.opening_non_striker)
    bowler = _clean(event.starting_bowler)
    if not (batting and striker and non_striker and bowler):
        raise ValidationError("Missing parameters")
    if striker == non_striker:
        raise ConflictError("Striker and non-striker must be different players")
    if bowler in (striker, non_striker):
        raise ConflictError("Bowler cannot be one of the opening batsmen")

    if state.innings == 1:
        if batting not in TEAM_KEYS:
            raise ValidationError(f"Unknown batting team '{batting}'")
        batting_team, bowling_team = batting, other_team(batting)
    else:
        # sides were swapped by EndInnings
        batting_team, bowling_team = state.batting_team, state.bowling_team

    if event.overs_limit is None or _clean(event.overs_limit) is None:
        ball_limit = 0
        if state.innings == 2:
            # an unlimited first innings caps the chase at the balls it took
            ball_limit = state.match_ball_limit or state.innings1_score.balls
    else:
        ball_limit = parse_overs_limit(event.overs_limit)

    players = dict(state.players)
    for name in (striker, non_striker):
        players.setdefault(name, PlayerStat(name=name))

    state = replace(
        state,
        batting_team=batting_team,
        bowling_team=bowling_team,
        players=players,
        bowlers=_with_bowler(state, _bowler(state, bowler)),
        striker=striker,
        non_striker=non_striker,
        current_bowler=bowler,
        batting_order=(striker, non_striker),
        awaiting_new_batsman=False,
        awaiting_new_bowler=False,
        last_over_bowler=None,
        last_man_standing_mode=False,
        innings_complete=False,
        match_ball_limit=ball_limit,
        this_over=(),
        over_runs=0,
        over_shared=False,
        match_started=True,
        setup_phase=SetupPhase.LIVE,
    )
    limit_text = f"{format_overs(ball_limit)} overs" if ball_limit else "unlimited overs"
    state = _stamp(
        state,
        f"Innings {state.innings} started. {state.team_name(batting_team)} batting ({limit_text}).",
    )
    return Transition(state, "Innings started")


def record_run(state: MatchState, event: RecordRun) -> Transition:
    _require_scoring(state)
    runs = _parse_count(event.runs, "Invalid runs")

    batsman = _player(state, state.striker)
    batsman = replace(
        batsman,
        runs=batsman.runs + runs,
        balls_faced=batsman.balls_faced + 1,
        fours=batsman.fours + (1 if runs == 4 else 0),
        sixes=batsman.sixes + (1 if runs == 6 else 0),
    )
    spell = _bowler(state, state.current_bowler)
    spell = replace(
        spell,
        total_balls=spell.total_balls + 1,
        runs_conceded=spell.runs_conceded + runs,
    )

    state = replace(
        state,
        players=_with_player(state, batsman),
        bowlers=_with_bowler(state, spell),
        score=state.score + runs,
        balls=state.balls + 1,
        this_over=state.this_over + (str(runs),),
        over_runs=state.over_runs + runs,
    )
    state = _stamp(state, f"{batsman.name} scored {runs}")

    if runs % 2 == 1:
        state = _rotate_for_runs(state)

    if state.balls % BALLS_PER_OVER == 0:
        state = _complete_over(state, rotate=True)

    state, result = _after_delivery(state)
    return _delivery_transition(state, result, "Run updated")


def record_extra(state: MatchState, event: RecordExtra) -> Transition:
    _require_scoring(state)
    kind = (_clean(event.kind) or "").lower()
    if kind not in EXTRA_TYPES:
        raise ValidationError("Invalid extra type")
    extra_runs = 0 if event.extra_runs is None else _parse_count(event.extra_runs, "Invalid extra runs")

    # one-run penalty plus whatever was run
    total = 1 + extra_runs
    spell = _bowler(state, state.current_bowler)
    players = state.players
    if kind == "noball":
        spell = replace(spell, runs_conceded=spell.runs_conceded + total, no_balls=spell.no_balls + 1)
        batsman = _player(state, state.striker)
        players = _with_player(state, replace(batsman, runs=batsman.runs + extra_runs))
        extras = state.extras + 1
        symbol = "Nb"
        line = f"No-ball +{extra_runs}"
    else:
        spell = replace(spell, runs_conceded=spell.runs_conceded + total, wides=spell.wides + 1)
        extras = state.extras + total
        symbol = "Wd"
        line = f"Wide +{extra_runs}"
    if extra_runs:
        symbol = f"{symbol}+{extra_runs}"

    state = replace(
        state,
        players=players,
        bowlers=_with_bowler(state, spell),
        score=state.score + total,
        extras=extras,
        this_over=state.this_over + (symbol,),
        over_runs=state.over_runs + total,
    )
    state = _stamp(state, line)

    if total % 2 == 1:
        state = _rotate_for_runs(state)

    state, result = _after_delivery(state)
    return _delivery_transition(state, result, "Extras recorded")


def record_wicket(state: MatchState, event: RecordWicket) -> Transition:
    _require_scoring(state)
    wicket_type = _clean(event.wicket_type)
    if not wicket_type:
        raise ValidationError("wicketType required")

    batsman = _player(state, state.striker)
    batsman = replace(
        batsman,
        out=True,
        out_reason=wicket_type,
        balls_faced=batsman.balls_faced + 1,
    )
    spell = _bowler(state, state.current_bowler)
    spell = replace(spell, total_balls=spell.total_balls + 1, wickets=spell.wickets + 1)

    wickets = state.wickets + 1
    balls = state.balls + 1
    fall = FallOfWicket(
        player=batsman.name,
        wicket_type=wicket_type,
        score=state.score,
        wickets=wickets,
        overs=format_overs(balls),
    )
    state = replace(
        state,
        players=_with_player(state, batsman),
        bowlers=_with_bowler(state, spell),
        wickets=wickets,
        balls=balls,
        fall_of_wickets=state.fall_of_wickets + (fall,),
        this_over=state.this_over + ("W",),
        striker=None,
        match_started=False,
    )
    state = _stamp(state, f"{batsman.name} OUT ({wicket_type})")
    over_done = state.balls % BALLS_PER_OVER == 0

    if state.last_man_standing_mode or state.is_all_out:
        if over_done:
            state = _complete_over(state, rotate=False)
        state, result = _after_delivery(state, innings_over=True)
        message = "Last man out. Innings ended" if state.last_man_standing_mode else "All out. Innings ended"
        return _delivery_transition(state, result, message)

    state = replace(state, awaiting_new_batsman=True)
    if over_done:
        state = _complete_over(state, rotate=False)
    state, result = _after_delivery(state)
    transition = _delivery_transition(state, result, "Wicket recorded")
    transition.details["awaitingNewBatsman"] = state.awaiting_new_batsman
    return transition


def _resume(state: MatchState, **changes) -> MatchState:
    """Apply changes and restart play once no pause flag is left"""
    state = replace(state, **changes)
    paused = state.awaiting_new_batsman or state.awaiting_new_bowler
    return replace(state, match_started=not paused)


def select_new_batsman(state: MatchState, event: SelectNewBatsman) -> Transition:
    if state.setup_phase != SetupPhase.LIVE or not state.awaiting_new_batsman:
        raise PreconditionError("Not awaiting new batsman")
    name = _clean(event.name)
    if not name:
        raise ValidationError("Name required")

    if name == state.non_striker:
        # survivor takes strike, nobody new comes in
        state = _resume(
            state,
            striker=state.non_striker,
            non_striker=state.striker,
            awaiting_new_batsman=False,
        )
        state = _stamp(state, f"{name} takes strike")
        return Transition(state, "Non-striker moved to strike")

    existing = state.players.get(name)
    if existing and existing.out:
        raise ConflictError(f"{name} is already out")
    if name == state.current_bowler:
        raise ConflictError(f"{name} is bowling and cannot bat")

    state = _resume(
        state,
        players=_with_player(state, _player(state, name)),
        batting_order=_with_batting_order(state, name),
        striker=name,
        awaiting_new_batsman=False,
    )
    state = _stamp(state, f"New batsman: {name}")
    return Transition(state, "New batsman added")


def activate_last_man_standing(state: MatchState, event: ActivateLastManStanding) -> Transition:
    if state.setup_phase != SetupPhase.LIVE or not state.awaiting_new_batsman:
        raise PreconditionError("Not awaiting new batsman")
    at_crease = [name for name in (state.striker, state.non_striker) if name]
    if len(at_crease) != 1:
        raise ConflictError("No survivor to continue")

    state = _resume(
        state,
        striker=at_crease[0],
        non_striker=None,
        last_man_standing_mode=True,
        awaiting_new_batsman=False,
    )
    state = _stamp(state, f"Last man standing activated: {at_crease[0]} bats alone")
    return Transition(state, "Last man standing activated")


def select_bowler(state: MatchState, event: SelectBowler) -> Transition:
    if state.setup_phase == SetupPhase.FINISHED:
        raise PreconditionError("Match already finished")
    if state.setup_phase != SetupPhase.LIVE:
        raise PreconditionError("Innings not started")
    if state.innings_complete:
        raise PreconditionError("Innings complete, awaiting end of innings")
    name = _clean(event.name)
    if not name:
        raise ValidationError("No bowler provided")
    if name in (state.striker, state.non_striker):
        raise ConflictError(f"{name} is batting and cannot bowl")

    warning_same = state.last_over_bowler is not None and state.last_over_bowler == name
    bowlers = _with_bowler(state, _bowler(state, name))

    if state.awaiting_new_bowler:
        state = _resume(
            state,
            bowlers=bowlers,
            current_bowler=name,
            awaiting_new_bowler=False,
            last_over_bowler=None,
            this_over=(),
        )
        state = _stamp(state, f"Next bowler selected: {name}")
        resumed = True
    else:
        shared = state.over_shared or (bool(state.this_over) and name != state.current_bowler)
        state = replace(state, bowlers=bowlers, current_bowler=name, over_shared=shared)
        state = _stamp(state, f"Bowler changed to {name}")
        resumed = False

    message = "Bowler selected"
    if warning_same:
        message = f"Bowler selected ({name} also bowled the previous over)"
    return Transition(state, message, {"resumed": resumed, "warningSame": warning_same})


def _check_new_batsman_role(state: MatchState, name: str):
    stat = state.players.get(name)
    if stat and stat.out:
        raise ConflictError("Player unavailable")
    if name == state.current_bowler:
        raise ConflictError(f"{name} is bowling and cannot bat")


def change_strike(state: MatchState, event: ChangeStrike) -> Transition:
    if not state.match_started:
        raise PreconditionError("Match not started")
    action = (_clean(event.action) or "").lower()
    if action == "set":
        action = "set_striker"
    if action not in STRIKE_ACTIONS:
        raise ValidationError("Invalid action")

    if action == "swap":
        if not state.striker or not state.non_striker:
            raise ConflictError("Both batsmen must be at the crease to swap strike")
        state = _stamp(_swap_strike(state), "Strike swapped manually")
        return Transition(state, "Strike swapped")

    name = _clean(event.name)
    if not name:
        raise ValidationError("Name required")
    if state.last_man_standing_mode:
        raise ConflictError("Only one batsman is at the crease in last man standing")

    if action == "set_striker":
        _check_new_batsman_role(state, name)
        if name == state.striker:
            return Transition(state, f"{name} is already on strike")
        if name == state.non_striker:
            state = _swap_strike(state)
        else:
            state = replace(
                state,
                players=_with_player(state, _player(state, name)),
                batting_order=_with_batting_order(state, name),
                non_striker=state.striker,
                striker=name,
            )
        state = _stamp(state, f"Strike changed - new striker: {name}")
        return Transition(state, "Striker changed")

    if name == state.striker:
        raise ConflictError(f"{name} is already on strike")
    _check_new_batsman_role(state, name)
    if name == state.non_striker:
        return Transition(state, f"{name} is already the non-striker")
    state = replace(
        state,
        players=_with_player(state, _player(state, name)),
        batting_order=_with_batting_order(state, name),
        non_striker=name,
    )
    state = _stamp(state, f"Non-striker changed: {name}")
    return Transition(state, "Non-striker changed")


def end_innings(state: MatchState, event: EndInnings) -> Transition:
    if state.setup_phase == SetupPhase.FINISHED:
        raise PreconditionError("Match already finished")

    if state.innings == 2:
        if state.setup_phase not in (SetupPhase.INNINGS_SETUP, SetupPhase.LIVE):
            raise PreconditionError("Innings 2 is not in progress")
        result = "Match ended manually"
        return Transition(_finish(state, result), "Match ended", {"finalResult": result})

    if state.setup_phase != SetupPhase.LIVE:
        raise PreconditionError("Innings 1 is not in progress")

    target = state.score + 1
    state = replace(
        state,
        innings=2,
        innings1_score=InningsScore(
            score=state.score,
            wickets=state.wickets,
            balls=state.balls,
            batting_team=state.batting_team,
        ),
        innings1_card=InningsCard(
            players=state.players,
            bowlers=state.bowlers,
            batting_order=state.batting_order,
            fall_of_wickets=state.fall_of_wickets,
            extras=state.extras,
        ),
        target=target,
        batting_team=state.bowling_team,
        bowling_team=state.batting_team,
        score=0,
        wickets=0,
        balls=0,
        extras=0,
        players={},
        bowlers=(),
        striker=None,
        non_striker=None,
        current_bowler=None,
        awaiting_new_batsman=False,
        awaiting_new_bowler=False,
        last_over_bowler=None,
        last_man_standing_mode=False,
        innings_complete=False,
        batting_order=(),
        fall_of_wickets=(),
        this_over=(),
        over_runs=0,
        over_shared=False,
        match_started=False,
        setup_phase=SetupPhase.INNINGS_SETUP,
    )
    state = _stamp(state, f"Innings 1 ended. Target for {state.team_name(state.batting_team)}: {target}")
    return Transition(state, "Innings 1 ended. Setup innings 2", {"target": target})


HANDLERS = {
    CreateTeams: create_teams,
    StartInnings: start_innings,
    RecordRun: record_run,
    RecordExtra: record_extra,
    RecordWicket: record_wicket,
    SelectNewBatsman: select_new_batsman,
    ActivateLastManStanding: activate_last_man_standing,
    SelectBowler: select_bowler,
    ChangeStrike: change_strike,
    EndInnings: end_innings,
}


def apply_event(state: MatchState, event) -> Transition:
    """Apply one state event. Raises a MatchError subclass on rejection."""
    handler = HANDLERS.get(type(event))
    if handler is None:
        raise ValidationError(f"Unsupported event {type(event).__name__}")
    return handler(state, event)
