"""
JSON-ready view of a MatchState, with the display values a scoreboard needs.
"""
from typing import Optional

from app.engine.state import MatchState, PlayerStat, BowlerStat, FallOfWicket, InningsCard


def _two_dp(value: float) -> str:
    return f"{value:.2f}"


def _round(value: Optional[float]) -> Optional[float]:
    return round(value, 2) if value is not None else None


def player_view(stat: PlayerStat) -> dict:
    return {
        "name": stat.name,
        "runs": stat.runs,
        "ballsFaced": stat.balls_faced,
        "fours": stat.fours,
        "sixes": stat.sixes,
        "out": stat.out,
        "outReason": stat.out_reason,
        "strikeRate": _two_dp(stat.strike_rate),
    }


def bowler_view(stat: BowlerStat) -> dict:
    return {
        "name": stat.name,
        "totalBalls": stat.total_balls,
        "overs": stat.overs_display,
        "runsConceded": stat.runs_conceded,
        "wickets": stat.wickets,
        "maidens": stat.maidens,
        "wides": stat.wides,
        "noBalls": stat.no_balls,
        "economy": _two_dp(stat.economy),
    }


def fall_of_wicket_view(fall: FallOfWicket) -> dict:
    return {
        "player": fall.player,
        "wicketType": fall.wicket_type,
        "score": fall.score,
        "wickets": fall.wickets,
        "overs": fall.overs,
    }


def _card_view(card: Optional[InningsCard]) -> Optional[dict]:
    if card is None:
        return None
    return {
        "players": [player_view(p) for p in card.players.values()],
        "bowlers": [bowler_view(b) for b in card.bowlers],
        "battingOrder": list(card.batting_order),
        "fallOfWickets": [fall_of_wicket_view(f) for f in card.fall_of_wickets],
        "extras": card.extras,
    }


def snapshot(state: MatchState) -> dict:
    """Full read projection of the match"""
    return {
        "matchStarted": state.match_started,
        "setupPhase": state.setup_phase.value,
        "teams": {key: {"name": name} for key, name in state.team_names.items()},
        "availablePlayers": {key: list(names) for key, names in state.available_players.items()},
        "rosterSize": state.roster_size,
        "innings": state.innings,
        "innings1Score": {
            "score": state.innings1_score.score,
            "wickets": state.innings1_score.wickets,
            "balls": state.innings1_score.balls,
            "battingTeam": state.innings1_score.batting_team,
        },
        "innings1Card": _card_view(state.innings1_card),
        "target": state.target,
        "matchBallLimit": state.match_ball_limit,
        "finalResult": state.final_result,
        "battingTeam": state.batting_team,
        "bowlingTeam": state.bowling_team,
        "score": state.score,
        "wickets": state.wickets,
        "balls": state.balls,
        "overs": state.overs_display,
        "extras": state.extras,
        "runRate": _round(state.run_rate),
        "requiredRate": _round(state.required_rate),
        "ballsRemaining": state.balls_remaining,
        "players": [player_view(p) for p in state.players.values()],
        "bowlers": [bowler_view(b) for b in state.bowlers],
        "striker": state.striker,
        "nonStriker": state.non_striker,
        "currentBowler": state.current_bowler,
        "awaitingNewBatsman": state.awaiting_new_batsman,
        "awaitingNewBowler": state.awaiting_new_bowler,
        "lastOverBowler": state.last_over_bowler,
        "lastManStandingMode": state.last_man_standing_mode,
        "inningsComplete": state.innings_complete,
        "battingOrder": list(state.batting_order),
        "fallOfWickets": [fall_of_wicket_view(f) for f in state.fall_of_wickets],
        "thisOver": list(state.this_over),
        "log": list(state.log),
    }
