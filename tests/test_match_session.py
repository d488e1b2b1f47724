"""
Tests for MatchSession: undo history, reset and rejected events.
"""
import threading
from dataclasses import replace

from app.engine.events import (
    CreateTeams, StartInnings, RecordRun, RecordExtra, RecordWicket,
    SelectNewBatsman, SelectBowler, EndInnings, Undo, Reset,
)
from app.engine.session import MatchSession
from app.engine.state import SetupPhase

SMALL_CATALOG = {"teamA": ["A1", "A2"], "teamB": ["B1", "B2"]}


def start_match(session: MatchSession):
    session.dispatch(CreateTeams("Lions", "Tigers"))
    outcome = session.dispatch(StartInnings("teamA", "A1", "A2", "B1"))
    assert outcome.success
    return outcome


class TestDispatch:

    def test_fresh_session_uses_catalog(self, session):
        state = session.state
        assert state.setup_phase == SetupPhase.TEAMS
        assert state.available_players["teamA"] == ("A1", "A2", "A3", "A4")
        assert state.roster_size == 11
        assert session.history_size == 0

    def test_accepted_event(self, session):
        start_match(session)
        outcome = session.dispatch(RecordRun(4))
        assert outcome.success
        assert outcome.message == "Run updated"
        assert outcome.status_code == 200
        assert outcome.state is session.state
        assert session.state.score == 4
        assert session.history_size == 3

    def test_create_teams_keeps_loaded_catalog(self, session):
        session.dispatch(CreateTeams("Lions", "Tigers"))
        assert session.state.available_players["teamB"] == ("B1", "B2", "B3", "B4")

    def test_rejected_event_leaves_state_alone(self, session):
        start_match(session)
        before = session.state
        outcome = session.dispatch(RecordRun("abc"))
        assert not outcome.success
        assert outcome.message == "Invalid runs"
        assert outcome.error_kind == "validation"
        assert outcome.status_code == 400
        assert session.state is before
        assert session.history_size == 2

    def test_conflict_status(self, session):
        start_match(session)
        outcome = session.dispatch(SelectBowler("A1"))
        assert outcome.error_kind == "conflict"
        assert outcome.status_code == 409

    def test_precondition_kind(self, session):
        outcome = session.dispatch(RecordRun(1))
        assert outcome.error_kind == "precondition"
        assert outcome.message == "Match not started"

    def test_details_are_passed_through(self, session):
        start_match(session)
        outcome = session.dispatch(EndInnings())
        assert outcome.details == {"target": 1}

    def test_concurrent_events_are_serialized(self, session):
        start_match(session)

        def bowl_wides():
            for _ in range(25):
                session.dispatch(RecordExtra("wide", 0))

        threads = [threading.Thread(target=bowl_wides) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert session.state.score == 200
        assert session.state.extras == 200
        assert session.state.find_bowler("B1").wides == 200


class TestUndo:

    def test_undo_restores_previous_state(self, session):
        start_match(session)
        session.dispatch(RecordRun(2))
        before = session.state

        session.dispatch(RecordRun(4))
        outcome = session.dispatch(Undo())

        assert outcome.success
        assert outcome.message == "Undo successful"
        assert session.state == replace(before, log=before.log[:-1])
        assert session.state.score == 2
        assert session.state.players["A1"].runs == 2

    def test_undo_after_wicket(self, session):
        start_match(session)
        session.dispatch(RecordWicket("bowled"))
        session.dispatch(Undo())
        state = session.state
        assert state.wickets == 0
        assert not state.players["A1"].out
        assert state.striker == "A1"
        assert not state.awaiting_new_batsman
        assert state.fall_of_wickets == ()

    def test_undo_reopens_over(self, session):
        start_match(session)
        for _ in range(6):
            session.dispatch(RecordRun(0))
        assert session.state.awaiting_new_bowler

        session.dispatch(Undo())
        assert session.state.balls == 5
        assert not session.state.awaiting_new_bowler
        assert session.state.match_started

    def test_undo_shrinks_history(self, session):
        start_match(session)
        session.dispatch(RecordRun(1))
        assert session.history_size == 3
        session.dispatch(Undo())
        assert session.history_size == 2

    def test_empty_history(self, session):
        outcome = session.dispatch(Undo())
        assert not outcome.success
        assert outcome.message == "Nothing to undo"
        assert outcome.error_kind == "empty_history"
        assert outcome.status_code == 400

    def test_rejected_events_are_not_undoable(self, session):
        start_match(session)
        session.dispatch(RecordRun(3))
        session.dispatch(SelectNewBatsman("A3"))
        session.dispatch(Undo())
        assert session.state.score == 0

    def test_history_is_bounded(self):
        session = MatchSession(catalog_loader=lambda: SMALL_CATALOG, history_limit=3)
        start_match(session)
        for _ in range(3):
            session.dispatch(RecordRun(1))
        assert session.history_limit == 3
        assert session.history_size == 3

        for _ in range(3):
            assert session.dispatch(Undo()).success
        assert session.state.balls == 0
        assert session.state.match_started
        assert not session.dispatch(Undo()).success


class TestReset:

    def test_reset_clears_match_and_history(self, session):
        start_match(session)
        session.dispatch(RecordRun(4))
        outcome = session.dispatch(Reset())

        assert outcome.success
        assert outcome.message == "Reset done"
        assert session.history_size == 0
        assert session.state.setup_phase == SetupPhase.TEAMS
        assert session.state.score == 0
        assert session.state.log == ()
        assert not session.dispatch(Undo()).success

    def test_reset_is_idempotent(self, session):
        session.dispatch(Reset())
        first = session.state
        session.dispatch(Reset())
        assert session.state == first

    def test_reset_reloads_catalog(self):
        names = {"teamA": ["X1"], "teamB": ["Y1"]}
        session = MatchSession(catalog_loader=lambda: names, history_limit=5)
        assert session.state.available_players["teamA"] == ("X1",)

        names["teamA"] = ["X1", "X2"]
        session.dispatch(Reset())
        assert session.state.available_players["teamA"] == ("X1", "X2")
