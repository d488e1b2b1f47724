from app.engine.match_engine import apply_event, Transition
from app.engine.session import MatchSession, EventOutcome
from app.engine.state import MatchState, SetupPhase
from app.engine.snapshot import snapshot

__all__ = ["apply_event", "Transition", "MatchSession", "EventOutcome", "MatchState", "SetupPhase", "snapshot"]
