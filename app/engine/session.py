"""
Owner of the live match.

MatchSession holds the current MatchState value and a bounded undo
history. All events go through dispatch(), which holds a lock for the
whole event so concurrent requests never interleave.
"""
import logging
import threading
from collections import deque
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional

from app.catalog import load_catalog
from app.config import settings
from app.engine.errors import MatchError, EmptyHistoryError
from app.engine.events import Undo, Reset
from app.engine.match_engine import apply_event
from app.engine.state import MatchState, TEAM_KEYS

logger = logging.getLogger(__name__)


@dataclass
class EventOutcome:
    """What an event submission returns, accepted or not"""
    success: bool
    message: str
    state: MatchState
    details: dict = field(default_factory=dict)
    error_kind: Optional[str] = None
    status_code: int = 200


class MatchSession:
    def __init__(
        self,
        catalog_loader: Callable[[], Dict[str, List[str]]] = load_catalog,
        history_limit: Optional[int] = None,
        roster_size: Optional[int] = None,
    ):
        self._catalog_loader = catalog_loader
        self._roster_size = roster_size or settings.DEFAULT_ROSTER_SIZE
        self._history = deque(maxlen=history_limit or settings.HISTORY_LIMIT)
        self._lock = threading.Lock()
        self._state = self._fresh_state()

    @property
    def state(self) -> MatchState:
        return self._state

    @property
    def history_size(self) -> int:
        return len(self._history)

    @property
    def history_limit(self) -> int:
        return self._history.maxlen

    def _fresh_state(self) -> MatchState:
        catalog = self._catalog_loader()
        return MatchState(
            available_players={key: tuple(catalog.get(key, ())) for key in TEAM_KEYS},
            roster_size=self._roster_size,
        )

    def dispatch(self, event) -> EventOutcome:
        """Apply an event to the live match and report the outcome"""
        with self._lock:
            try:
                if isinstance(event, Undo):
                    return self._undo()
                if isinstance(event, Reset):
                    return self._reset()
                transition = apply_event(self._state, event)
            except MatchError as e:
                logger.info("Rejected %s: %s", type(event).__name__, e.message)
                return EventOutcome(
                    success=False,
                    message=e.message,
                    state=self._state,
                    error_kind=e.kind,
                    status_code=e.status_code,
                )

            self._history.append(self._state)
            self._state = transition.state
            logger.debug("Applied %s: %s", type(event).__name__, transition.message)
            return EventOutcome(
                success=True,
                message=transition.message,
                state=self._state,
                details=transition.details,
            )

    def _undo(self) -> EventOutcome:
        if not self._history:
            raise EmptyHistoryError("Nothing to undo")
        restored = self._history.pop()
        self._state = replace(restored, log=restored.log[:-1])
        logger.info("Undo applied, %d snapshot(s) left", len(self._history))
        return EventOutcome(success=True, message="Undo successful", state=self._state)

    def _reset(self) -> EventOutcome:
        self._state = self._fresh_state()
        self._history.clear()
        logger.info("Match reset")
        return EventOutcome(success=True, message="Reset done", state=self._state)
