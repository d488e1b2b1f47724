"""
Match engine errors.

Every rejection is raised before a new state is built, so a caller that
catches MatchError still holds the unchanged state.
"""


class MatchError(Exception):
    kind = "match_error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PreconditionError(MatchError):
    """Event not allowed in the current phase of the match"""
    kind = "precondition"


class ValidationError(MatchError):
    """Malformed event payload"""
    kind = "validation"


class ConflictError(MatchError):
    """Payload clashes with the players currently in a role"""
    kind = "conflict"
    status_code = 409


class EmptyHistoryError(MatchError):
    kind = "empty_history"
