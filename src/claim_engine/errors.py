"""Error taxonomy for the claim engine."""


class ClaimEngineError(Exception):
    """Base class for claim engine errors."""


class InvalidTransition(ClaimEngineError):
    """A claim or appeal is not in the state the requested transition needs."""

    def __init__(self, subject: str, current: str, event: str, detail: str | None = None):
        self.subject = subject
        self.current = current
        self.event = event
        message = f"Cannot apply '{event}' to {subject} in status '{current}'"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class MissingRequiredField(ClaimEngineError):
    """A value business logic cannot default is absent."""

    def __init__(self, field: str, context: str | None = None):
        self.field = field
        message = f"Missing required field '{field}'"
        if context:
            message += f" for {context}"
        super().__init__(message)


class NotFound(ClaimEngineError):
    """A repository lookup missed."""

    def __init__(self, kind: str, key: object):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} {key} not found")


class UnknownField(ClaimEngineError):
    """A change names fields the record does not have."""

    def __init__(self, fields: list[str], record: str = "claim"):
        self.fields = fields
        super().__init__(f"Unknown {record} fields: {', '.join(fields)}")
