from enum import Enum


class SessionState(Enum):
    """Lifecycle of one streaming session.

    ``IDLE -> REQUESTING -> STREAMING -> ENDED | ERRORED``. A session in
    ``ENDED`` or ``ERRORED`` never changes again; a new ``fetch`` starts
    a fresh session instead.
    """

    IDLE = "idle"
    REQUESTING = "requesting"
    STREAMING = "streaming"
    ENDED = "ended"
    ERRORED = "errored"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionState.ENDED, SessionState.ERRORED)
