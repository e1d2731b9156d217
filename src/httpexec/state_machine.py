"""Attempt state machine for a single executor call."""

from enum import Enum, auto
from typing import ClassVar


class AttemptState(Enum):
    """States of one executor call.

    State transitions:
        PENDING -> ATTEMPTING: First send starts
        ATTEMPTING -> COMPLETED: A non-retryable response was received
        ATTEMPTING -> RETRYING: Retryable status or transient failure
        RETRYING -> ATTEMPTING: Backoff elapsed, next send starts
        ATTEMPTING -> EXHAUSTED: Attempts ran out on a retryable outcome
        ATTEMPTING -> FAILED: Non-retryable failure
        ATTEMPTING/RETRYING -> CANCELLED: Caller cancelled
        PENDING -> FAILED: Configuration could not be parsed
    """

    PENDING = auto()
    ATTEMPTING = auto()
    RETRYING = auto()
    COMPLETED = auto()
    EXHAUSTED = auto()
    FAILED = auto()
    CANCELLED = auto()


class AttemptStateError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_state: AttemptState, to_state: AttemptState) -> None:
        """Initialize the error.

        Args:
            from_state: The current state.
            to_state: The attempted target state.
        """
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid state transition: {from_state.name} -> {to_state.name}"
        )


class AttemptStateMachine:
    """State machine for the executor's attempt loop.

    Also counts attempts so the loop and the result agree on retry counts.
    """

    VALID_TRANSITIONS: ClassVar[dict[AttemptState, set[AttemptState]]] = {
        AttemptState.PENDING: {AttemptState.ATTEMPTING, AttemptState.FAILED},
        AttemptState.ATTEMPTING: {
            AttemptState.COMPLETED,
            AttemptState.RETRYING,
            AttemptState.EXHAUSTED,
            AttemptState.FAILED,
            AttemptState.CANCELLED,
        },
        AttemptState.RETRYING: {AttemptState.ATTEMPTING, AttemptState.CANCELLED},
        AttemptState.COMPLETED: set(),
        AttemptState.EXHAUSTED: set(),
        AttemptState.FAILED: set(),
        AttemptState.CANCELLED: set(),
    }

    TERMINAL_STATES: ClassVar[frozenset[AttemptState]] = frozenset(
        {
            AttemptState.COMPLETED,
            AttemptState.EXHAUSTED,
            AttemptState.FAILED,
            AttemptState.CANCELLED,
        }
    )

    def __init__(self) -> None:
        """Initialize the state machine in PENDING state."""
        self._state = AttemptState.PENDING
        self._attempt = 0

    @property
    def state(self) -> AttemptState:
        """Get the current state."""
        return self._state

    @property
    def attempt(self) -> int:
        """Number of the current (or last) attempt, 1-based."""
        return self._attempt

    @property
    def retry_attempts(self) -> int:
        """Attempts made beyond the first."""
        return max(0, self._attempt - 1)

    def can_transition(self, to_state: AttemptState) -> bool:
        """Check if a transition to the given state is valid."""
        return to_state in self.VALID_TRANSITIONS.get(self._state, set())

    def transition(self, to_state: AttemptState) -> None:
        """Transition to a new state.

        Entering ATTEMPTING increments the attempt counter.

        Args:
            to_state: The target state.

        Raises:
            AttemptStateError: If the transition is invalid.
        """
        if not self.can_transition(to_state):
            raise AttemptStateError(self._state, to_state)
        if to_state == AttemptState.ATTEMPTING:
            self._attempt += 1
        self._state = to_state

    def is_terminal(self) -> bool:
        """Check if no more transitions are allowed."""
        return self._state in self.TERMINAL_STATES
