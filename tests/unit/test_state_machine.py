"""Unit tests for the attempt state machine."""

import pytest

from httpexec.state_machine import AttemptState, AttemptStateError, AttemptStateMachine


class TestAttemptState:
    """Tests for AttemptState enum."""

    @pytest.mark.unit
    def test_all_states_defined(self) -> None:
        """Test that all expected states are defined."""
        expected_states = {
            "PENDING",
            "ATTEMPTING",
            "RETRYING",
            "COMPLETED",
            "EXHAUSTED",
            "FAILED",
            "CANCELLED",
        }
        assert {state.name for state in AttemptState} == expected_states


class TestAttemptStateMachine:
    """Tests for AttemptStateMachine."""

    @pytest.mark.unit
    def test_initial_state(self) -> None:
        """Test that a new machine is PENDING with no attempts."""
        machine = AttemptStateMachine()

        assert machine.state == AttemptState.PENDING
        assert machine.attempt == 0
        assert machine.retry_attempts == 0
        assert not machine.is_terminal()

    @pytest.mark.unit
    def test_retry_cycle_counts_attempts(self) -> None:
        """Test that each ATTEMPTING entry counts one attempt."""
        machine = AttemptStateMachine()
        machine.transition(AttemptState.ATTEMPTING)
        machine.transition(AttemptState.RETRYING)
        machine.transition(AttemptState.ATTEMPTING)
        machine.transition(AttemptState.RETRYING)
        machine.transition(AttemptState.ATTEMPTING)
        machine.transition(AttemptState.COMPLETED)

        assert machine.attempt == 3
        assert machine.retry_attempts == 2
        assert machine.is_terminal()

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "terminal",
        [
            AttemptState.COMPLETED,
            AttemptState.EXHAUSTED,
            AttemptState.FAILED,
            AttemptState.CANCELLED,
        ],
    )
    def test_terminal_states_allow_nothing(self, terminal: AttemptState) -> None:
        """Test that terminal states have no outgoing transitions."""
        machine = AttemptStateMachine()
        machine.transition(AttemptState.ATTEMPTING)
        machine.transition(terminal)

        assert machine.is_terminal()
        for state in AttemptState:
            assert not machine.can_transition(state)

    @pytest.mark.unit
    def test_cancel_while_retrying(self) -> None:
        """Test cancellation during a backoff wait."""
        machine = AttemptStateMachine()
        machine.transition(AttemptState.ATTEMPTING)
        machine.transition(AttemptState.RETRYING)
        machine.transition(AttemptState.CANCELLED)

        assert machine.state == AttemptState.CANCELLED
        assert machine.retry_attempts == 0

    @pytest.mark.unit
    def test_invalid_transition_raises(self) -> None:
        """Test that skipping ATTEMPTING is rejected."""
        machine = AttemptStateMachine()

        with pytest.raises(AttemptStateError) as exc_info:
            machine.transition(AttemptState.COMPLETED)

        assert exc_info.value.from_state == AttemptState.PENDING
        assert exc_info.value.to_state == AttemptState.COMPLETED
        assert "PENDING -> COMPLETED" in str(exc_info.value)

    @pytest.mark.unit
    def test_retrying_cannot_complete(self) -> None:
        """Test that a response is only accepted while attempting."""
        machine = AttemptStateMachine()
        machine.transition(AttemptState.ATTEMPTING)
        machine.transition(AttemptState.RETRYING)

        assert not machine.can_transition(AttemptState.COMPLETED)
        assert machine.can_transition(AttemptState.ATTEMPTING)
