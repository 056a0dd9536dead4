"""Operation state machine logic for managing valid handle state transitions."""
from typing import Set, Dict
from lropoll.core.enums import OperationState
from lropoll.core.exceptions import InvalidStateTransitionError


class OperationStateMachine:
    """
    Defines valid state transitions for operation handles.

    State Diagram:
        PENDING → SUCCEEDED
                → FAILED
    """

    TRANSITIONS: Dict[OperationState, Set[OperationState]] = {
        OperationState.PENDING: {OperationState.SUCCEEDED, OperationState.FAILED},
        OperationState.SUCCEEDED: set(),  # Terminal state
        OperationState.FAILED: set(),  # Terminal state
    }

    TERMINAL_STATES = {OperationState.SUCCEEDED, OperationState.FAILED}

    @classmethod
    def can_transition(cls, from_state: OperationState, to_state: OperationState) -> bool:
        """
        Check if transition from from_state to to_state is valid.

        Args:
            from_state: Current operation state
            to_state: Desired operation state

        Returns:
            bool: True if transition is valid, False otherwise
        """
        return to_state in cls.TRANSITIONS.get(from_state, set())

    @classmethod
    def validate_transition(cls, from_state: OperationState, to_state: OperationState) -> None:
        """
        Validate state transition and raise exception if invalid.

        Args:
            from_state: Current operation state
            to_state: Desired operation state

        Raises:
            InvalidStateTransitionError: If transition is not valid
        """
        if not cls.can_transition(from_state, to_state):
            raise InvalidStateTransitionError(
                f"Invalid state transition: {from_state} -> {to_state}"
            )

    @classmethod
    def is_terminal(cls, state: OperationState) -> bool:
        """Check if state is terminal (no further transitions possible)."""
        return state in cls.TERMINAL_STATES
