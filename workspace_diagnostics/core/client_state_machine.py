import logging
from typing import Dict, List, Optional, Set

from workspace_diagnostics.core.exceptions import InvalidTransitionError
from workspace_diagnostics.models import ClientPhase, ClientState


class ClientStateMachine:
    """
    The single owner of per-client state.

    This is the ONLY class allowed to:
    1. Create a ClientState (lazily, on the first attempt for a client id).
    2. Validate and apply a phase transition.
    3. Set the sticky `triggered` flag.

    Transitions are synchronous. Nothing awaits between a guard check in the
    session and the transition it leads to, so the PROCESSING phase doubles as
    the single-flight guard without a lock.
    """

    def __init__(self) -> None:
        self._states: Dict[int, ClientState] = {}

        self._transitions: Dict[ClientPhase, Set[ClientPhase]] = {
            ClientPhase.IDLE: {
                ClientPhase.WAITING_FOR_READY,
                ClientPhase.PROCESSING,
            },
            ClientPhase.WAITING_FOR_READY: {
                ClientPhase.IDLE,  # Ready, trigger decides what happens next
                ClientPhase.PROCESSING,  # Manual trigger overtook the wait
                ClientPhase.ABANDONED,
                ClientPhase.CANCELLED,
            },
            ClientPhase.PROCESSING: {
                ClientPhase.COMPLETED,
                ClientPhase.FAILED,
                ClientPhase.CANCELLED,
            },
            ClientPhase.COMPLETED: {
                ClientPhase.PROCESSING,
                ClientPhase.WAITING_FOR_READY,
            },
            ClientPhase.FAILED: {
                ClientPhase.PROCESSING,
                ClientPhase.WAITING_FOR_READY,
            },
            ClientPhase.ABANDONED: {
                ClientPhase.WAITING_FOR_READY,
                ClientPhase.PROCESSING,
            },
            ClientPhase.CANCELLED: {
                ClientPhase.WAITING_FOR_READY,
                ClientPhase.PROCESSING,
            },
        }

    def get(self, client_id: int) -> Optional[ClientState]:
        return self._states.get(client_id)

    def ensure(self, client_id: int, client_name: str = "") -> ClientState:
        state = self._states.get(client_id)
        if state is None:
            state = ClientState(client_id=client_id, client_name=client_name)
            self._states[client_id] = state
            logging.debug(f"Client state created for {client_name or client_id}")
        elif client_name and not state.client_name:
            state.client_name = client_name
        return state

    def can_transition(self, client_id: int, new_phase: ClientPhase) -> bool:
        state = self._states.get(client_id)
        old_phase = state.phase if state else ClientPhase.IDLE
        return new_phase == old_phase or new_phase in self._transitions.get(old_phase, set())

    def transition(self, *, client_id: int, new_phase: ClientPhase) -> ClientState:
        """
        Move a client to a new phase.

        Usage:
            state_machine.transition(client_id=3, new_phase=ClientPhase.COMPLETED)

        Raises:
            InvalidTransitionError: If the transition is not allowed.
            KeyError: If the client has no state yet.
        """
        state = self._states.get(client_id)
        if state is None:
            raise KeyError(f"No state for client {client_id}")

        old_phase = state.phase
        if new_phase == old_phase:
            return state

        if new_phase not in self._transitions.get(old_phase, set()):
            raise InvalidTransitionError(client_id, old_phase.value, new_phase.value)

        logging.debug(
            f"Transition: {state.client_name or client_id} | {old_phase.value} -> {new_phase.value}"
        )
        state.phase = new_phase

        if new_phase == ClientPhase.PROCESSING:
            state.triggered = True
            state.runs += 1

        return state

    def clear(self) -> None:
        """Forget every client. There is no partial reset."""
        self._states.clear()

    def processing_client_ids(self) -> List[int]:
        return [client_id for client_id, state in self._states.items() if state.processing]

    def triggered_count(self) -> int:
        return sum(1 for state in self._states.values() if state.triggered)

    def __len__(self) -> int:
        return len(self._states)
