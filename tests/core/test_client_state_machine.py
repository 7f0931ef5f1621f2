import pytest

from workspace_diagnostics.core.client_state_machine import ClientStateMachine
from workspace_diagnostics.core.exceptions import InvalidTransitionError
from workspace_diagnostics.models import ClientPhase


@pytest.fixture
def state_machine() -> ClientStateMachine:
    return ClientStateMachine()


def test_ensure_creates_state_lazily(state_machine):
    assert state_machine.get(7) is None

    state = state_machine.ensure(7, "ts_ls")

    assert state.client_name == "ts_ls"
    assert state.phase == ClientPhase.IDLE
    assert not state.triggered
    assert state_machine.ensure(7) is state
    assert len(state_machine) == 1


def test_processing_sets_sticky_triggered_flag(state_machine):
    state_machine.ensure(1, "ts_ls")

    state = state_machine.transition(client_id=1, new_phase=ClientPhase.PROCESSING)
    assert state.processing
    assert state.triggered
    assert state.runs == 1

    state = state_machine.transition(client_id=1, new_phase=ClientPhase.COMPLETED)
    assert not state.processing
    assert state.triggered


def test_invalid_transition_raises(state_machine):
    state_machine.ensure(1)

    with pytest.raises(InvalidTransitionError) as exc_info:
        state_machine.transition(client_id=1, new_phase=ClientPhase.COMPLETED)

    assert exc_info.value.from_phase == "Idle"
    assert exc_info.value.to_phase == "Completed"
    assert state_machine.get(1).phase == ClientPhase.IDLE


def test_processing_cannot_restart_itself_via_waiting(state_machine):
    state_machine.ensure(1)
    state_machine.transition(client_id=1, new_phase=ClientPhase.PROCESSING)

    with pytest.raises(InvalidTransitionError):
        state_machine.transition(client_id=1, new_phase=ClientPhase.WAITING_FOR_READY)


def test_same_phase_is_a_no_op(state_machine):
    state_machine.ensure(1)
    state_machine.transition(client_id=1, new_phase=ClientPhase.PROCESSING)

    state = state_machine.transition(client_id=1, new_phase=ClientPhase.PROCESSING)

    assert state.runs == 1


def test_transition_without_state_raises_key_error(state_machine):
    with pytest.raises(KeyError):
        state_machine.transition(client_id=99, new_phase=ClientPhase.PROCESSING)


@pytest.mark.parametrize(
    "path",
    [
        [ClientPhase.WAITING_FOR_READY, ClientPhase.IDLE, ClientPhase.PROCESSING, ClientPhase.COMPLETED],
        [ClientPhase.WAITING_FOR_READY, ClientPhase.ABANDONED, ClientPhase.WAITING_FOR_READY],
        [ClientPhase.WAITING_FOR_READY, ClientPhase.CANCELLED, ClientPhase.PROCESSING],
        [ClientPhase.PROCESSING, ClientPhase.FAILED, ClientPhase.PROCESSING, ClientPhase.CANCELLED],
    ],
)
def test_legal_workflows(state_machine, path):
    state_machine.ensure(1)
    for phase in path:
        state_machine.transition(client_id=1, new_phase=phase)

    assert state_machine.get(1).phase == path[-1]


def test_can_transition(state_machine):
    state_machine.ensure(1)

    assert state_machine.can_transition(1, ClientPhase.WAITING_FOR_READY)
    assert not state_machine.can_transition(1, ClientPhase.ABANDONED)


def test_counts_and_clear(state_machine):
    for client_id in (1, 2, 3):
        state_machine.ensure(client_id)
    state_machine.transition(client_id=1, new_phase=ClientPhase.PROCESSING)
    state_machine.transition(client_id=2, new_phase=ClientPhase.PROCESSING)
    state_machine.transition(client_id=2, new_phase=ClientPhase.COMPLETED)

    assert state_machine.processing_client_ids() == [1]
    assert state_machine.triggered_count() == 2

    state_machine.clear()

    assert len(state_machine) == 0
    assert state_machine.triggered_count() == 0
