"""
Tests for Vehicles, Snapshots and History

Tests cover:
- Vehicle records and status
- Ordering invariant check
- Snapshot structure
- History trajectories
- Lossless serialization
"""

import pytest
import json
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from core.events import Event
from core.state import (
    History,
    OrderInvariantError,
    SimulationState,
    Vehicle,
    VehicleStatus,
    check_ordering,
)


@pytest.fixture
def state() -> SimulationState:
    return SimulationState(
        time=1.5,
        vehicles=[
            Vehicle(id=3, position=-20.0, velocity=10.0),
            Vehicle(id=2, position=0.0, velocity=0.0,
                    status=VehicleStatus.BLOCKED, blocked_by_event=7),
            Vehicle(id=1, position=20.0, velocity=9.5),
        ],
        events=[Event(id=7, position=5.0, start_time=1.0, end_time=3.0)],
    )


# =============================================================================
# Test Class: Vehicles
# =============================================================================

class TestVehicle:

    def test_defaults(self):
        vehicle = Vehicle(id=1, position=0.0, velocity=10.0)
        assert vehicle.status == VehicleStatus.NONE
        assert vehicle.blocked_by_event is None
        assert not vehicle.is_blocked

    def test_blocked(self):
        vehicle = Vehicle(id=1, position=0.0, velocity=0.0,
                          status=VehicleStatus.BLOCKED, blocked_by_event=4)
        assert vehicle.is_blocked

    def test_immutable(self):
        vehicle = Vehicle(id=1, position=0.0, velocity=10.0)
        with pytest.raises(AttributeError):
            vehicle.position = 1.0


# =============================================================================
# Test Class: Ordering Invariant
# =============================================================================

class TestOrderingInvariant:

    def test_ordered_passes(self, state):
        check_ordering(state.vehicles)

    def test_equal_positions_pass(self):
        check_ordering([Vehicle(1, 5.0, 0.0), Vehicle(2, 5.0, 0.0)])

    def test_empty_and_single_pass(self):
        check_ordering([])
        check_ordering([Vehicle(1, 5.0, 0.0)])

    def test_out_of_order_identifies_pair(self):
        vehicles = [Vehicle(1, 0.0, 0.0), Vehicle(2, 10.0, 0.0), Vehicle(3, 9.0, 0.0)]

        with pytest.raises(OrderInvariantError) as excinfo:
            check_ordering(vehicles)

        error = excinfo.value
        assert error.current_id == 2
        assert error.next_id == 3
        assert error.current_position == 10.0
        assert error.next_position == 9.0
        assert "current: 2" in str(error)
        assert "next: 3" in str(error)

    def test_error_is_not_a_value_error(self):
        """Invariant failures are distinct from input validation errors"""
        assert not issubclass(OrderInvariantError, ValueError)
        assert issubclass(OrderInvariantError, RuntimeError)


# =============================================================================
# Test Class: Snapshots
# =============================================================================

class TestSimulationState:

    def test_sequences_stored_as_tuples(self, state):
        assert isinstance(state.vehicles, tuple)
        assert isinstance(state.events, tuple)

    def test_lead_vehicle(self, state):
        assert state.lead_vehicle.id == 1

    def test_lead_vehicle_empty(self):
        assert SimulationState(time=0.0, vehicles=[]).lead_vehicle is None

    def test_blocked_vehicles(self, state):
        assert [v.id for v in state.blocked_vehicles] == [2]

    def test_get_vehicle(self, state):
        assert state.get_vehicle(3).position == -20.0
        assert state.get_vehicle(99) is None

    def test_round_trip_through_json(self, state):
        """Every field survives serialization, including the blocking id"""
        restored = SimulationState.from_dict(json.loads(json.dumps(state.to_dict())))

        assert restored == state
        assert restored.vehicles[1].status is VehicleStatus.BLOCKED
        assert restored.vehicles[1].blocked_by_event == 7
        assert restored.vehicles[0].blocked_by_event is None

    def test_serialized_status_values(self, state):
        data = state.to_dict()
        assert [v['status'] for v in data['vehicles']] == ['none', 'blocked', 'none']


# =============================================================================
# Test Class: History
# =============================================================================

class TestHistory:

    def test_trajectories(self):
        history = History()
        history.append(SimulationState(0.0, [Vehicle(2, 0.0, 10.0), Vehicle(1, 20.0, 10.0)]))
        history.append(SimulationState(0.5, [Vehicle(2, 5.0, 10.0), Vehicle(1, 25.0, 10.0)]))

        trajectories = history.trajectories()

        assert trajectories[1] == [(0.0, 20.0), (0.5, 25.0)]
        assert trajectories[2] == [(0.0, 0.0), (0.5, 5.0)]

    def test_sequence_protocol(self, state):
        history = History([state])
        assert len(history) == 1
        assert history[0] is state
        assert history.initial is state
        assert history.latest is state
        assert list(history) == [state]

    def test_empty(self):
        history = History()
        assert history.initial is None
        assert history.latest is None
        assert history.trajectories() == {}

    def test_round_trip_through_json(self, state):
        history = History([state, state])
        restored = History.from_dict(json.loads(json.dumps(history.to_dict())))
        assert restored == history
