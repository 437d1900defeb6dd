"""
Simulation State for the Single-Lane Model

Vehicles are immutable records stored in non-decreasing position order. Each
step replaces the whole snapshot, so a History of states is a faithful record
of the run.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Any, Sequence, Tuple, Iterator

from .events import Event


class VehicleStatus(Enum):
    """Vehicle operational states"""
    NONE = "none"           # Moving with the density-driven speed
    BLOCKED = "blocked"     # Held behind an active event


@dataclass(frozen=True)
class Vehicle:
    """A point vehicle in the lane"""
    id: int
    position: float                         # [m]
    velocity: float                         # [m/s]
    status: VehicleStatus = VehicleStatus.NONE
    blocked_by_event: Optional[int] = None  # Id of the blocking event

    @property
    def is_blocked(self) -> bool:
        return self.status is VehicleStatus.BLOCKED

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'position': self.position,
            'velocity': self.velocity,
            'status': self.status.value,
            'blocked_by_event': self.blocked_by_event,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Vehicle':
        return cls(
            id=data['id'],
            position=data['position'],
            velocity=data['velocity'],
            status=VehicleStatus(data.get('status', VehicleStatus.NONE.value)),
            blocked_by_event=data.get('blocked_by_event'),
        )


class OrderInvariantError(RuntimeError):
    """
    Raised when consecutive vehicles are out of position order

    This signals a modelling bug in a previous step (two vehicles crossed),
    not bad user input. The run must stop; the state is never repaired.
    """

    def __init__(self, current: Vehicle, following: Vehicle):
        self.current_id = current.id
        self.next_id = following.id
        self.current_position = current.position
        self.next_position = following.position
        super().__init__(
            f"Order invariant failed current: {current.id} at {current.position} "
            f"next: {following.id} at {following.position}")


def check_ordering(vehicles: Sequence[Vehicle]):
    """
    Check that positions are non-decreasing

    Raises:
        OrderInvariantError: for the first pair out of order
    """
    for current, following in zip(vehicles, vehicles[1:]):
        if following.position < current.position:
            raise OrderInvariantError(current, following)


@dataclass(frozen=True)
class SimulationState:
    """Immutable snapshot of the lane at one instant"""
    time: float
    vehicles: Tuple[Vehicle, ...]
    events: Tuple[Event, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'vehicles', tuple(self.vehicles))
        object.__setattr__(self, 'events', tuple(self.events))

    @property
    def num_vehicles(self) -> int:
        return len(self.vehicles)

    @property
    def lead_vehicle(self) -> Optional[Vehicle]:
        """Most downstream vehicle"""
        return self.vehicles[-1] if self.vehicles else None

    @property
    def blocked_vehicles(self) -> List[Vehicle]:
        return [v for v in self.vehicles if v.is_blocked]

    def get_vehicle(self, vehicle_id: int) -> Optional[Vehicle]:
        for vehicle in self.vehicles:
            if vehicle.id == vehicle_id:
                return vehicle
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'time': self.time,
            'vehicles': [v.to_dict() for v in self.vehicles],
            'events': [e.to_dict() for e in self.events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SimulationState':
        return cls(
            time=data['time'],
            vehicles=[Vehicle.from_dict(v) for v in data['vehicles']],
            events=[Event.from_dict(e) for e in data.get('events', [])],
        )


@dataclass
class History:
    """Ordered sequence of snapshots, one per step"""
    states: List[SimulationState] = field(default_factory=list)

    def append(self, state: SimulationState):
        self.states.append(state)

    def __len__(self) -> int:
        return len(self.states)

    def __getitem__(self, index: int) -> SimulationState:
        return self.states[index]

    def __iter__(self) -> Iterator[SimulationState]:
        return iter(self.states)

    @property
    def initial(self) -> Optional[SimulationState]:
        return self.states[0] if self.states else None

    @property
    def latest(self) -> Optional[SimulationState]:
        return self.states[-1] if self.states else None

    def trajectories(self) -> Dict[int, List[Tuple[float, float]]]:
        """(time, position) samples per vehicle id across the history"""
        trajectories: Dict[int, List[Tuple[float, float]]] = {}
        for state in self.states:
            for vehicle in state.vehicles:
                trajectories.setdefault(vehicle.id, []).append((state.time, vehicle.position))
        return trajectories

    def to_dict(self) -> Dict[str, Any]:
        return {'states': [s.to_dict() for s in self.states]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'History':
        return cls(states=[SimulationState.from_dict(s) for s in data['states']])
