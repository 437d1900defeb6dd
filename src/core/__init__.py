"""
Core Module for Single-Lane Kinematic Wave Simulation

Components:
- Events (time-windowed point obstructions)
- Vehicles, snapshots and history
- Single-step state transition
- Simulation runner and configuration
"""

from .events import (
    Event,
    EventSpec,
    is_active,
    active_events,
)

from .state import (
    Vehicle,
    VehicleStatus,
    SimulationState,
    History,
    OrderInvariantError,
    check_ordering,
)

from .stepper import (
    FREE_FLOW_SPACING,
    next_state,
)

from .simulation import (
    LaneSimulation,
    SimulationConfig,
    initial_state,
)

__all__ = [
    'Event',
    'EventSpec',
    'is_active',
    'active_events',
    'Vehicle',
    'VehicleStatus',
    'SimulationState',
    'History',
    'OrderInvariantError',
    'check_ordering',
    'FREE_FLOW_SPACING',
    'next_state',
    'LaneSimulation',
    'SimulationConfig',
    'initial_state',
]
