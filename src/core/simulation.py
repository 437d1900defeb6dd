"""
Simulation Runner for Single-Lane Kinematic Wave Simulation

This module provides the main simulation interface including:
- Configuration management
- Initial state construction
- Fixed-step simulation execution
- Interface (shockwave) geometry
- Output collection
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Any, Sequence, Tuple
import json
import time

from traffic_models.fundamental_diagram import (
    FlowFunction,
    FundamentalDiagramParameters,
    create_flow_function,
)
from traffic_models.shockwave import Interface, compute_interfaces

from .events import Event, EventSpec
from .state import History, SimulationState, Vehicle
from .stepper import FREE_FLOW_SPACING, next_state


@dataclass
class SimulationConfig:
    """Configuration for simulation execution"""
    # Time settings
    time_step: float = 0.5                # Time step size [seconds]
    num_steps: int = 400                  # Steps per run

    # Model settings
    free_flow_spacing: float = FREE_FLOW_SPACING   # Spacing ahead of the lead vehicle [m]
    invariant_checks: bool = True         # Verify vehicle ordering every step

    # Analysis window for interface geometry
    time_bounds: Tuple[float, float] = (-100.0, 150.0)        # [s]
    position_bounds: Tuple[float, float] = (-100.0, 1000.0)   # [m]

    # Output settings
    keep_history: bool = True             # Keep every snapshot, else only the latest
    output_interval: int = 100            # Steps between progress reports

    # Verbosity
    verbose: bool = True                  # Print progress

    @property
    def duration(self) -> float:
        return self.time_step * self.num_steps


def initial_state(vehicle_count: int,
                  spacing: float,
                  initial_velocity: float,
                  event_specs: Sequence[EventSpec] = (),
                  lead_position: float = 400.01,
                  start_time: float = 0.0) -> SimulationState:
    """
    Build a starting state

    Vehicle ``i + 1`` is placed at ``lead_position - spacing × i`` so that
    vehicle 1 leads. Vehicles are stored upstream first.

    Args:
        vehicle_count: Number of vehicles
        spacing: Initial distance between consecutive vehicles [m]
        initial_velocity: Initial speed of every vehicle [m/s]
        event_specs: Events; ids default to their index + 1
        lead_position: Position of the lead vehicle [m]
        start_time: Initial simulation time [s]

    Returns:
        SimulationState
    """
    if vehicle_count < 0:
        raise ValueError(f"Vehicle count must be non-negative, got {vehicle_count}")
    if spacing < 0:
        raise ValueError(f"Spacing must be non-negative, got {spacing}")

    events = [
        Event(
            id=spec.id if spec.id is not None else index + 1,
            position=spec.position,
            start_time=spec.start_time,
            end_time=spec.end_time,
        )
        for index, spec in enumerate(event_specs)
    ]
    ids = [e.id for e in events]
    if len(set(ids)) != len(ids):
        raise ValueError(f"Event ids must be unique, got {ids}")

    vehicles = [
        Vehicle(id=index + 1,
                position=lead_position - spacing * index,
                velocity=initial_velocity)
        for index in range(vehicle_count)
    ]
    vehicles.reverse()

    return SimulationState(time=start_time, vehicles=vehicles, events=events)


class LaneSimulation:
    """
    Main simulation runner for the single-lane model

    This class handles:
    - Flow function creation
    - Initial state loading
    - Simulation execution
    - Interface computation
    - Output collection

    Usage:
        sim = LaneSimulation()
        sim.build_flow_function(FundamentalDiagramParameters.from_reference())
        sim.load_state(initial_state(400, 20.0, 10.0, [EventSpec(500, 10, 20)]))
        sim.initialize()
        sim.run()
        results = sim.get_results()
    """

    def __init__(self, config: Optional[SimulationConfig] = None):
        """
        Initialize the simulation

        Args:
            config: Simulation configuration
        """
        self.config = config or SimulationConfig()
        self.flow_function: Optional[FlowFunction] = None
        self.state: Optional[SimulationState] = None
        self.history = History()
        self.steps = 0
        self._initial_state: Optional[SimulationState] = None
        self._initialized = False
        self._results: Dict[str, Any] = {}

    def build_flow_function(self, params: FundamentalDiagramParameters) -> FlowFunction:
        """
        Create the flow function (runs the boundary self-check)

        Args:
            params: Fundamental diagram parameters
        """
        self.flow_function = create_flow_function(params)

        if self.config.verbose:
            print(f"Flow function: max_density={params.max_density:.4f} veh/m, "
                  f"peak_density={params.peak_density:.4f} veh/m, "
                  f"peak_flow={params.peak_flow:.4f} veh/s, "
                  f"v_free={params.free_flow_speed:.2f} m/s")

        return self.flow_function

    def load_state(self, state: SimulationState):
        """
        Load the initial state

        Args:
            state: Starting snapshot
        """
        self._initial_state = state

        if self.config.verbose:
            print(f"Loaded state: {state.num_vehicles} vehicles, "
                  f"{len(state.events)} events, t={state.time:.1f}s")

    def initialize(self):
        """
        Initialize the simulation with loaded data
        """
        if self.flow_function is None:
            raise RuntimeError("Flow function not built. Call build_flow_function() first.")
        if self._initial_state is None:
            raise RuntimeError("State not loaded. Call load_state() first.")

        self.state = self._initial_state
        self.history = History([self.state])
        self.steps = 0
        self._results = {}
        self._initialized = True

        if self.config.verbose:
            print("Simulation initialized")

    def step(self) -> SimulationState:
        """Advance one time step and record the new snapshot"""
        if not self._initialized:
            raise RuntimeError("Simulation not initialized. Call initialize() first.")

        self.state = next_state(
            self.state,
            self.config.time_step,
            self.flow_function,
            free_flow_spacing=self.config.free_flow_spacing,
            invariant_checks=self.config.invariant_checks,
        )
        self.steps += 1

        if self.config.keep_history:
            self.history.append(self.state)
        else:
            self.history = History([self.state])

        if self.config.verbose and self.config.output_interval > 0 \
                and self.steps % self.config.output_interval == 0:
            blocked = len(self.state.blocked_vehicles)
            print(f"[t={self.state.time:.1f}s] step {self.steps}: "
                  f"{self.state.num_vehicles} vehicles, {blocked} blocked")

        return self.state

    def run(self, num_steps: Optional[int] = None) -> Dict[str, Any]:
        """
        Run the simulation

        Args:
            num_steps: Optional override for the number of steps

        Returns:
            Results dictionary
        """
        if not self._initialized:
            raise RuntimeError("Simulation not initialized. Call initialize() first.")

        steps = self.config.num_steps if num_steps is None else num_steps

        if self.config.verbose:
            print(f"Starting simulation for {steps} steps of {self.config.time_step}s...")
            start_time = time.time()

        for _ in range(steps):
            self.step()

        if self.config.verbose:
            elapsed = time.time() - start_time
            print(f"Simulation completed in {elapsed:.2f}s")

        self._collect_results()

        return self._results

    def compute_interfaces(self) -> List[Interface]:
        """
        Interface geometry for the loaded events

        The inflow starts at the lead vehicle of the initial state.
        """
        if not self._initialized:
            raise RuntimeError("Simulation not initialized. Call initialize() first.")

        initial = self._initial_state
        lead = initial.lead_vehicle
        upstream_position = lead.position if lead is not None else 0.0

        return compute_interfaces(
            initial.events,
            self.flow_function,
            self.config.time_bounds,
            self.config.position_bounds,
            upstream_position,
        )

    def _collect_results(self):
        """Collect simulation results"""
        positions = [v.position for v in self.state.vehicles]

        self._results = {
            "duration": self.steps * self.config.time_step,
            "steps": self.steps,
            "final_time": self.state.time,
            "num_vehicles": self.state.num_vehicles,
            "blocked_vehicles": len(self.state.blocked_vehicles),
            "min_position": min(positions) if positions else None,
            "max_position": max(positions) if positions else None,
            "flow_function": self.flow_function.to_dict(),
            "final_state": self.state.to_dict(),
            "interfaces": [i.to_dict() for i in self.compute_interfaces()],
        }

        if self.config.keep_history:
            self._results["history"] = self.history.to_dict()

    def get_results(self) -> Dict[str, Any]:
        """Get simulation results"""
        return self._results

    def export_results(self, filepath: str):
        """
        Export results to file

        Args:
            filepath: Output file path
        """
        with open(filepath, 'w') as f:
            json.dump(self._results, f, indent=2)

        if self.config.verbose:
            print(f"Results exported to {filepath}")
