"""
Single-Step State Transition

Advances every vehicle by one fixed time step. Each vehicle reads only the
previous snapshot: its own record, the position of the next vehicle ahead,
and the events active at the new time.

Per vehicle, in position order:
1. Blocked by a still-active event → unchanged
2. Blocked by an event that has ended → status cleared, continue
3. Naive advance position + v×dt would reach an active event ahead → blocked
   in place with zero velocity (first active event in input order wins)
4. Otherwise v = q(ρ)/ρ with ρ = 1/spacing to the next vehicle, and advance
"""

from dataclasses import replace
from typing import Dict, Optional
import math

from traffic_models.fundamental_diagram import FlowFunction

from .events import Event, active_events
from .state import SimulationState, Vehicle, VehicleStatus, check_ordering


# Spacing assumed ahead of the lead vehicle (free road) [m]
FREE_FLOW_SPACING = 10000.0


def _advance_vehicle(vehicle: Vehicle,
                     next_position: Optional[float],
                     events_by_id: Dict[int, Event],
                     dt: float,
                     flow_function: FlowFunction,
                     free_flow_spacing: float) -> Vehicle:
    if vehicle.is_blocked and vehicle.blocked_by_event is not None:
        if vehicle.blocked_by_event in events_by_id:
            return vehicle
        vehicle = replace(vehicle, status=VehicleStatus.NONE, blocked_by_event=None)

    position = vehicle.position
    projected = position + vehicle.velocity * dt
    for event in events_by_id.values():
        if position < event.position and projected >= event.position:
            return replace(vehicle, velocity=0.0,
                           status=VehicleStatus.BLOCKED, blocked_by_event=event.id)

    spacing = next_position - position if next_position is not None else free_flow_spacing
    # Zero spacing is an infinite density, i.e. a jammed vehicle
    density = 1 / spacing if spacing > 0 else math.inf
    velocity = flow_function.velocity(density)

    return replace(vehicle, velocity=velocity, position=position + velocity * dt)


def next_state(state: SimulationState,
               dt: float,
               flow_function: FlowFunction,
               free_flow_spacing: float = FREE_FLOW_SPACING,
               invariant_checks: bool = True) -> SimulationState:
    """
    Advance a state by one time step

    Args:
        state: Current snapshot (vehicles in non-decreasing position order)
        dt: Time step [s], positive
        flow_function: Fundamental diagram driving vehicle speeds
        free_flow_spacing: Spacing used for the lead vehicle [m]
        invariant_checks: Verify vehicle ordering before stepping

    Returns:
        New snapshot at state.time + dt with the same vehicle order and events

    Raises:
        ValueError: if dt is not a positive finite number
        OrderInvariantError: if the incoming vehicles are out of order
    """
    if not (math.isfinite(dt) and dt > 0):
        raise ValueError(f"Time step must be positive and finite, got {dt}")

    if invariant_checks:
        check_ordering(state.vehicles)

    time = state.time + dt
    events_by_id = active_events(state.events, time)

    vehicles = state.vehicles
    last = len(vehicles) - 1
    updated = [
        _advance_vehicle(
            vehicle,
            vehicles[index + 1].position if index < last else None,
            events_by_id,
            dt,
            flow_function,
            free_flow_spacing,
        )
        for index, vehicle in enumerate(vehicles)
    ]

    return SimulationState(time=time, vehicles=updated, events=state.events)
