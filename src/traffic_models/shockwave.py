"""
Interface and Shockwave Tracking in Time-Position Space

This module derives the boundaries between regions of different density for a
free-flow inflow disturbed by temporary point obstructions. It is the analytic
counterpart of the vehicle stepper: instead of moving vehicles, it constructs
the characteristic and shock lines of the kinematic wave solution.

Mathematical Background:
------------------------
All geometry lives in the (time, position) plane. An interface is a straight
segment whose two sides carry different densities. Its slope is a speed:
- Free-flow inflow boundary: slope = v_free
- Blockage boundary: constant-position segment over the event window, jammed below
- Shock front: slope given by the Rankine-Hugoniot condition

    σ = (q_above - q_below) / (ρ_above - ρ_below)

"Above" and "below" refer to the position axis: the region above a boundary
is downstream of it, the region below is upstream.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple, Optional, Dict, Any, Sequence
import math

from .fundamental_diagram import FlowFunction


Point = Tuple[float, float]
Segment = Tuple[Point, Point]

# Density used to represent the undisturbed free-flow inflow [veh/m]
INFLOW_REFERENCE_DENSITY = 1 / 100000

# Parametric length of a shock front along (1, σ)
SHOCK_FRONT_LENGTH = 100.0


# =============================================================================
# Vector Primitives
# =============================================================================

def cross(a: Point, b: Point) -> float:
    """Scalar cross product a.x × b.y - a.y × b.x"""
    return a[0] * b[1] - a[1] * b[0]


def subtract(a: Point, b: Point) -> Point:
    return (a[0] - b[0], a[1] - b[1])


def add(a: Point, b: Point) -> Point:
    return (a[0] + b[0], a[1] + b[1])


def scale(a: Point, s: float) -> Point:
    return (a[0] * s, a[1] * s)


def magnitude(a: Point) -> float:
    return math.sqrt(a[0] * a[0] + a[1] * a[1])


def _divide(numerator: float, denominator: float) -> float:
    """Float division with IEEE results for a zero denominator"""
    if denominator != 0:
        return numerator / denominator
    if numerator == 0 or math.isnan(numerator):
        return math.nan
    return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)


def ray_segment_intersection(ray: Segment, segment: Segment) -> Point:
    """
    Intersect a ray with the line through a segment

    The ray starts at ray[0] and points through ray[1]. With p = ray[0],
    r = ray[1] - ray[0], q = segment[0] and s = segment[1] - segment[0]:

        t = cross(q - p, s) / cross(r, s)
        intersection = p + t × r

    Neither t nor the segment parameter is bounded, so points behind the ray
    origin or beyond the segment ends are returned as-is. Parallel and
    collinear inputs give a non-finite point (±inf or nan coordinates).
    """
    q = segment[0]
    s = subtract(segment[1], segment[0])
    p = ray[0]
    r = subtract(ray[1], ray[0])
    t = _divide(cross(subtract(q, p), s), cross(r, s))
    return add(p, scale(r, t))


def segment_point_above(point: Point, segment: Segment) -> Point:
    """Point of the segment's line straight above ``point`` on the position axis"""
    ray = (point, add(point, (0.0, 1.0)))
    return ray_segment_intersection(ray, segment)


# =============================================================================
# Interfaces
# =============================================================================

class InterfaceKind(Enum):
    """Origin of an interface"""
    EMPTY = "empty"               # Far-field boundary of the considered region
    INFLOW = "inflow"             # Front of the free-flow inflow
    BLOCKAGE = "blockage"         # Obstruction held in place for its time window
    SHOCK_FRONT = "shock_front"   # Jam boundary propagating from an obstruction


@dataclass
class Interface:
    """
    Boundary between two density regions

    ``density_above`` / ``density_below`` are None only where the adjacent
    region holds no simulated vehicles.
    """
    coordinates: Segment
    density_above: Optional[float]
    density_below: Optional[float]
    kind: InterfaceKind = InterfaceKind.EMPTY
    event_id: Optional[int] = None

    @property
    def start(self) -> Point:
        return self.coordinates[0]

    @property
    def end(self) -> Point:
        return self.coordinates[1]

    @property
    def speed(self) -> float:
        """Propagation speed dx/dt of the boundary (non-finite for zero-duration segments)"""
        (t0, x0), (t1, x1) = self.coordinates
        return _divide(x1 - x0, t1 - t0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'coordinates': [list(self.start), list(self.end)],
            'density_above': self.density_above,
            'density_below': self.density_below,
            'kind': self.kind.value,
            'event_id': self.event_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Interface':
        start, end = data['coordinates']
        return cls(
            coordinates=(tuple(start), tuple(end)),
            density_above=data['density_above'],
            density_below=data['density_below'],
            kind=InterfaceKind(data.get('kind', InterfaceKind.EMPTY.value)),
            event_id=data.get('event_id'),
        )


def closest_segment_above(point: Point,
                          interfaces: Sequence[Interface]) -> Optional[Tuple[Point, Interface]]:
    """
    Find the interface whose line passes closest above a point

    Candidates below the point and candidates without a finite point above it
    (segments of zero duration) are skipped. Ties keep the earliest interface.

    Returns:
        (point on the interface, interface), or None if nothing lies above
    """
    min_distance = None
    closest = None
    for interface in interfaces:
        segment_point = segment_point_above(point, interface.coordinates)
        if not (math.isfinite(segment_point[0]) and math.isfinite(segment_point[1])):
            continue
        delta = subtract(segment_point, point)
        if delta[1] < 0:
            continue
        distance = magnitude(delta)
        if min_distance is None or distance < min_distance:
            min_distance = distance
            closest = (segment_point, interface)
    return closest


def compute_interfaces(events: Sequence,
                       flow_function: FlowFunction,
                       time_bounds: Tuple[float, float],
                       position_bounds: Tuple[float, float],
                       initial_upstream_position: float) -> List[Interface]:
    """
    Construct the density interfaces for an inflow and a set of obstructions

    Algorithm:
    1. Empty-region interface along the top of the position bounds
    2. Inflow interface from (0, initial_upstream_position) at free-flow speed,
       ending on the empty-region line
    3. For each event in input order, a blockage interface along the event window and a
       shock front starting at the event start. The upstream density is taken
       from the closest interface above the event start, so later events see
       the interfaces of earlier ones.

    Args:
        events: Events exposing id, position, start_time and end_time
        flow_function: Fundamental diagram
        time_bounds: (min, max) time [s]
        position_bounds: (min, max) position [m]
        initial_upstream_position: Position of the inflow front at time 0 [m]

    Returns:
        Interfaces in construction order: empty, inflow, then two per event
    """
    max_density = flow_function.max_density

    empty_interface = Interface(
        coordinates=((time_bounds[0], position_bounds[1]),
                     (time_bounds[1], position_bounds[1])),
        density_above=None,
        density_below=None,
        kind=InterfaceKind.EMPTY,
    )

    density = INFLOW_REFERENCE_DENSITY
    start = (0.0, initial_upstream_position)
    velocity = flow_function.velocity(density)
    ray = (start, (start[0] + 1, start[1] + velocity))
    inflow_interface = Interface(
        coordinates=(start, ray_segment_intersection(ray, empty_interface.coordinates)),
        density_above=None,
        density_below=density,
        kind=InterfaceKind.INFLOW,
    )
    interfaces = [empty_interface, inflow_interface]

    for event in events:
        start = (event.start_time, event.position)
        end = (event.end_time, event.position)

        found = closest_segment_above(start, interfaces)
        upstream_density = found[1].density_below if found is not None else None

        interfaces.append(Interface(
            coordinates=(start, end),
            density_above=upstream_density,
            density_below=max_density,
            kind=InterfaceKind.BLOCKAGE,
            event_id=event.id,
        ))

        # An empty upstream region carries no flow: the front stays in place
        k_upstream = upstream_density if upstream_density is not None else 0.0
        front_speed = flow_function.shock_wave_speed(k_upstream, max_density)

        interfaces.append(Interface(
            coordinates=(start, add(start, scale((1.0, front_speed), SHOCK_FRONT_LENGTH))),
            density_above=max_density,
            density_below=upstream_density,
            kind=InterfaceKind.SHOCK_FRONT,
            event_id=event.id,
        ))

    return interfaces
