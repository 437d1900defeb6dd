"""
Triangular Fundamental Diagram for Single-Lane Kinematic Wave Simulation

This module implements the density-flow relationship that drives every vehicle
in the lane model and every interface in the shockwave tracker.

Mathematical Background:
------------------------
The fundamental diagram relates three macroscopic traffic variables:
- Density (ρ): vehicles per unit length [veh/m]
- Flow (q): vehicles per unit time [veh/s]
- Speed (v): distance per unit time [m/s]

The fundamental relationship is:
    q = ρ × v

The triangular diagram used here is defined by three points:
- Empty road:  (0, 0)
- Capacity:    (ρ_peak, q_peak)
- Jam:         (ρ_max, 0)

Flow is linear between those points and zero outside [0, ρ_max].

References:
-----------
[1] Lighthill, M.J., Whitham, G.B. (1955). "On kinematic waves II"
[2] Richards, P.I. (1956). "Shock waves on the highway"
[3] Newell, G.F. (1993). "A simplified theory of kinematic waves"
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple, Dict, Any
import math


class ConfigurationError(ValueError):
    """Raised when fundamental diagram parameters cannot produce a valid flow function"""


class TrafficState(Enum):
    """Traffic state classification based on density"""
    FREE_FLOW = "free_flow"   # ρ < ρ_peak, uncongested branch
    CONGESTED = "congested"   # ρ_peak ≤ ρ < ρ_max, descending branch
    JAMMED = "jammed"         # ρ ≥ ρ_max, standstill


@dataclass(frozen=True)
class FundamentalDiagramParameters:
    """
    Parameters defining a triangular fundamental diagram

    All parameters use consistent units:
    - Densities in veh/m (single lane)
    - Flows in veh/s
    """
    max_density: float      # Jam density [veh/m]
    peak_density: float     # Density of maximum flow [veh/m]
    peak_flow: float        # Capacity flow [veh/s]

    def __post_init__(self):
        """Validate parameter ordering 0 < ρ_peak < ρ_max and q_peak > 0"""
        values = (self.max_density, self.peak_density, self.peak_flow)
        if not all(math.isfinite(v) for v in values):
            raise ConfigurationError(f"Fundamental diagram parameters must be finite, got {values}")
        if not 0 < self.peak_density < self.max_density:
            raise ConfigurationError(
                f"Expected 0 < peak_density < max_density, got "
                f"peak_density={self.peak_density}, max_density={self.max_density}")
        if self.peak_flow <= 0:
            raise ConfigurationError(f"Peak flow must be positive, got {self.peak_flow}")

    @classmethod
    def from_reference(cls) -> 'FundamentalDiagramParameters':
        """
        Reference single-lane parameters

        - Jam density: 2 vehicles per 10 m = 0.2 veh/m
        - Peak density: one third of jam density
        - Capacity: 40 vehicles per 60 s
        """
        max_density = 2 / 10
        return cls(max_density=max_density,
                   peak_density=max_density / 3,
                   peak_flow=40 / 60)

    @property
    def free_flow_speed(self) -> float:
        """Slope of the ascending branch [m/s]"""
        return self.peak_flow / self.peak_density

    @property
    def backward_wave_speed(self) -> float:
        """Magnitude of the descending branch slope [m/s]"""
        return self.peak_flow / (self.max_density - self.peak_density)

    def to_dict(self) -> Dict[str, float]:
        return {
            'max_density': self.max_density,
            'peak_density': self.peak_density,
            'peak_flow': self.peak_flow,
        }


class FlowFunction:
    """
    Triangular flow-density relationship bundled with its parameters

    Instances are callable: ``flow_function(density)`` is ``flow_function.flow(density)``.
    Use :func:`create_flow_function` to obtain an instance that has passed the
    boundary self-check.
    """

    def __init__(self, params: FundamentalDiagramParameters):
        self.params = params

    @property
    def max_density(self) -> float:
        return self.params.max_density

    @property
    def peak_density(self) -> float:
        return self.params.peak_density

    @property
    def peak_flow(self) -> float:
        return self.params.peak_flow

    @property
    def free_flow_speed(self) -> float:
        return self.params.free_flow_speed

    @property
    def backward_wave_speed(self) -> float:
        return self.params.backward_wave_speed

    def __call__(self, density: float) -> float:
        return self.flow(density)

    def flow(self, density: float) -> float:
        """
        Flow for a density

        Args:
            density: Traffic density [veh/m]

        Returns:
            Flow [veh/s], never negative
        """
        if density < 0:
            # Guards against inverted spacing
            return 0.0
        if density < self.peak_density:
            # Ascending branch: q = q_peak × ρ / ρ_peak
            return self.peak_flow * (density / self.peak_density)
        if density < self.max_density:
            # Descending branch: q = q_peak × (ρ_max - ρ) / (ρ_max - ρ_peak)
            fraction = (self.max_density - density) / (self.max_density - self.peak_density)
            return self.peak_flow * fraction
        return 0.0

    def velocity(self, density: float) -> float:
        """
        Speed implied by a density, v = q(ρ) / ρ

        Zero density returns the free-flow speed (the limit as ρ → 0) and
        infinite density (zero spacing) returns 0.
        """
        if density == 0:
            return self.free_flow_speed
        if math.isinf(density):
            return 0.0
        return self.flow(density) / density

    def wave_speed(self, density: float) -> float:
        """
        Kinematic wave speed dq/dρ

        Constant in each branch of the triangular diagram:
        forward at free-flow, backward at or above the peak.
        """
        if density < self.peak_density:
            return self.free_flow_speed
        return -self.backward_wave_speed

    def shock_wave_speed(self, density_above: float, density_below: float) -> float:
        """
        Speed of the shock separating two densities

        Rankine-Hugoniot condition:
        σ = (q_above - q_below) / (ρ_above - ρ_below)
        """
        if abs(density_above - density_below) < 1e-10:
            return self.wave_speed(density_above)

        q_above = self.flow(density_above)
        q_below = self.flow(density_below)

        return (q_above - q_below) / (density_above - density_below)

    def classify_state(self, density: float) -> TrafficState:
        """Classify a density against the peak and jam densities"""
        if density < self.peak_density:
            return TrafficState.FREE_FLOW
        if density < self.max_density:
            return TrafficState.CONGESTED
        return TrafficState.JAMMED

    def sample(self, samples: int = 100) -> List[Tuple[float, float]]:
        """(density, flow) pairs evenly spaced over [0, ρ_max), for charting"""
        step = self.max_density / samples
        return [(i * step, self.flow(i * step)) for i in range(samples)]

    def check_boundary_identities(self):
        """
        Verify q(0) = 0, q(ρ_max) = 0 and q(ρ_peak) = q_peak exactly

        Raises:
            ConfigurationError: if any identity does not hold
        """
        if self.flow(0) != 0:
            raise ConfigurationError(
                f"Zero density should have zero flow, got {self.flow(0)}")
        if self.flow(self.max_density) != 0:
            raise ConfigurationError(
                f"Max density should have zero flow, got {self.flow(self.max_density)}")
        if self.flow(self.peak_density) != self.peak_flow:
            raise ConfigurationError(
                f"Peak density should equal peak flow {self.peak_flow}, "
                f"got {self.flow(self.peak_density)}")

    def to_dict(self) -> Dict[str, Any]:
        return self.params.to_dict()

    def __repr__(self) -> str:
        return (f"FlowFunction(max_density={self.max_density}, "
                f"peak_density={self.peak_density}, peak_flow={self.peak_flow})")


# =============================================================================
# Factory Function
# =============================================================================

def create_flow_function(params: FundamentalDiagramParameters) -> FlowFunction:
    """
    Create a flow function and run its boundary self-check

    Args:
        params: Fundamental diagram parameters

    Returns:
        FlowFunction instance

    Raises:
        ConfigurationError: if the boundary identities fail
    """
    flow_function = FlowFunction(params)
    flow_function.check_boundary_identities()
    return flow_function
