"""
Traffic Flow Models Module

This module contains:
- The triangular fundamental diagram (density-flow relationship)
- Interface and shockwave construction in time-position space
"""

from .fundamental_diagram import (
    ConfigurationError,
    FlowFunction,
    FundamentalDiagramParameters,
    TrafficState,
    create_flow_function,
)

from .shockwave import (
    Interface,
    InterfaceKind,
    closest_segment_above,
    compute_interfaces,
    cross,
    ray_segment_intersection,
    segment_point_above,
)

__all__ = [
    # Fundamental Diagram
    'ConfigurationError',
    'FlowFunction',
    'FundamentalDiagramParameters',
    'TrafficState',
    'create_flow_function',
    # Interfaces
    'Interface',
    'InterfaceKind',
    'closest_segment_above',
    'compute_interfaces',
    'cross',
    'ray_segment_intersection',
    'segment_point_above',
]
