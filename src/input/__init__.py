"""
Input Parsing Module for Single-Lane Kinematic Wave Simulation

This module provides the parser for XML scenario files.
"""

from .scenario_parser import (
    ScenarioConfig,
    ScenarioParser,
    parse_scenario,
)

__all__ = [
    'ScenarioConfig',
    'ScenarioParser',
    'parse_scenario',
]
