"""
Pytest Configuration and Shared Fixtures

This module provides shared fixtures and configuration for all test modules.
"""

import pytest
import sys
import os

# Ensure src is in path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from traffic_models.fundamental_diagram import (
    FundamentalDiagramParameters,
    create_flow_function,
)


def pytest_configure(config):
    """Configure custom pytest markers"""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


@pytest.fixture
def tolerance():
    """Standard numerical tolerance for floating point comparisons"""
    return {
        'rel': 0.01,  # 1% relative tolerance
        'abs': 1e-6   # Absolute tolerance for near-zero values
    }


@pytest.fixture
def scenario_a_params() -> FundamentalDiagramParameters:
    """Rounded reference parameters"""
    return FundamentalDiagramParameters(
        max_density=0.2,      # 2 veh / 10 m
        peak_density=0.0667,  # ~ max / 3
        peak_flow=0.667,      # ~ 40 veh / 60 s
    )


@pytest.fixture
def flow(scenario_a_params):
    """Flow function for the rounded reference parameters (v_free = 10 m/s)"""
    return create_flow_function(scenario_a_params)


@pytest.fixture
def reference_flow():
    """Flow function for the exact reference parameters"""
    return create_flow_function(FundamentalDiagramParameters.from_reference())
