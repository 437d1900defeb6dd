"""
Tests for Events and the Activity Predicate

Tests cover:
- Event construction and validation
- Open-interval activity (boundary instants inactive)
- Active event indexing
- Serialization
"""

import pytest
import json
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from core.events import Event, EventSpec, is_active, active_events


@pytest.fixture
def blockage() -> Event:
    return Event(id=100000, position=500.0, start_time=10.0, end_time=20.0)


# =============================================================================
# Test Class: Construction
# =============================================================================

class TestEventConstruction:
    """Test event creation and validation"""

    def test_fields(self, blockage):
        assert blockage.id == 100000
        assert blockage.position == 500.0
        assert blockage.duration == 10.0

    def test_immutable(self, blockage):
        with pytest.raises(AttributeError):
            blockage.position = 400.0

    def test_start_must_precede_end(self):
        with pytest.raises(ValueError):
            Event(id=1, position=0.0, start_time=5.0, end_time=5.0)
        with pytest.raises(ValueError):
            Event(id=1, position=0.0, start_time=6.0, end_time=5.0)

    def test_non_finite_window_rejected(self):
        with pytest.raises(ValueError):
            Event(id=1, position=0.0, start_time=0.0, end_time=float('inf'))

    def test_spec_id_optional(self):
        spec = EventSpec(position=5.0, start_time=1.0, end_time=3.0)
        assert spec.id is None


# =============================================================================
# Test Class: Activity
# =============================================================================

class TestEventActivity:
    """Test the open-interval activity predicate"""

    def test_active_strictly_inside(self, blockage):
        assert is_active(blockage, 10.5)
        assert is_active(blockage, 15.0)
        assert is_active(blockage, 19.999)

    def test_boundaries_inactive(self, blockage):
        """Start and end instants are excluded"""
        assert not is_active(blockage, 10.0)
        assert not is_active(blockage, 20.0)

    def test_outside_inactive(self, blockage):
        assert not is_active(blockage, 0.0)
        assert not is_active(blockage, 25.0)

    def test_method_matches_function(self, blockage):
        for t in (5.0, 10.0, 12.0, 20.0, 30.0):
            assert blockage.is_active(t) == is_active(blockage, t)

    def test_active_events_indexed_by_id_in_input_order(self):
        events = [
            Event(id=3, position=100.0, start_time=0.0, end_time=10.0),
            Event(id=1, position=50.0, start_time=0.0, end_time=10.0),
            Event(id=2, position=75.0, start_time=20.0, end_time=30.0),
        ]

        active = active_events(events, 5.0)

        assert list(active.keys()) == [3, 1]
        assert active[1] is events[1]

    def test_active_events_empty(self):
        assert active_events([], 1.0) == {}


# =============================================================================
# Test Class: Serialization
# =============================================================================

class TestEventSerialization:

    def test_round_trip_through_json(self, blockage):
        restored = Event.from_dict(json.loads(json.dumps(blockage.to_dict())))
        assert restored == blockage
