"""
Time-Windowed Point Obstructions

An event blocks the lane at a fixed position while it is active, i.e. strictly
between its start and end time. Boundary instants are inactive.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Any
import math


@dataclass(frozen=True)
class Event:
    """A lane blockage at a point"""
    id: int
    position: float         # Obstruction location [m]
    start_time: float       # [s]
    end_time: float         # [s]

    def __post_init__(self):
        if not (math.isfinite(self.start_time) and math.isfinite(self.end_time)):
            raise ValueError(f"Event {self.id} must have finite start and end times")
        if not self.start_time < self.end_time:
            raise ValueError(
                f"Event {self.id} must start before it ends "
                f"(start_time={self.start_time}, end_time={self.end_time})")

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    def is_active(self, time: float) -> bool:
        return is_active(self, time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'position': self.position,
            'start_time': self.start_time,
            'end_time': self.end_time,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Event':
        return cls(id=data['id'], position=data['position'],
                   start_time=data['start_time'], end_time=data['end_time'])


@dataclass(frozen=True)
class EventSpec:
    """Event description without a required id, used to build initial states"""
    position: float
    start_time: float
    end_time: float
    id: Optional[int] = None


def is_active(event: Event, time: float) -> bool:
    """True iff start_time < time < end_time"""
    return event.start_time < time < event.end_time


def active_events(events: Iterable[Event], time: float) -> Dict[int, Event]:
    """Events active at ``time`` keyed by id, in input order"""
    return {event.id: event for event in events if is_active(event, time)}
