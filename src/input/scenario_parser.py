"""
Scenario File Parser

This module parses XML scenario files describing one single-lane run:
fundamental diagram, vehicle population, events, stepping and analysis bounds.

Format:
    <scenario>
        <fundamental-diagram>
            <max-density value="0.2"/>
            <peak-density value="0.0666667"/>
            <peak-flow value="0.6666667"/>
        </fundamental-diagram>
        <vehicles count="400" spacing="20" velocity="10" lead-position="400.01"/>
        <events>
            <event id="100000" position="500" begin="10" end="20"/>
        </events>
        <time step-length="0.5" steps="400" begin="0"/>
        <bounds time-min="-100" time-max="150" position-min="-100" position-max="1000"/>
        <processing>
            <free-flow-spacing value="10000"/>
            <invariant-checks value="true"/>
            <keep-history value="true"/>
            <output-interval value="100"/>
        </processing>
    </scenario>

Every section is optional; missing values take the reference defaults.
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import List, Optional

from core.events import EventSpec
from core.simulation import SimulationConfig, initial_state
from core.state import SimulationState
from traffic_models.fundamental_diagram import FundamentalDiagramParameters


_REFERENCE = FundamentalDiagramParameters.from_reference()


@dataclass
class ScenarioConfig:
    """Parameters of one simulation scenario"""
    # Fundamental diagram
    max_density: float = _REFERENCE.max_density      # [veh/m]
    peak_density: float = _REFERENCE.peak_density    # [veh/m]
    peak_flow: float = _REFERENCE.peak_flow          # [veh/s]

    # Vehicle population
    vehicle_count: int = 400
    spacing: float = 20.0             # [m]
    initial_velocity: float = 10.0    # [m/s]
    lead_position: float = 400.01     # [m]
    start_time: float = 0.0           # [s]

    events: List[EventSpec] = field(
        default_factory=lambda: [EventSpec(position=500.0, start_time=10.0, end_time=20.0, id=100000)])

    simulation: SimulationConfig = field(default_factory=SimulationConfig)

    def fundamental_diagram(self) -> FundamentalDiagramParameters:
        return FundamentalDiagramParameters(
            max_density=self.max_density,
            peak_density=self.peak_density,
            peak_flow=self.peak_flow,
        )

    def build_initial_state(self) -> SimulationState:
        return initial_state(
            self.vehicle_count,
            self.spacing,
            self.initial_velocity,
            self.events,
            lead_position=self.lead_position,
            start_time=self.start_time,
        )


class ScenarioParser:
    """
    Parser for XML scenario files

    Usage:
        parser = ScenarioParser()
        scenario = parser.parse("reference.scenario.xml")
    """

    def parse(self, filepath: str) -> ScenarioConfig:
        """Parse a scenario file"""
        tree = ET.parse(filepath)
        return self.parse_element(tree.getroot())

    def parse_string(self, text: str) -> ScenarioConfig:
        """Parse scenario XML held in a string"""
        return self.parse_element(ET.fromstring(text))

    def parse_element(self, root: ET.Element) -> ScenarioConfig:
        config = ScenarioConfig()
        sim = config.simulation

        # Parse fundamental diagram section
        fd = root.find("fundamental-diagram")
        if fd is not None:
            config.max_density = self._get_value(fd, "max-density", config.max_density)
            # Peak density defaults to a third of the jam density
            config.peak_density = self._get_value(fd, "peak-density", config.max_density / 3)
            config.peak_flow = self._get_value(fd, "peak-flow", config.peak_flow)

        # Parse vehicle population
        vehicles = root.find("vehicles")
        if vehicles is not None:
            config.vehicle_count = int(self._get_attr(vehicles, "count", config.vehicle_count))
            config.spacing = self._get_attr(vehicles, "spacing", config.spacing)
            config.initial_velocity = self._get_attr(vehicles, "velocity", config.initial_velocity)
            config.lead_position = self._get_attr(vehicles, "lead-position", config.lead_position)

        # Parse events; an <events> section replaces the default schedule
        events = root.find("events")
        if events is not None:
            config.events = [self._parse_event(elem) for elem in events.findall("event")]

        # Parse time section
        time_section = root.find("time")
        if time_section is not None:
            sim.time_step = self._get_attr(time_section, "step-length", sim.time_step)
            sim.num_steps = int(self._get_attr(time_section, "steps", sim.num_steps))
            config.start_time = self._get_attr(time_section, "begin", config.start_time)

        # Parse analysis bounds
        bounds = root.find("bounds")
        if bounds is not None:
            sim.time_bounds = (
                self._get_attr(bounds, "time-min", sim.time_bounds[0]),
                self._get_attr(bounds, "time-max", sim.time_bounds[1]),
            )
            sim.position_bounds = (
                self._get_attr(bounds, "position-min", sim.position_bounds[0]),
                self._get_attr(bounds, "position-max", sim.position_bounds[1]),
            )

        # Parse processing section
        processing = root.find("processing")
        if processing is not None:
            sim.free_flow_spacing = self._get_value(processing, "free-flow-spacing", sim.free_flow_spacing)
            sim.invariant_checks = self._get_bool(processing, "invariant-checks", sim.invariant_checks)
            sim.keep_history = self._get_bool(processing, "keep-history", sim.keep_history)
            sim.output_interval = int(self._get_value(processing, "output-interval", sim.output_interval))
            sim.verbose = self._get_bool(processing, "verbose", sim.verbose)

        return config

    def _parse_event(self, elem: ET.Element) -> EventSpec:
        """Parse one <event>; position, begin and end are required"""
        try:
            position = float(elem.attrib["position"])
            start_time = float(elem.attrib["begin"])
            end_time = float(elem.attrib["end"])
        except (KeyError, ValueError) as e:
            raise ValueError(f"Malformed event {ET.tostring(elem, encoding='unicode').strip()}: {e}") from e

        event_id = elem.get("id")
        return EventSpec(
            position=position,
            start_time=start_time,
            end_time=end_time,
            id=int(event_id) if event_id is not None else None,
        )

    def _get_attr(self, elem: ET.Element, name: str, default: float) -> float:
        """Get float value from an attribute"""
        val = elem.get(name)
        if val is not None:
            try:
                return float(val)
            except ValueError:
                pass
        return default

    def _get_value(self, parent: ET.Element, name: str, default: float) -> float:
        """Get float value from child element with 'value' attribute"""
        elem = parent.find(name)
        if elem is not None:
            return self._get_attr(elem, "value", default)
        return default

    def _get_bool(self, parent: ET.Element, name: str, default: bool) -> bool:
        """Get boolean value from child element"""
        elem = parent.find(name)
        if elem is not None:
            val = elem.get("value", "").lower()
            if val in ("true", "1", "yes"):
                return True
            elif val in ("false", "0", "no"):
                return False
        return default


def parse_scenario(filepath: Optional[str] = None) -> ScenarioConfig:
    """
    Parse a scenario file, or return the reference scenario

    Args:
        filepath: Path to scenario XML, or None for defaults

    Returns:
        ScenarioConfig
    """
    if filepath is None:
        return ScenarioConfig()
    return ScenarioParser().parse(filepath)
