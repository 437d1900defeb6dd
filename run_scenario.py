#!/usr/bin/env python3
"""
Run a Single-Lane Kinematic Wave Simulation from a Scenario File

Usage:
    python run_scenario.py [scenario.xml] [steps] [output.json]

Example:
    python run_scenario.py
    python run_scenario.py scenarios/reference.scenario.xml
    python run_scenario.py scenarios/reference.scenario.xml 200 results.json
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from input.scenario_parser import ScenarioConfig, parse_scenario
from core.simulation import LaneSimulation


def print_scenario(scenario: ScenarioConfig):
    """Print scenario parameters"""
    sim = scenario.simulation
    print("\n  Fundamental Diagram:")
    print(f"    Max density: {scenario.max_density} veh/m")
    print(f"    Peak density: {scenario.peak_density} veh/m")
    print(f"    Peak flow: {scenario.peak_flow} veh/s")

    print("\n  Vehicles:")
    print(f"    Count: {scenario.vehicle_count}, spacing: {scenario.spacing}m, "
          f"velocity: {scenario.initial_velocity}m/s, lead at {scenario.lead_position}m")

    print("\n  Events:")
    for spec in scenario.events:
        print(f"    position={spec.position}m, t=({spec.start_time}s, {spec.end_time}s)")
    if not scenario.events:
        print("    none")

    print("\n  Stepping:")
    print(f"    Step length: {sim.time_step}s, steps: {sim.num_steps}")
    print(f"    Invariant checks: {sim.invariant_checks}")


def main():
    args = sys.argv[1:]
    if args and args[0] in ("-h", "--help"):
        print(__doc__)
        sys.exit(0)

    scenario_file = args[0] if len(args) > 0 else None
    steps = int(args[1]) if len(args) > 1 else None
    output_file = args[2] if len(args) > 2 else "simulation_results.json"

    print("=" * 60)
    print("Single-Lane Kinematic Wave Simulation")
    print("=" * 60)

    if scenario_file:
        print(f"\nParsing scenario: {scenario_file}")
    else:
        print("\nUsing reference scenario")
    scenario = parse_scenario(scenario_file)
    if steps is not None:
        scenario.simulation.num_steps = steps
    print_scenario(scenario)

    print("\nInitializing simulation...")
    sim = LaneSimulation(scenario.simulation)
    sim.build_flow_function(scenario.fundamental_diagram())
    sim.load_state(scenario.build_initial_state())
    sim.initialize()

    print("\nRunning simulation...")
    results = sim.run()

    # Print results
    print("\n" + "=" * 60)
    print("Simulation Results")
    print("=" * 60)
    print(f"  Simulation steps: {results['steps']}")
    print(f"  Final time: {results['final_time']:.1f}s")
    print(f"  Vehicles: {results['num_vehicles']} ({results['blocked_vehicles']} blocked)")
    if results['num_vehicles']:
        print(f"  Positions: {results['min_position']:.1f}m .. {results['max_position']:.1f}m")

    print(f"  Interfaces: {len(results['interfaces'])}")
    for interface in results['interfaces']:
        (t0, x0), (t1, x1) = interface['coordinates']
        print(f"    {interface['kind']:<12} ({t0:.1f}s, {x0:.1f}m) -> ({t1:.1f}s, {x1:.1f}m)")

    sim.export_results(output_file)

    return results


if __name__ == "__main__":
    main()
