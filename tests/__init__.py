"""
Test Suite for Single-Lane Kinematic Wave Simulation

Comprehensive tests for:
- Fundamental diagram
- Events and state
- Stepper
- Interface / shockwave tracker
- Runner, scenario parsing and integration scenarios
"""
