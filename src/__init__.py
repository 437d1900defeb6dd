"""
Single-Lane Kinematic Wave Traffic Simulation

Point vehicles driven by a triangular fundamental diagram, temporary lane
blockages, and the analytic shockwave interfaces they produce.
"""

__version__ = "0.1.0"
__author__ = "Traffic Simulation Team"
