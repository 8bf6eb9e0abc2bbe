"""
Periodic OS metrics sampler writing CSV rows to stdout.
"""

__version__ = "0.3.0"
