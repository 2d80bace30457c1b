"""Appointment booking backend for a single-resource repair service"""

__version__ = "1.0.0"
