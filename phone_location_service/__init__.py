"""Phone Location Service - simulated phone number location lookups."""

__version__ = "0.1.0"
