"""Scenario-driven traffic generation for SAM and DenIM messaging test clients."""

__version__ = "0.1.0"