#!/usr/bin/env python3
"""
Exceptions raised by the simulation core.
"""


class SimulationError(Exception):
    """Base class for every error raised by the simulation core."""


class ConfigurationError(SimulationError, ValueError):
    """Invalid configuration or body attributes supplied at startup."""


class NumericalInstabilityError(SimulationError, ArithmeticError):
    """A tick produced a NaN or infinite value; the simulation is no longer valid."""
