"""Errors raised by the hazard calculation"""


class HazardError(Exception):
    """Base class for all hazard calculation errors"""


class ConfigurationError(HazardError, ValueError):
    """
    Invalid model, site or calculation configuration,
    raised when the immutable objects are constructed.
    """


class EvaluationError(HazardError, RuntimeError):
    """A ground motion model failed for one of its inputs"""


class CalculationError(HazardError, RuntimeError):
    """
    A pipeline task failed unexpectedly or
    the calculator is no longer accepting work.
    """
