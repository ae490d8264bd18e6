"""Core components of the fractal detector."""

from .types import FractalType, RuleType
from .models import CandlestickTick, FractalSignal, FractalMatch
from .exceptions import (
    FractalIndicatorError, CheckpointError, ConfigurationError
)

__all__ = [
    'FractalType', 'RuleType',
    'CandlestickTick', 'FractalSignal', 'FractalMatch',
    'FractalIndicatorError', 'CheckpointError', 'ConfigurationError'
]
