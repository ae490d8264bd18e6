"""
Fractal Detector - streaming Bill Williams Fractal indicator.

This package provides:
- A constant-memory detector that classifies each bar two positions back
  as a bullish fractal, a bearish fractal or neither
- Strict (direction-aware) and relaxed (extremum-only) pattern rules
- A multi-symbol scanner with callbacks and JSON checkpointing
"""

__version__ = "1.0.0"
__author__ = "Fractal Detector Team"

from .core.types import FractalType, RuleType
from .core.models import CandlestickTick, FractalSignal, FractalMatch
from .core.exceptions import FractalIndicatorError, CheckpointError, ConfigurationError
from .indicators.rules import FractalRule, StrictFractalRule, RelaxedFractalRule, get_rule
from .indicators.williams_fractal import WilliamsFractal
from .patterns.scanner import FractalScanner
from .config.settings import FractalConfig

__all__ = [
    # Core types
    'FractalType', 'RuleType',
    # Core models
    'CandlestickTick', 'FractalSignal', 'FractalMatch',
    # Exceptions
    'FractalIndicatorError', 'CheckpointError', 'ConfigurationError',
    # Indicator
    'FractalRule', 'StrictFractalRule', 'RelaxedFractalRule', 'get_rule',
    'WilliamsFractal',
    # Scanning and configuration
    'FractalScanner', 'FractalConfig'
]
