"""Streaming indicators."""

from .rules import FractalRule, StrictFractalRule, RelaxedFractalRule, get_rule
from .williams_fractal import WilliamsFractal, WINDOW_SIZE

__all__ = [
    'FractalRule', 'StrictFractalRule', 'RelaxedFractalRule', 'get_rule',
    'WilliamsFractal', 'WINDOW_SIZE'
]
