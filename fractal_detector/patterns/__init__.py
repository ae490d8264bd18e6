"""Multi-symbol fractal scanning."""

from .scanner import FractalScanner

__all__ = ['FractalScanner']
