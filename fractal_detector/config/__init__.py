"""Configuration for fractal scanning."""

from .settings import FractalConfig, STRICT_CONFIG, RELAXED_CONFIG

__all__ = ['FractalConfig', 'STRICT_CONFIG', 'RELAXED_CONFIG']
