"""
Core type definitions for the fractal detector.
Contains all enums and basic type definitions.
"""

from enum import Enum


class FractalType(Enum):
    """Classification of the bar at the centre of a 5-bar window"""
    BEARISH = "bearish"
    BULLISH = "bullish"
    NEITHER = "neither"


class RuleType(Enum):
    """Pattern rules a detector can be built with"""
    STRICT = "strict"
    RELAXED = "relaxed"
