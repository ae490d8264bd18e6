"""
Pytest configuration and shared fixtures.
"""

import pytest
from datetime import datetime, timedelta
from fractal_detector.core.models import CandlestickTick
from fractal_detector.indicators.williams_fractal import WilliamsFractal
from fractal_detector.patterns.scanner import FractalScanner


BASE_TIME = datetime(2024, 1, 2, 9, 30)


def make_candles(symbol, bars, start=BASE_TIME):
    """Build one-minute candles from (open, high, low, close) tuples"""
    return [
        CandlestickTick(symbol, start + timedelta(minutes=i), o, h, l, c, 1000)
        for i, (o, h, l, c) in enumerate(bars)
    ]


@pytest.fixture
def strict_bullish_detector():
    """Strict detector one bar away from a bullish fractal at low 1.0"""
    return WilliamsFractal.new(
        [4.0, 3.0, 2.0, 3.0],
        [3.0, 2.0, 1.0, 2.0],
        [4.0, 3.0, 2.0, 2.0],
        [3.0, 2.0, 1.0, 3.0],
    )


@pytest.fixture
def strict_bearish_detector():
    """Strict detector one bar away from a bearish fractal at high 4.0"""
    return WilliamsFractal.new(
        [2.0, 3.0, 4.0, 3.0],
        [1.0, 2.0, 3.0, 2.0],
        [1.0, 2.0, 1.0, 3.0],
        [2.0, 3.0, 2.0, 2.0],
    )


@pytest.fixture
def bullish_fractal_bars():
    """Five (open, high, low, close) bars forming a strict bullish fractal at low 1.0"""
    return [
        (4.0, 4.0, 3.0, 3.0),
        (3.0, 3.0, 2.0, 2.0),
        (2.0, 2.0, 1.0, 1.0),
        (2.0, 3.0, 2.0, 3.0),
        (3.0, 4.0, 3.0, 4.0),
    ]


@pytest.fixture
def bearish_fractal_bars():
    """Five (open, high, low, close) bars forming a strict bearish fractal at high 4.0"""
    return [
        (1.0, 2.0, 1.0, 2.0),
        (2.0, 3.0, 2.0, 3.0),
        (1.0, 4.0, 3.0, 2.0),
        (3.0, 3.0, 2.0, 2.0),
        (2.0, 2.0, 1.0, 1.0),
    ]


@pytest.fixture
def sample_scanner():
    """Create a strict scanner for testing"""
    return FractalScanner(rule="strict")


@pytest.fixture
def candle_factory():
    """Factory building one-minute candles from (open, high, low, close) tuples"""
    return make_candles
