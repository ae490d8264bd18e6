"""
Core data models for the fractal detector.
Contains all dataclasses and model definitions.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from datetime import datetime

from .types import FractalType
from .exceptions import CheckpointError


@dataclass
class CandlestickTick:
    """Candlestick bar fed to the detectors"""
    symbol: str
    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: int = 0

    @property
    def is_bullish(self) -> bool:
        """True when the bar closed above its open"""
        return self.close > self.open

    @property
    def body_size(self) -> float:
        """Size of the candlestick body"""
        return abs(self.close - self.open)

    @property
    def total_range(self) -> float:
        """Total price range of the candle"""
        return self.high - self.low


@dataclass(frozen=True)
class FractalSignal:
    """
    Result of one detector step.

    BULLISH carries the low of the fractal bar, BEARISH carries its high,
    NEITHER carries no value.
    """
    kind: FractalType
    value: Optional[float] = None

    @classmethod
    def bullish(cls, value: float) -> 'FractalSignal':
        return cls(FractalType.BULLISH, float(value))

    @classmethod
    def bearish(cls, value: float) -> 'FractalSignal':
        return cls(FractalType.BEARISH, float(value))

    @classmethod
    def neither(cls) -> 'FractalSignal':
        return _NEITHER

    @property
    def is_bullish(self) -> bool:
        return self.kind == FractalType.BULLISH

    @property
    def is_bearish(self) -> bool:
        return self.kind == FractalType.BEARISH

    @property
    def is_fractal(self) -> bool:
        return self.kind != FractalType.NEITHER

    def __str__(self) -> str:
        if self.kind == FractalType.NEITHER:
            return "Neither"
        return f"{self.kind.value.capitalize()}({self.value})"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {'kind': self.kind.value, 'value': self.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FractalSignal':
        """Rebuild a signal produced by to_dict()"""
        try:
            kind = FractalType(data['kind'])
        except KeyError:
            raise CheckpointError("Missing signal kind", field='kind')
        except ValueError:
            raise CheckpointError(f"Unknown signal kind {data['kind']!r}", field='kind')

        if kind == FractalType.NEITHER:
            return cls.neither()

        value = data.get('value')
        if value is None:
            raise CheckpointError(f"{kind.value} signal requires a value", field='value')
        return cls(kind, float(value))


_NEITHER = FractalSignal(FractalType.NEITHER)


@dataclass
class FractalMatch:
    """A fractal found by the scanner on one symbol's stream"""
    symbol: str
    signal: FractalSignal
    timestamp: datetime
    fractal_timestamp: Optional[datetime] = None
    metadata: Dict = field(default_factory=dict)

    @property
    def fractal_type(self) -> FractalType:
        return self.signal.kind

    @property
    def price(self) -> float:
        return self.signal.value

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            'symbol': self.symbol,
            'fractal_type': self.signal.kind.value,
            'price': self.signal.value,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'fractal_timestamp': self.fractal_timestamp.isoformat() if self.fractal_timestamp else None,
            'metadata': self.metadata
        }
