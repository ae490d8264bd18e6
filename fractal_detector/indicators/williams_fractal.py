"""
Bill Williams Fractal indicator, computed one bar at a time.

At time t the detector reports whether the bar at t-2 is a bullish fractal
(carrying its low), a bearish fractal (carrying its high) or neither.

State is a fixed 5-slot ring of highs, lows and cached bar directions
(close > open) plus a write cursor. Every step overwrites the cursor slot,
looks four slots back with wraparound subtraction, evaluates the rule and
advances the cursor by one.
"""

import json
from typing import Any, Dict, Optional, Sequence, Tuple, Union

import numpy as np

from ..core.models import FractalSignal
from ..core.types import RuleType
from ..core.exceptions import CheckpointError
from .rules import FractalRule, get_rule


RuleLike = Union[str, RuleType, FractalRule, None]

WINDOW_SIZE = 5
HISTORY_SIZE = WINDOW_SIZE - 1


def _back(cursor: int, k: int) -> int:
    """Ring slot k steps behind cursor"""
    if cursor >= k:
        return cursor - k
    return WINDOW_SIZE - (k - cursor)


def _past_values(values: Sequence[float], name: str) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    if arr.shape != (HISTORY_SIZE,):
        raise ValueError(f"{name} must hold exactly {HISTORY_SIZE} values, got shape {arr.shape}")
    return arr


class WilliamsFractal:
    """Streaming Williams Fractal detector over a 5-bar window"""

    LABEL = "WFRACTAL"

    def __init__(self, highs: np.ndarray, lows: np.ndarray, direction: np.ndarray,
                 cursor: int, rule: RuleLike = None, warmup: int = 0):
        self.rule = get_rule(rule)
        self.highs = highs
        self.lows = lows
        self.direction = direction
        self._cursor = cursor
        # steps left before the ring holds only live bars
        self._warmup = warmup

    # Construction

    @classmethod
    def new(cls, past_highs: Sequence[float], past_lows: Sequence[float],
            past_opens: Optional[Sequence[float]] = None,
            past_closes: Optional[Sequence[float]] = None,
            rule: RuleLike = None) -> 'WilliamsFractal':
        """
        Detector seeded with the last 4 bars, earliest first.

        The first call to next() already produces a real classification.
        Opens and closes may be omitted for the relaxed rule only.
        """
        rule = get_rule(rule)
        highs = np.zeros(WINDOW_SIZE, dtype=float)
        lows = np.zeros(WINDOW_SIZE, dtype=float)
        direction = np.zeros(WINDOW_SIZE, dtype=bool)
        highs[:HISTORY_SIZE] = _past_values(past_highs, 'past_highs')
        lows[:HISTORY_SIZE] = _past_values(past_lows, 'past_lows')

        if (past_opens is None) != (past_closes is None):
            raise ValueError("past_opens and past_closes must be given together")
        if past_opens is not None:
            opens = _past_values(past_opens, 'past_opens')
            closes = _past_values(past_closes, 'past_closes')
            direction[:HISTORY_SIZE] = closes > opens
        elif rule.uses_direction:
            raise ValueError(f"The {rule.name} rule needs past opens and closes")

        return cls(highs, lows, direction, HISTORY_SIZE, rule)

    @classmethod
    def initial(cls, high: float, low: float, open: Optional[float] = None,
                close: Optional[float] = None, rule: RuleLike = None) -> 'WilliamsFractal':
        """
        Detector seeded with a single bar repeated across the window.

        The next 4 calls to next() always return Neither.
        """
        rule = get_rule(rule)
        if open is None or close is None:
            if rule.uses_direction:
                raise ValueError(f"The {rule.name} rule needs the open and close of the seed bar")
            bullish = False
        else:
            bullish = close > open
        return cls(
            np.full(WINDOW_SIZE, high, dtype=float),
            np.full(WINDOW_SIZE, low, dtype=float),
            np.full(WINDOW_SIZE, bullish, dtype=bool),
            0,
            rule,
            warmup=HISTORY_SIZE
        )

    @classmethod
    def from_data(cls, past: Sequence[Any], rule: RuleLike = None) -> 'WilliamsFractal':
        """Detector seeded with the last 4 bar objects, earliest first"""
        if len(past) != HISTORY_SIZE:
            raise ValueError(f"Expected {HISTORY_SIZE} past bars, got {len(past)}")
        rule = get_rule(rule)
        highs = [bar.high for bar in past]
        lows = [bar.low for bar in past]
        if rule.uses_direction:
            return cls.new(highs, lows, [bar.open for bar in past], [bar.close for bar in past], rule)
        return cls.new(highs, lows, rule=rule)

    @classmethod
    def from_initial(cls, bar: Any, rule: RuleLike = None) -> 'WilliamsFractal':
        """Detector seeded with a single bar object"""
        rule = get_rule(rule)
        if rule.uses_direction:
            return cls.initial(bar.high, bar.low, bar.open, bar.close, rule)
        return cls.initial(bar.high, bar.low, rule=rule)

    # Stepping

    @property
    def cursor(self) -> int:
        """Slot that receives the next bar"""
        return self._cursor

    def offsets(self) -> Tuple[int, int, int, int]:
        """Slots 1, 2, 3 and 4 bars behind the cursor"""
        t = self._cursor
        return _back(t, 1), _back(t, 2), _back(t, 3), _back(t, 4)

    def next(self, bar: Any) -> FractalSignal:
        """Feed one bar exposing high and low (and open, close for the strict rule)"""
        if self.rule.uses_direction:
            return self.next_values(bar.high, bar.low, bar.open, bar.close)
        return self.next_values(bar.high, bar.low)

    def next_values(self, high: float, low: float, open: Optional[float] = None,
                    close: Optional[float] = None) -> FractalSignal:
        """Feed one bar as raw values"""
        if open is None or close is None:
            if self.rule.uses_direction:
                raise ValueError(f"The {self.rule.name} rule needs the open and close of every bar")
            bullish = False
        else:
            bullish = close > open

        t = self._cursor
        self.highs[t] = high
        self.lows[t] = low
        self.direction[t] = bullish

        t1, t2, t3, t4 = self.offsets()
        self._cursor = (t + 1) % WINDOW_SIZE

        # The seed bar still fills part of the window
        if self._warmup:
            self._warmup -= 1
            return FractalSignal.neither()

        args = (self.highs, self.lows, self.direction, t, t1, t2, t3, t4)
        if self.rule.is_bullish(*args):
            return FractalSignal.bullish(self.lows[t2])
        if self.rule.is_bearish(*args):
            return FractalSignal.bearish(self.highs[t2])
        return FractalSignal.neither()

    @property
    def warming_up(self) -> bool:
        """True while a single-seed detector still holds copies of its seed bar"""
        return self._warmup > 0

    def window(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Copies of highs, lows and directions ordered oldest to newest"""
        shift = -self._cursor
        return (np.roll(self.highs, shift), np.roll(self.lows, shift),
                np.roll(self.direction, shift))

    # Serialization

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for checkpointing"""
        return {
            'rule': self.rule.name,
            'highs': [float(v) for v in self.highs],
            'lows': [float(v) for v in self.lows],
            'direction': [bool(v) for v in self.direction],
            'cursor': self._cursor,
            'warmup': self._warmup
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WilliamsFractal':
        """Restore a detector saved with to_dict()"""
        for key in ('rule', 'highs', 'lows', 'direction', 'cursor'):
            if key not in data:
                raise CheckpointError("Missing detector state", field=key)

        try:
            rule = get_rule(data['rule'])
        except ValueError as e:
            raise CheckpointError(str(e), field='rule')

        buffers = {}
        for key, dtype in (('highs', float), ('lows', float), ('direction', bool)):
            values = data[key]
            if not isinstance(values, list) or len(values) != WINDOW_SIZE:
                raise CheckpointError(f"{key} must hold exactly {WINDOW_SIZE} values", field=key)
            if dtype is bool:
                valid = all(isinstance(v, bool) for v in values)
            else:
                valid = all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in values)
            if not valid:
                raise CheckpointError(f"Invalid {key} buffer", field=key)
            buffers[key] = np.array(values, dtype=dtype)

        cursor = data['cursor']
        if isinstance(cursor, bool) or not isinstance(cursor, int) or not 0 <= cursor < WINDOW_SIZE:
            raise CheckpointError(f"Cursor must be an integer in [0, {WINDOW_SIZE})", field='cursor')

        warmup = data.get('warmup', 0)
        if isinstance(warmup, bool) or not isinstance(warmup, int) or not 0 <= warmup <= HISTORY_SIZE:
            raise CheckpointError(f"Warmup must be an integer in [0, {HISTORY_SIZE}]", field='warmup')

        return cls(buffers['highs'], buffers['lows'], buffers['direction'], cursor, rule, warmup)

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, payload: str) -> 'WilliamsFractal':
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            raise CheckpointError(f"Invalid detector checkpoint: {e}")
        if not isinstance(data, dict):
            raise CheckpointError("Detector checkpoint must be a JSON object")
        return cls.from_dict(data)

    def __str__(self) -> str:
        return self.LABEL

    def __repr__(self) -> str:
        return f"WilliamsFractal(rule={self.rule.name!r}, cursor={self._cursor})"
