"""
Pattern rules for the Williams Fractal detector.

Both rules look at the same five ring slots: ``t`` (newest bar) and
``t1``..``t4`` (one to four bars back). The fractal candidate is ``t2``.
"""

from abc import ABC, abstractmethod
from typing import Union

import numpy as np

from ..core.types import RuleType


class FractalRule(ABC):
    """Base class for fractal pattern rules"""

    rule_type: RuleType

    # Whether the rule reads the cached bar direction buffer
    uses_direction: bool = False

    @property
    def name(self) -> str:
        return self.rule_type.value

    @abstractmethod
    def is_bullish(self, highs: np.ndarray, lows: np.ndarray, direction: np.ndarray,
                   t: int, t1: int, t2: int, t3: int, t4: int) -> bool:
        """True when the bar at slot t2 is a bullish fractal (local low)"""
        pass

    @abstractmethod
    def is_bearish(self, highs: np.ndarray, lows: np.ndarray, direction: np.ndarray,
                   t: int, t1: int, t2: int, t3: int, t4: int) -> bool:
        """True when the bar at slot t2 is a bearish fractal (local high)"""
        pass

    def __eq__(self, other) -> bool:
        return isinstance(other, FractalRule) and other.rule_type == self.rule_type

    def __hash__(self) -> int:
        return hash(self.rule_type)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class StrictFractalRule(FractalRule):
    """
    Monotonic run plus bar direction.

    Bullish: lows strictly fall from t4 into t2 and strictly rise out of it,
    bars t4, t3, t2 are bearish and bars t1, t are bullish.
    Bearish is the mirror on highs with the directions swapped.
    """

    rule_type = RuleType.STRICT
    uses_direction = True

    def is_bullish(self, highs, lows, direction, t, t1, t2, t3, t4) -> bool:
        return bool(
            lows[t3] < lows[t4]
            and lows[t2] < lows[t3]
            and lows[t1] > lows[t2]
            and lows[t] > lows[t1]
            and not direction[t4]
            and not direction[t3]
            and not direction[t2]
            and direction[t1]
            and direction[t]
        )

    def is_bearish(self, highs, lows, direction, t, t1, t2, t3, t4) -> bool:
        return bool(
            highs[t3] > highs[t4]
            and highs[t2] > highs[t3]
            and highs[t1] < highs[t2]
            and highs[t] < highs[t1]
            and direction[t4]
            and direction[t3]
            and direction[t2]
            and not direction[t1]
            and not direction[t]
        )


class RelaxedFractalRule(FractalRule):
    """Strict 5-bar extremum at t2, highs and lows only"""

    rule_type = RuleType.RELAXED

    def is_bullish(self, highs, lows, direction, t, t1, t2, t3, t4) -> bool:
        low = lows[t2]
        return bool(low < lows[t4] and low < lows[t3] and low < lows[t1] and low < lows[t])

    def is_bearish(self, highs, lows, direction, t, t1, t2, t3, t4) -> bool:
        high = highs[t2]
        return bool(high > highs[t4] and high > highs[t3] and high > highs[t1] and high > highs[t])


_RULES = {
    RuleType.STRICT: StrictFractalRule,
    RuleType.RELAXED: RelaxedFractalRule,
}


def get_rule(rule: Union[str, RuleType, FractalRule, None] = None) -> FractalRule:
    """Resolve a rule instance from a rule, a RuleType or its name (default strict)"""
    if rule is None:
        return StrictFractalRule()
    if isinstance(rule, FractalRule):
        return rule
    if isinstance(rule, str):
        try:
            rule = RuleType(rule.strip().lower())
        except ValueError:
            valid = ', '.join(r.value for r in RuleType)
            raise ValueError(f"Unknown fractal rule {rule!r}, expected one of: {valid}")
    if not isinstance(rule, RuleType):
        raise ValueError(f"Cannot build a fractal rule from {rule!r}")
    return _RULES[rule]()
