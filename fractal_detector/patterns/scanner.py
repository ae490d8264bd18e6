"""
Multi-symbol fractal scanning on top of the streaming detector.
"""

import json
import logging
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional

from ..core.models import CandlestickTick, FractalMatch
from ..core.types import FractalType
from ..core.exceptions import CheckpointError
from ..indicators.williams_fractal import WilliamsFractal, WINDOW_SIZE, RuleLike
from ..indicators.rules import get_rule

logger = logging.getLogger(__name__)


class _SymbolStream:
    """Detector for one symbol plus the timestamps of the bars in its ring"""

    def __init__(self, detector: WilliamsFractal, timestamps: Optional[List[Optional[datetime]]] = None):
        self.detector = detector
        self.timestamps = timestamps if timestamps is not None else [None] * WINDOW_SIZE
        self.candles_seen = 0

    def step(self, candle: CandlestickTick):
        t2 = self.detector.offsets()[1]
        self.timestamps[self.detector.cursor] = candle.timestamp
        signal = self.detector.next(candle)
        self.candles_seen += 1
        return signal, self.timestamps[t2]


class FractalScanner:
    """Runs one Williams Fractal detector per symbol and dispatches matches"""

    def __init__(self, rule: RuleLike = None, symbols: Optional[Iterable[str]] = None):
        self.rule = get_rule(rule)
        self.allowed_symbols = set(symbols) if symbols else None
        self.streams: Dict[str, _SymbolStream] = {}
        self.callbacks: Dict[FractalType, List[Callable[[FractalMatch], None]]] = {}

    @property
    def symbols(self) -> List[str]:
        return sorted(self.streams)

    def get_detector(self, symbol: str) -> Optional[WilliamsFractal]:
        stream = self.streams.get(symbol)
        return stream.detector if stream else None

    def add_candle(self, candle: CandlestickTick) -> Optional[FractalMatch]:
        """Feed a candle to its symbol's detector, returning a match if one completed"""
        symbol = candle.symbol
        if self.allowed_symbols is not None and symbol not in self.allowed_symbols:
            logger.debug(f"Ignoring candle for unscanned symbol {symbol}")
            return None

        stream = self.streams.get(symbol)
        if stream is None:
            # The seed candle is also stepped, so it occupies a real slot
            stream = _SymbolStream(WilliamsFractal.from_initial(candle, self.rule))
            self.streams[symbol] = stream
            logger.debug(f"Started {self.rule.name} fractal stream for {symbol}")

        signal, fractal_timestamp = stream.step(candle)
        if not signal.is_fractal:
            return None

        match = FractalMatch(
            symbol=symbol,
            signal=signal,
            timestamp=candle.timestamp,
            fractal_timestamp=fractal_timestamp,
            metadata={'rule': self.rule.name, 'candles_seen': stream.candles_seen}
        )
        logger.info(f"{signal.kind.value.upper()} fractal on {symbol} at {signal.value:.4f} "
                    f"(bar {fractal_timestamp}, confirmed {candle.timestamp})")
        self._trigger_callbacks(match)
        return match

    def process(self, candles: Iterable[CandlestickTick]) -> List[FractalMatch]:
        """Feed candles in order and collect every match"""
        matches = []
        for candle in candles:
            match = self.add_candle(candle)
            if match is not None:
                matches.append(match)
        return matches

    def register_callback(self, fractal_type: FractalType, callback: Callable[[FractalMatch], None]):
        """Register callback for when a fractal of the given type is detected"""
        if not callable(callback):
            raise ValueError("Callback must be callable")
        if fractal_type == FractalType.NEITHER:
            raise ValueError("Callbacks can only be registered for bullish or bearish fractals")

        self.callbacks.setdefault(fractal_type, []).append(callback)

    def _trigger_callbacks(self, match: FractalMatch):
        for callback in self.callbacks.get(match.fractal_type, []):
            try:
                callback(match)
            except Exception:
                logger.exception(f"Error in fractal callback for {match.symbol}")

    def reset(self, symbol: Optional[str] = None):
        """Drop the stream for one symbol, or all streams"""
        if symbol is None:
            self.streams.clear()
        else:
            self.streams.pop(symbol, None)

    # Checkpointing

    def to_dict(self) -> Dict:
        """Convert scanner state to a dictionary"""
        return {
            'rule': self.rule.name,
            'symbols': sorted(self.allowed_symbols) if self.allowed_symbols is not None else None,
            'streams': {
                symbol: {
                    'detector': stream.detector.to_dict(),
                    'timestamps': [ts.isoformat() if ts else None for ts in stream.timestamps],
                    'candles_seen': stream.candles_seen
                }
                for symbol, stream in self.streams.items()
            }
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'FractalScanner':
        """Restore a scanner saved with to_dict(); callbacks are not restored"""
        if not isinstance(data, dict):
            raise CheckpointError("Scanner checkpoint must be a JSON object")

        symbols = data.get('symbols')
        if symbols is not None and (
                not isinstance(symbols, list) or not all(isinstance(s, str) for s in symbols)):
            raise CheckpointError("Symbol filter must be a list of strings", field='symbols')

        try:
            scanner = cls(rule=data['rule'], symbols=symbols)
            streams = data['streams']
        except KeyError as e:
            raise CheckpointError("Missing scanner state", field=e.args[0])
        except ValueError as e:
            raise CheckpointError(str(e), field='rule')

        if not isinstance(streams, dict):
            raise CheckpointError("Streams must map symbols to stream state", field='streams')

        for symbol, state in streams.items():
            if not isinstance(state, dict):
                raise CheckpointError(f"Stream {symbol} state must be an object", field='streams')
            if 'detector' not in state:
                raise CheckpointError(f"Stream {symbol} has no detector state", field='detector')
            if not isinstance(state['detector'], dict):
                raise CheckpointError(f"Stream {symbol} detector state must be an object", field='detector')
            detector = WilliamsFractal.from_dict(state['detector'])
            if detector.rule != scanner.rule:
                raise CheckpointError(
                    f"Stream {symbol} uses the {detector.rule.name} rule, scanner uses {scanner.rule.name}",
                    field='rule'
                )
            raw_timestamps = state.get('timestamps') or [None] * WINDOW_SIZE
            if not isinstance(raw_timestamps, list) or len(raw_timestamps) != WINDOW_SIZE:
                raise CheckpointError(f"Stream {symbol} must hold {WINDOW_SIZE} timestamps", field='timestamps')
            try:
                timestamps = [datetime.fromisoformat(ts) if ts else None for ts in raw_timestamps]
            except (TypeError, ValueError):
                raise CheckpointError(f"Invalid timestamp in stream {symbol}", field='timestamps')

            candles_seen = state.get('candles_seen', 0)
            if isinstance(candles_seen, bool) or not isinstance(candles_seen, int) or candles_seen < 0:
                raise CheckpointError(f"Stream {symbol} candle count must be a non-negative integer",
                                      field='candles_seen')

            stream = _SymbolStream(detector, timestamps)
            stream.candles_seen = candles_seen
            scanner.streams[symbol] = stream

        return scanner

    def save_checkpoint(self, path: str):
        """Save scanner state to a JSON file"""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved fractal checkpoint with {len(self.streams)} streams to {path}")

    @classmethod
    def load_checkpoint(cls, path: str) -> 'FractalScanner':
        """Load scanner state from a JSON file"""
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except (FileNotFoundError, json.JSONDecodeError) as e:
            raise CheckpointError(f"Failed to load fractal checkpoint from {path}: {e}")

        scanner = cls.from_dict(data)
        logger.info(f"Loaded fractal checkpoint with {len(scanner.streams)} streams from {path}")
        return scanner
