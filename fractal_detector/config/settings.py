"""
Configuration for fractal scanning.
"""

from dataclasses import dataclass, field
from typing import List, Optional
import os
import sys
import json
import logging

from ..core.types import RuleType
from ..core.exceptions import ConfigurationError
from ..indicators.rules import FractalRule, get_rule


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


@dataclass
class FractalConfig:
    """Settings for a fractal scanning pipeline"""
    rule: str = RuleType.STRICT.value

    # Symbols to scan; empty means every symbol seen
    symbols: List[str] = field(default_factory=list)

    log_level: str = "INFO"
    checkpoint_path: Optional[str] = None

    def __post_init__(self):
        try:
            self.rule = get_rule(self.rule).name
        except ValueError as e:
            raise ConfigurationError(str(e))

        if not isinstance(self.log_level, str) or \
                not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigurationError(f"Unknown log level {self.log_level!r}")
        self.log_level = self.log_level.upper()

        if not isinstance(self.symbols, list) or not all(isinstance(s, str) for s in self.symbols):
            raise ConfigurationError(f"Symbols must be a list of strings, got {self.symbols!r}")

    def create_rule(self) -> FractalRule:
        """Instantiate the configured rule"""
        return get_rule(self.rule)

    def create_scanner(self):
        """
        Build a scanner, resuming from the checkpoint file when one exists.

        A checkpoint must have been written with the same rule and symbol
        filter as this configuration.
        """
        from ..patterns.scanner import FractalScanner

        if self.checkpoint_path and os.path.exists(self.checkpoint_path):
            scanner = FractalScanner.load_checkpoint(self.checkpoint_path)
            if scanner.rule != self.create_rule():
                raise ConfigurationError(
                    f"Checkpoint {self.checkpoint_path} uses the {scanner.rule.name} rule, "
                    f"configuration asks for {self.rule}"
                )
            if scanner.allowed_symbols != (set(self.symbols) or None):
                raise ConfigurationError(
                    f"Checkpoint {self.checkpoint_path} scans "
                    f"{sorted(scanner.allowed_symbols) if scanner.allowed_symbols else 'every symbol'}, "
                    f"configuration asks for {self.symbols or 'every symbol'}"
                )
            return scanner
        return FractalScanner(rule=self.rule, symbols=self.symbols or None)

    def setup_logging(self) -> logging.Logger:
        """Set up logging configuration for an application using the scanner"""
        logging.basicConfig(
            level=getattr(logging, self.log_level, logging.INFO),
            format=LOG_FORMAT,
            handlers=[logging.StreamHandler(sys.stdout)]
        )
        logger = logging.getLogger('fractal_detector')
        logger.info(f"Logging configured at {self.log_level} level")
        return logger

    @classmethod
    def from_file(cls, config_path: str) -> 'FractalConfig':
        """Load configuration from JSON file"""
        try:
            with open(config_path, 'r') as f:
                data = json.load(f)
            return cls(**data)
        except (FileNotFoundError, json.JSONDecodeError, TypeError) as e:
            raise ConfigurationError(f"Failed to load fractal config from {config_path}: {e}")

    def save_to_file(self, config_path: str):
        """Save configuration to JSON file"""
        config_dict = {
            k: v for k, v in self.__dict__.items()
            if v is not None
        }

        with open(config_path, 'w') as f:
            json.dump(config_dict, f, indent=2)

    @classmethod
    def from_env(cls) -> 'FractalConfig':
        """Create configuration from environment variables"""
        symbols_str = os.getenv('FRACTAL_SYMBOLS', '')
        symbols = [s.strip() for s in symbols_str.split(',') if s.strip()]

        return cls(
            rule=os.getenv('FRACTAL_RULE', RuleType.STRICT.value),
            symbols=symbols,
            log_level=os.getenv('FRACTAL_LOG_LEVEL', 'INFO'),
            checkpoint_path=os.getenv('FRACTAL_CHECKPOINT_PATH')
        )


# Predefined configurations
STRICT_CONFIG = FractalConfig(rule=RuleType.STRICT.value)

RELAXED_CONFIG = FractalConfig(rule=RuleType.RELAXED.value)
