"""
Runtime Configuration for Roger.

Provides a singleton RuntimeConfig class that allows dynamic adjustment of
conversation pacing, memory and detection parameters at runtime, without
requiring service restart.

Usage:
    from config import runtime_config
    threshold = runtime_config.repetition_threshold
    runtime_config.update(disclosure_probability=0.1, stage_deepening_at=10)
"""

import os
import logging
from dataclasses import dataclass, field, fields
from typing import Dict, Any, Optional
from threading import Lock

logger = logging.getLogger(__name__)


_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "off"})


def _env_bool(key: str, default: bool) -> bool:
    """Parse a boolean environment flag (true/1/yes)."""
    value = os.environ.get(key)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in _TRUE_STRINGS


def _env_seed() -> Optional[int]:
    """RANDOM_SEED env var as int, or None for system entropy."""
    value = os.environ.get("RANDOM_SEED", "").strip()
    return int(value) if value else None


@dataclass
class RuntimeConfig:
    """
    Singleton configuration for runtime-adjustable parameters.

    All values have defaults from environment variables, but can be
    changed at runtime via the update() method.
    """

    # Stage progression (message count thresholds)
    stage_exploration_at: int = field(default_factory=lambda: int(os.environ.get("STAGE_EXPLORATION_AT", "1")))
    stage_deepening_at: int = field(default_factory=lambda: int(os.environ.get("STAGE_DEEPENING_AT", "8")))

    # Memory capacities
    history_capacity: int = field(default_factory=lambda: int(os.environ.get("HISTORY_CAPACITY", "15")))
    reply_memory_size: int = field(default_factory=lambda: int(os.environ.get("REPLY_MEMORY_SIZE", "5")))
    severity_window: int = field(default_factory=lambda: int(os.environ.get("SEVERITY_WINDOW", "3")))

    # Reflection gating
    reflection_early_threshold: int = field(
        default_factory=lambda: int(os.environ.get("REFLECTION_EARLY_THRESHOLD", "10"))
    )
    reflection_late_probability: float = field(
        default_factory=lambda: float(os.environ.get("REFLECTION_LATE_PROBABILITY", "0.3"))
    )
    small_talk_early_messages: int = field(
        default_factory=lambda: int(os.environ.get("SMALL_TALK_EARLY_MESSAGES", "4"))
    )

    # Compliance
    repetition_threshold: float = field(
        default_factory=lambda: float(os.environ.get("REPETITION_THRESHOLD", "0.7"))
    )
    repetition_max_retries: int = field(
        default_factory=lambda: int(os.environ.get("REPETITION_MAX_RETRIES", "3"))
    )
    disclosure_probability: float = field(
        default_factory=lambda: float(os.environ.get("DISCLOSURE_PROBABILITY", "0.15"))
    )
    disclosure_min_messages: int = field(
        default_factory=lambda: int(os.environ.get("DISCLOSURE_MIN_MESSAGES", "6"))
    )

    # Randomness (None = system entropy)
    random_seed: Optional[int] = field(default_factory=_env_seed)

    # Data overrides (empty = built-in tables)
    corpus_path: str = field(default_factory=lambda: os.environ.get("TEMPLATE_CORPUS_PATH", ""))
    rules_path: str = field(default_factory=lambda: os.environ.get("DETECTION_RULES_PATH", ""))

    # Optional detectors (resolved once per session)
    detect_trauma_patterns: bool = field(default_factory=lambda: _env_bool("DETECT_TRAUMA_PATTERNS", True))
    detect_grief_themes: bool = field(default_factory=lambda: _env_bool("DETECT_GRIEF_THEMES", True))
    detect_political_emotions: bool = field(
        default_factory=lambda: _env_bool("DETECT_POLITICAL_EMOTIONS", True)
    )
    detect_client_preferences: bool = field(
        default_factory=lambda: _env_bool("DETECT_CLIENT_PREFERENCES", True)
    )

    # Delivery
    typing_enabled: bool = field(default_factory=lambda: _env_bool("TYPING_ENABLED", True))
    max_message_length: int = field(default_factory=lambda: int(os.environ.get("MAX_MESSAGE_LENGTH", "4000")))

    # Internal
    _lock: Lock = field(default_factory=Lock, repr=False)
    _update_count: int = field(default=0, repr=False)

    _VALIDATION_RANGES: Dict[str, tuple] = field(default_factory=lambda: {
        "stage_exploration_at": (0, 1000),
        "stage_deepening_at": (1, 1000),
        "history_capacity": (3, 200),
        "reply_memory_size": (1, 50),
        "severity_window": (1, 15),
        "reflection_early_threshold": (0, 1000),
        "reflection_late_probability": (0.0, 1.0),
        "small_talk_early_messages": (0, 100),
        "repetition_threshold": (0.0, 1.0),
        "repetition_max_retries": (0, 10),
        "disclosure_probability": (0.0, 1.0),
        "disclosure_min_messages": (0, 1000),
        "max_message_length": (1, 100000),
    }, repr=False)

    def _coerce(self, key: str, value: Any) -> Any:
        """Convert value to the type of the current field value.

        Raises:
            TypeError, ValueError: If the value cannot represent that type
        """
        current = getattr(self, key)
        if isinstance(current, bool):
            if isinstance(value, bool):
                return value
            if isinstance(value, str) and value.strip().lower() in _TRUE_STRINGS | _FALSE_STRINGS:
                return value.strip().lower() in _TRUE_STRINGS
            if isinstance(value, int) and value in (0, 1):
                return bool(value)
            raise ValueError(f"expected a boolean, got {value!r}")
        if isinstance(value, bool) and isinstance(current, (int, float)):
            raise TypeError(f"expected a number, got {value!r}")
        if isinstance(current, int):
            if isinstance(value, float):
                if not value.is_integer():
                    raise ValueError(f"expected an integer, got {value!r}")
                return int(value)
            return int(value.strip() if isinstance(value, str) else value)
        if isinstance(current, float):
            return float(value.strip() if isinstance(value, str) else value)
        return value

    def update(self, **kwargs) -> Dict[str, Any]:
        """
        Update configuration values at runtime.

        Args:
            **kwargs: Key-value pairs to update (e.g., repetition_threshold=0.6)

        Returns:
            Dict with 'updated' (changed keys) and 'ignored' (unknown or rejected keys)
        """
        updated = []
        ignored = []

        with self._lock:
            for key, value in kwargs.items():
                if key.startswith("_"):
                    ignored.append(key)
                    continue

                if hasattr(self, key):
                    try:
                        value = self._coerce(key, value)
                    except (TypeError, ValueError) as e:
                        ignored.append(key)
                        logger.warning(f"Config rejected {key}={value!r} ({e})")
                        continue

                    # Validate numeric ranges
                    if key in self._VALIDATION_RANGES:
                        lo, hi = self._VALIDATION_RANGES[key]
                        if not (lo <= value <= hi):
                            ignored.append(key)
                            logger.warning(f"Config rejected {key}={value} (must be {lo}-{hi})")
                            continue

                    old_value = getattr(self, key)
                    setattr(self, key, value)
                    updated.append(key)
                    logger.info(f"Config updated: {key} = {value} (was {old_value})")
                else:
                    ignored.append(key)
                    logger.warning(f"Config ignored unknown key: {key}")

            if self.stage_deepening_at <= self.stage_exploration_at:
                logger.warning(
                    f"Stage thresholds out of order: exploration={self.stage_exploration_at} "
                    f"deepening={self.stage_deepening_at}"
                )

            self._update_count += 1

        return {"updated": updated, "ignored": ignored, "update_count": self._update_count}

    def to_dict(self) -> Dict[str, Any]:
        """Export public configuration values."""
        return {f.name: getattr(self, f.name) for f in fields(self) if not f.name.startswith("_")}

    def reset(self) -> None:
        """Restore every public field to its environment default."""
        defaults = RuntimeConfig()
        with self._lock:
            for f in fields(self):
                if not f.name.startswith("_"):
                    setattr(self, f.name, getattr(defaults, f.name))
        logger.info("Config reset to defaults")


# Global singleton instance
runtime_config = RuntimeConfig()


def get_config() -> RuntimeConfig:
    """Get the global runtime configuration."""
    return runtime_config
