"""
Detector Registry - optional detector modules resolved once per session.

Each optional detector is a self-contained definition that registers
itself with the registry. When a session starts, resolve() builds a
DetectorSet: definitions gated by a disabled runtime_config flag, or
whose factory fails, are left out. Missing detectors read as "not
detected" downstream, so there are no per-call import checks.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
import logging

from errors import DependencyError, log_error

logger = logging.getLogger(__name__)


@dataclass
class DetectorDefinition:
    """Definition of an optional detector for the registry."""

    name: str
    factory: Callable[[], Any]
    description: str = ""
    requires_config: Optional[str] = None  # Only resolve if this runtime_config flag is truthy


@dataclass
class DetectorSet:
    """Detectors available to one session."""

    trauma: Optional[Any] = None
    grief: Optional[Any] = None
    political: Optional[Any] = None
    preferences: Optional[Any] = None
    skipped: List[str] = field(default_factory=list)

    def available(self) -> List[str]:
        """Names of the detectors that resolved."""
        return [name for name in ("trauma", "grief", "political", "preferences") if getattr(self, name) is not None]

    def to_dict(self) -> Dict[str, Any]:
        return {"available": self.available(), "skipped": list(self.skipped)}


class DetectorRegistry:
    """
    Central registry for optional detectors.

    Usage:
        # Register a detector
        DetectorRegistry.register(DetectorDefinition(...))

        # Resolve for a new session
        detectors = DetectorRegistry.resolve(runtime_config)
    """

    _detectors: Dict[str, DetectorDefinition] = {}
    _initialized: bool = False

    @classmethod
    def register(cls, definition: DetectorDefinition) -> None:
        """Register a detector definition."""
        cls._detectors[definition.name] = definition
        logger.debug(f"Registered detector: {definition.name}")

    @classmethod
    def get_detector(cls, name: str) -> Optional[DetectorDefinition]:
        """Get a detector definition by name."""
        return cls._detectors.get(name)

    @classmethod
    def get_all_detectors(cls) -> Dict[str, DetectorDefinition]:
        """Get all registered detectors."""
        return cls._detectors.copy()

    @classmethod
    def resolve(cls, config: Any = None) -> DetectorSet:
        """
        Build the detector set for a session.

        Args:
            config: RuntimeConfig (defaults to the global runtime_config)

        Returns:
            DetectorSet with one instance per enabled, constructible detector
        """
        register_all_detectors()
        if config is None:
            from config import runtime_config

            config = runtime_config

        detectors = DetectorSet()
        for definition in cls._detectors.values():
            if definition.requires_config and not getattr(config, definition.requires_config, False):
                detectors.skipped.append(definition.name)
                continue

            try:
                instance = definition.factory()
            except Exception as e:
                log_error(
                    logger,
                    DependencyError(f"Detector '{definition.name}' failed to load", details=str(e), module=definition.name),
                    context="detector_registry",
                )
                detectors.skipped.append(definition.name)
                continue

            if hasattr(detectors, definition.name):
                setattr(detectors, definition.name, instance)
            else:
                logger.warning(f"Detector '{definition.name}' has no slot in DetectorSet")
                detectors.skipped.append(definition.name)

        logger.debug(f"Resolved detectors: {detectors.available()} (skipped {detectors.skipped})")
        return detectors

    @classmethod
    def clear(cls) -> None:
        """Clear all registered detectors (for testing)."""
        cls._detectors.clear()
        cls._initialized = False

    @classmethod
    def reinitialize(cls) -> int:
        """Clear and re-register all detectors. Returns detector count."""
        cls.clear()
        register_all_detectors()
        return len(cls._detectors)


def _register_core_detectors() -> None:
    from tools.detection import (
        ClientPreferenceDetector,
        GriefDetector,
        PoliticalEmotionDetector,
        TraumaPatternDetector,
    )

    DetectorRegistry.register(
        DetectorDefinition(
            name="trauma",
            factory=TraumaPatternDetector,
            description="Fight/flight/freeze/fawn response scoring",
            requires_config="detect_trauma_patterns",
        )
    )
    DetectorRegistry.register(
        DetectorDefinition(
            name="grief",
            factory=GriefDetector,
            description="Grief type, loneliness themes and intensity",
            requires_config="detect_grief_themes",
        )
    )
    DetectorRegistry.register(
        DetectorDefinition(
            name="political",
            factory=PoliticalEmotionDetector,
            description="Political content with emotional stance",
            requires_config="detect_political_emotions",
        )
    )
    DetectorRegistry.register(
        DetectorDefinition(
            name="preferences",
            factory=ClientPreferenceDetector,
            description="Formality, brevity, directness and name",
            requires_config="detect_client_preferences",
        )
    )

    logger.info(f"Registered {len(DetectorRegistry._detectors)} optional detectors")


def register_all_detectors() -> None:
    """Register all optional detectors with the registry (idempotent)."""
    if DetectorRegistry._initialized:
        return

    _register_core_detectors()
    DetectorRegistry._initialized = True
