"""
Tests for the optional DetectorRegistry.
"""

from tools.registry import DetectorDefinition, DetectorRegistry, DetectorSet


class _Sentinel:
    pass


def _boom():
    raise ImportError("optional module missing")


class TestDetectorRegistry:
    """Test detector registration and per-session resolution."""

    def teardown_method(self):
        DetectorRegistry.reinitialize()

    def test_core_detectors_registered(self):
        count = DetectorRegistry.reinitialize()
        assert count == 4
        assert set(DetectorRegistry.get_all_detectors()) == {"trauma", "grief", "political", "preferences"}

    def test_resolve_all(self, config):
        detectors = DetectorRegistry.resolve(config)
        assert detectors.available() == ["trauma", "grief", "political", "preferences"]
        assert detectors.skipped == []

    def test_flag_disables_detector(self, config):
        config.detect_political_emotions = False
        detectors = DetectorRegistry.resolve(config)

        assert detectors.political is None
        assert detectors.skipped == ["political"]

    def test_failing_factory_skipped(self, config):
        DetectorRegistry.resolve(config)
        DetectorRegistry.register(DetectorDefinition(name="grief", factory=_boom))

        detectors = DetectorRegistry.resolve(config)

        assert detectors.grief is None
        assert "grief" in detectors.skipped
        assert detectors.trauma is not None

    def test_unknown_slot_skipped(self, config):
        DetectorRegistry.resolve(config)
        DetectorRegistry.register(DetectorDefinition(name="astrology", factory=_Sentinel))

        detectors = DetectorRegistry.resolve(config)

        assert "astrology" in detectors.skipped
        assert "astrology" not in detectors.available()

    def test_override_factory(self, config):
        DetectorRegistry.resolve(config)
        DetectorRegistry.register(DetectorDefinition(name="trauma", factory=_Sentinel))
        assert isinstance(DetectorRegistry.resolve(config).trauma, _Sentinel)

    def test_each_resolve_builds_new_instances(self, config):
        a = DetectorRegistry.resolve(config)
        b = DetectorRegistry.resolve(config)
        assert a.grief is not b.grief

    def test_empty_set(self):
        detectors = DetectorSet()
        assert detectors.available() == []
        assert detectors.to_dict() == {"available": [], "skipped": []}
