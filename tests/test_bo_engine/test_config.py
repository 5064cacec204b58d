"""
Tests for engine settings.
"""

from bo_engine.config import EngineSettings, get_settings
from bo_engine.core.runner import RunConfig
from bo_engine.plugins.builtin import (
    BraninOracle,
    ExpectedImprovement,
    MultiStartLocalSearch,
    RBFKernel,
)


class TestEngineSettings:
    """Tests for EngineSettings."""

    def test_defaults(self):
        """Test default numerics."""
        settings = EngineSettings()

        assert settings.jitter == 1e-6
        assert settings.max_jitter_tries == 5
        assert settings.log_level == "INFO"

    def test_environment_override(self, monkeypatch):
        """Test BO_ENGINE_ variables override defaults."""
        monkeypatch.setenv("BO_ENGINE_JITTER", "1e-4")
        monkeypatch.setenv("BO_ENGINE_LOG_LEVEL", "DEBUG")

        settings = get_settings()

        assert settings.jitter == 1e-4
        assert settings.log_level == "DEBUG"

    def test_run_config_picks_up_settings(self, monkeypatch, branin_domain):
        """Test RunConfig numeric defaults come from the environment."""
        monkeypatch.setenv("BO_ENGINE_MAX_JITTER_TRIES", "2")

        config = RunConfig(
            domain=branin_domain,
            kernel=RBFKernel(),
            acquisition=ExpectedImprovement(),
            optimizer=MultiStartLocalSearch(),
            oracle=BraninOracle(),
        )

        assert config.max_jitter_tries == 2
        assert config.jitter == 1e-6
