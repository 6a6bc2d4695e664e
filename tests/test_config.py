"""
Test suite for settings loading.
"""
import yaml

from dealcalc.config import Settings, load_settings
from dealcalc.models import RoyaltyTier


class TestLoadSettings:
    """Test YAML-backed settings."""

    def test_missing_file_gives_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "missing.yaml")
        assert settings == Settings()
        assert settings.fx.base_currency == "EUR"

    def test_default_royalty_tiers(self):
        tiers = Settings().default_royalty_tiers()
        assert [t.rate for t in tiers] == [0.15, 0.075, 0.15, 0.10, 0.04]
        assert all(isinstance(t, RoyaltyTier) for t in tiers)

    def test_overrides_from_yaml(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.safe_dump({
            "deal_defaults": {
                "royalty_tiers": [{"name": "Only", "rate": 0.2}],
                "overhead_rate": 0.12,
            },
            "fx": {"timeout_seconds": 3.0},
        }))

        settings = load_settings(path)
        assert settings.default_royalty_tiers() == (RoyaltyTier("Only", 0.2),)
        assert settings.deal_defaults.overhead_rate == 0.12
        assert settings.deal_defaults.sla_share_percent == 0.5
        assert settings.fx.timeout_seconds == 3.0
        assert settings.storage.deals_file == "deals.json"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("")
        assert load_settings(path) == Settings()

    def test_data_dir_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DEALCALC_DATA_DIR", str(tmp_path))
        storage = Settings().storage
        assert storage.deals_path == tmp_path / "deals.json"
        assert storage.forecasts_path == tmp_path / "forecasts.json"
