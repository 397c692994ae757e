"""Tests for marketplace configuration loading."""

import json
from pathlib import Path

import pytest

from jobmarket.config import (
    DEFAULT_ADMIN,
    ENV_ADMIN,
    ENV_MIN_BID_AMOUNT,
    MarketConfig,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(ENV_ADMIN, raising=False)
    monkeypatch.delenv(ENV_MIN_BID_AMOUNT, raising=False)


def _write_config(config_dir: Path, data: dict) -> None:
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "marketplace.json").write_text(json.dumps(data), encoding="utf-8")


class TestMarketConfig:
    def test_defaults(self) -> None:
        config = MarketConfig()
        assert config.admin == DEFAULT_ADMIN
        assert config.min_bid_amount == 100
        assert config.max_title_length == 100
        assert config.max_description_length == 500

    def test_validation(self) -> None:
        with pytest.raises(ValueError, match="min_bid_amount"):
            MarketConfig(min_bid_amount=0)
        with pytest.raises(ValueError, match="admin"):
            MarketConfig(admin="  ")

    def test_frozen(self) -> None:
        config = MarketConfig()
        with pytest.raises(AttributeError):
            config.min_bid_amount = 5  # type: ignore[misc]


class TestFromConfigDir:
    def test_reads_file(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"admin": "admin-x", "min_bid_amount": 250})
        config = MarketConfig.from_config_dir(tmp_path)
        assert config.admin == "admin-x"
        assert config.min_bid_amount == 250
        assert config.max_title_length == 100

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert MarketConfig.from_config_dir(tmp_path) == MarketConfig()

    def test_invalid_file_value(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"max_title_length": -1})
        with pytest.raises(ValueError, match="max_title_length"):
            MarketConfig.from_config_dir(tmp_path)

    def test_repository_config_loads(self) -> None:
        config_dir = Path(__file__).resolve().parents[1] / "config"
        config = MarketConfig.from_config_dir(config_dir)
        assert config.min_bid_amount == 100


class TestFromEnv:
    def test_env_overrides_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        _write_config(tmp_path, {"admin": "file-admin", "min_bid_amount": 250})
        monkeypatch.setenv(ENV_ADMIN, "env-admin")
        monkeypatch.setenv(ENV_MIN_BID_AMOUNT, "300")
        config = MarketConfig.from_env(tmp_path, env_file=tmp_path / "absent.env")
        assert config.admin == "env-admin"
        assert config.min_bid_amount == 300

    def test_dotenv_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        # load_dotenv writes into os.environ; register the key so teardown removes it
        monkeypatch.setenv(ENV_ADMIN, "placeholder")
        monkeypatch.delenv(ENV_ADMIN)
        env_file = tmp_path / ".env"
        env_file.write_text(f"{ENV_ADMIN}=dotenv-admin\n", encoding="utf-8")
        config = MarketConfig.from_env(env_file=env_file)
        assert config.admin == "dotenv-admin"

    def test_dotenv_beside_config_dir(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv(ENV_MIN_BID_AMOUNT, "placeholder")
        monkeypatch.delenv(ENV_MIN_BID_AMOUNT)
        config_dir = tmp_path / "config"
        _write_config(config_dir, {"admin": "file-admin"})
        (tmp_path / ".env").write_text(f"{ENV_MIN_BID_AMOUNT}=250\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path / "config")

        config = MarketConfig.from_env(config_dir)
        assert config.min_bid_amount == 250
        assert config.admin == "file-admin"

    def test_file_only(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"admin": "file-admin"})
        config = MarketConfig.from_env(tmp_path, env_file=tmp_path / "absent.env")
        assert config.admin == "file-admin"

    def test_bad_integer(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(ENV_MIN_BID_AMOUNT, "lots")
        with pytest.raises(ValueError, match="must be an integer"):
            MarketConfig.from_env(tmp_path, env_file=tmp_path / "absent.env")
