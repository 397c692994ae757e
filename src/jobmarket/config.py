"""Marketplace configuration — limits and the administrator identity.

Values come from config/marketplace.json. A .env file (or the process
environment) may override the administrator and the minimum bid so a
deployment can be re-pointed without editing the checked-in config:

    JOBMARKET_ADMIN=ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM
    JOBMARKET_MIN_BID_AMOUNT=100

Invalid configuration fails at load time with ValueError.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from dotenv import find_dotenv, load_dotenv


CONFIG_FILENAME = "marketplace.json"
ENV_ADMIN = "JOBMARKET_ADMIN"
ENV_MIN_BID_AMOUNT = "JOBMARKET_MIN_BID_AMOUNT"

DEFAULT_ADMIN = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"


@dataclass(frozen=True)
class MarketConfig:
    """Immutable marketplace limits."""
    admin: str = DEFAULT_ADMIN
    min_bid_amount: int = 100
    max_title_length: int = 100
    max_description_length: int = 500

    def __post_init__(self) -> None:
        errors = self.validate()
        if errors:
            raise ValueError("Invalid marketplace config: " + "; ".join(errors))

    def validate(self) -> list[str]:
        """Return configuration errors (empty = OK)."""
        errors: list[str] = []
        if not self.admin or not self.admin.strip():
            errors.append("admin must be a non-empty identity")
        if self.min_bid_amount <= 0:
            errors.append(f"min_bid_amount must be > 0, got {self.min_bid_amount}")
        if self.max_title_length <= 0:
            errors.append(f"max_title_length must be > 0, got {self.max_title_length}")
        if self.max_description_length <= 0:
            errors.append(
                f"max_description_length must be > 0, got {self.max_description_length}"
            )
        return errors

    @staticmethod
    def from_dict(data: dict[str, Any]) -> MarketConfig:
        defaults = MarketConfig()
        return MarketConfig(
            admin=data.get("admin", defaults.admin),
            min_bid_amount=int(data.get("min_bid_amount", defaults.min_bid_amount)),
            max_title_length=int(data.get("max_title_length", defaults.max_title_length)),
            max_description_length=int(
                data.get("max_description_length", defaults.max_description_length)
            ),
        )

    @staticmethod
    def from_config_dir(config_dir: Path) -> MarketConfig:
        """Load marketplace.json from a config directory.

        A missing file yields the defaults.
        """
        path = config_dir / CONFIG_FILENAME
        if not path.exists():
            return MarketConfig()
        with path.open("r", encoding="utf-8") as handle:
            return MarketConfig.from_dict(json.load(handle))

    @staticmethod
    def from_env(
        config_dir: Optional[Path] = None,
        env_file: Optional[Path] = None,
    ) -> MarketConfig:
        """Load file config, then apply .env / environment overrides.

        The .env file defaults to the project root next to config_dir,
        or is searched for from the working directory when no config
        directory is given.
        """
        if env_file is None:
            env_file = (
                config_dir.parent / ".env"
                if config_dir is not None
                else find_dotenv(usecwd=True)
            )
        if env_file:
            load_dotenv(env_file)

        base = (
            MarketConfig.from_config_dir(config_dir)
            if config_dir is not None
            else MarketConfig()
        )
        data = {
            "admin": base.admin,
            "min_bid_amount": base.min_bid_amount,
            "max_title_length": base.max_title_length,
            "max_description_length": base.max_description_length,
        }
        admin = os.getenv(ENV_ADMIN)
        if admin:
            data["admin"] = admin
        min_bid = os.getenv(ENV_MIN_BID_AMOUNT)
        if min_bid:
            try:
                data["min_bid_amount"] = int(min_bid)
            except ValueError:
                raise ValueError(
                    f"{ENV_MIN_BID_AMOUNT} must be an integer, got {min_bid!r}"
                ) from None
        return MarketConfig.from_dict(data)
