"""File-based configuration for committee aliases and the commodity vocabulary."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

from amc_receipts.utils.helpers.exceptions import ConfigurationError

DEFAULT_GENERIC_TOKENS = [
    "amc",
    "agricultural",
    "agriculture",
    "market",
    "marketing",
    "committee",
    "yard",
    "the",
    "of",
]

DEFAULT_ALIASES: Dict[str, str] = {
    "kkd": "kakinada",
    "rjy": "rajahmundry",
    "rajamahendravaram": "rajahmundry",
}

DEFAULT_COMMODITIES = [
    "Rice", "Wheat", "Jowar", "Bajra", "Maize", "Tur", "Gram", "Moong",
    "Urad", "Masur", "Cotton", "Sugarcane", "Onion", "Potato", "Tomato",
]


class ConfigService:
    """Load config snapshots from the config/ directory.

    Missing files fall back to the built-in defaults; a file that exists but
    cannot be parsed raises ConfigurationError.
    """

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        if config_dir is None:
            configured = os.getenv("AMC_CONFIG_DIR")
            config_dir = Path(configured) if configured else Path(__file__).resolve().parents[2] / "config"

        self.aliases_path = Path(config_dir) / "committee_aliases.json"
        self.commodities_path = Path(config_dir) / "commodities.json"

        self._aliases = None
        self._commodities = None

        self._logger = logging.getLogger(__name__)

    # -----------------
    # Public accessors
    # -----------------
    def get_generic_tokens(self) -> List[str]:
        """Tokens ignored when comparing committee names ("amc", "market", ...)."""
        return list(self._load_aliases()["generic_tokens"])

    def get_alias_tokens(self) -> Dict[str, str]:
        """Alias token → canonical town token."""
        return dict(self._load_aliases()["aliases"])

    def get_commodities(self) -> List[str]:
        if self._commodities is None:
            self._commodities = self._load_commodities()
        return list(self._commodities)

    def canonical_commodity(self, raw: Optional[str]) -> Optional[str]:
        """Case-insensitive lookup in the commodity vocabulary; None if unknown."""
        if not raw:
            return None
        target = raw.strip().lower()
        for commodity in self.get_commodities():
            if commodity.lower() == target:
                return commodity
        return None

    # -----------------
    # Internal loaders
    # -----------------
    def _read_json(self, path: Path):
        try:
            with path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Invalid JSON in {path}: {exc}") from exc

    def _load_aliases(self) -> Dict[str, object]:
        if self._aliases is not None:
            return self._aliases

        if not self.aliases_path.exists():
            self._logger.info("Alias config not found, using defaults", extra={"path": str(self.aliases_path)})
            self._aliases = {"generic_tokens": DEFAULT_GENERIC_TOKENS, "aliases": DEFAULT_ALIASES}
            return self._aliases

        data = self._read_json(self.aliases_path) or {}
        aliases = {
            str(alias).strip().lower(): str(canonical).strip().lower()
            for alias, canonical in (data.get("aliases") or {}).items()
        }
        generic = [str(token).strip().lower() for token in data.get("generic_tokens") or DEFAULT_GENERIC_TOKENS]
        self._aliases = {"generic_tokens": generic, "aliases": aliases}
        return self._aliases

    def _load_commodities(self) -> List[str]:
        if not self.commodities_path.exists():
            return list(DEFAULT_COMMODITIES)
        data = self._read_json(self.commodities_path)
        if isinstance(data, dict):
            data = data.get("commodities")
        if not isinstance(data, list) or not data:
            raise ConfigurationError(f"{self.commodities_path} must list at least one commodity")
        return [str(item) for item in data]


_config_service: Optional[ConfigService] = None


def get_config_service() -> ConfigService:
    """Get or create ConfigService singleton."""
    global _config_service
    if _config_service is None:
        _config_service = ConfigService()
    return _config_service
