"""Logging setup and lightweight JSON event logging."""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

LOG_DIR = Path(os.getenv("AMC_LOG_DIR", Path(__file__).resolve().parents[2] / "artifacts" / "logs"))
LOG_FILE = LOG_DIR / "amc.log"
SENSITIVE_KEYS = {"password", "password_hash", "token", "access_token", "api_key"}

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_logging_configured = False


def configure_logging(level: str | None = None) -> None:
	"""Configure the root logger once.

	Args:
		level: Level name. If None, reads AMC_LOG_LEVEL (default INFO).
	"""
	global _logging_configured
	if _logging_configured:
		return

	level_name = (level or os.getenv("AMC_LOG_LEVEL", "INFO")).upper()
	resolved = logging.getLevelName(level_name)
	if not isinstance(resolved, int):
		resolved = logging.INFO

	handler = logging.StreamHandler(sys.stderr)
	handler.setFormatter(logging.Formatter(LOG_FORMAT))

	root = logging.getLogger()
	root.setLevel(resolved)
	root.addHandler(handler)
	_logging_configured = True


def log_event(event: Dict[str, Any]) -> None:
	"""Persist a structured event without leaking credentials."""

	payload = {
		"timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
	}
	for key, value in event.items():
		if key is None:
			continue
		normalized = str(key)
		if normalized.lower() in SENSITIVE_KEYS:
			continue
		payload[normalized] = value

	try:
		LOG_DIR.mkdir(parents=True, exist_ok=True)
		with LOG_FILE.open("a", encoding="utf-8") as handle:
			json.dump(payload, handle, ensure_ascii=False, default=str)
			handle.write("\n")
	except Exception as exc:  # pragma: no cover - logging must never break a request
		logger.debug("Failed to write event log: %s", exc, exc_info=True)


def log_scope_event(event: Dict[str, Any]) -> None:
	"""Record an access-scope resolution."""

	payload = {"event_type": "scope"}
	payload.update(event)
	log_event(payload)


def log_submission_event(event: Dict[str, Any]) -> None:
	"""Record a receipt submission outcome."""

	payload = {"event_type": "submission"}
	payload.update(event)
	log_event(payload)
