"""Environment-driven configuration for the camera relay."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

BASE_DIR = Path(__file__).resolve().parent.parent

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_int(name: str, default: int) -> int:
    raw = _env_str(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name}={raw!r} must be an integer") from exc


def _env_float(name: str, default: float) -> float:
    raw = _env_str(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name}={raw!r} must be a number") from exc


def _env_bool(name: str, default: bool) -> bool:
    raw = _env_str(name)
    if raw is None:
        return default
    return raw.lower() in _TRUE_VALUES


def parse_targets(raw: Optional[str]) -> Tuple[str, ...]:
    """Split a comma separated target list, dropping blanks and keeping order."""
    if not raw:
        return ()
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    """Runtime configuration.

    Durations named ``*_ms`` are milliseconds, matching the environment
    variables the camera firmware deployments already use. Everything else is
    in seconds.
    """

    password: str = "admin"
    api_key: Optional[str] = None
    session_ttl_seconds: float = 3600.0
    session_sweep_threshold: int = 1000
    login_limit_window_ms: int = 900_000
    login_limit_max: int = 5
    upload_limit_window_ms: int = 1000
    upload_limit_max: int = 1
    alert_targets: Tuple[str, ...] = ("person",)
    alert_cooldown_ms: int = 60_000
    gallery_capacity: int = 10
    rotate_degrees: int = 0
    max_upload_bytes: int = 5_000_000
    ai_enabled: bool = True
    classifier_model: str = "gpt-4o-mini"
    classifier_timeout_seconds: float = 15.0
    classifier_max_labels: int = 10
    telegram_bot_token: Optional[str] = None
    telegram_chat_id: Optional[str] = None
    notifier_timeout_seconds: float = 20.0
    broadcast_send_timeout_seconds: float = 5.0
    cleanup_interval_seconds: float = 300.0
    trust_proxy: bool = False
    cookie_secure: bool = False
    public_dir: Path = field(default_factory=lambda: BASE_DIR / "public")
    log_level: str = "INFO"

    @property
    def login_window_seconds(self) -> float:
        return self.login_limit_window_ms / 1000.0

    @property
    def upload_window_seconds(self) -> float:
        return self.upload_limit_window_ms / 1000.0

    @property
    def alert_cooldown_seconds(self) -> float:
        return self.alert_cooldown_ms / 1000.0

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment.

        Raises:
            RuntimeError: If a numeric variable cannot be parsed.
        """
        targets = _env_str("ALERT_TARGETS")
        public_dir = _env_str("PUBLIC_DIR")
        return cls(
            password=_env_str("PASSWORD", "admin"),
            api_key=_env_str("API_KEY"),
            session_ttl_seconds=_env_float("SESSION_TTL_SECONDS", 3600.0),
            session_sweep_threshold=_env_int("SESSION_SWEEP_THRESHOLD", 1000),
            login_limit_window_ms=_env_int("LOGIN_LIMIT_WINDOW_MS", 900_000),
            login_limit_max=_env_int("LOGIN_LIMIT_MAX", 5),
            upload_limit_window_ms=_env_int("UPLOAD_LIMIT_WINDOW_MS", 1000),
            upload_limit_max=_env_int("UPLOAD_LIMIT_MAX", 1),
            alert_targets=parse_targets(targets) if targets is not None else ("person",),
            alert_cooldown_ms=_env_int("ALERT_COOLDOWN_MS", 60_000),
            gallery_capacity=_env_int("GALLERY_CAPACITY", 10),
            rotate_degrees=_env_int("ROTATE_DEGREES", 0),
            max_upload_bytes=_env_int("MAX_UPLOAD_BYTES", 5_000_000),
            ai_enabled=_env_bool("AI_ENABLED", True),
            classifier_model=_env_str("CLASSIFIER_MODEL", "gpt-4o-mini"),
            classifier_timeout_seconds=_env_float("CLASSIFIER_TIMEOUT_SECONDS", 15.0),
            classifier_max_labels=_env_int("CLASSIFIER_MAX_LABELS", 10),
            telegram_bot_token=_env_str("TELEGRAM_BOT_TOKEN"),
            telegram_chat_id=_env_str("TELEGRAM_CHAT_ID"),
            notifier_timeout_seconds=_env_float("NOTIFIER_TIMEOUT_SECONDS", 20.0),
            broadcast_send_timeout_seconds=_env_float("BROADCAST_SEND_TIMEOUT_SECONDS", 5.0),
            cleanup_interval_seconds=_env_float("CLEANUP_INTERVAL_SECONDS", 300.0),
            trust_proxy=_env_bool("TRUST_PROXY", False),
            cookie_secure=_env_bool("COOKIE_SECURE", False),
            public_dir=Path(public_dir).expanduser() if public_dir else BASE_DIR / "public",
            log_level=_env_str("LOG_LEVEL", "INFO").upper(),
        )
