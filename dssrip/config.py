import os
from dataclasses import dataclass, replace

from .errors import InvalidInput

_TRUE = {'1', 'true', 'yes'}


def _env_int(name: str, default: int, minimum: int) -> int:
    raw = os.getenv(name, '').strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise InvalidInput(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise InvalidInput(f"{name} must be >= {minimum}, got {value}")
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, '').strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise InvalidInput(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise InvalidInput(f"{name} must be > 0, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    workers: int = 16
    probe_workers: int = 8
    timeout: float = 30.0
    retries: int = 3
    user_agent: str = 'Mozilla/5.0'
    skip_tls_verify: bool = False

    @classmethod
    def from_env(cls, **overrides) -> 'Settings':
        """Read DSSRIP_* variables; keyword overrides that are not None win."""
        settings = cls(
            workers=_env_int('DSSRIP_WORKERS', cls.workers, 1),
            probe_workers=_env_int('DSSRIP_PROBE_WORKERS', cls.probe_workers, 1),
            timeout=_env_float('DSSRIP_TIMEOUT', cls.timeout),
            retries=_env_int('DSSRIP_RETRIES', cls.retries, 0),
            user_agent=os.getenv('DSSRIP_USER_AGENT', '').strip() or cls.user_agent,
            skip_tls_verify=os.getenv('DSSRIP_SKIP_TLS_VERIFY', '0').strip().lower() in _TRUE,
        )
        overrides = {k: v for k, v in overrides.items() if v is not None}
        if overrides.get('workers', 1) < 1:
            raise InvalidInput(f"workers must be >= 1, got {overrides['workers']}")
        return replace(settings, **overrides)
