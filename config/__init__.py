import os


def get_settings_module() -> str:
    # APP_ENV picks the settings module; anything unknown falls back to development.
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"


def latency_range(raw: str) -> tuple:
    """Parse SIMULATED_LATENCY_MS ('50,200' or '100') into a (min, max) pair of milliseconds."""
    parts = [p.strip() for p in (raw or "").split(",") if p.strip()]
    if not parts:
        return (0, 0)
    low = int(parts[0])
    high = int(parts[1]) if len(parts) > 1 else low
    return (low, max(low, high))


def optional_int(raw):
    return int(raw) if raw not in (None, "") else None
