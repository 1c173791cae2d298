import os
from pathlib import Path

from dotenv import load_dotenv


def _load_env_from_project_root() -> None:
    """
    Look for a .env file by walking up the directory tree,
    starting from this module's location.
    """
    current = Path(__file__).resolve()

    for parent in [current] + list(current.parents):
        env_file = parent / ".env"
        if env_file.exists():
            load_dotenv(dotenv_path=env_file)
            return

    # No .env is fine: get_env() fails fast on required keys


# Load .env as soon as the module is imported
_load_env_from_project_root()


def get_env(key: str, default: str | None = None) -> str:
    value = os.getenv(key, default)
    if value is None:
        raise RuntimeError(f"Missing required environment variable: {key}")
    return value


def get_int(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"Environment variable {key} must be an integer, got {raw!r}")


def get_path(key: str, default: str | None = None) -> Path:
    return Path(get_env(key, default)).expanduser().resolve()
