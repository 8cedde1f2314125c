"""Configuration management.

``Settings`` is a **metaclass-based singleton**: the first call to
``Settings.load()`` creates the instance; every later call returns
the same object.  Use ``update()`` to change values at runtime, or
``reload()`` to re-read everything from disk.

All user-editable configuration lives under ``.metadata/``:

* ``email.yaml``    – contact email (OpenAlex polite pool)
* ``backend.yaml``  – analysis backend location, search provider, retry policy

On first run, missing files are copied from ``.metadata.example/``.
The analysis backend URL and search provider can also be injected at
process start through ``THESISBOT_ANALYSIS_URL`` / ``THESISBOT_SEARCH_PROVIDER``.
"""

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

SEARCH_PROVIDERS = ("semantic_scholar", "openalex")

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)

ENV_ANALYSIS_URL = "THESISBOT_ANALYSIS_URL"
ENV_SEARCH_PROVIDER = "THESISBOT_SEARCH_PROVIDER"


# ---------------------------------------------------------------------------
# Singleton metaclass
# ---------------------------------------------------------------------------

class _SettingsMeta(type):
    """Metaclass that enforces a process-wide singleton for *Settings*.

    * First ``Settings(...)`` creates and caches the instance.
    * Later ``Settings(...)`` calls return the cached instance (args ignored).
    """

    _instances: dict[type, Any] = {}

    def __call__(cls, *args: Any, **kwargs: Any) -> Any:
        if cls not in cls._instances:
            cls._instances[cls] = super().__call__(*args, **kwargs)
        return cls._instances[cls]


# ---------------------------------------------------------------------------
# Settings dataclass (singleton)
# ---------------------------------------------------------------------------

@dataclass
class Settings(metaclass=_SettingsMeta):
    """Application settings: a singleton with runtime-mutable values.

    Usage::

        settings = Settings.load()          # first call → create
        settings = Settings.load()          # later → same object
        settings.update(retry_delay=0.0)    # runtime change
        settings = Settings.reload()        # re-read from disk
    """

    contact_email: Optional[str] = None
    db_path: Path = Path("thesisbot.db")
    metadata_dir: Path = Path(".metadata")
    export_dir: Path = Path("exports")

    # External document-analysis backend
    analysis_url: str = "http://127.0.0.1:5000"
    request_timeout: float = 60.0
    retry_attempts: int = 3
    retry_delay: float = 1.0

    # Literature search
    search_provider: str = "semantic_scholar"
    semantic_scholar_url: str = "https://api.semanticscholar.org"
    openalex_url: str = "https://api.openalex.org"
    search_limit: int = 3

    # PDF proxy
    pdf_user_agent: str = DEFAULT_USER_AGENT

    # ── Runtime helpers ───────────────────────────────────────────────

    def update(self, **kwargs: Any) -> None:
        """Mutate settings fields at runtime.

        >>> Settings.load().update(analysis_url="http://backend:5000")
        """
        for key, value in kwargs.items():
            if not hasattr(self, key):
                raise AttributeError(f"Settings has no field '{key}'")
            setattr(self, key, value)

    # ── Factory / lifecycle ───────────────────────────────────────────

    @classmethod
    def load(cls, base_dir: Optional[Path] = None) -> "Settings":
        """Load or return the singleton Settings instance.

        On first call the singleton is created; subsequent calls return
        the cached instance.  Pass *base_dir* to override the project
        root (defaults to the repository root one level above ``thesisbot/``).
        """
        if cls in _SettingsMeta._instances:
            return _SettingsMeta._instances[cls]  # type: ignore[return-value]

        if base_dir is None:
            base_dir = Path(__file__).resolve().parent.parent

        metadata_dir = base_dir / ".metadata"
        cls._ensure_default_files(base_dir, metadata_dir)

        contact_email = _load_email(metadata_dir / "email.yaml")
        backend = _load_backend(metadata_dir / "backend.yaml")
        _apply_env_overrides(backend)

        return cls(
            contact_email=contact_email,
            db_path=base_dir / "thesisbot.db",
            metadata_dir=metadata_dir,
            export_dir=base_dir / "exports",
            **backend,
        )

    @classmethod
    def reload(cls, base_dir: Optional[Path] = None) -> "Settings":
        """Discard the current singleton and re-load from disk."""
        cls.reset()
        return cls.load(base_dir)

    @classmethod
    def reset(cls) -> None:
        """Discard the singleton so the next ``load()`` re-creates it."""
        _SettingsMeta._instances.pop(cls, None)

    # ── Private ───────────────────────────────────────────────────────

    @staticmethod
    def _ensure_default_files(base_dir: Path, metadata_dir: Path) -> None:
        """Copy ``.metadata.example/`` templates when real files are missing."""
        metadata_dir.mkdir(parents=True, exist_ok=True)

        example_dir = base_dir / ".metadata.example"
        if not example_dir.exists():
            return

        for example_file in example_dir.iterdir():
            if example_file.is_file():
                target = metadata_dir / example_file.name
                if not target.exists():
                    shutil.copy2(example_file, target)
                    logger.info("Created .metadata/%s from template", example_file.name)


# ---------------------------------------------------------------------------
# YAML loaders
# ---------------------------------------------------------------------------

def _read_yaml(path: Path) -> Optional[dict[str, Any]]:
    """Return the mapping stored in *path*, or None if absent or malformed."""
    if not path.exists():
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Ignoring unreadable %s: %s", path.name, e)
        return None
    return data if isinstance(data, dict) else None


def _load_email(path: Path) -> Optional[str]:
    """Load contact email from ``email.yaml``."""
    data = _read_yaml(path)
    if not data:
        return None
    email = data.get("contact_email")
    return str(email) if email else None


def _load_backend(path: Path) -> dict[str, Any]:
    """Load backend / search / retry options from ``backend.yaml``.

    Unknown keys are ignored and values of the wrong type fall back to
    the dataclass defaults.

    Returns:
        Dict of Settings keyword arguments (only keys that were valid)
    """
    data = _read_yaml(path) or {}
    casts: dict[str, Any] = {
        "analysis_url": str,
        "request_timeout": float,
        "retry_attempts": int,
        "retry_delay": float,
        "search_provider": str,
        "semantic_scholar_url": str,
        "openalex_url": str,
        "search_limit": int,
        "pdf_user_agent": str,
    }
    options: dict[str, Any] = {}
    for key, cast in casts.items():
        value = data.get(key)
        if value in (None, ""):
            continue
        try:
            options[key] = cast(value)
        except (TypeError, ValueError):
            logger.warning("backend.yaml: invalid value for %s: %r", key, value)

    if "analysis_url" in options:
        options["analysis_url"] = options["analysis_url"].rstrip("/")
    if options.get("search_provider") not in (None, *SEARCH_PROVIDERS):
        logger.warning("backend.yaml: unknown search_provider %r", options["search_provider"])
        options.pop("search_provider")
    if options.get("retry_attempts", 1) < 1:
        options.pop("retry_attempts")
    return options


def _apply_env_overrides(options: dict[str, Any]) -> None:
    """Apply deploy-time environment overrides in place."""
    url = os.environ.get(ENV_ANALYSIS_URL, "").strip()
    if url:
        options["analysis_url"] = url.rstrip("/")
    provider = os.environ.get(ENV_SEARCH_PROVIDER, "").strip()
    if provider in SEARCH_PROVIDERS:
        options["search_provider"] = provider
