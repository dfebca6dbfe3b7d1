"""Central configuration for Invoice Editor."""

import logging
import os
from pathlib import Path
from typing import Optional

from .profile_loader import ProfileConfig, get_default_profile, load_profile

logger = logging.getLogger(__name__)

DEFAULT_SEND_DELAY_SECONDS = 1.5
PROFILE_ENV_VAR = "INVOICE_PROFILE"

# Profile used for sample invoices and the currency symbol; loaded lazily
_active_profile: Optional[ProfileConfig] = None


def get_project_root() -> Path:
    """invoice_editor/config/settings.py -> invoice_editor/config -> invoice_editor -> root"""
    return Path(__file__).resolve().parent.parent.parent


def get_app_name() -> str:
    """Get application name."""
    return "Invoice Editor"


def get_app_version() -> str:
    """Get application version from pyproject.toml."""
    try:
        import tomli
        pyproject_path = get_project_root() / "pyproject.toml"
        with open(pyproject_path, "rb") as f:
            pyproject = tomli.load(f)
            return pyproject.get("project", {}).get("version", "1.0.0")
    except Exception:
        # Fallback version if pyproject.toml cannot be read (e.g. installed wheel)
        return "1.0.0"


def get_default_output_dir() -> Path:
    """Get default output directory for generated PDFs and spreadsheets.

    INVOICE_OUTPUT_DIR overrides the default of <project root>/out.

    Returns:
        Path object to default output directory (created if needed)
    """
    env_path = os.getenv("INVOICE_OUTPUT_DIR")
    output_dir = Path(env_path) if env_path else get_project_root() / "out"
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def get_send_delay_seconds() -> float:
    """Get the simulated send delay.

    Returns:
        INVOICE_SEND_DELAY as float seconds, default 1.5. Invalid or negative
        values fall back to the default.
    """
    env_value = os.getenv("INVOICE_SEND_DELAY")
    if env_value is None:
        return DEFAULT_SEND_DELAY_SECONDS
    try:
        delay = float(env_value)
    except ValueError:
        logger.warning(f"Invalid INVOICE_SEND_DELAY: {env_value!r}, using {DEFAULT_SEND_DELAY_SECONDS}")
        return DEFAULT_SEND_DELAY_SECONDS
    if delay < 0:
        logger.warning(f"Negative INVOICE_SEND_DELAY: {delay}, using {DEFAULT_SEND_DELAY_SECONDS}")
        return DEFAULT_SEND_DELAY_SECONDS
    return delay


def get_currency_symbol() -> str:
    """Get the currency symbol printed before amounts.

    Returns:
        INVOICE_CURRENCY_SYMBOL if set, otherwise the active profile's symbol ("$" by default)
    """
    symbol = os.getenv("INVOICE_CURRENCY_SYMBOL")
    if symbol:
        return symbol
    return get_profile().currency_symbol or "$"


def set_profile(profile_name: str = "default") -> ProfileConfig:
    """Load a profile from configs/profiles and make it the active one.

    Raises:
        FileNotFoundError: If no such profile exists
        ValueError: If the profile file is invalid
    """
    global _active_profile
    _active_profile = load_profile(profile_name)
    logger.info(f"Active profile: {_active_profile.name}")
    return _active_profile


def get_profile() -> ProfileConfig:
    """Active profile.

    Until set_profile is called this is the profile named by INVOICE_PROFILE,
    or the default profile when that is unset or cannot be loaded.
    """
    global _active_profile
    if _active_profile is None:
        name = os.getenv(PROFILE_ENV_VAR)
        if name:
            try:
                _active_profile = load_profile(name)
            except (FileNotFoundError, ValueError) as e:
                logger.warning(f"Invalid {PROFILE_ENV_VAR}={name!r}: {e}, using default profile")
        if _active_profile is None:
            _active_profile = get_default_profile()
    return _active_profile


def reset_profile() -> None:
    """Forget the active profile; the next get_profile() loads it again."""
    global _active_profile
    _active_profile = None
