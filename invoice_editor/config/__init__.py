"""Configuration package."""

from .settings import (
    get_app_name,
    get_app_version,
    get_currency_symbol,
    get_default_output_dir,
    get_project_root,
    get_profile,
    get_send_delay_seconds,
    reset_profile,
    set_profile,
)
from .profile_loader import ProfileConfig, list_available_profiles, load_profile

__all__ = [
    'get_app_name',
    'get_app_version',
    'get_currency_symbol',
    'get_default_output_dir',
    'get_project_root',
    'get_send_delay_seconds',
    'ProfileConfig',
    'list_available_profiles',
    'load_profile',
    'get_profile',
    'reset_profile',
    'set_profile',
]
