"""Profile loader for invoice defaults (sender, recipient, tax, terms)."""

import yaml
from pathlib import Path
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field


@dataclass
class ProfileConfig:
    """Configuration profile with the defaults a new invoice starts from.

    items and notes use None for "keep the built-in sample".
    """
    name: str
    description: str = ""
    sender: Dict[str, str] = field(default_factory=dict)
    recipient: Dict[str, str] = field(default_factory=dict)
    tax_rate: float = 8.0
    due_days: int = 14
    notes: Optional[str] = None
    items: Optional[List[Dict[str, Any]]] = None
    currency_symbol: str = "$"
    invoice_prefix: str = "INV-"

    def __post_init__(self):
        """Validate numeric defaults."""
        if self.due_days < 0:
            raise ValueError(f"due_days must be >= 0, got {self.due_days}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProfileConfig':
        """Create ProfileConfig from dictionary."""
        return cls(
            name=data.get('name', 'default'),
            description=data.get('description', ''),
            sender=data.get('sender') or {},
            recipient=data.get('recipient') or {},
            tax_rate=float(data.get('tax_rate', 8.0)),
            due_days=int(data.get('due_days', 14)),
            notes=data.get('notes'),
            items=data.get('items'),
            currency_symbol=str(data.get('currency_symbol', '$')),
            invoice_prefix=str(data.get('invoice_prefix', 'INV-')),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'name': self.name,
            'description': self.description,
            'sender': self.sender,
            'recipient': self.recipient,
            'tax_rate': self.tax_rate,
            'due_days': self.due_days,
            'notes': self.notes,
            'items': self.items,
            'currency_symbol': self.currency_symbol,
            'invoice_prefix': self.invoice_prefix,
        }


def get_profiles_dir() -> Path:
    """Get directory containing profile YAML files.

    Returns:
        Path to profiles directory
    """
    # invoice_editor/config/profile_loader.py -> invoice_editor/config -> invoice_editor -> root
    current_file = Path(__file__).resolve()
    project_root = current_file.parent.parent.parent
    return project_root / "configs" / "profiles"


def load_profile(profile_name: str = "default") -> ProfileConfig:
    """Load a configuration profile.

    Args:
        profile_name: Name of profile to load (without .yaml extension)

    Returns:
        ProfileConfig object

    Raises:
        FileNotFoundError: If profile file doesn't exist
        ValueError: If profile file is invalid
    """
    profile_path = get_profiles_dir() / f"{profile_name}.yaml"

    if not profile_path.exists():
        raise FileNotFoundError(f"Profile not found: {profile_name} (expected at {profile_path})")

    try:
        with open(profile_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in profile {profile_name}: {e}") from e

    if not data:
        raise ValueError(f"Profile file is empty: {profile_path}")
    if not isinstance(data, dict):
        raise ValueError(f"Profile {profile_name} must be a mapping, got {type(data).__name__}")

    try:
        return ProfileConfig.from_dict(data)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Error loading profile {profile_name}: {e}") from e


def list_available_profiles() -> List[str]:
    """List all available profile names.

    Returns:
        List of profile names (without .yaml extension)
    """
    profiles_dir = get_profiles_dir()

    if not profiles_dir.exists():
        return ["default"]

    profiles = [profile_file.stem for profile_file in profiles_dir.glob("*.yaml")]
    return sorted(profiles) if profiles else ["default"]


def get_default_profile() -> ProfileConfig:
    """Get default profile (always available).

    Returns:
        Default ProfileConfig
    """
    try:
        return load_profile("default")
    except FileNotFoundError:
        # Fallback: built-in sample values
        return ProfileConfig(name="default", description="Built-in defaults")
