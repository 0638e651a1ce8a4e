"""Path resolver for handling differences between development and frozen executable environments.

Locates bundled assets (the overlay template) and the per-user config
directory both when running from source and from a PyInstaller build.
"""

import sys
import os
from pathlib import Path

from constants import DEFAULT_TEMPLATE_NAME


def get_base_dir() -> Path:
    """Get the base directory for the application.
    
    In frozen mode (PyInstaller executable), returns the directory containing the .exe file.
    In development mode, returns the project root directory.
    
    Returns:
        Path: Base directory path
    """
    if getattr(sys, 'frozen', False):
        return Path(os.path.dirname(sys.executable))
    else:
        # This file is in editor/src/utils/ - project root is three levels up
        return Path(__file__).resolve().parent.parent.parent.parent


def get_assets_dir() -> Path:
    """Get the assets directory holding overlay templates.
    
    Returns:
        Path: Path to assets folder next to executable or in project root
    """
    return get_base_dir() / "assets"


def get_template_path(override=None) -> Path:
    """Get path to the overlay template.
    
    Args:
        override: Optional user-configured template path
        
    Returns:
        Path: override if given, otherwise the bundled default template
    """
    if override:
        return Path(override).expanduser()
    return get_assets_dir() / DEFAULT_TEMPLATE_NAME


def get_config_dir() -> Path:
    """Get the per-user config directory (~/.profileframe)."""
    return Path.home() / ".profileframe"


def get_default_save_dir() -> Path:
    """Default directory for exported pictures (~/Pictures, else home)."""
    pictures = Path.home() / "Pictures"
    return pictures if pictures.is_dir() else Path.home()
