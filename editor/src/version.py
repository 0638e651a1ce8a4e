"""Application version module.

In development: reads the VERSION file at the project root.
In frozen builds: uses _BAKED_VERSION written by the build script before PyInstaller runs.
"""

from pathlib import Path

# This line is overwritten by the build script before PyInstaller runs.
_BAKED_VERSION = None


def get_version() -> str:
    """Get the application version string (e.g. '1.0.0')."""
    if _BAKED_VERSION is not None:
        return _BAKED_VERSION

    # VERSION file is at project root (editor/src/version.py -> ../../VERSION)
    version_file = Path(__file__).resolve().parent.parent.parent / "VERSION"
    try:
        return version_file.read_text().strip()
    except FileNotFoundError:
        return "0.0.0"
