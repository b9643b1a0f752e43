"""ImageBinds - save clipboard images on letter keys and restore them with a hotkey."""

from .utils.constants import APP_NAME, APP_VERSION

__version__ = APP_VERSION

__all__ = ["APP_NAME", "APP_VERSION", "__version__"]
