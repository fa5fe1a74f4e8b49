from .constants import APP_VERSION as __version__

__all__ = ["__version__"]
