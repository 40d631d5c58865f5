"""
AIOS Core: tool resolution for the AIOS agent framework

Locates declarative tool definitions, classifies their schema version,
caches resolved tools and validates commands against embedded validators.
"""

try:
    from importlib.metadata import version
    __version__ = version("aios-core")
except Exception:
    __version__ = "0.0.0"  # Fallback for development

__all__ = ["__version__"]
