"""Literate source to Markdown conversion toolkit."""

__version__ = "0.1.0"

from .config import AppConfig, LanguageConfig, load_config
from .core import ConversionError, LiterateConverter, UnsupportedExtension
from .models import ConversionJob, ConversionResult, WalkResult
from .walker import TreeWalker

__all__ = [
    "AppConfig",
    "LanguageConfig",
    "load_config",
    "ConversionError",
    "ConversionJob",
    "ConversionResult",
    "LiterateConverter",
    "TreeWalker",
    "UnsupportedExtension",
    "WalkResult",
]
