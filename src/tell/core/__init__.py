"""Core modules: config storage, model client and terminal rendering."""

from .config_store import Config
from .errors import ConfigDirectoryError, ConfigParseError, RequestError, TellError, UsageError
from .llm_client import Batch, Endpoint, Fragment, OllamaLanguageModel, Session
from .renderer import StreamRenderer

__all__ = [
    "Config",
    "ConfigDirectoryError",
    "ConfigParseError",
    "RequestError",
    "TellError",
    "UsageError",
    "Batch",
    "Endpoint",
    "Fragment",
    "OllamaLanguageModel",
    "Session",
    "StreamRenderer",
]
