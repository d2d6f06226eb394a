"""Configuration of the editor service and language server."""

from __future__ import annotations

import logging
import os

import param

from ._analyzer import ts_parser

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class EditorServiceConfig(param.Parameterized):
    """Settings shared by the CLI, the language server and the parse cache."""

    root_dir = param.String(default=".", doc="Directory that imports are resolved against.")

    log_level = param.Selector(default="INFO", objects=LOG_LEVELS)

    parse_cache_enabled = param.Boolean(
        default=True, doc="Cache tree-sitter parse trees by content hash."
    )

    parse_cache_size = param.Integer(
        default=100, bounds=(1, None), doc="Number of parse trees kept in the cache."
    )

    trigger_characters = param.List(
        default=["<", " ", '"', "{", "["],
        item_type=str,
        doc="Characters that make the editor ask for completions.",
    )

    @classmethod
    def from_environment(cls, **overrides) -> EditorServiceConfig:
        """Build a config from ``POLYMER_LSP_*`` environment variables.

        Explicit ``overrides`` take precedence over the environment.
        """
        values: dict = {}
        if os.environ.get("POLYMER_LSP_DISABLE_CACHE", "").lower() in ("1", "true", "yes"):
            values["parse_cache_enabled"] = False
        if cache_size := os.environ.get("POLYMER_LSP_CACHE_SIZE"):
            values["parse_cache_size"] = int(cache_size)
        if log_level := os.environ.get("POLYMER_LSP_LOG_LEVEL"):
            values["log_level"] = log_level.upper()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level)

    def apply(self) -> None:
        """Push the parse cache settings to the tree-sitter parser."""
        ts_parser.configure_cache(enabled=self.parse_cache_enabled, max_size=self.parse_cache_size)
