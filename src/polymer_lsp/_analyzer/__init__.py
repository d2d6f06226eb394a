"""
Analyzer components used by ``polymer_lsp.analyzer.PolymerAnalyzer``.

JavaScript is parsed with tree-sitter, HTML with the tolerant tokenizer shared
with cursor classification.
"""

from __future__ import annotations

from .html_extractor import HtmlScan, scan_html
from .js_extractor import ScriptFeatures, extract_script, parse_jsdoc

__all__ = [
    "HtmlScan",
    "ScriptFeatures",
    "extract_script",
    "parse_jsdoc",
    "scan_html",
]
