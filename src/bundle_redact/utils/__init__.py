"""Utility exports."""
from .glob import compile_glob, match_path
from .text import find_spans, split_line, to_bytes, to_text

__all__ = [
    "compile_glob",
    "find_spans",
    "match_path",
    "split_line",
    "to_bytes",
    "to_text",
]
