"""Output document storage."""

from docsminer.storage.filesystem import MarkdownFileSink, derive_output_path

__all__ = [
    "MarkdownFileSink",
    "derive_output_path",
]
