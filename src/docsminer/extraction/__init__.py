"""Content extraction strategies."""

from docsminer.extraction.factory import ExtractionStrategyFactory, create_strategy
from docsminer.extraction.remote import RemoteRenderStrategy

__all__ = [
    "ExtractionStrategyFactory",
    "RemoteRenderStrategy",
    "create_strategy",
]
