"""Factory for creating extraction strategies."""

from typing import Optional, Union

from docsminer.core.interfaces import ExtractionStrategy
from docsminer.core.models import CrawlConfig, CrawlMethod


class ExtractionStrategyFactory:
    """Factory for the extraction strategy of a crawl method."""

    # Registry of strategies (lazy-loaded so playwright is only imported when used)
    _STRATEGIES: dict[CrawlMethod, type[ExtractionStrategy]] | None = None

    @classmethod
    def _load_strategies(cls) -> dict[CrawlMethod, type[ExtractionStrategy]]:
        """Lazy-load strategy classes."""
        if cls._STRATEGIES is None:
            from docsminer.extraction.browser import BrowserStrategy
            from docsminer.extraction.remote import RemoteRenderStrategy

            cls._STRATEGIES = {
                CrawlMethod.API: RemoteRenderStrategy,
                CrawlMethod.BROWSER: BrowserStrategy,
            }
        return cls._STRATEGIES

    @classmethod
    def create(
        cls,
        method: Union[CrawlMethod, str],
        config: Optional[CrawlConfig] = None,
    ) -> ExtractionStrategy:
        """Create the strategy for a method.

        Args:
            method: Crawl method or its name ("api" / "browser").
            config: Crawl configuration passed to the strategy.

        Returns:
            A new, unopened strategy.

        Raises:
            ValueError: If the method is unknown.
        """
        method = CrawlMethod(method)
        strategies = cls._load_strategies()
        return strategies[method](config=config)

    @classmethod
    def list_methods(cls) -> list[str]:
        """List all known method names."""
        return [method.value for method in cls._load_strategies()]


def create_strategy(
    method: Union[CrawlMethod, str], config: Optional[CrawlConfig] = None
) -> ExtractionStrategy:
    return ExtractionStrategyFactory.create(method, config)
