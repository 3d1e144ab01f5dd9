"""Exception hierarchy for the aggregation and layout engine.

Most failures in the engine degrade instead of raising: provider errors are
isolated by the aggregator, malformed records get defaults, dangling links are
dropped. These types mark the places where something is actually raised.
"""

from __future__ import annotations


class CosmosError(Exception):
    """Base exception for all engine errors."""


class ProviderError(CosmosError):
    """Base for provider search failures."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"[{source}] {message}")
        self.source = source


class ProviderTimeoutError(ProviderError):
    """Provider did not answer within the aggregation timeout."""


class ProviderResponseError(ProviderError):
    """Provider answered with a payload that cannot be turned into records."""


class GraphImportError(CosmosError):
    """Imported graph JSON is neither a {nodes, links} object nor a record array."""
