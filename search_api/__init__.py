"""Multi-engine web search aggregator served over HTTP."""

__version__ = "0.1.0"
