"""Watch a source repository for new article links, summarize and notify."""

__version__ = "0.1.0"
