"""LLM adapters."""

from article_monitor.adapters.llm.claude_client import ClaudeClient

__all__ = ["ClaudeClient"]
