"""LLM package for assessment generation, classification, and chat."""

from venturescope.llm.client import LLMClient, LLMMessage, LLMResult, get_llm_client

__all__ = ["LLMClient", "LLMMessage", "LLMResult", "get_llm_client"]
