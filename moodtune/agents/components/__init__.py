"""
Shared components for the MoodTune agents.
"""

from .llm_utils import LLMUtils

__all__ = ["LLMUtils"]
