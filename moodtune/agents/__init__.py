"""
Conversation agents for MoodTune.

- mood: mood and preference detection
- response: reply composition
- components: shared LLM helpers
"""
