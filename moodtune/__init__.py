"""
MoodTune - Mood-Based Music Recommendation Agent

A conversational music recommender: the agent chats with the user, detects
their mood with Gemini (or a keyword fallback), and recommends songs found
on YouTube.
"""

__version__ = "0.1.0"
__author__ = "MoodTune Team"
