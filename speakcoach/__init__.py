"""
speakcoach — AI speaking tutor backend.
Gemini-backed feedback, practice content and speech annotation for the desktop UI.
"""

__version__ = "0.1.0"
