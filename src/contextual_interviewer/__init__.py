"""
Contextual interviewer.

Drives multi-turn, profile-aware technical interviews against a local
text-generation backend.
"""

__version__ = "0.1.0"
