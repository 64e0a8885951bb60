"""
IO module for interview interfaces.

Provides the text interface for conducting interviews.
"""

from contextual_interviewer.io.text_interface import TextInterface

__all__ = ["TextInterface"]
