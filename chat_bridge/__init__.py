"""
Chat Bridge

OpenAI-compatible chat completions proxy for a single upstream chat service.
"""

__version__ = "0.1.0"
