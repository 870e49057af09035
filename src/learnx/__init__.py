"""LearnX: AI-powered learning tools."""

__version__ = "1.0.0"
