"""VocalCheck: AI-assisted voice sample analysis with local history."""

__version__ = "0.1.0"
