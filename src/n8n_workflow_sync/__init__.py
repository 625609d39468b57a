"""Pull, edit and push n8n workflows using git."""

__version__ = "0.3.0"
