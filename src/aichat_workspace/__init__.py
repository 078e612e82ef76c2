"""Chat workspace: conversations, projects, history views and a pin board."""

__version__ = "0.1.0"
