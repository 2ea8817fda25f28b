"""Atlas study assistant — AI study artifacts from uploaded or pasted material."""

__version__ = "0.1.0"
