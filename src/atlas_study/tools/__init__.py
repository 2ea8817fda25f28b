"""FastMCP sub-servers exposing the study pipeline as tools."""
