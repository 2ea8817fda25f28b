"""Pydantic models for pipeline inputs, feature results, and analytics."""
