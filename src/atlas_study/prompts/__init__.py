"""Prompt templates and message builders for each study feature."""
