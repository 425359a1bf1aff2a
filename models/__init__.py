"""Pydantic models for Mini Mentor competency analyses."""
