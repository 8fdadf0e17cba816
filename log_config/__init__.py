"""Logging configuration package."""
