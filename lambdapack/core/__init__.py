"""Core settings and logging configuration."""
