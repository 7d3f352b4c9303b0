"""Core preprocessing engine, settings sources and configuration."""
