"""Core settings, errors, logging and security."""
