"""Contracts (protocols) between the application core and its adapters."""
