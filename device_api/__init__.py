"""
Device API root package.

This package contains the FastAPI app entry point (main.py), API routes,
the device lifecycle core (domain, application services) and the storage
backends (MongoDB and in-memory).
"""
