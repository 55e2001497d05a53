"""
API layer for the Device API.

Exposes the device HTTP endpoints under /api/v1/devices and the handlers
translating core outcomes into HTTP error responses.
"""
