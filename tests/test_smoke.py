"""
Smoke test - verifies test infrastructure is working.
Run: pytest tests/test_smoke.py -v
"""


def test_import_app(memory_env):
    """Verify device_api package can be imported."""
    from device_api.core.config import get_settings

    settings = get_settings()
    assert settings is not None
    assert settings.device_store_backend == "memory"


def test_create_application(memory_env):
    from device_api.main import create_application

    paths = create_application().openapi()["paths"]
    assert "/api/v1/devices" in paths
    assert "/api/v1/devices/{device_id}" in paths
