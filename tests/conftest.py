import pytest
from libs.common.config import Settings, get_settings
from libs.common.service_client import ServiceClient
from services.backoffice_service.repository import BackofficeClient
from tests.stubs import FakeBackend


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; tests that tweak env vars need a fresh read."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        BACKOFFICE_API_URL="http://test",
        BACKOFFICE_API_PREFIX="/api",
    )


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def service(backend, settings) -> ServiceClient:
    return ServiceClient.from_settings(settings, transport=backend.transport)


@pytest.fixture
def client(backend, settings) -> BackofficeClient:
    """Back-office client wired to the in-memory backend."""
    return BackofficeClient.from_settings(settings, transport=backend.transport)
