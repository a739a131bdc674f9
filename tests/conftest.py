import pytest

from openai_mock.core.config import DEFAULT_API_KEY, MockConfig, Settings, get_settings
from openai_mock.core.identifiers import IdentifierGenerator
from openai_mock.core.synthesis import ResponseSynthesizer

FIXED_TIMESTAMP = 1700000000


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def mock_config():
    return MockConfig()


@pytest.fixture
def synthesizer(mock_config):
    return ResponseSynthesizer(mock_config, identifiers=IdentifierGenerator(clock=lambda: FIXED_TIMESTAMP))


@pytest.fixture
def settings():
    return Settings(API_KEY=DEFAULT_API_KEY, ENABLE_LOGGING=False, CORS_ORIGINS="*")


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {DEFAULT_API_KEY}"}
