import pytest

PROVIDER_ENV_VARS = (
    "VLLM_API_KEY",
    "VLLM_BASE_URL",
    "OPENROUTER_API_KEY",
    "OPENROUTER_BASE_URL",
    "COMPATIBLE_WITH_OPENAI_API_KEY",
    "COMPATIBLE_WITH_OPENAI_BASE_URL",
    "MOCK_API_KEY",
    "MOCK_BASE_URL",
    "LLMWIRE_DEFAULT_MODEL",
    "LLMWIRE_TIMEOUT",
    "LLMWIRE_MAX_RETRIES",
    "LLMWIRE_ON_UNSUPPORTED",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep provider credentials from the developer's shell out of tests."""
    for var in PROVIDER_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
