import pytest
from pydantic import ValidationError

from clinic_agent.config.settings import ConfigurationError, Settings, load_env_file

ENV_VARS = [
    "RETELL_API_KEY",
    "OPENAI_API_KEY",
    "N8N_WEBHOOK_URL",
    "HOST",
    "PORT",
    "OPENAI_MODEL",
    "OPENAI_TEMPERATURE",
    "OPENAI_MAX_TOKENS",
    "MAX_TOOL_ROUNDS",
    "LOOKUP_TIMEOUT_SECONDS",
    "BOOKING_TIMEOUT_SECONDS",
    "SYSTEM_PROMPT_FILE",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        # recorded so teardown also undoes values written by load_dotenv
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


def test_defaults(clean_env):
    settings = Settings.from_env()
    assert settings.port == 3000
    assert settings.host == "0.0.0.0"
    assert settings.openai_model == "gpt-4-turbo-preview"
    assert settings.temperature == 0.3
    assert settings.max_tokens == 200
    assert settings.max_tool_rounds == 5
    assert settings.lookup_timeout == 5.0
    assert settings.booking_timeout == 10.0
    assert settings.system_prompt_file is None


def test_from_env(clean_env):
    clean_env.setenv("RETELL_API_KEY", "key_retell")
    clean_env.setenv("OPENAI_API_KEY", "sk-live")
    clean_env.setenv("N8N_WEBHOOK_URL", "https://n8n.example.com/webhook/clinic")
    clean_env.setenv("PORT", "8080")
    clean_env.setenv("MAX_TOOL_ROUNDS", "3")
    clean_env.setenv("BOOKING_TIMEOUT_SECONDS", "12.5")

    settings = Settings.from_env()

    assert settings.retell_api_key == "key_retell"
    assert settings.scheduling_webhook_url == "https://n8n.example.com/webhook/clinic"
    assert settings.port == 8080
    assert settings.max_tool_rounds == 3
    assert settings.booking_timeout == 12.5
    assert settings.missing_required() == []
    assert settings.require() is settings


def test_require_lists_missing_variables(clean_env):
    clean_env.setenv("OPENAI_API_KEY", "sk-live")
    settings = Settings.from_env()

    assert settings.missing_required() == ["RETELL_API_KEY", "N8N_WEBHOOK_URL"]
    with pytest.raises(ConfigurationError) as exc_info:
        settings.require()
    assert "RETELL_API_KEY" in str(exc_info.value)
    assert "N8N_WEBHOOK_URL" in str(exc_info.value)
    assert "OPENAI_API_KEY" not in str(exc_info.value)


def test_invalid_port(clean_env):
    clean_env.setenv("PORT", "70000")
    with pytest.raises(ValidationError):
        Settings.from_env()


def test_invalid_max_tool_rounds():
    with pytest.raises(ValidationError):
        Settings(max_tool_rounds=0)


def test_system_prompt_default_and_override(tmp_path):
    assert Settings().load_system_prompt("default prompt") == "default prompt"

    prompt_file = tmp_path / "prompt.txt"
    prompt_file.write_text("Eres María.", encoding="utf-8")
    assert Settings(system_prompt_file=str(prompt_file)).load_system_prompt("x") == "Eres María."


def test_system_prompt_missing_file(tmp_path):
    settings = Settings(system_prompt_file=str(tmp_path / "missing.txt"))
    with pytest.raises(ConfigurationError):
        settings.load_system_prompt("x")


def test_load_env_file(clean_env, tmp_path):
    assert load_env_file(tmp_path / ".env") is False

    env_file = tmp_path / ".env"
    env_file.write_text("N8N_WEBHOOK_URL=https://hooks.example.com/clinic\n", encoding="utf-8")
    assert load_env_file(env_file) is True
    assert Settings.from_env().scheduling_webhook_url == "https://hooks.example.com/clinic"
