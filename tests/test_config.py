from pharmadmin.core.config import Settings


def test_settings_defaults():
    config = Settings()

    assert config.upload_chunk_size == 500
    assert config.delete_chunk_size == 500
    assert config.upload_chunk_timeout_seconds > config.request_timeout_seconds
    assert config.max_file_size_mb == 50


def test_settings_only_declare_used_fields():
    assert "debug" not in Settings.model_fields


def test_settings_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("PHARMADMIN_UPLOAD_CHUNK_SIZE", "250")
    monkeypatch.setenv("PHARMADMIN_API_BASE_URL", "https://admin.example.com/api")

    config = Settings()

    assert config.upload_chunk_size == 250
    assert config.api_base_url == "https://admin.example.com/api"
