from railwatch.config import ConfigurationError


def test_factory_messages():
    assert str(ConfigurationError.missing_value("TOKEN")) == "TOKEN is missing or empty"
    assert str(ConfigurationError.invalid_value("PORT", "x", "Expected an integer")) == (
        "Invalid value for PORT: 'x'. Expected an integer"
    )
    assert str(ConfigurationError.invalid_format("URL", "ftp:", "https://...")) == (
        "URL has invalid format (received 'ftp:'). Expected https://..."
    )
    assert str(ConfigurationError.load_failed("settings", "/tmp/x.env")) == "Failed to load settings from /tmp/x.env"
