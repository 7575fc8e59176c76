"""Unit tests for configuration loading, including the SSM-backed API key."""

import pytest
from botocore.exceptions import ClientError
from structlog.testing import capture_logs

from config import ClientConfig, GatewayConfig, load_client_config, load_gateway_config


class FakeSSMClient:
    def __init__(self, value=None, error=None):
        self.value = value
        self.error = error
        self.requests = []

    def get_parameter(self, **kwargs):
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        return {"Parameter": {"Name": kwargs["Name"], "Type": "SecureString", "Value": self.value}}


def test_defaults_verify_tls_and_use_ten_second_timeout():
    config = load_gateway_config({"OPENWEATHERMAP_API_KEY": "abc"})

    assert config.api_key == "abc"
    assert config.api_base_url == "https://api.openweathermap.org"
    assert config.units == "metric"
    assert config.timeout_seconds == 10
    assert config.verify_ssl is True


def test_missing_api_key_is_not_a_startup_failure():
    assert load_gateway_config({}).api_key is None
    assert load_gateway_config({"OPENWEATHERMAP_API_KEY": ""}).api_key is None


def test_api_key_is_read_from_ssm_when_not_in_environment():
    ssm = FakeSSMClient(value="from-ssm")

    config = load_gateway_config({"OPENWEATHERMAP_API_KEY_PARAMETER": "/weatherly/owm-key"}, ssm_client=ssm)

    assert config.api_key == "from-ssm"
    assert ssm.requests == [{"Name": "/weatherly/owm-key", "WithDecryption": True}]


def test_environment_key_wins_over_ssm_parameter():
    ssm = FakeSSMClient(value="from-ssm")

    config = load_gateway_config({"OPENWEATHERMAP_API_KEY": "from-env",
                                  "OPENWEATHERMAP_API_KEY_PARAMETER": "/weatherly/owm-key"}, ssm_client=ssm)

    assert config.api_key == "from-env"
    assert ssm.requests == []


def test_failed_ssm_lookup_is_logged_and_leaves_key_unset():
    error = ClientError({"Error": {"Code": "ParameterNotFound", "Message": "not found"}}, "GetParameter")

    with capture_logs() as logs:
        config = load_gateway_config({"OPENWEATHERMAP_API_KEY_PARAMETER": "/missing"},
                                     ssm_client=FakeSSMClient(error=error))

    assert config.api_key is None
    assert logs[0]["log_level"] == "error"
    assert logs[0]["parameter"] == "/missing"


@pytest.mark.parametrize("flag, verify", [("1", False), ("true", False), ("YES", False), ("0", True),
                                          ("false", True), ("", True)])
def test_tls_verification_opt_out_flag(flag, verify):
    config = load_gateway_config({"OPENWEATHERMAP_API_KEY": "k", "OPENWEATHERMAP_DISABLE_SSL_VERIFY": flag})

    assert config.verify_ssl is verify


def test_disabling_tls_verification_logs_a_warning():
    with capture_logs() as logs:
        load_gateway_config({"OPENWEATHERMAP_DISABLE_SSL_VERIFY": "true"})

    assert [entry["log_level"] for entry in logs] == ["warning"]


@pytest.mark.parametrize("value", ["abc", "0", "-3"])
def test_invalid_timeout_is_rejected_at_startup(value):
    with pytest.raises(ValueError):
        load_gateway_config({"OPENWEATHERMAP_TIMEOUT": value})


def test_config_objects_are_read_only_and_mask_the_key():
    config = GatewayConfig(api_key="super-secret")

    with pytest.raises(AttributeError):
        config.api_key = "other"
    assert "super-secret" not in repr(config)


def test_client_config_prefers_explicit_base_url_then_environment():
    environ = {"WEATHER_API_BASE_URL": "https://weather.example.com/api/", "WEATHER_CLIENT_TIMEOUT": "3"}

    assert load_client_config(environ).api_base_url == "https://weather.example.com/api"
    assert load_client_config(environ).timeout_seconds == 3
    assert load_client_config(environ, api_base_url="http://other/api").api_base_url == "http://other/api"
    assert load_client_config({}).api_base_url == ClientConfig().api_base_url == "http://localhost:8000/api"
