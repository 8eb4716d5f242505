# tests/core/test_config.py

import json

import grpc
import pytest

from pyvider.rpcserver.config import (
    CONFIG_SCHEMA,
    ServerConfig,
    configure,
    fetch_env_variable,
    get_config,
    load_config_from_file,
    validate_config_value,
)
from pyvider.rpcserver.exception import ConfigError
from pyvider.rpcserver.options import BOOT_OPTION_SCHEMA


def test_fetch_env_variable_from_os_environ(monkeypatch):
    key = "RPC_SERVER_BIND_ADDRESS"
    monkeypatch.setenv(key, "127.0.0.1:7000")
    assert fetch_env_variable(key, CONFIG_SCHEMA[key]) == "127.0.0.1:7000"


def test_fetch_env_variable_default_value():
    key = "RPC_SERVER_POOL_SIZE"
    assert fetch_env_variable(key, CONFIG_SCHEMA[key]) == CONFIG_SCHEMA[key]["default"]


def test_fetch_env_variable_none_default():
    key = "RPC_SERVER_SSL_CERT"
    assert fetch_env_variable(key, CONFIG_SCHEMA[key]) is None


def test_fetch_env_variable_type_conversion_int(monkeypatch):
    key = "RPC_SERVER_MAX_WAITING_REQUESTS"
    monkeypatch.setenv(key, "123")
    assert fetch_env_variable(key, CONFIG_SCHEMA[key]) == 123


def test_fetch_env_variable_type_conversion_float(monkeypatch):
    key = "RPC_SERVER_GRACE_PERIOD"
    monkeypatch.setenv(key, "0.25")
    assert fetch_env_variable(key, CONFIG_SCHEMA[key]) == 0.25


@pytest.mark.parametrize("raw", ["true", "YES", "1", "oN"])
def test_fetch_env_variable_type_conversion_bool_true(monkeypatch, raw):
    key = "RPC_SERVER_USE_SSL"
    monkeypatch.setenv(key, raw)
    assert fetch_env_variable(key, CONFIG_SCHEMA[key]) is True


@pytest.mark.parametrize("raw", ["false", "NO", "0", "oFF", "anyotherstring"])
def test_fetch_env_variable_type_conversion_bool_false(monkeypatch, raw):
    key = "RPC_SERVER_USE_SSL"
    monkeypatch.setenv(key, raw)
    assert fetch_env_variable(key, CONFIG_SCHEMA[key]) is False


def test_fetch_env_variable_invalid_type_conversion(monkeypatch):
    key = "RPC_SERVER_POOL_SIZE"
    monkeypatch.setenv(key, "not-an-int")
    with pytest.raises(
        ConfigError,
        match=f"Invalid value format for configuration key '{key}'.*Expected type 'int'",
    ):
        fetch_env_variable(key, CONFIG_SCHEMA[key])


def test_fetch_env_variable_reads_file(monkeypatch, tmp_path):
    cert_file = tmp_path / "server.crt"
    cert_file.write_text("-----BEGIN CERTIFICATE-----\nabc\n-----END CERTIFICATE-----\n")
    key = "RPC_SERVER_SSL_CERT"
    monkeypatch.setenv(key, f"file://{cert_file}")

    value = fetch_env_variable(key, CONFIG_SCHEMA[key])

    assert value.startswith("-----BEGIN CERTIFICATE-----")
    assert value.endswith("-----END CERTIFICATE-----")


def test_fetch_env_variable_missing_file(monkeypatch, tmp_path):
    key = "RPC_SERVER_SSL_KEY"
    monkeypatch.setenv(key, f"file://{tmp_path / 'missing.key'}")
    with pytest.raises(ConfigError, match="Failed to read file"):
        fetch_env_variable(key, CONFIG_SCHEMA[key])


def test_validate_config_value_valid():
    key = "RPC_SERVER_COMPRESSION"
    assert validate_config_value(key, "gzip", CONFIG_SCHEMA[key]) is True


def test_validate_config_value_invalid_choice():
    key = "RPC_SERVER_COMPRESSION"
    with pytest.raises(ConfigError, match="Invalid value for RPC_SERVER_COMPRESSION"):
        validate_config_value(key, "brotli", CONFIG_SCHEMA[key])


def test_validate_config_value_missing_required():
    key = "RPC_SERVER_BIND_ADDRESS"
    with pytest.raises(ConfigError, match="Missing required configuration") as excinfo:
        validate_config_value(key, None, CONFIG_SCHEMA[key])
    assert excinfo.value.hint == CONFIG_SCHEMA[key]["description"]


def test_get_config_defaults():
    config = get_config()
    assert set(config) == set(CONFIG_SCHEMA)
    assert config["RPC_SERVER_BIND_ADDRESS"] == "0.0.0.0:9001"
    assert config["RPC_SERVER_POOL_SIZE"] == 30
    assert config["RPC_SERVER_USE_SSL"] is False


def test_get_config_propagates_invalid_env(monkeypatch):
    monkeypatch.setenv("RPC_SERVER_COMPRESSION", "lz4")
    with pytest.raises(ConfigError):
        get_config()


def test_instance_is_process_wide():
    assert ServerConfig.instance() is ServerConfig.instance()


def test_set_unknown_key_raises():
    config = ServerConfig()
    with pytest.raises(KeyError, match="Unknown configuration key"):
        config.set("RPC_SERVER_NOPE", 1)


def test_set_converts_bool_strings():
    config = ServerConfig()
    config.set("RPC_SERVER_USE_SSL", "yes")
    assert config.use_ssl() is True


def test_set_validates_value():
    config = ServerConfig()
    with pytest.raises(ConfigError):
        config.set("RPC_SERVER_COMPRESSION", "zstd")


def test_typed_accessors(monkeypatch):
    monkeypatch.setenv("RPC_SERVER_BIND_ADDRESS", "127.0.0.1:6000")
    monkeypatch.setenv("RPC_SERVER_COMPRESSION", "gzip")
    monkeypatch.setenv("RPC_SERVER_MAX_RECEIVE_MESSAGE_LENGTH", "1024")
    config = ServerConfig()

    assert config.bind_address() == "127.0.0.1:6000"
    assert config.compression() is grpc.Compression.Gzip
    assert ("grpc.max_receive_message_length", 1024) in config.server_args()


def test_rpc_server_options_cover_boot_option_schema():
    options = ServerConfig().rpc_server_options()
    assert set(options) == set(BOOT_OPTION_SCHEMA)
    assert options["credentials"] is None
    assert options["grace_period"] == 5.0


def test_server_credentials_require_cert_and_key(monkeypatch):
    monkeypatch.setenv("RPC_SERVER_USE_SSL", "true")
    config = ServerConfig()
    with pytest.raises(ConfigError, match="no certificate/key"):
        config.server_credentials()


def test_server_credentials_built_from_pem(monkeypatch, mocker):
    monkeypatch.setenv("RPC_SERVER_USE_SSL", "true")
    monkeypatch.setenv("RPC_SERVER_SSL_CERT", "CERT")
    monkeypatch.setenv("RPC_SERVER_SSL_KEY", "KEY")
    sentinel = object()
    ssl_credentials = mocker.patch("grpc.ssl_server_credentials", return_value=sentinel)

    assert ServerConfig().server_credentials() is sentinel
    ssl_credentials.assert_called_once_with([(b"KEY", b"CERT")])


def test_configure_updates_process_wide_config():
    config = configure(bind_address="127.0.0.1:50051", pool_size=4, grace_period=1.5)

    assert config is ServerConfig.instance()
    assert config.bind_address() == "127.0.0.1:50051"
    assert config.pool_size() == 4
    assert config.rpc_server_options()["grace_period"] == 1.5


def test_configure_extra_kwargs_map_to_schema_keys():
    configure(max_send_message_length=2048)
    assert ("grpc.max_send_message_length", 2048) in ServerConfig.instance().server_args()


def test_configure_rejects_unknown_kwargs():
    with pytest.raises(KeyError):
        configure(colour="blue")


def test_load_config_from_dotenv(tmp_path):
    env_file = tmp_path / "server.env"
    env_file.write_text(
        "# server settings\n"
        "RPC_SERVER_BIND_ADDRESS='127.0.0.1:7001'\n"
        "RPC_SERVER_POOL_SIZE=3\n"
    )

    config = load_config_from_file(env_file)

    assert config.bind_address() == "127.0.0.1:7001"
    assert config.pool_size() == 3


def test_load_config_from_json(tmp_path):
    json_file = tmp_path / "server.json"
    json_file.write_text(json.dumps({"RPC_SERVER_USE_SSL": False, "RPC_SERVER_GRACE_PERIOD": 2.5}))

    config = load_config_from_file(json_file)

    assert config.use_ssl() is False
    assert config.grace_period() == 2.5


def test_load_config_from_yaml(tmp_path):
    yaml_file = tmp_path / "server.yaml"
    yaml_file.write_text("RPC_SERVER_COMPRESSION: deflate\nRPC_SERVER_MAX_WAITING_REQUESTS: 10\n")

    config = load_config_from_file(yaml_file)

    assert config.compression() is grpc.Compression.Deflate
    assert config.max_waiting_requests() == 10


def test_load_config_unsupported_format(tmp_path):
    ini_file = tmp_path / "server.ini"
    ini_file.write_text("[server]\n")
    with pytest.raises(ConfigError, match="Unsupported file format"):
        load_config_from_file(ini_file)


def test_load_config_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="Configuration file not found"):
        load_config_from_file(tmp_path / "nope.env")


def test_load_config_invalid_values(tmp_path):
    env_file = tmp_path / "bad.env"
    env_file.write_text("RPC_SERVER_POOL_SIZE=many\n")
    with pytest.raises(ConfigError):
        load_config_from_file(env_file)


def test_configure_converts_string_values():
    config = configure(pool_size="4", grace_period="1.5", use_ssl="off")

    options = config.rpc_server_options()
    assert options["pool_size"] == 4
    assert options["grace_period"] == 1.5
    assert config.use_ssl() is False


def test_set_rejects_unconvertible_values():
    config = ServerConfig()
    with pytest.raises(ConfigError, match="Expected type 'int'"):
        config.set("RPC_SERVER_POOL_SIZE", "four")
    assert config.pool_size() == 30
