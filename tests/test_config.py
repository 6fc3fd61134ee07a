import dataclasses

import pytest

from shared.config import EchoConfig, load_config
from shared.errors import ConfigError
from shared.utils import split_hostport


def test_defaults():
    config = EchoConfig()
    assert config.addr == "localhost:8080"
    assert config.host == "localhost"
    assert config.port == 8080
    assert config.url == "ws://localhost:8080/echo"
    assert config.heartbeat_interval == 5.0
    assert config.close_timeout == 10.0


def test_config_is_immutable():
    config = EchoConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.addr = "localhost:9000"


def test_empty_host_listens_everywhere_and_dials_localhost():
    config = EchoConfig(addr=":9000")
    assert config.listen_host is None
    assert config.url == "ws://localhost:9000/echo"


def test_ipv6_url_is_bracketed():
    assert EchoConfig(addr="[::1]:9000").url == "ws://[::1]:9000/echo"


@pytest.mark.parametrize("addr", ["localhost", "localhost:http", "localhost:70000", "", ":-1"])
def test_invalid_addresses(addr):
    with pytest.raises(ConfigError):
        split_hostport(addr)
    with pytest.raises(ConfigError):
        EchoConfig(addr=addr)


def test_split_hostport():
    assert split_hostport("127.0.0.1:8080") == ("127.0.0.1", 8080)
    assert split_hostport(":0") == ("", 0)


@pytest.mark.parametrize(
    "kwargs",
    [{"echo_path": "echo"}, {"heartbeat_interval": 0}, {"close_timeout": -1}, {"close_timeout": True}],
)
def test_invalid_values(kwargs):
    with pytest.raises(ConfigError):
        EchoConfig(**kwargs)


def test_load_config_precedence(tmp_path):
    path = tmp_path / "wsecho.yaml"
    path.write_text("addr: 'yaml-host:1111'\nheartbeat_interval: 2\nclose_timeout: 3.5\n")

    from_yaml = load_config(environ={"WSECHO_CONFIG": str(path)})
    assert from_yaml.addr == "yaml-host:1111"
    assert from_yaml.heartbeat_interval == 2
    assert from_yaml.close_timeout == 3.5

    from_env = load_config(environ={"WSECHO_CONFIG": str(path), "WSECHO_ADDR": "env-host:2222"})
    assert from_env.addr == "env-host:2222"
    assert from_env.heartbeat_interval == 2

    from_flag = load_config("flag-host:3333", environ={"WSECHO_ADDR": "env-host:2222"})
    assert from_flag.addr == "flag-host:3333"


def test_load_config_without_sources():
    assert load_config(environ={}) == EchoConfig()


def test_empty_yaml_uses_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(path=path, environ={}) == EchoConfig()


@pytest.mark.parametrize(
    "content",
    ["- just\n- a list\n", "addr: 'localhost:1'\nretries: 3\n", "addr: [unclosed\n"],
)
def test_bad_yaml_is_rejected(tmp_path, content):
    path = tmp_path / "bad.yaml"
    path.write_text(content)
    with pytest.raises(ConfigError):
        load_config(path=path, environ={})


def test_missing_yaml_file(tmp_path):
    with pytest.raises(ConfigError):
        load_config(path=tmp_path / "missing.yaml", environ={})
