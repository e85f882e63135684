import pytest
import yaml

from spark_io.config_loader import load_config


def test_missing_file_returns_defaults(tmp_path):
    config = load_config(str(tmp_path / "missing.yaml"), environ={})
    assert config == {"spark": {}}


def test_loads_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "spark:\n"
        "  device_id: abc123\n"
        "  token: secret\n"
        "  port: 8001\n"
        "sampling_interval: 100\n"
    )

    config = load_config(str(path), environ={})

    assert config["spark"] == {"device_id": "abc123", "token": "secret", "port": 8001}
    assert config["sampling_interval"] == 100


def test_environment_overrides_credentials(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("spark:\n  device_id: from-file\n  token: from-file\n")

    config = load_config(str(path), environ={"SPARK_DEVICE_ID": "from-env", "SPARK_TOKEN": ""})

    assert config["spark"]["device_id"] == "from-env"
    # Empty variables do not override
    assert config["spark"]["token"] == "from-file"


def test_invalid_yaml_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("spark: [unclosed\n")

    with pytest.raises(yaml.YAMLError):
        load_config(str(path), environ={})


def test_empty_spark_section_is_replaced(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("spark:\n")

    assert load_config(str(path), environ={}) == {"spark": {}}

    config = load_config(str(path), environ={"SPARK_DEVICE_ID": "abc", "SPARK_TOKEN": "tok"})
    assert config["spark"] == {"device_id": "abc", "token": "tok"}
