import pytest

from campamento.config_manager import CampamentoConfig, RefreshPolicy, get_config
from campamento.exceptions import ConfigError
from campamento.hierarchy.models import Level


def test_defaults_when_file_missing(tmp_path):
    config = get_config(tmp_path / "missing.yaml")
    assert config.API_BASE_URL == "http://localhost:3000"
    assert config.API_TIMEOUT == 30.0
    assert config.root_level == Level.ORGANIZACION
    assert config.refresh_policy == RefreshPolicy.OPTIMISTIC


def test_yaml_overrides_defaults(tmp_path):
    path = tmp_path / "runtime.yaml"
    path.write_text(
        "API_BASE_URL: http://10.0.2.2:3000\nHIERARCHY_ROOT: vision\nPAGE_LIMIT: 10\nUNKNOWN_KEY: 1\n",
        encoding="utf-8",
    )

    config = get_config(path)

    assert config.API_BASE_URL == "http://10.0.2.2:3000"
    assert config.root_level == Level.VISION
    assert config.PAGE_LIMIT == 10
    assert not hasattr(config, "UNKNOWN_KEY")


def test_env_overrides_yaml(tmp_path, monkeypatch):
    path = tmp_path / "runtime.yaml"
    path.write_text("REFRESH_POLICY: optimistic\n", encoding="utf-8")
    monkeypatch.setenv("CAMPAMENTO_REFRESH_POLICY", "refetch")
    monkeypatch.setenv("CAMPAMENTO_API_TOKEN", "tok")

    config = get_config(path)

    assert config.refresh_policy == RefreshPolicy.REFETCH
    assert config.API_TOKEN == "tok"


@pytest.mark.parametrize(
    "content",
    [
        "HIERARCHY_ROOT: meta\n",
        "REFRESH_POLICY: sometimes\n",
        "SORT_ORDER: random\n",
        "- not\n- a mapping\n",
        "API_BASE_URL: [unclosed\n",
    ],
)
def test_invalid_config_raises(tmp_path, content):
    path = tmp_path / "runtime.yaml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError) as excinfo:
        get_config(path)
    assert str(path) in excinfo.value.get_user_message()


def test_validate_returns_self():
    config = CampamentoConfig(HIERARCHY_ROOT="vision", REFRESH_POLICY="refetch")
    assert config.validate() is config
