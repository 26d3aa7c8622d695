import json
import os

import pytest
import yaml

from hcptf.config import (
    Config,
    load_terraform_credentials,
    remove_credential,
    save_credential,
    terraform_credentials_path,
)
from hcptf.errors import ConfigError
from hcptf.settings import DEFAULT_ADDRESS, Settings


def test_default_config():
    """A missing hcptfrc yields defaults."""
    config = Config.load(Settings())
    assert config.credentials == {}
    assert config.default_organization is None
    assert config.output_format == "table"


def test_config_from_yaml_file(isolated_home):
    rc = isolated_home / ".hcptfrc"
    rc.write_text(
        yaml.safe_dump(
            {
                "credentials": {"app.terraform.io": {"token": "abc"}, "tfe.example.com": "xyz"},
                "default_organization": "acme",
                "output_format": "json",
            }
        )
    )
    config = Config.load(Settings())
    assert config.credentials == {"app.terraform.io": "abc", "tfe.example.com": "xyz"}
    assert config.default_organization == "acme"
    assert config.output_format == "json"


def test_config_path_override(isolated_home, monkeypatch):
    custom = isolated_home / "custom.yml"
    custom.write_text("default_organization: other\n")
    monkeypatch.setenv("HCPTF_CONFIG", str(custom))
    assert Config.load(Settings()).default_organization == "other"


def test_invalid_yaml_raises_config_error(isolated_home):
    (isolated_home / ".hcptfrc").write_text("credentials: [unclosed\n")
    with pytest.raises(ConfigError):
        Config.load(Settings())


def test_non_mapping_raises_config_error(isolated_home):
    (isolated_home / ".hcptfrc").write_text("- just\n- a list\n")
    with pytest.raises(ConfigError):
        Config.load(Settings())


@pytest.mark.parametrize(
    "content",
    ["credentials: [a, b]\n", "credentials: [ab, cd]\n", "output_format: 5\n"],
)
def test_wrong_shape_raises_config_error(isolated_home, content):
    (isolated_home / ".hcptfrc").write_text(content)
    with pytest.raises(ConfigError) as exc:
        Config.load(Settings())
    assert "invalid" in exc.value.message


def test_terraform_credential_entry_must_be_object():
    path = terraform_credentials_path()
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps({"credentials": {"app.terraform.io": "tok"}}))
    with pytest.raises(ConfigError):
        load_terraform_credentials()


def test_terraform_credentials_must_be_mapping():
    path = terraform_credentials_path()
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps({"credentials": ["tok"]}))
    with pytest.raises(ConfigError):
        load_terraform_credentials()


def test_save_and_reload(isolated_home):
    path = isolated_home / "saved.yml"
    Config(credentials={"h": "t"}, default_organization="acme").save_to_file(path)
    assert oct(os.stat(path).st_mode & 0o777) == "0o600"
    loaded = Config.from_file(path)
    assert loaded.credentials == {"h": "t"}
    assert loaded.default_organization == "acme"


def test_hcptfrc_credentials_win_over_terraform(isolated_home):
    save_credential("app.terraform.io", "from-terraform")
    save_credential("tfe.example.com", "tfe-token")
    (isolated_home / ".hcptfrc").write_text("credentials:\n  app.terraform.io: from-rc\n")
    config = Config.load(Settings())
    assert config.credentials["app.terraform.io"] == "from-rc"
    assert config.credentials["tfe.example.com"] == "tfe-token"


def test_token_for_prefers_environment(monkeypatch):
    config = Config(credentials={"app.terraform.io": "stored"})
    assert config.token_for(Settings()) == "stored"
    monkeypatch.setenv("TFE_TOKEN", "env")
    assert config.token_for(Settings()) == "env"


def test_save_and_remove_terraform_credential():
    path = save_credential("app.terraform.io", "tok")
    assert path == terraform_credentials_path()
    assert json.loads(path.read_text()) == {"credentials": {"app.terraform.io": {"token": "tok"}}}
    assert load_terraform_credentials() == {"app.terraform.io": "tok"}

    assert remove_credential("app.terraform.io") is True
    assert not path.exists()
    assert remove_credential("app.terraform.io") is False


def test_remove_keeps_other_hosts():
    save_credential("a.example.com", "1")
    save_credential("b.example.com", "2")
    remove_credential("a.example.com")
    assert load_terraform_credentials() == {"b.example.com": "2"}


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.address == DEFAULT_ADDRESS
        assert settings.hostname == "app.terraform.io"
        assert settings.token is None
        assert settings.log_level == "WARNING"

    def test_address_is_normalized(self, monkeypatch):
        monkeypatch.setenv("TFE_ADDRESS", "tfe.example.com/")
        settings = Settings()
        assert settings.address == "https://tfe.example.com"
        assert settings.hostname == "tfe.example.com"

    def test_hcptf_address_wins(self, monkeypatch):
        monkeypatch.setenv("TFE_ADDRESS", "https://tfe.example.com")
        monkeypatch.setenv("HCPTF_ADDRESS", "https://other.example.com")
        assert Settings().hostname == "other.example.com"

    def test_tfe_token_wins(self, monkeypatch):
        monkeypatch.setenv("HCPTF_TOKEN", "b")
        monkeypatch.setenv("TFE_TOKEN", "a")
        assert Settings().token == "a"

    def test_empty_token_is_ignored(self, monkeypatch):
        monkeypatch.setenv("TFE_TOKEN", "")
        monkeypatch.setenv("HCPTF_TOKEN", "b")
        assert Settings().token == "b"
