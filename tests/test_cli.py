"""
End-to-end tests for the hcptf entry point.
"""

import io
import json

from hcptf import __version__
from hcptf.cli import main, top_level_help
from hcptf.config import load_terraform_credentials, terraform_credentials_path


class TestCLIBasics:
    """Help, version and unknown commands."""

    def test_no_arguments_prints_help(self, cli):
        result = cli()
        assert result.exit_code == 0
        assert "Usage: hcptf <command> [args]" in result.output

    def test_help_lists_single_word_commands(self, cli):
        result = cli("-help")
        assert result.exit_code == 0
        for name in ("workspace", "run", "organization", "login", "explorer", "hyok"):
            assert name in result.output
        assert "organization:context" not in result.output
        assert "workspace tag" not in result.output

    def test_top_level_help_matches_cli(self, cli, registry):
        assert top_level_help(registry) in cli("--help").output

    def test_version_flag(self, cli):
        for flag in ("-v", "-version", "--version"):
            result = cli(flag)
            assert result.exit_code == 0
            assert result.output.strip() == f"hcptf v{__version__}"

    def test_version_command(self, cli):
        assert cli("version").output.strip() == f"hcptf v{__version__}"

    def test_unknown_subcommand(self, cli, api):
        result = cli("workspace", "frobnicate")
        assert result.exit_code == 1
        assert "Unknown command" in result.error
        assert api.requests == []

    def test_unknown_first_word_is_an_organization(self, cli, api):
        result = cli("frobnicate")
        assert result.exit_code == 1
        assert api.last().url.path == "/api/v2/organizations/frobnicate"

    def test_command_help_exits_zero(self, cli, api):
        result = cli("workspace", "list", "-help")
        assert result.exit_code == 0
        assert "Usage: hcptf workspace list" in result.output
        assert "-organization" in result.output
        assert api.requests == []

    def test_namespace_help(self, cli):
        result = cli("team", "access", "-h")
        assert result.exit_code == 0
        assert "Usage: hcptf team access" in result.output

    def test_missing_token_is_config_error(self, monkeypatch):
        monkeypatch.delenv("TFE_TOKEN", raising=False)
        out, err = io.StringIO(), io.StringIO()
        assert main(["whoami"], out=out, err=err) == 1
        assert "no API token found for app.terraform.io" in err.getvalue()


class TestAuth:
    def test_whoami(self, cli, api):
        api.add("GET", "/api/v2/account/details", {
            "data": {"id": "user-1", "type": "users",
                     "attributes": {"username": "jdoe", "email": "j@example.com",
                                    "two-factor": {"enabled": True}}}
        })
        result = cli("whoami", "-output=json")
        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "Hostname": "app.terraform.io",
            "ID": "user-1",
            "Username": "jdoe",
            "Email": "j@example.com",
            "Two Factor": True,
        }
        assert api.last().headers["Authorization"] == "Bearer test-token"

    def test_login_stores_validated_token(self, cli, api):
        api.add("GET", "/api/v2/account/details", {
            "data": {"id": "user-1", "attributes": {"username": "jdoe"}}
        })
        result = cli("login", input="new-token\n")
        assert result.exit_code == 0
        assert "Success! Logged in as jdoe." in result.output
        assert load_terraform_credentials() == {"app.terraform.io": "new-token"}
        assert api.last().headers["Authorization"] == "Bearer new-token"

    def test_login_rejects_empty_token(self, cli):
        result = cli("login", input="\n")
        assert result.exit_code == 1
        assert "token cannot be empty" in result.error

    def test_login_rejected_token_is_not_stored(self, cli, api):
        api.add("GET", "/api/v2/account/details", {"errors": []}, status=401)
        result = cli("login", input="bad\n")
        assert result.exit_code == 1
        assert "token validation failed" in result.error
        assert not terraform_credentials_path().exists()

    def test_logout(self, cli, api):
        api.add("GET", "/api/v2/account/details", {"data": {"attributes": {"username": "x"}}})
        cli("login", input="tok\n")
        result = cli("logout")
        assert result.exit_code == 0
        assert "Removed credentials for app.terraform.io" in result.output
        assert cli("logout").output.strip() == "No credentials found for app.terraform.io"


class TestRouting:
    def test_organization_shortcut(self, cli, api):
        api.add("GET", "/api/v2/organizations/acme", {
            "data": {"id": "acme", "type": "organizations",
                     "attributes": {"name": "acme", "email": "ops@acme.io"}}
        })
        result = cli("acme")
        assert result.exit_code == 0
        assert "ops@acme.io" in result.output

    def test_organization_context_help(self, cli, api):
        result = cli("acme", "-h")
        assert result.exit_code == 0
        assert "Commands for organization 'acme':" in result.output
        assert "hcptf acme workspaces" in result.output
        assert api.requests == []

    def test_workspace_context_help(self, cli):
        result = cli("acme", "prod", "-h")
        assert result.exit_code == 0
        assert "Commands for workspace 'prod' in organization 'acme':" in result.output

    def test_org_collection(self, cli, api):
        api.add("GET", "/api/v2/organizations/acme/teams", {
            "data": [{"id": "team-1", "type": "teams",
                      "attributes": {"name": "owners", "visibility": "secret", "users-count": 2}}]
        })
        result = cli("acme", "teams")
        assert result.exit_code == 0
        assert "owners" in result.output

    def test_run_shortcut(self, cli, api):
        api.add("GET", "/api/v2/runs/run-123", {
            "data": {"id": "run-123", "type": "runs", "attributes": {"status": "planned"}}
        })
        result = cli("acme", "prod", "run-123")
        assert result.exit_code == 0
        assert "planned" in result.output

    def test_implicit_list_verb(self, cli, api):
        api.add("GET", "/api/v2/organizations/acme/workspaces", {"data": []})
        result = cli("workspace", "-org=acme")
        assert result.exit_code == 0
        assert "No workspaces found" in result.output

    def test_ambiguous_namespace(self, cli):
        result = cli("workspace")
        assert result.exit_code == 1
        assert "specify one of: list, read" in result.error


class TestDefaults:
    def test_default_organization_from_config(self, cli, api, isolated_home):
        (isolated_home / ".hcptfrc").write_text("default_organization: acme\n")
        api.add("GET", "/api/v2/organizations/acme/workspaces", {"data": []})
        result = cli("workspace", "list")
        assert result.exit_code == 0
        assert api.last().url.path == "/api/v2/organizations/acme/workspaces"

    def test_default_output_format_from_config(self, cli, api, isolated_home):
        (isolated_home / ".hcptfrc").write_text("output_format: json\n")
        api.add("GET", "/api/v2/organizations/acme/workspaces", {"data": []})
        result = cli("workspace", "list", "-org=acme")
        assert json.loads(result.output) == []

    def test_log_level_json_goes_to_stderr(self, cli, api, monkeypatch):
        monkeypatch.setenv("HCPTF_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("HCPTF_LOG_FORMAT", "json")
        api.add("GET", "/api/v2/organizations/acme/workspaces", {"data": []})
        result = cli("workspace", "list", "-org=acme", "-output=json")
        assert json.loads(result.output) == []
        first = json.loads(result.error.splitlines()[0])
        assert first["levelname"] == "DEBUG"

    def test_malformed_config_exits_one(self, cli, api, isolated_home):
        (isolated_home / ".hcptfrc").write_text("credentials: [a, b]\n")
        result = cli("workspace", "list", "-org=acme")
        assert result.exit_code == 1
        assert "invalid" in result.error
        assert api.requests == []
