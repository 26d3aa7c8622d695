"""End-to-end tests for resource commands against a fake API."""

import json

import pytest


def workspace(name="prod", ws_id="ws-abc123", **attrs):
    attributes = {"name": name, "terraform-version": "1.7.0", "execution-mode": "remote",
                  "auto-apply": False, "locked": False}
    attributes.update(attrs)
    return {"id": ws_id, "type": "workspaces", "attributes": attributes}


@pytest.fixture
def prod(api):
    api.add("GET", "/api/v2/organizations/acme/workspaces/prod", {"data": workspace()})


class TestWorkspace:
    def test_list_table(self, cli, api):
        api.add("GET", "/api/v2/organizations/acme/workspaces",
                {"data": [workspace(), workspace("dev", "ws-dev")]})
        result = cli("workspace", "list", "-org=acme")
        assert result.exit_code == 0
        assert "prod" in result.output and "ws-dev" in result.output
        assert api.last().url.params["page[size]"] == "100"

    def test_list_search_params(self, cli, api):
        api.add("GET", "/api/v2/organizations/acme/workspaces", {"data": []})
        cli("workspace", "list", "-org", "acme", "-search=pro", "-tags=env:prod")
        params = api.last().url.params
        assert params["search[name]"] == "pro"
        assert params["search[tags]"] == "env:prod"

    def test_read_json(self, cli, api, prod):
        result = cli("workspace", "read", "-org=acme", "-name=prod", "-output=json")
        assert result.exit_code == 0
        assert json.loads(result.output)["Name"] == "prod"

    def test_read_not_found(self, cli, api):
        result = cli("workspace", "read", "-org=acme", "-name=missing")
        assert result.exit_code == 1
        assert "not found" in result.error

    def test_missing_org(self, cli, api):
        result = cli("workspace", "read", "-name=prod")
        assert result.exit_code == 1
        assert "-organization flag is required" in result.error

    def test_create_body(self, cli, api):
        api.add("POST", "/api/v2/organizations/acme/workspaces", {"data": workspace()}, status=201)
        result = cli("workspace", "create", "-org=acme", "-name=prod", "-execution-mode=remote",
                     "-auto-apply", "-tags=a,b", "-vcs-identifier=acme/infra",
                     "-project-id=prj-1")
        assert result.exit_code == 0
        assert "Workspace 'prod' created successfully" in result.output
        data = api.last_json("POST")["data"]
        assert data["type"] == "workspaces"
        assert data["attributes"]["name"] == "prod"
        assert data["attributes"]["auto-apply"] is True
        assert data["attributes"]["tag-names"] == ["a", "b"]
        assert data["attributes"]["vcs-repo"] == {"identifier": "acme/infra"}
        assert data["relationships"]["project"] == {"data": {"type": "projects", "id": "prj-1"}}

    def test_create_rejects_bad_execution_mode(self, cli, api):
        result = cli("workspace", "create", "-org=acme", "-name=prod", "-execution-mode=cloud")
        assert result.exit_code == 1
        assert api.requests == []

    def test_update_only_sends_provided_settings(self, cli, api):
        api.add("PATCH", "/api/v2/organizations/acme/workspaces/prod", {"data": workspace()})
        result = cli("workspace", "update", "-org=acme", "-name=prod", "-auto-apply=false",
                     "-terraform-version=1.8.0")
        assert result.exit_code == 0
        attrs = api.last_json("PATCH")["data"]["attributes"]
        assert attrs == {"auto-apply": False, "terraform-version": "1.8.0"}

    def test_delete_asks_for_confirmation(self, cli, api):
        result = cli("workspace", "delete", "-org=acme", "-name=prod", input="no\n")
        assert result.exit_code == 0
        assert "Deletion cancelled" in result.output
        assert api.requests == []

    @pytest.mark.parametrize("flag", ["-force", "-f", "-y"])
    def test_delete_forced(self, cli, api, flag):
        api.add("DELETE", "/api/v2/organizations/acme/workspaces/prod", None, status=204)
        result = cli("workspace", "delete", "-org=acme", "-name=prod", flag)
        assert result.exit_code == 0
        assert "Workspace 'prod' deleted successfully" in result.output

    def test_lock_with_reason(self, cli, api, prod):
        api.add("POST", "/api/v2/workspaces/ws-abc123/actions/lock", {"data": workspace()})
        result = cli("workspace", "lock", "-org=acme", "-name=prod", "-reason=maintenance")
        assert result.exit_code == 0
        assert api.last_json("POST") == {"reason": "maintenance"}

    def test_lookup_without_id_fails_cleanly(self, cli, api):
        api.add("GET", "/api/v2/organizations/acme/workspaces/prod", None)
        result = cli("workspace", "lock", "-org=acme", "-name=prod")
        assert result.exit_code == 1
        assert "no workspace ID" in result.error
        assert api.last().method == "GET"

    def test_tag_add(self, cli, api):
        api.add("POST", "/api/v2/workspaces/ws-1/relationships/tags", None, status=204)
        result = cli("workspace", "tag", "add", "-workspace-id=ws-1", "-tags=a,b")
        assert result.exit_code == 0
        assert "Successfully added 2 tag(s)" in result.output
        assert api.last_json("POST")["data"][0] == {"type": "tags", "attributes": {"name": "a"}}

    def test_api_error_surfaces(self, cli, api):
        api.add("POST", "/api/v2/organizations/acme/workspaces",
                {"errors": [{"title": "invalid", "detail": "Name has already been taken"}]},
                status=422)
        result = cli("workspace", "create", "-org=acme", "-name=prod")
        assert result.exit_code == 1
        assert "HTTP 422" in result.error
        assert "Name has already been taken" in result.error


class TestVariables:
    def test_create_resolves_workspace(self, cli, api, prod):
        api.add("POST", "/api/v2/workspaces/ws-abc123/vars",
                {"data": {"id": "var-1", "type": "vars", "attributes": {"key": "region"}}},
                status=201)
        result = cli("variable", "create", "-org=acme", "-workspace=prod",
                     "-key=region", "-value=us-east-1", "-category=env")
        assert result.exit_code == 0
        attrs = api.last_json("POST")["data"]["attributes"]
        assert attrs["key"] == "region"
        assert attrs["category"] == "env"
        assert attrs["sensitive"] is False

    def test_variableset_apply(self, cli, api):
        api.add("POST", "/api/v2/varsets/varset-1/relationships/workspaces", None, status=204)
        result = cli("variableset", "apply", "-id=varset-1", "-workspaces=ws-1,ws-2")
        assert result.exit_code == 0
        assert "applied to 2 workspaces" in result.output
        assert api.last_json("POST") == {
            "data": [{"type": "workspaces", "id": "ws-1"}, {"type": "workspaces", "id": "ws-2"}]
        }

    def test_variableset_apply_requires_a_scope(self, cli, api):
        result = cli("variableset", "apply", "-id=varset-1")
        assert result.exit_code == 1
        assert "-workspaces or -projects or -stacks flag is required" in result.error


class TestTeam:
    TEAMS = {"data": [{"id": "team-1", "type": "teams", "attributes": {"name": "ops"}}]}

    def test_update_renames(self, cli, api):
        api.add("GET", "/api/v2/organizations/acme/teams", self.TEAMS)
        api.add("PATCH", "/api/v2/teams/team-1",
                {"data": {"id": "team-1", "type": "teams", "attributes": {"name": "platform"}}})
        result = cli("team", "update", "-org=acme", "-name=ops", "-new-name=platform")
        assert result.exit_code == 0
        assert api.last_json("PATCH") == {"data": {"type": "teams", "attributes": {"name": "platform"}}}

    def test_update_requires_a_change(self, cli, api):
        result = cli("team", "update", "-org=acme", "-name=ops")
        assert result.exit_code == 1
        assert api.requests == []

    def test_show_unknown_team(self, cli, api):
        api.add("GET", "/api/v2/organizations/acme/teams", self.TEAMS)
        result = cli("team", "show", "-org=acme", "-name=nobody")
        assert result.exit_code == 1
        assert "team 'nobody' not found" in result.error


class TestHYOK:
    def test_create(self, cli, api):
        api.add("POST", "/api/v2/organizations/acme/hyok-configurations",
                {"data": {"id": "hyokc-1", "type": "hyok-configurations",
                          "attributes": {"name": "k"}}}, status=201)
        result = cli("hyok", "create", "-org=acme", "-name=k", "-kek-id=arn:kek",
                     "-agent-pool-id=apool-1", "-oidc-config-id=awsoidc-1", "-oidc-type=aws",
                     "-key-region=us-east-1")
        assert result.exit_code == 0
        data = api.last_json("POST")["data"]
        assert data["attributes"] == {"name": "k", "kek-id": "arn:kek",
                                      "kms-options": {"key_region": "us-east-1"}}
        assert data["relationships"]["oidc-configuration"] == {
            "data": {"type": "aws-oidc-configurations", "id": "awsoidc-1"}
        }
        assert data["relationships"]["agent-pool"]["data"]["id"] == "apool-1"

    def test_key_delete_revokes(self, cli, api):
        api.add("POST", "/api/v2/hyok-customer-key-versions/keyv-1/actions/revoke", None, status=204)
        result = cli("hyokkey", "delete", "-id=keyv-1", "-y")
        assert result.exit_code == 0
        assert "revoked" in result.output


class TestExplorer:
    def test_query_table(self, cli, api):
        api.add("GET", "/api/v2/organizations/acme/explorer", {
            "data": [{"type": "visibility-workspace",
                      "attributes": {"workspace-name": "prod", "current-rum-count": 12}}]
        })
        result = cli("explorer", "query", "-org=acme", "-type=workspaces", "-limit=5")
        assert result.exit_code == 0
        assert "Showing 1 of workspaces (page 1)" in result.output
        params = api.last().url.params
        assert params["type"] == "workspaces"
        assert params["page[size]"] == "5"

    def test_query_empty(self, cli, api):
        api.add("GET", "/api/v2/organizations/acme/explorer", {"data": []})
        result = cli("explorer", "query", "-org=acme", "-type=modules")
        assert result.output.strip() == "No modules found"

    def test_query_csv(self, cli, api):
        api.add("GET", "/api/v2/organizations/acme/explorer/export/csv", "name,count\nprod,12\n")
        result = cli("explorer", "query", "-org=acme", "-type=workspaces", "-csv")
        assert result.exit_code == 0
        assert result.output == "name,count\nprod,12\n"

    def test_query_rejects_unknown_type(self, cli, api):
        result = cli("explorer", "query", "-org=acme", "-type=runs")
        assert result.exit_code == 1
        assert api.requests == []

    def test_queryrun_list(self, cli, api):
        api.add("GET", "/api/v2/organizations/acme/runs", {
            "data": [{"id": "run-1", "type": "runs",
                      "attributes": {"status": "errored", "message": "m" * 80},
                      "relationships": {"workspace": {"data": {"id": "ws-1", "type": "workspaces"}}}}],
            "included": [{"id": "ws-1", "type": "workspaces", "attributes": {"name": "prod"}}],
        })
        result = cli("queryrun", "list", "-org=acme", "-status=errored")
        assert result.exit_code == 0
        assert "prod" in result.output
        assert "m" * 47 + "..." in result.output
        assert api.last().url.params["filter[status]"] == "errored"


class TestPlatform:
    def test_iprange_list(self, cli, api):
        api.add("GET", "/api/meta/ip-ranges", {"api": ["75.2.98.97/32"], "vcs": ["52.86.200.106/32"]})
        result = cli("iprange", "list")
        assert result.exit_code == 0
        assert "75.2.98.97/32" in result.output
        assert "vcs" in result.output

    def test_subscription_list(self, cli, api):
        api.add("GET", "/api/v2/organizations/acme/subscription", {
            "data": {"id": "sub-1", "type": "subscriptions", "attributes": {"is-active": True}}
        })
        result = cli("subscription", "list", "-org=acme", "-output=json")
        assert json.loads(result.output)[0]["ID"] == "sub-1"

    def test_stabilitypolicy_read(self, cli, api):
        result = cli("stabilitypolicy", "read")
        assert result.exit_code == 0
        assert "stability-policy" in result.output
        assert api.requests == []

    def test_featureset_implicit_list(self, cli, api):
        api.add("GET", "/api/v2/feature-sets", {"data": []})
        result = cli("featureset")
        assert result.exit_code == 0
        assert "No feature sets found" in result.output


class TestAgentPoolTokens:
    def test_token_list(self, cli, api):
        api.add("GET", "/api/v2/agent-pools/apool-1/authentication-tokens", {
            "data": [{"id": "at-1", "type": "authentication-tokens",
                      "attributes": {"description": "ci"}}]
        })
        result = cli("agentpool", "token-list", "-agent-pool-id=apool-1")
        assert result.exit_code == 0
        assert "at-1" in result.output
