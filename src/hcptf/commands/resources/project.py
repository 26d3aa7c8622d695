"""Project commands, including team access to projects."""

from __future__ import annotations

from ..helpers import (
    ORG,
    choice_flag,
    create_command,
    delete_command,
    id_flag,
    list_command,
    read_command,
    relation,
    resource,
    text_flag,
    update_command,
)

PROJECT_FIELDS = [
    ("ID", "id"),
    ("Name", "name"),
    ("Description", "description"),
    ("Workspace Count", "workspace-count"),
    ("Team Count", "team-count"),
    ("Created At", "created-at"),
]
ACCESS_FIELDS = [
    ("ID", "id"),
    ("Access", "access"),
    ("Project", "rel:project"),
    ("Team", "rel:team"),
]
PROJECT_ACCESS = ["read", "write", "maintain", "admin", "custom"]
ACCESS_HELP = "Access level: read, write, maintain, admin, or custom"

COMMANDS = [
    list_command(
        "project list",
        "List projects",
        "/organizations/{organization}/projects",
        [("ID", "id"), ("Name", "name"), ("Description", "description"),
         ("Workspaces", "workspace-count")],
        flags=[ORG, text_flag("name", "Filter by project name")],
        params={"name": "filter[names]"},
        empty="No projects found",
    ),
    create_command(
        "project create",
        "Create a project",
        "/organizations/{organization}/projects",
        "projects",
        PROJECT_FIELDS,
        flags=[ORG,
               text_flag("name", "Project name", required=True),
               text_flag("description", "Project description")],
        attributes={"name": "name", "description": "description"},
        success="Project '{name}' created",
    ),
    read_command(
        "project read",
        "Show project details",
        "/projects/{id}",
        PROJECT_FIELDS,
        flags=[id_flag("Project")],
    ),
    update_command(
        "project update",
        "Update a project",
        "/projects/{id}",
        "projects",
        PROJECT_FIELDS,
        flags=[id_flag("Project"),
               text_flag("name", "New project name"),
               text_flag("description", "Project description")],
        attributes={"name": "name", "description": "description"},
        success="Project '{id}' updated",
    ),
    delete_command(
        "project delete",
        "Delete a project",
        "/projects/{id}",
        "Project '{id}' deleted successfully",
        flags=[id_flag("Project")],
        confirm="Are you sure you want to delete project '{id}'? (yes/no): ",
    ),
    list_command(
        "project teamaccess list",
        "List team access for a project",
        "/team-projects",
        [("ID", "id"), ("Access", "access"), ("Team", "rel:team")],
        flags=[text_flag("project-id", "Project ID", required=True)],
        params={"project-id": "filter[project][id]"},
        empty="No team access found",
    ),
    create_command(
        "project teamaccess create",
        "Grant a team access to a project",
        "/team-projects",
        "team-projects",
        ACCESS_FIELDS,
        flags=[text_flag("project-id", "Project ID", required=True),
               text_flag("team-id", "Team ID", required=True),
               choice_flag("access", f"{ACCESS_HELP} (required)", PROJECT_ACCESS, required=True)],
        body=lambda inv: resource(
            "team-projects",
            {"access": inv["access"]},
            {"project": relation("projects", inv["project-id"]),
             "team": relation("teams", inv["team-id"])},
        ),
        success="Project team access created",
    ),
    read_command(
        "project teamaccess read",
        "Show project team access details",
        "/team-projects/{id}",
        ACCESS_FIELDS,
        flags=[id_flag("Project team access")],
    ),
    update_command(
        "project teamaccess update",
        "Update team access to a project",
        "/team-projects/{id}",
        "team-projects",
        ACCESS_FIELDS,
        flags=[id_flag("Project team access"),
               choice_flag("access", f"{ACCESS_HELP} (required)", PROJECT_ACCESS, required=True)],
        attributes={"access": "access"},
        success="Project team access '{id}' updated",
    ),
    delete_command(
        "project teamaccess delete",
        "Revoke team access to a project",
        "/team-projects/{id}",
        "Project team access '{id}' deleted successfully",
        flags=[id_flag("Project team access")],
        confirm="Are you sure you want to delete project team access '{id}'? (yes/no): ",
    ),
]
