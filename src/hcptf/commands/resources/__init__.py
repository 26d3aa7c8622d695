"""Command tables, one module per resource family.

Each module exposes ``COMMANDS``, a list of :class:`~hcptf.commands.base.CommandSpec`.
"""

from . import (
    account,
    agent,
    audittrail,
    auth,
    context,
    explorer,
    hyok,
    notification,
    oidc,
    organization,
    platform,
    policy,
    project,
    publicregistry,
    registry,
    run,
    runtask,
    stack,
    state,
    team,
    variable,
    vcs,
    workspace,
)

MODULES = (
    auth,
    context,
    account,
    workspace,
    run,
    organization,
    variable,
    team,
    policy,
    project,
    state,
    notification,
    runtask,
    agent,
    vcs,
    audittrail,
    stack,
    registry,
    publicregistry,
    oidc,
    hyok,
    explorer,
    platform,
)

__all__ = ["MODULES"]
