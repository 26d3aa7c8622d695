"""Shared flags, JSON:API helpers and spec builders for resource commands.

Most commands follow one of a handful of shapes (list a collection, show a
record, create, update, delete). The builders here produce a
:class:`~hcptf.commands.base.CommandSpec` for those shapes so the resource
modules only declare paths, flags and the fields to display.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..errors import InvalidValueError
from .base import CommandSpec, Flag, FlagKind, Invocation

Column = Tuple[str, str]

# -- common flags ------------------------------------------------------------

ORG = Flag(name="organization", aliases=["org"], help="Organization name (required)", required=True)
ORG_OPTIONAL = Flag(name="organization", aliases=["org"], help="Organization name")
WORKSPACE = Flag(name="workspace", help="Workspace name (required)", required=True)
WORKSPACE_ID = Flag(name="workspace-id", help="Workspace ID (required)", required=True)


def id_flag(what: str, name: str = "id", required: bool = True) -> Flag:
    suffix = " (required)" if required else ""
    return Flag(name=name, help=f"{what} ID{suffix}", required=required)


def text_flag(name: str, help: str, required: bool = False, **kwargs) -> Flag:
    if required and "(required)" not in help:
        help += " (required)"
    return Flag(name=name, help=help, required=required, **kwargs)


def bool_flag(name: str, help: str, default: bool = False) -> Flag:
    return Flag(name=name, help=help, kind=FlagKind.BOOL, default=default)


def tristate_flag(name: str, help: str) -> Flag:
    return Flag(name=name, help=f"{help} (true/false)", kind=FlagKind.TRISTATE)


def list_flag(name: str, help: str, required: bool = False) -> Flag:
    if required:
        help += " (required)"
    return Flag(name=name, help=help, kind=FlagKind.LIST, required=required)


def choice_flag(name: str, help: str, choices: Sequence[str], default: Optional[str] = None,
                required: bool = False) -> Flag:
    return Flag(name=name, help=help, kind=FlagKind.CHOICE, choices=list(choices),
                default=default, required=required)


def int_flag(name: str, help: str, default: Optional[int] = None) -> Flag:
    return Flag(name=name, help=help, kind=FlagKind.INT, default=default)


def date_flag(name: str, help: str, required: bool = False) -> Flag:
    return Flag(name=name, help=help, kind=FlagKind.DATE, required=required)


# -- JSON:API helpers --------------------------------------------------------


def pluck(item: Mapping[str, Any], key: str) -> Any:
    """Read a display field from a JSON:API resource object.

    ``id`` and ``type`` read the resource identity, ``rel:<name>`` reads a
    relationship's ID, anything else is a (dotted) attribute path.
    """
    if key in ("id", "type"):
        return item.get(key)
    if key.startswith("rel:"):
        rel = (item.get("relationships") or {}).get(key[4:]) or {}
        data = rel.get("data")
        if isinstance(data, list):
            return ", ".join(d.get("id", "") for d in data)
        return data.get("id") if isinstance(data, dict) else None
    value: Any = item.get("attributes") or {}
    for part in key.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


def rows_for(items: Iterable[Mapping[str, Any]], columns: Sequence[Column]) -> List[List[Any]]:
    return [[pluck(item, key) for _, key in columns] for item in items]


def fields_for(item: Mapping[str, Any], fields: Sequence[Column]) -> Dict[str, Any]:
    return {label: pluck(item, key) for label, key in fields}


def resource(type_: str, attributes: Optional[Dict[str, Any]] = None,
             relationships: Optional[Dict[str, Any]] = None, id: Optional[str] = None) -> Dict[str, Any]:
    """Build a JSON:API request document."""
    data: Dict[str, Any] = {"type": type_}
    if id:
        data["id"] = id
    if attributes is not None:
        data["attributes"] = attributes
    if relationships:
        data["relationships"] = relationships
    return {"data": data}


def relation(type_: str, id: str) -> Dict[str, Any]:
    return {"data": {"type": type_, "id": id}}


def relation_list(type_: str, ids: Iterable[str]) -> Dict[str, Any]:
    return {"data": [{"type": type_, "id": i} for i in ids]}


def identifiers(type_: str, ids: Iterable[str]) -> Dict[str, Any]:
    """Document for relationship endpoints (``{"data": [{type, id}, ...]}``)."""
    return {"data": [{"type": type_, "id": i} for i in ids]}


def collect(inv: Invocation, mapping: Mapping[str, str]) -> Dict[str, Any]:
    """Attributes for every provided flag in ``{flag: attribute}``."""
    attrs = {}
    for flag, attr in mapping.items():
        if inv.provided(flag):
            attrs[attr] = inv.get(flag)
    return attrs


def show_items(inv: Invocation, items: List[Mapping[str, Any]], columns: Sequence[Column],
               empty: str) -> None:
    if not items and not inv.is_json:
        inv.message(empty)
        return
    inv.table([h for h, _ in columns], rows_for(items, columns))


def show_item(inv: Invocation, item: Mapping[str, Any], fields: Sequence[Column]) -> None:
    inv.record(fields_for(item, fields))


def data_of(doc: Optional[Mapping[str, Any]]) -> Any:
    return (doc or {}).get("data") or {}


def query(inv: Invocation, mapping: Mapping[str, str]) -> Dict[str, Any]:
    """Query parameters for every provided flag in ``{flag: param}``."""
    params: Dict[str, Any] = {}
    for flag, param in mapping.items():
        if inv.provided(flag):
            value = inv.get(flag)
            params[param] = ",".join(value) if isinstance(value, list) else value
    return params


# -- spec builders -----------------------------------------------------------

ItemsHook = Callable[[Invocation, Dict[str, Any]], List[Dict[str, Any]]]
BodyHook = Callable[[Invocation], Dict[str, Any]]


def list_command(name: str, synopsis: str, path: str, columns: Sequence[Column],
                 flags: Sequence[Flag] = (), params: Optional[Mapping[str, str]] = None,
                 empty: Optional[str] = None, page_size: Optional[int] = 100,
                 **kwargs) -> CommandSpec:
    """GET a collection and render it as a table."""
    empty = empty or f"No {synopsis.split(' ', 1)[-1].lower()} found"

    def handler(inv: Invocation) -> None:
        qp = query(inv, params or {})
        if page_size:
            qp.setdefault("page[size]", page_size)
        doc = inv.client.get(inv.path(path), params=qp)
        show_items(inv, list((doc or {}).get("data") or []), columns, empty)

    return CommandSpec(name=name, synopsis=synopsis, handler=handler, flags=list(flags), **kwargs)


def read_command(name: str, synopsis: str, path: str, fields: Sequence[Column],
                 flags: Sequence[Flag] = (), params: Optional[Mapping[str, str]] = None,
                 **kwargs) -> CommandSpec:
    """GET a single resource and render it as key/value pairs."""

    def handler(inv: Invocation) -> None:
        doc = inv.client.get(inv.path(path), params=query(inv, params or {}) or None)
        show_item(inv, data_of(doc), fields)

    return CommandSpec(name=name, synopsis=synopsis, handler=handler, flags=list(flags), **kwargs)


def write_command(name: str, synopsis: str, method: str, path: str, type_: str,
                  fields: Sequence[Column], flags: Sequence[Flag] = (),
                  attributes: Optional[Mapping[str, str]] = None,
                  body: Optional[BodyHook] = None, success: Optional[str] = None,
                  **kwargs) -> CommandSpec:
    """POST or PATCH a JSON:API document built from flags."""

    def handler(inv: Invocation) -> None:
        if body is not None:
            document = body(inv)
        else:
            document = resource(type_, collect(inv, attributes or {}))
        doc = inv.client.request(method, inv.path(path), json=document)
        if success:
            inv.notice(success.format(**inv.params))
        if doc:
            show_item(inv, data_of(doc), fields)

    return CommandSpec(name=name, synopsis=synopsis, handler=handler, flags=list(flags), **kwargs)


def create_command(name: str, synopsis: str, path: str, type_: str, fields: Sequence[Column],
                   **kwargs) -> CommandSpec:
    return write_command(name, synopsis, "POST", path, type_, fields, **kwargs)


def update_command(name: str, synopsis: str, path: str, type_: str, fields: Sequence[Column],
                   **kwargs) -> CommandSpec:
    return write_command(name, synopsis, "PATCH", path, type_, fields, **kwargs)


def delete_command(name: str, synopsis: str, path: str, success: str,
                   flags: Sequence[Flag] = (), confirm: Optional[str] = None,
                   body: Optional[BodyHook] = None, **kwargs) -> CommandSpec:
    """DELETE a resource, asking for confirmation unless -force is given."""

    def handler(inv: Invocation) -> None:
        inv.client.delete(inv.path(path), json=body(inv) if body else None)
        inv.message(success.format(**inv.params))

    kwargs.setdefault("output", False)
    return CommandSpec(name=name, synopsis=synopsis, handler=handler, flags=list(flags),
                       confirm=confirm, **kwargs)


def action_command(name: str, synopsis: str, path: str, success: str,
                   flags: Sequence[Flag] = (), body: Optional[BodyHook] = None,
                   fields: Optional[Sequence[Column]] = None, method: str = "POST",
                   **kwargs) -> CommandSpec:
    """POST to an ``/actions/...`` style endpoint and report the outcome."""

    def handler(inv: Invocation) -> None:
        doc = inv.client.request(method, inv.path(path), json=body(inv) if body else None)
        if fields and doc:
            inv.notice(success.format(**inv.params))
            show_item(inv, data_of(doc), fields)
        elif inv.is_json:
            inv.formatter.json(doc or {"status": "ok"})
        else:
            inv.message(success.format(**inv.params))

    kwargs.setdefault("output", bool(fields))
    return CommandSpec(name=name, synopsis=synopsis, handler=handler, flags=list(flags), **kwargs)


def raw_command(name: str, synopsis: str, method: str, path: str,
                flags: Sequence[Flag] = (), payload_flag: Optional[str] = None,
                **kwargs) -> CommandSpec:
    """Send a request and print the raw JSON:API response."""

    def handler(inv: Invocation) -> None:
        document = None
        if payload_flag:
            document = parse_payload(inv, payload_flag)
        doc = inv.client.request(method, inv.path(path), json=document)
        inv.formatter.api_response(doc)

    return CommandSpec(name=name, synopsis=synopsis, handler=handler, flags=list(flags), **kwargs)


def parse_payload(inv: Invocation, flag: str) -> Dict[str, Any]:
    raw = inv.get(flag)
    if not raw:
        raise InvalidValueError(flag, "", "a JSON document")
    try:
        doc = json.loads(raw)
    except ValueError:
        raise InvalidValueError(flag, raw[:40], "a JSON document") from None
    if not isinstance(doc, dict):
        raise InvalidValueError(flag, raw[:40], "a JSON object")
    return doc
