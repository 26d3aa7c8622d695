import io
import json

from hcptf.output import Formatter, api_data_rows, format_value


def test_format_value():
    assert format_value(None) == "-"
    assert format_value(True) == "true"
    assert format_value({"b": 1, "a": 2}) == '{"a": 2, "b": 1}'
    assert format_value(3) == "3"


def test_unknown_format_falls_back_to_table():
    assert Formatter("yaml").format == "table"
    assert Formatter(None).format == "table"
    assert Formatter("JSON").is_json


def test_table_renders_headers_and_cells():
    out = io.StringIO()
    Formatter("table", out).table(["ID", "Name"], [["ws-1", "prod"], ["ws-2", None]])
    text = out.getvalue()
    assert "ID" in text and "Name" in text
    assert "ws-1" in text and "prod" in text
    assert "-" in text


def test_table_does_not_truncate_long_values():
    out = io.StringIO()
    value = "x" * 150
    Formatter("table", out).table(["ID"], [[value]])
    assert value in out.getvalue()


def test_table_as_json():
    out = io.StringIO()
    Formatter("json", out).table(["ID", "Locked"], [["ws-1", False]])
    assert json.loads(out.getvalue()) == [{"ID": "ws-1", "Locked": "false"}]


def test_key_value():
    out = io.StringIO()
    Formatter("table", out).key_value({"ID": "ws-1", "Terraform Version": "1.7.0"})
    assert out.getvalue() == "ID:                ws-1\nTerraform Version: 1.7.0\n"


def test_key_value_as_json():
    out = io.StringIO()
    Formatter("json", out).key_value({"ID": "ws-1", "Count": 2})
    assert json.loads(out.getvalue()) == {"ID": "ws-1", "Count": 2}


def test_api_response_single_resource():
    out = io.StringIO()
    Formatter("table", out).api_response(
        {"data": {"id": "ws-1", "type": "workspaces", "attributes": {"name": "prod"}}}
    )
    assert "ID:   ws-1" in out.getvalue()
    assert "name: prod" in out.getvalue()


def test_api_response_empty():
    out = io.StringIO()
    Formatter("table", out).api_response({"data": []})
    assert out.getvalue() == "No data returned\n"


def test_api_data_rows():
    headers, rows = api_data_rows(
        [
            {"id": "a", "type": "t", "attributes": {"z": 1, "b": 2}},
            {"id": "b", "type": "t", "attributes": {"c": 3}},
        ]
    )
    assert headers == ["ID", "Type", "b", "c", "z"]
    assert rows == [["a", "t", 2, None, 1], ["b", "t", None, 3, None]]
