import json

from actor_runner.resolve import resolve_input_schema

BUILD_SCHEMA = {
    "title": "Build input",
    "type": "object",
    "properties": {"startUrls": {"type": "array", "title": "Start URLs", "editor": "requestListSources"}},
    "required": ["startUrls"],
}
VERSION_SCHEMA = {
    "properties": {
        "maxItems": {"type": "integer", "title": "Max items", "minimum": 1, "maximum": 1000, "default": 10},
        "mode": {"type": "string", "title": "Mode", "enum": ["fast", "full"]},
    },
    "required": ["mode", "mode"],
}
ACTOR_SCHEMA = {"properties": {"query": {"type": "string", "title": "Query"}}}


def test_default_build_schema_wins():
    actor = {
        "defaultRunOptions": {"build": {"inputSchema": BUILD_SCHEMA}},
        "versions": [{"inputSchema": VERSION_SCHEMA}],
        "inputSchema": ACTOR_SCHEMA,
    }
    schema = resolve_input_schema(actor)
    assert list(schema.properties) == ["startUrls"]
    assert schema.required == ["startUrls"]


def test_latest_version_used_when_build_schema_absent():
    actor = {"defaultRunOptions": {"build": "latest"}, "versions": [{"inputSchema": VERSION_SCHEMA}, {"inputSchema": ACTOR_SCHEMA}]}
    schema = resolve_input_schema(actor)

    assert not schema.is_empty
    assert schema.properties["maxItems"].maximum == 1000
    assert schema.properties["mode"].enum == ["fast", "full"]
    assert schema.required == ["mode"]


def test_version_schema_stored_as_json_string():
    actor = {"versions": [{"inputSchema": json.dumps(VERSION_SCHEMA)}]}
    schema = resolve_input_schema(actor)
    assert schema.properties["maxItems"].default == 10


def test_actor_record_schema_is_last_resort():
    schema = resolve_input_schema({"versions": [{"versionNumber": "0.1"}], "inputSchema": ACTOR_SCHEMA})
    assert list(schema.properties) == ["query"]


def test_malformed_and_empty_candidates_fall_through():
    actor = {
        "defaultRunOptions": {"build": {"inputSchema": {}}},
        "versions": [{"inputSchema": "{not json"}],
        "inputSchema": ACTOR_SCHEMA,
    }
    assert list(resolve_input_schema(actor).properties) == ["query"]


def test_no_schema_anywhere_is_empty():
    for actor in ({}, {"versions": []}, {"defaultRunOptions": None}, None):
        schema = resolve_input_schema(actor)
        assert schema.is_empty
        assert schema.to_payload() == {"properties": {}, "required": []}


def test_payload_keeps_editor_hints():
    payload = resolve_input_schema({"inputSchema": BUILD_SCHEMA}).to_payload()
    assert payload["properties"]["startUrls"]["editor"] == "requestListSources"
