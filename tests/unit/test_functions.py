from chatstream.functions import (
    Function,
    function,
    get_required_params,
    normalize_to_json_type,
    parse_properties,
)


# ---------------------------------------------------------------------------
# Schema generation
# ---------------------------------------------------------------------------


class TestParseProperties:
    def test_python_types_map_to_json_schema_types(self):
        def func(a: str, b: int, c: float, d: bool, e: list, f: dict):
            pass

        props = parse_properties(func)
        assert props["a"]["type"] == "string"
        assert props["b"]["type"] == "integer"
        assert props["c"]["type"] == "number"
        assert props["d"]["type"] == "boolean"
        assert props["e"]["type"] == "array"
        assert props["f"]["type"] == "object"

    def test_unannotated_param_defaults_to_string(self):
        def func(x):
            pass

        assert parse_properties(func)["x"]["type"] == "string"

    def test_var_args_skipped(self):
        def func(q: str, *args, **kwargs):
            pass

        assert list(parse_properties(func)) == ["q"]
        assert get_required_params(func) == ["q"]

    def test_optional_params_not_required(self):
        def func(name: str, greeting: str = "hi"):
            pass

        assert get_required_params(func) == ["name"]

    def test_unknown_type_is_string(self):
        assert normalize_to_json_type(bytes) == "string"


# ---------------------------------------------------------------------------
# Function descriptors
# ---------------------------------------------------------------------------


class TestFunction:
    def test_decorator_builds_descriptor(self):
        @function
        def get_weather(city: str, days: int = 1):
            """Look up the forecast for a city."""

        assert isinstance(get_weather, Function)
        assert get_weather.model_dump() == {
            "name": "get_weather",
            "description": "Look up the forecast for a city.",
            "parameters": {
                "type": "object",
                "properties": {
                    "city": {"type": "string"},
                    "days": {"type": "integer"},
                },
                "required": ["city"],
            },
        }

    def test_missing_docstring_gives_no_description(self):
        def ping():
            pass

        descriptor = Function.from_callable(ping)
        assert descriptor.description is None
        assert "description" not in descriptor.model_dump(exclude_none=True)

    def test_default_parameters_schema(self):
        assert Function(name="noop").parameters == {
            "type": "object", "properties": {},
        }
