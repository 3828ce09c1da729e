import inspect
from typing import Any, Callable

from pydantic import BaseModel, Field


class Function(BaseModel):
    """A callable-function descriptor offered to the model.

    Dumps to ``{"name", "description", "parameters"}``, the shape the
    ``functions`` request field expects.
    """

    name: str
    description: str | None = None
    parameters: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )

    @classmethod
    def from_callable(cls, func: Callable) -> "Function":
        return cls(
            name=func.__name__,
            description=inspect.getdoc(func),
            parameters={
                "type": "object",
                "properties": parse_properties(func),
                "required": get_required_params(func),
            },
        )


def normalize_to_json_type(python_type: Any) -> str:
    type_mapping = {
        'str': 'string',
        'int': 'integer',
        'float': 'number',
        'bool': 'boolean',
        'NoneType': 'null',
        'dict': 'object',
        'list': 'array',
        'tuple': 'array',
        'set': 'array',
    }
    name = getattr(python_type, "__name__", str(python_type))
    return type_mapping.get(name, 'string')


def parse_properties(func: Callable) -> dict[str, dict[str, str]]:
    signature = inspect.signature(func)
    properties = {}
    for param_name, param in signature.parameters.items():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        properties[param_name] = {
            "type": normalize_to_json_type(param.annotation),
        }
    return properties


def get_required_params(func: Callable) -> list[str]:
    signature = inspect.signature(func)
    return [
        name
        for name, param in signature.parameters.items()
        if param.default is inspect.Parameter.empty
        and param.kind not in (param.VAR_POSITIONAL, param.VAR_KEYWORD)
    ]


def function(func: Callable) -> Function:
    """Decorator turning a plain function into a :class:`Function`."""
    return Function.from_callable(func)
