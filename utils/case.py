"""
Key-case conversion at the API boundary. Borrower and admin clients send and
expect camelCase; everything behind the routers works on snake_case.
"""
from typing import Any, Callable

from pydantic import BaseModel
from pydantic.alias_generators import to_camel, to_snake


def _convert_keys(obj: Any, convert: Callable[[str], str]) -> Any:
    if isinstance(obj, dict):
        return {
            (convert(k) if isinstance(k, str) else k): _convert_keys(v, convert)
            for k, v in obj.items()
        }
    if isinstance(obj, list):
        return [_convert_keys(x, convert) for x in obj]
    return obj


def dict_keys_to_camel(obj: Any) -> Any:
    """Recursively camelCase dict keys, nested loan_details included."""
    return _convert_keys(obj, to_camel)


def dict_keys_to_snake(obj: Any) -> Any:
    """Recursively snake_case dict keys; already snake_case keys pass through."""
    return _convert_keys(obj, to_snake)


def camel_payload(model: BaseModel) -> dict[str, Any]:
    """JSON-ready dump of a result schema with camelCase keys."""
    return dict_keys_to_camel(model.model_dump(mode="json"))
