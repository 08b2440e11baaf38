"""Shared utilities for the backend."""
from utils.case import camel_payload, dict_keys_to_camel, dict_keys_to_snake
from utils.coerce import to_number, to_text

__all__ = [
    "camel_payload",
    "dict_keys_to_camel",
    "dict_keys_to_snake",
    "to_number",
    "to_text",
]
