"""
snake_case <-> camelCase key conversion for API payloads.

Only dictionary keys and query parameter names are converted; values are
left untouched so that free text, URLs and enum values survive the round
trip.
"""

import re
from collections.abc import Mapping

from django.http import QueryDict

_CAMEL_BOUNDARY = re.compile(r'(?<=[a-z0-9])([A-Z])')
_SNAKE_BOUNDARY = re.compile(r'(?<=[a-zA-Z0-9])_([a-z0-9])')


def to_camel(key: str) -> str:
    return _SNAKE_BOUNDARY.sub(lambda m: m.group(1).upper(), key)


def to_snake(key: str) -> str:
    return _CAMEL_BOUNDARY.sub(r'_\1', key).lower()


def _convert(data, convert_key):
    if isinstance(data, Mapping):
        return {
            (convert_key(key) if isinstance(key, str) else key): _convert(value, convert_key)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [_convert(item, convert_key) for item in data]
    return data


def camelize(data):
    """Recursively convert mapping keys to camelCase."""
    return _convert(data, to_camel)


def underscoreize(data):
    """Recursively convert mapping keys to snake_case."""
    return _convert(data, to_snake)


def underscoreize_query_params(query_params: QueryDict) -> QueryDict:
    """
    Query string counterpart of `underscoreize`.

    Parameter names are converted, and so are the field names listed in
    `ordering` (`?ordering=-maxBudget`). Other values are left untouched.
    """
    converted = QueryDict(mutable=True)
    for key, values in query_params.lists():
        key = to_snake(key)
        if key == 'ordering':
            values = [','.join(to_snake(term) for term in value.split(',')) for value in values]
        converted.setlist(key, values)
    return converted
