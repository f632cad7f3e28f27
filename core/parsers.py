"""
JSON parser accepting camelCase keys.
"""

from rest_framework.parsers import JSONParser

from core.casing import underscoreize


class CamelCaseJSONParser(JSONParser):
    """Parses camelCase JSON bodies into snake_case data for serializers."""

    def parse(self, stream, media_type=None, parser_context=None):
        data = super().parse(stream, media_type, parser_context)
        return underscoreize(data)
