"""
JSON renderer emitting camelCase keys.
"""

from rest_framework.renderers import JSONRenderer

from core.casing import camelize


class CamelCaseJSONRenderer(JSONRenderer):
    """Renders serializer output (snake_case) as camelCase JSON."""

    def render(self, data, accepted_media_type=None, renderer_context=None):
        return super().render(camelize(data), accepted_media_type, renderer_context)
