"""
Base websocket consumer speaking the same camelCase JSON as the REST API.
"""

from channels.generic.websocket import AsyncJsonWebsocketConsumer

from core.casing import camelize, underscoreize


class CamelCaseJsonWebsocketConsumer(AsyncJsonWebsocketConsumer):
    """
    Handlers work with snake_case dicts; frames on the wire use camelCase keys.
    """

    @classmethod
    async def decode_json(cls, text_data):
        return underscoreize(await super().decode_json(text_data))

    @classmethod
    async def encode_json(cls, content):
        return await super().encode_json(camelize(content))
