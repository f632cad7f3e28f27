"""
camelCase <-> snake_case conversion and the renderer/parser pair.
"""

import io
import json

from django.http import QueryDict

from core.casing import camelize, to_camel, to_snake, underscoreize, underscoreize_query_params
from core.parsers import CamelCaseJSONParser
from core.renderers import CamelCaseJSONRenderer


class TestKeyConversion:

    def test_to_camel(self):
        assert to_camel('max_budget') == 'maxBudget'
        assert to_camel('photos_before') == 'photosBefore'
        assert to_camel('id') == 'id'

    def test_to_snake(self):
        assert to_snake('maxBudget') == 'max_budget'
        assert to_snake('urgencyLevel') == 'urgency_level'
        assert to_snake('id') == 'id'

    def test_nested_structures_convert_keys_only(self):
        data = {
            'created_by': {'first_name': 'Léa'},
            'timeline': [{'entry_type': 'status_change', 'message': 'Statut changé vers: in_progress'}],
        }

        converted = camelize(data)

        assert converted == {
            'createdBy': {'firstName': 'Léa'},
            'timeline': [{'entryType': 'status_change', 'message': 'Statut changé vers: in_progress'}],
        }
        assert underscoreize(converted) == data

    def test_query_params_keys_and_ordering_terms(self):
        params = underscoreize_query_params(QueryDict('pageSize=5&urgencyLevel=highLevel&ordering=-maxBudget,createdAt'))

        assert params['page_size'] == '5'
        assert params['urgency_level'] == 'highLevel'
        assert params['ordering'] == '-max_budget,created_at'

    def test_query_params_keep_repeated_values(self):
        params = underscoreize_query_params(QueryDict('isRead=true&isRead=false'))

        assert params.getlist('is_read') == ['true', 'false']


class TestRendererParser:

    def test_renderer_emits_camel_case(self):
        body = CamelCaseJSONRenderer().render({'error_code': 'X', 'meta': {'page_size': 20}})

        assert json.loads(body) == {'errorCode': 'X', 'meta': {'pageSize': 20}}

    def test_parser_accepts_camel_case(self):
        stream = io.BytesIO(json.dumps({'maxBudget': 500, 'urgencyLevel': 'high'}).encode())

        data = CamelCaseJSONParser().parse(stream, 'application/json', {})

        assert data == {'max_budget': 500, 'urgency_level': 'high'}
