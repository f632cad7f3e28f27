"""
API Base Classes - Response envelope and pagination for the Mano-Pro API

All list endpoints and custom actions share one envelope so clients can
handle responses uniformly:
{
    "success": bool,
    "data": {...} | [...],
    "message": str | null,
    "errors": [...] | null,
    "meta": {"timestamp": "ISO8601", "pagination": {...} | absent}
}
"""

from typing import Any, Dict

from django.utils import timezone
from rest_framework import status
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

# =============================================================================
# STANDARD RESPONSE HELPERS
# =============================================================================

class APIResponse:
    """Standardized API response builders for custom actions."""

    @staticmethod
    def success(
        data: Any = None,
        message: str = None,
        status_code: int = status.HTTP_200_OK,
        meta: Dict = None,
    ) -> Response:
        response_meta = {
            "timestamp": timezone.now().isoformat(),
            **(meta or {})
        }
        return Response(
            {
                "success": True,
                "data": data,
                "message": message,
                "errors": None,
                "meta": response_meta,
            },
            status=status_code,
        )

# =============================================================================
# PAGINATION
# =============================================================================

class StandardPagination(PageNumberPagination):
    """
    Standard page-number based pagination with configurable page size.

    Query params:
    - page: Page number (1-indexed)
    - pageSize: Items per page (default: 20, max: 100)
    """
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100

    def get_paginated_response(self, data):
        return Response({
            "success": True,
            "data": data,
            "message": None,
            "errors": None,
            "meta": {
                "timestamp": timezone.now().isoformat(),
                "pagination": {
                    "count": self.page.paginator.count,
                    "page": self.page.number,
                    "page_size": self.get_page_size(self.request),
                    "total_pages": self.page.paginator.num_pages,
                    "next": self.get_next_link(),
                    "previous": self.get_previous_link(),
                }
            }
        })

    def get_paginated_response_schema(self, schema):
        return {
            'type': 'object',
            'properties': {
                'success': {'type': 'boolean'},
                'data': schema,
                'message': {'type': 'string', 'nullable': True},
                'errors': {'type': 'array', 'nullable': True, 'items': {}},
                'meta': {'type': 'object'},
            },
        }
