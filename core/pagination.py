"""
Page/limit pagination rendered inside the success envelope:
{ success, data: { items, pagination: {page, limit, total, pages} } }
"""
import math

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from core.utils import query_int


class EnvelopePagination(PageNumberPagination):
    page_size = 10
    page_query_param = 'page'
    page_size_query_param = 'limit'
    max_page_size = 100

    def __init__(self, page_size=None):
        if page_size is not None:
            self.page_size = page_size

    def paginate_queryset(self, queryset, request, view=None):
        """Out-of-range pages return an empty item list rather than 404."""
        self.request = request
        params = request.query_params
        self.page_number = query_int(params, self.page_query_param, default=1, min_value=1)
        self.limit = query_int(
            params, self.page_size_query_param,
            default=self.page_size, min_value=1, max_value=self.max_page_size,
        )
        if isinstance(queryset, list):
            self.total = len(queryset)
        else:
            self.total = queryset.count()
        offset = (self.page_number - 1) * self.limit
        return list(queryset[offset:offset + self.limit])

    def get_pagination_data(self):
        return {
            'page': self.page_number,
            'limit': self.limit,
            'total': self.total,
            'pages': math.ceil(self.total / self.limit) if self.total else 0,
        }

    def get_paginated_response(self, data):
        return Response({
            'success': True,
            'data': {
                'items': data,
                'pagination': self.get_pagination_data(),
            },
        })

    def get_paginated_response_schema(self, schema):
        return {
            'type': 'object',
            'properties': {
                'success': {'type': 'boolean'},
                'data': {
                    'type': 'object',
                    'properties': {
                        'items': schema,
                        'pagination': {
                            'type': 'object',
                            'properties': {
                                'page': {'type': 'integer'},
                                'limit': {'type': 'integer'},
                                'total': {'type': 'integer'},
                                'pages': {'type': 'integer'},
                            },
                        },
                    },
                },
            },
        }


def paginate(queryset, request, serializer_class, page_size=None, context=None):
    """Paginate a queryset and serialize the current page into the envelope response."""
    paginator = EnvelopePagination(page_size=page_size)
    page = paginator.paginate_queryset(queryset, request)
    serializer = serializer_class(page, many=True, context=context or {'request': request})
    return paginator.get_paginated_response(serializer.data)
