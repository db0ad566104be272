from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class EnvelopePagination(PageNumberPagination):
    """
    ``page``/``limit`` pagination that wraps results in the API envelope::

        {"success": true, "data": {"<results_key>": [...],
                                   "pagination": {"current", "pages", "total", "limit"}}}

    Views choose the collection name through a ``results_key`` attribute.
    Pages past the end return an empty list rather than a 404.
    """
    page_size_query_param = 'limit'
    page_size_query_description = 'Items per page (max 100)'
    page_query_description = 'Page number (1-based)'
    max_page_size = 100

    def paginate_queryset(self, queryset, request, view=None):
        self.request = request
        self.results_key = getattr(view, 'results_key', 'results')
        self.limit = self.get_page_size(request)
        paginator = self.django_paginator_class(queryset, self.limit)

        page_number = request.query_params.get(self.page_query_param) or 1
        self.page = paginator.get_page(page_number)
        self.current = self.page.number
        if str(page_number).isdigit() and int(page_number) > paginator.num_pages:
            # get_page falls back to the last page
            self.current = int(page_number)
            return []
        return list(self.page)

    def get_pagination_info(self):
        paginator = self.page.paginator
        return {
            'current': self.current,
            'pages': paginator.num_pages if paginator.count else 0,
            'total': paginator.count,
            'limit': self.limit,
        }

    def get_paginated_response(self, data):
        return Response({
            'success': True,
            'data': {
                self.results_key: data,
                'pagination': self.get_pagination_info(),
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
                        'results': schema,
                        'pagination': {
                            'type': 'object',
                            'properties': {
                                'current': {'type': 'integer'},
                                'pages': {'type': 'integer'},
                                'total': {'type': 'integer'},
                                'limit': {'type': 'integer'},
                            },
                        },
                    },
                },
            },
        }
