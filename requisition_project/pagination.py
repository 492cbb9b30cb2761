"""
Automatic pagination for function-based list views.

List endpoints (workflows, PRs, approval queues) return plain lists from
their views; the ``auto_paginate`` decorator slices them and wraps the page
in the standard response envelope:
{
    "status": "success",
    "message": "",
    "data": {"count": ..., "next": ..., "previous": ..., "results": [...]}
}
"""
from functools import wraps

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class StandardResultsSetPagination(PageNumberPagination):
    """
    Project-wide page-number pagination.

    Query Parameters:
    - page: Page number (default: 1)
    - page_size: Items per page (default: 20, max: 100)
    """
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100

    def get_paginated_response(self, data):
        return Response({
            'status': 'success',
            'message': '',
            'data': {
                'count': self.page.paginator.count,
                'next': self.get_next_link(),
                'previous': self.get_previous_link(),
                'results': data
            }
        })


def auto_paginate(view_func):
    """
    Paginate list responses returned by a function-based view.

    Usage:
        @api_view(['GET', 'POST'])
        @auto_paginate
        def workflow_list(request):
            if request.method == 'GET':
                serializer = ApprovalWorkflowListSerializer(workflows, many=True)
                return Response(serializer.data)
            ...

    Only GET responses whose data is a list are paginated; POST responses
    and detail payloads pass through untouched.
    """
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        response = view_func(request, *args, **kwargs)

        if (
            request.method == 'GET' and
            isinstance(response, Response) and
            isinstance(response.data, list)
        ):
            paginator = StandardResultsSetPagination()
            page = paginator.paginate_queryset(response.data, request)

            if page is not None:
                return paginator.get_paginated_response(page)

        return response

    return wrapper
