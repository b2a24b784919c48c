"""
``page``/``limit`` pagination for list endpoints.

Out of range values are clamped rather than rejected: page starts at 1,
limit falls back to ``ITEMS_PER_PAGE`` and is capped at ``MAX_ITEMS_PER_PAGE``.
"""

from flask import request, current_app


def get_pagination_params():
    """Returns (page, limit) from the query string"""
    default_limit = current_app.config['ITEMS_PER_PAGE']
    page = max(request.args.get('page', 1, type=int), 1)
    limit = request.args.get('limit', default_limit, type=int)
    if limit < 1:
        limit = default_limit
    return page, min(limit, current_app.config['MAX_ITEMS_PER_PAGE'])


def page_meta(page):
    return {
        'page': page.page,
        'limit': page.per_page,
        'total': page.total,
        'totalPages': page.pages,
    }


def paginated_response(query, serializer=None):
    """Response envelope for one page of ``query``, rows rendered with ``to_dict`` by default"""
    page_number, limit = get_pagination_params()
    page = query.paginate(page=page_number, per_page=limit, error_out=False)
    serializer = serializer or (lambda record: record.to_dict())
    return {
        'success': True,
        'data': [serializer(record) for record in page.items],
        'pagination': page_meta(page)
    }
