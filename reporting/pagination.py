"""
List responses shared by the collection endpoints.

Without a ``page`` query parameter the full list is returned as a plain
array.  With ``page`` (and optionally ``limit``) the response becomes
``{"data": [...], "total": n, "page": p, "limit": l}`` which is what the
SPA data provider reads.  ``sortBy``/``sortOrder`` are honoured for the
fields an endpoint whitelists.
"""
from __future__ import annotations

from typing import Callable, Dict, Optional

from rest_framework import serializers
from rest_framework.response import Response

DEFAULT_LIMIT = 20
MAX_LIMIT = 200


class PageQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, min_value=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=MAX_LIMIT)
    sortBy = serializers.CharField(required=False)
    sortOrder = serializers.ChoiceField(choices=['asc', 'desc', 'ASC', 'DESC'], required=False)


def paginated_response(request, qs, serialize: Callable, sort_fields: Optional[Dict[str, str]] = None) -> Response:
    q = PageQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data

    sort_by = vd.get('sortBy')
    if sort_fields and sort_by in sort_fields:
        field = sort_fields[sort_by]
        desc = (vd.get('sortOrder') or 'asc').lower() == 'desc'
        qs = qs.order_by(f"{'-' if desc else ''}{field}", 'id')

    page = vd.get('page')
    if not page:
        return Response([serialize(obj) for obj in qs])

    limit = vd.get('limit') or DEFAULT_LIMIT
    total = qs.count()
    start = (page - 1) * limit
    rows = [serialize(obj) for obj in qs[start:start + limit]]
    return Response({'data': rows, 'total': total, 'page': page, 'limit': limit})
