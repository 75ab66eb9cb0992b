from __future__ import annotations

from django.conf import settings
from rest_framework.exceptions import ValidationError
from rest_framework.pagination import BasePagination
from rest_framework.response import Response


def _non_negative_int(raw, *, field: str, default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError({field: "A valid integer is required."})
    if value < 0:
        raise ValidationError({field: "Must be zero or greater."})
    return value


class SkipTakePagination(BasePagination):
    """
    Offset paging with `skip`/`take` query params.
    Responses are plain JSON arrays (clients page by re-requesting with a larger skip).
    """
    skip_query_param = "skip"
    take_query_param = "take"

    def get_bounds(self, request) -> tuple[int, int]:
        default_take = getattr(settings, "HE_DEFAULT_TAKE", 100)
        max_take = getattr(settings, "HE_MAX_TAKE", 1000)

        skip = _non_negative_int(request.query_params.get(self.skip_query_param), field="skip", default=0)
        take = _non_negative_int(request.query_params.get(self.take_query_param), field="take", default=default_take)
        return skip, min(take, max_take)

    def paginate_queryset(self, queryset, request, view=None):
        skip, take = self.get_bounds(request)
        self.skip, self.take = skip, take
        return list(queryset[skip: skip + take])

    def get_paginated_response(self, data):
        return Response(data)

    def get_paginated_response_schema(self, schema):
        return schema

    def get_schema_operation_parameters(self, view):
        return [
            {
                "name": self.skip_query_param,
                "required": False,
                "in": "query",
                "description": "Number of records to skip (default 0).",
                "schema": {"type": "integer", "minimum": 0},
            },
            {
                "name": self.take_query_param,
                "required": False,
                "in": "query",
                "description": "Number of records to return (default 100).",
                "schema": {"type": "integer", "minimum": 0},
            },
        ]


def paginate(request, queryset, serializer_class, *, paginator: BasePagination | None = None) -> Response:
    """
    Shared paging helper so every tenant list endpoint has the same skip/take contract.
    """
    p = paginator or SkipTakePagination()
    page = p.paginate_queryset(queryset, request)
    ser = serializer_class(page, many=True)
    return p.get_paginated_response(ser.data)
