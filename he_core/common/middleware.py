from __future__ import annotations

import logging
import uuid

from django.http import HttpRequest, HttpResponse
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger(__name__)

REQUEST_ID_META_KEY = "HTTP_X_REQUEST_ID"
REQUEST_ID_HEADER = "X-Request-Id"


class RequestIdMiddleware(MiddlewareMixin):
    """
    Attaches a request id to every request.

    If an X-Request-Id header exists it is reused, otherwise a UUID is generated.
    The id is exposed as request.request_id (the error envelope reports the same value)
    and echoed back on the response.
    """

    def process_request(self, request: HttpRequest) -> None:
        request_id = request.META.get(REQUEST_ID_META_KEY)
        if not request_id:
            request_id = uuid.uuid4().hex
        request.request_id = request_id
        return None

    def process_response(self, request: HttpRequest, response: HttpResponse) -> HttpResponse:
        request_id = getattr(request, "request_id", None)
        if request_id:
            response[REQUEST_ID_HEADER] = request_id
        return response
