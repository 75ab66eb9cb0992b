# he_core/common/views.py
from django.db import connection
from django.db.utils import OperationalError
from django.utils import timezone
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView


class HealthView(APIView):
    """
    Liveness + database reachability. Unauthenticated.
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(tags=["Health"], responses={200: OpenApiTypes.OBJECT, 503: OpenApiTypes.OBJECT})
    def get(self, request):
        db_ok = True
        try:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1")
        except OperationalError:
            db_ok = False

        body = {
            "status": "healthy" if db_ok else "degraded",
            "database": "ok" if db_ok else "unavailable",
            "timestamp": timezone.now().isoformat(),
        }
        return Response(body, status=status.HTTP_200_OK if db_ok else status.HTTP_503_SERVICE_UNAVAILABLE)
