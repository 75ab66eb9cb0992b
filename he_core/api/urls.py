# he_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from he_core.audit.api.views import AuditViewSet
from he_core.care_transitions.api.views import CareTransitionViewSet, DashboardViewSet
from he_core.encounters.api.views import EncounterViewSet
from he_core.hospitals.api.views import HospitalViewSet
from he_core.iam.api.account import AccountView
from he_core.iam.api.auth import RefreshView, TokenView
from he_core.iam.api.me import ActivateInvitationsView, MyTenantsView
from he_core.iam.api.members import MembersViewSet
from he_core.patients.api.views import PatientViewSet
from he_core.tenants.api.views import TenantViewSet

router = DefaultRouter()

# ViewSet-backed modules (centralized)
router.register(r"tenants", TenantViewSet, basename="tenants")
router.register(r"hospitals", HospitalViewSet, basename="hospitals")
router.register(r"patients", PatientViewSet, basename="patients")
router.register(r"encounters", EncounterViewSet, basename="encounters")
router.register(r"audit", AuditViewSet, basename="audit")
router.register(r"care-transitions", CareTransitionViewSet, basename="care-transitions")
router.register(r"dashboard", DashboardViewSet, basename="dashboard")
router.register(r"members", MembersViewSet, basename="members")

urlpatterns = [
    # Auth
    path("auth/token/", TokenView.as_view(), name="token"),
    path("auth/refresh/", RefreshView.as_view(), name="token-refresh"),

    # Caller-scoped (no tenant header)
    path("me/tenants/", MyTenantsView.as_view(), name="me-tenants"),
    path("me/activate-invitations/", ActivateInvitationsView.as_view(), name="me-activate-invitations"),
    path("account/", AccountView.as_view(), name="account"),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
