from django.urls import include, path
from rest_framework_nested import routers
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from InternshipTrackApp.api.views import (
    CheckInViewSet,
    DepartmentViewSet,
    EvaluationViewSet,
    FacultyViewSet,
    PlacementViewSet,
    ReportViewSet,
    TaskViewSet,
    UserViewSet,
)

router = routers.SimpleRouter()
router.register(r"tasks", TaskViewSet, basename="task")
router.register(r"reports", ReportViewSet, basename="report")
router.register(r"placements", PlacementViewSet, basename="placement")
router.register(r"evaluations", EvaluationViewSet, basename="evaluation")
router.register(r"check-ins", CheckInViewSet, basename="checkin")
router.register(r"users", UserViewSet, basename="user")
router.register(r"faculties", FacultyViewSet, basename="faculty")

faculties_router = routers.NestedSimpleRouter(router, r"faculties", lookup="faculty")
faculties_router.register(r"departments", DepartmentViewSet, basename="faculty-departments")

urlpatterns = [
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="docs"),
    path("auth/token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("", include(router.urls)),
    path("", include(faculties_router.urls)),
]
