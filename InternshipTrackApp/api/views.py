"""REST API views for subjects, organization, tasks, reports, placements, evaluations and check-ins."""

from django.db.models import ProtectedError
from django.shortcuts import get_object_or_404

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
    extend_schema_view,
)

from InternshipTrackApp.api.mixins import ArtifactLookupMixin, PaginationMixin, id_query_param
from InternshipTrackApp.api.serializers import (
    CheckInReadSerializer,
    CheckInReviewSerializer,
    CheckInWriteSerializer,
    DepartmentSerializer,
    EvaluationReadSerializer,
    EvaluationWriteSerializer,
    FacultySerializer,
    PlacementReadSerializer,
    PlacementReviewSerializer,
    PlacementWriteSerializer,
    ProfileSerializer,
    ProvisionSubjectSerializer,
    ReportReadSerializer,
    ReportWriteSerializer,
    RoleStatusSerializer,
    TaskReadSerializer,
    TaskWriteSerializer,
    UserSerializer,
    WorkItemReviewSerializer,
)
from InternshipTrackApp.api.throttles import CheckInRateThrottle
from InternshipTrackApp.core.choices import Operation, Resource
from InternshipTrackApp.core.exceptions import Conflict
from InternshipTrackApp.core.permissions import (
    DirectoryReadOrAdmin,
    HasResourceCapability,
    IsActiveSubject,
    IsDirectoryAdmin,
)
from InternshipTrackApp.domain.services import (
    check_in_service,
    directory_service,
    evaluation_service,
    placement_service,
    work_item_service,
)
from InternshipTrackApp.domain.services.assignment_resolver import students_for
from InternshipTrackApp.organization.models import Department, Faculty

AUTH_RESPONSES = {
    401: OpenApiResponse(description="Authentication required."),
    403: OpenApiResponse(description="Not found or access denied."),
    404: OpenApiResponse(description="Not found or access denied."),
}

TRANSITION_RESPONSES = {
    400: OpenApiResponse(description="Validation error."),
    409: OpenApiResponse(description="Invalid state transition or concurrent decision."),
}

ARTIFACT_FILTERS = [
    OpenApiParameter("status", str, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("student", int, OpenApiParameter.QUERY, required=False),
]


# ---------- Tasks & reports ----------
class WorkItemViewSet(ArtifactLookupMixin, PaginationMixin, viewsets.ModelViewSet):
    """CRUD, submit and review for daily work items of one kind."""
    resource: str
    read_serializer_class: type
    write_serializer_class: type

    permission_classes = [IsActiveSubject, HasResourceCapability]
    action_operations = {"submit": Operation.SUBMIT, "set_status": Operation.REVIEW}
    http_method_names = ["get", "post", "put", "patch", "delete", "head", "options"]

    def get_serializer_class(self):
        if self.action in ("create", "update", "partial_update"):
            return self.write_serializer_class
        if self.action == "set_status":
            return WorkItemReviewSerializer
        return self.read_serializer_class

    def get_queryset(self):
        """Work items visible to the caller, optionally filtered by status/student."""
        qs = self.visible_artifacts().select_related("student", "reviewed_by")
        params = self.request.query_params
        if params.get("status"):
            qs = qs.filter(status=params["status"])
        return qs

    def create(self, request: Request, *args, **kwargs) -> Response:
        ser = self.get_serializer(data=request.data)
        ser.is_valid(raise_exception=True)
        item = work_item_service.create_work_item(self.resource, request.user, ser.validated_data)
        return Response(self.read_serializer_class(item).data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, *args, **kwargs) -> Response:
        """Edit a PENDING item (owner only); 409 once it has left PENDING."""
        partial = kwargs.pop("partial", False)
        item = self.get_object()
        ser = self.get_serializer(item, data=request.data, partial=partial)
        ser.is_valid(raise_exception=True)
        updated = work_item_service.update_work_item(self.resource, item, request.user, ser.validated_data)
        return Response(self.read_serializer_class(updated).data)

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        item = self.get_object()
        work_item_service.delete_work_item(self.resource, item, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="submit")
    def submit(self, request: Request, pk: int | None = None) -> Response:
        """Hand a PENDING item over to the reviewers."""
        item = self.get_object()
        submitted = work_item_service.submit_work_item(self.resource, item, request.user)
        return Response(self.read_serializer_class(submitted).data)

    @action(detail=True, methods=["patch"], url_path="status")
    def set_status(self, request: Request, pk: int | None = None) -> Response:
        """Approve or reject (assigned reviewer, department HOD or admin)."""
        item = self.get_object()
        ser = WorkItemReviewSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        reviewed = work_item_service.review_work_item(
            self.resource,
            item,
            request.user,
            ser.validated_data["status"],
            ser.validated_data.get("comments", ""),
        )
        return Response(self.read_serializer_class(reviewed).data)


def _work_item_schema(tag: str, read, write):
    return extend_schema_view(
        list=extend_schema(tags=[tag], parameters=ARTIFACT_FILTERS,
                           responses={200: read(many=True), **AUTH_RESPONSES}),
        retrieve=extend_schema(tags=[tag], responses={200: read, **AUTH_RESPONSES}),
        create=extend_schema(
            tags=[tag], request=write, responses={201: read, **AUTH_RESPONSES},
            extensions={"x-permissions": {"required_roles": ["student"], "ownership": "self"}},
        ),
        update=extend_schema(
            tags=[tag], request=write, responses={200: read, **AUTH_RESPONSES, **TRANSITION_RESPONSES},
            extensions={"x-permissions": {"required_roles": ["student"], "ownership": "owner-while-pending"}},
        ),
        partial_update=extend_schema(
            tags=[tag], request=write, responses={200: read, **AUTH_RESPONSES, **TRANSITION_RESPONSES},
            extensions={"x-permissions": {"required_roles": ["student"], "ownership": "owner-while-pending"}},
        ),
        destroy=extend_schema(
            tags=[tag], responses={204: OpenApiResponse(description="Deleted"), **AUTH_RESPONSES,
                                   **TRANSITION_RESPONSES},
        ),
        submit=extend_schema(tags=[tag], request=None, responses={200: read, **AUTH_RESPONSES,
                                                                   **TRANSITION_RESPONSES}),
        set_status=extend_schema(
            tags=[tag], request=WorkItemReviewSerializer,
            responses={200: read, **AUTH_RESPONSES, **TRANSITION_RESPONSES},
            extensions={"x-permissions": {"required_roles": ["lecturer", "supervisor", "hod", "admin"],
                                          "ownership": "assigned-reviewer"}},
        ),
    )


@_work_item_schema("Tasks", TaskReadSerializer, TaskWriteSerializer)
class TaskViewSet(WorkItemViewSet):
    """Daily task log."""
    resource = Resource.TASK
    read_serializer_class = TaskReadSerializer
    write_serializer_class = TaskWriteSerializer


@_work_item_schema("Reports", ReportReadSerializer, ReportWriteSerializer)
class ReportViewSet(WorkItemViewSet):
    """Daily reports."""
    resource = Resource.REPORT
    read_serializer_class = ReportReadSerializer
    write_serializer_class = ReportWriteSerializer


# ---------- Placements ----------
@extend_schema_view(
    list=extend_schema(tags=["Placements"], parameters=ARTIFACT_FILTERS,
                       responses={200: PlacementReadSerializer(many=True), **AUTH_RESPONSES}),
    retrieve=extend_schema(tags=["Placements"], responses={200: PlacementReadSerializer, **AUTH_RESPONSES}),
    create=extend_schema(
        tags=["Placements"],
        request=PlacementWriteSerializer,
        description="Submit a placement. Resubmitting while pending updates it in place (200).",
        responses={201: PlacementReadSerializer, 200: PlacementReadSerializer,
                   **AUTH_RESPONSES, **TRANSITION_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["student"], "ownership": "self"}},
    ),
    set_status=extend_schema(
        tags=["Placements"],
        request=PlacementReviewSerializer,
        responses={200: PlacementReadSerializer, **AUTH_RESPONSES, **TRANSITION_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["hod", "admin"], "ownership": "department"}},
    ),
    pending=extend_schema(tags=["Placements"],
                          responses={200: PlacementReadSerializer(many=True), **AUTH_RESPONSES}),
)
class PlacementViewSet(
    ArtifactLookupMixin,
    PaginationMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Placement submission and HOD approval."""
    resource = Resource.PLACEMENT
    permission_classes = [IsActiveSubject, HasResourceCapability]
    action_operations = {"set_status": Operation.REVIEW, "pending": Operation.REVIEW}

    def get_serializer_class(self):
        if self.action == "create":
            return PlacementWriteSerializer
        if self.action == "set_status":
            return PlacementReviewSerializer
        return PlacementReadSerializer

    def get_queryset(self):
        qs = self.visible_artifacts().select_related("student")
        params = self.request.query_params
        if params.get("status"):
            qs = qs.filter(status=params["status"])
        return qs.order_by("-submitted_at", "-id")

    def create(self, request: Request, *args, **kwargs) -> Response:
        ser = PlacementWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        placement, created = placement_service.submit_placement(request.user, ser.validated_data)
        code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
        return Response(PlacementReadSerializer(placement).data, status=code)

    @action(detail=True, methods=["patch"], url_path="status")
    def set_status(self, request: Request, pk: int | None = None) -> Response:
        """Approve or reject a pending placement."""
        placement = self.get_object()
        ser = PlacementReviewSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        decided = placement_service.review_placement(
            placement,
            request.user,
            ser.validated_data["status"],
            comments=ser.validated_data.get("comments", ""),
            rejection_reason=ser.validated_data.get("rejection_reason", ""),
        )
        return Response(PlacementReadSerializer(decided).data)

    @action(detail=False, methods=["get"], url_path="pending")
    def pending(self, request: Request) -> Response:
        """Placements awaiting the HOD's decision, limited to the HOD's department."""
        qs = placement_service.pending_for_hod(request.user).order_by("submitted_at", "id")
        return self.paginate_and_respond(qs, PlacementReadSerializer)


# ---------- Evaluations ----------
@extend_schema_view(
    list=extend_schema(
        tags=["Evaluations"],
        parameters=[
            OpenApiParameter("student", int, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("evaluator", int, OpenApiParameter.QUERY, required=False),
        ],
        responses={200: EvaluationReadSerializer(many=True), **AUTH_RESPONSES},
    ),
    retrieve=extend_schema(tags=["Evaluations"], responses={200: EvaluationReadSerializer, **AUTH_RESPONSES}),
    create=extend_schema(
        tags=["Evaluations"],
        request=EvaluationWriteSerializer,
        description="Create or update the caller's evaluation of a student for a date.",
        responses={201: EvaluationReadSerializer, 200: EvaluationReadSerializer,
                   **AUTH_RESPONSES, **TRANSITION_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["lecturer", "supervisor"],
                                      "ownership": "assigned-reviewer"}},
    ),
)
class EvaluationViewSet(
    ArtifactLookupMixin,
    PaginationMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Evaluator scoring of students."""
    resource = Resource.EVALUATION
    permission_classes = [IsActiveSubject, HasResourceCapability]

    def get_serializer_class(self):
        return EvaluationWriteSerializer if self.action == "create" else EvaluationReadSerializer

    def get_queryset(self):
        return evaluation_service.list_evaluations(
            self.request.user,
            student_id=id_query_param(self.request, "student"),
            evaluator_id=id_query_param(self.request, "evaluator"),
        )

    def create(self, request: Request, *args, **kwargs) -> Response:
        ser = EvaluationWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        evaluation, created = evaluation_service.upsert_evaluation(
            request.user,
            data["student"],
            data["evaluation_date"],
            data["scores"],
            data["overall_comments"],
            strengths=data.get("strengths", ""),
            areas_for_improvement=data.get("areas_for_improvement", ""),
        )
        code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
        return Response(EvaluationReadSerializer(evaluation).data, status=code)


# ---------- Check-ins ----------
@extend_schema_view(
    list=extend_schema(tags=["Check-ins"], parameters=ARTIFACT_FILTERS,
                       responses={200: CheckInReadSerializer(many=True), **AUTH_RESPONSES}),
    retrieve=extend_schema(tags=["Check-ins"], responses={200: CheckInReadSerializer, **AUTH_RESPONSES}),
    create=extend_schema(
        tags=["Check-ins"],
        request=CheckInWriteSerializer,
        description="Record a check-in. GPS fixes are measured against the approved workplace; "
                    "without GPS a manual reason or photo is required. Rate-limited per user.",
        responses={201: CheckInReadSerializer, 400: OpenApiResponse(description="Validation error."),
                   429: OpenApiResponse(description="Too many requests / throttled."), **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["student"], "ownership": "self"}},
    ),
    set_status=extend_schema(
        tags=["Check-ins"],
        request=CheckInReviewSerializer,
        responses={200: CheckInReadSerializer, **AUTH_RESPONSES, **TRANSITION_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["supervisor"], "ownership": "assigned-reviewer"}},
    ),
)
class CheckInViewSet(
    ArtifactLookupMixin,
    PaginationMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Attendance check-ins and supervisor verification."""
    resource = Resource.CHECK_IN
    permission_classes = [IsActiveSubject, HasResourceCapability]
    action_operations = {"set_status": Operation.REVIEW}
    throttle_classes: list[type] = []

    def get_throttles(self):
        """Apply rate throttle only on create."""
        if self.action == "create":
            self.throttle_classes = [CheckInRateThrottle]
        return super().get_throttles()

    def get_serializer_class(self):
        if self.action == "create":
            return CheckInWriteSerializer
        if self.action == "set_status":
            return CheckInReviewSerializer
        return CheckInReadSerializer

    def get_queryset(self):
        qs = self.visible_artifacts().select_related("student")
        params = self.request.query_params
        if params.get("status"):
            qs = qs.filter(supervisor_status=params["status"])
        return qs

    def create(self, request: Request, *args, **kwargs) -> Response:
        ser = CheckInWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        check_in = check_in_service.record_check_in(
            request.user,
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
            within_geofence=data.get("within_geofence"),
            manual_reason=data.get("manual_reason", ""),
            photo=data.get("photo"),
            address_resolved=data.get("address_resolved", ""),
        )
        return Response(CheckInReadSerializer(check_in).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["patch"], url_path="status")
    def set_status(self, request: Request, pk: int | None = None) -> Response:
        """Verify or flag a pending check-in (assigned supervisor only)."""
        check_in = self.get_object()
        ser = CheckInReviewSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        reviewed = check_in_service.review_check_in(
            check_in, request.user, ser.validated_data["status"], ser.validated_data.get("comments", "")
        )
        return Response(CheckInReadSerializer(reviewed).data)


# ---------- Directory ----------
@extend_schema_view(
    list=extend_schema(
        tags=["Users"],
        parameters=[
            OpenApiParameter("role", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("status", str, OpenApiParameter.QUERY, required=False),
        ],
        responses={200: UserSerializer(many=True), **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
    retrieve=extend_schema(tags=["Users"], responses={200: UserSerializer, **AUTH_RESPONSES}),
    create=extend_schema(
        tags=["Users"],
        request=ProvisionSubjectSerializer,
        responses={201: UserSerializer, 400: OpenApiResponse(description="Validation error."), **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
    role_status=extend_schema(
        tags=["Users"],
        request=RoleStatusSerializer,
        responses={200: UserSerializer, 400: OpenApiResponse(description="Validation error."), **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
    me=extend_schema(tags=["Users"], request=ProfileSerializer, responses={200: ProfileSerializer, **AUTH_RESPONSES}),
    my_students=extend_schema(tags=["Users"], responses={200: UserSerializer(many=True), **AUTH_RESPONSES}),
)
class UserViewSet(PaginationMixin, viewsets.GenericViewSet):
    """Subject directory: admin provisioning plus the caller's own profile."""

    def get_permissions(self) -> list:
        if self.action in ("me", "my_students"):
            return [IsActiveSubject()]
        return [IsActiveSubject(), IsDirectoryAdmin()]

    def get_serializer_class(self):
        if self.action == "create":
            return ProvisionSubjectSerializer
        if self.action == "role_status":
            return RoleStatusSerializer
        if self.action == "me":
            return ProfileSerializer
        return UserSerializer

    def get_queryset(self):
        params = self.request.query_params
        return directory_service.list_subjects(role=params.get("role"), status=params.get("status"))

    def list(self, request: Request) -> Response:
        return self.paginate_and_respond(self.get_queryset(), UserSerializer)

    def retrieve(self, request: Request, pk: int | None = None) -> Response:
        return Response(UserSerializer(directory_service.get_subject(pk)).data)

    def create(self, request: Request) -> Response:
        ser = ProvisionSubjectSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        subject = directory_service.provision_subject(request.user, ser.validated_data)
        return Response(UserSerializer(subject).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["patch"], url_path="role-status")
    def role_status(self, request: Request, pk: int | None = None) -> Response:
        """Change a subject's role and/or account status; accounts are deactivated, never deleted."""
        subject = directory_service.get_subject(pk)
        ser = RoleStatusSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        updated = directory_service.update_role_and_status(
            request.user, subject, role=ser.validated_data.get("role"), status=ser.validated_data.get("status")
        )
        return Response(UserSerializer(updated).data)

    @action(detail=False, methods=["get", "patch"], url_path="me")
    def me(self, request: Request) -> Response:
        if request.method == "PATCH":
            ser = ProfileSerializer(request.user, data=request.data, partial=True)
            ser.is_valid(raise_exception=True)
            directory_service.update_own_profile(request.user, ser.validated_data)
        return Response(ProfileSerializer(request.user).data)

    @action(detail=False, methods=["get"], url_path="me/students")
    def my_students(self, request: Request) -> Response:
        """Students in the caller's resolved scope (assigned, department, or all for admins)."""
        return self.paginate_and_respond(students_for(request.user).order_by("id"), UserSerializer)


# ---------- Organization ----------
@extend_schema_view(
    list=extend_schema(tags=["Organization"], responses={200: FacultySerializer(many=True), **AUTH_RESPONSES}),
    retrieve=extend_schema(tags=["Organization"], responses={200: FacultySerializer, **AUTH_RESPONSES}),
    create=extend_schema(tags=["Organization"], request=FacultySerializer,
                         responses={201: FacultySerializer, **AUTH_RESPONSES}),
    update=extend_schema(tags=["Organization"], request=FacultySerializer,
                         responses={200: FacultySerializer, **AUTH_RESPONSES}),
    partial_update=extend_schema(tags=["Organization"], request=FacultySerializer,
                                 responses={200: FacultySerializer, **AUTH_RESPONSES}),
    destroy=extend_schema(
        tags=["Organization"],
        responses={204: OpenApiResponse(description="Deleted"),
                   409: OpenApiResponse(description="Faculty still has departments."), **AUTH_RESPONSES},
    ),
)
class FacultyViewSet(PaginationMixin, viewsets.ModelViewSet):
    """Faculties; readable by every subject, managed by admins."""
    queryset = Faculty.objects.order_by("name")
    serializer_class = FacultySerializer
    permission_classes = [IsActiveSubject, DirectoryReadOrAdmin]

    def perform_destroy(self, instance) -> None:
        try:
            instance.delete()
        except ProtectedError as exc:
            raise Conflict("Faculty still has departments.") from exc


@extend_schema_view(
    list=extend_schema(tags=["Organization"], responses={200: DepartmentSerializer(many=True), **AUTH_RESPONSES}),
    retrieve=extend_schema(tags=["Organization"], responses={200: DepartmentSerializer, **AUTH_RESPONSES}),
    create=extend_schema(tags=["Organization"], request=DepartmentSerializer,
                         responses={201: DepartmentSerializer, **AUTH_RESPONSES}),
    update=extend_schema(tags=["Organization"], request=DepartmentSerializer,
                         responses={200: DepartmentSerializer, **AUTH_RESPONSES}),
    partial_update=extend_schema(tags=["Organization"], request=DepartmentSerializer,
                                 responses={200: DepartmentSerializer, **AUTH_RESPONSES}),
    destroy=extend_schema(tags=["Organization"],
                          responses={204: OpenApiResponse(description="Deleted"), **AUTH_RESPONSES}),
)
@extend_schema(parameters=[OpenApiParameter("faculty_pk", int, OpenApiParameter.PATH)])
class DepartmentViewSet(PaginationMixin, viewsets.ModelViewSet):
    """Departments nested under a faculty."""
    serializer_class = DepartmentSerializer
    permission_classes = [IsActiveSubject, DirectoryReadOrAdmin]

    def get_queryset(self):
        return Department.objects.filter(faculty_id=self.kwargs["faculty_pk"]).order_by("name")

    def perform_create(self, serializer) -> None:
        faculty = get_object_or_404(Faculty, pk=self.kwargs["faculty_pk"])
        serializer.save(faculty=faculty)
