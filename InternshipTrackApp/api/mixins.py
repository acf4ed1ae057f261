from rest_framework import serializers
from rest_framework.response import Response

from InternshipTrackApp.core.exceptions import ValidationError
from InternshipTrackApp.domain.services import artifact_store


def id_query_param(request, name: str) -> int | None:
    """Optional positive integer id from the query string; 400 when malformed."""
    raw = request.query_params.get(name)
    if raw in (None, ""):
        return None
    try:
        return serializers.IntegerField(min_value=1).run_validation(raw)
    except serializers.ValidationError as exc:
        raise ValidationError({name: exc.detail}) from None


class PaginationMixin:
    """Shared helper to reduce pagination boilerplate."""

    def paginate_and_respond(self, queryset, serializer_cls, many=True):
        page = self.paginate_queryset(queryset)
        serializer = serializer_cls(page if page is not None else queryset, many=many)
        if page is not None:
            return self.get_paginated_response(serializer.data)
        return Response(serializer.data)


class ArtifactLookupMixin:
    """Fetch the target artifact unfiltered, then run object permissions.

    Lists go through ``visible_to``; single objects are looked up by id so
    the guard, not the queryset, decides between 403 and 404.
    """

    resource: str

    def visible_artifacts(self):
        """Visible artifacts, narrowed by the optional ``student`` filter."""
        qs = artifact_store.list_visible(self.resource, self.request.user)
        student_id = id_query_param(self.request, "student")
        if student_id is not None:
            qs = qs.filter(student_id=student_id)
        return qs

    def get_object(self):
        obj = artifact_store.get_artifact(self.resource, self.kwargs[self.lookup_url_kwarg or self.lookup_field])
        self.check_object_permissions(self.request, obj)
        return obj
