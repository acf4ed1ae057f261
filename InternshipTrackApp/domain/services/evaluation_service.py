"""Domain service functions for evaluator scoring of students.

One evaluation per (student, evaluator, evaluation_date). Saving again for
the same key updates the record in place and replaces its whole score set
inside one transaction, so no reader ever sees a mix of old and new scores.
"""
import logging
from collections.abc import Mapping
from datetime import date
from typing import Any

from django.db import IntegrityError, transaction
from django.db.models import QuerySet

from InternshipTrackApp.core.access import authorize
from InternshipTrackApp.core.choices import Operation, Resource, Role, ScoringMetric
from InternshipTrackApp.core.exceptions import Conflict, ValidationError
from InternshipTrackApp.internships.models import Evaluation, EvaluationScore
from InternshipTrackApp.users.models import User

logger = logging.getLogger(__name__)

KIND = Resource.EVALUATION
MIN_SCORE, MAX_SCORE = 1, 5


def normalize_scores(scores: Mapping[str, Any]) -> list[EvaluationScore]:
    """Validate a metric -> score mapping and build unsaved score rows."""
    if not scores:
        raise ValidationError({"scores": ["At least one metric score is required."]})
    labels = dict(ScoringMetric.choices)
    errors = {}
    rows = []
    for key, value in scores.items():
        if key not in labels:
            errors[key] = f"Unknown metric. Must be one of: {', '.join(ScoringMetric.values)}."
            continue
        if isinstance(value, bool) or not isinstance(value, int) or not MIN_SCORE <= value <= MAX_SCORE:
            errors[key] = f"Score must be an integer between {MIN_SCORE} and {MAX_SCORE}."
            continue
        rows.append(EvaluationScore(metric_key=key, metric_label=labels[key], score=value))
    if errors:
        raise ValidationError({"scores": errors})
    return rows


def upsert_evaluation(
    evaluator: User,
    student: User,
    evaluation_date: date,
    scores: Mapping[str, Any],
    overall_comments: str,
    strengths: str = "",
    areas_for_improvement: str = "",
) -> tuple[Evaluation, bool]:
    """Insert or update the evaluator's evaluation of ``student`` for a date.

    Returns:
        (evaluation, created)

    Raises:
        ValidationError: bad scores or the target is not a student.
        AccessDenied: evaluator has no authority over the student.
        Conflict: a concurrent insert for the same key won.
    """
    if student.role != Role.STUDENT:
        raise ValidationError({"student": ["Evaluations can only target students."]})
    rows = normalize_scores(scores)
    fields = {
        "overall_comments": overall_comments,
        "strengths": strengths or "",
        "areas_for_improvement": areas_for_improvement or "",
    }

    try:
        with transaction.atomic():
            existing = (
                Evaluation.objects.select_for_update()
                .filter(student=student, evaluator=evaluator, evaluation_date=evaluation_date)
                .first()
            )
            if existing is None:
                authorize(evaluator, Operation.CREATE, KIND, student_id=student.pk)
                evaluation = Evaluation(
                    student=student,
                    evaluator=evaluator,
                    evaluator_role=evaluator.role,
                    evaluation_date=evaluation_date,
                    **fields,
                )
                created = True
            else:
                authorize(evaluator, Operation.UPDATE, KIND, artifact=existing)
                evaluation = existing
                for field, value in fields.items():
                    setattr(evaluation, field, value)
                evaluation.scores.all().delete()
                created = False

            evaluation._history_user = evaluator
            evaluation.save()
            for row in rows:
                row.evaluation = evaluation
            EvaluationScore.objects.bulk_create(rows)
    except IntegrityError as exc:
        logger.warning(
            "Concurrent evaluation insert for student %s by %s on %s",
            student.pk, evaluator.pk, evaluation_date,
        )
        raise Conflict("An evaluation for this student and date already exists.") from exc

    logger.info(
        "Evaluation %s %s by %s for student %s (%d scores)",
        evaluation.pk, "created" if created else "updated", evaluator.pk, student.pk, len(rows),
    )
    return evaluation, created


def list_evaluations(user: User, student_id: Any = None, evaluator_id: Any = None) -> QuerySet:
    authorize(user, Operation.READ, KIND)
    qs = Evaluation.objects.visible_to(user).prefetch_related("scores").select_related("student", "evaluator")
    if student_id:
        qs = qs.filter(student_id=student_id)
    if evaluator_id:
        qs = qs.filter(evaluator_id=evaluator_id)
    return qs
