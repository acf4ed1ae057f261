from django.core.management.base import BaseCommand

from InternshipTrackApp.domain.services.check_in_service import recompute_outside_geofence
from InternshipTrackApp.internships.models import CheckIn


class Command(BaseCommand):
    help = "Recompute outside_geofence flags for pending GPS check-ins."

    def add_arguments(self, parser):
        parser.add_argument("--student", type=int, help="Limit to one student's check-ins.")

    def handle(self, *args, **options):
        queryset = CheckIn.objects.all()
        if options.get("student"):
            queryset = queryset.filter(student_id=options["student"])
        updated = recompute_outside_geofence(queryset)
        self.stdout.write(self.style.SUCCESS(f"Updated {updated} check-ins"))
