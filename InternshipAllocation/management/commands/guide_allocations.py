from django.core.management.base import BaseCommand, CommandError

from InternshipAllocation.exceptions import AllocationError
from InternshipAllocation.range_utils import parse_student_id_range
from InternshipAllocation.services import get_all_guide_allocations, resolve_students


class Command(BaseCommand):
    help = 'List active guide allocations and optionally report range IDs with no student record.'

    def add_arguments(self, parser):
        parser.add_argument('--semester', type=int, help='Only show allocations for this semester (5 or 7)')
        parser.add_argument('--limit', type=int, default=50, help='Limit number of allocations to list')
        parser.add_argument('--missing', action='store_true', help='Report student IDs in each range that have no student record')

    def handle(self, *args, **options):
        semester = options['semester']
        limit = options['limit']
        show_missing = options['missing']

        try:
            allocations = list(get_all_guide_allocations(semester)[:limit])
        except AllocationError as e:
            raise CommandError(e.message)

        label = f'semester {semester}' if semester is not None else 'all semesters'
        self.stdout.write(self.style.SUCCESS(
            f'Found {len(allocations)} guide allocation(s) for {label} (showing up to {limit})'
        ))

        for allocation in allocations:
            parsed = parse_student_id_range(allocation.range)
            self.stdout.write(
                f'- range={allocation.range} semester={allocation.semester} '
                f'guide={allocation.guide.username} students={parsed.student_count} '
                f'created={allocation.created_at.isoformat()}'
            )
            if show_missing:
                _, missing = resolve_students(parsed, allocation.semester)
                if missing:
                    self.stdout.write(self.style.WARNING(f'  missing: {", ".join(missing)}'))
                else:
                    self.stdout.write(self.style.NOTICE('  missing: none'))

        self.stdout.write(self.style.SUCCESS('Done.'))
