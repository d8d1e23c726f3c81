from django.core.management.base import BaseCommand

from review_core.review.status_sync import reconcile


class Command(BaseCommand):
    help = "Report ideas whose status disagrees with their terminal review outcome"

    def add_arguments(self, parser):
        parser.add_argument(
            "--apply",
            action="store_true",
            help="Copy the terminal outcome onto each mismatched idea",
        )

    def handle(self, *args, **options):
        report = reconcile(apply=options["apply"])

        for row in report["mismatched"]:
            self.stdout.write(
                f"idea {row['idea_id']}: status={row['idea_status']} "
                f"expected={row['expected_status']}"
            )

        self.stdout.write(
            self.style.SUCCESS(
                f"{len(report['mismatched'])} mismatched, {report['fixed']} repaired"
            )
        )
