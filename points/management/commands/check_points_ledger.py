from django.core.management.base import BaseCommand, CommandError

from points.services import ledger_mismatches


class Command(BaseCommand):
    help = "Reports households whose points balance differs from the sum of their ledger entries. Read-only."

    def add_arguments(self, parser):
        parser.add_argument(
            "--fail-on-mismatch",
            action="store_true",
            help="Exit with an error when any mismatch is found (useful in cron/CI).",
        )

    def handle(self, *args, **opts):
        mismatches = list(ledger_mismatches())
        if not mismatches:
            self.stdout.write(self.style.SUCCESS("All household balances match their ledger."))
            return

        for household, balance, total in mismatches:
            self.stdout.write(self.style.WARNING(
                f"User {household.pk} ({household.name}): balance {balance}, ledger {total}, "
                f"difference {balance - total:+d}"
            ))
        summary = f"{len(mismatches)} household(s) out of balance."
        if opts["fail_on_mismatch"]:
            raise CommandError(summary)
        self.stdout.write(self.style.WARNING(summary))
