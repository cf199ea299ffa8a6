"""Management command to compare buyer/supplier balances with the ledger."""
from django.core.management.base import BaseCommand
from apps.cashflow.reconciliation import BalanceReconciliationService


class Command(BaseCommand):
    help = 'Report buyers and suppliers whose outstanding balance differs from the ledger'

    def add_arguments(self, parser):
        parser.add_argument(
            '--repair',
            action='store_true',
            help='Overwrite drifted balances with the ledger value',
        )

    def handle(self, *args, **options):
        service = BalanceReconciliationService()
        drifts = service.find_drift()

        for drift in drifts:
            self.stdout.write(
                f"  {drift.party_type} {drift.party.pk} '{drift.party}': "
                f"stored {drift.stored}, ledger {drift.expected} (diff {drift.difference})"
            )

        if not drifts:
            self.stdout.write(self.style.SUCCESS("All balances match the ledger."))
            return

        if options['repair']:
            service.repair(drifts)
            self.stdout.write(self.style.SUCCESS(f"Repaired {len(drifts)} balance(s)."))
        else:
            self.stdout.write(self.style.WARNING(f"Found {len(drifts)} drifted balance(s). Run with --repair to fix."))
