from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from finance.config import FinanceConfig
from finance.exceptions import MonthAlreadyClosed, PersistenceFailure
from finance.services.month_closing import MonthClosingService
from finance.utils.supabase_rest import get_ledger_store


class Command(BaseCommand):
    help = 'Close a month: archive its totals and partner split, flag its records as closed'

    def add_arguments(self, parser):
        today = timezone.localdate()
        parser.add_argument('--month', type=int, default=today.month, help='Month number (1-12)')
        parser.add_argument('--year', type=int, default=today.year, help='Four digit year')
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Only show what would be archived',
        )

    def handle(self, *args, **options):
        month, year = options['month'], options['year']
        if not 1 <= month <= 12:
            raise CommandError(f'Invalid month: {month}')

        service = MonthClosingService(get_ledger_store(), FinanceConfig.from_settings())

        try:
            if options['dry_run']:
                preview = service.preview(month, year, active_only=False)
                self.print_preview(preview)
                return

            archive = service.close(month, year)
        except MonthAlreadyClosed as e:
            raise CommandError(str(e)) from e
        except PersistenceFailure as e:
            raise CommandError(f'Ledger store failure: {e}') from e

        self.stdout.write(
            self.style.SUCCESS(
                f'Closed {archive.label} ({archive.month_year}): '
                f'{len(archive.services)} services, {len(archive.expenses)} expenses, '
                f'net profit R$ {archive.net_profit:.2f}'
            )
        )

    def print_preview(self, preview):
        totals = preview.totals
        status = 'CLOSED' if preview.is_closed else 'open'
        self.stdout.write(f'📊 {totals.month_key.label} [{status}]')
        self.stdout.write(f'   Revenue:  R$ {totals.total_revenue:.2f}')
        self.stdout.write(f'   Expenses: R$ {totals.total_expenses:.2f}')
        self.stdout.write(f'   Hectares: {totals.total_hectares} ha in {preview.service_count} services')
        for s in preview.partner_summaries:
            flag = ' (capital call)' if s.capital_call else ''
            self.stdout.write(f'   {s.name}: R$ {s.total_to_receive:.2f}{flag}')
