from django.core.management.base import BaseCommand, CommandError

from finance.config import FinanceConfig
from finance.exceptions import MonthNotClosed, PersistenceFailure
from finance.services.month_closing import MonthClosingService
from finance.utils.supabase_rest import get_ledger_store


class Command(BaseCommand):
    help = 'Reopen a closed month by deleting its archive (key format M/YYYY)'

    def add_arguments(self, parser):
        parser.add_argument('month_key', type=str, help='Month key, e.g. 3/2024')

    def handle(self, *args, **options):
        service = MonthClosingService(get_ledger_store(), FinanceConfig.from_settings())
        try:
            archive = service.reopen(options['month_key'])
        except ValueError as e:
            raise CommandError(str(e)) from e
        except MonthNotClosed as e:
            raise CommandError(str(e)) from e
        except PersistenceFailure as e:
            raise CommandError(f'Ledger store failure: {e}') from e

        self.stdout.write(self.style.SUCCESS(f'Reopened {archive.label} ({archive.month_year})'))
