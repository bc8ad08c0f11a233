# finance/management/commands/seed_finance.py

from django.core.management.base import BaseCommand
from django.db import transaction

from finance.defaults import seed_defaults
from finance.models import Account, Category


class Command(BaseCommand):
    help = "Seed the default accounts (Banque, Caisse) and categories"

    def handle(self, *args, **options):
        with transaction.atomic():
            created = seed_defaults(Account, Category)

        self.stdout.write(self.style.SUCCESS(
            f"Done! Created {created['accounts']} accounts, {created['categories']} categories."
        ))
