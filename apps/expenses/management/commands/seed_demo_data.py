"""
Management command to seed a demo household.

Creates two users sharing one account with a single dinner expense that
one of them has already paid their half of.

Usage:
    python manage.py seed_demo_data
    python manage.py seed_demo_data --password s3cret --dry-run
"""

from datetime import date

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.accounts.models import Account
from apps.accounts.services import accept_invitation, create_account
from apps.expenses.models import ShareStatus
from apps.expenses.services import add_expense
from apps.users.models import User

DEMO_USERS = [
    ('liin@example.com', 'Liin', 'icon:Cat'),
    ('hose@example.com', 'Hose', 'icon:Dog'),
]
DEMO_ACCOUNT = 'Liin & Hose Home'


class Command(BaseCommand):
    help = 'Create demo users, a shared account and a sample expense'

    def add_arguments(self, parser):
        parser.add_argument(
            '--password',
            default='DemoPass123!',
            help='Password for the demo users',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be created without making changes',
        )

    def handle(self, *args, **options):
        if Account.objects.filter(name=DEMO_ACCOUNT).exists():
            self.stdout.write(
                self.style.SUCCESS(f'"{DEMO_ACCOUNT}" already exists. Nothing to do.')
            )
            return

        self.stdout.write('\nDemo data:\n')
        for email, name, _ in DEMO_USERS:
            self.stdout.write(f'  - user {name} <{email}>')
        self.stdout.write(f'  - account "{DEMO_ACCOUNT}" with one expense')

        if options['dry_run']:
            self.stdout.write(
                self.style.WARNING('\n--dry-run mode: No changes made.')
            )
            return

        with transaction.atomic():
            liin, hose = [
                self._get_or_create_user(email, name, avatar, options['password'])
                for email, name, avatar in DEMO_USERS
            ]

            account = create_account(name=DEMO_ACCOUNT, owner=liin, invitee_ids=[hose.pk])
            accept_invitation(account_id=account.id, user=hose)

            add_expense(
                account_id=account.id,
                created_by=liin,
                title="Dinner at Mario's",
                amount=1200,
                date=date(2023, 10, 25),
                shares=[
                    {'user_id': liin.pk, 'amount': 600, 'status': ShareStatus.PAID},
                    {'user_id': hose.pk, 'amount': 600, 'status': ShareStatus.PENDING},
                ],
            )

        self.stdout.write(
            self.style.SUCCESS(f'\nSeeded "{DEMO_ACCOUNT}".')
        )

    def _get_or_create_user(self, email, name, avatar, password):
        user = User.objects.filter(email=email).first()
        if user is None:
            user = User.objects.create_user(
                email=email,
                password=password,
                full_name=name,
                avatar_url=avatar,
            )
        return user
