from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand

from apps.identity.models import Account, Credential, CredentialStatus, Role


class Command(BaseCommand):
    help = 'Seeds the database with one active account per role'

    def add_arguments(self, parser):
        parser.add_argument('--password', default='Password@123', help='Password for every seeded account')

    def handle(self, *args, **options):
        password_hash = make_password(options['password'])

        users = [
            {'name': 'Admin', 'email': 'admin@tako.io', 'mobile': '9000000001', 'role': Role.ADMIN},
            {'name': 'Manager', 'email': 'manager@tako.io', 'mobile': '9000000002', 'role': Role.MANAGER},
            {'name': 'Requester', 'email': 'requester@tako.io', 'mobile': '9000000003', 'role': Role.REQUESTER},
            {'name': 'Executor', 'email': 'executor@tako.io', 'mobile': '9000000004', 'role': Role.EXECUTOR},
        ]
        creators = {}

        for u in users:
            # Managers and requesters are created by the admin, executors by the manager
            creator = creators.get(Role.MANAGER if u['role'] == Role.EXECUTOR else Role.ADMIN)
            if u['role'] == Role.ADMIN:
                creator = None

            account, created = Account.objects.get_or_create(
                email=u['email'],
                defaults={
                    'name': u['name'],
                    'mobile': u['mobile'],
                    'role': u['role'],
                    'created_by': creator,
                    'is_active': True,
                },
            )
            creators[account.role] = account

            Credential.objects.update_or_create(
                account=account,
                defaults={'password_hash': password_hash, 'status': CredentialStatus.ACTIVE},
            )

            if created:
                self.stdout.write(self.style.SUCCESS(f'Created user: {account.email} (Role: {account.role})'))
            else:
                self.stdout.write(self.style.WARNING(f'Updated user: {account.email}'))
