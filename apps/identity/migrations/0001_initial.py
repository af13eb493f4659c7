import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Account',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255)),
                ('email', models.EmailField(max_length=254, unique=True)),
                ('mobile', models.CharField(max_length=20, unique=True)),
                ('role', models.CharField(
                    choices=[
                        ('admin', 'Administrator'),
                        ('manager', 'Manager'),
                        ('requester', 'Requester'),
                        ('executor', 'Executor'),
                    ],
                    db_index=True,
                    default='executor',
                    max_length=20,
                )),
                ('is_active', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='created_accounts',
                    to='identity.account',
                )),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Credential',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('password_hash', models.CharField(blank=True, default='', max_length=255)),
                ('status', models.CharField(
                    choices=[
                        ('pending', 'Pending'),
                        ('active', 'Active'),
                        ('inactive', 'Inactive'),
                        ('blocked', 'Blocked'),
                    ],
                    default='pending',
                    max_length=20,
                )),
                ('last_login', models.DateTimeField(blank=True, null=True)),
                ('reset_token_hash', models.CharField(blank=True, db_index=True, max_length=64, null=True)),
                ('reset_token_expiration', models.DateTimeField(blank=True, db_index=True, null=True)),
                ('login_attempts', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('account', models.OneToOneField(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='credential',
                    to='identity.account',
                )),
            ],
        ),
    ]
