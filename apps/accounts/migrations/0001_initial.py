# Generated manually for the accounts app

import uuid
from django.db import migrations, models
import apps.accounts.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Authority',
            fields=[
                ('name', models.CharField(max_length=50, primary_key=True, serialize=False)),
            ],
            options={
                'verbose_name_plural': 'authorities',
                'db_table': 'authorities',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Account',
            fields=[
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('login', models.CharField(max_length=50, unique=True)),
                ('email', models.EmailField(max_length=254, unique=True)),
                ('first_name', models.CharField(blank=True, max_length=50)),
                ('last_name', models.CharField(blank=True, max_length=50)),
                ('image_url', models.CharField(blank=True, max_length=256)),
                ('lang_key', models.CharField(blank=True, max_length=10)),
                ('activated', models.BooleanField(default=False)),
                ('activation_key', models.CharField(blank=True, db_index=True, max_length=20, null=True)),
                ('reset_key', models.CharField(blank=True, db_index=True, max_length=20, null=True)),
                ('reset_date', models.DateTimeField(blank=True, null=True)),
                ('created_date', models.DateTimeField(auto_now_add=True)),
                ('last_modified_date', models.DateTimeField(auto_now=True)),
                ('authorities', models.ManyToManyField(blank=True, related_name='accounts', to='accounts.authority')),
            ],
            options={
                'db_table': 'accounts',
                'ordering': ['created_date'],
                'indexes': [models.Index(fields=['activated', 'created_date'], name='accounts_unactivated_idx')],
            },
            managers=[
                ('objects', apps.accounts.models.AccountManager()),
            ],
        ),
    ]
