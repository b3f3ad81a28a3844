# Generated manually to seed the built-in roles
from django.db import migrations


AUTHORITIES = ['ROLE_ADMIN', 'ROLE_USER']


def seed_authorities(apps, schema_editor):
    """Create the built-in roles."""
    Authority = apps.get_model('accounts', 'Authority')

    for name in AUTHORITIES:
        Authority.objects.get_or_create(name=name)


def remove_authorities(apps, schema_editor):
    """Drop the built-in roles (for rollback)."""
    Authority = apps.get_model('accounts', 'Authority')
    Authority.objects.filter(name__in=AUTHORITIES).delete()


class Migration(migrations.Migration):

    dependencies = [
        ('accounts', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(seed_authorities, remove_authorities),
    ]
