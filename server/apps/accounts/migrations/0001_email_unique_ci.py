# Generated manually: case-insensitive unique email for the stock user table

from django.db import migrations


class Migration(migrations.Migration):

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        # Blank emails stay allowed, createsuperuser may leave them empty
        migrations.RunSQL(
            sql=(
                'CREATE UNIQUE INDEX accounts_user_email_ci_uniq '
                "ON auth_user (LOWER(email)) WHERE email <> ''"
            ),
            reverse_sql='DROP INDEX accounts_user_email_ci_uniq',
        ),
    ]
