from django.db import migrations

from finance.defaults import seed_defaults


def forwards(apps, schema_editor):
    seed_defaults(apps.get_model("finance", "Account"), apps.get_model("finance", "Category"))


class Migration(migrations.Migration):

    dependencies = [
        ("finance", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(forwards, migrations.RunPython.noop),
    ]
