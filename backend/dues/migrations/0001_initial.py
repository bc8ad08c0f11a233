import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("finance", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="DuesAssignment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("person_type", models.CharField(choices=[("CHEF", "Chef"), ("CHILD", "Child")], max_length=10)),
                ("person_id", models.PositiveIntegerField()),
                ("type", models.CharField(choices=[("ASSURANCE", "Assurance"), ("COTISATION", "Cotisation")], max_length=12)),
                ("scope", models.CharField(choices=[("UNIT", "Unit"), ("SECTION", "Section")], max_length=10)),
                ("year", models.PositiveSmallIntegerField()),
                ("amount_cents", models.BigIntegerField()),
                ("paid", models.BooleanField(default=False)),
                ("paid_on", models.DateField(blank=True, null=True)),
                ("payment_method", models.CharField(blank=True, choices=[("BANK", "Bank"), ("CASH", "Cash")], default="", max_length=10)),
                (
                    "transaction",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="dues_assignment",
                        to="finance.transaction",
                    ),
                ),
            ],
            options={
                "db_table": "dues_assignments",
                "ordering": ["type", "person_type", "person_id"],
                "indexes": [models.Index(fields=["year", "type"], name="dues_year_type_idx")],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("person_type", "person_id", "type", "year"),
                        name="dues_assignment_unique_person_type_year",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("amount_cents__gt", 0)),
                        name="dues_assignment_amount_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("paid", True), ("transaction__isnull", False)),
                            models.Q(("paid", False), ("transaction__isnull", True)),
                            _connector="OR",
                        ),
                        name="dues_assignment_paid_has_transaction",
                    ),
                ],
            },
        ),
    ]
