import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, unique=True)),
                ("kind", models.CharField(choices=[("BANK", "Bank"), ("CASH", "Cash")], max_length=10)),
                ("active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="Category",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, unique=True)),
                ("kind", models.CharField(choices=[("INCOME", "Income"), ("EXPENSE", "Expense")], max_length=10)),
                ("active", models.BooleanField(default=True)),
            ],
            options={
                "db_table": "transaction_categories",
                "verbose_name_plural": "categories",
            },
        ),
        migrations.CreateModel(
            name="Transaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("amount_cents", models.BigIntegerField()),
                ("kind", models.CharField(choices=[("INCOME", "Income"), ("EXPENSE", "Expense")], max_length=10)),
                ("method", models.CharField(choices=[("BANK", "Bank"), ("CASH", "Cash")], max_length=10)),
                ("description", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="transactions", to="finance.account")),
                ("category", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="transactions", to="finance.category")),
                ("chef", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="chef_transactions", to=settings.AUTH_USER_MODEL)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="created_transactions", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-date", "-id"],
                "indexes": [
                    models.Index(fields=["date", "id"], name="transaction_date_id_idx"),
                    models.Index(fields=["account", "kind"], name="transaction_account_kind_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("amount_cents__gt", 0)), name="transaction_amount_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Debt",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount_cents", models.BigIntegerField()),
                ("reason", models.TextField()),
                ("status", models.CharField(choices=[("OPEN", "Open"), ("SETTLED", "Settled")], default="OPEN", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("settled_at", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, default="")),
                ("chef", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="debts", to=settings.AUTH_USER_MODEL)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="created_debts", to=settings.AUTH_USER_MODEL)),
                ("settled_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="settled_debts", to=settings.AUTH_USER_MODEL)),
                ("settlement_tx", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="settled_debt", to="finance.transaction")),
            ],
            options={
                "db_table": "chef_debts",
                "ordering": ["status", "-created_at"],
                "indexes": [
                    models.Index(fields=["chef", "status"], name="debt_chef_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("amount_cents__gt", 0)), name="debt_amount_positive"),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("settlement_tx__isnull", False), ("status", "SETTLED")),
                            models.Q(("settlement_tx__isnull", True), ("status", "OPEN")),
                            _connector="OR",
                        ),
                        name="debt_settled_has_settlement_tx",
                    ),
                ],
            },
        ),
        migrations.AddField(
            model_name="transaction",
            name="linked_debt",
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="originating_transactions", to="finance.debt"),
        ),
    ]
