# finance/defaults.py
"""
Seed data for a fresh deployment.

Payments need a default account per method (see
finance.commands.resolve_default_account), so at least one BANK and one
CASH account must exist. Used by the 0002_seed_defaults data migration
and by the ``seed_finance`` management command.
"""

DEFAULT_ACCOUNTS = [
    ("Banque", "BANK"),
    ("Caisse", "CASH"),
]

DEBT_REIMBURSEMENT_CATEGORY = "Remboursement dette chef"
COTISATION_CATEGORY = "Cotisation"
ASSURANCE_CATEGORY = "Assurance"

DEFAULT_CATEGORIES = [
    (COTISATION_CATEGORY, "INCOME"),
    (ASSURANCE_CATEGORY, "INCOME"),
    (DEBT_REIMBURSEMENT_CATEGORY, "INCOME"),
    ("Don", "INCOME"),
    ("Subvention", "INCOME"),
    ("Matériel", "EXPENSE"),
    ("Activité", "EXPENSE"),
    ("Assurance (frais)", "EXPENSE"),
    ("Frais bancaires", "EXPENSE"),
]


def seed_defaults(account_model, category_model) -> dict[str, int]:
    """
    Idempotently insert the default accounts and categories.

    Takes the model classes so it can run against historical models
    inside a migration. Existing rows are left untouched.
    """
    created = {"accounts": 0, "categories": 0}
    for name, kind in DEFAULT_ACCOUNTS:
        _, was_created = account_model.objects.get_or_create(name=name, defaults={"kind": kind})
        created["accounts"] += int(was_created)
    for name, kind in DEFAULT_CATEGORIES:
        _, was_created = category_model.objects.get_or_create(name=name, defaults={"kind": kind})
        created["categories"] += int(was_created)
    return created
