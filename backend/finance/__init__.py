# finance/__init__.py
"""Treasury ledger: accounts, categories, transactions and chef debts."""
