# tests/conftest.py
"""
Pytest fixtures for ScoutDesk treasury tests.

- Users for every role, and ActorContext fixtures built the same way
  resolve_actor builds them
- Default accounts/categories (re-seeded: transactional tests flush the
  rows created by the data migration)
- Authenticated APIClient factory
"""

import pytest
from datetime import date

from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from accounts.authz import ActorContext
from finance.defaults import seed_defaults
from finance.models import Account, Category


User = get_user_model()


# =============================================================================
# Users & Actors
# =============================================================================

def _make_user(email, role, **extra):
    return User.objects.create_user(
        email=email,
        password="testpass123",
        name=email.split("@")[0].title(),
        role=role,
        **extra,
    )


@pytest.fixture
def superadmin(db):
    return _make_user("admin@troop.test", User.Role.SUPERADMIN)


@pytest.fixture
def treasurer(db):
    return _make_user("treasurer@troop.test", User.Role.TREASURER)


@pytest.fixture
def staff_lead(db):
    return _make_user("staff@troop.test", User.Role.STAFF_LEAD)


@pytest.fixture
def unit_lead(db):
    return _make_user("unit@troop.test", User.Role.UNIT_LEAD)


@pytest.fixture
def chef(db):
    return _make_user("chef@troop.test", User.Role.CHEF)


@pytest.fixture
def other_chef(db):
    return _make_user("chef2@troop.test", User.Role.CHEF)


@pytest.fixture
def plain_user(db):
    return _make_user("parent@troop.test", User.Role.USER)


@pytest.fixture
def treasurer_actor(treasurer):
    return ActorContext.for_user(treasurer)


@pytest.fixture
def unit_lead_actor(unit_lead):
    return ActorContext.for_user(unit_lead)


# =============================================================================
# Treasury Fixtures
# =============================================================================

@pytest.fixture
def seeded(db):
    """Default accounts and categories, idempotently (re)inserted."""
    seed_defaults(Account, Category)


@pytest.fixture
def bank_account(seeded):
    return Account.objects.get(name="Banque")


@pytest.fixture
def cash_account(seeded):
    return Account.objects.get(name="Caisse")


@pytest.fixture
def material_category(seeded):
    return Category.objects.get(name="Matériel")


@pytest.fixture
def today():
    return date(2024, 1, 15)


# =============================================================================
# API
# =============================================================================

@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for():
    """Return an APIClient authenticated as the given user."""

    def _client_for(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    return _client_for
