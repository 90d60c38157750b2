"""
Tests for Stripe checkout and webhook-driven trial conversion
"""
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from config.settings import settings
from crud.profile import ProfileRepository
from services.billing_service import BillingService
from services.trial_service import TrialService


def checkout_completed(metadata: dict, client_reference_id=None) -> dict:
    return {
        "type": "checkout.session.completed",
        "data": {"object": {"metadata": metadata, "client_reference_id": client_reference_id}},
    }


@pytest.fixture
def trial_service(test_db, clock):
    return TrialService(test_db, ProfileRepository(test_db), clock=clock)


@pytest.mark.asyncio
async def test_checkout_completed_converts_trial(test_db, trial_service):
    await trial_service.start_trial("user-1")

    result = await BillingService(trial_service).process_webhook(
        checkout_completed({"user_id": "user-1", "plan_id": "annual"})
    )

    assert result["is_error"] is False
    profile = await ProfileRepository(test_db).get_profile("user-1")
    assert profile.subscription_tier == "premium"
    assert profile.plan_id == "annual"


@pytest.mark.asyncio
async def test_client_reference_id_fallback(test_db, trial_service):
    await trial_service.start_trial("user-1")

    result = await BillingService(trial_service).process_webhook(
        checkout_completed({}, client_reference_id="user-1")
    )

    assert result["is_error"] is False


@pytest.mark.asyncio
async def test_checkout_without_trial_reports_error(trial_service):
    result = await BillingService(trial_service).process_webhook(
        checkout_completed({"user_id": "user-1", "plan_id": "annual"})
    )

    assert result["is_error"] is True


@pytest.mark.asyncio
async def test_other_events_are_acknowledged(trial_service):
    result = await BillingService(trial_service).process_webhook({"type": "invoice.paid", "data": {"object": {}}})

    assert result == {"data": {"handled": False}, "is_error": False}


@pytest.mark.asyncio
async def test_checkout_session_requires_stripe_key(trial_service, monkeypatch):
    monkeypatch.setattr(settings, "stripe_secret_key", None)

    result = await BillingService(trial_service).create_checkout_session("user-1", "annual")

    assert result["is_error"] is True


@pytest.mark.asyncio
async def test_checkout_session_carries_user_and_plan(trial_service, monkeypatch):
    monkeypatch.setattr(settings, "stripe_secret_key", "sk_test_123")
    monkeypatch.setattr(settings, "stripe_price_id", "price_123")

    with patch("stripe.checkout.Session.create") as create:
        create.return_value = SimpleNamespace(url="https://checkout.stripe.test/s/abc")
        result = await BillingService(trial_service).create_checkout_session(
            "user-1", "annual", "owner@example.com"
        )

    assert result == {"data": "https://checkout.stripe.test/s/abc", "is_error": False}
    kwargs = create.call_args.kwargs
    assert kwargs["metadata"] == {"user_id": "user-1", "plan_id": "annual"}
    assert kwargs["client_reference_id"] == "user-1"
    assert kwargs["customer_email"] == "owner@example.com"
