"""
FastAPI dependency providers for the trial services.
Services are built per request around the request's database session.
"""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from crud.profile import ProfileRepository
from database import get_db
from services.billing_service import BillingService
from services.guardrail_service import GuardrailService
from services.trial_service import TrialService


def get_trial_service(db: AsyncSession = Depends(get_db)) -> TrialService:
    return TrialService(db, ProfileRepository(db))


def get_guardrail_service(
    db: AsyncSession = Depends(get_db),
    trial_service: TrialService = Depends(get_trial_service),
) -> GuardrailService:
    return GuardrailService(db, trial_service)


def get_billing_service(trial_service: TrialService = Depends(get_trial_service)) -> BillingService:
    return BillingService(trial_service)
