"""
Merchant Service - Merchant Onboarding & Lifecycle Management

A FastAPI-based microservice that handles merchant registration, email
verification, KYC review, bank account verification, account preferences,
API quotas, and the admin authentication that guards back-office actions.
"""

__version__ = "0.1.0"
