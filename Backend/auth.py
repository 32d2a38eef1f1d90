"""
Bearer-token authentication against the hosted auth provider (Supabase Auth).

A missing, invalid or unverifiable token yields Anonymous: saving a game
then proceeds as a guest instead of failing.
"""

import logging
from typing import Optional

import requests
from fastapi import Header

import config
from user_resolver import Anonymous, Authenticated, Identity

logger = logging.getLogger(__name__)


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def identity_for_token(token: Optional[str]) -> Identity:
    """Ask the auth provider who owns `token`; only verified e-mails count."""
    if not token:
        return Anonymous()
    if not config.SUPABASE_URL:
        logger.warning("Bearer token supplied but SUPABASE_URL is not configured, treating as guest")
        return Anonymous()

    try:
        response = requests.get(
            f"{config.SUPABASE_URL.rstrip('/')}/auth/v1/user",
            headers={"Authorization": f"Bearer {token}", "apikey": config.SUPABASE_ANON_KEY},
            timeout=config.AUTH_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        logger.warning("Auth provider unreachable (%s), treating as guest", exc)
        return Anonymous()

    if response.status_code != 200:
        logger.info("Auth provider rejected token (HTTP %s), treating as guest", response.status_code)
        return Anonymous()

    try:
        user = response.json()
    except ValueError:
        logger.warning("Auth provider returned an unreadable body, treating as guest")
        return Anonymous()

    if not isinstance(user, dict):
        logger.warning("Auth provider returned a non-object body, treating as guest")
        return Anonymous()

    email = (user.get("email") or "").strip().lower()
    if not email or not user.get("email_confirmed_at"):
        return Anonymous()
    return Authenticated(email=email)


def get_identity(authorization: Optional[str] = Header(default=None)) -> Identity:
    """FastAPI dependency resolving the request's Identity."""
    return identity_for_token(bearer_token(authorization))
