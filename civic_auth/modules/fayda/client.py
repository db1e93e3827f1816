"""
client.py -- Fayda national ID system (OTP request + KYC verification).

Two calls, both keyed by FIN. No retries: a failed call fails the request
that made it.
"""

import logging
from typing import Any, Dict, Optional

import requests
from pydantic import ValidationError

from civic_auth.core.errors import UpstreamError, ValidationFailed
from civic_auth.modules.accounts.identifiers import mask_fin
from civic_auth.modules.fayda.schemas import KycData

logger = logging.getLogger(__name__)

OTP_REQUEST_PATH = "/api/auth/otp-request"
KYC_VERIFY_PATH = "/api/kyc/verify"


class IdentityRejected(ValidationFailed):
    """Fayda refused the request (unknown FIN, wrong or expired OTP)."""


class IdentityProviderUnavailable(UpstreamError):
    """Fayda could not be reached or answered with a server error."""


def _error_message(response: requests.Response, default: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return default


class FaydaClient:
    def __init__(self, base_url: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        # One session per client for connection pooling; redirects are not expected from Fayda
        self.session = session or requests.Session()
        self.session.max_redirects = 3

    def _post(self, path: str, payload: Dict[str, Any], default_error: str) -> Dict[str, Any]:
        try:
            resp = self.session.post(f"{self.base_url}{path}", json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Fayda call %s failed: %s", path, e)
            raise IdentityProviderUnavailable(default_error)
        if 400 <= resp.status_code < 500:
            raise IdentityRejected(_error_message(resp, default_error))
        if resp.status_code >= 500:
            logger.warning("Fayda call %s returned %s", path, resp.status_code)
            raise IdentityProviderUnavailable(_error_message(resp, default_error))
        try:
            return resp.json()
        except ValueError:
            raise IdentityProviderUnavailable(default_error)

    def request_otp(self, fin: str) -> Dict[str, Any]:
        """Ask Fayda to send an OTP to the phone registered for this FIN."""
        logger.info("Requesting Fayda OTP for FIN %s", mask_fin(fin))
        return self._post(OTP_REQUEST_PATH, {"fin": fin}, "Fayda API Error")

    def verify_otp(self, fin: str, otp: str) -> KycData:
        """Check the OTP and return the citizen's KYC data."""
        data = self._post(KYC_VERIFY_PATH, {"fin": fin, "otp": otp}, "Fayda Validation Failed")
        kyc = data.get("kyc_data") if isinstance(data, dict) else None
        if not kyc:
            raise IdentityRejected("Fayda Validation Failed")
        try:
            return KycData.model_validate(kyc)
        except ValidationError:
            logger.exception("Unexpected KYC payload for FIN %s", mask_fin(fin))
            raise IdentityProviderUnavailable("Fayda returned incomplete identity data")
