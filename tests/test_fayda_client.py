from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from civic_auth.modules.fayda.client import FaydaClient, IdentityProviderUnavailable, IdentityRejected

KYC = {
    "personalIdentity": {"fullName": "Abebe Kebede", "phone": "+251911223344", "dob": "1990-01-01", "gender": "M"},
    "biometrics": {"face": "base64-photo"},
}


def _response(status: int, body=None) -> MagicMock:
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status
    if body is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = body
    return resp


def _client(*responses) -> tuple[FaydaClient, MagicMock]:
    session = MagicMock(spec=requests.Session)
    session.post.side_effect = list(responses)
    return FaydaClient("http://fayda.test/", timeout=3, session=session), session


def test_request_otp_posts_fin():
    client, session = _client(_response(200, {"message": "sent"}))
    assert client.request_otp("123456789012") == {"message": "sent"}
    session.post.assert_called_once_with(
        "http://fayda.test/api/auth/otp-request", json={"fin": "123456789012"}, timeout=3
    )


def test_verify_otp_returns_kyc_data():
    client, session = _client(_response(200, {"kyc_data": KYC}))
    kyc = client.verify_otp("123456789012", "123456")
    assert kyc.personal_identity.full_name == "Abebe Kebede"
    assert kyc.personal_identity.phone == "+251911223344"
    assert kyc.photo == "base64-photo"
    session.post.assert_called_once_with(
        "http://fayda.test/api/kyc/verify", json={"fin": "123456789012", "otp": "123456"}, timeout=3
    )


def test_verify_otp_without_biometrics():
    client, _ = _client(_response(200, {"kyc_data": {"personalIdentity": KYC["personalIdentity"]}}))
    assert client.verify_otp("123456789012", "123456").photo is None


def test_provider_error_message_is_passed_through():
    client, _ = _client(_response(400, {"error": "Invalid OTP"}))
    with pytest.raises(IdentityRejected) as exc:
        client.verify_otp("123456789012", "000000")
    assert exc.value.message == "Invalid OTP"
    assert exc.value.status_code == 400


def test_rejection_without_body_uses_default_message():
    client, _ = _client(_response(404))
    with pytest.raises(IdentityRejected) as exc:
        client.request_otp("123456789012")
    assert exc.value.message == "Fayda API Error"


def test_server_error_is_upstream_failure():
    client, _ = _client(_response(502))
    with pytest.raises(IdentityProviderUnavailable) as exc:
        client.verify_otp("123456789012", "123456")
    assert exc.value.status_code == 500
    assert exc.value.message == "Fayda Validation Failed"


def test_network_error_is_upstream_failure():
    session = MagicMock(spec=requests.Session)
    session.post.side_effect = requests.ConnectionError("refused")
    client = FaydaClient("http://fayda.test", session=session)
    with pytest.raises(IdentityProviderUnavailable):
        client.request_otp("123456789012")
    assert session.post.call_count == 1


def test_missing_kyc_payload_is_rejected():
    client, _ = _client(_response(200, {"status": "ok"}))
    with pytest.raises(IdentityRejected):
        client.verify_otp("123456789012", "123456")


def test_incomplete_kyc_payload_is_upstream_failure():
    client, _ = _client(_response(200, {"kyc_data": {"personalIdentity": {"phone": "0911"}}}))
    with pytest.raises(IdentityProviderUnavailable):
        client.verify_otp("123456789012", "123456")
