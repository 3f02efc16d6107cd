"""Login sequence endpoints (identify, two-factor, password)."""

import structlog

from personalcapital.api.endpoints import ignore_payload
from personalcapital.api.http_client import AsyncHttpClient
from personalcapital.config import TwoFactorMethod
from personalcapital.models.auth import AuthenticatePassword, IdentifyUser

logger = structlog.get_logger(__name__)

IDENTIFY_USER = "/api/login/identifyUser"
AUTHENTICATE_PASSWORD = "/api/credential/authenticatePassword"

# method -> (challenge path, authenticate path, challengeType)
TWO_FACTOR_ENDPOINTS: dict[TwoFactorMethod, tuple[str, str, str]] = {
    TwoFactorMethod.EMAIL: (
        "/api/credential/challengeEmail",
        "/api/credential/authenticateEmailByCode",
        "2",
    ),
    TwoFactorMethod.SMS: (
        "/api/credential/challengeSms",
        "/api/credential/authenticateSmsByCode",
        "0",
    ),
}


async def identify_user(http: AsyncHttpClient, username: str) -> IdentifyUser:
    """Announce the username; the server answers with its status and auth level."""
    return await http.post(
        IDENTIFY_USER,
        IdentifyUser.from_payload,
        {
            "username": username,
            "bindDevice": "false",
            "skipLinkAccount": "false",
            "redirectTo": "",
            "skipFirstUse": "",
            "referrerId": "",
        },
    )


async def challenge(http: AsyncHttpClient, method: TwoFactorMethod) -> None:
    """Ask the service to send a two-factor code over ``method``."""
    path, _, challenge_type = TWO_FACTOR_ENDPOINTS[method]
    logger.debug("Requesting two-factor challenge", method=method)
    await http.post(
        path,
        ignore_payload,
        {
            "challengeReason": "DEVICE_AUTH",
            "challengeMethod": "OP",
            "challengeType": challenge_type,
            "bindDevice": "false",
        },
    )


async def authenticate_code(http: AsyncHttpClient, method: TwoFactorMethod, code: str) -> None:
    """Submit a two-factor code received over ``method``."""
    _, path, _ = TWO_FACTOR_ENDPOINTS[method]
    await http.post(
        path,
        ignore_payload,
        {
            "challengeReason": "DEVICE_AUTH",
            "challengeMethod": "OP",
            "bindDevice": "false",
            "code": code,
        },
    )


async def authenticate_password(
    http: AsyncHttpClient,
    password: str,
    device_name: str,
) -> AuthenticatePassword:
    """Submit the password and bind this device under ``device_name``."""
    return await http.post(
        AUTHENTICATE_PASSWORD,
        AuthenticatePassword.from_payload,
        {
            "bindDevice": "true",
            "skipLinkAccount": "false",
            "passwd": password,
            "deviceName": device_name,
        },
    )
