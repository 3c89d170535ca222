"""
Arcania - Authentication Client

Signup and login against the backend API. All hashing happens here, on the
client: the server receives salts and derived hashes, never a password.

Signup:
    1. Generate two separate salts (auth, encryption)
    2. authHash                = derive(account_password, authSalt)
    3. masterPasswordCheckHash = derive(master_password, authSalt)
    4. POST /api/signup

Login:
    1. GET /api/get-salts/<email>
    2. providedAuthHash = derive(account_password, authSalt)
    3. POST /api/login

Every login failure, whatever step it happens in, is reported with the same
message so the caller cannot tell "unknown email" from "wrong password".
"""

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Callable, Dict, Optional, Tuple

from . import crypto


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

API_URL = "http://127.0.0.1:5000"
REQUEST_TIMEOUT = 10     # seconds

SIGNUP_FAILED = "Signup failed."
SIGNUP_UNAVAILABLE = "An error occurred during signup. Please try again."
LOGIN_FAILED = "Invalid email or password."
LOGIN_UNAVAILABLE = "An error occurred during login. Please try again."


# =============================================================================
# Errors
# =============================================================================

class AuthError(Exception):
    """Signup/login failure. str(error) is safe to show to the user."""


class SignupError(AuthError):
    pass


class LoginError(AuthError):
    pass


class TransportError(OSError):
    """The backend could not be reached."""


# =============================================================================
# Transport
# =============================================================================

class HttpTransport:
    """
    JSON over HTTP with urllib.

    request() returns (status, body) for every HTTP response, including
    4xx/5xx. Only connection-level failures raise.
    """

    def __init__(self, base_url: str = API_URL, timeout: float = REQUEST_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def request(self, method: str, path: str, payload: Optional[Dict] = None) -> Tuple[int, Dict]:
        data = None
        headers = {"Accept": "application/json"}
        if payload is not None:
            data = json.dumps(payload).encode("utf-8")
            headers["Content-Type"] = "application/json"

        try:
            # A malformed base URL (e.g. no scheme) raises ValueError here
            req = urllib.request.Request(
                self.base_url + path, data=data, headers=headers, method=method
            )
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                return resp.status, _decode_body(resp.read())
        except urllib.error.HTTPError as e:
            return e.code, _decode_body(e.read())
        except (urllib.error.URLError, OSError, ValueError) as e:
            raise TransportError(f"{method} {path} failed: {e}") from e


def _decode_body(raw: bytes) -> Dict:
    try:
        body = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return {}
    return body if isinstance(body, dict) else {}


def _ok(status: int) -> bool:
    return 200 <= status < 300


# =============================================================================
# Client
# =============================================================================

class AuthClient:
    """
    Client-side signup/login flow.

    Usage:
        client = AuthClient(HttpTransport("http://127.0.0.1:5000"))
        client.signup("alice@example.com", "account pw", "master pw")
        client.login("alice@example.com", "account pw")
        client.logged_in_user   # "alice@example.com"

    Args:
        transport: Object with request(method, path, payload) -> (status, body)
        derive: derive(password, salt) -> hash (default scrypt)
        source: Random source for salts (default system CSPRNG)
    """

    def __init__(
        self,
        transport=None,
        derive: Callable[[str, bytes], bytes] = crypto.derive_auth_hash,
        source: Optional[crypto.RandomSource] = None
    ):
        self.transport = transport or HttpTransport()
        self.derive = derive
        self.source = source
        self.logged_in_user: Optional[str] = None

    def signup(self, email: str, account_password: str, master_password: str) -> None:
        """
        Register an account.

        Raises:
            SignupError: server rejected the signup (its message is kept,
                e.g. "Email already exists") or the server was unreachable
        """
        auth_salt = crypto.generate_salt(source=self.source)
        encryption_salt = crypto.generate_salt(source=self.source)

        auth_hash = self.derive(account_password, auth_salt)
        # TODO: give the master check hash its own salt once the signup
        # payload and account table carry a third salt
        master_check_hash = self.derive(master_password, auth_salt)

        payload = {
            "email": email,
            "authSalt": crypto.to_base64(auth_salt),
            "encryptionSalt": crypto.to_base64(encryption_salt),
            "authHash": crypto.to_base64(auth_hash),
            "masterPasswordCheckHash": crypto.to_base64(master_check_hash),
        }

        try:
            status, body = self.transport.request("POST", "/api/signup", payload)
        except TransportError as e:
            logger.error("Signup error: %s", e)
            raise SignupError(SIGNUP_UNAVAILABLE) from e

        if not _ok(status):
            raise SignupError(body.get("error") or SIGNUP_FAILED)

    def login(self, email: str, account_password: str) -> str:
        """
        Log in with the account password.

        Returns:
            The logged-in email (also stored in self.logged_in_user)

        Raises:
            LoginError: always with a generic message
        """
        path = "/api/get-salts/" + urllib.parse.quote(email, safe="")
        try:
            status, body = self.transport.request("GET", path)
            if not _ok(status):
                raise LoginError(LOGIN_FAILED)

            try:
                auth_salt = crypto.from_base64(body.get("authSalt"))
            except crypto.InvalidArgument as e:
                logger.error("Login error: malformed salt response")
                raise LoginError(LOGIN_FAILED) from e
            if not auth_salt:
                logger.error("Login error: empty salt response")
                raise LoginError(LOGIN_FAILED)

            provided = crypto.to_base64(self.derive(account_password, auth_salt))
            status, _ = self.transport.request(
                "POST", "/api/login", {"email": email, "providedAuthHash": provided}
            )
        except TransportError as e:
            logger.error("Login error: %s", e)
            raise LoginError(LOGIN_UNAVAILABLE) from e

        if not _ok(status):
            raise LoginError(LOGIN_FAILED)

        self.logged_in_user = email
        return email

    def logout(self) -> None:
        self.logged_in_user = None
