"""Auth session and action gate."""

from typing import Callable, Optional
from urllib.parse import quote

from storefront.utils.config import StorefrontConfig
from storefront.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)


def build_login_redirect(current_path: str = "/", action: Optional[str] = None) -> str:
    """Login URL that returns the user to ``current_path`` and resumes ``action``."""
    url = StorefrontConfig.LOGIN_PATH

    if current_path and current_path != "/":
        url += "?redirect=" + quote(current_path, safe="")

    if action:
        separator = "&" if "?" in url else "?"
        url += separator + "action=" + quote(action, safe="")

    return url


class AuthSession:
    """
    Holds the bearer token for authenticated requests and gates user actions.

    ``require_auth`` returns False when no user is signed in, after handing
    the login URL to ``on_redirect``; callers treat False as "abort silently".
    """

    def __init__(
        self,
        access_token: Optional[str] = None,
        on_redirect: Optional[Callable[[str], None]] = None,
        current_path: Callable[[], str] = lambda: "/",
    ):
        self.access_token = access_token
        self._on_redirect = on_redirect
        self._current_path = current_path

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    def token(self) -> Optional[str]:
        """Token provider for StorefrontApiClient."""
        return self.access_token

    def sign_in(self, access_token: str) -> None:
        self.access_token = access_token

    def sign_out(self) -> None:
        self.access_token = None

    def require_auth(self, action: Optional[str] = None) -> bool:
        if self.is_authenticated:
            return True

        redirect_url = build_login_redirect(self._current_path(), action)
        logger.info("Action requires authentication", action=action, redirect_url=redirect_url)
        if self._on_redirect is not None:
            self._on_redirect(redirect_url)
        return False
