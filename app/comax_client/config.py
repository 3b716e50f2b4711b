"""
Configuration for the Comax client

Reads credentials and store defaults from the environment once and freezes
them into a ComaxConfig value that is passed explicitly to the client and
the service layer.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv

from .exceptions import ComaxConfigError

load_dotenv()


# Comax web services (SOAP 1.1, ASMX)
ORDER_ENDPOINT = "http://ws.comax.co.il/Comax_WebServices/CustomersOrders_Service.asmx"
TOKEN_ENDPOINT = "http://ws.comax.co.il/WS_WRK/Work_Comax_WS/Credit_GetTokenLogin.asmx"
PAYMENT_PAGE = "http://ws.comax.co.il/Comax_WebServices/Credit/ShortCreditInput_V.aspx"
CUSTOMER_ENDPOINT = "http://ws.comax.co.il/Comax_WebServices/Customers_Service.asmx"

REQUIRED_ENV_VARS = (
    "ORDER_LOGIN_ID",
    "ORDER_LOGIN_PASSWORD",
    "TOKEN_LOGIN_NAME",
    "TOKEN_LOGIN_PASSWORD",
    "PAYMENT_LOGIN_ID",
    "PAYMENT_LOGIN_PASSWORD",
)

DEFAULT_BRANCH_ID = 6
DEFAULT_STORE_ID = 6
DEFAULT_PRICE_LIST_ID = 1
DEFAULT_RETURN_PAGE = "https://www.gimo.co.il/"
DEFAULT_CUSTOMER_ID = "22222"
DEFAULT_REFERENCE_PREFIX = "GIMO_ORDER"


def _positive_int(value: Optional[str], default: int) -> int:
    """Parse a positive integer, falling back to default on empty/invalid/zero."""
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ComaxConfig:
    """Immutable process-wide settings for every Comax operation."""

    order_login_id: str
    order_login_password: str
    token_login_name: str
    token_login_password: str
    payment_login_id: str
    payment_login_password: str
    branch_id: int = DEFAULT_BRANCH_ID
    store_id: int = DEFAULT_STORE_ID
    price_list_id: int = DEFAULT_PRICE_LIST_ID
    return_page: str = DEFAULT_RETURN_PAGE
    default_customer_id: str = DEFAULT_CUSTOMER_ID
    reference_prefix: str = DEFAULT_REFERENCE_PREFIX
    order_endpoint: str = ORDER_ENDPOINT
    token_endpoint: str = TOKEN_ENDPOINT
    payment_page: str = PAYMENT_PAGE
    customer_endpoint: str = CUSTOMER_ENDPOINT
    connect_timeout: int = 15
    read_timeout: int = 45
    debug_soap: bool = False
    artifacts_dir: Path = field(default_factory=lambda: Path("artifacts"))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ComaxConfig":
        """
        Build the configuration from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            ComaxConfig instance

        Raises:
            ComaxConfigError: If any required credential is missing
        """
        env = os.environ if environ is None else environ

        missing = [name for name in REQUIRED_ENV_VARS if not (env.get(name) or "").strip()]
        if missing:
            raise ComaxConfigError(
                "Missing required environment variables: "
                + ", ".join(missing)
                + ". Please check your .env file."
            )

        return cls(
            order_login_id=env["ORDER_LOGIN_ID"].strip(),
            order_login_password=env["ORDER_LOGIN_PASSWORD"].strip(),
            token_login_name=env["TOKEN_LOGIN_NAME"].strip(),
            token_login_password=env["TOKEN_LOGIN_PASSWORD"].strip(),
            payment_login_id=env["PAYMENT_LOGIN_ID"].strip(),
            payment_login_password=env["PAYMENT_LOGIN_PASSWORD"].strip(),
            branch_id=_positive_int(env.get("BRANCH_ID"), DEFAULT_BRANCH_ID),
            store_id=_positive_int(env.get("STORE_ID"), DEFAULT_STORE_ID),
            price_list_id=_positive_int(env.get("PRICE_LIST_ID"), DEFAULT_PRICE_LIST_ID),
            return_page=env.get("RETURN_PAGE") or DEFAULT_RETURN_PAGE,
            default_customer_id=env.get("COMAX_DEFAULT_CUSTOMER_ID") or DEFAULT_CUSTOMER_ID,
            reference_prefix=env.get("COMAX_REFERENCE_PREFIX") or DEFAULT_REFERENCE_PREFIX,
            order_endpoint=env.get("COMAX_ORDER_ENDPOINT") or ORDER_ENDPOINT,
            token_endpoint=env.get("COMAX_TOKEN_ENDPOINT") or TOKEN_ENDPOINT,
            payment_page=env.get("COMAX_PAYMENT_PAGE") or PAYMENT_PAGE,
            customer_endpoint=env.get("COMAX_CUSTOMER_ENDPOINT") or CUSTOMER_ENDPOINT,
            connect_timeout=_positive_int(env.get("COMAX_TIMEOUT_CONNECT"), 15),
            read_timeout=_positive_int(env.get("COMAX_TIMEOUT_READ"), 45),
            debug_soap=_flag(env.get("COMAX_DEBUG_SOAP")),
            artifacts_dir=Path(env.get("COMAX_ARTIFACTS_DIR") or "artifacts"),
        )

    @property
    def endpoints(self) -> Dict[str, str]:
        """Endpoint URL by service key ('order', 'token', 'customer')."""
        return {
            "order": self.order_endpoint,
            "token": self.token_endpoint,
            "customer": self.customer_endpoint,
        }

    def get_endpoint_url(self, endpoint_key: str) -> str:
        """
        Resolve the URL for a service key.

        Args:
            endpoint_key: 'order', 'token' or 'customer'

        Returns:
            Full endpoint URL
        """
        try:
            return self.endpoints[endpoint_key]
        except KeyError:
            raise ValueError(f"Unknown Comax endpoint: {endpoint_key}") from None

    @property
    def secrets(self) -> tuple:
        """Credential values that must never reach logs or debug dumps."""
        return (
            self.order_login_password,
            self.token_login_password,
            self.payment_login_password,
        )

    def __repr__(self) -> str:
        return (
            f"ComaxConfig(order_login_id={self.order_login_id!r}, "
            f"branch_id={self.branch_id}, store_id={self.store_id}, "
            f"price_list_id={self.price_list_id}, order_endpoint={self.order_endpoint!r})"
        )


def get_comax_config(environ: Optional[Mapping[str, str]] = None) -> ComaxConfig:
    """
    Factory for the Comax configuration.

    Args:
        environ: Optional mapping (defaults to the process environment)

    Returns:
        ComaxConfig instance
    """
    return ComaxConfig.from_env(environ)
