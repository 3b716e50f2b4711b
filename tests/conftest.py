"""
Pytest configuration and helpers for the Comax tests
"""
from unittest.mock import MagicMock

import pytest

from app.comax_client.config import ComaxConfig
from app.comax_client.operations import COMAX_NS
from app.comax_client.soap_client import ComaxSoapClient
from app.comax.operation_logger import OperationLogger
from app.comax.service import ComaxService


SOAP_TEMPLATE = """<?xml version="1.0" encoding="utf-8"?>
<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/" xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" xmlns:xsd="http://www.w3.org/2001/XMLSchema">
  <soap:Body>
    <{method}Response xmlns="{ns}">
      {inner}
    </{method}Response>
  </soap:Body>
</soap:Envelope>"""


def build_soap_response(method: str, result: str, extra: str = "", ns: str = COMAX_NS) -> str:
    """SOAP response whose <method>Result holds the given inner XML or text."""
    inner = f"<{method}Result>{result}</{method}Result>{extra}"
    return SOAP_TEMPLATE.format(method=method, ns=ns, inner=inner)


def http_response(text: str, status_code: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.content = text.encode("utf-8")
    return resp


@pytest.fixture
def soap_response():
    return build_soap_response


@pytest.fixture
def make_http_response():
    return http_response


@pytest.fixture
def comax_config(tmp_path):
    """Configuration with fake credentials; artifacts go to a temp dir."""
    return ComaxConfig(
        order_login_id="order-user",
        order_login_password="order-secret",
        token_login_name="token-user",
        token_login_password="token-secret",
        payment_login_id="pay-user",
        payment_login_password="pay-secret",
        artifacts_dir=tmp_path / "artifacts",
    )


@pytest.fixture
def session():
    """requests.Session stand-in; tests set post/get return values."""
    return MagicMock()


@pytest.fixture
def soap_client(comax_config, session):
    return ComaxSoapClient(comax_config, session=session)


@pytest.fixture
def service(comax_config, soap_client):
    return ComaxService(comax_config, client=soap_client, op_logger=OperationLogger("comax.test"))


@pytest.fixture
def sample_items():
    return [
        {"sku": "A1", "quantity": 2, "price": 10.5, "totalSum": 21.0},
        {"sku": "B2", "quantity": 1, "price": 5, "totalSum": 5, "remarks": "gift wrap"},
    ]


@pytest.fixture
def order_params(sample_items):
    return {
        "customerName": "Dana Levi",
        "customerPhone": "050-1234567",
        "customerCity": "Haifa",
        "items": sample_items,
    }
