"""
SOAP client for the Comax web services

Posts pre-built SOAP 1.1 envelopes with requests and returns the response
text. Interpretation of that text is left to response_parser.
"""
import logging
from pathlib import Path
from typing import Optional

import requests

from .config import ComaxConfig
from .exceptions import ComaxTransportError
from .operations import Operation
from .response_parser import parse_fault

logger = logging.getLogger(__name__)

SOAP11_CONTENT_TYPE = "text/xml; charset=utf-8"
SECRET_MASK = "***"


def _response_text(resp: requests.Response) -> str:
    # Comax often omits the charset; its documents are UTF-8
    return resp.content.decode("utf-8", errors="replace")


class ComaxSoapClient:
    """
    Thin HTTP layer over the Comax ASMX services.

    One requests.Session is shared by every call. The client holds no other
    per-request state, so it can be reused across threads and concurrent tool
    calls.
    """

    def __init__(self, config: ComaxConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()
        self.connect_timeout = config.connect_timeout
        self.read_timeout = config.read_timeout

    def _endpoint_url(self, operation: Operation) -> str:
        url = self.config.get_endpoint_url(operation.endpoint)
        if operation.query:
            separator = "&" if "?" in url else "?"
            url = f"{url}{separator}{operation.query}"
        return url

    def _soap_headers(self, operation: Operation) -> dict:
        return {
            "Content-Type": SOAP11_CONTENT_TYPE,
            "SOAPAction": f'"{operation.soap_action}"',
        }

    def call(self, operation: Operation, soap_bytes: bytes) -> str:
        """
        POST one envelope and return the response body.

        Args:
            operation: Target operation (endpoint and SOAPAction)
            soap_bytes: Serialized envelope

        Returns:
            Response text (UTF-8)

        Raises:
            ComaxTransportError: On connection errors, timeouts or non-2xx status
        """
        url = self._endpoint_url(operation)
        logger.info(f"Sending {operation.method} to {url}")

        try:
            resp = self.session.post(
                url,
                data=soap_bytes,
                headers=self._soap_headers(operation),
                timeout=(self.connect_timeout, self.read_timeout),
            )
        except requests.exceptions.RequestException as e:
            self._save_raw_soap_debug(operation, soap_bytes, None)
            raise ComaxTransportError(
                f"Error calling Comax {operation.method}: {e}"
            ) from e

        text = _response_text(resp)
        self._save_raw_soap_debug(operation, soap_bytes, text)

        if not 200 <= resp.status_code < 300:
            fault = parse_fault(text)
            detail = fault or text[:500]
            logger.warning(f"{operation.method} failed with HTTP {resp.status_code}")
            raise ComaxTransportError(
                f"HTTP {resp.status_code} from Comax {operation.method}: {detail}",
                status_code=resp.status_code,
                raw_response=text,
            )

        logger.debug(f"{operation.method} answered HTTP {resp.status_code} ({len(text)} chars)")
        return text

    def fetch_url(self, url: str) -> str:
        """
        GET a document Comax pointed us to (second hop of GetCustomersOrders_Simple).

        Raises:
            ComaxTransportError: On connection errors, timeouts or non-2xx status
        """
        logger.info(f"Fetching secondary document: {url}")
        try:
            resp = self.session.get(url, timeout=(self.connect_timeout, self.read_timeout))
        except requests.exceptions.RequestException as e:
            raise ComaxTransportError(f"Error fetching {url}: {e}") from e

        text = _response_text(resp)
        if not 200 <= resp.status_code < 300:
            raise ComaxTransportError(
                f"HTTP {resp.status_code} fetching {url}",
                status_code=resp.status_code,
                raw_response=text,
            )
        return text

    def _mask_secrets(self, text: str) -> str:
        for secret in self.config.secrets:
            if secret:
                text = text.replace(secret, SECRET_MASK)
        return text

    def _save_raw_soap_debug(
        self,
        operation: Operation,
        soap_bytes: bytes,
        response_text: Optional[str],
    ) -> None:
        """
        Save the last sent/received SOAP documents when COMAX_DEBUG_SOAP is set.

        Passwords are masked. Failures here are logged and never propagate.
        """
        if not self.config.debug_soap:
            return

        try:
            out_dir = Path(self.config.artifacts_dir)
            out_dir.mkdir(parents=True, exist_ok=True)

            sent_file = out_dir / f"soap_last_sent_{operation.name}.xml"
            sent_text = soap_bytes.decode("utf-8", errors="replace")
            sent_file.write_text(self._mask_secrets(sent_text), encoding="utf-8")
            logger.debug(f"Raw SOAP request saved to: {sent_file}")

            if response_text is not None:
                received_file = out_dir / f"soap_last_received_{operation.name}.xml"
                received_file.write_text(self._mask_secrets(response_text), encoding="utf-8")
                logger.debug(f"Raw SOAP response saved to: {received_file}")
        except OSError as e:
            logger.warning(f"Could not save raw SOAP debug (ignored): {e}")

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
