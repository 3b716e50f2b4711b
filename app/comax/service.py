"""
Comax operation service

Validates caller parameters, builds the envelope, performs the round trip
and interprets the answer. Every public method returns an OperationResult;
ComaxClientError never leaves this layer.
"""
import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple, Type
from urllib.parse import urlencode

from app.comax_client import envelope, response_parser
from app.comax_client.config import ComaxConfig
from app.comax_client.exceptions import ComaxClientError, ComaxParseError
from app.comax_client.models import OperationResult, OrdersSimpleResult, PaymentLink
from app.comax_client.operations import (
    CHK_ITEM_EXISTS_IN_ORDERS,
    GET_CUSTOMER_DETAILS,
    GET_ORDER_DETAILS,
    GET_ORDER_PDF_LINK,
    GET_ORDER_STATUS,
    GET_ORDERS_BY_CREDIT_CARD,
    GET_ORDERS_SIMPLE,
    GET_PAYMENT_TOKEN,
    SET_ORDER_SELF_PICKUP,
    SET_ORDER_STATUS,
    WRITE_ORDER,
)
from app.comax_client.params import (
    ChkItemExistsParams,
    ComaxParams,
    CreateOrderParams,
    CreatePaymentLinkParams,
    CustomerDetailsParams,
    OrderDetailsParams,
    OrderPdfLinkParams,
    OrderStatusParams,
    OrdersByCreditCardParams,
    OrdersSimpleParams,
    SetOrderSelfPickupParams,
    SetOrderStatusParams,
    UpdateOrderPaymentParams,
    parse_params,
)
from app.comax_client.soap_client import ComaxSoapClient

from .operation_logger import OperationLogger, get_logger

logger = logging.getLogger(__name__)

STAGE_ORDER_WRITE = "order_write"
STAGE_PAYMENT_TOKEN = "payment_token"

# Flag the payment page expects as a bare query key
PAYMENT_PAGE_SECURE_FLAG = "IsSecure190123"
MAX_PAYMENTS_NUMBER = 12


class ComaxService:
    """One method per tool; each call is independent and stateless."""

    def __init__(
        self,
        config: ComaxConfig,
        client: Optional[ComaxSoapClient] = None,
        op_logger: Optional[OperationLogger] = None,
    ):
        self.config = config
        self.client = client or ComaxSoapClient(config)
        self.op_logger = op_logger or get_logger()

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------
    def _run(
        self,
        tool: str,
        model: Type[ComaxParams],
        data: Any,
        handler: Callable[[Any], OperationResult],
    ) -> OperationResult:
        start = time.monotonic()
        self.op_logger.log_operation(tool, "START")
        try:
            params = parse_params(model, data)
            result = handler(params)
        except ComaxClientError as e:
            result = self._failure(tool, e)
        self.op_logger.log_result(result, time.monotonic() - start)
        return result

    @staticmethod
    def _failure(tool: str, error: ComaxClientError, stage: Optional[str] = None) -> OperationResult:
        return OperationResult.fail(
            tool,
            str(error) or error.__class__.__name__,
            raw_response=getattr(error, "raw_response", None),
            stage=stage,
        )

    def new_reference(self) -> str:
        return f"{self.config.reference_prefix}_{int(time.time() * 1000)}"

    def build_payment_url(self, token: str) -> str:
        """Payment page URL for a freshly minted token."""
        query = urlencode(
            [
                ("LoginID", self.config.payment_login_id),
                ("LoginPassword", self.config.payment_login_password),
                ("TokenLogin", token),
                ("MaxPaymentsNumber", MAX_PAYMENTS_NUMBER),
                ("GetErrMsg", 1),
                ("AutoCreditCompany", 1),
                ("ViewTotal", 1),
            ]
        )
        return f"{self.config.payment_page}?{query}&{PAYMENT_PAGE_SECURE_FLAG}"

    def _write_order(self, params: CreateOrderParams, reference: str) -> Tuple[str, str]:
        soap = envelope.build_write_order_envelope(self.config, params, reference)
        raw = self.client.call(WRITE_ORDER, soap)
        return response_parser.parse_write_order_response(raw), raw

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def create_order(self, data: Any) -> OperationResult:
        return self._run("create_comax_order", CreateOrderParams, data, self._create_order)

    def _create_order(self, params: CreateOrderParams) -> OperationResult:
        reference = params.reference or self.new_reference()
        doc_number, raw = self._write_order(params, reference)
        payload = {
            "doc_number": doc_number,
            "reference": reference,
            "total_sum": params.total_sum,
        }
        return OperationResult.ok("create_comax_order", payload, raw_response=raw)

    def create_payment_link(self, data: Any) -> OperationResult:
        return self._run(
            "create_comax_payment_link",
            CreatePaymentLinkParams,
            data,
            self._create_payment_link,
        )

    def _create_payment_link(self, params: CreatePaymentLinkParams) -> OperationResult:
        tool = "create_comax_payment_link"
        reference = params.reference or self.new_reference()
        total_sum = params.total_sum

        try:
            doc_number, _ = self._write_order(params, reference)
        except ComaxClientError as e:
            return self._failure(tool, e, stage=STAGE_ORDER_WRITE)
        self.op_logger.log_operation(tool, "ORDER_WRITTEN", doc_number=doc_number, reference=reference)

        try:
            soap = envelope.build_payment_token_envelope(self.config, total_sum, doc_number, reference)
            raw = self.client.call(GET_PAYMENT_TOKEN, soap)
            token = response_parser.parse_payment_token_response(raw)
        except ComaxClientError as e:
            return self._failure(tool, e, stage=STAGE_PAYMENT_TOKEN)

        link = PaymentLink(
            doc_number=doc_number,
            reference=reference,
            total_sum=total_sum,
            payment_url=self.build_payment_url(token),
        )
        return OperationResult.ok(tool, link)

    def update_order_payment(self, data: Any) -> OperationResult:
        return self._run(
            "update_comax_order_payment",
            UpdateOrderPaymentParams,
            data,
            self._update_order_payment,
        )

    def _update_order_payment(self, params: UpdateOrderPaymentParams) -> OperationResult:
        soap = envelope.build_update_order_payment_envelope(self.config, params)
        raw = self.client.call(WRITE_ORDER, soap)
        # Comax acknowledges updates with an HTTP 200; the echoed DocNumber is informative only
        try:
            echoed = response_parser.parse_write_order_response(raw)
        except ComaxParseError as e:
            logger.warning(f"Update of order {params.doc_number} returned no DocNumber: {e}")
            echoed = None
        payload = {"doc_number": params.doc_number, "echoed_doc_number": echoed}
        return OperationResult.ok("update_comax_order_payment", payload, raw_response=raw)

    def get_customer_details(self, data: Any) -> OperationResult:
        return self._run(
            "get_comax_customer_details",
            CustomerDetailsParams,
            data,
            self._get_customer_details,
        )

    def _get_customer_details(self, params: CustomerDetailsParams) -> OperationResult:
        soap = envelope.build_customer_details_envelope(self.config, params.customer_id)
        raw = self.client.call(GET_CUSTOMER_DETAILS, soap)
        customer = response_parser.parse_customer_details_response(raw)
        return OperationResult.ok("get_comax_customer_details", customer, raw_response=raw)

    def get_order_status(self, data: Any) -> OperationResult:
        return self._run("get_comax_order_status", OrderStatusParams, data, self._get_order_status)

    def _get_order_status(self, params: OrderStatusParams) -> OperationResult:
        soap = envelope.build_order_status_envelope(self.config, params)
        raw = self.client.call(GET_ORDER_STATUS, soap)
        status = response_parser.parse_order_status_response(raw)
        return OperationResult.ok("get_comax_order_status", status, raw_response=raw)

    def get_order_details(self, data: Any) -> OperationResult:
        return self._run("get_comax_order_details", OrderDetailsParams, data, self._get_order_details)

    def _get_order_details(self, params: OrderDetailsParams) -> OperationResult:
        soap = envelope.build_order_details_envelope(self.config, params)
        raw = self.client.call(GET_ORDER_DETAILS, soap)
        details = response_parser.parse_order_details_response(raw)
        return OperationResult.ok("get_comax_order_details", details, raw_response=raw)

    def get_order_pdf_link(self, data: Any) -> OperationResult:
        return self._run("get_comax_order_pdf_link", OrderPdfLinkParams, data, self._get_order_pdf_link)

    def _get_order_pdf_link(self, params: OrderPdfLinkParams) -> OperationResult:
        soap = envelope.build_order_pdf_link_envelope(self.config, params)
        raw = self.client.call(GET_ORDER_PDF_LINK, soap)
        url = response_parser.parse_order_pdf_link_response(raw)
        return OperationResult.ok("get_comax_order_pdf_link", url, raw_response=raw)

    def set_order_status(self, data: Any) -> OperationResult:
        return self._run("set_comax_order_status", SetOrderStatusParams, data, self._set_order_status)

    def _set_order_status(self, params: SetOrderStatusParams) -> OperationResult:
        soap = envelope.build_set_order_status_envelope(self.config, params)
        raw = self.client.call(SET_ORDER_STATUS, soap)
        updated = response_parser.parse_set_order_status_response(raw)
        return OperationResult.ok("set_comax_order_status", updated, raw_response=raw)

    def get_orders_by_credit_card(self, data: Any) -> OperationResult:
        return self._run(
            "get_comax_orders_by_credit_card",
            OrdersByCreditCardParams,
            data,
            self._get_orders_by_credit_card,
        )

    def _get_orders_by_credit_card(self, params: OrdersByCreditCardParams) -> OperationResult:
        soap = envelope.build_orders_by_credit_card_envelope(self.config, params)
        raw = self.client.call(GET_ORDERS_BY_CREDIT_CARD, soap)
        orders = response_parser.parse_orders_by_credit_card_response(raw)
        return OperationResult.ok("get_comax_orders_by_credit_card", orders, raw_response=raw)

    def get_orders_simple(self, data: Any) -> OperationResult:
        return self._run("get_comax_orders_simple", OrdersSimpleParams, data, self._get_orders_simple)

    def _get_orders_simple(self, params: OrdersSimpleParams) -> OperationResult:
        soap = envelope.build_orders_simple_envelope(self.config, params)
        raw = self.client.call(GET_ORDERS_SIMPLE, soap)
        result = response_parser.parse_orders_simple_response(raw)

        if not result.startswith("http"):
            payload = OrdersSimpleResult(result=result)
            return OperationResult.ok("get_comax_orders_simple", payload, raw_response=raw)

        try:
            document = self.client.fetch_url(result)
            records = response_parser.parse_orders_simple_records(document)
        except ComaxClientError as e:
            logger.warning(f"Could not read orders document {result}: {e}")
            payload = OrdersSimpleResult(result=result, is_url=True, secondary_error=str(e))
        else:
            payload = OrdersSimpleResult(result=result, is_url=True, records=records)
        return OperationResult.ok("get_comax_orders_simple", payload, raw_response=raw)

    def chk_item_exists_in_orders(self, data: Any) -> OperationResult:
        return self._run(
            "chk_item_exists_in_orders",
            ChkItemExistsParams,
            data,
            self._chk_item_exists_in_orders,
        )

    def _chk_item_exists_in_orders(self, params: ChkItemExistsParams) -> OperationResult:
        soap = envelope.build_chk_item_exists_envelope(self.config, params)
        raw = self.client.call(CHK_ITEM_EXISTS_IN_ORDERS, soap)
        exists = response_parser.parse_chk_item_exists_response(raw)
        return OperationResult.ok("chk_item_exists_in_orders", exists, raw_response=raw)

    def set_order_self_pickup(self, data: Any) -> OperationResult:
        return self._run(
            "set_comax_order_self_pickup",
            SetOrderSelfPickupParams,
            data,
            self._set_order_self_pickup,
        )

    def _set_order_self_pickup(self, params: SetOrderSelfPickupParams) -> OperationResult:
        soap = envelope.build_set_order_self_pickup_envelope(self.config, params)
        raw = self.client.call(SET_ORDER_SELF_PICKUP, soap)
        updated = response_parser.parse_set_order_self_pickup_response(raw)
        return OperationResult.ok("set_comax_order_self_pickup", updated, raw_response=raw)

    # ------------------------------------------------------------------
    # Dispatch by tool name
    # ------------------------------------------------------------------
    def run_tool(self, name: str, data: Any) -> OperationResult:
        """
        Run a tool by its public name.

        Raises:
            KeyError: If the tool name is unknown
        """
        method_name = TOOLS[name]
        return getattr(self, method_name)(data)

    def close(self) -> None:
        self.client.close()


# Public tool name -> service method
TOOLS: Dict[str, str] = {
    "create_comax_order": "create_order",
    "create_comax_payment_link": "create_payment_link",
    "update_comax_order_payment": "update_order_payment",
    "get_comax_customer_details": "get_customer_details",
    "get_comax_order_status": "get_order_status",
    "get_comax_order_details": "get_order_details",
    "get_comax_order_pdf_link": "get_order_pdf_link",
    "set_comax_order_status": "set_order_status",
    "get_comax_orders_by_credit_card": "get_orders_by_credit_card",
    "get_comax_orders_simple": "get_orders_simple",
    "chk_item_exists_in_orders": "chk_item_exists_in_orders",
    "set_comax_order_self_pickup": "set_order_self_pickup",
}
