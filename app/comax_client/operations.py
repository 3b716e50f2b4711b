"""
Catalog of the Comax SOAP operations used by this service
"""
from dataclasses import dataclass
from typing import Dict

COMAX_NS = "http://ws.comax.co.il/Comax_WebServices/"
TEMPURI_NS = "http://tempuri.org/"


@dataclass(frozen=True)
class Operation:
    """Static description of one remote SOAP method."""
    name: str
    method: str
    endpoint: str
    namespace: str = COMAX_NS
    query: str = ""

    @property
    def soap_action(self) -> str:
        return f"{self.namespace}{self.method}"

    @property
    def response_element(self) -> str:
        return f"{self.method}Response"

    @property
    def result_element(self) -> str:
        return f"{self.method}Result"


WRITE_ORDER = Operation(
    name="write_order",
    method="WriteCustomersOrderByParamsExtendedPlusPrice",
    endpoint="order",
)
GET_PAYMENT_TOKEN = Operation(
    name="get_payment_token",
    method="getLoginDetailsParams",
    endpoint="token",
    namespace=TEMPURI_NS,
)
GET_CUSTOMER_DETAILS = Operation(
    name="get_customer_details",
    method="Get_CustomerDetails",
    endpoint="customer",
    query="op=Get_CustomerDetails",
)
GET_ORDER_STATUS = Operation(
    name="get_order_status",
    method="GetCustomerOrderStatus",
    endpoint="order",
)
GET_ORDER_DETAILS = Operation(
    name="get_order_details",
    method="Get_CustomerOrderDetails",
    endpoint="order",
)
GET_ORDER_PDF_LINK = Operation(
    name="get_order_pdf_link",
    method="Get_CustomerOrderPDF_Link",
    endpoint="order",
)
SET_ORDER_STATUS = Operation(
    name="set_order_status",
    method="SetCustomerOrderStatusByParams",
    endpoint="order",
)
GET_ORDERS_BY_CREDIT_CARD = Operation(
    name="get_orders_by_credit_card",
    method="GetCustomersOrdersByCreditCard",
    endpoint="order",
)
GET_ORDERS_SIMPLE = Operation(
    name="get_orders_simple",
    method="GetCustomersOrders_Simple",
    endpoint="order",
)
CHK_ITEM_EXISTS_IN_ORDERS = Operation(
    name="chk_item_exists_in_orders",
    method="ChkItemExistsInOrders",
    endpoint="order",
)
SET_ORDER_SELF_PICKUP = Operation(
    name="set_order_self_pickup",
    method="SetCustomerOrderSelfPickup",
    endpoint="order",
)

OPERATIONS: Dict[str, Operation] = {
    op.name: op
    for op in (
        WRITE_ORDER,
        GET_PAYMENT_TOKEN,
        GET_CUSTOMER_DETAILS,
        GET_ORDER_STATUS,
        GET_ORDER_DETAILS,
        GET_ORDER_PDF_LINK,
        SET_ORDER_STATUS,
        GET_ORDERS_BY_CREDIT_CARD,
        GET_ORDERS_SIMPLE,
        CHK_ITEM_EXISTS_IN_ORDERS,
        SET_ORDER_SELF_PICKUP,
    )
}
