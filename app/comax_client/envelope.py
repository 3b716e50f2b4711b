"""
SOAP 1.1 envelope builder for the Comax web services

Every request is assembled with lxml elements, never by string
interpolation, so caller text is escaped by the serializer.

Notes:
- Field order inside each method element is the order Comax expects.
- A field whose value is None is omitted; "" renders an empty tag.
- Line items render as parallel <string> arrays (one entry per item).
"""
from decimal import Decimal
from typing import Any, Iterable, List, Sequence, Tuple

import lxml.etree as etree

from .config import ComaxConfig
from .exceptions import ComaxValidationError
from .models import OrderItem, to_decimal
from .operations import (
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
    Operation,
)
from .params import (
    ORDERS_SIMPLE_FILTERS,
    ChkItemExistsParams,
    CreateOrderParams,
    OrderDetailsParams,
    OrderPdfLinkParams,
    OrderStatusParams,
    OrdersByCreditCardParams,
    OrdersSimpleParams,
    SetOrderSelfPickupParams,
    SetOrderStatusParams,
    UpdateOrderPaymentParams,
)

SOAP11_NS = "http://schemas.xmlsoap.org/soap/envelope/"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"
XSD_NS = "http://www.w3.org/2001/XMLSchema"

ENVELOPE_NSMAP = {"xsi": XSI_NS, "xsd": XSD_NS, "soap": SOAP11_NS}

# Placeholder Comax uses for "no document number / reference / year"
ZERO = "0"

Fields = Sequence[Tuple[str, Any]]


def format_decimal(value: Any) -> str:
    """
    Render an amount in invariant fixed-point notation.

    Never uses exponents or locale separators; trailing zeros are dropped
    (21.0 -> "21", 10.50 -> "10.5").
    """
    d = to_decimal(value)
    if not d.is_finite():
        raise ComaxValidationError(f"Amount must be a finite number, got {value!r}")
    if d == d.to_integral_value():
        return format(d.to_integral_value(), "f")
    return format(d.normalize(), "f")


def format_value(value: Any) -> str:
    """Text form of a scalar field value."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (float, Decimal)):
        return format_decimal(value)
    return str(value)


def _append_fields(parent: Any, namespace: str, fields: Iterable[Tuple[str, Any]]) -> None:
    for name, value in fields:
        if value is None:
            continue
        elem = etree.SubElement(parent, f"{{{namespace}}}{name}")
        if isinstance(value, (list, tuple)) and not isinstance(value, str):
            if value and isinstance(value[0], tuple):
                _append_fields(elem, namespace, value)
            else:
                for entry in value:
                    string_elem = etree.SubElement(elem, f"{{{namespace}}}string")
                    string_elem.text = format_value(entry)
        else:
            elem.text = format_value(value)


def build_envelope(operation: Operation, fields: Fields) -> bytes:
    """
    Build a complete SOAP 1.1 request document.

    Args:
        operation: Target operation (method name and namespace)
        fields: Ordered (element name, value) pairs. Lists render as
            <string> arrays, lists of pairs as nested elements.

    Returns:
        UTF-8 bytes with XML declaration
    """
    envelope = etree.Element(f"{{{SOAP11_NS}}}Envelope", nsmap=ENVELOPE_NSMAP)
    body = etree.SubElement(envelope, f"{{{SOAP11_NS}}}Body")
    method = etree.SubElement(
        body,
        f"{{{operation.namespace}}}{operation.method}",
        nsmap={None: operation.namespace},
    )
    _append_fields(method, operation.namespace, fields)
    return etree.tostring(envelope, xml_declaration=True, encoding="utf-8", pretty_print=True)


def _credentials(config: ComaxConfig) -> List[Tuple[str, Any]]:
    return [
        ("LoginID", config.order_login_id),
        ("LoginPassword", config.order_login_password),
    ]


def _or_zero(value: Any) -> Any:
    return value if value else ZERO


def item_arrays(items: Sequence[OrderItem]) -> dict:
    """Parallel per-field arrays for a list of order lines, in input order."""
    return {
        "Items": [item.sku for item in items],
        "Quantity": [item.quantity for item in items],
        "Price": [item.price for item in items],
        "TotalSum": [item.total_sum for item in items],
        "ItemRemarks": [item.remarks or "" for item in items],
    }


def build_write_order_envelope(
    config: ComaxConfig,
    params: CreateOrderParams,
    reference: str,
) -> bytes:
    """WriteCustomersOrderByParamsExtendedPlusPrice in Add mode."""
    arrays = item_arrays(params.order_items)
    fields = [
        ("CustomerID", params.customer_id or config.default_customer_id),
        ("StoreID", config.store_id),
        ("BranchID", config.branch_id),
        ("PriceListID", params.price_list_id or config.price_list_id),
        ("DoJ5", True),
        ("Remarks", params.remarks or "Order via API"),
        ("Details", f"Order for {params.customer_name}"),
        ("Reference", reference),
        ("Mode", "Add"),
        ("DocNumber", ""),
        ("ManualDocNumber", False),
        ("Items", arrays["Items"]),
        ("Quantity", arrays["Quantity"]),
        ("Price", arrays["Price"]),
        ("DiscountPercent", [0]),
        ("TotalSum", arrays["TotalSum"]),
        ("ItemRemarks", arrays["ItemRemarks"]),
        ("CustomerName", params.customer_name),
        ("CustomerPhone", params.customer_phone),
        ("CustomerCity", params.customer_city),
        ("CustomerAddress", params.customer_address),
        ("CustomerZip", params.customer_zip),
        ("Status", 1),
    ] + _credentials(config)
    return build_envelope(WRITE_ORDER, fields)


def build_update_order_payment_envelope(
    config: ComaxConfig,
    params: UpdateOrderPaymentParams,
) -> bytes:
    """WriteCustomersOrderByParamsExtendedPlusPrice in Update mode with card details."""
    arrays = item_arrays(params.order_items)
    fields = _credentials(config) + [
        ("DocNumber", params.doc_number),
        ("CustomerID", params.customer_id or config.default_customer_id),
        ("StoreID", params.store_id or config.store_id),
        ("BranchID", params.branch_id or config.branch_id),
        ("Mode", "Update"),
        ("PayType", params.pay_type),
        ("CreditTokenNumber", params.credit_token_number),
        ("CreditCompany", params.credit_company),
        ("CreditCardNumber", params.credit_card_number),
        ("CreditExpireDate", params.credit_expire_date),
        ("CreditTZ", params.credit_tz),
        ("CreditPaysNumber", params.credit_pays_number),
        ("CreditTransactionType", params.credit_transaction_type),
        ("Items", arrays["Items"]),
        ("Quantity", arrays["Quantity"]),
        ("Price", arrays["Price"]),
        ("TotalSum", arrays["TotalSum"]),
        ("PriceListID", params.price_list_id or config.price_list_id),
        ("DoJ5", True),
        ("Remarks", params.remarks or "Order payment updated with LOGC."),
    ]
    return build_envelope(WRITE_ORDER, fields)


def build_payment_token_envelope(
    config: ComaxConfig,
    total_sum: Decimal,
    doc_number: str,
    reference: str,
) -> bytes:
    """getLoginDetailsParams: mints the token shown on the payment page."""
    token_params = [
        ("Odbc", ""),
        ("Scm", total_sum),
        ("ProceedOnShvaErr", ""),
        ("returnPage", config.return_page),
        ("getErrMsg", 1),
        ("BranchID", config.branch_id),
        ("Token", ""),
        ("currency", "ILS"),
        ("UniqueID", doc_number),
        ("Ref", reference),
        ("MaxPaymentsNumber", 12),
        ("AutoCreditCompany", 1),
        ("ViewTotal", 1),
    ]
    fields = [
        ("TokenParams", token_params),
        ("LoginName", config.token_login_name),
        ("Password", config.token_login_password),
    ]
    return build_envelope(GET_PAYMENT_TOKEN, fields)


def build_customer_details_envelope(config: ComaxConfig, customer_id: str) -> bytes:
    fields = [
        ("CustomerID", customer_id),
        ("CustomerDetails", ""),
    ] + _credentials(config)
    return build_envelope(GET_CUSTOMER_DETAILS, fields)


def build_order_status_envelope(config: ComaxConfig, params: OrderStatusParams) -> bytes:
    fields = [
        ("DocNumber", _or_zero(params.doc_number)),
        ("Reference", _or_zero(params.reference)),
    ] + _credentials(config)
    return build_envelope(GET_ORDER_STATUS, fields)


def build_order_details_envelope(config: ComaxConfig, params: OrderDetailsParams) -> bytes:
    fields = [
        ("DocNumber", params.doc_number),
        ("DocYear", params.doc_year),
        ("Reference", params.reference),
    ] + _credentials(config)
    return build_envelope(GET_ORDER_DETAILS, fields)


def build_order_pdf_link_envelope(config: ComaxConfig, params: OrderPdfLinkParams) -> bytes:
    fields = [
        ("DocNumber", _or_zero(params.doc_number)),
        ("Reference", _or_zero(params.reference)),
        ("DocYear", _or_zero(params.doc_year)),
        ("SwBySpool", bool(params.sw_by_spool)),
    ] + _credentials(config)
    return build_envelope(GET_ORDER_PDF_LINK, fields)


def build_set_order_status_envelope(config: ComaxConfig, params: SetOrderStatusParams) -> bytes:
    fields = [
        ("DocNumber", _or_zero(params.doc_number)),
        ("DocYear", _or_zero(params.doc_year)),
        ("Reference", _or_zero(params.reference)),
        ("Status", params.status or ""),
        ("StatusCode", params.status_code if params.status_code is not None else 0),
    ] + _credentials(config)
    return build_envelope(SET_ORDER_STATUS, fields)


def build_orders_by_credit_card_envelope(
    config: ComaxConfig, params: OrdersByCreditCardParams
) -> bytes:
    fields = [("CreditCardNumber", params.credit_card_number)] + _credentials(config)
    return build_envelope(GET_ORDERS_BY_CREDIT_CARD, fields)


def build_orders_simple_envelope(config: ComaxConfig, params: OrdersSimpleParams) -> bytes:
    fields = [
        ("FromDate", params.from_date),
        ("ToDate", params.to_date),
    ]
    fields += [(element, getattr(params, attr) or "") for attr, element in ORDERS_SIMPLE_FILTERS]
    fields += _credentials(config)
    return build_envelope(GET_ORDERS_SIMPLE, fields)


def build_chk_item_exists_envelope(config: ComaxConfig, params: ChkItemExistsParams) -> bytes:
    fields = [
        ("ItemID", params.item_id or ""),
        ("OrderNumber", params.order_number or ""),
        ("OrderYear", params.order_year or ""),
        ("Reference", params.reference or ""),
    ] + _credentials(config)
    return build_envelope(CHK_ITEM_EXISTS_IN_ORDERS, fields)


def build_set_order_self_pickup_envelope(
    config: ComaxConfig, params: SetOrderSelfPickupParams
) -> bytes:
    fields = [
        ("DocNumber", _or_zero(params.doc_number)),
        ("DocYear", _or_zero(params.doc_year)),
        ("Reference", _or_zero(params.reference)),
    ] + _credentials(config)
    return build_envelope(SET_ORDER_SELF_PICKUP, fields)
