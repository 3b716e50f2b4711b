"""
Interpretation of Comax SOAP responses

Comax answers are loosely shaped: the same field may come back as one
element or as several, numbers arrive as text, and boolean results may be
an error string instead. Everything here turns that into typed values or
raises ComaxParseError / ComaxVendorError.
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple

import lxml.etree as etree

from .exceptions import ComaxParseError, ComaxVendorError
from .models import (
    CUSTOMER_BOOL_FIELDS,
    ContactPerson,
    CreditCardOrder,
    CustomerDetails,
    OrderDetails,
    OrdersSimpleRecord,
    OrderStatus,
)
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

logger = logging.getLogger(__name__)

XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"

_PARSER = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)


# ---------------------------------------------------------------------
# Generic helpers
# ---------------------------------------------------------------------
def local_name(tag: Any) -> str:
    """Tag name without namespace ('{ns}Body' -> 'Body')."""
    if not isinstance(tag, str):
        return ""
    return etree.QName(tag).localname if tag.startswith("{") else tag


def find_child(elem: Any, name: str) -> Optional[Any]:
    """First direct child with the given local name, or None.

    Compares with 'is None' only: an lxml element without children is falsy.
    """
    for child in elem:
        if local_name(child.tag) == name:
            return child
    return None


def parse_xml(text: Optional[str], operation: str) -> Any:
    """
    Parse a response document.

    Raises:
        ComaxParseError: If the text is empty or not well-formed XML
    """
    if not text or not text.strip():
        raise ComaxParseError(
            f"Empty response for {operation}", operation=operation, raw_response=text
        )
    try:
        return etree.fromstring(text.strip().encode("utf-8"), parser=_PARSER)
    except etree.XMLSyntaxError as e:
        raise ComaxParseError(
            f"Failed to parse Comax {operation} XML: {e}",
            operation=operation,
            raw_response=text,
        ) from e


def element_to_value(elem: Any) -> Any:
    """
    Convert an element into plain Python values.

    - leaf -> stripped text ('' when empty), xsi:nil="true" -> None
    - element with children -> dict keyed by local name
    - repeated child names -> list, in document order
    """
    if elem.get(f"{{{XSI_NS}}}nil") in ("true", "1"):
        return None
    children = [c for c in elem if isinstance(c.tag, str)]
    if not children:
        return (elem.text or "").strip()

    result: Dict[str, Any] = {}
    for child in children:
        key = local_name(child.tag)
        value = element_to_value(child)
        if key in result:
            existing = result[key]
            if isinstance(existing, list):
                existing.append(value)
            else:
                result[key] = [existing, value]
        else:
            result[key] = value
    return result


def ensure_list(value: Any) -> List[Any]:
    """Normalize a field that may be missing, a single object or a list."""
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return value
    return [value]


def parse_int(value: Any) -> Optional[int]:
    """Text -> int. Absent, empty or unparseable -> None (never 0)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        d = Decimal(value.strip())
    except InvalidOperation:
        logger.debug(f"Ignoring invalid numeric value: {value!r}")
        return None
    if not d.is_finite():
        logger.debug(f"Ignoring non-finite value: {value!r}")
        return None
    try:
        if d != d.to_integral_value():
            logger.debug(f"Ignoring non-integral value: {value!r}")
            return None
        return int(d)
    except ArithmeticError:
        logger.debug(f"Ignoring out-of-range value: {value!r}")
        return None


def parse_decimal(value: Any) -> Optional[Decimal]:
    """Text -> Decimal, exactly as written. Absent or unparseable -> None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, Decimal)):
        return Decimal(value)
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        d = Decimal(value.strip())
    except InvalidOperation:
        logger.debug(f"Ignoring invalid amount: {value!r}")
        return None
    if not d.is_finite():
        logger.debug(f"Ignoring non-finite amount: {value!r}")
        return None
    return d


def parse_bool(value: Any) -> Optional[bool]:
    """Accept native bools and 'true'/'false' text in any case."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    return None


def parse_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value or None
    return str(value)


def parse_fault(text: Optional[str]) -> Optional[str]:
    """'faultcode: faultstring' from a SOAP Fault body, or None."""
    if not text or "Fault" not in text:
        return None
    try:
        root = etree.fromstring(text.strip().encode("utf-8"), parser=_PARSER)
    except etree.XMLSyntaxError:
        return None
    body = find_child(root, "Body")
    if body is None:
        return None
    fault = find_child(body, "Fault")
    if fault is None:
        return None
    code = find_child(fault, "faultcode")
    reason = find_child(fault, "faultstring")
    code_text = (code.text or "").strip() if code is not None else ""
    reason_text = (reason.text or "").strip() if reason is not None else ""
    if code_text and reason_text:
        return f"{code_text}: {reason_text}"
    return code_text or reason_text or None


def find_result(text: Optional[str], operation: Operation) -> Tuple[Any, Any]:
    """
    Locate <Method>Response and <Method>Result in a SOAP response.

    Returns:
        Tuple (response element, result element)

    Raises:
        ComaxParseError: If the document is malformed or a node is missing
    """
    root = parse_xml(text, operation.method)
    body = find_child(root, "Body") if local_name(root.tag) == "Envelope" else None
    if body is None:
        raise ComaxParseError(
            f"No SOAP Body in {operation.method} response.",
            operation=operation.method,
            raw_response=text,
        )
    response = find_child(body, operation.response_element)
    if response is None:
        raise ComaxParseError(
            f"No {operation.response_element} in response.",
            operation=operation.method,
            raw_response=text,
        )
    result = find_child(response, operation.result_element)
    if result is None:
        raise ComaxParseError(
            f"No {operation.result_element} in response.",
            operation=operation.method,
            raw_response=text,
        )
    return response, result


def interpret_boolean_result(text: Optional[str], operation: Operation) -> bool:
    """
    Boolean-result policy.

    'true' -> True, 'false' -> False (a valid negative answer), any other
    text is the vendor's error message.
    """
    _, result = find_result(text, operation)
    value = element_to_value(result)
    if value == "true":
        return True
    if value == "false":
        return False
    if isinstance(value, str) and value:
        raise ComaxVendorError(value, raw_response=text)
    raise ComaxVendorError(
        f"Comax returned invalid result for {operation.result_element}.",
        raw_response=text,
    )


def _structured_result(text: Optional[str], operation: Operation) -> Dict[str, Any]:
    _, result = find_result(text, operation)
    value = element_to_value(result)
    if not isinstance(value, dict):
        raise ComaxParseError(
            f"No {operation.result_element} in response.",
            operation=operation.method,
            raw_response=text,
        )
    return value


# ---------------------------------------------------------------------
# Per-operation parsers
# ---------------------------------------------------------------------
def parse_write_order_response(text: Optional[str]) -> str:
    """DocNumber assigned by Comax to a written order."""
    result = _structured_result(text, WRITE_ORDER)
    doc_number = parse_text(result.get("DocNumber"))
    if not doc_number:
        raise ComaxParseError(
            "Failed to parse DocNumber from Comax order response.",
            operation=WRITE_ORDER.method,
            raw_response=text,
        )
    return doc_number


def parse_payment_token_response(text: Optional[str]) -> str:
    """TokenLogin value for the payment page."""
    _, result = find_result(text, GET_PAYMENT_TOKEN)
    token = element_to_value(result)
    if not isinstance(token, str) or not token:
        raise ComaxParseError(
            "Failed to parse TokenLogin from Comax token response.",
            operation=GET_PAYMENT_TOKEN.method,
            raw_response=text,
        )
    return token


def _contact_entries(raw: Any) -> List[Dict[str, Any]]:
    # ContactMan may hold the records directly or wrap them in one more element
    known = set(ContactPerson.__dataclass_fields__)
    entries: List[Dict[str, Any]] = []
    for entry in ensure_list(raw):
        if not isinstance(entry, dict):
            continue
        if known.intersection(entry):
            entries.append(entry)
        else:
            for inner in entry.values():
                entries.extend(e for e in ensure_list(inner) if isinstance(e, dict))
    return entries


def build_customer_details(raw: Dict[str, Any]) -> CustomerDetails:
    """Typed customer record from the CustomerDetails mapping."""
    known = set(CustomerDetails.__dataclass_fields__) - {"ContactMan", "extra"}
    values: Dict[str, Any] = {}
    extra: Dict[str, Any] = {}
    for key, value in raw.items():
        if key == "ContactMan":
            continue
        if key in CUSTOMER_BOOL_FIELDS:
            values[key] = parse_bool(value)
        elif key in known and (value is None or isinstance(value, str)):
            values[key] = parse_text(value)
        else:
            extra[key] = value

    contacts = []
    for entry in _contact_entries(raw.get("ContactMan")):
        contacts.append(
            ContactPerson(
                **{
                    name: parse_text(entry.get(name))
                    for name in ContactPerson.__dataclass_fields__
                }
            )
        )
    return CustomerDetails(ContactMan=contacts, extra=extra, **values)


def parse_customer_details_response(text: Optional[str]) -> CustomerDetails:
    response, result = find_result(text, GET_CUSTOMER_DETAILS)
    if element_to_value(result) != "true":
        raise ComaxVendorError(
            "Comax returned false for Get_CustomerDetailsResult.", raw_response=text
        )
    details = find_child(response, "CustomerDetails")
    raw = element_to_value(details) if details is not None else None
    if not isinstance(raw, dict):
        raise ComaxParseError(
            "No CustomerDetails in Get_CustomerDetails response.",
            operation=GET_CUSTOMER_DETAILS.method,
            raw_response=text,
        )
    return build_customer_details(raw)


def parse_order_status_response(text: Optional[str]) -> OrderStatus:
    result = _structured_result(text, GET_ORDER_STATUS)
    return OrderStatus(
        status_code=parse_int(result.get("StatusCode")),
        status_name=parse_text(result.get("StatusName")),
        tracking_number=parse_text(result.get("TrackingNumber")),
        error_message=parse_text(result.get("ErrorMessage")),
        self_supply=parse_bool(result.get("SelfSupply")),
        close_order=parse_int(result.get("CloseOrder")),
        sw_close=parse_int(result.get("SwClose")),
        delivery_store=parse_int(result.get("DeliveryStore")),
        doc_number=parse_text(result.get("DocNumber")),
    )


def parse_order_details_response(text: Optional[str]) -> OrderDetails:
    result = _structured_result(text, GET_ORDER_DETAILS)
    return OrderDetails(
        customer_id=parse_text(result.get("CustomerID")),
        store_id=parse_int(result.get("StoreID")),
        price_list_id=parse_int(result.get("PriceListID")),
        agent_id=parse_int(result.get("AgentID")),
        doc_number=parse_text(result.get("DocNumber")),
        manual_doc_number=parse_bool(result.get("ManualDocNumber")),
        reference=parse_text(result.get("Reference")),
        total_sum=parse_decimal(result.get("TotalSum")),
        total_quantity=parse_text(result.get("TotalQuantity")),
        lines_count=parse_text(result.get("LinesCount")),
        remarks=parse_text(result.get("Remarks")),
        details=parse_text(result.get("Details")),
        status=parse_int(result.get("Status")),
        fields=result,
    )


def parse_order_pdf_link_response(text: Optional[str]) -> str:
    _, result = find_result(text, GET_ORDER_PDF_LINK)
    value = element_to_value(result)
    if isinstance(value, str) and value.startswith("http"):
        return value
    if isinstance(value, str) and value:
        raise ComaxVendorError(value, raw_response=text)
    raise ComaxVendorError(
        f"No {GET_ORDER_PDF_LINK.result_element} in response.", raw_response=text
    )


def parse_set_order_status_response(text: Optional[str]) -> bool:
    return interpret_boolean_result(text, SET_ORDER_STATUS)


def parse_orders_by_credit_card_response(text: Optional[str]) -> List[CreditCardOrder]:
    _, result = find_result(text, GET_ORDERS_BY_CREDIT_CARD)
    value = element_to_value(result)
    if value is None or value == "":
        return []
    if not isinstance(value, dict):
        raise ComaxParseError(
            f"Unexpected {GET_ORDERS_BY_CREDIT_CARD.result_element} content.",
            operation=GET_ORDERS_BY_CREDIT_CARD.method,
            raw_response=text,
        )
    orders = []
    for entry in ensure_list(value.get("ClsCustomersOrdersByCreditCard")):
        if not isinstance(entry, dict):
            continue
        orders.append(
            CreditCardOrder(
                doc_number=parse_text(entry.get("DocNumber")) or "",
                doc_year=parse_text(entry.get("DocYear")) or "",
                reference=parse_text(entry.get("Reference")) or "",
            )
        )
    return orders


def parse_orders_simple_response(text: Optional[str]) -> str:
    _, result = find_result(text, GET_ORDERS_SIMPLE)
    value = element_to_value(result)
    if not isinstance(value, str) or not value:
        raise ComaxParseError(
            f"No {GET_ORDERS_SIMPLE.result_element} in response.",
            operation=GET_ORDERS_SIMPLE.method,
            raw_response=text,
        )
    return value


def parse_orders_simple_records(text: Optional[str]) -> List[OrdersSimpleRecord]:
    """Rows of the secondary ArrayOfClsGetCustomersOrdersOut document."""
    root = parse_xml(text, "ArrayOfClsGetCustomersOrdersOut")
    if local_name(root.tag) != "ArrayOfClsGetCustomersOrdersOut":
        logger.warning(f"Unexpected secondary document root: {local_name(root.tag)}")
        return []
    value = element_to_value(root)
    if not isinstance(value, dict):
        return []
    records = []
    for entry in ensure_list(value.get("ClsGetCustomersOrdersOut")):
        if not isinstance(entry, dict):
            continue
        records.append(
            OrdersSimpleRecord(
                **{
                    name: parse_text(entry.get(name))
                    for name in OrdersSimpleRecord.__dataclass_fields__
                }
            )
        )
    return records


def parse_chk_item_exists_response(text: Optional[str]) -> bool:
    return interpret_boolean_result(text, CHK_ITEM_EXISTS_IN_ORDERS)


def parse_set_order_self_pickup_response(text: Optional[str]) -> bool:
    return interpret_boolean_result(text, SET_ORDER_SELF_PICKUP)
