"""
Text rendering of operation results for the tool surfaces
"""
import json
from dataclasses import asdict, is_dataclass
from typing import Any, Callable, Dict

from app.comax_client.models import OperationResult

# Records shown from a fetched orders document
ORDERS_SIMPLE_SAMPLE = 5

FAILURE_HEADLINES = {
    "create_comax_order": "Failed to create Comax order.",
    "create_comax_payment_link": "Failed to create Comax payment link.",
    "update_comax_order_payment": "Comax order update failed.",
    "get_comax_customer_details": "Failed to fetch customer details.",
    "get_comax_order_status": "Failed to fetch order status.",
    "get_comax_order_details": "Failed to fetch order details.",
    "get_comax_order_pdf_link": "Failed to fetch order PDF link.",
    "set_comax_order_status": "Failed to set order status.",
    "get_comax_orders_by_credit_card": "Failed to fetch orders by credit card.",
    "get_comax_orders_simple": "Failed to fetch orders simple.",
    "chk_item_exists_in_orders": "Failed to check item in orders.",
    "set_comax_order_self_pickup": "Failed to set order self-pickup.",
}


def to_json(value: Any) -> str:
    if is_dataclass(value):
        value = asdict(value)
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def _json_block(title: str, value: Any) -> str:
    return f"\n\n{title}:\n```json\n{to_json(value)}\n```"


def _or_dash(value: Any) -> Any:
    return "-" if value is None or value == "" else value


def _yes_no(value: Any) -> str:
    return "Yes" if value else "No"


def render_failure(result: OperationResult) -> str:
    headline = FAILURE_HEADLINES.get(result.operation, f"{result.operation} failed.")
    text = headline
    if result.stage:
        text += f" (stage: {result.stage})"
    text += f"\n{result.error or 'Unknown error.'}"
    if result.raw_response:
        text += f"\n\nRaw XML:\n{result.raw_response}"
    return text


def _created_order(payload: dict) -> str:
    return (
        "Comax order created.\n\n"
        f"Order DocNumber: {payload['doc_number']}\n"
        f"Reference: {payload['reference']}"
    )


def _payment_link(link) -> str:
    return (
        "Comax payment link created.\n\n"
        f"Order DocNumber: {link.doc_number}\n"
        f"Payment Link: {link.payment_url}"
    )


def _order_payment(payload: dict) -> str:
    return f"Order updated with payment confirmation.\n\nDocNumber: {payload['doc_number']}"


def _customer(customer) -> str:
    summary = (
        f"Customer: {_or_dash(customer.Name)} (ID: {_or_dash(customer.ID)})\n"
        f"City: {_or_dash(customer.City)}\n"
        f"Phone: {_or_dash(customer.Phone)}\n"
        f"Email: {_or_dash(customer.Email)}\n"
        f"PriceListID: {_or_dash(customer.PriceListID)}\n"
        f"Discount: {_or_dash(customer.DiscountPercent)}\n"
        f"Blocked: {_yes_no(customer.IsBlocked)}"
    )
    return summary + _json_block("Full details as JSON", customer)


def _order_status(status) -> str:
    summary = (
        f"Order Status: {_or_dash(status.status_name)} (Code: {_or_dash(status.status_code)})\n"
        f"Tracking: {_or_dash(status.tracking_number)}\n"
        f"Closed: {_yes_no(status.close_order)}\n"
        f"Error: {_or_dash(status.error_message)}"
    )
    return summary + _json_block("Full status as JSON", status)


def _order_details(details) -> str:
    summary = (
        f"Order: {_or_dash(details.doc_number)} | "
        f"Customer: {_or_dash(details.customer_id)} | "
        f"Total: {_or_dash(details.total_sum)} | "
        f"Status: {_or_dash(details.status)}"
    )
    return summary + _json_block("Full order details as JSON", details.fields)


def _pdf_link(url: str) -> str:
    return f"Order PDF link: {url}"


def _order_status_set(updated: bool) -> str:
    if updated:
        return "Order status updated successfully."
    return "Comax did not update the order status (result: false)."


def _orders_by_credit_card(orders) -> str:
    text = f"Found {len(orders)} orders for credit card."
    if orders:
        lines = [
            f"{i}. DocNumber: {o.doc_number}, DocYear: {o.doc_year}, Reference: {o.reference}"
            for i, o in enumerate(orders, start=1)
        ]
        text += "\n\n" + "\n".join(lines)
    return text


def _orders_simple(payload) -> str:
    if not payload.is_url:
        return f"Orders result string:\n\n{payload.result}"
    if payload.secondary_error:
        return f"Orders XML: {payload.result}\n\nFailed to parse XML: {payload.secondary_error}"
    sample = [asdict(r) for r in payload.records[:ORDERS_SIMPLE_SAMPLE]]
    return f"Orders XML: {payload.result}\n\nSample records:\n" + to_json(sample)


def _item_exists(exists: bool) -> str:
    return f"Item exists in order(s): {'true' if exists else 'false'}"


def _self_pickup_set(updated: bool) -> str:
    if updated:
        return "Order self-pickup updated successfully."
    return "Comax did not update the order self-pickup (result: false)."


RENDERERS: Dict[str, Callable[[Any], str]] = {
    "create_comax_order": _created_order,
    "create_comax_payment_link": _payment_link,
    "update_comax_order_payment": _order_payment,
    "get_comax_customer_details": _customer,
    "get_comax_order_status": _order_status,
    "get_comax_order_details": _order_details,
    "get_comax_order_pdf_link": _pdf_link,
    "set_comax_order_status": _order_status_set,
    "get_comax_orders_by_credit_card": _orders_by_credit_card,
    "get_comax_orders_simple": _orders_simple,
    "chk_item_exists_in_orders": _item_exists,
    "set_comax_order_self_pickup": _self_pickup_set,
}


def render_result(result: OperationResult) -> str:
    """Human-readable text block for one operation result."""
    if not result.success:
        return render_failure(result)
    renderer = RENDERERS.get(result.operation)
    if renderer is None:
        return to_json(result.to_dict())
    return renderer(result.payload)
