"""
Tests for the text rendering of results
"""
from decimal import Decimal

import pytest

from app.comax.formatting import render_result
from app.comax_client.models import (
    CreditCardOrder,
    CustomerDetails,
    OperationResult,
    OrdersSimpleRecord,
    OrdersSimpleResult,
    OrderStatus,
    PaymentLink,
)


def test_payment_link():
    link = PaymentLink(
        doc_number="1001",
        reference="REF-1",
        total_sum=Decimal("26"),
        payment_url="http://pay/?TokenLogin=x&IsSecure190123",
    )
    text = render_result(OperationResult.ok("create_comax_payment_link", link))
    assert text == (
        "Comax payment link created.\n\n"
        "Order DocNumber: 1001\n"
        "Payment Link: http://pay/?TokenLogin=x&IsSecure190123"
    )


def test_failure_with_stage_and_raw_xml():
    result = OperationResult.fail(
        "create_comax_payment_link",
        "Failed to parse DocNumber from Comax order response.",
        raw_response="<xml/>",
        stage="order_write",
    )
    text = render_result(result)
    assert text.startswith("Failed to create Comax payment link. (stage: order_write)\n")
    assert text.endswith("Raw XML:\n<xml/>")


def test_order_status_summary_and_json():
    status = OrderStatus(status_code=3, status_name="Shipped", close_order=1)
    text = render_result(OperationResult.ok("get_comax_order_status", status))
    assert text.startswith(
        "Order Status: Shipped (Code: 3)\nTracking: -\nClosed: Yes\nError: -"
    )
    assert "Full status as JSON:\n```json\n" in text
    assert '"status_code": 3' in text


def test_customer_summary():
    customer = CustomerDetails(Name="Acme", ID="51", City="Haifa", IsBlocked=True)
    text = render_result(OperationResult.ok("get_comax_customer_details", customer))
    assert "Customer: Acme (ID: 51)" in text
    assert "Phone: -" in text
    assert "Blocked: Yes" in text
    assert '"ContactMan": []' in text


def test_credit_card_orders():
    orders = [CreditCardOrder("1", "2024", "R1"), CreditCardOrder("2", "2024", "R2")]
    text = render_result(OperationResult.ok("get_comax_orders_by_credit_card", orders))
    assert text == (
        "Found 2 orders for credit card.\n\n"
        "1. DocNumber: 1, DocYear: 2024, Reference: R1\n"
        "2. DocNumber: 2, DocYear: 2024, Reference: R2"
    )
    empty = render_result(OperationResult.ok("get_comax_orders_by_credit_card", []))
    assert empty == "Found 0 orders for credit card."


def test_orders_simple_shows_five_records():
    records = [OrdersSimpleRecord(DocNumber=str(i)) for i in range(8)]
    payload = OrdersSimpleResult(result="http://x/o.xml", is_url=True, records=records)
    text = render_result(OperationResult.ok("get_comax_orders_simple", payload))
    assert text.startswith("Orders XML: http://x/o.xml\n\nSample records:\n")
    assert '"DocNumber": "4"' in text
    assert '"DocNumber": "5"' not in text


def test_orders_simple_verbatim():
    payload = OrdersSimpleResult(result="a;b;c")
    text = render_result(OperationResult.ok("get_comax_orders_simple", payload))
    assert text == "Orders result string:\n\na;b;c"


@pytest.mark.parametrize("tool, payload, expected", [
    ("chk_item_exists_in_orders", True, "Item exists in order(s): true"),
    ("chk_item_exists_in_orders", False, "Item exists in order(s): false"),
    ("set_comax_order_status", True, "Order status updated successfully."),
    ("set_comax_order_self_pickup", True, "Order self-pickup updated successfully."),
    ("get_comax_order_pdf_link", "http://x/1.pdf", "Order PDF link: http://x/1.pdf"),
])
def test_short_answers(tool, payload, expected):
    assert render_result(OperationResult.ok(tool, payload)) == expected


def test_result_invariant():
    with pytest.raises(ValueError):
        OperationResult(operation="x", success=True)
    with pytest.raises(ValueError):
        OperationResult(operation="x", success=False, payload="p", error="e")


def test_customer_summary_without_name_or_id():
    text = render_result(OperationResult.ok("get_comax_customer_details", CustomerDetails(City="Haifa")))
    assert text.startswith("Customer: - (ID: -)\nCity: Haifa\n")
    assert "None" not in text.split("\n\n")[0]
