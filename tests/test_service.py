"""
Tests for the Comax operation service (network mocked at the session)
"""
from decimal import Decimal
from urllib.parse import parse_qs, urlsplit

import lxml.etree as etree
import pytest
import requests

from app.comax_client.operations import COMAX_NS
from app.comax.service import STAGE_ORDER_WRITE, STAGE_PAYMENT_TOKEN, TOOLS


WRITE = "WriteCustomersOrderByParamsExtendedPlusPrice"


def sent_envelope(session, call_index=0):
    _, kwargs = session.post.call_args_list[call_index]
    return etree.fromstring(kwargs["data"])


class TestCreatePaymentLink:

    def test_full_pipeline(self, service, session, soap_response, make_http_response, order_params):
        session.post.side_effect = [
            make_http_response(soap_response(WRITE, "<DocNumber>1001</DocNumber>")),
            make_http_response(
                soap_response("getLoginDetailsParams", "tok+en/=", ns="http://tempuri.org/")
            ),
        ]

        result = service.create_payment_link(dict(order_params, reference="REF-1"))

        assert result.success, result.error
        link = result.payload
        assert link.doc_number == "1001"
        assert link.reference == "REF-1"
        assert link.total_sum == Decimal("26")
        assert link.payment_url.endswith("&IsSecure190123")
        query = parse_qs(urlsplit(link.payment_url).query)
        assert query["TokenLogin"] == ["tok+en/="]
        assert query["LoginID"] == ["pay-user"]
        assert query["LoginPassword"] == ["pay-secret"]
        assert query["MaxPaymentsNumber"] == ["12"]
        assert "TokenLogin=tok%2Ben%2F%3D" in link.payment_url

        token_env = sent_envelope(session, 1)
        scm = token_env.find(".//{http://tempuri.org/}Scm")
        assert scm.text == "26"
        assert token_env.find(".//{http://tempuri.org/}UniqueID").text == "1001"

    def test_missing_doc_number_skips_token_step(
        self, service, session, soap_response, make_http_response, order_params
    ):
        session.post.return_value = make_http_response(soap_response(WRITE, "<Error>No stock</Error>"))

        result = service.create_payment_link(order_params)

        assert not result.success
        assert result.stage == STAGE_ORDER_WRITE
        assert "DocNumber" in result.error
        assert result.raw_response is not None
        assert session.post.call_count == 1

    def test_token_failure_reports_stage(
        self, service, session, soap_response, make_http_response, order_params
    ):
        session.post.side_effect = [
            make_http_response(soap_response(WRITE, "<DocNumber>1001</DocNumber>")),
            make_http_response(soap_response("getLoginDetailsParams", "", ns="http://tempuri.org/")),
        ]

        result = service.create_payment_link(order_params)

        assert not result.success
        assert result.stage == STAGE_PAYMENT_TOKEN
        assert "TokenLogin" in result.error

    def test_generated_reference(self, service, session, soap_response, make_http_response, order_params):
        session.post.return_value = make_http_response(soap_response(WRITE, "<DocNumber>7</DocNumber>"))

        result = service.create_order(order_params)

        assert result.success
        assert result.payload["reference"].startswith("GIMO_ORDER_")
        reference = sent_envelope(session).find(f".//{{{COMAX_NS}}}Reference").text
        assert reference == result.payload["reference"]


def test_round_trip_preserves_amounts(service, session, soap_response, make_http_response):
    """Item A1 (2 x 10.5 = 21.0) is echoed back by Comax with the same values."""
    session.post.return_value = make_http_response(soap_response(WRITE, "<DocNumber>5</DocNumber>"))
    service.create_order({
        "customerName": "Dana",
        "customerPhone": "050",
        "customerCity": "Haifa",
        "items": [{"sku": "A1", "quantity": 2, "price": 10.5, "totalSum": 21.0}],
    })
    sent = sent_envelope(session)
    price = sent.find(f".//{{{COMAX_NS}}}Price")[0].text
    total = sent.find(f".//{{{COMAX_NS}}}TotalSum")[0].text
    quantity = sent.find(f".//{{{COMAX_NS}}}Quantity")[0].text

    session.post.return_value = make_http_response(soap_response(
        "Get_CustomerOrderDetails",
        f"<DocNumber>5</DocNumber><TotalSum>{total}</TotalSum>"
        f"<Items><string>A1</string></Items><Quantity><string>{quantity}</string></Quantity>"
        f"<Price><string>{price}</string></Price>",
    ))
    result = service.get_order_details({"docNumber": "5", "docYear": "2024", "reference": "R"})

    assert result.success
    assert result.payload.total_sum == Decimal("21.0")
    assert Decimal(result.payload.fields["Price"]["string"]) == Decimal("10.5")
    assert int(result.payload.fields["Quantity"]["string"]) == 2


class TestValidation:

    @pytest.mark.parametrize(
        "tool, data, message",
        [
            ("get_comax_order_status", {}, "You must provide either docNumber or reference."),
            ("get_comax_order_pdf_link", {"docYear": "2024"}, "You must provide either docNumber or reference."),
            ("set_comax_order_status", {"docNumber": "1"}, "You must provide at least one of status or statusCode."),
            ("set_comax_order_self_pickup", {"docYear": "2024"}, "You must provide either docNumber or reference."),
            ("get_comax_order_details", {"docNumber": "1", "reference": "R"}, "You must provide docNumber, docYear, and reference."),
            ("get_comax_orders_by_credit_card", {}, "You must provide creditCardNumber."),
            ("chk_item_exists_in_orders", {"orderNumber": "1"}, "You must provide itemID."),
            ("chk_item_exists_in_orders", {"itemID": "A1"}, "You must provide either orderNumber or reference."),
        ],
    )
    def test_rejected_before_network(self, service, session, tool, data, message):
        result = service.run_tool(tool, data)

        assert not result.success
        assert result.error == message
        session.post.assert_not_called()

    def test_empty_items_rejected(self, service, session, order_params):
        order_params["items"] = []
        result = service.create_payment_link(order_params)
        assert not result.success
        assert "items" in result.error
        session.post.assert_not_called()

    def test_non_positive_quantity_rejected(self, service, session, order_params):
        order_params["items"][0]["quantity"] = 0
        result = service.create_order(order_params)
        assert not result.success
        assert "quantity" in result.error
        session.post.assert_not_called()

    @pytest.mark.parametrize("amount", ["inf", float("inf"), "nan"])
    def test_non_finite_price_rejected(self, service, session, order_params, amount):
        order_params["items"][0]["price"] = amount
        result = service.create_order(order_params)
        assert not result.success
        assert "price" in result.error
        session.post.assert_not_called()


class TestBooleanOperations:

    @pytest.mark.parametrize("tool, method, data", [
        ("set_comax_order_status", "SetCustomerOrderStatusByParams", {"docNumber": "1", "status": "Closed"}),
        ("set_comax_order_self_pickup", "SetCustomerOrderSelfPickup", {"reference": "R"}),
        ("chk_item_exists_in_orders", "ChkItemExistsInOrders", {"itemID": "A1", "orderNumber": "1"}),
    ])
    @pytest.mark.parametrize("answer, expected", [("true", True), ("false", False)])
    def test_true_and_false(
        self, service, session, soap_response, make_http_response, tool, method, data, answer, expected
    ):
        session.post.return_value = make_http_response(soap_response(method, answer))
        result = service.run_tool(tool, data)
        assert result.success
        assert result.payload is expected

    def test_other_text_is_failure(self, service, session, soap_response, make_http_response):
        session.post.return_value = make_http_response(
            soap_response("SetCustomerOrderSelfPickup", "Order is closed")
        )
        result = service.set_order_self_pickup({"docNumber": "1"})
        assert not result.success
        assert result.error == "Order is closed"
        assert result.payload is None


class TestOrdersSimple:

    SECONDARY = """<ArrayOfClsGetCustomersOrdersOut>
  <ClsGetCustomersOrdersOut><DocNumber>1</DocNumber><ItemName>A</ItemName></ClsGetCustomersOrdersOut>
  <ClsGetCustomersOrdersOut><DocNumber>2</DocNumber><ItemName>B</ItemName></ClsGetCustomersOrdersOut>
</ArrayOfClsGetCustomersOrdersOut>"""

    def test_url_result_is_fetched(self, service, session, soap_response, make_http_response):
        session.post.return_value = make_http_response(
            soap_response("GetCustomersOrders_Simple", "http://files.comax.co.il/o.xml")
        )
        session.get.return_value = make_http_response(self.SECONDARY)

        result = service.get_orders_simple({"fromDate": "01/01/2024", "toDate": "31/01/2024"})

        assert result.success
        session.get.assert_called_once()
        assert session.get.call_args[0][0] == "http://files.comax.co.il/o.xml"
        assert result.payload.is_url
        assert [r.DocNumber for r in result.payload.records] == ["1", "2"]

    def test_plain_result_returned_verbatim(self, service, session, soap_response, make_http_response):
        session.post.return_value = make_http_response(
            soap_response("GetCustomersOrders_Simple", "DocNumber;Total\n1;10")
        )

        result = service.get_orders_simple({"fromDate": "01/01/2024", "toDate": "31/01/2024"})

        assert result.success
        session.get.assert_not_called()
        assert result.payload.result == "DocNumber;Total\n1;10"
        assert not result.payload.is_url

    def test_second_hop_failure_keeps_url(self, service, session, soap_response, make_http_response):
        session.post.return_value = make_http_response(
            soap_response("GetCustomersOrders_Simple", "http://files.comax.co.il/o.xml")
        )
        session.get.side_effect = requests.exceptions.ConnectionError("refused")

        result = service.get_orders_simple({"fromDate": "01/01/2024", "toDate": "31/01/2024"})

        assert result.success
        assert result.payload.result == "http://files.comax.co.il/o.xml"
        assert "refused" in result.payload.secondary_error


def test_transport_failure_is_in_band(service, session):
    session.post.side_effect = requests.exceptions.ReadTimeout("read timed out")
    result = service.get_order_status({"docNumber": "1"})
    assert not result.success
    assert "read timed out" in result.error


def test_update_payment_succeeds_on_transport(service, session, make_http_response, sample_items):
    session.post.return_value = make_http_response("<not-a-soap-document/>")
    result = service.update_order_payment({
        "docNumber": "1001",
        "payType": "1",
        "creditTokenNumber": "tok",
        "creditCompany": "2",
        "creditCardNumber": "4580",
        "creditExpireDate": "1228",
        "creditTZ": "1",
        "creditPaysNumber": "1",
        "creditTransactionType": "1",
        "items": sample_items,
    })
    assert result.success
    assert result.payload["doc_number"] == "1001"
    assert result.payload["echoed_doc_number"] is None


def test_customer_details(service, session, soap_response, make_http_response):
    session.post.return_value = make_http_response(soap_response(
        "Get_CustomerDetails", "true", extra="<CustomerDetails><Name>Acme</Name></CustomerDetails>"
    ))
    result = service.get_customer_details({"customerId": "51"})
    assert result.success
    assert result.payload.Name == "Acme"
    assert session.post.call_args[0][0].endswith("?op=Get_CustomerDetails")


def test_orders_by_credit_card_empty(service, session, soap_response, make_http_response):
    session.post.return_value = make_http_response(soap_response("GetCustomersOrdersByCreditCard", ""))
    result = service.get_orders_by_credit_card({"creditCardNumber": "4580"})
    assert result.success
    assert result.payload == []


def test_every_tool_is_dispatchable(service):
    assert len(TOOLS) == 12
    for method_name in TOOLS.values():
        assert callable(getattr(service, method_name))


def test_huge_amounts_are_written_in_full(service, session, soap_response, make_http_response):
    session.post.return_value = make_http_response(soap_response(WRITE, "<DocNumber>6</DocNumber>"))
    result = service.create_order({
        "customerName": "Dana",
        "customerPhone": "050",
        "customerCity": "Haifa",
        "items": [{"sku": "A1", "quantity": 1, "price": 1e30, "totalSum": 1e30}],
    })

    assert result.success
    sent = sent_envelope(session)
    assert sent.find(f".//{{{COMAX_NS}}}Price")[0].text == "1" + "0" * 30
    assert sent.find(f".//{{{COMAX_NS}}}TotalSum")[0].text == "1" + "0" * 30


def test_non_finite_status_code_reads_as_absent(service, session, soap_response, make_http_response):
    session.post.return_value = make_http_response(soap_response(
        "GetCustomerOrderStatus",
        "<StatusCode>Infinity</StatusCode><StatusName>Shipped</StatusName>",
    ))
    result = service.get_order_status({"docNumber": "1"})

    assert result.success
    assert result.payload.status_code is None
    assert result.payload.status_name == "Shipped"
