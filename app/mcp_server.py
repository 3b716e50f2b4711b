"""
MCP server exposing the Comax operations as tools (stdio transport)

Run with:
    comax-mcp
or:
    python -m app.mcp_server
"""
import logging
import sys
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from app.comax.formatting import render_result
from app.comax.operation_logger import configure_logging
from app.comax.service import ComaxService
from app.comax_client.config import get_comax_config
from app.comax_client.exceptions import ComaxConfigError
from app.comax_client.params import OrderItemParams

logger = logging.getLogger("comax-mcp")

mcp = FastMCP("Comax Payment Link MCP")

_service: Optional[ComaxService] = None


def get_service() -> ComaxService:
    """Process-wide service, built from the environment on first use."""
    global _service
    if _service is None:
        _service = ComaxService(get_comax_config())
    return _service


def set_service(service: Optional[ComaxService]) -> None:
    global _service
    _service = service


def _invoke(tool: str, data: Dict[str, Any]) -> str:
    try:
        result = get_service().run_tool(tool, data)
    except Exception as e:
        logger.exception(f"Unexpected error in {tool}")
        return f"Unexpected error in {tool}: {e}"
    return render_result(result)


# ------------------------------------------------------------------------------
# Orders and payment
# ------------------------------------------------------------------------------

@mcp.tool()
def create_comax_order(
    customerName: str,
    customerPhone: str,
    customerCity: str,
    items: List[OrderItemParams],
    customerId: Optional[str] = None,
    customerAddress: Optional[str] = None,
    customerZip: Optional[str] = None,
    priceListId: Optional[int] = None,
    reference: Optional[str] = None,
    remarks: Optional[str] = None,
) -> str:
    """Creates a Comax order (without payment) and returns its DocNumber and reference."""
    return _invoke("create_comax_order", {
        "customerId": customerId,
        "customerName": customerName,
        "customerPhone": customerPhone,
        "customerCity": customerCity,
        "customerAddress": customerAddress,
        "customerZip": customerZip,
        "priceListId": priceListId,
        "items": items,
        "reference": reference,
        "remarks": remarks,
    })


@mcp.tool()
def create_comax_payment_link(
    customerName: str,
    customerPhone: str,
    customerCity: str,
    items: List[OrderItemParams],
    customerId: Optional[str] = None,
    customerAddress: Optional[str] = None,
    customerZip: Optional[str] = None,
    priceListId: Optional[int] = None,
    reference: Optional[str] = None,
    remarks: Optional[str] = None,
) -> str:
    """
    Creates a Comax order and returns a payment link for the user to complete payment.
    Supports multiple items, business customers, and more.
    """
    return _invoke("create_comax_payment_link", {
        "customerId": customerId,
        "customerName": customerName,
        "customerPhone": customerPhone,
        "customerCity": customerCity,
        "customerAddress": customerAddress,
        "customerZip": customerZip,
        "priceListId": priceListId,
        "items": items,
        "reference": reference,
        "remarks": remarks,
    })


@mcp.tool()
def update_comax_order_payment(
    docNumber: str,
    payType: str,
    creditTokenNumber: str,
    creditCompany: str,
    creditCardNumber: str,
    creditExpireDate: str,
    creditTZ: str,
    creditPaysNumber: str,
    creditTransactionType: str,
    items: List[OrderItemParams],
    customerId: Optional[str] = None,
    storeId: Optional[int] = None,
    branchId: Optional[int] = None,
    priceListId: Optional[int] = None,
    remarks: Optional[str] = None,
) -> str:
    """
    Updates a Comax order with payment confirmation after user completes payment.
    Use this after receiving payment result (logc) from returnPage.
    """
    return _invoke("update_comax_order_payment", {
        "docNumber": docNumber,
        "customerId": customerId,
        "storeId": storeId,
        "branchId": branchId,
        "priceListId": priceListId,
        "payType": payType,
        "creditTokenNumber": creditTokenNumber,
        "creditCompany": creditCompany,
        "creditCardNumber": creditCardNumber,
        "creditExpireDate": creditExpireDate,
        "creditTZ": creditTZ,
        "creditPaysNumber": creditPaysNumber,
        "creditTransactionType": creditTransactionType,
        "items": items,
        "remarks": remarks,
    })


# ------------------------------------------------------------------------------
# Lookups
# ------------------------------------------------------------------------------

@mcp.tool()
def get_comax_customer_details(customerId: str) -> str:
    """
    Fetches Comax business customer details by CustomerID.
    Returns all available fields, including price list, discount, and contact info.
    """
    return _invoke("get_comax_customer_details", {"customerId": customerId})


@mcp.tool()
def get_comax_order_status(docNumber: Optional[str] = None, reference: Optional[str] = None) -> str:
    """Get order status by DocNumber or Reference. Returns status code, name, tracking, and more."""
    return _invoke("get_comax_order_status", {"docNumber": docNumber, "reference": reference})


@mcp.tool()
def get_comax_order_details(docNumber: str, docYear: str, reference: str) -> str:
    """
    Get order details by DocNumber, DocYear, and Reference. All are required.
    Returns all order fields, customer, errors, etc.
    """
    return _invoke("get_comax_order_details", {
        "docNumber": docNumber,
        "docYear": docYear,
        "reference": reference,
    })


@mcp.tool()
def get_comax_order_pdf_link(
    docNumber: Optional[str] = None,
    reference: Optional[str] = None,
    docYear: Optional[str] = None,
    swBySpool: Optional[bool] = None,
) -> str:
    """Get order PDF link by DocNumber, Reference, or DocYear. Returns a direct PDF URL if available."""
    return _invoke("get_comax_order_pdf_link", {
        "docNumber": docNumber,
        "reference": reference,
        "docYear": docYear,
        "swBySpool": swBySpool,
    })


@mcp.tool()
def get_comax_orders_by_credit_card(creditCardNumber: str) -> str:
    """Get all orders by credit card number. Returns a list of {docNumber, docYear, reference}."""
    return _invoke("get_comax_orders_by_credit_card", {"creditCardNumber": creditCardNumber})


@mcp.tool()
def get_comax_orders_simple(
    fromDate: str,
    toDate: str,
    storeID: Optional[str] = None,
    departmentID: Optional[str] = None,
    agentID: Optional[str] = None,
    itemID: Optional[str] = None,
    supplierID: Optional[str] = None,
    attribute1Code: Optional[str] = None,
    attribute2Code: Optional[str] = None,
    attribute3Code: Optional[str] = None,
    groupByDate: Optional[str] = None,
    groupByMonth: Optional[str] = None,
    groupBySubGroup: Optional[str] = None,
    groupByGroup: Optional[str] = None,
    groupByStore: Optional[str] = None,
    groupByPrt: Optional[str] = None,
    openOrder: Optional[str] = None,
    fromDateSupply: Optional[str] = None,
    toDateSupply: Optional[str] = None,
) -> str:
    """
    Get orders by date range and optional filters.
    Returns a result string (usually XML or CSV); when it is a URL the document is fetched
    and sample records are shown.
    """
    return _invoke("get_comax_orders_simple", {
        "fromDate": fromDate,
        "toDate": toDate,
        "storeID": storeID,
        "departmentID": departmentID,
        "agentID": agentID,
        "itemID": itemID,
        "supplierID": supplierID,
        "attribute1Code": attribute1Code,
        "attribute2Code": attribute2Code,
        "attribute3Code": attribute3Code,
        "groupByDate": groupByDate,
        "groupByMonth": groupByMonth,
        "groupBySubGroup": groupBySubGroup,
        "groupByGroup": groupByGroup,
        "groupByStore": groupByStore,
        "groupByPrt": groupByPrt,
        "openOrder": openOrder,
        "fromDateSupply": fromDateSupply,
        "toDateSupply": toDateSupply,
    })


@mcp.tool()
def chk_item_exists_in_orders(
    itemID: Optional[str] = None,
    orderNumber: Optional[str] = None,
    orderYear: Optional[str] = None,
    reference: Optional[str] = None,
) -> str:
    """
    Check if an item exists in an order by itemID and orderNumber/orderYear/reference.
    Returns true if exists, false otherwise.
    """
    return _invoke("chk_item_exists_in_orders", {
        "itemID": itemID,
        "orderNumber": orderNumber,
        "orderYear": orderYear,
        "reference": reference,
    })


# ------------------------------------------------------------------------------
# Order updates
# ------------------------------------------------------------------------------

@mcp.tool()
def set_comax_order_status(
    docNumber: Optional[str] = None,
    docYear: Optional[str] = None,
    reference: Optional[str] = None,
    status: Optional[str] = None,
    statusCode: Optional[int] = None,
) -> str:
    """
    Set order status by DocNumber, DocYear, Reference, Status, and StatusCode.
    Returns true if successful.
    """
    return _invoke("set_comax_order_status", {
        "docNumber": docNumber,
        "docYear": docYear,
        "reference": reference,
        "status": status,
        "statusCode": statusCode,
    })


@mcp.tool()
def set_comax_order_self_pickup(
    docNumber: Optional[str] = None,
    docYear: Optional[str] = None,
    reference: Optional[str] = None,
) -> str:
    """Set order self-pickup by DocNumber, DocYear, or Reference. Returns true if successful."""
    return _invoke("set_comax_order_self_pickup", {
        "docNumber": docNumber,
        "docYear": docYear,
        "reference": reference,
    })


def main() -> None:
    configure_logging()
    try:
        get_service()
    except ComaxConfigError as e:
        logger.critical(str(e))
        sys.exit(1)
    logger.info("Comax Payment Link MCP server starting (stdio)")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
