"""
Data models for Comax requests and results
"""
from dataclasses import dataclass, field, asdict
from decimal import Decimal
from typing import Any, Dict, List, Optional


def to_decimal(value: Any) -> Decimal:
    """Convert ints, floats and numeric strings to Decimal without binary drift."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("bool is not a valid amount")
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(str(value).strip())


@dataclass(frozen=True)
class OrderItem:
    """One order line. Only its position in the list links it to its fields."""
    sku: str
    quantity: int
    price: Decimal
    total_sum: Decimal
    remarks: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "price", to_decimal(self.price))
        object.__setattr__(self, "total_sum", to_decimal(self.total_sum))


@dataclass
class ContactPerson:
    """Contact person embedded in a customer record"""
    CustomerID: Optional[str] = None
    Name: Optional[str] = None
    Title: Optional[str] = None
    Phone: Optional[str] = None
    Mobile: Optional[str] = None
    Fax: Optional[str] = None
    Email: Optional[str] = None


@dataclass
class CustomerDetails:
    """
    Business customer as returned by Get_CustomerDetails.

    Field names follow the vendor schema. Flags are normalized to bool (or
    None when not reported) and ContactMan is always a list.
    """
    InternalID: Optional[str] = None
    Name: Optional[str] = None
    ID: Optional[str] = None
    Street: Optional[str] = None
    Street_No: Optional[str] = None
    City: Optional[str] = None
    Phone: Optional[str] = None
    Zip: Optional[str] = None
    Mobile: Optional[str] = None
    Currency: Optional[str] = None
    GroupID: Optional[str] = None
    TypeID: Optional[str] = None
    TaxID: Optional[str] = None
    ForeignName: Optional[str] = None
    ForeignCity: Optional[str] = None
    ForeignCurrency: Optional[bool] = None
    ExportCustomer: Optional[bool] = None
    TaxExempt: Optional[str] = None
    IDCard: Optional[str] = None
    Email: Optional[str] = None
    NotSendEmail: Optional[bool] = None
    NotSendSMS: Optional[bool] = None
    BornDate: Optional[str] = None
    DateOfBirth: Optional[str] = None
    FamilyStatus: Optional[str] = None
    Sex: Optional[str] = None
    PriceListID: Optional[str] = None
    DiscountPercent: Optional[str] = None
    Remark: Optional[str] = None
    Floor: Optional[str] = None
    Flat: Optional[str] = None
    Balance: Optional[str] = None
    BalanceLk: Optional[str] = None
    IsBlocked: Optional[bool] = None
    BlockDate: Optional[str] = None
    ContactMan: List[ContactPerson] = field(default_factory=list)
    ClubCustomer: Optional[bool] = None
    SwInvoiceEmail: Optional[bool] = None
    SwDeleteBlockDate: Optional[bool] = None
    CentralAccount: Optional[str] = None
    EDI: Optional[str] = None
    CheckIdDetailsExists: Optional[bool] = None
    AgentId: Optional[str] = None
    CreditLimit: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)


CUSTOMER_BOOL_FIELDS = (
    "ForeignCurrency",
    "ExportCustomer",
    "NotSendEmail",
    "NotSendSMS",
    "IsBlocked",
    "ClubCustomer",
    "SwInvoiceEmail",
    "SwDeleteBlockDate",
    "CheckIdDetailsExists",
)


@dataclass
class OrderStatus:
    """Result of GetCustomerOrderStatus. None means 'not reported'."""
    status_code: Optional[int] = None
    status_name: Optional[str] = None
    tracking_number: Optional[str] = None
    error_message: Optional[str] = None
    self_supply: Optional[bool] = None
    close_order: Optional[int] = None
    sw_close: Optional[int] = None
    delivery_store: Optional[int] = None
    doc_number: Optional[str] = None


@dataclass
class OrderDetails:
    """Well-known fields of Get_CustomerOrderDetails plus the full vendor mapping."""
    customer_id: Optional[str] = None
    store_id: Optional[int] = None
    price_list_id: Optional[int] = None
    agent_id: Optional[int] = None
    doc_number: Optional[str] = None
    manual_doc_number: Optional[bool] = None
    reference: Optional[str] = None
    total_sum: Optional[Decimal] = None
    total_quantity: Optional[str] = None
    lines_count: Optional[str] = None
    remarks: Optional[str] = None
    details: Optional[str] = None
    status: Optional[int] = None
    fields: Dict[str, Any] = field(default_factory=dict)


@dataclass
class CreditCardOrder:
    doc_number: str
    doc_year: str
    reference: str


@dataclass
class OrdersSimpleRecord:
    """Row of the secondary ArrayOfClsGetCustomersOrdersOut document"""
    DocNumber: Optional[str] = None
    ItemName: Optional[str] = None
    Quantity: Optional[str] = None
    TotalSum: Optional[str] = None
    DateDoc: Optional[str] = None


@dataclass
class OrdersSimpleResult:
    """GetCustomersOrders_Simple outcome: the raw result and, for URLs, the fetched rows."""
    result: str
    is_url: bool = False
    records: List[OrdersSimpleRecord] = field(default_factory=list)
    secondary_error: Optional[str] = None


@dataclass
class PaymentLink:
    doc_number: str
    reference: str
    total_sum: Decimal
    payment_url: str


@dataclass
class OperationResult:
    """
    Uniform outcome of every Comax operation.

    Exactly one of (success with payload) or (failure with error) holds.
    """
    operation: str
    success: bool
    payload: Any = None
    raw_response: Optional[str] = None
    error: Optional[str] = None
    stage: Optional[str] = None

    def __post_init__(self):
        if self.success:
            if self.payload is None or self.error is not None:
                raise ValueError("successful result needs a payload and no error")
        elif not self.error or self.payload is not None:
            raise ValueError("failed result needs an error and no payload")

    @classmethod
    def ok(cls, operation: str, payload: Any, raw_response: Optional[str] = None) -> "OperationResult":
        return cls(operation=operation, success=True, payload=payload, raw_response=raw_response)

    @classmethod
    def fail(
        cls,
        operation: str,
        error: str,
        raw_response: Optional[str] = None,
        stage: Optional[str] = None,
    ) -> "OperationResult":
        return cls(
            operation=operation,
            success=False,
            error=error,
            raw_response=raw_response,
            stage=stage,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Plain-dict form, with dataclass payloads expanded."""
        payload = self.payload
        if hasattr(payload, "__dataclass_fields__"):
            payload = asdict(payload)
        elif isinstance(payload, list):
            payload = [asdict(p) if hasattr(p, "__dataclass_fields__") else p for p in payload]
        return {
            "operation": self.operation,
            "success": self.success,
            "payload": payload,
            "raw_response": self.raw_response,
            "error": self.error,
            "stage": self.stage,
        }
