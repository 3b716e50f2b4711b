"""
Parameter models for the Comax operations

Each model validates one operation's caller parameters before anything is
sent. Field aliases keep the camelCase names used by the tool surfaces.
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PositiveInt,
    ValidationError,
    model_validator,
)

from .exceptions import ComaxValidationError
from .models import OrderItem

P = TypeVar("P", bound="ComaxParams")


class ComaxParams(BaseModel):
    """Base: camelCase aliases, and blank strings count as 'not provided'."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        frozen=True,
        coerce_numbers_to_str=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _blank_to_none(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                k: (None if isinstance(v, str) and not v.strip() else v)
                for k, v in data.items()
            }
        return data


class OrderItemParams(ComaxParams):
    sku: str = Field(min_length=1)
    quantity: PositiveInt
    price: float = Field(gt=0, allow_inf_nan=False)
    total_sum: float = Field(gt=0, allow_inf_nan=False, alias="totalSum")
    remarks: Optional[str] = None

    def to_order_item(self) -> OrderItem:
        return OrderItem(
            sku=self.sku,
            quantity=self.quantity,
            price=self.price,
            total_sum=self.total_sum,
            remarks=self.remarks,
        )


class CreateOrderParams(ComaxParams):
    """Parameters for writing a new order (and for the payment link built on it)."""
    customer_id: Optional[str] = Field(default=None, alias="customerId")
    customer_name: str = Field(alias="customerName")
    customer_phone: str = Field(alias="customerPhone")
    customer_city: str = Field(alias="customerCity")
    customer_address: Optional[str] = Field(default=None, alias="customerAddress")
    customer_zip: Optional[str] = Field(default=None, alias="customerZip")
    price_list_id: Optional[int] = Field(default=None, alias="priceListId")
    items: List[OrderItemParams] = Field(min_length=1)
    reference: Optional[str] = None
    remarks: Optional[str] = None

    @property
    def order_items(self) -> List[OrderItem]:
        return [item.to_order_item() for item in self.items]

    @property
    def total_sum(self) -> Decimal:
        return sum((item.total_sum for item in self.order_items), Decimal("0"))


class CreatePaymentLinkParams(CreateOrderParams):
    pass


class UpdateOrderPaymentParams(ComaxParams):
    doc_number: str = Field(alias="docNumber")
    customer_id: Optional[str] = Field(default=None, alias="customerId")
    store_id: Optional[int] = Field(default=None, alias="storeId")
    branch_id: Optional[int] = Field(default=None, alias="branchId")
    price_list_id: Optional[int] = Field(default=None, alias="priceListId")
    pay_type: str = Field(alias="payType")
    credit_token_number: str = Field(alias="creditTokenNumber")
    credit_company: str = Field(alias="creditCompany")
    credit_card_number: str = Field(alias="creditCardNumber")
    credit_expire_date: str = Field(alias="creditExpireDate")
    credit_tz: str = Field(alias="creditTZ")
    credit_pays_number: str = Field(alias="creditPaysNumber")
    credit_transaction_type: str = Field(alias="creditTransactionType")
    items: List[OrderItemParams] = Field(min_length=1)
    remarks: Optional[str] = None

    @property
    def order_items(self) -> List[OrderItem]:
        return [item.to_order_item() for item in self.items]


class CustomerDetailsParams(ComaxParams):
    customer_id: str = Field(alias="customerId")


class OrderStatusParams(ComaxParams):
    doc_number: Optional[str] = Field(default=None, alias="docNumber")
    reference: Optional[str] = None

    @model_validator(mode="after")
    def _doc_or_reference(self):
        if not self.doc_number and not self.reference:
            raise ValueError("You must provide either docNumber or reference.")
        return self


class OrderDetailsParams(ComaxParams):
    doc_number: Optional[str] = Field(default=None, alias="docNumber")
    doc_year: Optional[str] = Field(default=None, alias="docYear")
    reference: Optional[str] = None

    @model_validator(mode="after")
    def _all_required(self):
        if not self.doc_number or not self.doc_year or not self.reference:
            raise ValueError("You must provide docNumber, docYear, and reference.")
        return self


class OrderPdfLinkParams(OrderStatusParams):
    doc_year: Optional[str] = Field(default=None, alias="docYear")
    sw_by_spool: Optional[bool] = Field(default=None, alias="swBySpool")


class SetOrderStatusParams(OrderStatusParams):
    doc_year: Optional[str] = Field(default=None, alias="docYear")
    status: Optional[str] = None
    status_code: Optional[int] = Field(default=None, alias="statusCode")

    @model_validator(mode="after")
    def _status_or_code(self):
        if not self.status and not self.status_code:
            raise ValueError("You must provide at least one of status or statusCode.")
        return self


class OrdersByCreditCardParams(ComaxParams):
    credit_card_number: Optional[str] = Field(default=None, alias="creditCardNumber")

    @model_validator(mode="after")
    def _card_required(self):
        if not self.credit_card_number:
            raise ValueError("You must provide creditCardNumber.")
        return self


# Request element name for every optional filter, in envelope order
ORDERS_SIMPLE_FILTERS = (
    ("store_id", "StoreID"),
    ("department_id", "DepartmentID"),
    ("agent_id", "AgentID"),
    ("item_id", "ItemID"),
    ("supplier_id", "SupplierID"),
    ("attribute1_code", "Attribute1Code"),
    ("attribute2_code", "Attribute2Code"),
    ("attribute3_code", "Attribute3Code"),
    ("group_by_date", "GroupByDate"),
    ("group_by_month", "GroupByMonth"),
    ("group_by_sub_group", "GroupBySubGroup"),
    ("group_by_group", "GroupByGroup"),
    ("group_by_store", "GroupByStore"),
    ("group_by_prt", "GroupByPrt"),
    ("open_order", "OpenOrder"),
    ("from_date_supply", "FromDateSupply"),
    ("to_date_supply", "ToDateSupply"),
)


class OrdersSimpleParams(ComaxParams):
    from_date: str = Field(alias="fromDate")
    to_date: str = Field(alias="toDate")
    store_id: Optional[str] = Field(default=None, alias="storeID")
    department_id: Optional[str] = Field(default=None, alias="departmentID")
    agent_id: Optional[str] = Field(default=None, alias="agentID")
    item_id: Optional[str] = Field(default=None, alias="itemID")
    supplier_id: Optional[str] = Field(default=None, alias="supplierID")
    attribute1_code: Optional[str] = Field(default=None, alias="attribute1Code")
    attribute2_code: Optional[str] = Field(default=None, alias="attribute2Code")
    attribute3_code: Optional[str] = Field(default=None, alias="attribute3Code")
    group_by_date: Optional[str] = Field(default=None, alias="groupByDate")
    group_by_month: Optional[str] = Field(default=None, alias="groupByMonth")
    group_by_sub_group: Optional[str] = Field(default=None, alias="groupBySubGroup")
    group_by_group: Optional[str] = Field(default=None, alias="groupByGroup")
    group_by_store: Optional[str] = Field(default=None, alias="groupByStore")
    group_by_prt: Optional[str] = Field(default=None, alias="groupByPrt")
    open_order: Optional[str] = Field(default=None, alias="openOrder")
    from_date_supply: Optional[str] = Field(default=None, alias="fromDateSupply")
    to_date_supply: Optional[str] = Field(default=None, alias="toDateSupply")


class ChkItemExistsParams(ComaxParams):
    item_id: Optional[str] = Field(default=None, alias="itemID")
    order_number: Optional[str] = Field(default=None, alias="orderNumber")
    order_year: Optional[str] = Field(default=None, alias="orderYear")
    reference: Optional[str] = None

    @model_validator(mode="after")
    def _item_and_order(self):
        if not self.item_id:
            raise ValueError("You must provide itemID.")
        if not self.order_number and not self.reference:
            raise ValueError("You must provide either orderNumber or reference.")
        return self


class SetOrderSelfPickupParams(OrderStatusParams):
    doc_year: Optional[str] = Field(default=None, alias="docYear")


def _format_validation_error(exc: ValidationError) -> str:
    messages = []
    for err in exc.errors():
        msg = err.get("msg", "")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        loc = ".".join(str(part) for part in err.get("loc", ()))
        messages.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(messages)


def parse_params(model: Type[P], data: Any) -> P:
    """
    Validate raw caller parameters into a params model.

    Raises:
        ComaxValidationError: With a readable message for the caller
    """
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data or {})
    except ValidationError as e:
        raise ComaxValidationError(_format_validation_error(e)) from e


def params_to_dict(params: ComaxParams) -> Dict[str, Any]:
    """Caller-facing (camelCase) form, without unset fields."""
    return params.model_dump(by_alias=True, exclude_none=True)
