from datetime import date, datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Priority(str, Enum):
    CRITICAL = "critical"
    URGENT = "urgent"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Display rank: critical sorts first, low last."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {Priority.CRITICAL: 0, Priority.URGENT: 1, Priority.LOW: 2}


class CashStatus(str, Enum):
    OVER = "Over"
    SHORT = "Short"
    PERFECT = "Perfect"


TransactionType = Literal[
    "received", "dispensed", "inventory_count", "shrinkage", "cash_count"
]


class InventoryItem(BaseModel):
    """
    A single supply item document as exported from the database.
    The document id keeps the backend's `$id` name on the wire.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="$id")
    item_name: str
    category: str = ""
    unit: str = "unit"
    # Stock levels are required: a blank cell is bad data, not zero.
    current_quantity: int = Field(..., ge=0)
    reorder_point: int = Field(..., ge=0)
    reorder_quantity: int = Field(..., gt=0)
    unit_cost: Optional[float] = Field(default=None, ge=0)
    charge_price: Optional[float] = Field(default=None, ge=0)
    supplier: Optional[str] = None
    supplier_sku: Optional[str] = None
    is_for_sale: bool = False

    @field_validator("supplier", "supplier_sku", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        # Optional attributes left empty in the backend export as ""
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ReorderAlert(BaseModel):
    """An item that needs restocking, tagged with how urgently. Never persisted."""

    item: InventoryItem
    priority: Priority

    @property
    def item_id(self) -> str:
        return self.item.id

    @property
    def name(self) -> str:
        return self.item.item_name


class CountSubmission(BaseModel):
    item: InventoryItem
    actual_count: int = Field(..., ge=0)
    # Negative on overage; see reconciliation.apply_count.
    items_sold: int
    expected_revenue: float
    # Positive = overage, negative = shrinkage.
    variance: int


class CountTotals(BaseModel):
    items_counted: int = 0
    total_items_sold: int = 0
    total_expected_revenue: float = 0.0
    total_shrinkage: int = 0
    total_overage: int = 0


class TransactionRecord(BaseModel):
    """Audit entry for the supply transactions collection."""

    supply_item_id: str
    transaction_type: TransactionType
    quantity: int
    previous_quantity: int
    new_quantity: int
    performed_by: str
    transaction_date: datetime
    notes: Optional[str] = None
    unit_cost_at_transaction: Optional[float] = None
    charge_price_at_transaction: Optional[float] = None
    expected_cash: Optional[float] = None
    actual_cash: Optional[float] = None
    cash_variance: Optional[float] = None


class ItemUpdate(BaseModel):
    """Partial update for a supply item document. Unset fields are left untouched."""

    item_id: str
    current_quantity: Optional[int] = Field(default=None, ge=0)
    unit_cost: Optional[float] = Field(default=None, ge=0)
    supplier: Optional[str] = None
    last_ordered_date: Optional[date] = None

    def payload(self) -> dict:
        return self.model_dump(mode="json", exclude={"item_id"}, exclude_none=True)


class InventoryStats(BaseModel):
    total: int
    low_stock: int
    out_of_stock: int


class UsedItem(BaseModel):
    name: str
    count: int
    category: str


class ShrinkageItem(BaseModel):
    name: str
    lost: int
    value: float


class ReorderFrequency(BaseModel):
    name: str
    times_ordered: int


class CategoryShare(BaseModel):
    category: str
    count: int
    percentage: int


class CashMetrics(BaseModel):
    total_revenue: float = 0.0
    total_variance: float = 0.0
    average_variance: float = 0.0
    cash_counts_performed: int = 0


class UsageMetrics(BaseModel):
    time_range: str
    total_transactions: int = 0
    total_items_dispensed: int = 0
    total_items_received: int = 0
    total_shrinkage: int = 0
    top_used_items: list[UsedItem] = Field(default_factory=list)
    shrinkage_items: list[ShrinkageItem] = Field(default_factory=list)
    reorder_frequency: list[ReorderFrequency] = Field(default_factory=list)
    category_breakdown: list[CategoryShare] = Field(default_factory=list)
    cash_metrics: CashMetrics = Field(default_factory=CashMetrics)
