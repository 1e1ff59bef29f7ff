from typing import Optional

from pydantic import BaseModel, Field

from models.enums import OrderStatus, PaymentStatus


class OrderItemCreate(BaseModel):
    product_name: str = Field(..., alias="productName", min_length=1)
    quantity: int = Field(1, ge=1)
    unit_price: float = Field(..., alias="unitPrice", ge=0)

    model_config = {"populate_by_name": True}


class OrderCreate(BaseModel):
    customer_name: str = Field(..., alias="customerName", min_length=1)
    customer_phone: str = Field(..., alias="customerPhone", min_length=10, max_length=15)
    customer_email: Optional[str] = Field(None, alias="customerEmail")
    shipping_address: Optional[str] = Field(None, alias="shippingAddress")
    items: list[OrderItemCreate] = Field(..., min_length=1)

    model_config = {"populate_by_name": True}


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class PaymentCreate(BaseModel):
    amount: Optional[float] = Field(None, gt=0)
    method: Optional[str] = None
    gateway_reference: Optional[str] = Field(None, alias="gatewayReference")

    model_config = {"populate_by_name": True}


class PaymentStatusUpdate(BaseModel):
    status: PaymentStatus
