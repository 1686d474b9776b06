from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional
import uuid

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

RaffleStatus = Literal["draft", "active", "finished"]
OrderStatus = Literal["PENDING", "PAID", "COMPLETED", "CANCELLED", "EXPIRED"]
AdminRole = Literal["Administrator", "Editor"]
LogoAnimation = Literal["none", "rotate", "pulse", "bounce"]

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(CamelModel):
    status: str
    time: datetime
    database: str


class MigrationRunResponse(CamelModel):
    status: str
    applied_at: datetime


class DeleteResponse(CamelModel):
    success: bool
    id: str


# Raffles


class Pack(CamelModel):
    q: int = Field(..., gt=0)
    price: Decimal = Field(..., ge=0)


class RaffleCreate(CamelModel):
    title: str = Field(..., min_length=3, max_length=160)
    slug: Optional[str] = Field(None, max_length=160)
    description: Optional[str] = Field(None, max_length=5000)
    hero_image: Optional[str] = None
    gallery: list[str] = Field(default_factory=list, max_length=10)
    price: Decimal = Field(..., ge=0)
    ticket_count: int = Field(..., ge=1, le=10000)
    draw_date: datetime
    packs: list[Pack] = Field(default_factory=list)
    bonuses: list[str] = Field(default_factory=list)
    status: RaffleStatus = "draft"


class RaffleUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=3, max_length=160)
    slug: Optional[str] = Field(None, max_length=160)
    description: Optional[str] = Field(None, max_length=5000)
    hero_image: Optional[str] = None
    gallery: Optional[list[str]] = Field(None, max_length=10)
    price: Optional[Decimal] = Field(None, ge=0)
    ticket_count: Optional[int] = Field(None, ge=1, le=10000)
    draw_date: Optional[datetime] = None
    packs: Optional[list[Pack]] = None
    bonuses: Optional[list[str]] = None
    status: Optional[RaffleStatus] = None


class RaffleOut(CamelModel):
    id: str
    title: str
    slug: str
    description: Optional[str]
    hero_image: Optional[str]
    gallery: list[str]
    price: Decimal
    ticket_count: int
    sold_count: int
    draw_date: Optional[datetime]
    packs: list[Pack]
    bonuses: list[str]
    status: str
    created_at: datetime
    updated_at: datetime


# Customers


class CustomerIn(CamelModel):
    name: str = Field(..., min_length=2, max_length=120)
    phone: str = Field(..., min_length=7, max_length=20)
    email: Optional[EmailStr] = None
    district: Optional[str] = Field(None, max_length=120)


class CustomerUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=2, max_length=120)
    phone: Optional[str] = Field(None, min_length=7, max_length=20)
    email: Optional[EmailStr] = None
    district: Optional[str] = Field(None, max_length=120)


class CustomerOut(CamelModel):
    id: str
    name: str
    phone: str
    email: Optional[str]
    district: Optional[str]
    order_count: int = 0
    created_at: datetime
    updated_at: datetime


# Orders


class OrderCreate(CamelModel):
    raffle_id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    customer: Optional[CustomerIn] = None
    tickets: list[int]
    total: Optional[Decimal] = None
    payment_method: Optional[str] = Field(None, max_length=40)
    notes: Optional[str] = Field(None, max_length=1000)


class OrderUpdate(CamelModel):
    status: Optional[OrderStatus] = None
    payment_method: Optional[str] = Field(None, max_length=40)
    notes: Optional[str] = Field(None, max_length=1000)


class OrderCustomer(CamelModel):
    id: Optional[str]
    name: str
    phone: str
    email: Optional[str]
    district: Optional[str]


class OrderOut(CamelModel):
    id: str
    folio: str
    raffle_id: str
    raffle_title: Optional[str] = None
    customer: OrderCustomer
    tickets: list[int]
    total_amount: Decimal
    status: str
    payment_method: Optional[str]
    notes: Optional[str]
    created_at: datetime
    expires_at: datetime
    updated_at: datetime


class ExpireResponse(CamelModel):
    expired: int
    folios: list[str]


# Winners


class DrawRequest(CamelModel):
    raffle_id: uuid.UUID
    paid_only: bool = False


class DrawResponse(CamelModel):
    raffle_id: str
    ticket_number: int
    order: OrderOut


class WinnerCreate(CamelModel):
    raffle_id: uuid.UUID
    ticket_number: Optional[int] = Field(None, gt=0)
    name: Optional[str] = Field(None, min_length=2, max_length=120)
    prize: str = Field(..., min_length=2, max_length=200)
    image_url: Optional[str] = None
    raffle_title: Optional[str] = None
    draw_date: Optional[datetime] = None


class WinnerOut(CamelModel):
    id: str
    raffle_id: str
    order_id: Optional[str]
    customer_id: Optional[str]
    ticket_number: Optional[int]
    name: str
    prize: str
    image_url: Optional[str]
    raffle_title: str
    draw_date: Optional[datetime]
    created_at: datetime


# Settings


class Colors(CamelModel):
    background_primary: str = Field(..., pattern=HEX_COLOR)
    background_secondary: str = Field(..., pattern=HEX_COLOR)
    accent: str = Field(..., pattern=HEX_COLOR)
    action: str = Field(..., pattern=HEX_COLOR)


class Appearance(CamelModel):
    site_name: str = Field(..., min_length=2, max_length=80)
    logo_url: Optional[str] = None
    logo_animation: LogoAnimation = "rotate"
    colors: Colors


class ContactInfo(CamelModel):
    whatsapp: Optional[str] = None
    email: Optional[str] = None


class SocialLinks(CamelModel):
    facebook_url: Optional[str] = None
    instagram_url: Optional[str] = None
    twitter_url: Optional[str] = None


class PaymentAccount(CamelModel):
    id: Optional[str] = None
    bank: str
    account_holder: str
    account_number: str
    clabe: Optional[str] = None


class FaqItem(CamelModel):
    id: Optional[str] = None
    question: str
    answer: str


class SettingsUpdate(CamelModel):
    appearance: Optional[Appearance] = None
    contact_info: Optional[ContactInfo] = None
    social_links: Optional[SocialLinks] = None
    payment_accounts: Optional[list[PaymentAccount]] = Field(None, max_length=20)
    faqs: Optional[list[FaqItem]] = Field(None, max_length=50)
    version: Optional[int] = Field(None, ge=0)


class SettingsOut(CamelModel):
    id: str
    appearance: Appearance
    contact_info: ContactInfo
    social_links: SocialLinks
    payment_accounts: list[PaymentAccount]
    faqs: list[FaqItem]
    version: int
    updated_at: Optional[datetime]


# Dashboard


class StatsOut(CamelModel):
    today_sales: Decimal
    pending_orders: int
    active_raffles: int
    total_raffles: int
    total_orders: int
    total_revenue: Decimal
    total_winners: int


# Admin accounts


class AdminLogin(CamelModel):
    username: str = Field(..., min_length=3, max_length=60)
    password: str = Field(..., min_length=8, max_length=128)


class AdminUserCreate(CamelModel):
    name: str = Field(..., min_length=2, max_length=120)
    username: str = Field(..., min_length=3, max_length=60)
    password: str = Field(..., min_length=8, max_length=128)
    role: AdminRole = "Editor"


class AdminUserUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=2, max_length=120)
    password: Optional[str] = Field(None, min_length=8, max_length=128)
    role: Optional[AdminRole] = None


class AdminUserOut(CamelModel):
    id: str
    name: str
    username: str
    role: str
    created_at: datetime


class SessionOut(CamelModel):
    token: str
    expires_at: datetime
    user: AdminUserOut
