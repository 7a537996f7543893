"""Data classes and mappings shared by the tests and the CLI tests."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from form_bind import forms
from form_bind.binding import ArgumentName, CollectionKind


@dataclass
class Contact:
    firstName: str = ""
    age: int | None = None


class Address(BaseModel):
    street: str = ""
    city: str = Field(default="", min_length=1)


class Registration(BaseModel):
    name: str = Field(min_length=2)
    age: int = Field(ge=0, le=150)
    newsletter: bool = False
    tags: list[str] = []
    address: Address | None = None


class Item(BaseModel):
    name: str = ""
    quantity: int = 1


class Order(BaseModel):
    code: str = ""
    items: list[Item] = []


class Color(Enum):
    RED = "red"
    GREEN = "green"


@dataclass
class Palette:
    primary: Color = Color.RED
    scores: Annotated[list[int], CollectionKind.SORTED] = field(default_factory=list)
    labels: set[str] = field(default_factory=set)


class Point:
    """Plain class bound through setters."""

    def __init__(self) -> None:
        self._x = 0
        self._y = 0

    @property
    def x(self) -> int:
        return self._x

    def set_x(self, x: int) -> None:
        self._x = x

    @property
    def y(self) -> int:
        return self._y

    @y.setter
    def y(self, y: int) -> None:
        self._y = y

    @property
    def norm(self) -> int:
        return abs(self._x) + abs(self._y)


class Money:
    """Created only through factory methods."""

    def __init__(self, amount: Decimal, currency: str) -> None:
        self.amount = amount
        self.currency = currency

    @staticmethod
    def of(amount: Decimal, currency: str = "EUR") -> "Money":
        return Money(amount, currency)

    @classmethod
    def zero(cls) -> "Money":
        return cls(Decimal("0"), "EUR")


class Account:
    def __init__(self, owner_name: Annotated[str, ArgumentName("owner")], balance: int = 0) -> None:
        self.owner = owner_name
        self.balance = balance


class Pair:
    def __init__(self, first: int, second: int) -> None:
        self.first = first
        self.second = second


class Category(BaseModel):
    name: str = ""
    children: list["Category"] = []


class Profile(BaseModel):
    __form_ignored__ = ("secret",)

    nickname: str = ""
    secret: str = ""
    _internal: int = 0



class Membership(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    level: int = Field(default=0, ge=0)
    note: str = ""


class Part(BaseModel):
    name: str = ""


class Style(BaseModel):
    font: str = ""


class Line(BaseModel):
    text: str = ""
    style: Style | None = None
    parts: list[Part] = []


class Document(BaseModel):
    title: str = ""
    lines: list[Line] = []


person_form = forms.basic(Contact, "person").fields("firstName", "age").build()

registration_builder = forms.automatic(Registration, "registration")

order_form = (
    forms.basic(Order, "order")
    .field("code")
    .nested(forms.basic_list(Item, "items").fields("name", "quantity").build())
    .build()
)

secured_person_form = forms.basic_secured(Contact, "person").fields("firstName", "age").build()

document_form = (
    forms.basic(Document, "doc")
    .field("title")
    .nested(
        forms.basic_list(Line, "lines")
        .field("text")
        .nested(forms.basic(Style, "style").field("font"))
        .nested(forms.basic_list(Part, "parts").field("name"))
    )
    .build()
)
