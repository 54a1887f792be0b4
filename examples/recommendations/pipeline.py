"""Product recommendations, mailed per product.

    Account event -> user -> categories -> products per category -> mail per product

Compile with:

    typestep compile examples.recommendations.pipeline:pipeline \
        --settings examples/recommendations/settings.yaml
"""

from dataclasses import dataclass

import typestep
from typestep import EventBus, LambdaFunction, Queue

ACCOUNT_ID = "000000000000"
REGION = "eu-west-1"


@dataclass
class Account:
    id: str


@dataclass
class User:
    id: str
    email: str


@dataclass
class Category:
    name: str


@dataclass
class Product:
    sku: str
    category: str


@dataclass
class Mail:
    to: str
    sku: str


def _lambda(name: str) -> LambdaFunction:
    return LambdaFunction(name=name, arn=f"arn:aws:lambda:{REGION}:{ACCOUNT_ID}:function:{name}")


def get_user(event: Account) -> User: ...


def pick_category(event: User) -> list[Category]: ...


def pick_product(event: Category) -> list[Product]: ...


def mail_to(event: Product) -> Mail: ...


input_bus = EventBus(name="accounts")
reply = Queue(name="reply", url=f"https://sqs.{REGION}.amazonaws.com/{ACCOUNT_ID}/reply")

GetUser = typestep.Function.from_handler(get_user, _lambda("GetUser"))
PickCategory = typestep.Function.from_handler(pick_category, _lambda("PickCategory"))
PickProduct = typestep.Function.from_handler(pick_product, _lambda("PickProduct"))
MailTo = typestep.Function.from_handler(mail_to, _lambda("MailTo"))


def build() -> typestep.Morphism[Account, None]:
    a = typestep.from_(Account, input_bus)
    b = typestep.join(GetUser, a)
    c = typestep.join(PickCategory, b)
    d = typestep.lift(PickProduct, c)
    e = typestep.lift_p(4, MailTo, d)
    return typestep.to_queue(reply, e)


pipeline = build()
