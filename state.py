import uuid
from typing import Optional

from config import DEFAULT_CURRENCY
from schemas import PAYMENT_PROVIDERS, AppState, LineItem, PaymentMethods, Person


def generate_id() -> str:
    return uuid.uuid4().hex[:7]


def create_default_state() -> AppState:
    """A fresh state with one blank person, ready for input"""
    return AppState(people=[Person(id=generate_id(), name="", items=[])])


def find_person(state: AppState, person_id: str) -> Optional[Person]:
    return next((p for p in state.people if p.id == person_id), None)


def add_person(state: AppState) -> Person:
    person = Person(id=generate_id(), name="", items=[])
    state.people.append(person)
    return person


def remove_person(state: AppState, person_id: str) -> None:
    state.people = [p for p in state.people if p.id != person_id]


def update_person_name(state: AppState, person_id: str, name: str) -> None:
    person = find_person(state, person_id)
    if person:
        person.name = name


def add_line_item(state: AppState, person_id: str) -> Optional[LineItem]:
    person = find_person(state, person_id)
    if not person:
        return None
    item = LineItem(id=generate_id(), name="", amount_cents=0)
    person.items.append(item)
    return item


def remove_line_item(state: AppState, person_id: str, item_id: str) -> None:
    person = find_person(state, person_id)
    if person:
        person.items = [i for i in person.items if i.id != item_id]


def update_line_item(
    state: AppState,
    person_id: str,
    item_id: str,
    name: Optional[str] = None,
    amount_cents: Optional[int] = None,
) -> None:
    person = find_person(state, person_id)
    if not person:
        return
    item = next((i for i in person.items if i.id == item_id), None)
    if not item:
        return
    if name is not None:
        item.name = name
    if amount_cents is not None:
        item.amount_cents = amount_cents


def set_currency(state: AppState, symbol: Optional[str]) -> None:
    state.currency = None if not symbol or symbol == DEFAULT_CURRENCY else symbol


def currency_symbol(state: AppState) -> str:
    return state.currency or DEFAULT_CURRENCY


def set_event_name(state: AppState, name: Optional[str]) -> None:
    name = (name or "").strip()
    state.event_name = name or None


def has_any_payment_method(payments: Optional[PaymentMethods]) -> bool:
    if payments is None:
        return False
    return any((getattr(payments, key) or "").strip() for key in PAYMENT_PROVIDERS)


def update_payments(
    state: AppState,
    person_id: str,
    venmo: Optional[str] = None,
    zelle: Optional[str] = None,
    paypal: Optional[str] = None,
    cashapp: Optional[str] = None,
    other: Optional[str] = None,
) -> None:
    """
    Replace a person's payment handles.

    Values are trimmed and blanks dropped. When nothing is left the whole
    payments object is cleared.
    """
    person = find_person(state, person_id)
    if not person:
        return

    handles = {"venmo": venmo, "zelle": zelle, "paypal": paypal, "cashapp": cashapp, "other": other}
    cleaned = {}
    for key, value in handles.items():
        value = (value or "").strip()
        if value:
            cleaned[key] = value
    person.payments = PaymentMethods(**cleaned) if cleaned else None


def has_user_data(state: AppState) -> bool:
    return any(
        person.name.strip() != ""
        or any(item.name.strip() != "" or item.amount_cents > 0 for item in person.items)
        for person in state.people
    )


def has_enough_data(state: AppState) -> bool:
    """At least two named people have entered something to split"""
    ready = [p for p in state.people if p.name.strip() and p.items]
    return len(ready) >= 2
