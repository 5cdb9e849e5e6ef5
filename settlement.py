from typing import List, Sequence, Tuple

from schemas import Person, PersonBalance, Settlement, SettlementSummary


def total_cents(person: Person) -> int:
    return sum(item.amount_cents for item in person.items)


def participants(people: Sequence[Person]) -> List[Person]:
    return [p for p in people if p.name.strip() != ""]


def fair_share_cents(people: Sequence[Person]) -> int:
    valid = participants(people)
    if not valid:
        return 0
    # Floored, the leftover cents stay with the creditors
    return sum(total_cents(p) for p in valid) // len(valid)


def calculate_balances(people: Sequence[Person]) -> List[PersonBalance]:
    valid = participants(people)
    share = fair_share_cents(valid)
    return [
        PersonBalance(name=p.name, paid_cents=total_cents(p), balance_cents=total_cents(p) - share)
        for p in valid
    ]


def _match(debtors: List[Tuple[str, int]], creditors: List[Tuple[str, int]]) -> List[Settlement]:
    settlements = []
    i = j = 0
    while i < len(debtors) and j < len(creditors):
        d_name, d_amt = debtors[i]
        c_name, c_amt = creditors[j]
        amount = min(d_amt, c_amt)

        if amount > 0:
            settlements.append(Settlement(from_=d_name, to=c_name, amount_cents=amount))

        debtors[i] = (d_name, d_amt - amount)
        creditors[j] = (c_name, c_amt - amount)

        if debtors[i][1] == 0:
            i += 1
        if creditors[j][1] == 0:
            j += 1

    return settlements


def calculate_settlements(people: Sequence[Person]) -> List[Settlement]:
    """
    Greedy minimum-transaction settlement.

    Returns an empty list when fewer than two people have a name. The
    result is in the order the transfers were generated (debtor by debtor).
    """
    valid = participants(people)
    if len(valid) < 2:
        return []

    balances = calculate_balances(valid)
    debtors = sorted(
        [(b.name, -b.balance_cents) for b in balances if b.balance_cents < 0], key=lambda x: -x[1]
    )
    creditors = sorted(
        [(b.name, b.balance_cents) for b in balances if b.balance_cents > 0], key=lambda x: -x[1]
    )
    return _match(debtors, creditors)


def summarize(people: Sequence[Person]) -> SettlementSummary:
    valid = participants(people)
    return SettlementSummary(
        total_cents=sum(total_cents(p) for p in valid),
        fair_share_cents=fair_share_cents(valid),
        balances=calculate_balances(valid),
        settlements=calculate_settlements(valid),
    )


def format_cents(cents: int) -> str:
    sign = "-" if cents < 0 else ""
    whole, rest = divmod(abs(cents), 100)
    return f"{sign}{whole}.{rest:02d}"
