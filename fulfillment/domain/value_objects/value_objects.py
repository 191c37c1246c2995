"""Domain value objects - pure Python immutable types."""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID, uuid4


@dataclass(frozen=True)
class Money:
    """
    Non-negative amount in one currency.

    Item prices are snapshots supplied at checkout; the only arithmetic done
    here is line totals and their sum.
    """
    amount: Decimal
    currency: str = "CNY"

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))
        if self.amount < 0:
            raise ValueError(f"Amount cannot be negative: {self.amount}")
        if not isinstance(self.currency, str) or len(self.currency) != 3:
            raise ValueError(f"Currency must be 3-letter ISO code, got: {self.currency}")

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"

    def __add__(self, other: 'Money') -> 'Money':
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot add different currencies: {self.currency} vs {other.currency}"
            )
        return Money(self.amount + other.amount, self.currency)

    def times(self, quantity: int) -> 'Money':
        """Line total for ``quantity`` units."""
        return Money(self.amount * quantity, self.currency)


@dataclass(frozen=True)
class ExecutionID:
    """Identifies one unit of work in logs and published events."""

    value: UUID

    @classmethod
    def generate(cls) -> "ExecutionID":
        return cls(value=uuid4())

    def __str__(self) -> str:
        return str(self.value)
