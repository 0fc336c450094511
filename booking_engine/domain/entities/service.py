from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Service:
    id: str
    name: str
    min_minutes: int
    max_minutes: int
    price: float = 0
    currency: str = "USD"
    description: str = ""
    keywords: frozenset[str] = frozenset()

    def matches_text(self, text: str) -> bool:
        lowered = text.lower()
        if self.id and self.id.lower() in lowered:
            return True
        if self.name and self.name.lower() in lowered:
            return True
        return any(keyword and keyword in lowered for keyword in self.keywords)

    def formatted_price(self) -> str:
        if not self.price:
            return ""
        amount = int(self.price) if float(self.price).is_integer() else self.price
        return f"{self.currency} {amount}"
