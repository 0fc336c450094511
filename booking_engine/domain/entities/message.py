from dataclasses import dataclass


@dataclass(frozen=True)
class InboundMessage:
    id: str
    routing_key: str
    customer_id: str
    text: str | None
    timestamp: int
    kind: str = "text"


@dataclass(frozen=True)
class OutboundOption:
    token: str
    label: str
