from __future__ import annotations

from dataclasses import dataclass
from typing import NewType

CouponId = NewType("CouponId", str)
StoreId = NewType("StoreId", str)
PartnerKey = NewType("PartnerKey", str)


@dataclass(frozen=True)
class CorrelationId:
    value: str
