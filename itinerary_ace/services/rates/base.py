from __future__ import annotations

"""Rate provider abstraction.

Providers quote units of each currency per 1 unit of the reference currency
(USD). The rate table stores those as USD -> X pairs.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Optional


class RateProvider(ABC):
    base_currency: str = "USD"
    name: str = "abstract"

    @abstractmethod
    def fetch_rates(self) -> Dict[str, float]:
        """Return units of quote currency per 1 unit of ``base_currency``."""
        raise NotImplementedError

    @property
    def last_updated(self) -> Optional[datetime]:
        return None
