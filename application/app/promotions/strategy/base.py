from abc import ABC, abstractmethod
from decimal import Decimal


class BaseDiscountStrategy(ABC):
    @abstractmethod
    def compute_discount(self, level, qualified_value: Decimal) -> Decimal:
        pass
