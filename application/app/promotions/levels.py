from decimal import Decimal
from typing import Optional, Sequence


def select_level(levels: Sequence, total_value: Decimal) -> Optional[object]:
    """Return the first level whose threshold the value reaches.

    `levels` must already be ordered by threshold_value descending (id ascending
    on ties), which is how the repository loads them; the first hit is
    therefore the richest tier the value still satisfies.
    """
    for level in levels:
        if Decimal(str(level.threshold_value)) <= total_value:
            return level
    return None
