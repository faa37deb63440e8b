import math
from enum import Enum
from typing import Dict, Mapping, Optional


class ContributionKind(Enum):
    SUBSCRIPTION = 'subscription'
    RESUB = 'resub'
    GIFT_SUBSCRIPTION = 'gift_subscription'
    CHEER = 'cheer'
    DONATION = 'donation'


SUB_KINDS = (ContributionKind.SUBSCRIPTION, ContributionKind.RESUB, ContributionKind.GIFT_SUBSCRIPTION)

# Twitch sub-plan identifiers -> multiplier keys. Prime counts as tier 1.
PLAN_TIERS = {
    'Prime': 'tier_1',
    '1000': 'tier_1',
    '2000': 'tier_2',
    '3000': 'tier_3',
}

INCENTIVE_KEYS = ('tier_1', 'tier_2', 'tier_3', 'bits', 'donation')

DEFAULT_MULTIPLIERS = {
    'tier_1': 1.0,
    'tier_2': 2.0,
    'tier_3': 5.0,
    'bits': 0.5,
    'donation': 0.2,
}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class DurationCalculator:
    """Maps a contribution to the number of seconds it adds to the timer.

    Pure: the result depends only on the arguments and the multiplier table
    given at construction.
    """

    def __init__(self, multipliers: Optional[Mapping[str, float]] = None):
        table = dict(DEFAULT_MULTIPLIERS)
        table.update(multipliers or {})
        self.multipliers: Dict[str, float] = table

    def multiplier_for_plan(self, plan: Optional[str]) -> float:
        """Unknown or missing plans fall back to tier 1."""
        return self.multipliers[PLAN_TIERS.get(plan or '', 'tier_1')]

    def seconds_for(self, kind: ContributionKind, base_time: float,
                    plan: Optional[str] = None, quantity: float = 1) -> float:
        if kind in SUB_KINDS:
            return round(base_time * self.multiplier_for_plan(plan), 3)
        if kind is ContributionKind.CHEER:
            # Bits are priced per 100
            return round((quantity / 100) * self.multipliers['bits'] * base_time, 3)
        if kind is ContributionKind.DONATION:
            return round(quantity * self.multipliers['donation'] * base_time, 3)
        raise ValueError(f"unsupported contribution kind: {kind!r}")

    def incentives(self, base_time: float) -> Dict[str, int]:
        """Whole-second amounts advertised to viewers for one unit of each kind.

        Rounded straight from `base_time * multiplier`; bits are per 100.
        """
        return {key: round_half_up(base_time * self.multipliers[key]) for key in INCENTIVE_KEYS}
