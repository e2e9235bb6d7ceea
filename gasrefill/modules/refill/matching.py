"""
Station compatibility matching.

A refill station lists the cylinders it accepts as price rules. Each rule
names a gas type and size, and may narrow itself to cylinders whose SKU
prefix (serial code up to the first '-') contains a filter string. A rule
without a filter is a generic acceptor for its gas type and size.

Rules are compiled into a ``PriceRuleBook``: an ordered list of predicates
that decides acceptance and price with the same lookup. Precedence:

    1. the first rule, in declaration order, whose SKU filter matched;
    2. otherwise the first generic rule for the gas type and size;
    3. otherwise the cylinder is not accepted.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from gasrefill.modules.cylinders.schemas import Cylinder
from gasrefill.modules.refill.schemas import RefillStation, RefillPriceRule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RulePredicate:
    rule: RefillPriceRule

    @property
    def is_generic(self) -> bool:
        return self.rule.is_generic

    def matches(self, cylinder: Cylinder) -> bool:
        if cylinder.gas_type != self.rule.gas_type or cylinder.size != self.rule.size:
            return False
        if self.is_generic:
            return True
        return self.rule.sku_filter in cylinder.sku_prefix


@dataclass(frozen=True)
class PriceRuleBook:
    """Ordered predicate/price pairs of a single station"""
    predicates: tuple[RulePredicate, ...] = ()

    @classmethod
    def for_station(cls, station: RefillStation, rules: Iterable[RefillPriceRule]) -> "PriceRuleBook":
        # Iteration order of ``rules`` is the declaration order
        return cls(tuple(RulePredicate(r) for r in rules if r.station_id == station.id))

    def __len__(self) -> int:
        return len(self.predicates)

    def resolve(self, cylinder: Cylinder) -> Optional[RefillPriceRule]:
        generic = None
        for predicate in self.predicates:
            if not predicate.matches(cylinder):
                continue
            if not predicate.is_generic:
                return predicate.rule
            if generic is None:
                generic = predicate.rule
        return generic

    def accepts(self, cylinder: Cylinder) -> bool:
        return self.resolve(cylinder) is not None


@dataclass
class MatchResult:
    compatible: list[Cylinder] = field(default_factory=list)
    resolved_rules: dict[int, RefillPriceRule] = field(default_factory=dict)

    def rule_for(self, cylinder_id: int) -> Optional[RefillPriceRule]:
        return self.resolved_rules.get(cylinder_id)


def match(
    station: RefillStation,
    price_rules: Iterable[RefillPriceRule],
    candidates: Sequence[Cylinder],
) -> MatchResult:
    """
    Select the candidates ``station`` accepts and the rule pricing each.

    Candidates are expected to be pre-filtered to empty cylinders; status is
    not checked here. The compatible list keeps candidate order.
    """
    book = PriceRuleBook.for_station(station, price_rules)
    result = MatchResult()
    if not book:
        logger.debug("Station %s has no price rules; nothing is compatible", station.id)
        return result

    for cylinder in candidates:
        rule = book.resolve(cylinder)
        if rule is None:
            continue
        result.compatible.append(cylinder)
        result.resolved_rules[cylinder.id] = rule
    return result
