"""
Value types shared by the rule mining stages.

Items, transactions, itemsets and rules are immutable. Every stage builds
new values from its inputs instead of mutating them.
"""
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Tuple, Any


@dataclass(frozen=True, order=True)
class Item:
    """A single (attribute, value) pair, e.g. Item('PRECINCT', '10')."""
    attribute: str
    value: str

    def to_dict(self) -> Dict[str, str]:
        return {'feature': self.attribute, 'value': self.value}

    def __str__(self):
        return f"{self.attribute}={self.value}"


Transaction = FrozenSet[Item]
Itemset = Tuple[Item, ...]  # always sorted, no duplicates


def make_itemset(items) -> Itemset:
    return tuple(sorted(set(items)))


def format_itemset(itemset) -> str:
    return ' AND '.join(str(item) for item in sorted(itemset))


@dataclass(frozen=True)
class FrequentItemset:
    items: Itemset
    support: float
    count: int

    def __len__(self):
        return len(self.items)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'items': [item.to_dict() for item in self.items],
            'support': self.support,
            'count': self.count
        }


@dataclass(frozen=True)
class AssociationRule:
    """
    A rule antecedent -> consequent derived from one frequent itemset.

    Attributes:
        antecedent: Sorted items on the left-hand side
        consequent: Sorted items on the right-hand side, disjoint from antecedent
        support: Support of antecedent and consequent together
        confidence: support(antecedent + consequent) / support(antecedent)
        lift: confidence / support(consequent)
        count: Number of transactions containing antecedent and consequent
    """
    antecedent: Itemset
    consequent: Itemset
    support: float
    confidence: float
    lift: float
    count: int

    @property
    def items(self) -> Itemset:
        return make_itemset(self.antecedent + self.consequent)

    def sort_key(self) -> Tuple[Tuple[Tuple[str, str], ...], Tuple[Tuple[str, str], ...]]:
        return (
            tuple((i.attribute, i.value) for i in self.antecedent),
            tuple((i.attribute, i.value) for i in self.consequent)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'antecedent': [item.to_dict() for item in self.antecedent],
            'consequent': [item.to_dict() for item in self.consequent],
            'support': self.support,
            'confidence': self.confidence,
            'lift': self.lift,
            'count': self.count
        }

    def __str__(self):
        return f"{format_itemset(self.antecedent)} -> {format_itemset(self.consequent)}"
