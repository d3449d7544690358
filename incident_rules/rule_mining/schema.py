"""
Attribute schema: the fixed set of categorical attributes a transaction may
carry, each with its finite value domain.
"""
import re
from typing import Dict, Iterable, List, Optional, FrozenSet, Any
import numpy as np
import pandas as pd

from incident_rules.rule_mining.models import Item

TIME_SLOT = 'TIME_SLOT'
PRECINCT = 'PRECINCT'

TIME_SLOT_DOMAIN = ('Morning', 'Afternoon', 'Evening', 'Night')


class SchemaError(ValueError):
    """Raised when a row does not fit the attribute schema."""


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ''
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


# Integral decimal text such as "10.0"; plain codes like "007" are left alone
INTEGRAL_TEXT = re.compile(r'^([+-]?\d+)\.0*$')


def normalize_value(value: Any) -> Optional[str]:
    """
    Convert a raw cell to its categorical string form, or None when missing.

    Integral floats lose their decimal part so that a precinct read as 10.0
    (pandas upcasts integer columns holding NaN) encodes as '10'. The same
    applies to text such as '10.0', so a cell read as a string encodes to the
    same item as the number.
    """
    if is_missing(value):
        return None
    if isinstance(value, (bool, np.bool_)):
        return str(bool(value))
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return str(int(value))
    if isinstance(value, np.integer):
        return str(int(value))
    text = str(value).strip()
    integral = INTEGRAL_TEXT.match(text)
    if integral:
        return str(int(integral.group(1)))
    return text


class AttributeSchema:
    """
    Mapping of attribute name to its finite value domain.

    A domain of None leaves the attribute open: any non-missing value is
    accepted. Domains are stored as frozensets of normalized strings.
    """

    def __init__(self, domains: Dict[str, Optional[Iterable[Any]]]):
        if not domains:
            raise SchemaError("Schema needs at least one attribute")

        self._domains: Dict[str, Optional[FrozenSet[str]]] = {}
        for attribute, domain in domains.items():
            if domain is None:
                self._domains[str(attribute)] = None
                continue
            values = {normalize_value(v) for v in domain}
            values.discard(None)
            if not values:
                raise SchemaError(f"Domain of '{attribute}' is empty")
            self._domains[str(attribute)] = frozenset(values)

    @property
    def attributes(self) -> List[str]:
        return list(self._domains)

    def domain(self, attribute: str) -> Optional[FrozenSet[str]]:
        if attribute not in self._domains:
            raise SchemaError(f"Unknown attribute: '{attribute}'")
        return self._domains[attribute]

    def validate(self, attribute: str, value: Any) -> Optional[str]:
        """
        Normalize value and check it against the attribute's domain.

        Returns:
            The normalized value, or None if the value is missing

        Raises:
            SchemaError: if the attribute is unknown or the value is outside the domain
        """
        domain = self.domain(attribute)
        normalized = normalize_value(value)
        if normalized is None:
            return None
        if domain is not None and normalized not in domain:
            raise SchemaError(
                f"Value '{normalized}' is not in the domain of '{attribute}': {sorted(domain)}"
            )
        return normalized

    @classmethod
    def from_frame(cls, df: pd.DataFrame, columns: List[str] = None) -> 'AttributeSchema':
        """Build a closed schema from the values observed in df."""
        columns = columns or df.columns.tolist()
        missing_cols = [c for c in columns if c not in df.columns]
        if missing_cols:
            raise SchemaError(f"Columns not in data: {missing_cols}")

        domains = {}
        for col in columns:
            values = {normalize_value(v) for v in df[col].unique()}
            values.discard(None)
            domains[col] = values or None
        return cls(domains)

    @classmethod
    def incident_default(cls, precincts: Iterable[Any] = None) -> 'AttributeSchema':
        """TIME_SLOT with its four labels, PRECINCT open unless precincts are given."""
        return cls({
            TIME_SLOT: TIME_SLOT_DOMAIN,
            PRECINCT: list(precincts) if precincts is not None else None
        })

    def items(self) -> List[Item]:
        """Every item of the closed domains, sorted. Open attributes contribute none."""
        return sorted(
            Item(attribute, value)
            for attribute, domain in self._domains.items() if domain is not None
            for value in domain
        )

    def to_dict(self) -> Dict[str, Optional[List[str]]]:
        return {
            attribute: sorted(domain) if domain is not None else None
            for attribute, domain in self._domains.items()
        }

    def __contains__(self, attribute):
        return attribute in self._domains

    def __eq__(self, other):
        if not isinstance(other, AttributeSchema):
            return NotImplemented
        return self._domains == other._domains

    def __repr__(self):
        return f"AttributeSchema({self.to_dict()})"
