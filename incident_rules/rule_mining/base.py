"""
Base interfaces and validation for rule mining algorithms.
"""
import numbers
from abc import ABC, abstractmethod
from typing import Dict, List, Tuple, Any, Union, Sequence, Mapping
import pandas as pd

RANKING_METRICS = ('lift', 'confidence', 'support')

MiningInput = Union[pd.DataFrame, Sequence[Mapping[str, Any]]]


class ConfigurationError(ValueError):
    """Raised for invalid mining parameters, before any computation starts."""


class MiningError(RuntimeError):
    """Raised when an internal mining invariant is broken."""


def check_fraction(name: str, value: float):
    if isinstance(value, bool) or not isinstance(value, numbers.Real) or not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"{name} must be within [0, 1], got {value!r}")


def check_max_len(value: int):
    if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value < 1:
        raise ConfigurationError(f"max_len must be a positive integer, got {value!r}")


def check_metric(value: str):
    if value not in RANKING_METRICS:
        raise ConfigurationError(f"Metric must be one of {list(RANKING_METRICS)}, got '{value}'")


def validate_mining_params(
    min_support: float,
    min_confidence: float,
    max_len: int,
    metric: str
):
    """
    Check all mining parameters and raise ConfigurationError on the first bad one.

    Args:
        min_support: Fraction in [0, 1]
        min_confidence: Fraction in [0, 1]
        max_len: Integer >= 1
        metric: One of RANKING_METRICS
    """
    check_fraction('min_support', min_support)
    check_fraction('min_confidence', min_confidence)
    check_max_len(max_len)
    check_metric(metric)


class FrequentItemsetMiner(ABC):
    """
    Base class for frequent itemset mining algorithms.

    These algorithms discover frequent co-occurring attribute values
    without forming rules (no antecedent -> consequent structure).
    """

    def __init__(self, min_support: float = 0.01, **kwargs):
        self.min_support = min_support
        self.config = kwargs

    @abstractmethod
    def mine_itemsets(self, data: MiningInput) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """
        Mine frequent itemsets from data.

        Args:
            data: DataFrame or sequence of rows with categorical values

        Returns:
            Tuple of (itemsets, stats) where:
                itemsets: List of dicts with keys 'items', 'support' and 'count'
                stats: Dict with mining statistics (execution_time, num_itemsets, etc.)
        """
        pass


class AssociationRuleMiner(ABC):
    """
    Base class for association rule mining algorithms.

    These algorithms discover rules in the form: antecedent -> consequent
    with quality metrics (support, confidence, lift).
    """

    def __init__(self, min_support: float = 0.01, min_confidence: float = 0.5, **kwargs):
        self.min_support = min_support
        self.min_confidence = min_confidence
        self.config = kwargs

    @abstractmethod
    def mine_rules(self, data: MiningInput) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """
        Mine association rules from data.

        Args:
            data: DataFrame or sequence of rows with categorical values

        Returns:
            Tuple of (rules, stats) where:
                rules: List of dicts with keys:
                    - 'antecedent': list of {'feature', 'value'} dicts
                    - 'consequent': list of {'feature', 'value'} dicts
                    - 'support': float
                    - 'confidence': float
                    - 'lift': float
                    - 'count': int
                stats: Dict with mining statistics
        """
        pass


class HybridMiner(FrequentItemsetMiner, AssociationRuleMiner):
    """
    Base class for algorithms that produce both frequent itemsets and association rules.

    max_len bounds the total number of items in an itemset, and therefore
    the number of items in antecedent and consequent together.
    """

    def __init__(
        self,
        min_support: float = 0.01,
        min_confidence: float = 0.5,
        max_len: int = None,
        **kwargs
    ):
        AssociationRuleMiner.__init__(self, min_support, min_confidence, **kwargs)
        self.max_len = max_len

    @abstractmethod
    def mine_itemsets(self, data: MiningInput) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """Mine frequent itemsets."""
        pass

    @abstractmethod
    def mine_rules(self, data: MiningInput) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """Mine association rules."""
        pass
