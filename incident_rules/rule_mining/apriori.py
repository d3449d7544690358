"""
Level-wise (Apriori) frequent itemset generation.

Level 1 counts single items. Each following level joins the frequent
itemsets of the previous level that share all but their last item, drops
every candidate with an infrequent (k-1)-subset, and counts the survivors
with one scan over the transactions. Mining stops at max_len or at the
first level without frequent itemsets.
"""
import logging
from collections import Counter
from itertools import combinations
from typing import Dict, Iterable, List, Optional, Sequence, Set

from joblib import Parallel, delayed, effective_n_jobs
from tqdm.auto import tqdm

from incident_rules.rule_mining.base import check_fraction, check_max_len
from incident_rules.rule_mining.models import FrequentItemset, Item, Itemset, Transaction

logger = logging.getLogger(__name__)


def is_frequent(count: int, n_transactions: int, min_support: float) -> bool:
    return count / n_transactions >= min_support


def apriori_gen(previous_level: Sequence[Itemset], k: int) -> List[Itemset]:
    """
    Candidate k-itemsets from the frequent (k-1)-itemsets.

    Join: two sorted (k-1)-itemsets sharing their first k-2 items yield
    their union. Prune: keep the union only if every (k-1)-subset is in
    previous_level.
    """
    ordered = sorted(previous_level)
    known = set(ordered)
    candidates = []

    for i, left in enumerate(ordered):
        for right in ordered[i + 1:]:
            # sorted order keeps equal prefixes contiguous
            if left[:-1] != right[:-1]:
                break
            candidate = left + (right[-1],)
            if all(subset in known for subset in combinations(candidate, k - 1)):
                candidates.append(candidate)

    return candidates


def _count_chunk(
    transactions: Sequence[Transaction],
    k: int,
    candidates: Optional[Set[Itemset]]
) -> Counter:
    """Count k-item combinations per transaction; restrict to candidates when given."""
    counts = Counter()
    if candidates is None:
        for transaction in transactions:
            counts.update(combinations(sorted(transaction), k))
        return counts

    in_play = {item for candidate in candidates for item in candidate}
    for transaction in transactions:
        relevant = sorted(transaction & in_play)
        if len(relevant) < k:
            continue
        for combo in combinations(relevant, k):
            if combo in candidates:
                counts[combo] += 1
    return counts


def count_support(
    transactions: Sequence[Transaction],
    k: int,
    candidates: Optional[Sequence[Itemset]] = None,
    n_jobs: int = 1
) -> Dict[Itemset, int]:
    """
    Support counts of k-itemsets.

    With candidates, every candidate gets an entry (possibly 0). Without,
    every k-combination that occurs in some transaction is counted.
    n_jobs > 1 splits the transactions into chunks, counts each chunk with
    joblib and merges the partial counts.
    """
    candidate_set = set(candidates) if candidates is not None else None

    n_workers = min(effective_n_jobs(n_jobs), max(len(transactions), 1))
    if n_workers <= 1:
        partials = [_count_chunk(transactions, k, candidate_set)]
    else:
        size = -(-len(transactions) // n_workers)
        chunks = [transactions[i:i + size] for i in range(0, len(transactions), size)]
        partials = Parallel(n_jobs=n_workers)(
            delayed(_count_chunk)(chunk, k, candidate_set) for chunk in chunks
        )

    totals = {c: 0 for c in candidate_set} if candidate_set is not None else {}
    for partial in partials:
        for itemset, count in partial.items():
            totals[itemset] = totals.get(itemset, 0) + count
    return totals


def generate_frequent_itemsets(
    transactions: Sequence[Transaction],
    min_support: float,
    max_len: int,
    n_jobs: int = 1,
    verbose: bool = False,
    universe: Optional[Iterable[Item]] = None
) -> List[FrequentItemset]:
    """
    Find every itemset with support >= min_support and at most max_len items.

    Args:
        transactions: Encoded transactions
        min_support: Inclusive support threshold in [0, 1]
        max_len: Largest itemset size to consider
        n_jobs: Workers for support counting (joblib semantics, -1 = all cores)
        verbose: Show a progress bar over levels
        universe: Items known to exist even if no transaction holds them
                  (closed schema domains). They enter level 1 with count 0, so
                  a zero min_support reports them like any other itemset.

    Returns:
        Frequent itemsets sorted by size, then by items

    Raises:
        ConfigurationError: on invalid min_support or max_len
    """
    check_fraction('min_support', min_support)
    check_max_len(max_len)

    transactions = list(transactions)
    n_transactions = len(transactions)
    if n_transactions == 0:
        logger.info("No transactions, nothing to mine")
        return []

    frequent: Dict[Itemset, int] = {}
    progress = tqdm(total=max_len, desc="Apriori levels", unit="level", disable=not verbose)

    counts = count_support(transactions, 1, n_jobs=n_jobs)
    for item in universe or ():
        counts.setdefault((item,), 0)
    level = {itemset: c for itemset, c in counts.items() if is_frequent(c, n_transactions, min_support)}
    frequent.update(level)
    progress.update(1)
    logger.debug("Level 1: %d items, %d frequent", len(counts), len(level))

    k = 2
    while level and k <= max_len:
        candidates = apriori_gen(list(level), k)
        if not candidates:
            logger.debug("Level %d: no candidates survive pruning", k)
            break

        counts = count_support(transactions, k, candidates, n_jobs=n_jobs)
        level = {itemset: c for itemset, c in counts.items() if is_frequent(c, n_transactions, min_support)}
        frequent.update(level)
        progress.update(1)
        logger.debug("Level %d: %d candidates, %d frequent", k, len(candidates), len(level))
        k += 1

    progress.close()

    return [
        FrequentItemset(items=items, support=count / n_transactions, count=count)
        for items, count in sorted(frequent.items(), key=lambda kv: (len(kv[0]), kv[0]))
    ]
