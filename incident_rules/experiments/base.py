import logging
import pandas as pd
from datetime import datetime
from pathlib import Path
from typing import List, Dict, Any, Tuple

from incident_rules.preprocessing.pipeline import PreprocessingPipeline
from incident_rules.rule_mining.apriori_miner import AprioriMiner
from incident_rules.rule_mining.mlxtend_miner import MLxtendMiner
from incident_rules.rule_mining.schema import AttributeSchema, TIME_SLOT, TIME_SLOT_DOMAIN
from incident_rules.postprocessing.rule import filter_rules, filter_itemsets

from .config import DataConfig, PreprocessingConfig, RuleMiningConfig, FilterConfig

logger = logging.getLogger(__name__)

ITEMSET_METRICS = ('support', 'count')


def load_data(config: DataConfig) -> pd.DataFrame:
    """Read a CSV/Excel/Parquet file, or a CSV served over http(s)."""
    if config.is_remote:
        logger.info("Downloading %s", config.path)
        return pd.read_csv(config.path)

    path = Path(config.path)
    if path.suffix == '.csv':
        return pd.read_csv(path)
    elif path.suffix in ['.xlsx', '.xls']:
        return pd.read_excel(path)
    elif path.suffix == '.parquet':
        return pd.read_parquet(path)
    else:
        raise ValueError(f"Unsupported file format: {path.suffix}")


def build_pipeline(config: PreprocessingConfig, name: str = None) -> PreprocessingPipeline:
    pipeline = PreprocessingPipeline(name)

    if config.pruning:
        pipeline.add_pruning(**config.pruning)

    if config.string_cleanup:
        pipeline.add_string_cleanup(**config.string_cleanup)

    if config.type_coercion:
        pipeline.add_type_coercion(**config.type_coercion)

    if config.time_slots:
        pipeline.add_time_slots(**config.time_slots)

    return pipeline


def preprocess_data(df: pd.DataFrame, config: PreprocessingConfig) -> pd.DataFrame:
    return build_pipeline(config).fit_transform(df)


def build_schema(df: pd.DataFrame, attributes: List[str]) -> AttributeSchema:
    """
    Schema for the mined attributes: TIME_SLOT keeps its fixed four labels,
    every other attribute takes the values observed in df.
    """
    others = [a for a in attributes if a != TIME_SLOT]
    observed = AttributeSchema.from_frame(df, others) if others else None
    domains = {}
    for attribute in attributes:
        if attribute == TIME_SLOT:
            domains[attribute] = TIME_SLOT_DOMAIN
        else:
            domains[attribute] = observed.domain(attribute)
    return AttributeSchema(domains)


def create_miner(config: RuleMiningConfig, schema: AttributeSchema = None):
    miner_type = config.miner_type.lower()
    cfg = config.miner_config

    if miner_type == 'apriori':
        return AprioriMiner(
            min_support=cfg.min_support,
            min_confidence=cfg.min_confidence,
            max_len=cfg.max_len,
            metric=cfg.metric,
            schema=schema,
            n_jobs=cfg.n_jobs
        )

    elif miner_type == 'mlxtend':
        return MLxtendMiner(
            algorithm=cfg.algorithm,
            min_support=cfg.min_support,
            min_confidence=cfg.min_confidence,
            max_len=cfg.max_len,
            metric=cfg.metric,
            schema=schema
        )

    else:
        raise ValueError(f"Unknown miner type: {miner_type}")


def apply_filters(
    data: List[Dict],
    filters: List[FilterConfig],
    mode: str = 'rules'
) -> List[Dict]:
    if not filters:
        return data

    result = data
    for f in filters:
        if mode == 'rules':
            result = filter_rules(result, criterion=f.metric, threshold=f.threshold)
        elif f.metric in ITEMSET_METRICS:
            result, _ = filter_itemsets(result, criterion=f.metric, threshold=f.threshold)
        else:
            # confidence and lift only exist for rules
            logger.debug("Skipping %s filter for itemsets", f.metric)

    return result


def run_rule_mining(
    data: pd.DataFrame,
    config: RuleMiningConfig
) -> Tuple[Dict[str, List[Dict]], Dict[str, Any]]:
    """
    Mine itemsets and/or rules over the configured attributes.

    Returns:
        Tuple of (results, stats), each keyed by 'itemsets' and/or 'rules'
    """
    attributes = config.miner_config.attributes
    schema = build_schema(data, attributes)
    miner = create_miner(config, schema)
    mode = config.mode
    logger.info("Mining %s with %r", mode, miner)

    results = {}
    stats = {}

    if mode in ['itemsets', 'both']:
        itemsets, itemset_stats = miner.mine_itemsets(data[attributes])
        itemsets = apply_filters(itemsets, config.filters, mode='itemsets')
        results['itemsets'] = itemsets
        stats['itemsets'] = itemset_stats
        stats['itemsets']['count'] = len(itemsets)

    if mode in ['rules', 'both']:
        rules, rule_stats = miner.mine_rules(data[attributes])
        rules = apply_filters(rules, config.filters, mode='rules')
        results['rules'] = rules
        stats['rules'] = rule_stats
        stats['rules']['count'] = len(rules)

    return results, stats


def generate_output_filename(
    experiment_name: str,
    miner_type: str,
    mode: str,
    dataset_name: str
) -> str:
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    return f"{timestamp}_{experiment_name}_{miner_type}_{mode}_{dataset_name}"
