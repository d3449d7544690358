from .config import (
    DataConfig,
    PreprocessingConfig,
    AprioriConfig,
    MLxtendConfig,
    FilterConfig,
    RuleMiningConfig,
    ExperimentConfig
)
from .base import (
    load_data,
    preprocess_data,
    build_pipeline,
    build_schema,
    run_rule_mining,
    create_miner,
    apply_filters
)

__all__ = [
    'DataConfig',
    'PreprocessingConfig',
    'AprioriConfig',
    'MLxtendConfig',
    'FilterConfig',
    'RuleMiningConfig',
    'ExperimentConfig',
    'load_data',
    'preprocess_data',
    'build_pipeline',
    'build_schema',
    'run_rule_mining',
    'create_miner',
    'apply_filters'
]
