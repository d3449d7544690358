"""
Incident Report: NYPD Shooting Incidents

Loads the historic shooting incident data, buckets each incident into a
time-of-day slot, draws the slot shares and an incident map, and mines
association rules between TIME_SLOT and PRECINCT ranked by lift.

Run with: python -m incident_rules.experiments.run_rule_mining
"""
import logging
from datetime import datetime

from incident_rules.experiments.base import (
    load_data, preprocess_data, run_rule_mining, generate_output_filename
)
from incident_rules.experiments.config import (
    DataConfig, PreprocessingConfig, AprioriConfig, RuleMiningConfig, ExperimentConfig,
    NYPD_SHOOTINGS_URL
)
from incident_rules.postprocessing.rule import filter_rules, filter_rules_by_consequent
from incident_rules.rule_mining.schema import TIME_SLOT
from incident_rules.utils import setup_logging
from incident_rules.utils.excel_io import save_rule_mining_results, save_rules_text, format_rule_for_excel
from incident_rules.visualization.charts import proportion_chart, point_map, save_figure

setup_logging(logging.INFO)

# =============================================================================
# CONFIGURATION
# =============================================================================

DATA_PATH = NYPD_SHOOTINGS_URL  # or a local copy, e.g. "../../data/raw/NYPD_Shooting_Incident_Data__Historic_.csv"
OUTPUT_DIR = "../../out/incident_report"

# Apriori config
APRIORI_CONFIG = AprioriConfig(
    min_support=0.005,
    min_confidence=0.1,
    max_len=2,
    metric='lift',
    n_jobs=1
)

# Filter thresholds
MIN_LIFT = 1.0

TOP_N = 10

DATA_CONFIG = DataConfig.nypd_shootings(DATA_PATH)

EXPERIMENT = ExperimentConfig(
    name='report',
    data=DATA_CONFIG,
    preprocessing=PreprocessingConfig.default(DATA_CONFIG),
    rule_mining=RuleMiningConfig(miner_type='apriori', miner_config=APRIORI_CONFIG, mode='both'),
    output_dir=OUTPUT_DIR,
    map_sample=5000  # keeps the map HTML light
)


# =============================================================================
# EXPERIMENT
# =============================================================================

def run_experiment(config: ExperimentConfig = EXPERIMENT):
    print("=" * 70)
    print("INCIDENT REPORT: TIME SLOT x PRECINCT")
    print("=" * 70)

    data_config = config.data
    mining_config = config.rule_mining
    output_path = config.get_output_path()

    # Load data
    print("\n[1] Loading data...")
    df = load_data(data_config)
    print(f"  Shape: {df.shape}")

    # Preprocess
    print("\n[2] Preprocessing...")
    processed_df = preprocess_data(df, config.preprocessing)
    print(f"  Processed shape: {processed_df.shape}")
    missing_slots = int(processed_df[TIME_SLOT].isna().sum())
    print(f"  Incidents without a time slot: {missing_slots}")

    # Charts
    print("\n[3] Charts...")
    base_name = generate_output_filename(
        config.name, mining_config.miner_type, mining_config.mode, data_config.name
    )
    save_figure(proportion_chart(processed_df, TIME_SLOT), output_path / f"{base_name}_time_slots")
    save_figure(
        point_map(processed_df, data_config.lat_col, data_config.lon_col, color=TIME_SLOT,
                  sample=config.map_sample),
        output_path / f"{base_name}_map"
    )

    # Mine rules
    print("\n[4] Mining rules...")
    results, stats = run_rule_mining(processed_df, mining_config)
    itemsets = results['itemsets']
    rules = results['rules']
    print(f"  Frequent itemsets: {len(itemsets)}")
    print(f"  Rules: {len(rules)}")

    strong_rules = filter_rules(rules, 'lift', MIN_LIFT)
    print(f"  After lift >= {MIN_LIFT}: {len(strong_rules)} rules")

    night_rules = filter_rules_by_consequent(strong_rules, [f"{TIME_SLOT}=Night"])
    print(f"  Precincts pointing to Night: {len(night_rules)} rules")

    metric = mining_config.miner_config.metric
    print(f"\n  Top {TOP_N} rules by {metric}:")
    for i, rule in enumerate(rules[:TOP_N], 1):
        formatted = format_rule_for_excel(rule)
        print(f"    {i:2d}. {formatted['antecedent']} -> {formatted['consequent']}  "
              f"(supp={rule['support']:.4f}, conf={rule['confidence']:.3f}, lift={rule['lift']:.3f})")

    # Save results
    print(f"\n{'=' * 70}")
    print("SAVING RESULTS")
    print("=" * 70)

    params = {
        'data_path': data_config.path,
        **mining_config.miner_config.to_dict(),
        'min_lift_filter': MIN_LIFT,
        'map_sample': config.map_sample,
        'timestamp': datetime.now().isoformat()
    }
    metadata = {
        'dataset': data_config.name,
        'num_rows': len(df),
        'rows_without_time_slot': missing_slots
    }

    save_rule_mining_results(
        rules=rules,
        stats=stats['rules'],
        output_path=output_path / base_name,
        parameters=params,
        metadata=metadata,
        itemsets=itemsets
    )
    save_rules_text(
        strong_rules,
        output_path / base_name,
        title=f"{TIME_SLOT} x PRECINCT RULES (lift >= {MIN_LIFT})",
        group_by='consequent',
        metadata=metadata
    )

    print(f"\n{'=' * 70}")
    print("EXPERIMENT COMPLETE")
    print("=" * 70)
    print(f"Output: {output_path / base_name}.xlsx")
    print("=" * 70)


if __name__ == '__main__':
    run_experiment()
