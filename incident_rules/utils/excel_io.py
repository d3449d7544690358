import pandas as pd
from pathlib import Path
from datetime import datetime
from typing import Dict, List, Any, Union, BinaryIO


def _xlsx_path(output_path: Union[str, Path, BinaryIO]):
    # file-like targets (e.g. BytesIO for downloads) are written as-is
    if not isinstance(output_path, (str, Path)):
        return output_path
    output_path = Path(output_path)
    if output_path.suffix != '.xlsx':
        output_path = output_path.with_suffix('.xlsx')
    output_path.parent.mkdir(parents=True, exist_ok=True)
    return output_path


def _key_value_frame(data: Dict[str, Any], key_name: str = 'Key') -> pd.DataFrame:
    return pd.DataFrame({
        key_name: list(data.keys()),
        'Value': [str(v) for v in data.values()]
    })


def save_rule_mining_results(
    rules: List[Dict[str, Any]],
    stats: Dict[str, Any],
    output_path: Union[str, Path],
    parameters: Dict[str, Any] = None,
    metadata: Dict[str, Any] = None,
    itemsets: List[Dict[str, Any]] = None
):
    """
    Save rule mining results to Excel with multiple sheets.

    Sheets:
        - Rules: All mined rules with metrics, in ranked order
        - Itemsets: Frequent itemsets (if given)
        - Summary: Aggregate statistics
        - Parameters: Algorithm parameters used

    Args:
        rules: List of rule dictionaries
        stats: Statistics dictionary from mining
        output_path: Output file path (will add .xlsx if needed)
        parameters: Algorithm parameters used
        metadata: Additional metadata (dataset name, timestamp, etc.)
        itemsets: Optional list of frequent itemset dictionaries
    """
    output_path = _xlsx_path(output_path)

    with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
        # Sheet 1: Rules
        rules_df = pd.DataFrame([format_rule_for_excel(rule) for rule in rules])
        if rules_df.empty:
            rules_df = pd.DataFrame(columns=['antecedent', 'consequent', 'support', 'confidence', 'lift', 'count'])
        rules_df.insert(0, 'rank', range(1, len(rules_df) + 1))
        rules_df.to_excel(writer, sheet_name='Rules', index=False)

        # Sheet 2: Itemsets
        if itemsets:
            itemsets_df = pd.DataFrame([
                {**itemset, 'items': _format_itemset(itemset['items']), 'size': len(itemset['items'])}
                for itemset in itemsets
            ])
            itemsets_df.to_excel(writer, sheet_name='Itemsets', index=False)

        # Sheet 3: Summary
        summary = dict(stats)
        if metadata:
            summary.update(metadata)
        summary_df = pd.DataFrame({'Metric': list(summary.keys()), 'Value': list(summary.values())})
        summary_df.to_excel(writer, sheet_name='Summary', index=False)

        # Sheet 4: Parameters
        if parameters:
            _key_value_frame(parameters, 'Parameter').to_excel(writer, sheet_name='Parameters', index=False)

    print(f"Results saved to: {output_path}")
    return output_path


def save_experiment_results(
    output_path: Union[str, Path],
    sheets: Dict[str, Union[pd.DataFrame, List[Dict], Dict[str, Any]]]
):
    """
    Generic function to save experiment results with custom sheets.

    Args:
        output_path: Output file path
        sheets: Dictionary mapping sheet names to data.
                Data can be:
                - pd.DataFrame: Written directly
                - List[Dict]: Converted to DataFrame
                - Dict[str, Any]: Converted to key-value DataFrame
                Anything else (including empty lists) is skipped.
    """
    output_path = _xlsx_path(output_path)

    written = 0
    with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
        for sheet_name, data in sheets.items():
            if isinstance(data, pd.DataFrame):
                df = data
            elif isinstance(data, list) and data and isinstance(data[0], dict):
                df = pd.DataFrame(data)
            elif isinstance(data, dict):
                df = _key_value_frame(data)
            else:
                continue

            # Excel limit is 31 chars
            df.to_excel(writer, sheet_name=sheet_name[:31], index=False)
            written += 1

        # openpyxl refuses to save a workbook without sheets
        if written == 0:
            pd.DataFrame().to_excel(writer, sheet_name='Empty', index=False)

    print(f"Results saved to: {output_path}")
    return output_path


def format_rule_for_excel(rule: Dict[str, Any]) -> Dict[str, Any]:
    """
    Format a rule dictionary for Excel output with human-readable antecedent/consequent.

    Converts antecedent/consequent from the record format to parseable strings:
    - Format: "feature1=value1 AND feature2=value2"
    - Parseable by splitting on " AND " then "="
    """
    formatted = rule.copy()

    for key in ['antecedent', 'consequent']:
        if key in formatted:
            formatted[key] = _format_itemset(formatted[key])

    return formatted


def _format_itemset(val: Any) -> str:
    """Convert itemset to 'feature=value AND ...' string format."""
    if isinstance(val, str):
        return val
    if isinstance(val, dict):
        if 'feature' in val and 'value' in val:
            return f"{val['feature']}={val['value']}"
        return ' AND '.join(f"{k}={v}" for k, v in val.items())
    if isinstance(val, (list, tuple, set, frozenset)):
        parts = []
        for item in val:
            if isinstance(item, dict):
                parts.append(_format_itemset(item))
            elif isinstance(item, (list, tuple)) and len(item) == 2:
                parts.append(f"{item[0]}={item[1]}")
            else:
                parts.append(str(item))
        if isinstance(val, (set, frozenset)):
            parts.sort()
        return ' AND '.join(parts)
    return str(val)


def save_rules_text(
    rules: List[Dict[str, Any]],
    output_path: Union[str, Path],
    title: str = "MINED RULES",
    group_by: str = None,
    metadata: Dict[str, Any] = None
) -> Path:
    """
    Save rules in human-readable text format.

    Args:
        rules: List of rule dictionaries with 'antecedent', 'consequent',
               'support', 'confidence', 'lift' and 'count' keys
        output_path: Output file path (will add .txt if needed)
        title: Title for the output file header
        group_by: Optional key to group rules by (e.g., 'consequent')
        metadata: Optional metadata to include in header
    """
    output_path = Path(output_path)
    if output_path.suffix != '.txt':
        output_path = output_path.with_suffix('.txt')
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w') as f:
        f.write("=" * 80 + "\n")
        f.write(f"{title}\n")
        f.write(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")
        if metadata:
            for key, val in metadata.items():
                f.write(f"{key}: {val}\n")
        f.write("=" * 80 + "\n\n")

        if not rules:
            f.write("No rules found.\n")
            print(f"Rules saved to: {output_path}")
            return output_path

        if group_by and group_by in rules[0]:
            groups = {}
            for rule in rules:
                key = _format_itemset(rule.get(group_by, 'unknown'))
                groups.setdefault(key, []).append(rule)

            rule_num = 1
            for group_key, group_rules in groups.items():
                f.write("-" * 80 + "\n")
                f.write(f"{group_by.upper()}: {group_key}\n")
                f.write(f"Rules in group: {len(group_rules)}\n")
                f.write("-" * 80 + "\n\n")

                for rule in group_rules:
                    rule_num = _write_rule(f, rule, rule_num)
                f.write("\n")
        else:
            for i, rule in enumerate(rules, 1):
                _write_rule(f, rule, i)

        f.write("=" * 80 + "\n")
        f.write(f"Total rules: {len(rules)}\n")
        f.write("=" * 80 + "\n")

    print(f"Rules saved to: {output_path}")
    return output_path


def _format_metric(value, decimals=4):
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return f"{value:.{decimals}f}"
    return str(value) if value is not None else "N/A"


RULE_METRICS = [
    ('support', 'Support'),
    ('confidence', 'Confidence'),
    ('lift', 'Lift'),
    ('count', 'Count'),
]


def _write_rule(f, rule: Dict[str, Any], rule_num: int) -> int:
    antecedent = _format_itemset(rule.get('antecedent', 'N/A'))
    consequent = _format_itemset(rule.get('consequent', 'N/A'))

    f.write(f"Rule #{rule_num}:\n")
    f.write(f"  IF {antecedent}\n")
    f.write(f"  THEN {consequent}\n\n")
    f.write("  Metrics:\n")

    for key, label in RULE_METRICS:
        if key in rule:
            f.write(f"    {label:18s} {_format_metric(rule[key])}\n")

    f.write("\n")
    return rule_num + 1
