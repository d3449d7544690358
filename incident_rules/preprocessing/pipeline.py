import pandas as pd
import json
import logging
from pathlib import Path
from typing import Dict, Any, List, Iterable
from datetime import datetime

from .cleaning import ColumnPruner, StringCleaner, TypeCoercer, DEFAULT_PLACEHOLDERS
from .temporal import TimeSlotter
from incident_rules.rule_mining.schema import TIME_SLOT

logger = logging.getLogger(__name__)


class PreprocessingPipeline:
    def __init__(self, name: str = None):
        self.name = name or f"pipeline_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
        self._steps = []
        self._configs = {}
        self._fitted = False

    def add_pruning(
        self,
        keep: List[str] = None,
        drop: List[str] = None
    ) -> 'PreprocessingPipeline':
        pruner = ColumnPruner(keep=keep, drop=drop)
        self._steps.append(('pruning', pruner))
        self._configs['pruning'] = pruner.get_config()
        return self

    def add_string_cleanup(
        self,
        columns: List[str] = None,
        placeholders: Iterable[str] = DEFAULT_PLACEHOLDERS,
        upper: bool = False
    ) -> 'PreprocessingPipeline':
        cleaner = StringCleaner(columns=columns, placeholders=placeholders, upper=upper)
        self._steps.append(('string_cleanup', cleaner))
        self._configs['string_cleanup'] = cleaner.get_config()
        return self

    def add_type_coercion(
        self,
        types: Dict[str, str],
        date_format: str = None
    ) -> 'PreprocessingPipeline':
        coercer = TypeCoercer(types, date_format=date_format)
        self._steps.append(('type_coercion', coercer))
        self._configs['type_coercion'] = coercer.get_config()
        return self

    def add_time_slots(
        self,
        source_col: str,
        output_col: str = TIME_SLOT,
        hour_col: str = None
    ) -> 'PreprocessingPipeline':
        """
        Add time-slot derivation.

        Args:
            source_col: Column with datetimes, times since midnight or hours
            output_col: Name of the categorical slot column to add
            hour_col: If given, also keep the extracted hour under this name
        """
        slotter = TimeSlotter(source_col, output_col=output_col, hour_col=hour_col)
        self._steps.append(('time_slots', slotter))
        self._configs['time_slots'] = slotter.get_config()
        return self

    def fit_transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Run the data through all pipeline steps in the order they were added.

        The input frame is never modified.
        """
        result = df.copy()

        for step_name, transformer in self._steps:
            result = transformer.transform(result)
            logger.info("%s: %d rows x %d cols", step_name, result.shape[0], result.shape[1])

        self._fitted = True
        return result

    def get_config(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'steps': [step[0] for step in self._steps],
            'configs': self._configs
        }

    def save_config(self, path: str):
        with open(path, 'w') as f:
            json.dump(self.get_config(), f, indent=2)

    def get_output_filename(self, base_name: str = 'data') -> str:
        parts = [base_name]

        if 'pruning' in self._configs:
            prune_cfg = self._configs['pruning']
            if prune_cfg['keep']:
                parts.append(f"keep{len(prune_cfg['keep'])}")
            else:
                parts.append(f"drop{len(prune_cfg['drop'])}")

        if 'string_cleanup' in self._configs:
            parts.append('clean')

        if 'type_coercion' in self._configs:
            parts.append(f"typed{len(self._configs['type_coercion']['types'])}")

        if 'time_slots' in self._configs:
            parts.append(f"slots_{self._configs['time_slots']['source_col']}")

        return '_'.join(parts)


def run_preprocessing(
    df: pd.DataFrame,
    output_dir: str,
    dataset_name: str,
    pruning: Dict[str, Any] = None,
    string_cleanup: Dict[str, Any] = None,
    type_coercion: Dict[str, Any] = None,
    time_slots: Dict[str, Any] = None
) -> pd.DataFrame:
    """
    Run preprocessing pipeline and save the result plus its config.

    Returns:
        The preprocessed DataFrame
    """
    pipeline = PreprocessingPipeline()

    if pruning:
        pipeline.add_pruning(**pruning)

    if string_cleanup:
        pipeline.add_string_cleanup(**string_cleanup)

    if type_coercion:
        pipeline.add_type_coercion(**type_coercion)

    if time_slots:
        pipeline.add_time_slots(**time_slots)

    result = pipeline.fit_transform(df)

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    filename = pipeline.get_output_filename(dataset_name)
    result.to_csv(output_path / f"{filename}.csv", index=False)
    pipeline.save_config(output_path / f"{filename}_config.json")

    return result
