from .cleaning import (
    ColumnPruner, prune_columns,
    StringCleaner, clean_strings,
    TypeCoercer, coerce_types
)
from .temporal import (
    TimeSlotter, add_time_slots, assign_time_slots, hour_to_time_slot,
    extract_hour, combine_date_time
)
from .pipeline import PreprocessingPipeline, run_preprocessing

__all__ = [
    'ColumnPruner', 'prune_columns',
    'StringCleaner', 'clean_strings',
    'TypeCoercer', 'coerce_types',
    'TimeSlotter', 'add_time_slots', 'assign_time_slots', 'hour_to_time_slot',
    'extract_hour', 'combine_date_time',
    'PreprocessingPipeline', 'run_preprocessing'
]
