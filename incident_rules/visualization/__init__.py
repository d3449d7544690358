from .charts import (
    category_shares,
    proportion_chart,
    valid_coordinates,
    point_map,
    cramers_v,
    save_figure
)

__all__ = [
    'category_shares',
    'proportion_chart',
    'valid_coordinates',
    'point_map',
    'cramers_v',
    'save_figure'
]
