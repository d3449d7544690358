import logging
from pathlib import Path
from typing import Union

import numpy as np
import pandas as pd
import plotly.express as px
from scipy import stats

logger = logging.getLogger(__name__)

# Rows with missing coordinates are dropped, and so is the (0, 0) placeholder
# some exports use for unknown locations.
NULL_ISLAND = (0.0, 0.0)


def category_shares(df: pd.DataFrame, column: str) -> pd.DataFrame:
    """
    Share of each category of a column, in percent of the non-missing rows.

    Returns:
        DataFrame with columns [column, 'count', 'percent'], largest first
        (ties in original category order).
    """
    if column not in df.columns:
        raise ValueError(f"Unknown columns: ['{column}']")

    counts = df[column].dropna().astype(str).value_counts(sort=False)
    total = counts.sum()
    shares = pd.DataFrame({
        column: counts.index,
        'count': counts.values,
        'percent': (counts.values / total * 100) if total else np.zeros(len(counts))
    })
    return shares.sort_values('count', ascending=False, kind='stable').reset_index(drop=True)


def proportion_chart(df: pd.DataFrame, column: str, title: str = None):
    """Bar chart of the percentage share of each category."""
    shares = category_shares(df, column)
    fig = px.bar(
        shares,
        x=column,
        y='percent',
        text='percent',
        title=title or f"Share of incidents by {column}",
        labels={'percent': '% of incidents'},
        hover_data=['count']
    )
    fig.update_traces(texttemplate='%{text:.1f}%', textposition='outside')
    fig.update_layout(showlegend=False)
    return fig


def valid_coordinates(df: pd.DataFrame, lat_col: str, lon_col: str) -> pd.DataFrame:
    """Rows with numeric, non-missing, non-(0, 0) coordinates."""
    missing = [c for c in (lat_col, lon_col) if c not in df.columns]
    if missing:
        raise ValueError(f"Unknown columns: {missing}")

    result = df.copy()
    result[lat_col] = pd.to_numeric(result[lat_col], errors='coerce')
    result[lon_col] = pd.to_numeric(result[lon_col], errors='coerce')
    result = result.dropna(subset=[lat_col, lon_col])
    at_origin = (result[lat_col] == NULL_ISLAND[0]) & (result[lon_col] == NULL_ISLAND[1])
    return result[~at_origin]


def point_map(
    df: pd.DataFrame,
    lat_col: str,
    lon_col: str,
    color: str = None,
    sample: int = None,
    random_state: int = 42,
    title: str = "Incident locations",
    zoom: int = 9
):
    """
    Scatter map of incident locations.

    Args:
        df: Incident data
        lat_col: Latitude column
        lon_col: Longitude column
        color: Optional column to colour points by (e.g. TIME_SLOT)
        sample: If given and smaller than the data, plot a fixed-seed sample of this many rows
        random_state: Seed for sampling
        title: Figure title
        zoom: Initial map zoom

    Returns:
        plotly Figure
    """
    points = valid_coordinates(df, lat_col, lon_col)
    dropped = len(df) - len(points)
    if dropped:
        logger.info("point_map: dropped %d rows without usable coordinates", dropped)

    if sample is not None and len(points) > sample:
        points = points.sample(n=sample, random_state=random_state)

    if color is not None:
        points = points.assign(**{color: points[color].astype('string').fillna('Missing')})

    fig = px.scatter_map(
        points,
        lat=lat_col,
        lon=lon_col,
        color=color,
        zoom=zoom,
        opacity=0.6,
        title=title,
        map_style='carto-positron'
    )
    fig.update_layout(margin={'r': 0, 't': 40, 'l': 0, 'b': 0})
    return fig


def cramers_v(x, y) -> float:
    """Cramér's V statistic for categorical-categorical association."""
    confusion_matrix = pd.crosstab(x, y)
    n = confusion_matrix.sum().sum()
    min_dim = min(confusion_matrix.shape) - 1
    if min_dim <= 0 or n == 0:
        return 0.0
    chi2 = stats.chi2_contingency(confusion_matrix, correction=False)[0]
    return float(np.sqrt(chi2 / (n * min_dim)))


def save_figure(fig, output_path: Union[str, Path]) -> Path:
    """Write a figure as a standalone HTML file."""
    output_path = Path(output_path)
    if output_path.suffix != '.html':
        output_path = output_path.with_suffix('.html')
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.write_html(str(output_path), include_plotlyjs='cdn')
    print(f"Figure saved to: {output_path}")
    return output_path
