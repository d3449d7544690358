import re
import pandas as pd
from typing import Dict, Any, List, Iterable

DEFAULT_PLACEHOLDERS = ('', '(NULL)', 'NULL', 'UNKNOWN', 'NONE', 'N/A', 'NA', 'NAN')

BOOLEAN_VALUES = {
    'true': True, 't': True, 'y': True, 'yes': True, '1': True,
    'false': False, 'f': False, 'n': False, 'no': False, '0': False
}

_TIME_WITHOUT_SECONDS = re.compile(r'^\d{1,2}:\d{2}$')


def _check_columns(df: pd.DataFrame, columns: Iterable[str]):
    unknown = [c for c in columns if c not in df.columns]
    if unknown:
        raise ValueError(f"Unknown columns: {unknown}")


class ColumnPruner:
    """Keep a fixed list of columns, or drop a fixed list of columns."""

    def __init__(self, keep: List[str] = None, drop: List[str] = None):
        if keep and drop:
            raise ValueError("Specify either keep or drop, not both")
        if not keep and not drop:
            raise ValueError("ColumnPruner needs columns to keep or drop")
        self.keep = list(keep) if keep else None
        self.drop = list(drop) if drop else None

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        if self.keep:
            _check_columns(df, self.keep)
            return df[self.keep].copy()
        _check_columns(df, self.drop)
        return df.drop(columns=self.drop)

    def get_config(self) -> Dict[str, Any]:
        return {'keep': self.keep, 'drop': self.drop}


class StringCleaner:
    """
    Tidy text columns: strip and collapse whitespace, turn placeholder
    tokens such as '(null)' or 'UNKNOWN' into missing values.
    """

    def __init__(
        self,
        columns: List[str] = None,
        placeholders: Iterable[str] = DEFAULT_PLACEHOLDERS,
        upper: bool = False
    ):
        self.columns = columns
        self.placeholders = tuple(p.upper() for p in placeholders)
        self.upper = upper

    def _text_columns(self, df: pd.DataFrame) -> List[str]:
        if self.columns is not None:
            _check_columns(df, self.columns)
            return list(self.columns)
        return [
            col for col in df.columns
            if pd.api.types.is_object_dtype(df[col]) or pd.api.types.is_string_dtype(df[col])
        ]

    def clean_series(self, series: pd.Series) -> pd.Series:
        cleaned = series.astype('string').str.strip().str.replace(r'\s+', ' ', regex=True)
        cleaned = cleaned.mask(cleaned.str.upper().isin(self.placeholders))
        if self.upper:
            cleaned = cleaned.str.upper()
        return cleaned

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        result = df.copy()
        for col in self._text_columns(result):
            result[col] = self.clean_series(result[col])
        return result

    def get_config(self) -> Dict[str, Any]:
        return {
            'columns': self.columns,
            'placeholders': list(self.placeholders),
            'upper': self.upper
        }


class TypeCoercer:
    """
    Retype columns. Values that cannot be converted become missing.

    Types:
        date: datetime64 (optional date_format)
        time: timedelta since midnight, from 'HH:MM' or 'HH:MM:SS'
        numeric: float or int via pd.to_numeric
        boolean: nullable boolean from true/false, y/n, yes/no, 1/0
        category: pandas categorical
        string: pandas string dtype
    """
    TYPES = ['date', 'time', 'numeric', 'boolean', 'category', 'string']

    def __init__(self, types: Dict[str, str], date_format: str = None):
        unknown = {col: t for col, t in types.items() if t not in self.TYPES}
        if unknown:
            raise ValueError(f"Unknown types {unknown}, must be one of {self.TYPES}")
        self.types = dict(types)
        self.date_format = date_format

    def _coerce(self, series: pd.Series, target: str) -> pd.Series:
        if target == 'date':
            return pd.to_datetime(series, format=self.date_format, errors='coerce')

        elif target == 'time':
            text = series.astype('string').str.strip()
            text = text.where(~text.str.match(_TIME_WITHOUT_SECONDS).fillna(False), text + ':00')
            return pd.to_timedelta(text.astype(object).where(text.notna(), None), errors='coerce')

        elif target == 'numeric':
            return pd.to_numeric(series, errors='coerce')

        elif target == 'boolean':
            if pd.api.types.is_bool_dtype(series):
                return series.astype('boolean')
            text = series.astype('string').str.strip().str.lower()
            return text.map(BOOLEAN_VALUES).astype('boolean')

        elif target == 'category':
            return series.astype('category')

        else:
            return series.astype('string')

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        _check_columns(df, self.types)
        result = df.copy()
        for col, target in self.types.items():
            result[col] = self._coerce(result[col], target)
        return result

    def get_config(self) -> Dict[str, Any]:
        return {'types': self.types, 'date_format': self.date_format}


def prune_columns(df: pd.DataFrame, keep: List[str] = None, drop: List[str] = None) -> pd.DataFrame:
    return ColumnPruner(keep=keep, drop=drop).transform(df)


def clean_strings(df: pd.DataFrame, columns: List[str] = None, **kwargs) -> pd.DataFrame:
    return StringCleaner(columns=columns, **kwargs).transform(df)


def coerce_types(df: pd.DataFrame, types: Dict[str, str], date_format: str = None) -> pd.DataFrame:
    return TypeCoercer(types, date_format=date_format).transform(df)
