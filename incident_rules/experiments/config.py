from dataclasses import dataclass, field, asdict
from typing import List, Dict, Any, Optional
from pathlib import Path

from incident_rules.rule_mining.schema import TIME_SLOT, PRECINCT

NYPD_SHOOTINGS_URL = "https://data.cityofnewyork.us/api/views/833y-fsy8/rows.csv?accessType=DOWNLOAD"


@dataclass
class DataConfig:
    path: str
    name: str
    date_col: str = 'OCCUR_DATE'
    time_col: str = 'OCCUR_TIME'
    precinct_col: str = PRECINCT
    lat_col: str = 'Latitude'
    lon_col: str = 'Longitude'
    date_format: Optional[str] = '%m/%d/%Y'

    @property
    def is_remote(self) -> bool:
        return str(self.path).lower().startswith(('http://', 'https://'))

    @classmethod
    def nypd_shootings(cls, path: str = NYPD_SHOOTINGS_URL) -> 'DataConfig':
        return cls(path=path, name='nypd_shootings')

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PreprocessingConfig:
    pruning: Optional[Dict[str, Any]] = None
    string_cleanup: Optional[Dict[str, Any]] = None
    type_coercion: Optional[Dict[str, Any]] = None
    time_slots: Optional[Dict[str, Any]] = None

    # pruning: {'keep': [...]} or {'drop': [...]}
    # string_cleanup: {'columns': [...] or None, 'upper': bool}
    # type_coercion: {'types': {col: 'date'|'time'|'numeric'|'boolean'|'category'|'string'},
    #                 'date_format': str}
    # time_slots: {'source_col': col, 'output_col': TIME_SLOT, 'hour_col': col or None}

    @classmethod
    def default(cls, data: DataConfig = None) -> 'PreprocessingConfig':
        """Incident report preset: keep the report columns, type them, bucket the time of day."""
        data = data or DataConfig.nypd_shootings()
        return cls(
            pruning={'keep': [
                data.date_col, data.time_col, 'BORO', data.precinct_col,
                'STATISTICAL_MURDER_FLAG', data.lat_col, data.lon_col
            ]},
            string_cleanup={'columns': None, 'upper': False},
            type_coercion={
                'types': {
                    data.date_col: 'date',
                    data.time_col: 'time',
                    data.precinct_col: 'numeric',
                    'STATISTICAL_MURDER_FLAG': 'boolean',
                    'BORO': 'category',
                    data.lat_col: 'numeric',
                    data.lon_col: 'numeric'
                },
                'date_format': data.date_format
            },
            time_slots={'source_col': data.time_col, 'output_col': TIME_SLOT, 'hour_col': 'HOUR'}
        )

    @classmethod
    def minimal(cls, data: DataConfig = None) -> 'PreprocessingConfig':
        """Only what rule mining needs: the time column typed and bucketed."""
        data = data or DataConfig.nypd_shootings()
        return cls(
            type_coercion={'types': {data.time_col: 'time'}},
            time_slots={'source_col': data.time_col, 'output_col': TIME_SLOT}
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AprioriConfig:
    min_support: float = 0.01
    min_confidence: float = 0.1
    max_len: int = 2
    metric: str = 'lift'
    n_jobs: int = 1
    attributes: List[str] = field(default_factory=lambda: [TIME_SLOT, PRECINCT])

    def to_dict(self) -> Dict[str, Any]:
        return {
            'min_support': self.min_support,
            'min_confidence': self.min_confidence,
            'max_len': self.max_len,
            'metric': self.metric,
            'n_jobs': self.n_jobs,
            'attributes': self.attributes
        }


@dataclass
class MLxtendConfig:
    algorithm: str = 'fpgrowth'
    min_support: float = 0.01
    min_confidence: float = 0.1
    max_len: int = 2
    metric: str = 'lift'
    attributes: List[str] = field(default_factory=lambda: [TIME_SLOT, PRECINCT])

    def to_dict(self) -> Dict[str, Any]:
        return {
            'algorithm': self.algorithm,
            'min_support': self.min_support,
            'min_confidence': self.min_confidence,
            'max_len': self.max_len,
            'metric': self.metric,
            'attributes': self.attributes
        }


@dataclass
class FilterConfig:
    metric: str
    threshold: float

    def to_dict(self) -> Dict[str, Any]:
        return {'metric': self.metric, 'threshold': self.threshold}


@dataclass
class RuleMiningConfig:
    miner_type: str  # 'apriori', 'mlxtend'
    miner_config: Any  # AprioriConfig or MLxtendConfig
    mode: str = 'rules'  # 'rules', 'itemsets', 'both'
    filters: List[FilterConfig] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'miner_type': self.miner_type,
            'miner_config': self.miner_config.to_dict(),
            'mode': self.mode,
            'filters': [f.to_dict() for f in self.filters]
        }


@dataclass
class ExperimentConfig:
    name: str
    data: DataConfig
    preprocessing: PreprocessingConfig
    rule_mining: Optional[RuleMiningConfig] = None
    output_dir: str = "./out"
    map_sample: Optional[int] = 5000

    def get_output_path(self) -> Path:
        path = Path(self.output_dir)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'data': self.data.to_dict(),
            'preprocessing': self.preprocessing.to_dict(),
            'rule_mining': self.rule_mining.to_dict() if self.rule_mining else None,
            'output_dir': self.output_dir,
            'map_sample': self.map_sample
        }
