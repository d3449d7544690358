"""
Turn tabular rows into transactions of (attribute, value) items.
"""
import logging
from typing import Any, List, Mapping, Sequence

import pandas as pd

from incident_rules.rule_mining.base import MiningInput
from incident_rules.rule_mining.models import Item, Transaction
from incident_rules.rule_mining.schema import AttributeSchema, SchemaError

logger = logging.getLogger(__name__)


class TransactionEncoder:
    """
    Encode rows into immutable transactions, one per row, in input order.

    Only the schema's attributes are read from each row; other columns are
    ignored. A missing value omits the item instead of adding a placeholder.
    Without a schema, every column of the input becomes an open attribute.
    """

    def __init__(self, schema: AttributeSchema = None):
        self.schema = schema

    def _resolve_schema(self, data: MiningInput) -> AttributeSchema:
        if self.schema is not None:
            if isinstance(data, pd.DataFrame):
                absent = [a for a in self.schema.attributes if a not in data.columns]
                if absent:
                    raise SchemaError(f"Schema attributes not in data: {absent}")
            return self.schema

        if isinstance(data, pd.DataFrame):
            columns = data.columns.tolist()
        else:
            columns = []
            for row in data:
                for key in row:
                    if key not in columns:
                        columns.append(key)
        if not columns:
            raise SchemaError("Cannot infer attributes from data without columns")
        return AttributeSchema({col: None for col in columns})

    def encode_row(self, row: Mapping[str, Any], schema: AttributeSchema = None) -> Transaction:
        schema = schema or self.schema
        if schema is None:
            schema = AttributeSchema({col: None for col in row})

        items = set()
        for attribute in schema.attributes:
            value = schema.validate(attribute, row.get(attribute))
            if value is not None:
                items.add(Item(attribute, value))
        return frozenset(items)

    def encode(self, data: MiningInput) -> List[Transaction]:
        """
        Encode every row of data.

        Args:
            data: DataFrame or sequence of row mappings

        Returns:
            List of transactions in row order
        """
        if len(data) == 0:
            return []

        schema = self._resolve_schema(data)

        if isinstance(data, pd.DataFrame):
            rows: Sequence[Mapping[str, Any]] = data[schema.attributes].to_dict('records')
        else:
            rows = data

        transactions = [self.encode_row(row, schema) for row in rows]
        empty = sum(1 for t in transactions if not t)
        logger.debug("Encoded %d transactions over %s (%d empty)",
                     len(transactions), schema.attributes, empty)
        return transactions


def encode_transactions(data: MiningInput, schema: AttributeSchema = None) -> List[Transaction]:
    return TransactionEncoder(schema).encode(data)
