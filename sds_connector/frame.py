"""Columnar result frames built from SDS data records."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, TYPE_CHECKING

import pandas as pd

from .type_codes import empty_column, rule_for

if TYPE_CHECKING:
    from .models import SdsType

logger = logging.getLogger(__name__)


@dataclass
class Column:
    """A named, homogeneously typed column of decoded values."""
    name: str
    dtype: str
    nullable: bool = True
    values: list[Any] = field(default_factory=list)

    def append(self, value: Any) -> None:
        if value is None and not self.nullable:
            raise ValueError(f"Column {self.name!r} is not nullable")
        self.values.append(value)

    def __len__(self) -> int:
        return len(self.values)

    def to_series(self) -> pd.Series:
        """Materialize as a pandas Series of the column's dtype."""
        return pd.Series(self.values, dtype=self.dtype, name=self.name)


@dataclass
class Frame:
    """
    A named set of equal-length columns.

    Column order is the order of the properties (or fields) it was built from.
    """
    name: str
    fields: list[Column] = field(default_factory=list)

    @property
    def column_names(self) -> list[str]:
        return [f.name for f in self.fields]

    @property
    def row_count(self) -> int:
        return len(self.fields[0]) if self.fields else 0

    def column(self, name: str) -> Column:
        """Get a column by name."""
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(name)

    def append_row(self, *values: Any) -> None:
        if len(values) != len(self.fields):
            raise ValueError(
                f"Row has {len(values)} values, frame {self.name!r} has {len(self.fields)} columns"
            )
        for column, value in zip(self.fields, values):
            column.append(value)

    def to_dataframe(self) -> pd.DataFrame:
        """
        Materialize as a pandas DataFrame.

        The frame name is kept in ``DataFrame.attrs["name"]``.
        """
        df = pd.DataFrame({f.name: f.to_series() for f in self.fields})
        df.attrs["name"] = self.name
        return df


def build_frame(
    name: str,
    sds_type: SdsType,
    records: Iterable[dict[str, Any]],
    strict: bool = False,
) -> Frame:
    """
    Build a frame with one column per type property and one row per record.

    Args:
        name: Frame name (usually the stream name)
        sds_type: Type definition; its property order is the column order
        records: Data records keyed by property id
        strict: Raise on malformed booleans/timestamps instead of defaulting

    Returns:
        Frame with len(sds_type.properties) columns

    Raises:
        DecodeError: A cell could not be decoded; no partial frame is returned
    """
    frame = Frame(name=name)
    rules = []
    for prop in sds_type.properties:
        frame.fields.append(empty_column(prop.type_code, name=prop.id))
        rules.append(rule_for(prop.type_code))

    count = 0
    for record in records:
        frame.append_row(*(
            rule.decode(record.get(prop.id), strict)
            for prop, rule in zip(sds_type.properties, rules)
        ))
        count += 1

    logger.debug(f"Built frame {name!r}: {len(frame.fields)} columns, {count} rows")
    return frame
