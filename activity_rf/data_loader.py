import csv
from collections import Counter
from pathlib import Path
from typing import Tuple, List, Dict, Any, Union

import pandas as pd
import polars as pl
from pandas.api import types as ptypes

from .exceptions import DataValidationError


ROW_ID_NAME = 'row_id'


class DataLoader:
    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.null_values: List[str] = list(config['data']['null_values'])
        self.verbose = config['output'].get('verbose', True)

    def read_table(self, path: Union[str, Path]) -> pd.DataFrame:
        """
        Read a CSV table and index it by its first column.

        Args:
            path: CSV file with a header row; the first column holds row identifiers

        Returns:
            DataFrame indexed by the row identifier, missing sentinels mapped to NaN
        """
        path = Path(path)
        if not path.exists():
            raise DataValidationError(f"Input table not found: {path}")

        check_layout(path)

        try:
            table = pl.read_csv(path, null_values=self.null_values, infer_schema_length=None)
        except pl.exceptions.NoDataError as exc:
            raise DataValidationError(f"Input table is empty: {path}") from exc
        except pl.exceptions.ComputeError as exc:
            raise DataValidationError(f"Input table is malformed: {path}: {exc}") from exc

        df = table.to_pandas()
        return self.index_by_row_id(df, source=str(path))

    def index_by_row_id(self, df: pd.DataFrame, source: str = "dataset") -> pd.DataFrame:
        """Move the first column into the index and check the table is usable."""
        if df.shape[1] < 2:
            raise DataValidationError(
                f"{source}: expected a row identifier column plus data columns, got {df.shape[1]} column(s)"
            )
        if len(df) == 0:
            raise DataValidationError(f"{source}: table has a header but no rows")

        id_col = df.columns[0]
        if id_col is None or str(id_col).strip() == '' or str(id_col).startswith('Unnamed'):
            df = df.rename(columns={id_col: ROW_ID_NAME})
            id_col = ROW_ID_NAME

        if df[id_col].isna().any():
            raise DataValidationError(f"{source}: row identifier column '{id_col}' has missing values")
        if df[id_col].duplicated().any():
            n_dup = int(df[id_col].duplicated().sum())
            raise DataValidationError(f"{source}: {n_dup} duplicate row identifier(s) in '{id_col}'")

        return df.set_index(id_col)

    def load_data(self) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """Load training and evaluation tables."""
        if self.verbose:
            print("Loading training data...")
        train_df = self.read_table(self.config['data']['train_path'])

        if self.verbose:
            print("Loading evaluation data...")
        eval_df = self.read_table(self.config['data']['eval_path'])

        validate_label(train_df, self.config['data']['label_column'])

        if self.verbose:
            print(f"✓ Train shape: {train_df.shape}")
            print(f"✓ Eval shape: {eval_df.shape}")

        return train_df, eval_df


def check_layout(path: Path) -> None:
    """
    Reject a CSV whose header repeats a column name or whose rows do not have
    exactly one cell per header column.

    polars renames duplicate headers and pads short rows with nulls.
    """
    try:
        with open(path, 'r', encoding='utf-8', newline='') as f:
            reader = csv.reader(f)
            header = next(reader, None)
            if not header:
                raise DataValidationError(f"Input table is empty: {path}")

            duplicates = sorted(name for name, count in Counter(header).items() if count > 1)
            if duplicates:
                raise DataValidationError(
                    f"Input table is malformed: {path}: duplicate header name(s) {', '.join(duplicates)}"
                )

            for row in reader:
                if row and len(row) != len(header):
                    raise DataValidationError(
                        f"Input table is malformed: {path}: line {reader.line_num} has "
                        f"{len(row)} cell(s), header has {len(header)}"
                    )
    except UnicodeDecodeError as exc:
        raise DataValidationError(f"Input table is not valid UTF-8: {path}") from exc
    except csv.Error as exc:
        raise DataValidationError(f"Input table is malformed: {path}: {exc}") from exc


def is_categorical(series: pd.Series) -> bool:
    """Text, categorical, boolean and integer columns count as categorical."""
    if ptypes.is_float_dtype(series) or ptypes.is_datetime64_any_dtype(series):
        return False
    return (
        ptypes.is_object_dtype(series)
        or ptypes.is_string_dtype(series)
        or isinstance(series.dtype, pd.CategoricalDtype)
        or ptypes.is_bool_dtype(series)
        or ptypes.is_integer_dtype(series)
    )


def validate_label(df: pd.DataFrame, label_column: str) -> None:
    """Fail fast unless the label column is present, categorical and fully observed."""
    if label_column not in df.columns:
        raise DataValidationError(f"Label column '{label_column}' not found")

    label = df[label_column]
    if not is_categorical(label):
        raise DataValidationError(
            f"Label column '{label_column}' must be categorical, got dtype {label.dtype}"
        )

    n_missing = int(label.isna().sum())
    if ptypes.is_object_dtype(label) or ptypes.is_string_dtype(label):
        n_missing += int((label == '').sum())
    if n_missing:
        raise DataValidationError(f"Label column '{label_column}' has {n_missing} missing value(s)")
