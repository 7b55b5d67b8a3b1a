"""
Base classes and utilities for data ingestion.

Provides common functionality for all staging loaders.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Generic, TypeVar

import pandas as pd
import pandera.pandas as pa
from pandera.errors import SchemaError, SchemaErrors

from conformer.exceptions import StagingError
from conformer.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T", bound=pa.DataFrameModel)


class DataLoader(ABC, Generic[T]):
    """
    Abstract base class for data loaders.

    All data loaders inherit from this class to ensure consistent
    schema validation at system boundaries.
    """

    def __init__(self, path: Path, schema: type[T]) -> None:
        """
        Initialize data loader.

        Args:
            path: File to load.
            schema: Pandera schema for validation.
        """
        self.path = path
        self.schema = schema

    @abstractmethod
    def _load_raw(self) -> pd.DataFrame:
        """Load raw data from source. Implemented by subclasses."""
        ...

    def load(self, *, validate: bool = True) -> pd.DataFrame:
        """
        Load and optionally validate data.

        Args:
            validate: Whether to validate against schema.

        Returns:
            Loaded (and optionally validated) DataFrame.

        Raises:
            StagingError: If the file is missing, unreadable or fails
                validation.
        """
        log.debug("Loading data", loader=self.__class__.__name__, path=str(self.path))

        if not self.path.exists():
            msg = f"Staging file not found: {self.path}"
            raise StagingError(msg)

        try:
            df = self._load_raw()
        except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
            msg = f"Cannot read {self.path}: {e}"
            raise StagingError(msg) from e
        log.debug("Loaded raw data", rows=len(df), columns=list(df.columns))

        if validate:
            df = self._validate(df)

        return df

    def _validate(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Validate DataFrame against schema.

        Raises:
            StagingError: Listing every schema failure of the file.
        """
        try:
            return self.schema.validate(df, lazy=True)
        except (SchemaError, SchemaErrors) as e:
            msg = f"{self.path} does not match {self.schema.__name__}: {e}"
            raise StagingError(msg) from e
