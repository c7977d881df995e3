"""Filesystem layout for grocery_core.

Everything the pipeline reads or writes lives under one data root, split
into the bronze, silver and gold layers.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from grocery_core.exceptions import ConfigError

# layer name -> directory under data_root
LAYERS = {
    "raw": ("a_raw", "sales"),
    "clean": ("b_clean", "sales"),
    "mart": ("c_processed", "sales"),
}


@dataclass
class DataPaths:
    """Directories used by the sales pipeline.

    Attributes:
        data_root: Root directory for all data layers.

    Directory Structure:
        data_root/
        ├── a_raw/sales/         # Bronze: dataset files as delivered
        ├── b_clean/sales/       # Silver: fact_sales_record_<dataset>.csv + _meta/
        └── c_processed/sales/   # Gold: <dataset>/mart_<view>.csv + _meta/
    """

    data_root: Path

    @classmethod
    def from_root(cls, data_root: str | Path) -> DataPaths:
        """Create DataPaths for a root directory (created lazily, see ensure_dirs).

        Examples:
            >>> DataPaths.from_root("data").clean_sales
            PosixPath('data/b_clean/sales')
        """
        return cls(data_root=Path(data_root))

    def _layer(self, name: str) -> Path:
        return self.data_root.joinpath(*LAYERS[name])

    @property
    def raw_sales(self) -> Path:
        return self._layer("raw")

    @property
    def clean_sales(self) -> Path:
        return self._layer("clean")

    @property
    def mart_sales(self) -> Path:
        return self._layer("mart")

    def ensure_dirs(self) -> None:
        """Create the layer directories.

        Raises:
            ConfigError: If data_root exists but is not a directory.
        """
        if self.data_root.exists() and not self.data_root.is_dir():
            raise ConfigError(f"data_root is not a directory: {self.data_root}")
        for name in LAYERS:
            self._layer(name).mkdir(parents=True, exist_ok=True)
