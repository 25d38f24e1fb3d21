"""
Campaign name lookup for display labels.
"""

from typing import Any, Dict, Hashable, Mapping, Optional
import pandas as pd
from .readers.base import DataReader


class CampaignDirectory:
    """
    Maps entity (campaign) ids to display names.

    Names are for labelling only; an unknown id falls back to
    ``fallback_template`` instead of failing.

    Args:
        names: Mapping of entity id to campaign name
        fallback_template: Label for ids without a name (default: 'Campaign {entity_id}')

    Example:
        directory = CampaignDirectory.from_reader(
            SQLiteDataReader('ads.db', 'SELECT id, name FROM campaigns')
        )
        directory.label_for(7)  # 'Summer Sale' or 'Campaign 7'
    """

    def __init__(
        self,
        names: Optional[Mapping[Hashable, str]] = None,
        fallback_template: str = "Campaign {entity_id}",
    ):
        if names is not None and not isinstance(names, Mapping):
            raise TypeError(f"names must be a mapping, got {type(names).__name__}")
        if "{entity_id}" not in fallback_template:
            raise ValueError("fallback_template must contain '{entity_id}'")

        self._names: dict = dict(names or {})
        self.fallback_template: str = fallback_template

    @classmethod
    def from_dataframe(
        cls,
        df: pd.DataFrame,
        id_column: str = "id",
        name_column: str = "name",
        **kwargs: Any,
    ) -> "CampaignDirectory":
        """
        Build a directory from a DataFrame of campaigns.

        Rows with a missing name are ignored.

        Raises:
            TypeError: If df is not a DataFrame
            ValueError: If the id or name column is missing
        """
        if not isinstance(df, pd.DataFrame):
            raise TypeError(f"Expected pandas DataFrame, got {type(df).__name__}")

        missing = [col for col in (id_column, name_column) if col not in df.columns]
        if missing:
            raise ValueError(
                f"Required columns not found in campaigns data: {missing}. "
                f"Available columns: {list(df.columns)}"
            )

        named = df[df[name_column].notna()]
        names = dict(zip(named[id_column], named[name_column].astype(str)))
        return cls(names, **kwargs)

    @classmethod
    def from_reader(
        cls,
        reader: DataReader,
        id_column: str = "id",
        name_column: str = "name",
        **kwargs: Any,
    ) -> "CampaignDirectory":
        """Build a directory from any DataReader returning campaign rows."""
        if not isinstance(reader, DataReader):
            raise TypeError(
                f"reader must be a DataReader instance, got {type(reader).__name__}"
            )
        return cls.from_dataframe(reader.load(), id_column, name_column, **kwargs)

    def name_for(self, entity_id: Hashable) -> Optional[str]:
        """Campaign name, or None when the id is unknown."""
        return self._names.get(entity_id)

    def label_for(self, entity_id: Hashable) -> str:
        """Campaign name, or the fallback label when the id is unknown."""
        name = self.name_for(entity_id)
        if name is None:
            return self.fallback_template.format(entity_id=entity_id)
        return name

    def as_dict(self) -> Dict[Hashable, str]:
        return dict(self._names)

    def __contains__(self, entity_id: Hashable) -> bool:
        return entity_id in self._names

    def __len__(self) -> int:
        return len(self._names)
