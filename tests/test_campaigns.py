"""
Tests for CampaignDirectory.
"""

import pytest
import pandas as pd
from spendwatch.infrastructure.data.campaigns import CampaignDirectory
from spendwatch.infrastructure.data.readers import DataFrameDataReader


class TestCampaignDirectory:
    """Tests for name lookup and labels"""

    def test_name_and_label(self):
        directory = CampaignDirectory({7: "Summer Sale"})

        assert directory.name_for(7) == "Summer Sale"
        assert directory.label_for(7) == "Summer Sale"
        assert 7 in directory
        assert len(directory) == 1

    def test_unknown_id_falls_back(self):
        directory = CampaignDirectory()

        assert directory.name_for(9) is None
        assert directory.label_for(9) == "Campaign 9"

    def test_custom_fallback(self):
        directory = CampaignDirectory(fallback_template="#{entity_id}")
        assert directory.label_for("abc") == "#abc"

    def test_fallback_without_placeholder(self):
        with pytest.raises(ValueError, match="fallback_template"):
            CampaignDirectory(fallback_template="Unknown")

    def test_names_must_be_mapping(self):
        with pytest.raises(TypeError):
            CampaignDirectory([("a", "b")])

    def test_as_dict_is_copy(self):
        directory = CampaignDirectory({1: "A"})
        names = directory.as_dict()
        names[2] = "B"

        assert 2 not in directory


class TestCampaignDirectoryFromData:
    """Tests for building a directory from loaded data"""

    def test_from_dataframe(self):
        df = pd.DataFrame({"id": [1, 2, 3], "name": ["Brand", None, "Retargeting"]})

        directory = CampaignDirectory.from_dataframe(df)

        assert directory.as_dict() == {1: "Brand", 3: "Retargeting"}
        assert directory.label_for(2) == "Campaign 2"

    def test_from_dataframe_custom_columns(self):
        df = pd.DataFrame({"campaign_id": ["a"], "title": ["Launch"]})

        directory = CampaignDirectory.from_dataframe(df, "campaign_id", "title")

        assert directory.name_for("a") == "Launch"

    def test_from_dataframe_missing_column(self):
        with pytest.raises(ValueError, match="Required columns not found"):
            CampaignDirectory.from_dataframe(pd.DataFrame({"id": [1]}))

    def test_from_dataframe_wrong_type(self):
        with pytest.raises(TypeError):
            CampaignDirectory.from_dataframe({"id": [1], "name": ["A"]})

    def test_from_reader(self):
        reader = DataFrameDataReader(pd.DataFrame({"id": [4], "name": ["Search"]}))

        directory = CampaignDirectory.from_reader(reader, fallback_template="Ad {entity_id}")

        assert directory.label_for(4) == "Search"
        assert directory.label_for(5) == "Ad 5"

    def test_from_reader_wrong_type(self):
        with pytest.raises(TypeError, match="DataReader"):
            CampaignDirectory.from_reader(pd.DataFrame())
