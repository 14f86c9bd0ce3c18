"""Tests for random resource naming."""

import re
from unittest.mock import patch

import pytest

from eventhub_geodr.config import NamePrefixes
from eventhub_geodr.naming import ResourceNames, create_random_name


class TestCreateRandomName:

    def test_prefix_and_length(self):
        name = create_random_name("geodr")
        assert name.startswith("geodr")
        assert len(name) == 12
        assert re.fullmatch(r"geodr[0-9a-f]{7}", name)

    @pytest.mark.parametrize("length", [6, 7, 12, 13, 50])
    def test_custom_lengths(self, length):
        assert len(create_random_name("ns", length)) == length

    def test_lowercases_prefix(self):
        assert create_random_name("NS").startswith("ns")

    def test_prefix_too_long(self):
        with pytest.raises(ValueError, match="too long"):
            create_random_name("abcdef", 6)

    def test_names_differ(self):
        assert len({create_random_name("ns") for _ in range(50)}) > 1


class TestResourceNames:

    def test_generate_defaults(self):
        names = ResourceNames.generate()
        assert names.resource_group.startswith("rgeh")
        assert names.primary_namespace.startswith("ns")
        assert names.secondary_namespace.startswith("ns")
        assert names.pairing.startswith("geodr")
        assert names.event_hub.startswith("eh")
        assert names.is_distinct

    def test_names_are_distinct_across_runs(self):
        for _ in range(100):
            names = ResourceNames.generate()
            assert len({names.primary_namespace, names.secondary_namespace, names.event_hub}) == 3

    def test_custom_prefixes_and_length(self):
        names = ResourceNames.generate(NamePrefixes(event_hub="hub"), length=20)
        assert names.event_hub.startswith("hub")
        assert all(len(value) == 20 for value in vars(names).values())

    def test_is_distinct_detects_collision(self):
        names = ResourceNames("rg1", "ns1", "ns1", "geodr1", "eh1")
        assert names.is_distinct is False

    def test_regenerates_on_collision(self):
        sequence = iter(
            ["rgeh1", "ns1", "ns1", "geodr1", "eh1"]  # collision
            + ["rgeh2", "ns2", "ns3", "geodr2", "eh2"]
        )
        with patch("eventhub_geodr.naming.create_random_name", side_effect=lambda *a: next(sequence)):
            names = ResourceNames.generate()
        assert names == ResourceNames("rgeh2", "ns2", "ns3", "geodr2", "eh2")

    def test_gives_up_after_max_attempts(self):
        with patch("eventhub_geodr.naming.create_random_name", return_value="same"):
            with pytest.raises(RuntimeError, match="3 attempts"):
                ResourceNames.generate(max_attempts=3)
