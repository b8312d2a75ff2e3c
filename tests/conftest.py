import matplotlib

matplotlib.use("Agg")

import pytest

from resampler_filter.params import FilterParameters
from resampler_filter.sinc_table_gen import build_filter_tables


@pytest.fixture(scope="session")
def reference_params():
    return FilterParameters()


@pytest.fixture(scope="session")
def reference_tables(reference_params):
    return build_filter_tables(reference_params)


@pytest.fixture
def toy_params():
    # 2 entries per zero crossing -> 11-entry table
    return FilterParameters(zero_crossings=5, bits_per_sample=0)
