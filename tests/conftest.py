# tests/conftest.py
from __future__ import annotations

import numpy as np
import pandas as pd
import pytest
from loguru import logger

from foresee.pipeline.state import PipelineState


@pytest.fixture(autouse=True)
def disable_file_logger():
    logger.remove()
    logger.add(lambda msg: None)
    yield


@pytest.fixture
def tiny_state() -> PipelineState:
    """
    3 genes x 4 samples, response [1, 2, 3, 4].
    """
    features = pd.DataFrame(
        [
            [1.0, 2.0, 3.0, 4.0],
            [0.5, 0.1, 0.9, 0.3],
            [2.0, 2.5, 1.0, 4.5],
        ],
        index=["g1", "g2", "g3"],
        columns=["s1", "s2", "s3", "s4"],
    )
    response = pd.Series([1.0, 2.0, 3.0, 4.0], index=features.columns, name="DrugResponse")
    return PipelineState(features=features, drug_response=response)


def make_expression(n_genes: int, n_samples: int, *, seed: int = 0, prefix: str = "s") -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    return pd.DataFrame(
        rng.normal(size=(n_genes, n_samples)),
        index=[f"g{i}" for i in range(n_genes)],
        columns=[f"{prefix}{j}" for j in range(n_samples)],
    )


def make_response_table(samples, values, *, drug: str = "Docetaxel") -> pd.DataFrame:
    return pd.DataFrame(
        {
            "drug": drug,
            "sample": list(samples),
            "LN_IC50": list(values),
            "AUC": [v / 10.0 for v in values],
        }
    )


@pytest.fixture
def cohort():
    """
    (train_state, test_state): 40 genes, 24 train / 8 test samples, response
    driven by the first two genes.
    """
    train_features = make_expression(40, 24, seed=1, prefix="tr")
    test_features = make_expression(40, 8, seed=2, prefix="te")

    def response(frame):
        return (2.0 * frame.loc["g0"] - frame.loc["g1"] + 0.5).round(6)

    train_table = make_response_table(train_features.columns, response(train_features))
    test_table = make_response_table(test_features.columns, response(test_features))

    train = PipelineState(features=train_features, response_data=train_table, name="train")
    test = PipelineState(features=test_features, response_data=test_table, kind="test", name="test")
    return train, test


@pytest.fixture
def expression():
    return make_expression


@pytest.fixture
def response_table():
    return make_response_table
