# tests/pipeline/test_state.py
import dataclasses

import numpy as np
import pandas as pd
import pytest

from foresee.pipeline.state import PipelineState
from foresee.utils.errors import DimensionMismatch


def test_feature_types_default_to_gene_expression(tiny_state):
    assert tiny_state.feature_types.tolist() == ["GeneExpression"] * 3
    assert tiny_state.n_samples == 4
    assert tiny_state.n_features == 3


def test_state_is_frozen(tiny_state):
    with pytest.raises(dataclasses.FrozenInstanceError):
        tiny_state.kind = "test"


def test_features_must_be_a_frame():
    with pytest.raises(TypeError):
        PipelineState(features=np.zeros((2, 2)))


def test_response_length_checked(tiny_state):
    with pytest.raises(DimensionMismatch):
        tiny_state.replace(drug_response=pd.Series([1.0, 2.0]))


def test_subset_samples_is_private(tiny_state):
    sub = tiny_state.subset_samples([0, 2], kind="test")

    assert list(sub.sample_ids) == ["s1", "s3"]
    assert sub.drug_response.tolist() == [1.0, 3.0]
    assert sub.kind == "test"

    sub.features.iloc[0, 0] = 99.0
    assert tiny_state.features.iloc[0, 0] == 1.0


def test_copy_shares_no_frames(tiny_state):
    snap = tiny_state.copy()
    snap.features.iloc[0, 0] = -1.0
    snap.drug_response.iloc[0] = -1.0

    assert tiny_state.features.iloc[0, 0] == 1.0
    assert tiny_state.drug_response.iloc[0] == 1.0


def test_sample_frame_is_samples_by_features(tiny_state):
    frame = tiny_state.sample_frame()

    assert frame.shape == (4, 3)
    assert list(frame.columns) == ["g1", "g2", "g3"]
    assert frame.loc["s2", "g1"] == 2.0
