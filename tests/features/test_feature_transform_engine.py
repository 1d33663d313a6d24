# tests/features/test_feature_transform_engine.py
from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from foresee.features.feature_transform_engine import FeatureTransformEngine
from foresee.features.physio import physio_scores, selected_gene_count
from foresee.pipeline.state import PipelineState
from foresee.utils.errors import DimensionMismatch, UnknownStrategy


@pytest.fixture
def pair(expression):
    train = PipelineState(features=expression(60, 12, seed=1, prefix="tr"))
    test = PipelineState(features=expression(60, 5, seed=2, prefix="te"), kind="test")
    return train, test


@pytest.mark.parametrize("kind", ["zscore_genewise", "zscore_samplewise", "pca", "physio", "none"])
def test_transforms_preserve_sample_ids(pair, kind):
    train, test = pair
    tr, te = FeatureTransformEngine().transform(train, test, kind)

    assert list(tr.sample_ids) == list(train.sample_ids)
    assert list(te.sample_ids) == list(test.sample_ids)
    assert len(tr.feature_types) == tr.n_features
    assert len(te.feature_types) == te.n_features


def test_unknown_kind(pair):
    with pytest.raises(UnknownStrategy):
        FeatureTransformEngine().transform(*pair, "quantile")


# =============================================================================
# z-scores
# =============================================================================

def test_zscore_genewise_standardizes_train_rows(pair):
    tr, _ = FeatureTransformEngine().transform(*pair, "zscore_genewise")

    values = tr.features.to_numpy()
    assert np.allclose(values.mean(axis=1), 0.0)
    assert np.allclose(values.std(axis=1, ddof=1), 1.0)


def test_zscore_genewise_applies_train_statistics_to_test():
    train = PipelineState(
        features=pd.DataFrame([[1.0, 3.0], [10.0, 10.0]], index=["a", "b"], columns=["t1", "t2"])
    )
    test = PipelineState(
        features=pd.DataFrame([[20.0], [5.0]], index=["b", "a"], columns=["x"]), kind="test"
    )

    _, te = FeatureTransformEngine().transform(train, test, "zscore_genewise")

    # aligned to train row order; "b" has zero spread and is only centred
    assert list(te.features.index) == ["a", "b"]
    assert te.features.loc["a", "x"] == pytest.approx((5.0 - 2.0) / np.sqrt(2.0))
    assert te.features.loc["b", "x"] == pytest.approx(10.0)


def test_zscore_genewise_independent_stats_flag(pair):
    _, te = FeatureTransformEngine().transform(*pair, "zscore_genewise", independent_stats=True)

    values = te.features.to_numpy()
    assert np.allclose(values.mean(axis=1), 0.0)


def test_zscore_genewise_missing_test_feature(pair):
    train, test = pair
    test = test.replace(
        features=test.features.iloc[:-1], feature_types=test.feature_types.iloc[:-1]
    )
    with pytest.raises(DimensionMismatch):
        FeatureTransformEngine().transform(train, test, "zscore_genewise")


def test_zscore_samplewise_standardizes_each_sample(pair):
    tr, te = FeatureTransformEngine().transform(*pair, "zscore_samplewise")

    for state in (tr, te):
        values = state.features.to_numpy()
        assert np.allclose(values.mean(axis=0), 0.0)
        assert np.allclose(values.std(axis=0, ddof=1), 1.0)


def test_drug_response_untouched(pair):
    train, test = pair
    y = pd.Series(np.arange(12, dtype=float), index=train.sample_ids, name="DrugResponse")
    train = train.replace(drug_response=y)

    tr, _ = FeatureTransformEngine().transform(train, test, "zscore_genewise")
    pd.testing.assert_series_equal(tr.drug_response, y)


# =============================================================================
# PCA
# =============================================================================

def test_pca_keeps_at_most_ten_components(pair):
    tr, te = FeatureTransformEngine().transform(*pair, "pca")

    assert list(tr.features.index) == [f"PC{i}" for i in range(1, 11)]
    assert te.features.shape == (10, 5)
    assert set(tr.feature_types) == {"PrincipalComponent"}


def test_pca_component_count_bounded_by_train_samples(expression):
    train = PipelineState(features=expression(30, 4, seed=0))
    test = PipelineState(features=expression(30, 2, seed=1, prefix="t"), kind="test")

    tr, te = FeatureTransformEngine().transform(train, test, "pca")
    assert tr.n_features == 4
    assert te.n_features == 4


def test_pca_train_scores_are_centred(pair):
    tr, _ = FeatureTransformEngine().transform(*pair, "pca")
    assert np.allclose(tr.features.to_numpy().mean(axis=1), 0.0)


# =============================================================================
# physio
# =============================================================================

def test_physio_train_diagonal_is_zero(pair):
    tr, te = FeatureTransformEngine().transform(*pair, "physio")

    assert tr.features.shape == (12, 12)
    assert te.features.shape == (12, 5)
    assert np.allclose(np.diag(tr.features.to_numpy()), 0.0)
    assert set(tr.feature_types) == {"PhysioScore"}


def test_physio_with_external_reference(pair, expression):
    reference = expression(60, 3, seed=9, prefix="ref")
    tr, te = FeatureTransformEngine().transform(*pair, "physio", reference=reference)

    assert list(tr.features.index) == ["ref0", "ref1", "ref2"]
    assert te.features.shape == (3, 5)


def test_physio_scores_sign_follows_similarity():
    space = np.arange(40, dtype=float).reshape(-1, 1)
    inputs = np.column_stack([space[:, 0], -space[:, 0]])

    scores = physio_scores(inputs, space, genes_ratio=0.25)
    assert scores[0, 0] > 0
    assert scores[0, 1] < 0


def test_selected_gene_count_bounds():
    assert selected_gene_count(100) == 5
    assert selected_gene_count(4) == 1


# =============================================================================
# Callables
# =============================================================================

def test_callable_applied_to_each_side(pair):
    tr, te = FeatureTransformEngine().transform(*pair, lambda f: f * 2.0)

    train, test = pair
    assert np.allclose(tr.features.to_numpy(), train.features.to_numpy() * 2.0)
    assert np.allclose(te.features.to_numpy(), test.features.to_numpy() * 2.0)


def test_callable_dropping_samples_rejected(pair):
    with pytest.raises(DimensionMismatch):
        FeatureTransformEngine().transform(*pair, lambda f: f.iloc[:, :1])


def test_zscore_genewise_on_standardized_input_is_stable(pair):
    engine = FeatureTransformEngine()
    tr, te = engine.transform(*pair, "zscore_genewise")
    tr2, _ = engine.transform(tr, te, "zscore_genewise")

    values = tr2.features.to_numpy()
    assert np.allclose(values.mean(axis=1), 0.0)
    assert np.allclose(values.std(axis=1, ddof=1), 1.0)
    assert np.allclose(values, tr.features.to_numpy())


def test_physio_genes_selected_from_input_sample():
    genes = np.arange(40, dtype=float)
    inputs = genes.reshape(-1, 1)

    # reference is high on the input's top genes (30..39) and low on its
    # bottom genes (0..9); its own extremes sit on genes 10..29
    space = genes.copy()
    space[30:] += 100.0
    space[10:20] = 1000.0 - genes[10:20]
    space[20:30] = -1000.0 + genes[20:30]

    scores = physio_scores(inputs, space.reshape(-1, 1), genes_ratio=0.25)
    assert scores[0, 0] > 0
