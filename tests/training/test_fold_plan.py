# tests/training/test_fold_plan.py
from __future__ import annotations

import numpy as np
import pytest

from foresee.training.engines.fold_plan import FoldPlan, validate_fold_count
from foresee.utils.errors import InvalidFoldCount


@pytest.mark.parametrize("n_samples,k", [(4, 4), (10, 3), (11, 5), (100, 7)])
def test_fold_plan_partitions_all_samples(n_samples, k):
    plan = FoldPlan.build(n_samples, k, seed=3)

    assert len(plan) == k
    joined = np.concatenate(plan.test_folds)
    assert sorted(joined.tolist()) == list(range(n_samples))

    sizes = [len(f) for f in plan.test_folds]
    assert max(sizes) - min(sizes) <= 1


def test_train_and_test_indices_are_complementary():
    plan = FoldPlan.build(10, 3, seed=0)

    for i, train_idx, test_idx in plan:
        assert np.intersect1d(train_idx, test_idx).size == 0
        assert len(train_idx) + len(test_idx) == 10
        assert np.array_equal(test_idx, plan.test_indices(i))


def test_same_seed_same_plan():
    a = FoldPlan.build(20, 4, seed=47)
    b = FoldPlan.build(20, 4, seed=47)

    for x, y in zip(a.test_folds, b.test_folds):
        assert np.array_equal(x, y)


def test_leave_one_out_plan_has_singleton_folds():
    plan = FoldPlan.build(4, 4, seed=1)
    assert all(len(f) == 1 for f in plan.test_folds)


@pytest.mark.parametrize("bad", [0, -1, 2.5, "3", None, True])
def test_invalid_fold_counts_rejected(bad):
    with pytest.raises(InvalidFoldCount):
        validate_fold_count(bad, 10)


def test_more_folds_than_samples_rejected():
    with pytest.raises(InvalidFoldCount):
        validate_fold_count(5, 4)


def test_integral_float_accepted():
    assert validate_fold_count(3.0, 10) == 3
    assert validate_fold_count(np.int64(2), 10) == 2
