# foresee/training/engines/fold_plan.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple

import numpy as np

from foresee.utils.errors import InvalidFoldCount


def validate_fold_count(folds, n_samples: int) -> int:
    """
    folds must be integral, >= 1 and <= n_samples. Returns it as int.
    """
    if isinstance(folds, (bool, np.bool_)):
        raise InvalidFoldCount("folds needs to be a positive integer, got a bool")

    if isinstance(folds, (int, np.integer)):
        value = int(folds)
    elif isinstance(folds, (float, np.floating)) and float(folds).is_integer():
        value = int(folds)
    else:
        raise InvalidFoldCount(f"folds needs to be a positive integer, got {folds!r}")

    if value < 1:
        raise InvalidFoldCount(f"folds needs to be a positive integer, got {value}")

    if value > 1 and value > n_samples:
        raise InvalidFoldCount(
            f"folds={value} exceeds the number of samples ({n_samples})"
        )
    return value


@dataclass(frozen=True)
class FoldPlan:
    """
    FoldPlan (FROZEN)

    K disjoint groups of sample positions cut from one seeded permutation.
    - union == range(n_samples), pairwise disjoint
    - group sizes differ by at most 1
    - positions inside a group are sorted, so subsets keep sample order
    """

    n_samples: int
    test_folds: Tuple[np.ndarray, ...]
    seed: int | None = None

    @classmethod
    def build(cls, n_samples: int, n_folds: int, *, seed: int | None = None) -> "FoldPlan":
        n_folds = validate_fold_count(n_folds, n_samples)

        rng = np.random.default_rng(seed)
        perm = rng.permutation(n_samples)

        test_folds = tuple(
            np.sort(chunk).astype(np.int64) for chunk in np.array_split(perm, n_folds)
        )
        return cls(n_samples=n_samples, test_folds=test_folds, seed=seed)

    def __len__(self) -> int:
        return len(self.test_folds)

    def test_indices(self, fold: int) -> np.ndarray:
        return self.test_folds[fold]

    def train_indices(self, fold: int) -> np.ndarray:
        return np.setdiff1d(
            np.arange(self.n_samples, dtype=np.int64), self.test_folds[fold]
        )

    def splits(self) -> Iterator[Tuple[int, np.ndarray, np.ndarray]]:
        for i in range(len(self)):
            yield i, self.train_indices(i), self.test_indices(i)

    def __iter__(self):
        return self.splits()
