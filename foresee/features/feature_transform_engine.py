# foresee/features/feature_transform_engine.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import numpy as np
import pandas as pd
from sklearn.decomposition import PCA

from foresee import logs
from foresee.features.physio import DEFAULT_GENES_RATIO, physio_scores
from foresee.pipeline.state import PipelineState
from foresee.utils.errors import DimensionMismatch, UnknownStrategy

PCA_MAX_COMPONENTS = 10
PRINCIPAL_COMPONENT = "PrincipalComponent"
PHYSIO_SCORE = "PhysioScore"


@dataclass(frozen=True)
class TransformedFeatures:
    """
    feature_types None -> each side keeps its own tags.
    """

    train: pd.DataFrame
    test: pd.DataFrame
    feature_types: Optional[pd.Series] = None


FeatureTransform = Callable[..., TransformedFeatures]


# ============================================================
# Helpers
# ============================================================
def align_to_features(frame: pd.DataFrame, index: pd.Index, *, what: str) -> pd.DataFrame:
    """
    Reorder the rows of `frame` to `index`. Missing ids are an error.
    """
    if frame.index.equals(index):
        return frame

    missing = index.difference(frame.index)
    if len(missing):
        raise DimensionMismatch(
            f"{what} lacks {len(missing)} features, e.g. {list(missing[:5])}"
        )
    if frame.index.has_duplicates:
        raise DimensionMismatch(f"{what} has duplicated feature ids and cannot be aligned")

    return frame.reindex(index)


def _standardize(values: np.ndarray, axis: int, mean=None, sd=None):
    if mean is None:
        mean = values.mean(axis=axis, keepdims=True)
    if sd is None:
        if values.shape[axis] > 1:
            sd = values.std(axis=axis, ddof=1, keepdims=True)
        else:
            sd = np.ones_like(mean)
    # zero / undefined spread: centre only
    sd = np.where(np.isfinite(sd) & (sd > 0), sd, 1.0)
    return (values - mean) / sd, mean, sd


def _frame_like(values: np.ndarray, frame: pd.DataFrame) -> pd.DataFrame:
    return pd.DataFrame(values, index=frame.index, columns=frame.columns)


# ============================================================
# Built-in transforms
# ============================================================
def zscore_genewise(
        train: PipelineState,
        test: PipelineState,
        *,
        independent_stats: bool = False,
        **_,
) -> TransformedFeatures:
    """
    Per-feature mean / sd from the train samples, applied to both sides.

    independent_stats=True recomputes the statistics on the test samples
    (the old FORESEE behaviour). It lets test statistics shape the test
    features and is off unless asked for.
    """
    tr = train.features.astype(np.float64)
    te = align_to_features(test.features, tr.index, what="test features").astype(np.float64)

    tr_values, mean, sd = _standardize(tr.to_numpy(), axis=1)

    if independent_stats:
        logs.warning(
            "[FeatureTransform] zscore_genewise with independent_stats: "
            "test features standardized with their own statistics"
        )
        te_values, _, _ = _standardize(te.to_numpy(), axis=1)
    else:
        te_values, _, _ = _standardize(te.to_numpy(), axis=1, mean=mean, sd=sd)

    return TransformedFeatures(
        train=_frame_like(tr_values, tr),
        test=_frame_like(te_values, te),
        feature_types=train.feature_types.copy(),
    )


def zscore_samplewise(train: PipelineState, test: PipelineState, **_) -> TransformedFeatures:
    """
    Each sample standardized over its own features; no cross-sample leakage.
    """
    tr = train.features.astype(np.float64)
    te = test.features.astype(np.float64)
    tr_values, _, _ = _standardize(tr.to_numpy(), axis=0)
    te_values, _, _ = _standardize(te.to_numpy(), axis=0)
    return TransformedFeatures(train=_frame_like(tr_values, tr), test=_frame_like(te_values, te))


def pca(train: PipelineState, test: PipelineState, *,
        n_components: int = PCA_MAX_COMPONENTS, **_) -> TransformedFeatures:
    tr = train.features.astype(np.float64)
    te = align_to_features(test.features, tr.index, what="test features").astype(np.float64)

    k = int(min(n_components, tr.shape[1], tr.shape[0]))
    model = PCA(n_components=k, svd_solver="full").fit(tr.to_numpy().T)

    names = pd.Index([f"PC{i + 1}" for i in range(k)])
    tr_pc = pd.DataFrame(model.transform(tr.to_numpy().T).T, index=names, columns=tr.columns)
    te_pc = pd.DataFrame(model.transform(te.to_numpy().T).T, index=names, columns=te.columns)

    logs.debug(
        f"[FeatureTransform] pca k={k} "
        f"explained={float(model.explained_variance_ratio_.sum()):.3f}"
    )
    return TransformedFeatures(
        train=tr_pc,
        test=te_pc,
        feature_types=pd.Series(PRINCIPAL_COMPONENT, index=names, dtype=object),
    )


def physio(
        train: PipelineState,
        test: PipelineState,
        *,
        reference: pd.DataFrame | None = None,
        genes_ratio: float = DEFAULT_GENES_RATIO,
        **_,
) -> TransformedFeatures:
    """
    Replace features by similarity scores against a reference space
    (features x reference samples). Defaults to the train features, in which
    case a train sample's score against itself is set to 0.
    """
    self_reference = reference is None
    space = train.features if self_reference else reference

    tr = align_to_features(train.features, space.index, what="train features")
    te = align_to_features(test.features, space.index, what="test features")

    combined = np.hstack([tr.to_numpy(dtype=np.float64), te.to_numpy(dtype=np.float64)])
    scores = physio_scores(combined, space.to_numpy(dtype=np.float64), genes_ratio)

    n_train = tr.shape[1]
    tr_scores = scores[:, :n_train]
    if self_reference:
        np.fill_diagonal(tr_scores, 0.0)

    names = pd.Index(space.columns.astype(str))
    return TransformedFeatures(
        train=pd.DataFrame(tr_scores, index=names, columns=tr.columns),
        test=pd.DataFrame(scores[:, n_train:], index=names, columns=te.columns),
        feature_types=pd.Series(PHYSIO_SCORE, index=names, dtype=object),
    )


def passthrough(train: PipelineState, test: PipelineState, **_) -> TransformedFeatures:
    return TransformedFeatures(train=train.features.copy(), test=test.features.copy())


def _from_callable(fn: Callable[[pd.DataFrame], pd.DataFrame]) -> FeatureTransform:
    """
    User function features -> features, applied to each side on its own.
    """

    def as_frame(result, like: pd.DataFrame) -> pd.DataFrame:
        if isinstance(result, pd.DataFrame):
            return result
        values = np.atleast_2d(np.asarray(result, dtype=np.float64))
        index = like.index if values.shape[0] == like.shape[0] else None
        columns = like.columns if values.shape[1] == like.shape[1] else None
        return pd.DataFrame(values, index=index, columns=columns)

    def apply(train: PipelineState, test: PipelineState, **_) -> TransformedFeatures:
        tr = as_frame(fn(train.features.copy()), train.features)
        te = as_frame(fn(test.features.copy()), test.features)

        same_rows = tr.shape[0] == train.n_features and te.shape[0] == test.n_features
        return TransformedFeatures(
            train=tr,
            test=te,
            feature_types=None if same_rows else pd.Series(
                "UserDefined", index=tr.index, dtype=object
            ),
        )

    apply.__name__ = getattr(fn, "__name__", "user-defined")
    return apply


_FEATURE_TRANSFORMS: Dict[str, FeatureTransform] = {
    "zscore_genewise": zscore_genewise,
    "zscore_samplewise": zscore_samplewise,
    "pca": pca,
    "physio": physio,
    "none": passthrough,
}


def available_feature_transforms() -> List[str]:
    return list(_FEATURE_TRANSFORMS)


def resolve_feature_transform(kind) -> FeatureTransform:
    if callable(kind):
        return _from_callable(kind)

    if kind not in _FEATURE_TRANSFORMS:
        available = ", ".join(_FEATURE_TRANSFORMS)
        raise UnknownStrategy(f"Unknown feature transform {kind!r}. Available: {available}")
    return _FEATURE_TRANSFORMS[kind]


# ============================================================
# Engine
# ============================================================
class FeatureTransformEngine:
    """
    FeatureTransformEngine (FINAL)

    Contract:
    - transform(train, test, kind) -> (train', test')
    - statistics are learned on train only and applied to test
    - sample ids and counts of both states are preserved
    - drug_response is untouched
    """

    def transform(
            self,
            train: PipelineState,
            test: PipelineState,
            kind="none",
            **params,
    ):
        fn = resolve_feature_transform(kind)
        out = fn(train, test, **params)

        train_out = self._rebuild(train, out.train, out.feature_types)
        test_out = self._rebuild(test, out.test, out.feature_types)

        label = kind if isinstance(kind, str) else getattr(fn, "__name__", "user-defined")
        logs.info(
            f"[FeatureTransform] {label} train={train_out.n_features}x{train_out.n_samples} "
            f"test={test_out.n_features}x{test_out.n_samples}"
        )
        return train_out, test_out

    @staticmethod
    def _rebuild(
            before: PipelineState,
            features: pd.DataFrame,
            feature_types: Optional[pd.Series],
    ) -> PipelineState:
        if features.shape[1] != before.n_samples or not features.columns.equals(before.sample_ids):
            raise DimensionMismatch(
                f"feature transform changed the {before.kind} samples "
                f"({before.n_samples} -> {features.shape[1]})"
            )

        if feature_types is None:
            feature_types = before.feature_types
            if len(feature_types) != features.shape[0]:
                raise DimensionMismatch(
                    f"feature transform changed the {before.kind} feature count "
                    f"({before.n_features} -> {features.shape[0]}) without new feature types"
                )

        return before.replace(
            features=features,
            feature_types=feature_types.copy(),
            train_frame=None,
            upstream_index=None,
        )
