# foresee/response/response_transform_engine.py
from __future__ import annotations

from typing import Callable, Dict, List, Tuple, Type

import numpy as np
import pandas as pd
from scipy.stats import boxcox_normmax
from sklearn.cluster import KMeans

from foresee import logs
from foresee.pipeline.state import RESPONSE_COLUMN, PipelineState
from foresee.utils.errors import (
    DimensionMismatch,
    UnknownDrug,
    UnknownResponseType,
    UnknownStrategy,
    UserInputError,
)

DRUG_COLUMN = "drug"
SAMPLE_COLUMN = "sample"

ResponseFn = Callable[[pd.Series], pd.Series]


# ============================================================
# Extraction
# ============================================================
def extract_drug_response(
        state: PipelineState, drug_name: str, response_type: str
) -> PipelineState:
    """
    Pull one drug's response column out of the long response table.

    - samples follow features.columns order
    - samples without a response value are dropped from features too
    - duplicated (drug, sample) rows keep the first value
    """
    table = state.response_data
    if table is None:
        raise UserInputError("state has no response_data to extract a drug response from")

    for col in (DRUG_COLUMN, SAMPLE_COLUMN):
        if col not in table.columns:
            raise UserInputError(f"response_data is missing the {col!r} column")

    if response_type in (DRUG_COLUMN, SAMPLE_COLUMN) or response_type not in table.columns:
        available = [c for c in table.columns if c not in (DRUG_COLUMN, SAMPLE_COLUMN)]
        raise UnknownResponseType(
            f"response type {response_type!r} not found. Available: {available}"
        )

    rows = table.loc[table[DRUG_COLUMN] == drug_name]
    if rows.empty:
        drugs = pd.unique(table[DRUG_COLUMN])
        raise UnknownDrug(
            f"drug {drug_name!r} not found in response_data "
            f"({len(drugs)} drugs, e.g. {list(drugs[:5])})"
        )

    per_sample = (
        rows.drop_duplicates(subset=SAMPLE_COLUMN, keep="first")
        .set_index(SAMPLE_COLUMN)[response_type]
    )
    per_sample = pd.to_numeric(per_sample, errors="coerce")

    aligned = per_sample.reindex(state.sample_ids)
    keep = aligned.notna().to_numpy()

    if not keep.any():
        raise UserInputError(
            f"no sample of the feature matrix has a {response_type} value for {drug_name!r}"
        )

    dropped = int((~keep).sum())
    if dropped:
        logs.info(
            f"[ResponseTransform] {dropped} samples without {response_type} for {drug_name} dropped"
        )

    response = aligned[keep].astype(np.float64).rename(RESPONSE_COLUMN)
    return state.replace(
        features=state.features.loc[:, keep].copy(),
        drug_response=response,
        train_frame=None,
    )


# ============================================================
# Built-in transforms
# ============================================================
class ResponseTransform:
    """
    ResponseTransform (FINAL)

    Contract:
    - fit(y) learns every parameter from the train response only
    - apply(y) maps any response (train or test) with those parameters
    - apply before fit is an error
    """

    name: str = ""

    def fit(self, y: pd.Series) -> "ResponseTransform":
        self.fitted_ = True
        return self

    def apply(self, y: pd.Series) -> pd.Series:
        if not getattr(self, "fitted_", False):
            raise RuntimeError(f"[ResponseTransform] {self.name} applied before fit")
        return self._apply(y)

    def _apply(self, y: pd.Series) -> pd.Series:
        raise NotImplementedError


class PassthroughTransform(ResponseTransform):
    name = "none"

    def _apply(self, y: pd.Series) -> pd.Series:
        return y


class ShiftedTransform(ResponseTransform):
    """
    min <= 0 on train -> shift everything by 1 - min, so the train minimum
    becomes 1. Unseen values still <= 0 after the shift are clamped to the
    shifted train minimum.
    """

    def fit(self, y: pd.Series) -> "ShiftedTransform":
        low = float(y.min())
        self.offset_ = 1.0 - low if low <= 0 else 0.0
        self.floor_ = low + self.offset_
        return super().fit(y)

    def shift(self, y: pd.Series) -> pd.Series:
        shifted = y + self.offset_
        invalid = shifted <= 0
        if invalid.any():
            logs.warning(
                f"[ResponseTransform] {int(invalid.sum())} values below the train range "
                f"clamped to {self.floor_:.4f}"
            )
            shifted = shifted.mask(invalid, self.floor_)
        return shifted


class LogTransform(ShiftedTransform):
    name = "log"

    def _apply(self, y: pd.Series) -> pd.Series:
        return np.log(self.shift(y))


class PowerTransform(ShiftedTransform):
    """
    y ** lambda, lambda = Box-Cox MLE on the shifted train response.
    """

    name = "power"

    def fit(self, y: pd.Series) -> "PowerTransform":
        super().fit(y)
        shifted = y + self.offset_
        if shifted.nunique() < 2:
            logs.warning("[ResponseTransform] constant response, power lambda set to 1")
            self.lambda_ = 1.0
        else:
            self.lambda_ = float(boxcox_normmax(shifted.to_numpy(dtype=np.float64), method="mle"))
        logs.debug(f"[ResponseTransform] power lambda={self.lambda_:.4f}")
        return self

    def _apply(self, y: pd.Series) -> pd.Series:
        return self.shift(y) ** self.lambda_


class KMeansBinarizer(ResponseTransform):
    """
    Two clusters on the 1-D train values; 1 = cluster with the higher centre.
    """

    name = "binarize_kmeans"

    def fit(self, y: pd.Series) -> "KMeansBinarizer":
        if y.nunique() < 2:
            logs.warning("[ResponseTransform] constant response, every sample set to 0")
            self.model_ = None
        else:
            values = y.to_numpy(dtype=np.float64).reshape(-1, 1)
            self.model_ = KMeans(n_clusters=2, n_init=10, random_state=0).fit(values)
            self.high_ = int(np.argmax(self.model_.cluster_centers_.ravel()))
        return super().fit(y)

    def _apply(self, y: pd.Series) -> pd.Series:
        if self.model_ is None:
            return pd.Series(0.0, index=y.index)
        labels = self.model_.predict(y.to_numpy(dtype=np.float64).reshape(-1, 1))
        return pd.Series((labels == self.high_).astype(np.float64), index=y.index)


class CutoffBinarizer(ResponseTransform):
    """
    1 above the train median, 0 otherwise (values equal to it are 0).
    """

    name = "binarize_cutoff"

    def fit(self, y: pd.Series) -> "CutoffBinarizer":
        self.median_ = float(y.median())
        return super().fit(y)

    def _apply(self, y: pd.Series) -> pd.Series:
        return (y > self.median_).astype(np.float64)


class CallableTransform(ResponseTransform):
    """
    User function vector -> vector; nothing to fit, applied as-is on each side.
    """

    def __init__(self, fn: ResponseFn):
        self.fn = fn
        self.name = getattr(fn, "__name__", "user-defined")

    def _apply(self, y: pd.Series) -> pd.Series:
        return self.fn(y)


_RESPONSE_TRANSFORMS: Dict[str, Type[ResponseTransform]] = {
    "power": PowerTransform,
    "log": LogTransform,
    "binarize_kmeans": KMeansBinarizer,
    "binarize_cutoff": CutoffBinarizer,
    "none": PassthroughTransform,
}

# names used by the R package
_ALIASES: Dict[str, str] = {
    "powertransform": "power",
    "logarithm": "log",
    "binarization_kmeans": "binarize_kmeans",
    "binarization_cutoff": "binarize_cutoff",
}


def available_response_transforms() -> List[str]:
    return list(_RESPONSE_TRANSFORMS)


def resolve_response_transform(transform) -> ResponseTransform:
    """
    name -> fresh unfitted transform, callable -> CallableTransform,
    ResponseTransform instance -> itself.
    """
    if isinstance(transform, ResponseTransform):
        return transform
    if callable(transform):
        return CallableTransform(transform)

    name = _ALIASES.get(transform, transform)
    if name not in _RESPONSE_TRANSFORMS:
        available = ", ".join(_RESPONSE_TRANSFORMS)
        raise UnknownStrategy(
            f"Unknown response transform {transform!r}. Available: {available}"
        )
    return _RESPONSE_TRANSFORMS[name]()


def align_response(out, y: pd.Series) -> pd.Series:
    """
    Transform output -> float Series on y's samples.

    A Series carrying y's sample ids is matched by label, anything else by
    position.
    """
    if (
            isinstance(out, pd.Series)
            and out.index.is_unique
            and y.index.isin(out.index).all()
    ):
        values = out.reindex(y.index).to_numpy(dtype=np.float64)
    else:
        values = np.asarray(out, dtype=np.float64).ravel()

    if values.shape[0] != y.shape[0]:
        raise DimensionMismatch(
            f"response transform returned {values.shape[0]} values for {y.shape[0]} samples"
        )
    return pd.Series(values, index=y.index, name=RESPONSE_COLUMN)


# ============================================================
# Engine
# ============================================================
class ResponseTransformEngine:
    """
    ResponseTransformEngine (FINAL)

    Contract:
    - fit_transform(train, drug, type, transform) -> (train', fitted)
    - apply(test, drug, type, fitted) -> test', with the train parameters
    - transform(state, ...) -> state' (fit and apply on the same state)
    - drug_response is a float Series named DrugResponse, indexed by
      sample id, in features.columns order
    """

    def fit_transform(
            self,
            state: PipelineState,
            drug_name: str,
            response_type: str,
            transform="none",
    ) -> Tuple[PipelineState, ResponseTransform]:
        fitted = resolve_response_transform(transform)

        extracted = extract_drug_response(state, drug_name, response_type)
        fitted.fit(extracted.drug_response.copy())

        return self._apply(extracted, fitted, drug_name, response_type), fitted

    def transform(
            self,
            state: PipelineState,
            drug_name: str,
            response_type: str,
            transform="none",
    ) -> PipelineState:
        new_state, _ = self.fit_transform(state, drug_name, response_type, transform)
        return new_state

    def apply(
            self,
            state: PipelineState,
            drug_name: str,
            response_type: str,
            fitted: ResponseTransform,
    ) -> PipelineState:
        extracted = extract_drug_response(state, drug_name, response_type)
        return self._apply(extracted, fitted, drug_name, response_type)

    @staticmethod
    def _apply(
            extracted: PipelineState,
            fitted: ResponseTransform,
            drug_name: str,
            response_type: str,
    ) -> PipelineState:
        y = extracted.drug_response
        response = align_response(fitted.apply(y.copy()), y)

        logs.info(
            f"[ResponseTransform] {extracted.kind} drug={drug_name} type={response_type} "
            f"transform={fitted.name} samples={len(response)}"
        )
        return extracted.replace(drug_response=response)
