#!filepath: foresee/pipeline/state.py
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Literal, Optional, Sequence

import numpy as np
import pandas as pd

from foresee.utils.errors import DimensionMismatch

RESPONSE_COLUMN = "DrugResponse"
GENE_EXPRESSION = "GeneExpression"


@dataclass(frozen=True)
class PipelineState:
    """
    PipelineState (FINAL / FROZEN)

    One train or test object flowing through the stages.

    Layout:
    - features       : DataFrame, rows = feature ids, columns = sample ids
    - feature_types  : Series, feature id -> source tag ("GeneExpression", "Mutation", ...)
    - drug_response  : Series, sample id -> response, same order as features.columns
    - response_data  : long table [drug, sample, <response types...>] from the loader
    - train_frame    : samples x features + DrugResponse, built right before fitting
    - upstream_index : Series, feature id -> upstream flag (tandem only)

    Rules:
    - features.columns order defines sample alignment everywhere
    - stages never mutate a state, they return a new one via replace()
    """

    features: pd.DataFrame
    feature_types: Optional[pd.Series] = None
    drug_response: Optional[pd.Series] = None
    response_data: Optional[pd.DataFrame] = None
    train_frame: Optional[pd.DataFrame] = None
    upstream_index: Optional[pd.Series] = None
    kind: Literal["train", "test"] = "train"
    name: str = ""

    def __post_init__(self):
        if not isinstance(self.features, pd.DataFrame):
            raise TypeError(
                f"features must be a pandas DataFrame, got {type(self.features).__name__}"
            )

        if self.feature_types is None:
            object.__setattr__(
                self,
                "feature_types",
                pd.Series(GENE_EXPRESSION, index=self.features.index, dtype=object),
            )
        elif len(self.feature_types) != self.features.shape[0]:
            raise DimensionMismatch(
                f"feature_types has {len(self.feature_types)} entries "
                f"but features has {self.features.shape[0]} rows"
            )

        if self.drug_response is not None and len(self.drug_response) != self.n_samples:
            raise DimensionMismatch(
                f"drug_response has {len(self.drug_response)} entries "
                f"but features has {self.n_samples} samples"
            )

    # --------------------------------------------------
    # shape
    # --------------------------------------------------
    @property
    def n_samples(self) -> int:
        return int(self.features.shape[1])

    @property
    def n_features(self) -> int:
        return int(self.features.shape[0])

    @property
    def sample_ids(self) -> pd.Index:
        return self.features.columns

    # --------------------------------------------------
    # snapshots
    # --------------------------------------------------
    def replace(self, **changes) -> "PipelineState":
        return dataclasses.replace(self, **changes)

    def copy(self) -> "PipelineState":
        """
        Deep snapshot: no frame is shared with self.
        """
        return PipelineState(
            features=self.features.copy(),
            feature_types=self.feature_types.copy(),
            drug_response=None if self.drug_response is None else self.drug_response.copy(),
            response_data=None if self.response_data is None else self.response_data.copy(),
            train_frame=None if self.train_frame is None else self.train_frame.copy(),
            upstream_index=None if self.upstream_index is None else self.upstream_index.copy(),
            kind=self.kind,
            name=self.name,
        )

    def subset_samples(
        self,
        positions: Sequence[int] | np.ndarray,
        *,
        kind: Literal["train", "test"] | None = None,
    ) -> "PipelineState":
        """
        Private snapshot restricted to the given sample positions.

        The train frame is dropped since it no longer matches the samples.
        """
        positions = np.asarray(positions, dtype=np.int64)

        features = self.features.iloc[:, positions].copy()
        response = None
        if self.drug_response is not None:
            response = self.drug_response.iloc[positions].copy()

        return PipelineState(
            features=features,
            feature_types=self.feature_types.copy(),
            drug_response=response,
            response_data=self.response_data,
            train_frame=None,
            upstream_index=None if self.upstream_index is None else self.upstream_index.copy(),
            kind=self.kind if kind is None else kind,
            name=self.name,
        )

    # --------------------------------------------------
    # design matrices
    # --------------------------------------------------
    def sample_frame(self) -> pd.DataFrame:
        """
        samples x features, duplicated feature / sample ids collapsed keep-first.

        Column names are strings so estimators record consistent feature names.
        """
        frame = self.features.T.astype(np.float64)
        frame.columns = frame.columns.astype(str)
        frame = frame.loc[:, ~frame.columns.duplicated(keep="first")]
        frame = frame.loc[~frame.index.duplicated(keep="first")]
        return frame

    def feature_types_for(self, columns: pd.Index) -> pd.Series:
        """
        Tags aligned to (string) feature columns of sample_frame(), keep-first.
        """
        tags = self.feature_types.copy()
        tags.index = tags.index.astype(str)
        tags = tags[~tags.index.duplicated(keep="first")]
        return tags.reindex(columns)
