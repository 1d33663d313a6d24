# foresee/features/physio.py
from __future__ import annotations

import numpy as np
from scipy.stats import mannwhitneyu

DEFAULT_GENES_RATIO = 0.05


def selected_gene_count(n_genes: int, genes_ratio: float = DEFAULT_GENES_RATIO) -> int:
    n = int(round(n_genes * genes_ratio))
    return max(1, min(n, n_genes // 2))


def physio_scores(
        inputs: np.ndarray,
        space: np.ndarray,
        genes_ratio: float = DEFAULT_GENES_RATIO,
) -> np.ndarray:
    """
    Similarity of each input sample to each reference sample.

    inputs : genes x n_inputs
    space  : genes x n_reference (same gene rows as inputs)

    For every input sample, its top and bottom `genes_ratio` genes are
    selected and each reference sample's values on those two gene sets are
    compared with a Mann-Whitney U test. The score is -log2(p), positive
    when the reference is high where the input is high.

    Returns n_reference x n_inputs.
    """
    inputs = np.asarray(inputs, dtype=np.float64)
    space = np.asarray(space, dtype=np.float64)

    if inputs.shape[0] != space.shape[0]:
        raise ValueError(
            f"inputs have {inputs.shape[0]} genes, reference has {space.shape[0]}"
        )

    n_genes = inputs.shape[0]
    n_sel = selected_gene_count(n_genes, genes_ratio)
    tiny = np.finfo(np.float64).tiny

    scores = np.zeros((space.shape[1], inputs.shape[1]), dtype=np.float64)
    for i in range(inputs.shape[1]):
        order = np.argsort(inputs[:, i], kind="stable")
        low, high = order[:n_sel], order[-n_sel:]

        res = mannwhitneyu(space[high, :], space[low, :], axis=0, alternative="two-sided")
        p = np.clip(np.asarray(res.pvalue, dtype=np.float64), tiny, 1.0)
        sign = np.sign(np.asarray(res.statistic, dtype=np.float64) - n_sel * n_sel / 2.0)

        scores[:, i] = sign * -np.log2(p)

    return scores
