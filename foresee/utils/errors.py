# foresee/utils/errors.py
class UserInputError(RuntimeError):
    """
    Raised for invalid caller-provided input (strategy names, fold counts,
    drug names, mismatched matrices).

    Raised before any state is produced, so the caller's state is unchanged.
    """


class UnknownStrategy(UserInputError):
    """Strategy / transform name is not registered for the component."""


class InvalidFoldCount(UserInputError):
    """Fold count is not an integer in [1, n_samples]."""


class UnknownDrug(UserInputError):
    """Drug has no rows in the response table."""


class UnknownResponseType(UserInputError):
    """Response type is not a column of the response table."""


class MissingFeatureGroup(UserInputError):
    """Tandem needs both upstream and downstream (GeneExpression) features."""


class DimensionMismatch(UserInputError):
    """Sample or feature dimensions disagree between matrices."""
