from typing import Any, Dict, List, Type

from foresee.config.training_config import TrainingConfig
from foresee.training.engines.model_train_engine import ModelTrainEngine
from foresee.training.engines.model.callable_train_engine import (
    CallableTrainEngine,
    EstimatorTrainEngine,
)
from foresee.training.engines.model.forest_train_engine import (
    RandomForestTrainEngine,
    RangerTrainEngine,
)
from foresee.training.engines.model.sklearn_regression_train_engine import (
    ElasticNetTrainEngine,
    LassoTrainEngine,
    LinearTrainEngine,
    RidgeTrainEngine,
    SVMTrainEngine,
)
from foresee.training.engines.model.tandem_train_engine import TandemTrainEngine
from foresee.utils.errors import UnknownStrategy

_ENGINE_REGISTRY: Dict[str, Type[ModelTrainEngine]] = {
    "linear": LinearTrainEngine,
    "ridge": RidgeTrainEngine,
    "lasso": LassoTrainEngine,
    "elasticnet": ElasticNetTrainEngine,
    "svm": SVMTrainEngine,
    "rf": RandomForestTrainEngine,
    "rf_ranger": RangerTrainEngine,
    "tandem": TandemTrainEngine,
}


def available_engines() -> List[str]:
    return list(_ENGINE_REGISTRY)


def resolve_model_train_engine(
        strategy: Any, *, cfg: TrainingConfig | None = None, seed: int | None = None
) -> ModelTrainEngine:
    """
    str        -> registered engine
    estimator  -> EstimatorTrainEngine (object with fit, cloned per call)
    callable   -> CallableTrainEngine (fn(X, y) -> model)

    seed becomes the default random_state of seeded engines.
    """
    if isinstance(strategy, str):
        if strategy not in _ENGINE_REGISTRY:
            available = ", ".join(_ENGINE_REGISTRY)
            raise UnknownStrategy(
                f"No ModelTrainEngine for {strategy!r}. Available: {available}"
            )
        return _ENGINE_REGISTRY[strategy](cfg, seed=seed)

    if isinstance(strategy, type) and hasattr(strategy, "fit"):
        return EstimatorTrainEngine(strategy(), cfg=cfg, seed=seed)

    if hasattr(strategy, "fit"):
        return EstimatorTrainEngine(strategy, cfg=cfg, seed=seed)

    if callable(strategy):
        return CallableTrainEngine(strategy, cfg=cfg, seed=seed)

    raise UnknownStrategy(
        f"strategy must be a name, an estimator or a callable, got {type(strategy).__name__}"
    )
