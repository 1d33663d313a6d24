# foresee/registry.py
from __future__ import annotations

from typing import Callable, Dict, List

from foresee.features.feature_transform_engine import available_feature_transforms
from foresee.response.response_transform_engine import available_response_transforms
from foresee.training.engines.registry import available_engines
from foresee.utils.errors import UnknownStrategy

_COMPONENTS: Dict[str, Callable[[], List[str]]] = {
    "trainer": available_engines,
    "response_transform": available_response_transforms,
    "feature_transform": available_feature_transforms,
}

# component names of the R package
_COMPONENT_ALIASES: Dict[str, str] = {
    "BlackBoxFilter": "trainer",
    "CellResponseProcessor": "response_transform",
    "FeaturePreprocessor": "feature_transform",
}


def list_strategies(component: str) -> List[str]:
    """
    Registered strategy names of one pipeline component, in registration order.
    """
    key = _COMPONENT_ALIASES.get(component, component)
    if key not in _COMPONENTS:
        available = ", ".join(list(_COMPONENTS) + list(_COMPONENT_ALIASES))
        raise UnknownStrategy(f"Unknown component {component!r}. Available: {available}")
    return _COMPONENTS[key]()
