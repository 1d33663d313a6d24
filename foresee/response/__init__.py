from .response_transform_engine import (
    ResponseTransformEngine,
    available_response_transforms,
    extract_drug_response,
)

__all__ = ["ResponseTransformEngine", "available_response_transforms", "extract_drug_response"]
