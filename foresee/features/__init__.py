from .feature_transform_engine import FeatureTransformEngine, available_feature_transforms

__all__ = ["FeatureTransformEngine", "available_feature_transforms"]
