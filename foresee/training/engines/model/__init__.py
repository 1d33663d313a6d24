"""
Concrete ModelTrainEngine implementations.

Callers go through foresee.training.engines.registry; strategy names are
never matched in code outside the registry table.
"""
