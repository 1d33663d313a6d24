"""
Engines do the work; steps only orchestrate them.
"""
