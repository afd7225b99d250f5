"""
Concrete, NumPy-backed implementations of the layerkit domain contracts.
"""
