"""
Gradient computation over sampled PRO evidence.
"""

from .gradient import GradientEngine

__all__ = ["GradientEngine"]
