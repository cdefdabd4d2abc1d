"""
Online tuning loop driving the PRO-SGD optimizer.
"""

from .online_tuner import OnlineTuner, OnlineTunerConfig, TuningResult

__all__ = ["OnlineTuner", "OnlineTunerConfig", "TuningResult"]
