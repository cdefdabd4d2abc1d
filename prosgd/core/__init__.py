"""
Core tuning logic.

Pair sampling, training-set construction, the logistic objective and the
update rules. Nothing here performs I/O.
"""
