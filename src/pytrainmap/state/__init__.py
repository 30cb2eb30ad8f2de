"""State/store layer.

Stores owned by :class:`pytrainmap.engine.TrainmapEngine`.  Each store is
the only component allowed to mutate its slice of state; all of them use
full-replace or two-sample-window semantics, never incremental merges.
"""
