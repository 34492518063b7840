"""
pasta - Record clustering runner.

Learn cluster centroids from CSV records over repeated rounds.
"""

from pasta.learn import LearnSettings, Model, learn
from pasta.records import RecordSet, load_records

__version__ = "0.1.0"
__all__ = ["LearnSettings", "Model", "RecordSet", "learn", "load_records", "__version__"]
