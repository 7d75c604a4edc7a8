# id3py/__init__.py
"""
id3py: ID3 decision trees for categorical data in pure Python.

Exports:
    - DecisionTreeModel
    - ID3Classifier
    - the ID3 building blocks (entropy, split_dataset, choose_best_feature,
      majority_label, build_tree, classify)
"""
from loguru import logger

from .exceptions import InvalidDatasetError, TreeStorageError
from .logging import PACKAGE_NAME, enable_logging
from .model import DecisionTreeModel
from .persistence import FileSink, MemorySink, TreeSink, dumps_tree, load_tree, loads_tree, store_tree
from .tree import (
    NO_FEATURE,
    ID3Classifier,
    Leaf,
    Node,
    SplitNode,
    build_tree,
    choose_best_feature,
    classify,
    entropy,
    information_gain,
    majority_label,
    split_dataset,
)

logger.disable(PACKAGE_NAME)

__all__ = [
    "NO_FEATURE",
    "DecisionTreeModel",
    "FileSink",
    "ID3Classifier",
    "InvalidDatasetError",
    "Leaf",
    "MemorySink",
    "Node",
    "SplitNode",
    "TreeSink",
    "TreeStorageError",
    "build_tree",
    "choose_best_feature",
    "classify",
    "dumps_tree",
    "enable_logging",
    "entropy",
    "information_gain",
    "load_tree",
    "loads_tree",
    "majority_label",
    "split_dataset",
    "store_tree",
]
__version__ = "0.1.0"
