"""
id3py.model
===========

:class:`DecisionTreeModel` bundles a training dataset, its feature labels and
the ID3 tree built from them.  The tree is built once, when the model is
constructed, and never changes afterwards.  Storage is delegated to a sink
(see :mod:`id3py.persistence`) so the model does not depend on any concrete
medium.
"""

from __future__ import annotations

from typing import Sequence

from loguru import logger

from id3py.persistence import FileSink, TreeSink, load_tree, store_tree
from id3py.tree import (
    Node,
    Value,
    build_tree,
    check_dataset,
    check_feature_labels,
    classify,
    count_leaves,
    format_rule,
    iter_rules,
    tree_depth,
)


class DecisionTreeModel:
    """
    ID3 decision tree trained on construction.

    Parameters
    ----------
    dataset : sequence of examples
        Training examples: attribute values followed by the class label.
    feature_labels : sequence of str
        Names of the attribute columns.  The model keeps its own copy.
    sink : TreeSink or None, default=None
        Storage used by :meth:`store_tree` and :meth:`load_tree`.  Defaults to
        a :class:`~id3py.persistence.FileSink`.

    Raises
    ------
    InvalidDatasetError
        If the dataset is empty, ragged, holds unsupported values or does not
        match ``feature_labels``.
    """

    def __init__(self, dataset, feature_labels: Sequence[str], *, sink: TreeSink | None = None):
        rows = check_dataset(dataset)
        names = check_feature_labels(feature_labels, len(rows[0]) - 1)
        self._dataset = rows
        self._feature_labels = tuple(names)
        self.sink = sink if sink is not None else FileSink()
        self._tree = build_tree(rows, self._feature_labels)
        logger.info("Built ID3 tree from {} examples and {} features: depth={}, leaves={}",
                    len(rows), len(names), tree_depth(self._tree), count_leaves(self._tree))

    @classmethod
    def build(cls, dataset, feature_labels: Sequence[str], *, sink: TreeSink | None = None) -> DecisionTreeModel:
        """Construct and train a model in one step."""
        return cls(dataset, feature_labels, sink=sink)

    @property
    def tree(self) -> Node:
        return self._tree

    def get_tree(self) -> Node:
        """Return the trained tree."""
        return self._tree

    @property
    def dataset(self) -> list[list[Value]]:
        """Copy of the training examples."""
        return [list(row) for row in self._dataset]

    @property
    def feature_labels(self) -> list[str]:
        return list(self._feature_labels)

    @property
    def depth(self) -> int:
        return tree_depth(self._tree)

    @property
    def n_leaves(self) -> int:
        return count_leaves(self._tree)

    def classify(self, feature_labels: Sequence[str], example: Sequence[Value]) -> Value | None:
        """
        Predict the class of ``example`` with this model's tree.

        Returns ``None`` when the example holds a value never seen at some
        decision node during training.
        """
        label = classify(self._tree, feature_labels, example)
        if label is None:
            logger.warning("Example {!r} is unclassifiable: it holds a value unseen in training", list(example))
        return label

    @staticmethod
    def classify_with_tree(tree: Node, feature_labels: Sequence[str], example: Sequence[Value]) -> Value | None:
        """Classify ``example`` against any tree, e.g. one read back with :meth:`load_tree`."""
        return classify(tree, feature_labels, example)

    def store_tree(self, destination: str, sink: TreeSink | None = None) -> str:
        """
        Serialize the tree and write it to ``destination``.

        Parameters
        ----------
        destination : str
            Location understood by the sink, e.g. a file path.
        sink : TreeSink or None, default=None
            Overrides the sink given at construction for this call.

        Returns
        -------
        str
            ``destination``, once the write succeeded.

        Raises
        ------
        TreeStorageError
            If the sink failed.  The model and its tree remain usable.
        """
        store_tree(self._tree, destination, sink if sink is not None else self.sink)
        logger.info("Stored ID3 tree at {}", destination)
        return destination

    def load_tree(self, source: str, sink: TreeSink | None = None) -> Node:
        """Read back a tree written by :meth:`store_tree`; the model's own tree is untouched."""
        return load_tree(source, sink if sink is not None else self.sink)

    def export_rules(self) -> list[str]:
        """One ``<antecedent> => <class>`` string per leaf."""
        return [format_rule(rule) for rule in iter_rules(self._tree)]

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(n_examples={len(self._dataset)}, "
                f"features={list(self._feature_labels)!r}, depth={self.depth})")
