# -*- coding: utf-8 -*-
"""
id3py.tree
==========

This module implements Quinlan's ID3 decision tree induction for discrete
(categorical) attributes.  Splits are chosen by information gain, i.e. the
reduction in Shannon entropy of the class labels obtained by partitioning the
training examples on every observed value of one attribute.

A dataset is a sequence of examples; each example holds the attribute values
followed by a trailing class label.  Attribute values and labels are opaque
atoms (``int``, ``float`` or ``str``) compared by equality only, so no numeric
ordering is ever assumed.

The tree itself is an explicit sum type: a :class:`Leaf` holding a class label
or a :class:`SplitNode` naming an attribute and mapping each value observed
for it during training to a child node.  Both are frozen, so a built tree can
be shared and queried concurrently.

Besides the functional core (:func:`entropy`, :func:`split_dataset`,
:func:`choose_best_feature`, :func:`majority_label`, :func:`build_tree` and
:func:`classify`) the module provides :class:`ID3Classifier`, a
scikit‑learn–like estimator with rule export, pretty printing and Graphviz
export.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Sequence, Tuple, Union

import numpy as np
from loguru import logger
from sklearn.base import BaseEstimator, ClassifierMixin

from id3py.exceptions import InvalidDatasetError

Value = Union[int, float, str]

#: Returned by :func:`choose_best_feature` when no attribute has positive gain.
NO_FEATURE = -1


# -----------------------------------------------------------------------------
# Nodes
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Leaf:
    """Terminal node predicting a single class label."""

    label: Value


@dataclass(frozen=True)
class SplitNode:
    """Internal node splitting on one attribute.

    Attributes
    ----------
    feature : str
        Name of the attribute tested at this node.
    children : Mapping
        Read-only mapping ``{value: Node}`` with one entry per value observed
        for ``feature`` in the training subset that reached this node, in
        first-seen order.
    """

    feature: str
    children: Mapping[Value, "Node"] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "children", MappingProxyType(dict(self.children)))

    def __hash__(self):
        return hash((self.feature, tuple(self.children.items())))

    def __reduce__(self):
        # the read-only proxy cannot be pickled; rebuild from a plain dict
        return (SplitNode, (self.feature, dict(self.children)))


Node = Union[Leaf, SplitNode]
Rule = Tuple[Tuple[Tuple[str, Value], ...], Value]


# -----------------------------------------------------------------------------
# Validation helpers
# -----------------------------------------------------------------------------
def check_value(v) -> Value:
    """Return ``v`` as a plain int, float or str, or raise :class:`InvalidDatasetError`."""
    if isinstance(v, np.generic):
        v = v.item()
    if isinstance(v, str):
        return v
    # True and 1 are the same dict key
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        if isinstance(v, float) and not math.isfinite(v):
            raise InvalidDatasetError(f"unsupported value {v!r}: NaN and infinities are not allowed")
        return v
    raise InvalidDatasetError(
        f"unsupported value {v!r} of type {type(v).__name__}; expected int, float or str"
    )


def check_dataset(dataset) -> list[list[Value]]:
    """Validate a training dataset and return it as a list of plain lists."""
    if isinstance(dataset, np.ndarray):
        dataset = dataset.tolist()
    rows = [list(example) for example in dataset]
    if not rows:
        raise InvalidDatasetError("dataset must contain at least one example")
    arity = len(rows[0])
    if arity < 1:
        raise InvalidDatasetError("examples must hold at least the class label")
    for i, row in enumerate(rows):
        if len(row) != arity:
            raise InvalidDatasetError(
                f"example {i} has {len(row)} values, expected {arity} like the first example"
            )
    return [[check_value(v) for v in row] for row in rows]


def check_feature_labels(feature_labels, n_features: int) -> list[str]:
    names = list(feature_labels)
    if len(names) != n_features:
        raise InvalidDatasetError(
            f"got {len(names)} feature labels for {n_features} attribute columns"
        )
    for name in names:
        if not isinstance(name, str):
            raise InvalidDatasetError(f"feature labels must be strings, got {name!r}")
    if len(set(names)) != len(names):
        raise InvalidDatasetError(f"feature labels must be unique, got {names}")
    return names


# -----------------------------------------------------------------------------
# ID3 core
# -----------------------------------------------------------------------------
def entropy(dataset: Sequence[Sequence[Value]]) -> float:
    """Shannon entropy (in bits) of the trailing class labels of ``dataset``."""
    n = len(dataset)
    if n == 0:
        raise InvalidDatasetError("entropy is undefined for an empty dataset")
    counts = Counter(example[-1] for example in dataset)
    p = np.fromiter(counts.values(), dtype=float, count=len(counts)) / n
    return float(-np.sum(p * np.log2(p)))


def split_dataset(dataset: Sequence[Sequence[Value]], axis: int, value: Value) -> list[list[Value]]:
    """
    Return the examples whose attribute ``axis`` equals ``value``.

    The column ``axis`` is removed from every returned example; the remaining
    values and the trailing label keep their order.  The result is a new list
    and may be empty when nothing matches.
    """
    return [list(example[:axis]) + list(example[axis + 1:])
            for example in dataset if example[axis] == value]


def _distinct(values) -> list[Value]:
    # first-seen order
    return list(dict.fromkeys(values))


def information_gain(dataset: Sequence[Sequence[Value]], axis: int) -> float:
    """Entropy reduction obtained by splitting ``dataset`` on column ``axis``."""
    n = len(dataset)
    base = entropy(dataset)
    expected = 0.0
    for v in _distinct(example[axis] for example in dataset):
        subset = split_dataset(dataset, axis, v)
        expected += len(subset) / n * entropy(subset)
    return base - expected


def choose_best_feature(dataset: Sequence[Sequence[Value]]) -> int:
    """
    Select the attribute column with the greatest information gain.

    Parameters
    ----------
    dataset : sequence of examples
        Non-empty training subset; every example ends with its class label.

    Returns
    -------
    int
        Index of the winning column.  Ties keep the lowest index.  Only gains
        strictly above ``0.0`` qualify; when no column qualifies
        :data:`NO_FEATURE` is returned and the caller should fall back to a
        majority vote.
    """
    n_features = len(dataset[0]) - 1
    best_gain, best_feat = 0.0, NO_FEATURE
    for j in range(n_features):
        gain = information_gain(dataset, j)
        if gain > best_gain:
            best_gain, best_feat = gain, j
    return best_feat


def majority_label(labels: Sequence[Value]) -> Value:
    """
    Most frequent label in ``labels``.

    Ties are broken in favour of the label encountered first in ``labels``.
    """
    if len(labels) == 0:
        raise ValueError("majority_label requires at least one label")
    counts = Counter(labels)
    # Counter keeps insertion order and max() returns the first maximum
    return max(counts, key=counts.__getitem__)


def build_tree(dataset: Sequence[Sequence[Value]], feature_labels: Sequence[str]) -> Node:
    """
    Induce an ID3 decision tree.

    Parameters
    ----------
    dataset : sequence of examples
        Training examples, each made of attribute values followed by the class
        label.  Must be non-empty and rectangular.
    feature_labels : sequence of str
        Attribute names, parallel to the attribute columns of ``dataset``.
        The sequence is copied; the caller's object is never modified.

    Returns
    -------
    Leaf or SplitNode
        Root of the tree.  Its depth never exceeds the number of attributes.

    Raises
    ------
    InvalidDatasetError
        If the dataset is empty, ragged, holds unsupported values or does not
        match ``feature_labels``.
    """
    rows = check_dataset(dataset)
    names = check_feature_labels(feature_labels, len(rows[0]) - 1)
    return _build(rows, tuple(names), depth=0)


def _build(dataset: list[list[Value]], feature_labels: tuple[str, ...], depth: int) -> Node:
    class_list = [example[-1] for example in dataset]
    if len(set(class_list)) == 1:
        return Leaf(class_list[0])
    if len(dataset[0]) == 1:
        label = majority_label(class_list)
        logger.debug("Attributes exhausted at depth {}, majority leaf {!r}", depth, label)
        return Leaf(label)

    best_feat = choose_best_feature(dataset)
    if best_feat == NO_FEATURE:
        label = majority_label(class_list)
        logger.debug("No informative attribute at depth {}, majority leaf {!r}", depth, label)
        return Leaf(label)

    feature = feature_labels[best_feat]
    sub_labels = feature_labels[:best_feat] + feature_labels[best_feat + 1:]
    values = _distinct(example[best_feat] for example in dataset)
    logger.debug("Split on {!r} at depth {} over {} values", feature, depth, len(values))
    children = {}
    for v in values:
        children[v] = _build(split_dataset(dataset, best_feat, v), sub_labels, depth + 1)
    return SplitNode(feature, children)


def classify(tree: Node, feature_labels: Sequence[str], example: Sequence[Value]) -> Value | None:
    """
    Predict the class of ``example`` by walking ``tree``.

    Parameters
    ----------
    tree : Leaf or SplitNode
        A tree produced by :func:`build_tree` or loaded from storage.
    feature_labels : sequence of str
        Attribute names giving the position of each attribute in ``example``.
    example : sequence
        Attribute values of the query, without a class label.

    Returns
    -------
    label or None
        The predicted label, or ``None`` when the example holds a value that
        was never observed at some decision node during training.

    Raises
    ------
    ValueError
        If a split attribute is absent from ``feature_labels`` or ``example``
        is too short to hold it.
    """
    names = list(feature_labels)
    node = tree
    while isinstance(node, SplitNode):
        try:
            axis = names.index(node.feature)
        except ValueError:
            raise ValueError(f"feature {node.feature!r} is not in feature_labels {names}") from None
        if axis >= len(example):
            raise ValueError(
                f"example has {len(example)} values but feature {node.feature!r} is at position {axis}"
            )
        child = node.children.get(example[axis])
        if child is None:
            return None
        node = child
    return node.label


# -----------------------------------------------------------------------------
# Inspection
# -----------------------------------------------------------------------------
def tree_depth(tree: Node) -> int:
    """Number of split nodes on the longest root-to-leaf path."""
    if isinstance(tree, Leaf):
        return 0
    return 1 + max(tree_depth(child) for child in tree.children.values())


def count_leaves(tree: Node) -> int:
    if isinstance(tree, Leaf):
        return 1
    return sum(count_leaves(child) for child in tree.children.values())


def iter_rules(tree: Node, conditions: tuple = ()) -> Iterator[Rule]:
    """Yield ``(conditions, label)`` for every leaf, left to right."""
    if isinstance(tree, Leaf):
        yield conditions, tree.label
        return
    for v, child in tree.children.items():
        yield from iter_rules(child, conditions + ((tree.feature, v),))


def format_rule(rule: Rule) -> str:
    conditions, label = rule
    body = " AND ".join(f"{name} = {v!r}" for name, v in conditions) if conditions else "<root>"
    return f"{body} => {label!r}"


def render_tree(tree: Node, indent: str = "") -> Iterator[str]:
    if isinstance(tree, Leaf):
        yield f"{indent}Predict {tree.label!r}"
        return
    for v, child in tree.children.items():
        yield f"{indent}{tree.feature} = {v!r}:"
        yield from render_tree(child, indent + "  ")


def _add_graph_nodes(dot, node: Node, name: str):
    if isinstance(node, Leaf):
        dot.node(name, f"class={node.label}", shape="box", style="filled", color="lightgrey")
        return
    dot.node(name, node.feature, shape="ellipse", style="filled", color="lightblue")
    for i, (v, child) in enumerate(node.children.items()):
        child_id = f"{name}_{i}"
        _add_graph_nodes(dot, child, child_id)
        dot.edge(name, child_id, label=str(v))


# -----------------------------------------------------------------------------
# Classifier
# -----------------------------------------------------------------------------
class ID3Classifier(BaseEstimator, ClassifierMixin):
    """
    ID3 decision tree classifier for categorical attributes.

    Every column of ``X`` is treated as a discrete attribute; each internal
    node branches once per value observed in training.  Splits maximise
    information gain, and nodes where no attribute is informative become
    majority-vote leaves.  There is no pruning.

    Parameters
    ----------
    feature_names : list[str] or None, default=None
        Names of the columns of ``X``.  If ``None`` the names ``f0``,
        ``f1``, ... are used.  Names passed to :meth:`fit` take precedence.
    fallback_label : object, default=None
        Prediction returned for rows holding a value never seen at some
        decision node during training.
    verbose : int, default=0
        When positive, a summary of the fitted tree is logged at INFO level.

    Attributes
    ----------
    tree_ : Leaf or SplitNode
        Root of the fitted tree.
    classes_ : ndarray
        Class labels in first-seen order.
    feature_names_ : list[str]
        Column names used by the fitted tree.
    n_features_ : int
        Number of attribute columns seen during :meth:`fit`.
    """

    def __init__(self, *, feature_names: list[str] | None = None,
                 fallback_label: Any = None, verbose: int = 0):
        self.feature_names = feature_names
        self.fallback_label = fallback_label
        self.verbose = int(verbose)

    def fit(self, X, y, feature_names=None):
        X = np.asarray(X, dtype=object)
        y = np.asarray(y, dtype=object)
        if X.ndim != 2:
            raise InvalidDatasetError("X must be a 2-D array-like of shape (n_samples, n_features)")
        if len(X) != len(y):
            raise InvalidDatasetError("X and y must have the same number of samples")

        n_features = X.shape[1]
        names = feature_names if feature_names is not None else self.feature_names
        if names is None:
            names = [f"f{i}" for i in range(n_features)]

        dataset = [list(row) + [label] for row, label in zip(X.tolist(), y.tolist())]
        self.tree_ = build_tree(dataset, names)
        self.feature_names_ = list(names)
        self.n_features_ = n_features
        self.classes_ = np.array(_distinct(check_value(v) for v in y.tolist()), dtype=object)
        if self.verbose > 0:
            logger.info("Fitted ID3 tree: depth={}, leaves={}, classes={}",
                        tree_depth(self.tree_), count_leaves(self.tree_), len(self.classes_))
        return self

    def _check_fitted(self):
        if getattr(self, "tree_", None) is None:
            raise ValueError("Estimator not fitted. Call fit(...) first.")

    def predict(self, X):
        """
        Predict class labels for the provided samples.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Input samples.

        Returns
        -------
        ndarray of shape (n_samples,)
            Predicted labels; rows that cannot be classified receive
            ``fallback_label``.  The array has object dtype when the labels
            are of mixed types.

        Raises
        ------
        ValueError
            If the estimator has not been fitted.
        """
        self._check_fitted()
        X = np.asarray(X, dtype=object)
        preds = []
        for x in X.tolist():
            label = classify(self.tree_, self.feature_names_, x)
            preds.append(self.fallback_label if label is None else label)
        if len({type(p) for p in preds}) > 1:
            # numpy would coerce mixed label types to one dtype, e.g. 0 -> '0'
            return np.array(preds, dtype=object)
        return np.array(preds)

    def export_rules(self) -> list[str]:
        """
        Export every root-to-leaf path as ``<antecedent> => <class>``.

        The antecedent is a conjunction of ``feature = value`` tests; a tree
        consisting of a single leaf yields ``<root> => <class>``.
        """
        self._check_fitted()
        return [format_rule(rule) for rule in iter_rules(self.tree_)]

    def print_tree(self):
        """Pretty‑print the decision tree to ``stdout``."""
        self._check_fitted()
        for line in render_tree(self.tree_):
            print(line)

    def export_graphviz(self, filename: str | None = None, *, format: str = "png") -> str:
        """
        Export the tree structure in Graphviz format.

        Parameters
        ----------
        filename : str or None, default=None
            Basename of the output file.  If None, the DOT source is returned
            and nothing is written.
        format : str, default="png"
            Graphviz output format.  ``'dot'`` writes the DOT source directly
            and does not need the external ``dot`` binary.

        Returns
        -------
        str
            Path to the written file, or the DOT source if filename is None.
        """
        self._check_fitted()
        try:
            import graphviz
        except ImportError:
            raise RuntimeError("Graphviz is required for export_graphviz but not installed.")
        dot = graphviz.Digraph(format=format)
        _add_graph_nodes(dot, self.tree_, "n")

        if filename is None:
            return dot.source
        if format.lower() == "dot":
            path = f"{filename}.dot"
            dot.save(path)
            return path
        try:
            dot.render(filename, cleanup=True)
            return f"{filename}.{format}"
        except graphviz.ExecutableNotFound:
            # no dot binary: fall back to the DOT source
            fallback_path = f"{filename}.dot"
            dot.save(fallback_path)
            return fallback_path
