import copy
import math
import pickle

import numpy as np
import pytest
from id3py import (
    NO_FEATURE,
    InvalidDatasetError,
    Leaf,
    SplitNode,
    build_tree,
    choose_best_feature,
    classify,
    entropy,
    information_gain,
    majority_label,
    split_dataset,
)


def _fish_dataset():
    """Return the classic 'is it a fish?' toy set and its feature labels."""
    dataset = [[1, 1, 'yes'], [1, 1, 'yes'], [1, 0, 'no'], [0, 1, 'no'], [0, 1, 'no']]
    labels = ['no-surfacing', 'flippers']
    return dataset, labels


def _weather_dataset():
    """Quinlan's play-tennis data with string values throughout."""
    rows = [
        ('sunny', 'hot', 'high', 'weak', 'no'),
        ('sunny', 'hot', 'high', 'strong', 'no'),
        ('overcast', 'hot', 'high', 'weak', 'yes'),
        ('rain', 'mild', 'high', 'weak', 'yes'),
        ('rain', 'cool', 'normal', 'weak', 'yes'),
        ('rain', 'cool', 'normal', 'strong', 'no'),
        ('overcast', 'cool', 'normal', 'strong', 'yes'),
        ('sunny', 'mild', 'high', 'weak', 'no'),
        ('sunny', 'cool', 'normal', 'weak', 'yes'),
        ('rain', 'mild', 'normal', 'weak', 'yes'),
        ('sunny', 'mild', 'normal', 'strong', 'yes'),
        ('overcast', 'mild', 'high', 'strong', 'yes'),
        ('overcast', 'hot', 'normal', 'weak', 'yes'),
        ('rain', 'mild', 'high', 'strong', 'no'),
    ]
    return [list(r) for r in rows], ['outlook', 'temperature', 'humidity', 'wind']


def test_entropy_pure_is_zero():
    assert entropy([[1, 'a'], [0, 'a'], [1, 'a']]) == 0
    assert entropy([['x', 7]]) == 0


def test_entropy_balanced_two_labels_is_one():
    assert entropy([[1, 'yes'], [0, 'no']]) == 1.0
    assert entropy([[1, 'yes'], [1, 'yes'], [0, 'no'], [0, 'no']]) == 1.0


def test_entropy_fish_dataset():
    dataset, _ = _fish_dataset()
    expected = -(0.4 * math.log2(0.4) + 0.6 * math.log2(0.6))
    assert entropy(dataset) == pytest.approx(expected)


def test_entropy_empty_dataset_rejected():
    with pytest.raises(InvalidDatasetError):
        entropy([])


def test_split_dataset_removes_column_and_keeps_matches():
    dataset, _ = _fish_dataset()
    assert split_dataset(dataset, 0, 1) == [[1, 'yes'], [1, 'yes'], [0, 'no']]
    assert split_dataset(dataset, 0, 0) == [[1, 'no'], [1, 'no']]
    assert split_dataset(dataset, 1, 0) == [[1, 'no']]


def test_split_dataset_properties_on_every_column():
    dataset, _ = _weather_dataset()
    for axis in range(4):
        for value in {row[axis] for row in dataset}:
            subset = split_dataset(dataset, axis, value)
            originals = [row for row in dataset if row[axis] == value]
            assert len(subset) == len(originals)
            for reduced, original in zip(subset, originals):
                # column removed, everything else in order
                assert len(reduced) == len(original) - 1
                assert reduced == original[:axis] + original[axis + 1:]


def test_split_dataset_does_not_alias_input():
    dataset, _ = _fish_dataset()
    subset = split_dataset(dataset, 0, 1)
    subset[0][0] = 99
    assert dataset[0] == [1, 1, 'yes']


def test_split_dataset_no_match_is_empty():
    dataset, _ = _fish_dataset()
    assert split_dataset(dataset, 0, 'missing') == []


def test_information_gain_never_negative():
    for dataset, _ in (_fish_dataset(), _weather_dataset()):
        for axis in range(len(dataset[0]) - 1):
            assert information_gain(dataset, axis) >= -1e-12


def test_choose_best_feature_fish():
    dataset, _ = _fish_dataset()
    assert choose_best_feature(dataset) == 0


def test_choose_best_feature_weather_picks_outlook():
    dataset, _ = _weather_dataset()
    assert choose_best_feature(dataset) == 0


def test_choose_best_feature_tie_keeps_lowest_index():
    # both columns separate the labels perfectly
    dataset = [['a', 'x', 'yes'], ['b', 'y', 'no']]
    assert choose_best_feature(dataset) == 0


def test_choose_best_feature_none_found():
    # identical attributes, different labels: no column helps
    dataset = [[1, 'p', 'yes'], [1, 'p', 'no']]
    assert choose_best_feature(dataset) == NO_FEATURE
    # no attribute columns at all
    assert choose_best_feature([['yes'], ['no']]) == NO_FEATURE


def test_majority_label_counts():
    assert majority_label(['a', 'b', 'b', 'c']) == 'b'
    assert majority_label([3, 1, 3]) == 3


def test_majority_label_tie_keeps_first_seen():
    assert majority_label(['b', 'a', 'a', 'b']) == 'b'
    assert majority_label(['a', 'b']) == 'a'


def test_majority_label_empty_raises():
    with pytest.raises(ValueError):
        majority_label([])


def test_build_tree_fish_structure():
    dataset, labels = _fish_dataset()
    tree = build_tree(dataset, labels)
    assert isinstance(tree, SplitNode)
    assert tree.feature == 'no-surfacing'
    assert tree.children[0] == Leaf('no')
    assert tree.children[1] == SplitNode('flippers', {1: Leaf('yes'), 0: Leaf('no')})


def test_build_tree_does_not_mutate_inputs():
    dataset, labels = _fish_dataset()
    build_tree(dataset, labels)
    assert labels == ['no-surfacing', 'flippers']
    assert dataset == _fish_dataset()[0]


def test_build_tree_pure_dataset_is_leaf():
    assert build_tree([[1, 'yes'], [0, 'yes']], ['a']) == Leaf('yes')


def test_build_tree_single_attribute_falls_back_to_majority():
    # the attribute cannot separate the labels; recursion must stop
    dataset = [[1, 'a'], [1, 'b'], [1, 'b']]
    assert build_tree(dataset, ['only']) == Leaf('b')


def test_build_tree_exhausted_attributes_majority():
    dataset = [[1, 'yes'], [1, 'no'], [0, 'no'], [0, 'yes'], [0, 'yes']]
    tree = build_tree(dataset, ['f'])
    # both branches still mixed after the split, each resolved by majority;
    # the [yes, no] tie goes to the first label seen
    assert tree == SplitNode('f', {1: Leaf('yes'), 0: Leaf('yes')})


def test_build_tree_label_only_examples():
    assert build_tree([['x'], ['y'], ['y']], []) == Leaf('y')


def test_build_tree_depth_bounded_by_attributes():
    dataset, labels = _weather_dataset()
    tree = build_tree(dataset, labels)

    def depth(node):
        if isinstance(node, Leaf):
            return 0
        return 1 + max(depth(c) for c in node.children.values())

    assert depth(tree) <= len(labels)
    assert tree.feature == 'outlook'
    assert tree.children['overcast'] == Leaf('yes')
    assert tree.children['sunny'].feature == 'humidity'
    assert tree.children['rain'].feature == 'wind'


def test_build_tree_accepts_numpy_object_array():
    dataset, labels = _fish_dataset()
    tree = build_tree(np.array(dataset, dtype=object), labels)
    assert tree == build_tree(dataset, labels)


@pytest.mark.parametrize('dataset, labels', [
    ([], []),
    ([[1, 'a'], [1, 0, 'b']], ['f']),
    ([[1, 'a']], ['f', 'g']),
    ([[None, 'a']], ['f']),
    ([[float('nan'), 'a']], ['f']),
    ([[[1], 'a']], ['f']),
    ([[1, 2, 'a']], ['f', 'f']),
    ([[]], []),
])
def test_build_tree_rejects_malformed_input(dataset, labels):
    with pytest.raises(InvalidDatasetError):
        build_tree(dataset, labels)


def test_classify_fish_queries():
    dataset, labels = _fish_dataset()
    tree = build_tree(dataset, labels)
    assert classify(tree, labels, [1, 0]) == 'no'
    assert classify(tree, labels, [1, 1]) == 'yes'
    assert classify(tree, labels, [0, 0]) == 'no'


def test_classify_uses_label_positions():
    dataset, labels = _fish_dataset()
    tree = build_tree(dataset, labels)
    # same query with the columns swapped
    assert classify(tree, ['flippers', 'no-surfacing'], [1, 1]) == 'yes'
    assert classify(tree, ['flippers', 'no-surfacing'], [0, 1]) == 'no'


def test_classify_unseen_value_returns_none():
    dataset, labels = _fish_dataset()
    tree = build_tree(dataset, labels)
    assert classify(tree, labels, [2, 1]) is None
    assert classify(tree, labels, [1, 'maybe']) is None


def test_classify_leaf_tree():
    assert classify(Leaf('yes'), [], []) == 'yes'


def test_classify_is_idempotent():
    dataset, labels = _weather_dataset()
    tree = build_tree(dataset, labels)
    query = ['sunny', 'cool', 'high', 'strong']
    first = classify(tree, labels, query)
    assert first == 'no'
    assert classify(tree, labels, query) == first


def test_classify_missing_feature_label_raises():
    dataset, labels = _fish_dataset()
    tree = build_tree(dataset, labels)
    with pytest.raises(ValueError):
        classify(tree, ['flippers'], [1])
    with pytest.raises(ValueError):
        classify(tree, labels, [])


def test_split_node_children_read_only():
    tree = SplitNode('f', {1: Leaf('a')})
    with pytest.raises(TypeError):
        tree.children[2] = Leaf('b')


def test_build_tree_rejects_bool_values():
    with pytest.raises(InvalidDatasetError):
        build_tree([[True, 'a'], [1, 'b']], ['f'])
    with pytest.raises(InvalidDatasetError):
        build_tree([[1, np.bool_(False)]], ['f'])


def test_tree_copy_pickle_and_hash():
    dataset, labels = _fish_dataset()
    tree = build_tree(dataset, labels)
    for clone in (copy.deepcopy(tree), copy.copy(tree), pickle.loads(pickle.dumps(tree))):
        assert clone == tree
        assert classify(clone, labels, [1, 1]) == 'yes'
    assert hash(tree) == hash(build_tree(dataset, labels))
    assert len({tree, build_tree(dataset, labels)}) == 1
