from id3py import DecisionTreeModel, TreeStorageError
from id3py.persistence import tree_to_nested_dict

dataset = [[1, 1, "yes"], [1, 1, "yes"], [1, 0, "no"], [0, 1, "no"], [0, 1, "no"]]
labels = ["no-surfacing", "flippers"]

model = DecisionTreeModel.build(dataset, labels)
print(tree_to_nested_dict(model.get_tree()))
# {'no-surfacing': {1: {'flippers': {1: 'yes', 0: 'no'}}, 0: 'no'}}

for query in ([1, 0], [1, 1], [0, 0], [2, 1]):
    print(query, "->", model.classify(labels, query))

try:
    path = model.store_tree("fish_tree.json")
except TreeStorageError as e:
    print(f"Could not store tree: {e}")
else:
    tree = model.load_tree(path)
    print("reloaded:", DecisionTreeModel.classify_with_tree(tree, labels, [1, 1]))
