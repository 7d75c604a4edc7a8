import pandas as pd
from time import perf_counter
from id3py import ID3Classifier, enable_logging

# contact lenses data (UCI): age, prescription, astigmatic, tear rate -> lens type
rows = [
    ("young", "myope", "no", "reduced", "none"),
    ("young", "myope", "no", "normal", "soft"),
    ("young", "myope", "yes", "reduced", "none"),
    ("young", "myope", "yes", "normal", "hard"),
    ("young", "hyper", "no", "reduced", "none"),
    ("young", "hyper", "no", "normal", "soft"),
    ("young", "hyper", "yes", "reduced", "none"),
    ("young", "hyper", "yes", "normal", "hard"),
    ("pre", "myope", "no", "reduced", "none"),
    ("pre", "myope", "no", "normal", "soft"),
    ("pre", "myope", "yes", "reduced", "none"),
    ("pre", "myope", "yes", "normal", "hard"),
    ("pre", "hyper", "no", "reduced", "none"),
    ("pre", "hyper", "no", "normal", "soft"),
    ("pre", "hyper", "yes", "reduced", "none"),
    ("pre", "hyper", "yes", "normal", "none"),
    ("presbyopic", "myope", "no", "reduced", "none"),
    ("presbyopic", "myope", "no", "normal", "none"),
    ("presbyopic", "myope", "yes", "reduced", "none"),
    ("presbyopic", "myope", "yes", "normal", "hard"),
    ("presbyopic", "hyper", "no", "reduced", "none"),
    ("presbyopic", "hyper", "no", "normal", "soft"),
    ("presbyopic", "hyper", "yes", "reduced", "none"),
    ("presbyopic", "hyper", "yes", "normal", "none"),
]
df = pd.DataFrame(rows, columns=["age", "prescript", "astigmatic", "tearRate", "lenses"])
feats = ["age", "prescript", "astigmatic", "tearRate"]

X = df[feats].values.astype(object)
y = df["lenses"].values

clf = ID3Classifier(feature_names=feats, fallback_label="none", verbose=1)

with enable_logging(level="INFO"):
    t0 = perf_counter(); clf.fit(X, y); print(f"fit: {perf_counter()-t0:.3f} s")
clf.print_tree()
print(f"training accuracy: {clf.score(X, y):.3f}")
for rule in clf.export_rules():
    print(rule)
try:
    clf.export_graphviz("lenses_tree", format="dot")
except RuntimeError as e:
    print(f"Skipping Graphviz export: {e}")
