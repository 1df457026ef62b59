# terrain_generator/features/io.py

"""
================================================================================
FEATURE FILES
================================================================================
Reads and writes river and spine polylines as JSON so upstream generators and
the bake tool can exchange them.

File format:
    {"kind": "rivers" | "spines", "features": [<feature.to_json()>, ...]}

A bare JSON list is also accepted on load; its kind is inferred from the
first entry (spine points carry an 'elevation').
================================================================================
"""

import json

from .linear import LinearFeature
from .spine import SpineFeature

FEATURE_KINDS = ('rivers', 'spines')

def save_features(path, features, kind: str = None):
    """Writes features to `path`. The kind is inferred when not given."""
    features = list(features)
    if kind is None:
        kind = 'spines' if features and isinstance(features[0], SpineFeature) else 'rivers'
    if kind not in FEATURE_KINDS:
        raise ValueError(f"Unknown feature kind '{kind}', expected one of {FEATURE_KINDS}")

    payload = {'kind': kind, 'features': [f.to_json() for f in features]}
    with open(path, 'w') as f:
        json.dump(payload, f, indent=2)

def _infer_kind(entries) -> str:
    if entries and entries[0].get('path') and 'elevation' in entries[0]['path'][0]:
        return 'spines'
    return 'rivers'

def load_features(path):
    """Loads a feature file; returns a list of LinearFeature or SpineFeature."""
    with open(path, 'r') as f:
        payload = json.load(f)

    if isinstance(payload, list):
        entries = payload
        kind = _infer_kind(entries)
    else:
        entries = payload.get('features', [])
        kind = payload.get('kind') or _infer_kind(entries)

    if kind == 'spines':
        return [SpineFeature.from_json(e) for e in entries]
    if kind == 'rivers':
        return [LinearFeature.from_json(e) for e in entries]
    raise ValueError(f"Unknown feature kind '{kind}' in {path}")
