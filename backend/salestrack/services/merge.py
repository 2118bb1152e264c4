"""
SalesTrack Backend — Merge Engine
===================================

What:  Reconciles the remote document with a local, in-flight mutation.
How:   Per collection, a union keyed by entity id where local entities win.

Algorithm (per collection):
    1. id → entity map: every remote entity first, then every local entity
       (a local entity replaces the remote one with the same id)
    2. Result = map values in insertion order: remote order, with local
       replacements in the remote slot, followed by purely local additions

Known limitation:
    This is a union, not a three-way merge. An entity deleted by one writer
    is resurrected when a concurrent writer that still holds it merges.
    There is no deletion tracking.
"""

import json
from typing import Any, Dict, List

from salestrack.models.document import COLLECTIONS, Document, Entity


def merge_collection(remote: List[Entity], local: List[Entity]) -> List[Entity]:
    merged: Dict[Any, Entity] = {}
    # Entries without an id (sales can hold those) are keyed by their JSON
    # text, so identical ones collapse and different ones are all kept.
    for entity in remote:
        merged[_merge_key(entity)] = entity
    for entity in local:
        merged[_merge_key(entity)] = entity
    return list(merged.values())


def _merge_key(entity: Any) -> Any:
    if isinstance(entity, dict) and entity.get("id") is not None:
        return ("id", entity["id"])
    return ("value", json.dumps(entity, sort_keys=True, default=str))


def merge_documents(remote: Document, local: Document) -> Document:
    """
    Merge `local` into `remote`, local taking precedence.

    Top-level keys outside the four collections are merged the same way:
    remote first, local overriding.
    """
    merged: Document = {**remote, **local}
    for name in COLLECTIONS:
        merged[name] = merge_collection(remote.get(name) or [], local.get(name) or [])
    return merged
