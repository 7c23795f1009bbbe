"""
JSON-LD codec for Solid ACL documents.

Converts between a list of PermissionEntry and the acl:Authorization graph a
Solid server stores in a resource's ``.acl`` document.

Decoding accepts compacted documents (with or without @graph), expanded
documents (top-level list, full IRIs) and plain prefixed keys. Subjects that
have no entry form (acl:agentGroup, agent classes other than foaf:Agent,
acl:origin restrictions) are returned by preserved_nodes() and written back
by encode_acl() as they were.

Invariants:
    - foaf:Agent agentClass <-> agents=None (everyone)
    - Encoding always emits one authorization per entry, in order
    - An authorization naming both agents and foaf:Agent decodes to two entries
    - Preserved nodes are never merged into or rewritten by entries
    - The owner keeps Control: an owner authorization is added on encode
      unless an entry already grants Control to the owner
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

from .entries import ALL_MODES, Mode, PermissionEntry, unique_modes

logger = logging.getLogger(__name__)

ACL_NS = "http://www.w3.org/ns/auth/acl#"
FOAF_NS = "http://xmlns.com/foaf/0.1/"

ACL_CONTEXT = {
    "acl": ACL_NS,
    "foaf": FOAF_NS,
}


def _local(name: str) -> str:
    """Local part of a prefixed name or IRI ("acl:mode" -> "mode")."""
    if name.startswith("@"):
        return name
    return name.rsplit("#", 1)[-1].rsplit("/", 1)[-1].rsplit(":", 1)[-1]


def _ids(value: Any) -> list[str]:
    """Flatten a JSON-LD value (node ref, literal or list) into strings."""
    if value is None:
        return []
    values = value if isinstance(value, list) else [value]
    result = []
    for item in values:
        if isinstance(item, dict):
            ref = item.get("@id", item.get("@value"))
            if isinstance(ref, str):
                result.append(ref)
        elif isinstance(item, str):
            result.append(item)
    return result


def _nodes(document: Any) -> Iterable[dict[str, Any]]:
    if isinstance(document, list):
        for item in document:
            yield from _nodes(item)
    elif isinstance(document, dict):
        if "@graph" in document:
            yield from _nodes(document["@graph"])
        else:
            yield document


def _is_authorization(node: dict[str, Any]) -> bool:
    return any(_local(t) == "Authorization" for t in _ids(node.get("@type")))


def _is_everyone_class(value: str) -> bool:
    return _local(value) == "Agent"


def _residual(node: dict[str, Any]) -> dict[str, Any] | None:
    """Copy of node without the subjects decode_acl represents as entries.

    Returns None when nothing is left to keep (only agent / foaf:Agent).
    Keys are rewritten to the acl: prefix so the node reads the same under
    ACL_CONTEXT.
    """
    kept: dict[str, Any] = {}
    has_other_subject = False

    for key, value in node.items():
        local = _local(key)
        if local == "agent":
            continue
        if local == "agentClass":
            others = [c for c in _ids(value) if not _is_everyone_class(c)]
            if not others:
                continue
            value = [{"@id": c} for c in others]
            has_other_subject = True
        elif local == "agentGroup":
            has_other_subject = True
        kept[key if key.startswith("@") else f"acl:{local}"] = value

    if not has_other_subject:
        return None
    kept["@type"] = "acl:Authorization"
    return kept


def _split(node: dict[str, Any]) -> tuple[list[PermissionEntry], dict[str, Any] | None]:
    """Split one authorization into representable entries and a residual node.

    agent and foaf:Agent subjects become entries (one each, so a node naming
    both yields two). agentGroup and other agent classes stay in the residual
    node. Origin-restricted authorizations are kept whole as residual.
    """
    props: dict[str, list[str]] = {}
    for key, value in node.items():
        props.setdefault(_local(key), []).extend(_ids(value))

    if props.get("origin"):
        return [], dict(node)

    modes: list[Mode] = []
    for raw in props.get("mode", []):
        try:
            modes.append(Mode.parse(raw))
        except ValueError:
            logger.warning(f"Ignoring unknown access mode {raw!r} in {node.get('@id')}")
    modes = unique_modes(modes)

    entries: list[PermissionEntry] = []
    if props.get("agent"):
        entries.append(PermissionEntry(agents=list(props["agent"]), modes=list(modes)))
    if any(_is_everyone_class(c) for c in props.get("agentClass", [])):
        entries.append(PermissionEntry(agents=None, modes=list(modes)))

    return entries, _residual(node)


def decode_acl(document: Any) -> list[PermissionEntry]:
    """Decode an ACL JSON-LD document into permission entries.

    Args:
        document: Parsed JSON of the ACL resource

    Returns:
        Entries in document order
    """
    entries: list[PermissionEntry] = []
    for node in _nodes(document):
        if _is_authorization(node):
            entries.extend(_split(node)[0])
    return entries


def preserved_nodes(document: Any) -> list[dict[str, Any]]:
    """Authorization parts decode_acl cannot represent as entries.

    encode_acl writes these back unchanged so replacing the document never
    drops agentGroup, acl:AuthenticatedAgent or origin-restricted grants.
    """
    kept = []
    for node in _nodes(document):
        if not _is_authorization(node):
            continue
        residual = _split(node)[1]
        if residual is not None:
            kept.append(residual)
    return kept


def _authorization(
    node_id: str,
    resource_path: str,
    agents: list[str] | None,
    modes: Sequence[Mode],
) -> dict[str, Any]:
    node: dict[str, Any] = {
        "@id": node_id,
        "@type": "acl:Authorization",
        "acl:accessTo": {"@id": resource_path},
        "acl:mode": [{"@id": f"acl:{m.value}"} for m in modes],
    }
    if resource_path.endswith("/"):
        node["acl:default"] = {"@id": resource_path}
    if agents is None:
        node["acl:agentClass"] = {"@id": "foaf:Agent"}
    else:
        node["acl:agent"] = [{"@id": a} for a in agents]
    return node


def encode_acl(
    web_id: str,
    resource_path: str,
    entries: Sequence[PermissionEntry],
    preserved: Sequence[dict[str, Any]] = (),
) -> dict[str, Any]:
    """Encode permission entries as an ACL JSON-LD document.

    Args:
        web_id: Owner of the resource
        resource_path: Resource the ACL protects
        entries: Entries to write
        preserved: Nodes from preserved_nodes() of the current document,
            written back as they are

    Returns:
        Compacted JSON-LD document
    """
    graph: list[dict[str, Any]] = []
    taken = {n["@id"] for n in preserved if isinstance(n.get("@id"), str)}

    def fresh_id(name: str) -> str:
        node_id, n = f"#{name}", 1
        while node_id in taken:
            node_id, n = f"#{name}-{n}", n + 1
        taken.add(node_id)
        return node_id

    owner_has_control = any(
        entry.agents is not None and web_id in entry.agents and Mode.CONTROL in entry.modes
        for entry in entries
    )
    if not owner_has_control:
        graph.append(_authorization(fresh_id("owner"), resource_path, [web_id], ALL_MODES))

    for i, entry in enumerate(entries):
        graph.append(_authorization(fresh_id(f"entry-{i}"), resource_path, entry.agents, entry.modes))

    graph.extend(dict(node) for node in preserved)

    return {"@context": dict(ACL_CONTEXT), "@graph": graph}
