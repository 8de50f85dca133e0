"""
Canonical paths for inactive configuration subtrees.

A Junos configuration rendered as XML marks deactivated statements with an
``inactive="inactive"`` attribute. Only the outermost marked element of a
disabled subtree is interesting, and it is identified by the chain of its
ancestors, e.g.::

    <configuration>
      <interfaces>
        <interface inactive="inactive">
          <name>ge-0/0/0</name>
          ...

resolves to ``ge-0/0/0 interface``: the ``configuration`` root is dropped, the
bare ``interfaces`` wrapper collapses into its singular child, and the
``<name>`` child qualifies the ``interface`` level.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, NamedTuple, Union

from lxml import etree

from .config import (
    CONFIGURATION_ROOT_TAG,
    INACTIVE_ATTRIBUTE,
    NAME_TAG,
    RPC_ENVELOPE_TAG,
)
from .errors import DocumentError

log = logging.getLogger(__name__)

# Outermost inactive elements only; nested ones belong to an already reported subtree.
INACTIVE_XPATH = etree.XPath(
    f"//*[@{INACTIVE_ATTRIBUTE} and not(ancestor::*[@{INACTIVE_ATTRIBUTE}])]"
)


class PathSegment(NamedTuple):
    """One ancestor level: its tag and the optional qualifying ``<name>`` text."""
    tag: str
    name: str = ""

    def render(self) -> str:
        return f"{self.name} {self.tag}" if self.name else self.tag


def _local_tag(node: etree._Element) -> str:
    tag = node.tag
    if not isinstance(tag, str):
        # comments and processing instructions
        return ""
    return etree.QName(tag).localname


def qualifying_name(node: etree._Element) -> str:
    """Text of the direct ``<name>`` child of *node*, or an empty string."""
    for child in node:
        if _local_tag(child) == NAME_TAG:
            return "".join(child.itertext()).strip()
    return ""


def ancestor_segments(node: etree._Element) -> List[PathSegment]:
    """Segments from the document root down to *node* (inclusive)."""
    segments: List[PathSegment] = []
    while node is not None:
        segments.append(PathSegment(_local_tag(node), qualifying_name(node)))
        node = node.getparent()
    segments.reverse()
    return segments


def canonicalize(segments: Iterable[PathSegment]) -> str:
    """
    Turn a root-to-leaf segment chain into a path identifier.

    - drops an empty leading root level
    - drops the ``rpc-reply`` envelope, then the ``configuration`` root,
      as long as something remains after them
    - removes unnamed plural wrappers (``interfaces`` directly above
      ``interface``) until nothing more collapses
    - renders ``"<name> <tag>"`` for named levels and joins with spaces
    """
    chain = [PathSegment(*s) for s in segments]
    if chain and not chain[0].tag and not chain[0].name:
        chain = chain[1:]
    if len(chain) > 1 and chain[0].tag == RPC_ENVELOPE_TAG:
        chain = chain[1:]
    if len(chain) > 1 and chain[0].tag == CONFIGURATION_ROOT_TAG:
        chain = chain[1:]

    collapsed = True
    while collapsed:
        collapsed = False
        for i in range(len(chain) - 1):
            outer, inner = chain[i], chain[i + 1]
            if not outer.name and outer.tag == inner.tag + "s":
                del chain[i]
                collapsed = True
                break

    return " ".join(s.render() for s in chain)


def resolve_path(node: etree._Element) -> str:
    """Canonical path identifier of *node* within its document."""
    return canonicalize(ancestor_segments(node))


def parse_document(payload: Union[str, bytes]) -> etree._Element:
    """
    Parse the XML text returned by a device.

    Raises:
        DocumentError: if the payload is empty or not well-formed XML.
    """
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    payload = payload.strip()
    if not payload:
        raise DocumentError("empty configuration payload")
    parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)
    try:
        return etree.fromstring(payload, parser=parser)
    except etree.XMLSyntaxError as e:
        raise DocumentError(f"malformed configuration payload: {e}") from e


def find_inactive(document: etree._Element) -> List[str]:
    """Paths of every top-level inactive subtree, in document order."""
    found = [resolve_path(node) for node in INACTIVE_XPATH(document)]
    log.debug("Found %d inactive subtree(s)", len(found))
    return found
