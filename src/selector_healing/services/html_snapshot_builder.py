"""Build snapshots from static HTML documents."""

import logging
from typing import Dict, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from ..core.exceptions import SnapshotFormatError
from ..core.models.document_tree import DocumentTree, Node, Snapshot


logger = logging.getLogger(__name__)


def _element_children(element: Tag) -> List[Tag]:
    return [child for child in element.children if isinstance(child, Tag)]


def _attribute_map(element: Tag) -> Dict[str, str]:
    """Copy attributes; bs4 returns multi-valued attributes (class, rel, ...) as lists."""
    attributes = {}
    for name, value in element.attrs.items():
        if isinstance(value, (list, tuple)):
            value = " ".join(value)
        attributes[name] = "" if value is None else str(value)
    return attributes


def _find_root(soup: BeautifulSoup) -> Optional[Tag]:
    html = soup.find('html')
    if html is not None:
        return html
    top_level = _element_children(soup)
    return top_level[0] if top_level else None


def build_snapshot_from_html(html: str, url: str, title: Optional[str] = None,
                             timestamp: Optional[int] = None) -> Snapshot:
    """
    Capture a static HTML document as a Snapshot.

    Args:
        html: Document markup
        url: Url recorded on the snapshot
        title: Page title; defaults to the document's <title>
        timestamp: Capture time in epoch ms; defaults to now

    Returns:
        Snapshot rooted at <html>, or at the first top-level element

    Raises:
        SnapshotFormatError: If the markup contains no element
    """
    soup = BeautifulSoup(html, 'html.parser')
    root = _find_root(soup)
    if root is None:
        raise SnapshotFormatError("HTML document contains no elements")

    if title is None:
        title_tag = soup.find('title')
        if title_tag is not None:
            title = title_tag.get_text(strip=True)

    nodes: List[Node] = []
    children: List[List[int]] = []
    parents: List[Optional[int]] = []
    elements: List[Tag] = []
    stack: List[Tuple[Tag, Optional[int]]] = [(root, None)]

    while stack:
        element, parent_index = stack.pop()
        index = len(elements)
        elements.append(element)
        children.append([])
        parents.append(parent_index)
        if parent_index is not None:
            children[parent_index].append(index)

        for child in reversed(_element_children(element)):
            stack.append((child, index))

    for index, element in enumerate(elements):
        attributes = _attribute_map(element)
        text = element.get_text().strip()
        nodes.append(Node(
            index=index,
            tag_name=element.name.lower(),
            id=attributes.get('id') or None,
            class_name=attributes.get('class') or None,
            attributes=attributes,
            text_content=text or None,
            children=tuple(children[index]),
            parent=parents[index],
        ))

    logger.debug(f"Built snapshot of {url} with {len(nodes)} nodes from HTML")
    return Snapshot(
        url=url,
        timestamp=timestamp if timestamp is not None else Snapshot.now_ms(),
        tree=DocumentTree(nodes),
        title=title,
    )
