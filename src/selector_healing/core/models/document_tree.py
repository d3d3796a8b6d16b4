"""Flat-arena representation of captured document trees.

Nodes are stored in a single list in depth-first pre-order and refer to their
children and parent by index. Every walk over the tree uses an explicit stack,
so arbitrarily deep documents never hit the interpreter's recursion limit.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from ..exceptions import SnapshotFormatError
from .snapshot_models import NodePayload, SnapshotPayload


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Node:
    """One element of a captured document."""
    index: int
    tag_name: str
    id: Optional[str] = None
    class_name: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    text_content: Optional[str] = None
    children: Tuple[int, ...] = ()
    parent: Optional[int] = None

    @property
    def class_tokens(self) -> List[str]:
        """Class names split on whitespace with empty tokens dropped."""
        if not self.class_name:
            return []
        return self.class_name.split()

    @property
    def child_count(self) -> int:
        return len(self.children)


class DocumentTree:
    """Immutable arena of nodes; index 0 is the root."""

    def __init__(self, nodes: List[Node]):
        if not nodes:
            raise SnapshotFormatError("A document tree needs at least a root node")
        self._nodes = tuple(nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __getitem__(self, index: int) -> Node:
        return self._nodes[index]

    @property
    def root(self) -> Node:
        return self._nodes[0]

    def children_of(self, node: Node) -> List[Node]:
        return [self._nodes[child] for child in node.children]

    def parent_of(self, node: Node) -> Optional[Node]:
        if node.parent is None:
            return None
        return self._nodes[node.parent]

    def iter_preorder(self, start: Optional[Node] = None) -> Iterator[Node]:
        """Yield nodes depth-first, parents before children, children in document order."""
        stack = [start.index if start is not None else 0]
        while stack:
            node = self._nodes[stack.pop()]
            yield node
            stack.extend(reversed(node.children))

    def find_by_id(self, element_id: str) -> Optional[Node]:
        """Return the first node in pre-order whose id equals ``element_id``."""
        for node in self.iter_preorder():
            if node.id == element_id:
                return node
        return None

    @classmethod
    def from_dict(cls, root: Mapping[str, Any]) -> 'DocumentTree':
        """Build an arena from a serialized node mapping.

        Raises:
            SnapshotFormatError: If any node fails validation
        """
        nodes: List[Optional[Node]] = []
        children: List[List[int]] = []
        pending = []
        stack: List[Tuple[Any, Optional[int], str]] = [(root, None, "rootNode")]

        while stack:
            raw, parent_index, path = stack.pop()
            if not isinstance(raw, Mapping):
                raise SnapshotFormatError(f"Node at {path} is not an object")
            try:
                payload = NodePayload.model_validate(raw)
            except ValidationError as e:
                raise SnapshotFormatError(f"Invalid node at {path}: {e}") from e

            index = len(nodes)
            nodes.append(None)
            children.append([])
            pending.append((payload, parent_index))
            if parent_index is not None:
                children[parent_index].append(index)

            for position in range(len(payload.children) - 1, -1, -1):
                stack.append((payload.children[position], index, f"{path}.children[{position}]"))

        for index, (payload, parent_index) in enumerate(pending):
            nodes[index] = Node(
                index=index,
                tag_name=payload.tag_name,
                id=payload.id,
                class_name=payload.class_name,
                attributes=dict(payload.attributes),
                text_content=payload.text_content,
                children=tuple(children[index]),
                parent=parent_index,
            )

        return cls(nodes)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the arena back to the nested JSON shape."""
        serialized: List[Dict[str, Any]] = []
        for node in self._nodes:
            data: Dict[str, Any] = {"tagName": node.tag_name}
            if node.id is not None:
                data["id"] = node.id
            if node.class_name is not None:
                data["className"] = node.class_name
            data["attributes"] = dict(node.attributes)
            if node.text_content is not None:
                data["textContent"] = node.text_content
            data["children"] = []
            serialized.append(data)

        for node in self._nodes:
            serialized[node.index]["children"] = [serialized[child] for child in node.children]
        return serialized[0]


@dataclass(frozen=True)
class Snapshot:
    """A captured, timestamped document state."""
    url: str
    timestamp: int
    tree: DocumentTree
    title: Optional[str] = None

    @property
    def root(self) -> Node:
        return self.tree.root

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Snapshot':
        """Create a snapshot from its JSON boundary shape.

        Raises:
            SnapshotFormatError: If the payload or any node is malformed
        """
        if not isinstance(data, Mapping):
            raise SnapshotFormatError("Snapshot payload is not an object")
        try:
            payload = SnapshotPayload.model_validate(data)
        except ValidationError as e:
            raise SnapshotFormatError(f"Invalid snapshot: {e}") from e

        tree = DocumentTree.from_dict(payload.root_node)
        logger.debug(f"Loaded snapshot of {payload.url} with {len(tree)} nodes")
        return cls(url=payload.url, timestamp=payload.timestamp, tree=tree, title=payload.title)

    def to_dict(self) -> Dict[str, Any]:
        """Convert snapshot to its JSON boundary shape."""
        data: Dict[str, Any] = {"url": self.url}
        if self.title is not None:
            data["title"] = self.title
        data["timestamp"] = self.timestamp
        data["rootNode"] = self.tree.to_dict()
        return data

    @staticmethod
    def now_ms() -> int:
        """Current time in epoch milliseconds."""
        return int(datetime.now().timestamp() * 1000)
