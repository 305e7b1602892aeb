from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import StrEnum

import numpy as np
from scipy.spatial.transform import Rotation

from imagespace.model.colour import Colour


class NodeKind(StrEnum):
    """How a node's geometry is interpreted.

    Attributes:
        MESH: Indexed or sequential triangles.
        LINES: Independent line segments (vertex pairs).
        GROUP: No geometry; only children.
    """

    MESH = "mesh"
    LINES = "lines"
    GROUP = "group"


@dataclass(eq=False)
class Geometry:
    """Vertex buffers for a mesh or line set.

    Attributes:
        positions: Vertex positions, shape ``(n, 3)``.
        normals: Optional per-vertex normals, shape ``(n, 3)``.  Only
            geometry with normals is shaded.
        indices: Optional flat index buffer into :attr:`positions`.

    Raises:
        ValueError: If the buffers have inconsistent shapes or the
            indices are out of range.
    """

    positions: np.ndarray
    normals: np.ndarray | None = None
    indices: np.ndarray | None = None

    def __post_init__(self) -> None:
        self.positions = np.array(self.positions, dtype=float).reshape(-1, 3)
        n = len(self.positions)
        if self.normals is not None:
            self.normals = np.array(self.normals, dtype=float).reshape(-1, 3)
            if len(self.normals) != n:
                raise ValueError(
                    f"normals must match positions ({n}), got {len(self.normals)}"
                )
        if self.indices is not None:
            self.indices = np.array(self.indices, dtype=int).ravel()
            if len(self.indices) and (
                self.indices.min() < 0 or self.indices.max() >= n
            ):
                raise ValueError("indices out of range for positions")

    @property
    def has_normals(self) -> bool:
        """Whether this geometry carries a normal buffer."""
        return self.normals is not None

    def copy(self) -> Geometry:
        """Return a deep copy with independent buffers."""
        return Geometry(
            self.positions.copy(),
            None if self.normals is None else self.normals.copy(),
            None if self.indices is None else self.indices.copy(),
        )

    def element_indices(self, size: int) -> np.ndarray:
        """Vertex indices grouped into elements of *size* (3 for faces, 2 for segments)."""
        idx = self.indices if self.indices is not None else np.arange(len(self.positions))
        n_elements = len(idx) // size
        return idx[: n_elements * size].reshape(n_elements, size)

    def triangles(self) -> np.ndarray:
        """Triangle vertex positions, shape ``(n_faces, 3, 3)``."""
        return self.positions[self.element_indices(3)]

    def segments(self) -> np.ndarray:
        """Segment endpoint positions, shape ``(n_segments, 2, 3)``."""
        return self.positions[self.element_indices(2)]

    def bounding_sphere(self) -> tuple[np.ndarray, float]:
        """Centre and radius of a sphere enclosing every vertex.

        The centre is the middle of the axis-aligned bounding box.

        Raises:
            ValueError: If there are no vertices or any is non-finite.
        """
        if len(self.positions) == 0:
            raise ValueError("cannot bound empty geometry")
        if not np.all(np.isfinite(self.positions)):
            raise ValueError("geometry has non-finite positions")
        centre = (self.positions.min(axis=0) + self.positions.max(axis=0)) / 2.0
        radius = float(np.max(np.linalg.norm(self.positions - centre, axis=1)))
        return centre, radius


@dataclass(eq=False)
class SceneNode:
    """A node in a scene tree.

    Transforms compose as ``parent.world @ translate @ rotate @ scale``.

    Attributes:
        name: Label used in log messages.
        kind: Interpretation of :attr:`geometry`.
        geometry: Vertex buffers, or ``None`` for groups.
        position: Local translation.
        rotation: Local intrinsic XYZ Euler angles in radians.
        scale: Local per-axis scale.
        visible: Whether the renderer draws this node and its children.
        layer: Visibility layer tag used by the host.
        colour: Face or line colour.
        opacity: Alpha in ``[0, 1]``.
        role: Free-form tag describing what the node represents.
        children: Child nodes.
    """

    name: str = ""
    kind: NodeKind = NodeKind.GROUP
    geometry: Geometry | None = None
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: np.ndarray = field(default_factory=lambda: np.zeros(3))
    scale: np.ndarray = field(default_factory=lambda: np.ones(3))
    visible: bool = True
    layer: int = 0
    colour: Colour = (0.5, 0.5, 0.5)
    opacity: float = 1.0
    role: str = ""
    children: list[SceneNode] = field(default_factory=list)
    parent: SceneNode | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.kind = NodeKind(self.kind)
        self.position = np.array(self.position, dtype=float).reshape(3)
        self.rotation = np.array(self.rotation, dtype=float).reshape(3)
        self.scale = np.broadcast_to(
            np.asarray(self.scale, dtype=float), (3,),
        ).copy()
        if self.kind is not NodeKind.GROUP and self.geometry is None:
            raise ValueError(f"{self.kind.value} node {self.name!r} needs geometry")
        if not 0.0 <= self.opacity <= 1.0:
            raise ValueError(f"opacity must be in [0, 1], got {self.opacity}")
        for child in list(self.children):
            child.parent = self

    # ---- Transforms ----

    def local_matrix(self) -> np.ndarray:
        """Return the ``(4, 4)`` local transform."""
        m = np.eye(4)
        m[:3, :3] = Rotation.from_euler("XYZ", self.rotation).as_matrix() * self.scale
        m[:3, 3] = self.position
        return m

    def world_matrix(self) -> np.ndarray:
        """Return the ``(4, 4)`` transform from this node to world space."""
        m = self.local_matrix()
        node = self.parent
        while node is not None:
            m = node.local_matrix() @ m
            node = node.parent
        return m

    def reset_transform(self) -> None:
        """Set translation and rotation to zero and scale to one."""
        self.position = np.zeros(3)
        self.rotation = np.zeros(3)
        self.scale = np.ones(3)

    @property
    def has_normals(self) -> bool:
        """Whether this node's geometry carries normals."""
        return self.geometry is not None and self.geometry.has_normals

    # ---- Tree ----

    def add(self, child: SceneNode) -> SceneNode:
        """Attach *child*, detaching it from any previous parent."""
        if child.parent is not None:
            child.parent.remove(child)
        self.children.append(child)
        child.parent = self
        return child

    def remove(self, child: SceneNode) -> bool:
        """Detach *child*; returns ``False`` if it was not a child."""
        for i, c in enumerate(self.children):
            if c is child:
                del self.children[i]
                child.parent = None
                return True
        return False

    def traverse(self) -> Iterator[SceneNode]:
        """Yield this node and every descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.traverse()

    def traverse_visible(self) -> Iterator[SceneNode]:
        """Like :meth:`traverse`, skipping invisible subtrees."""
        if not self.visible:
            return
        yield self
        for child in self.children:
            yield from child.traverse_visible()

    def clone(self) -> SceneNode:
        """Deep copy of this subtree with independent buffers, detached."""
        copy = SceneNode(
            name=self.name,
            kind=self.kind,
            geometry=None if self.geometry is None else self.geometry.copy(),
            position=self.position.copy(),
            rotation=self.rotation.copy(),
            scale=self.scale.copy(),
            visible=self.visible,
            layer=self.layer,
            colour=self.colour,
            opacity=self.opacity,
            role=self.role,
        )
        for child in self.children:
            copy.add(child.clone())
        return copy


def make_box(
    size: float = 1.0,
    *,
    name: str = "box",
    colour: Colour = "#e00000",
    position: tuple[float, float, float] = (0.0, 0.0, 0.0),
) -> SceneNode:
    """Build an axis-aligned cube mesh with flat per-face normals.

    Each face has its own four vertices so that the normals stay
    face-constant, giving 24 vertices and 12 triangles.
    """
    h = size / 2.0
    # (normal, two in-plane axes u, v with u x v = normal)
    faces = [
        ((1, 0, 0), (0, 1, 0), (0, 0, 1)),
        ((-1, 0, 0), (0, 0, 1), (0, 1, 0)),
        ((0, 1, 0), (0, 0, 1), (1, 0, 0)),
        ((0, -1, 0), (1, 0, 0), (0, 0, 1)),
        ((0, 0, 1), (1, 0, 0), (0, 1, 0)),
        ((0, 0, -1), (0, 1, 0), (1, 0, 0)),
    ]
    positions: list[np.ndarray] = []
    normals: list[np.ndarray] = []
    indices: list[int] = []
    for n, u, v in faces:
        n, u, v = (np.array(a, dtype=float) for a in (n, u, v))
        base = len(positions)
        for su, sv in ((-1, -1), (1, -1), (1, 1), (-1, 1)):
            positions.append(h * (n + su * u + sv * v))
            normals.append(n)
        indices.extend([base, base + 1, base + 2, base, base + 2, base + 3])
    return SceneNode(
        name=name,
        kind=NodeKind.MESH,
        geometry=Geometry(np.array(positions), np.array(normals), np.array(indices)),
        position=np.asarray(position, dtype=float),
        colour=colour,
    )


_AXIS_COLOURS: tuple[Colour, Colour, Colour] = (
    (1.0, 0.1, 0.1),
    (0.1, 1.0, 0.1),
    (0.1, 0.1, 1.0),
)


def make_axes(
    length: float = 1.0,
    *,
    name: str = "axes",
    flip: tuple[bool, bool, bool] = (False, False, True),
) -> SceneNode:
    """Build an X/Y/Z axes indicator as three coloured line nodes.

    Z is flipped by default so that the blue axis points along the
    camera's viewing direction (-Z).

    Raises:
        ValueError: If *length* is not positive.
    """
    if length <= 0:
        raise ValueError(f"length must be positive, got {length}")
    group = SceneNode(name=name, role="axes")
    for axis, (label, colour, flipped) in enumerate(zip("xyz", _AXIS_COLOURS, flip)):
        tip = np.zeros(3)
        tip[axis] = -length if flipped else length
        group.add(SceneNode(
            name=f"{name}_{label}",
            kind=NodeKind.LINES,
            geometry=Geometry(np.array([np.zeros(3), tip])),
            colour=colour,
            role="axis",
        ))
    return group
