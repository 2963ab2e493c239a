import numpy as np
from dataclasses import dataclass, field
from typing import Tuple

# Local vertex pairs of each face, in face-number order:
#   0: left (v0,v2)   1: right (v1,v3)   2: bottom (v0,v1)   3: top (v2,v3)
# Vertices are ordered bottom-left, bottom-right, top-left, top-right.
FACE_VERTICES: Tuple[Tuple[int, int], ...] = ((0, 2), (1, 3), (0, 1), (2, 3))
FACES_PER_CELL = 4
SUBFACES_PER_FACE = 2


class Node:
    """A mesh vertex; converts to a length-2 coordinate array."""

    def __init__(self, id, x, y):
        self.id = id
        self.x = x
        self.y = y

    def __iter__(self):
        yield self.x
        yield self.y

    def __array__(self, dtype=None, copy=None):
        return np.array([self.x, self.y], dtype=dtype if dtype is not None else float)


def as_vertex_array(cell) -> np.ndarray:
    """Return the (4, 2) vertex coordinates of anything that describes a cell.

    Accepts a :class:`Cell`, any object with a ``vertices`` attribute, a
    sequence of four :class:`Node` objects, or a (4, 2) array-like.
    """
    verts = getattr(cell, "vertices", cell)
    if isinstance(verts, np.ndarray):
        arr = np.asarray(verts, dtype=float)
    else:
        arr = np.array([np.asarray(v, dtype=float) for v in verts], dtype=float)
    if arr.shape != (4, 2):
        raise ValueError(f"A quadrilateral cell needs 4 vertices in 2D, got shape {arr.shape}.")
    return arr


@dataclass(slots=True)
class Cell:
    """A quadrilateral cell given by its four vertex coordinates.

    The cell is a plain view on geometry owned by a mesh: evaluation code
    reads ``vertices`` and never keeps a reference to the cell.
    """
    id: int
    vertices: np.ndarray                                  # (4, 2), bl, br, tl, tr
    nodes: Tuple[int, ...] = field(default_factory=tuple)  # global node ids, same order

    def __post_init__(self):
        self.vertices = as_vertex_array(self.vertices)

    def face(self, face_no: int) -> Tuple[np.ndarray, np.ndarray]:
        """End points of a face, ordered from the lower local vertex index."""
        if not 0 <= face_no < FACES_PER_CELL:
            raise IndexError(f"face_no must be in [0, {FACES_PER_CELL}), got {face_no}")
        i, j = FACE_VERTICES[face_no]
        return self.vertices[i], self.vertices[j]

    def subface(self, face_no: int, subface_no: int) -> Tuple[np.ndarray, np.ndarray]:
        """End points of one half of a face (the piece a refined neighbour sees)."""
        if not 0 <= subface_no < SUBFACES_PER_FACE:
            raise IndexError(f"subface_no must be in [0, {SUBFACES_PER_FACE}), got {subface_no}")
        p0, p1 = self.face(face_no)
        mid = 0.5 * (p0 + p1)
        return (p0, mid) if subface_no == 0 else (mid, p1)

    def face_midpoint(self, face_no: int) -> np.ndarray:
        p0, p1 = self.face(face_no)
        return 0.5 * (p0 + p1)

    def contains_node(self, node_id: int) -> bool:
        """Check if the cell contains a specific node."""
        return node_id in self.nodes
