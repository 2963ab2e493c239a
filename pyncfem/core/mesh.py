import logging
from typing import Dict, Iterator, List, Tuple

import numpy as np

from pyncfem.core.topology import Cell, Node, FACE_VERTICES

logger = logging.getLogger(__name__)


class QuadMesh:
    """
    Read-only container of quadrilateral cells.

    Holds node coordinates and a (n_cells, 4) connectivity whose rows list the
    corner nodes in the order bottom-left, bottom-right, top-left, top-right.
    It builds the face → cell incidence so that callers can walk neighbours,
    but it does not refine or otherwise modify itself.
    """

    def __init__(self, nodes, cells: np.ndarray):
        if len(nodes) and isinstance(nodes[0], Node):
            self.nodes_x_y_pos = np.array([[n.x, n.y] for n in nodes], dtype=float)
        else:
            self.nodes_x_y_pos = np.asarray(nodes, dtype=float)
        if self.nodes_x_y_pos.ndim != 2 or self.nodes_x_y_pos.shape[1] != 2:
            raise ValueError(f"nodes must have shape (n, 2), got {self.nodes_x_y_pos.shape}")

        self.cells_connectivity = np.asarray(cells, dtype=np.int64)
        if self.cells_connectivity.ndim != 2 or self.cells_connectivity.shape[1] != 4:
            raise ValueError(f"cells must have shape (n, 4), got {self.cells_connectivity.shape}")

        self.n_cells = len(self.cells_connectivity)
        self.n_nodes = len(self.nodes_x_y_pos)
        self._face_cells: Dict[Tuple[int, int], List[Tuple[int, int]]] = {}
        self._build_faces()
        logger.debug(f"QuadMesh with {self.n_nodes} nodes, {self.n_cells} cells, "
                     f"{len(self._face_cells)} faces")

    def _build_faces(self):
        """Map every face (sorted node pair) to the (cell, local face) pairs that own it."""
        for cid, corners in enumerate(self.cells_connectivity):
            for face_no, (i, j) in enumerate(FACE_VERTICES):
                key = tuple(sorted((int(corners[i]), int(corners[j]))))
                self._face_cells.setdefault(key, []).append((cid, face_no))

    # ------------------------------------------------------------------
    #  Access
    # ------------------------------------------------------------------
    def cell(self, cell_id: int) -> Cell:
        corners = self.cells_connectivity[cell_id]
        return Cell(id=int(cell_id),
                    vertices=self.nodes_x_y_pos[corners],
                    nodes=tuple(int(n) for n in corners))

    def __iter__(self) -> Iterator[Cell]:
        for cid in range(self.n_cells):
            yield self.cell(cid)

    def __len__(self) -> int:
        return self.n_cells

    def cell_vertices(self) -> np.ndarray:
        """Vertex coordinates of all cells, shape (n_cells, 4, 2)."""
        return self.nodes_x_y_pos[self.cells_connectivity]

    def neighbor(self, cell_id: int, face_no: int):
        """Return (neighbour cell id, its local face number) or None on the boundary."""
        corners = self.cells_connectivity[cell_id]
        i, j = FACE_VERTICES[face_no]
        key = tuple(sorted((int(corners[i]), int(corners[j]))))
        for cid, fno in self._face_cells[key]:
            if cid != cell_id:
                return cid, fno
        return None

    def boundary_faces(self) -> List[Tuple[int, int]]:
        """All (cell id, local face number) pairs that have no neighbour."""
        return [owners[0] for owners in self._face_cells.values() if len(owners) == 1]

    def __repr__(self) -> str:
        return f"<QuadMesh nodes={self.n_nodes} cells={self.n_cells}>"
