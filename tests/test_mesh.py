import numpy as np
import pytest
from pyncfem.core.mesh import QuadMesh
from pyncfem.core.topology import Cell, Node
from pyncfem.utils.meshgen import structured_quad, structured_quad_mesh, distort_interior_nodes

def test_structured_quad_numbering():
    nodes, cells = structured_quad(2.0, 1.0, nx=2, ny=1)
    assert nodes.shape == (6, 2) and cells.shape == (2, 4)
    # bl, br, tl, tr
    assert cells[0].tolist() == [0, 1, 3, 4]
    assert cells[1].tolist() == [1, 2, 4, 5]
    assert np.allclose(nodes[5], [2.0, 1.0])

def test_structured_quad_offset_and_bad_sizes():
    nodes, _ = structured_quad(1.0, 1.0, nx=1, ny=1, offset=(2.0, -1.0))
    assert np.allclose(nodes.min(axis=0), [2.0, -1.0])
    with pytest.raises(ValueError):
        structured_quad(1.0, 1.0, nx=0, ny=1)
    with pytest.raises(ValueError):
        structured_quad(-1.0, 1.0, nx=1, ny=1)

def test_neighbors_and_boundary():
    mesh = structured_quad_mesh(1.0, 1.0, nx=2, ny=2)
    assert len(mesh) == 4 and mesh.n_nodes == 9
    # cell 0 is bottom-left; its right face (1) touches cell 1's left face (0)
    assert mesh.neighbor(0, 1) == (1, 0)
    assert mesh.neighbor(0, 3) == (2, 2)
    assert mesh.neighbor(0, 0) is None
    assert len(mesh.boundary_faces()) == 8

def test_cells_and_vertices():
    mesh = structured_quad_mesh(1.0, 1.0, nx=2, ny=2)
    cell = mesh.cell(3)
    assert isinstance(cell, Cell)
    assert np.allclose(cell.vertices, [[0.5, 0.5], [1.0, 0.5], [0.5, 1.0], [1.0, 1.0]])
    assert cell.contains_node(8)
    assert mesh.cell_vertices().shape == (4, 4, 2)
    assert [c.id for c in mesh] == [0, 1, 2, 3]

def test_cell_faces_and_subfaces():
    cell = Cell(id=0, vertices=[[0, 0], [2, 0], [0, 2], [2, 2]])
    p0, p1 = cell.face(3)
    assert np.allclose(p0, [0, 2]) and np.allclose(p1, [2, 2])
    assert np.allclose(cell.face_midpoint(0), [0, 1])
    assert np.allclose(cell.subface(2, 1)[0], [1, 0])
    with pytest.raises(IndexError):
        cell.face(4)
    with pytest.raises(ValueError):
        Cell(id=1, vertices=[[0, 0], [1, 0], [0, 1]])

def test_mesh_from_nodes_and_validation():
    nodes = [Node(0, 0, 0), Node(1, 1, 0), Node(2, 0, 1), Node(3, 1, 1)]
    mesh = QuadMesh(nodes, [[0, 1, 2, 3]])
    assert np.allclose(mesh.nodes_x_y_pos[3], [1, 1])
    with pytest.raises(ValueError):
        QuadMesh(nodes, [[0, 1, 2]])

def test_distortion_keeps_boundary():
    nodes, _ = structured_quad(1.0, 1.0, nx=4, ny=4)
    moved = distort_interior_nodes(nodes, 0.05, seed=0)
    on_bnd = np.any((nodes == 0.0) | (nodes == 1.0), axis=1)
    assert np.allclose(moved[on_bnd], nodes[on_bnd])
    assert not np.allclose(moved[~on_bnd], nodes[~on_bnd])

def test_cell_and_node_carry_geometry_only():
    import dataclasses
    assert [f.name for f in dataclasses.fields(Cell)] == ['id', 'vertices', 'nodes']
    n = Node(7, 0.5, 2.0)
    assert np.asarray(n).tolist() == [0.5, 2.0] and list(n) == [0.5, 2.0]
    mesh = QuadMesh([Node(0, 0, 0), Node(1, 1, 0), Node(2, 0, 1), Node(3, 1, 1)], [[0, 1, 2, 3]])
    assert not hasattr(mesh, 'nodes_list')
