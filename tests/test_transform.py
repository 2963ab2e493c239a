import numpy as np
from pyncfem.core.topology import Node
from pyncfem.fem.transform import (
    x_mapping, jacobian, det_jacobian, map_points, map_points_batched,
    fill_mapping_data, MappingData,
)
from pyncfem.fem.update_flags import UpdateFlags
from pyncfem.integration.quadrature import quad_rule

def test_reference_to_global_mapping():
    nodes = [Node(0, 0, 0), Node(1, 2, 0), Node(2, 0, 1), Node(3, 2, 1)]
    x = x_mapping(nodes, (0.0, 0.0))
    # center of the reference square goes to the center of the rectangle
    assert np.allclose(x, [1.0, 0.5])
    assert np.allclose(x_mapping(nodes, (1.0, -1.0)), [2.0, 0.0])
    # detJ is a quarter of the area for a rectangle
    assert np.isclose(det_jacobian(nodes, (0.2, 0.2)), 2.0 / 4)
    assert np.allclose(jacobian(nodes, (0.3, -0.7)), [[1.0, 0.0], [0.0, 0.5]])

def test_map_points_agree_with_x_mapping():
    V = np.array([[0.0, 0.0], [2.0, 0.2], [0.3, 1.5], [1.8, 1.9]])
    rule = quad_rule(3)
    pts = map_points(V, rule.points)
    ref = np.array([x_mapping(V, p) for p in rule.points])
    assert np.allclose(pts, ref)
    batched = map_points_batched(np.stack([V, V + 1.0]), rule.points)
    assert np.allclose(batched[0], pts) and np.allclose(batched[1], pts + 1.0)

def test_fill_mapping_data_only_touches_requested():
    V = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
    rule = quad_rule(2)
    out = MappingData.allocate(len(rule), UpdateFlags.JXW_VALUES)
    assert out.quadrature_points.shape == (0, 2)
    assert out.normal_vectors.shape == (0, 2)
    fill_mapping_data(V, rule, UpdateFlags.JXW_VALUES, out)
    assert np.allclose(out.JxW_values, 0.25)

def test_reference_basis_is_nodal():
    from pyncfem.fem.reference import get_reference
    from pyncfem.fem.reference.quad_q1 import VERTICES
    ref = get_reference("quad")
    for i, (x, y) in enumerate(VERTICES):
        assert np.allclose(ref.shape(float(x), float(y)), np.eye(4)[i])
    assert np.allclose(ref.grad(0.0, 0.0).sum(axis=0), 0.0)

def test_reference_caches_are_bounded():
    from pyncfem.fem.reference import get_reference
    ref = get_reference("quad")
    assert ref.shape.cache_info().maxsize is not None
    assert ref.grad.cache_info().maxsize is not None
