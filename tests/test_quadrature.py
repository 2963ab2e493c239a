import numpy as np
import pytest
from pyncfem.integration import quadrature as q

def integrate_ref_quad(func, order):
    rule = q.quad_rule(order)
    fvals = np.array([func(xy) for xy in rule.points])
    return (fvals * rule.weights).sum()

def test_constant_volume():
    for order in (1, 2, 3, 4):
        rule = q.quad_rule(order)
        assert len(rule) == order * order
        assert np.isclose(rule.weights.sum(), 4.0, rtol=1e-12)

def test_polynomial_exactness_quad():
    # ∫ x^2 y^2 over [-1,1]^2 = 4/9, needs 2 points per direction
    val = integrate_ref_quad(lambda xy: xy[0]**2 * xy[1]**2, order=2)
    assert np.isclose(val, 4/9, rtol=1e-12)

def test_rules_are_read_only():
    rule = q.quad_rule(2)
    with pytest.raises(ValueError):
        rule.weights[0] = 0.0
    assert q.quad_rule(2) is rule

@pytest.mark.parametrize("face_no, fixed_axis, value", [(0, 0, -1), (1, 0, 1), (2, 1, -1), (3, 1, 1)])
def test_face_rule(face_no, fixed_axis, value):
    rule = q.face_rule(face_no, 3)
    assert np.isclose(rule.weights.sum(), 2.0, rtol=1e-12)
    assert np.allclose(rule.points[:, fixed_axis], value)
    free = rule.points[:, 1 - fixed_axis]
    assert np.all(np.diff(free) > 0)          # runs from the lower-index vertex

def test_face_rule_bad_face():
    with pytest.raises(IndexError):
        q.face_rule(4, 2)

def test_subface_rule_halves():
    lo = q.subface_rule(2, 0, 2)
    hi = q.subface_rule(2, 1, 2)
    assert np.isclose(lo.weights.sum(), 1.0) and np.isclose(hi.weights.sum(), 1.0)
    assert np.all(lo.points[:, 0] < 0.0) and np.all(hi.points[:, 0] > 0.0)
    assert np.allclose(lo.points[:, 1], -1.0)
    # the two halves integrate t^3 like the full face (odd -> 0) and t^2 -> 2/3
    t = np.concatenate([lo.points[:, 0], hi.points[:, 0]])
    w = np.concatenate([lo.weights, hi.weights])
    assert np.isclose((w * t**2).sum(), 2/3)
    with pytest.raises(IndexError):
        q.subface_rule(2, 2, 2)

def test_quadrature_validates_shapes():
    with pytest.raises(ValueError):
        q.Quadrature(np.zeros((3, 3)), np.zeros(3))
    with pytest.raises(ValueError):
        q.Quadrature(np.zeros((3, 2)), np.zeros(2))

def test_reference_points():
    rule = q.reference_points([0.25, -0.5])
    assert rule.points.shape == (1, 2) and rule.weights.tolist() == [1.0]

def test_line_quadrature_length():
    pts, wts = q.line_quadrature(np.array([0.0, 0.0]), np.array([3.0, 4.0]), order=3)
    assert np.isclose(wts.sum(), 5.0)
    assert np.allclose(pts[:, 1], 4/3 * pts[:, 0])
