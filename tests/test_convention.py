import pytest
from pyncfem.core.convention import GeometryConvention, GEOM

def test_defaults():
    conv = GeometryConvention()
    assert conv.degeneracy_rtol == 1e-12 and conv.warn_rtol == 1e-8
    assert conv.is_degenerate(0.0) and conv.is_degenerate(-1e-13)
    assert not conv.is_degenerate(1e-11)
    assert conv.is_degenerate(1e-11, rtol=1e-10)
    assert conv.is_nearly_degenerate(1e-9) and not conv.is_nearly_degenerate(0.1)
    assert isinstance(GEOM, GeometryConvention)

def test_env_overrides(monkeypatch):
    monkeypatch.setenv("PYNCFEM_DEGENERACY_RTOL", "1e-6")
    monkeypatch.setenv("PYNCFEM_WARN_RTOL", "")
    conv = GeometryConvention.from_env()
    assert conv.degeneracy_rtol == 1e-6
    assert conv.warn_rtol == 1e-8

def test_bad_env_value(monkeypatch):
    monkeypatch.setenv("PYNCFEM_POINT_TOL", "tiny")
    with pytest.raises(ValueError):
        GeometryConvention.from_env()
