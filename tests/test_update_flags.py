import itertools

import pytest

from pyncfem.errors import UnsupportedFlagCombinationError
from pyncfem.fem.p1nc import P1NCElement
from pyncfem.fem.update_flags import FlagClosure, UpdateFlags as F

BASIC = [F.VALUES, F.GRADIENTS, F.HESSIANS, F.QUADRATURE_POINTS,
         F.CELL_NORMAL_VECTORS, F.JXW_VALUES]


def all_combinations():
    for r in range(len(BASIC) + 1):
        for combo in itertools.combinations(BASIC, r):
            f = F.DEFAULT
            for c in combo:
                f |= c
            yield f


def test_values_pull_in_quadrature_points():
    fe = P1NCElement()
    assert fe.resolve_update_flags(F.VALUES) == F.VALUES | F.QUADRATURE_POINTS


def test_normals_pull_in_jxw():
    fe = P1NCElement()
    assert fe.resolve_update_flags(F.CELL_NORMAL_VECTORS) == F.CELL_NORMAL_VECTORS | F.JXW_VALUES


def test_gradients_and_hessians_add_nothing():
    fe = P1NCElement()
    assert fe.resolve_update_flags(F.GRADIENTS) == F.GRADIENTS
    assert fe.resolve_update_flags(F.HESSIANS) == F.HESSIANS
    assert fe.resolve_update_flags(F.DEFAULT) == F.DEFAULT


def test_combined_request():
    fe = P1NCElement()
    got = fe.resolve_update_flags(F.VALUES | F.GRADIENTS | F.CELL_NORMAL_VECTORS)
    assert got == (F.VALUES | F.GRADIENTS | F.QUADRATURE_POINTS
                   | F.CELL_NORMAL_VECTORS | F.JXW_VALUES)


def test_closure_is_idempotent_and_monotone():
    fe = P1NCElement()
    for f in all_combinations():
        once = fe.resolve_update_flags(f)
        assert fe.resolve_update_flags(once) == once
        assert once & f == f


def test_nothing_added_without_a_trigger():
    fe = P1NCElement()
    for f in all_combinations():
        out = fe.resolve_update_flags(f)
        if not f & F.VALUES and not f & F.QUADRATURE_POINTS:
            assert not out & F.QUADRATURE_POINTS
        if not f & F.CELL_NORMAL_VECTORS and not f & F.JXW_VALUES:
            assert not out & F.JXW_VALUES


def test_unknown_bits_pass_through():
    fe = P1NCElement()
    unknown = 1 << 12
    out = fe.resolve_update_flags(unknown | int(F.VALUES))
    assert int(out) & unknown
    assert out & F.QUADRATURE_POINTS
    assert int(fe.resolve_update_flags(unknown)) == unknown


def test_plain_integers_are_accepted():
    fe = P1NCElement()
    assert fe.resolve_update_flags(int(F.VALUES)) == F.VALUES | F.QUADRATURE_POINTS


def test_closure_rejects_key_missing_from_its_dependencies():
    with pytest.raises(UnsupportedFlagCombinationError):
        FlagClosure({F.VALUES: F.QUADRATURE_POINTS})


def test_closure_rejects_compound_key():
    with pytest.raises(UnsupportedFlagCombinationError):
        FlagClosure({F.VALUES | F.GRADIENTS: F.VALUES | F.GRADIENTS})


def test_closure_rejects_non_idempotent_table():
    # VALUES pulls in GRADIENTS, which itself needs HESSIANS
    with pytest.raises(UnsupportedFlagCombinationError):
        FlagClosure({F.VALUES: F.VALUES | F.GRADIENTS,
                     F.GRADIENTS: F.GRADIENTS | F.HESSIANS})


def test_closure_table_is_a_copy():
    closure = FlagClosure({F.VALUES: F.VALUES | F.QUADRATURE_POINTS})
    table = closure.table
    table[F.GRADIENTS] = F.GRADIENTS | F.HESSIANS
    assert closure(F.GRADIENTS) == F.GRADIENTS
    assert "VALUES" in repr(closure)
