"""Tests for FieldStore storage, accessors, copy and swap."""

import numpy as np
import pytest

from ldc_ac.errors import ShapeMismatchError
from ldc_ac.field_store import FieldStore


class TestFieldStoreAccess:
    """Element access."""

    def test_shapes(self):
        assert FieldStore(4, 5).shape == (4, 5)
        assert FieldStore(4, 5, 3).shape == (4, 5, 3)

    def test_fill_value(self):
        store = FieldStore(3, 3, 3, fill=2.5)
        assert np.all(store.data == 2.5)

    def test_get_set_component(self):
        store = FieldStore(4, 4, 3)
        store.set(1, 2, 1, 7.0)
        assert store.get(1, 2, 1) == 7.0
        assert store.get(1, 2, 0) == 0.0

    def test_get_set_scalar(self):
        store = FieldStore(4, 4)
        store.set(3, 0, -1.5)
        assert store.get(3, 0) == -1.5

    def test_checked_access_in_range(self):
        store = FieldStore(4, 4, 3)
        store.set_checked(3, 3, 2, 1.0)
        assert store.get_checked(3, 3, 2) == 1.0

    @pytest.mark.parametrize("index", [(4, 0, 0), (0, 4, 0), (0, 0, 3), (-1, 0, 0)])
    def test_checked_access_out_of_range(self, index):
        store = FieldStore(4, 4, 3)
        with pytest.raises(IndexError):
            store.get_checked(*index)
        with pytest.raises(IndexError):
            store.set_checked(*index, 1.0)

    def test_checked_access_wrong_rank(self):
        store = FieldStore(4, 4, 3)
        with pytest.raises(IndexError):
            store.get_checked(0, 0)

    def test_view_is_read_only(self):
        store = FieldStore(3, 3)
        view = store.view()
        with pytest.raises(ValueError):
            view[0, 0] = 1.0

    def test_from_array_copies(self):
        arr = np.arange(12.0).reshape(2, 2, 3)
        store = FieldStore.from_array(arr)
        arr[0, 0, 0] = 100.0
        assert store.get(0, 0, 0) == 0.0


class TestFieldStoreCopySwap:
    """Deep copy and buffer exchange."""

    def test_copy_into_is_deep(self):
        a = FieldStore.from_array(np.random.default_rng(0).random((5, 5, 3)))
        b = FieldStore(5, 5, 3)
        a.copy_into(b)
        np.testing.assert_array_equal(a.data, b.data)

        b.set(0, 0, 0, -1.0)
        assert a.get(0, 0, 0) != -1.0

    def test_swap_exchanges_contents(self):
        a = FieldStore(3, 3, fill=1.0)
        b = FieldStore(3, 3, fill=2.0)
        buf_a, buf_b = a.data, b.data

        a.swap_storage(b)

        assert a.data is buf_b
        assert b.data is buf_a
        assert np.all(a.data == 2.0)
        assert np.all(b.data == 1.0)

    def test_swap_is_its_own_inverse(self):
        rng = np.random.default_rng(1)
        a = FieldStore.from_array(rng.random((4, 6, 3)))
        b = FieldStore.from_array(rng.random((4, 6, 3)))
        a0, b0 = a.data.copy(), b.data.copy()

        a.swap_storage(b)
        a.swap_storage(b)

        np.testing.assert_array_equal(a.data, a0)
        np.testing.assert_array_equal(b.data, b0)

    def test_copy_shape_mismatch(self):
        with pytest.raises(ShapeMismatchError):
            FieldStore(3, 3, 3).copy_into(FieldStore(3, 4, 3))

    def test_swap_shape_mismatch(self):
        with pytest.raises(ShapeMismatchError):
            FieldStore(3, 3).swap_storage(FieldStore(3, 3, 3))
