"""Dense structured-grid field storage.

A ``FieldStore`` owns one numpy buffer of shape ``(nx, ny)`` or
``(nx, ny, ncomp)``. Stores of identical shape can exchange their buffers
in O(1) (``swap_storage``), which the point-Jacobi scheme uses to turn the
current solution into the read-side operand without copying.
"""

from typing import Optional, Tuple

import numpy as np

from .errors import ShapeMismatchError


class FieldStore:
    """Structured 2D field with 1 or N components per node.

    Parameters
    ----------
    nx, ny : int
        Number of nodes in x and y.
    ncomp : int, optional
        Number of components per node. ``None`` gives a scalar field.
    fill : float
        Initial value of every entry.
    """

    def __init__(self, nx: int, ny: int, ncomp: Optional[int] = None, fill: float = 0.0):
        shape = (nx, ny) if ncomp is None else (nx, ny, ncomp)
        self._data = np.full(shape, fill, dtype=np.float64)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "FieldStore":
        """Create a store holding a copy of ``array`` (2D or 3D)."""
        array = np.asarray(array, dtype=np.float64)
        if array.ndim not in (2, 3):
            raise ValueError(f"Expected a 2D or 3D array, got shape {array.shape}")
        ncomp = array.shape[2] if array.ndim == 3 else None
        store = cls(array.shape[0], array.shape[1], ncomp)
        store._data[...] = array
        return store

    @property
    def shape(self) -> Tuple[int, ...]:
        return self._data.shape

    @property
    def data(self) -> np.ndarray:
        """Current underlying buffer (changes identity after ``swap_storage``)."""
        return self._data

    def view(self) -> np.ndarray:
        """Read-only view of the current buffer."""
        v = self._data.view()
        v.flags.writeable = False
        return v

    # Fast path: no bounds checking beyond numpy's own
    def get(self, i: int, j: int, k: Optional[int] = None) -> float:
        if k is None:
            return self._data[i, j]
        return self._data[i, j, k]

    def set(self, i: int, j: int, k_or_value, value=None):
        if value is None:
            self._data[i, j] = k_or_value
        else:
            self._data[i, j, k_or_value] = value

    def _check_index(self, i: int, j: int, k: Optional[int]):
        index = (i, j) if k is None else (i, j, k)
        if len(index) != self._data.ndim:
            raise IndexError(
                f"Store of shape {self.shape} needs {self._data.ndim} indices, got {len(index)}"
            )
        for idx, n in zip(index, self.shape):
            if not 0 <= idx < n:
                raise IndexError(f"Index {index} out of range for shape {self.shape}")

    def get_checked(self, i: int, j: int, k: Optional[int] = None) -> float:
        """Bounds-checked ``get`` (negative indices are rejected)."""
        self._check_index(i, j, k)
        return self.get(i, j, k)

    def set_checked(self, i: int, j: int, k_or_value, value=None):
        """Bounds-checked ``set`` (negative indices are rejected)."""
        k = None if value is None else k_or_value
        self._check_index(i, j, k)
        self.set(i, j, k_or_value, value)

    def copy_into(self, other: "FieldStore"):
        """Deep element-wise copy of this store into ``other``."""
        if other.shape != self.shape:
            raise ShapeMismatchError(
                f"Cannot copy store of shape {self.shape} into shape {other.shape}"
            )
        np.copyto(other._data, self._data)

    def swap_storage(self, other: "FieldStore"):
        """Exchange the underlying buffers with ``other`` (no copy)."""
        if other.shape != self.shape:
            raise ShapeMismatchError(
                f"Cannot swap store of shape {self.shape} with shape {other.shape}"
            )
        self._data, other._data = other._data, self._data

    def __repr__(self):
        return f"FieldStore(shape={self.shape})"
