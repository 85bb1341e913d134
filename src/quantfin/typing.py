from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

# typing only
type FloatArray = NDArray[np.floating]
type ArrayLike = float | Sequence[float] | np.ndarray

# Runtime types
FloatDType = np.float64  # default runtime dtype
