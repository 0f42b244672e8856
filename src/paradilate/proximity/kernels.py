"""
Numba-optimized kernels for the separable parabolic proximity transform.

Each pass works on one axis of the field, treated as a 2-D array of
independent lines ``[n_lines, n]``. Lines are processed in parallel.

Two 1-D passes are provided:

- ``parabolic_envelope_line``: lower envelope of parabolas
  ``g(p) = min_q f(q) + w (p - q)^2`` (Felzenszwalb & Huttenlocher). Chained
  over all axes this gives the weighted squared Euclidean distance.
- ``minmax_line``: ``g(p) = min_q max(f(q), w (p - q)^2)``. Chained over all
  axes this gives the weighted squared Chebyshev distance used for box
  structuring elements.

Both passes are short-circuited at ``cap``: samples above ``cap`` never
contribute and results above ``cap`` are stored as ``+inf``.
"""

import numpy as np
from numba import njit, prange

# fastmath stays off in this module: the field carries +inf.


@njit(cache=True, nogil=True)
def parabolic_envelope_line(
    f: np.ndarray,
    weight: float,
    cap: float,
    v: np.ndarray,
    z: np.ndarray,
    buf: np.ndarray,
) -> None:
    """
    Lower-envelope parabolic pass over a single line (in-place).

    Args:
        f: Line of the field [n] (modified in-place)
        weight: Multiplier on squared index distance along this axis (> 0, finite)
        cap: Short-circuit limit; results above it become +inf
        v: Scratch [n] int64, apex positions of envelope parabolas
        z: Scratch [n + 1] float64, envelope breakpoints
        buf: Scratch [n] float64, copy of the input line
    """
    n = f.shape[0]
    for q in range(n):
        buf[q] = f[q]

    # Build the envelope from apexes at or below the cap only
    k = -1
    for q in range(n):
        fq = buf[q]
        if not fq <= cap:
            continue
        if k < 0:
            k = 0
            v[0] = q
            z[0] = -np.inf
            z[1] = np.inf
            continue

        vk = v[k]
        s = ((fq + weight * q * q) - (buf[vk] + weight * vk * vk)) / (2.0 * weight * (q - vk))
        while s <= z[k]:
            k -= 1
            vk = v[k]
            s = ((fq + weight * q * q) - (buf[vk] + weight * vk * vk)) / (
                2.0 * weight * (q - vk)
            )
        k += 1
        v[k] = q
        z[k] = s
        z[k + 1] = np.inf

    if k < 0:
        for p in range(n):
            f[p] = np.inf
        return

    j = 0
    for p in range(n):
        while z[j + 1] < p:
            j += 1
        d = p - v[j]
        val = weight * d * d + buf[v[j]]
        if val <= cap:
            f[p] = val
        else:
            f[p] = np.inf


@njit(cache=True, nogil=True)
def minmax_line(
    f: np.ndarray,
    weight: float,
    cap: float,
    reach: int,
    buf: np.ndarray,
) -> None:
    """
    Min-max pass over a single line (in-place).

    Only neighbours within ``reach`` samples are visited and the scan stops
    as soon as ``weight * d^2`` can no longer beat the current best value.

    Args:
        f: Line of the field [n] (modified in-place)
        weight: Multiplier on squared index distance along this axis (> 0, finite)
        cap: Short-circuit limit; results above it become +inf
        reach: Largest index offset d with weight * d^2 <= cap
        buf: Scratch [n] float64, copy of the input line
    """
    n = f.shape[0]
    for q in range(n):
        buf[q] = f[q]

    for p in range(n):
        best = buf[p]
        for d in range(1, reach + 1):
            wd = weight * d * d
            if wd >= best:
                break
            lo = p - d
            if lo >= 0:
                c = buf[lo]
                if c < wd:
                    c = wd
                if c < best:
                    best = c
            hi = p + d
            if hi < n:
                c = buf[hi]
                if c < wd:
                    c = wd
                if c < best:
                    best = c
        if best <= cap:
            f[p] = best
        else:
            f[p] = np.inf


@njit(parallel=True, cache=True, nogil=True)
def parabolic_envelope_rows(lines: np.ndarray, weight: float, cap: float) -> None:
    """
    Apply ``parabolic_envelope_line`` to every row of a 2-D array (in-place).

    Args:
        lines: Field lines [n_lines, n] float64, C-contiguous
        weight: Multiplier on squared index distance along the lines
        cap: Short-circuit limit
    """
    n_lines, n = lines.shape
    for i in prange(n_lines):
        v = np.empty(n, dtype=np.int64)
        z = np.empty(n + 1, dtype=np.float64)
        buf = np.empty(n, dtype=np.float64)
        parabolic_envelope_line(lines[i], weight, cap, v, z, buf)


@njit(parallel=True, cache=True, nogil=True)
def minmax_rows(lines: np.ndarray, weight: float, cap: float, reach: int) -> None:
    """
    Apply ``minmax_line`` to every row of a 2-D array (in-place).

    Args:
        lines: Field lines [n_lines, n] float64, C-contiguous
        weight: Multiplier on squared index distance along the lines
        cap: Short-circuit limit
        reach: Largest index offset d with weight * d^2 <= cap
    """
    n_lines, n = lines.shape
    for i in prange(n_lines):
        buf = np.empty(n, dtype=np.float64)
        minmax_line(lines[i], weight, cap, reach, buf)


def reach_for(weight: float, cap: float, n: int) -> int:
    """
    Largest index offset ``d`` (at most ``n - 1``) with ``weight * d**2 <= cap``.

    Args:
        weight: Multiplier on squared index distance (> 0)
        cap: Short-circuit limit (>= 0)
        n: Line length

    Returns:
        Number of neighbours to visit on each side
    """
    if not np.isfinite(weight) or weight <= 0.0 or cap <= 0.0 or n <= 1:
        return 0
    reach = int(np.floor(np.sqrt(cap / weight)))
    # Correct for rounding in sqrt at exact squares
    while reach > 0 and weight * reach * reach > cap:
        reach -= 1
    while weight * (reach + 1) * (reach + 1) <= cap:
        reach += 1
    return min(reach, n - 1)


def separable_pass(field: np.ndarray, axis: int, weight: float, cap: float, mode: str) -> np.ndarray:
    """
    Run one 1-D pass of the proximity transform along ``axis``.

    Args:
        field: Proximity field (float64), any dimension
        axis: Axis to process
        weight: Multiplier on squared index distance along ``axis``
        cap: Short-circuit limit
        mode: "circular" (parabolic envelope) or "rectangular" (min-max)

    Returns:
        New field with the pass applied (same shape as ``field``); the input is not modified
    """
    moved = np.moveaxis(field, axis, -1)
    moved_shape = moved.shape
    n = moved_shape[-1]
    lines = np.array(moved, dtype=np.float64, order="C").reshape(-1, n)

    if mode == "circular":
        parabolic_envelope_rows(lines, weight, cap)
    else:
        reach = reach_for(weight, cap, n)
        minmax_rows(lines, weight, cap, reach)

    return np.moveaxis(lines.reshape(moved_shape), -1, axis)
