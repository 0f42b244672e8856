"""
Benchmark binary dilation performance.

Tests circular and rectangular dilation at various volume sizes and radii.
"""

import logging
import time

import numpy as np

from paradilate import BinaryDilate, binary_dilate

# Suppress logging for cleaner output
logging.getLogger("paradilate").setLevel(logging.WARNING)


def generate_mask(shape, density: float = 0.001):
    """Generate a sparse random binary volume."""
    rng = np.random.default_rng(42)
    return (rng.random(shape) < density).astype(np.uint8)


def benchmark_dilate(shape, radius, shape_mode: str, iterations: int = 10):
    """Benchmark a single configuration."""
    print("\n" + "=" * 80)
    print(f"{shape_mode.upper()} DILATION {shape}, radius={radius} ({iterations} iterations)")
    print("=" * 80)

    mask = generate_mask(shape)
    dilate = BinaryDilate().radius(radius).shape_mode(shape_mode)

    # Warmup (includes JIT compilation)
    dilate(mask)

    times = []
    for _ in range(iterations):
        start = time.perf_counter()
        dilate(mask)
        end = time.perf_counter()
        times.append((end - start) * 1000)  # Convert to ms

    avg_time = np.mean(times)
    std_time = np.std(times)

    print(f"Time:       {avg_time:.3f} ms +/- {std_time:.3f} ms")
    print(f"Throughput: {mask.size / (avg_time / 1000) / 1e6:.1f}M voxels/sec")


def benchmark_scipy_reference(shape, radius: int, iterations: int = 3):
    """Compare with scipy.ndimage.binary_dilation using a ball element."""
    try:
        from scipy import ndimage
    except ImportError:
        print("\nscipy not installed, skipping reference comparison")
        return

    print("\n" + "=" * 80)
    print(f"SCIPY REFERENCE {shape}, radius={radius}")
    print("=" * 80)

    mask = generate_mask(shape)
    grid = np.indices((2 * radius + 1,) * len(shape)) - radius
    ball = (grid**2).sum(axis=0) <= radius**2

    binary_dilate(mask, radius=radius)

    start = time.perf_counter()
    expected = ndimage.binary_dilation(mask, structure=ball)
    scipy_ms = (time.perf_counter() - start) * 1000

    start = time.perf_counter()
    out = binary_dilate(mask, radius=radius)
    ours_ms = (time.perf_counter() - start) * 1000

    print(f"scipy:      {scipy_ms:.3f} ms")
    print(f"paradilate: {ours_ms:.3f} ms ({scipy_ms / ours_ms:.1f}x)")
    print(f"Identical:  {np.array_equal(out.astype(bool), expected)}")


def main():
    """Run all benchmarks."""
    print("=" * 80)
    print("PARADILATE PERFORMANCE BENCHMARKS")
    print("=" * 80)

    for radius in (1, 3, 8):
        benchmark_dilate((128, 128, 128), radius, "circular")
        benchmark_dilate((128, 128, 128), radius, "rectangular")

    benchmark_dilate((256, 256, 128), 5, "circular")
    benchmark_scipy_reference((96, 96, 96), 6)

    print("\n" + "=" * 80)
    print("ALL BENCHMARKS COMPLETED")
    print("=" * 80)


if __name__ == "__main__":
    main()
