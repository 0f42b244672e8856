"""
Example: binary dilation usage.

Demonstrates how to use paradilate for:
- Function-based dilation (circular and rectangular)
- Per-axis radii
- Physically spaced grids
- Reusable filter objects with staleness tracking
"""

import logging

import numpy as np

from paradilate import BinaryDilate, GridImage, binary_dilate, proximity_field

# Configure logging to see dilation statistics
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")


def generate_sample_mask(shape=(64, 64, 32), density: float = 0.001):
    """Generate a sparse random binary volume."""
    rng = np.random.default_rng(42)
    return (rng.random(shape) < density).astype(np.uint8)


def show_slice(mask: np.ndarray) -> None:
    for row in mask:
        print("  " + "".join("#" if v else "." for v in row))


def example_1_function_api():
    """Example 1: One-off dilation with binary_dilate()."""
    print("\n" + "=" * 70)
    print("EXAMPLE 1: Disc vs box")
    print("=" * 70)

    mask = np.zeros((11, 11), dtype=np.uint8)
    mask[5, 5] = 1

    print("\nCircular, radius 3:")
    show_slice(binary_dilate(mask, radius=3))

    print("\nRectangular, radius 3:")
    show_slice(binary_dilate(mask, radius=3, shape_mode="rectangular"))


def example_2_per_axis_radius():
    """Example 2: Ellipse and box with a different radius per axis."""
    print("\n" + "=" * 70)
    print("EXAMPLE 2: Per-axis radius (2, 5)")
    print("=" * 70)

    mask = np.zeros((9, 15), dtype=np.uint8)
    mask[4, 7] = 1

    print("\nCircular (ellipse):")
    show_slice(binary_dilate(mask, radius=(2, 5)))

    print("\nRectangular:")
    show_slice(binary_dilate(mask, radius=(2, 5), shape_mode="rectangular"))


def example_3_spacing():
    """Example 3: Radius in physical units on an anisotropic grid."""
    print("\n" + "=" * 70)
    print("EXAMPLE 3: Physical spacing (1.0, 2.0)")
    print("=" * 70)

    mask = np.zeros((11, 11), dtype=np.uint8)
    mask[5, 5] = 1
    img = GridImage(mask, spacing=(1.0, 2.0))

    print("\nRadius 4 voxels (spacing ignored):")
    show_slice(binary_dilate(img, radius=4).data)

    print("\nRadius 4 units (spacing used):")
    show_slice(binary_dilate(img, radius=4, use_spacing=True).data)

    field = proximity_field(mask[5], radius=3)
    print(f"\nProximity field along a row: {field}")


def example_4_filter_object():
    """Example 4: Reusable filter with update()."""
    print("\n" + "=" * 70)
    print("EXAMPLE 4: Filter object")
    print("=" * 70)

    volume = generate_sample_mask()
    dilate = BinaryDilate().radius(3).set_input(volume)
    print(f"\n{dilate}")

    out = dilate.update()
    print(f"Foreground: {volume.sum()} -> {out.data.sum()}")
    print(f"{dilate}")

    # Nothing changed: cached output is returned
    assert dilate.update() is out

    dilate.rectangular()
    print(f"\nAfter switching shape: {dilate}")
    out = dilate.update()
    print(f"Foreground: {volume.sum()} -> {out.data.sum()}")


def main():
    """Run all examples."""
    print("\n" + "=" * 70)
    print("PARADILATE EXAMPLES")
    print("=" * 70)

    example_1_function_api()
    example_2_per_axis_radius()
    example_3_spacing()
    example_4_filter_object()

    print("\n" + "=" * 70)
    print("ALL EXAMPLES COMPLETED")
    print("=" * 70)


if __name__ == "__main__":
    main()
