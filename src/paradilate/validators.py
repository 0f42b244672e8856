"""
Validation decorators for paradilate filters.

Provides reusable validation logic for setter arguments on the filter and its stages.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any

import numpy as np

# Type alias for callables
F = Callable[..., Any]


def _get_value(args: tuple, kwargs: dict, param_name: str, param_index: int) -> tuple[bool, Any]:
    """Fetch an argument by position or keyword, reporting whether it was supplied."""
    if len(args) > param_index:
        return True, args[param_index]
    if param_name in kwargs:
        return True, kwargs[param_name]
    return False, None


def validate_finite(param_name: str = "value", param_index: int = 1) -> Callable[[F], F]:
    """
    Decorator for validating a scalar or sequence of finite real numbers.

    Non-positive values are allowed through; only NaN, infinities and
    non-numeric input are rejected.

    Args:
        param_name: Name of parameter for error messages
        param_index: Position of parameter in function signature

    Returns:
        Decorated function with finiteness validation

    Example:
        >>> @validate_finite('radius')
        ... def radius(self, radius) -> Self:
        ...     ...
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            supplied, value = _get_value(args, kwargs, param_name, param_index)
            if not supplied:
                return func(*args, **kwargs)

            if isinstance(value, bool):
                raise TypeError(f"{param_name} must be a number or sequence of numbers, got bool")

            try:
                values = np.asarray(value, dtype=np.float64)
            except (TypeError, ValueError) as exc:
                raise TypeError(
                    f"{param_name} must be a number or sequence of numbers, "
                    f"got {type(value).__name__}"
                ) from exc

            if values.ndim > 1:
                raise ValueError(f"{param_name} must be a scalar or 1-D sequence, got shape {values.shape}")
            if values.size == 0:
                raise ValueError(f"{param_name} must not be empty")
            if not np.all(np.isfinite(values)):
                raise ValueError(f"{param_name}={value} must be finite (no NaN or inf)")

            return func(*args, **kwargs)

        return wrapper  # type: ignore

    return decorator


def validate_type(
    expected_type: type | tuple[type, ...],
    param_name: str = "value",
    param_index: int = 1,
) -> Callable[[F], F]:
    """
    Decorator for validating parameter types.

    Args:
        expected_type: Expected type or tuple of types
        param_name: Name of parameter for error messages
        param_index: Position of parameter in function signature

    Returns:
        Decorated function with type validation

    Example:
        >>> @validate_type(bool, 'enabled')
        ... def use_spacing(self, enabled: bool = True) -> Self:
        ...     ...
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            supplied, value = _get_value(args, kwargs, param_name, param_index)
            if not supplied:
                return func(*args, **kwargs)

            if not isinstance(value, expected_type):
                if isinstance(expected_type, tuple):
                    type_names = ", ".join(t.__name__ for t in expected_type)
                    raise TypeError(
                        f"{param_name} must be one of ({type_names}), got {type(value).__name__}"
                    )
                else:
                    raise TypeError(
                        f"{param_name} must be {expected_type.__name__}, got {type(value).__name__}"
                    )

            return func(*args, **kwargs)

        return wrapper  # type: ignore

    return decorator


def validate_choices(
    valid_choices: set[str],
    param_name: str = "value",
    param_index: int = 1,
) -> Callable[[F], F]:
    """
    Decorator for validating parameter choices.

    Args:
        valid_choices: Set of valid string choices
        param_name: Name of parameter for error messages
        param_index: Position of parameter in function signature

    Returns:
        Decorated function with choice validation

    Example:
        >>> @validate_choices({'circular', 'rectangular'}, 'mode')
        ... def shape_mode(self, mode: str) -> Self:
        ...     ...
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            supplied, value = _get_value(args, kwargs, param_name, param_index)
            if not supplied:
                return func(*args, **kwargs)

            if value not in valid_choices:
                choices_str = ", ".join(sorted(valid_choices))
                raise ValueError(
                    f"{param_name}='{value}' is not valid. Valid options are: {choices_str}"
                )

            return func(*args, **kwargs)

        return wrapper  # type: ignore

    return decorator
