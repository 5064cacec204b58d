"""
bo-engine Domain Validators

Pure checks for domains and points. The runner calls these before it
trusts any externally supplied point; nothing here clamps or rounds.
"""

import math
from typing import Any, List, Mapping, Sequence, Union

import numpy as np
from pydantic import ValidationError as PydanticValidationError

from bo_engine.exceptions import ValidationError
from bo_engine.spec.models import (
    CategoricalDimension,
    ContinuousDimension,
    Domain,
    IntegerDimension,
)


def domain_errors(domain: Domain) -> List[str]:
    """
    Check a Domain for well-formed dimensions.

    Args:
        domain: Domain to check (may have been built without validation)

    Returns:
        List of validation error messages (empty if valid)
    """
    errors: List[str] = []

    dimensions = getattr(domain, "dimensions", None)
    if not dimensions:
        errors.append("Domain must have at least one dimension")
        return errors

    for i, dim in enumerate(dimensions):
        if isinstance(dim, (ContinuousDimension, IntegerDimension)):
            bounds = tuple(dim.bounds)
            if len(bounds) != 2:
                errors.append(f"Dimension {i}: bounds must be (min, max)")
                continue
            lo, hi = bounds
            if not (math.isfinite(lo) and math.isfinite(hi)):
                errors.append(f"Dimension {i}: bounds must be finite")
            elif lo >= hi:
                errors.append(f"Dimension {i}: invalid bounds [{lo}, {hi}]")

        elif isinstance(dim, CategoricalDimension):
            if not dim.levels:
                errors.append(
                    f"Dimension {i}: categorical dimension must have at least one level"
                )
        else:
            errors.append(f"Dimension {i}: unknown dimension type {type(dim).__name__}")

    return errors


def validate_domain(domain: Union[Domain, Mapping[str, Any]]) -> Domain:
    """
    Validate a domain.

    Args:
        domain: Domain instance or a mapping with a ``dimensions`` list

    Returns:
        The validated Domain

    Raises:
        ValidationError: If the domain is malformed
    """
    if not isinstance(domain, Domain):
        try:
            domain = Domain.model_validate(domain)
        except PydanticValidationError as e:
            raise ValidationError(
                [f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors()]
            ) from e

    errors = domain_errors(domain)
    if errors:
        raise ValidationError(errors)
    return domain


def point_errors(x: Sequence[float], domain: Domain) -> List[str]:
    """
    Check a point against a domain.

    Args:
        x: Point with one entry per dimension
        domain: Domain the point must lie in

    Returns:
        List of validation error messages (empty if valid)
    """
    errors: List[str] = []
    values = np.asarray(x, dtype=float).ravel()

    if values.shape[0] != domain.n_dims:
        errors.append(
            f"Point dimension mismatch: expected {domain.n_dims}, got {values.shape[0]}"
        )
        return errors

    for i, (dim, value) in enumerate(zip(domain.dimensions, values)):
        if not math.isfinite(value):
            errors.append(f"Value {value} for dimension {i} is not finite")
            continue

        if isinstance(dim, ContinuousDimension):
            lo, hi = dim.bounds
            if value < lo or value > hi:
                errors.append(
                    f"Value {value} out of bounds [{lo}, {hi}] for dimension {i}"
                )

        elif isinstance(dim, IntegerDimension):
            lo, hi = dim.bounds
            if not float(value).is_integer() or value < lo or value > hi:
                errors.append(
                    f"Value {value} must be integer in [{lo}, {hi}] for dimension {i}"
                )

        elif isinstance(dim, CategoricalDimension):
            n_levels = len(dim.levels)
            if not float(value).is_integer() or value < 0 or value >= n_levels:
                errors.append(
                    f"Categorical index {value} out of range [0, {n_levels}) "
                    f"for dimension {i}"
                )

    return errors


def validate_point(x: Sequence[float], domain: Domain) -> np.ndarray:
    """
    Validate a point against a domain.

    Returns:
        The point as a float array

    Raises:
        ValidationError: If the point lies outside the domain
    """
    errors = point_errors(x, domain)
    if errors:
        raise ValidationError(errors)
    return np.asarray(x, dtype=float).ravel()
