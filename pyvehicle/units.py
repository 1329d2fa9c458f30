"""
Unit conversion utilities for vehicle modeling.

All internal calculations are performed in SI units:
- meters (m) for length
- kilograms (kg) for mass
- newtons (N) for force
- newton-meters (N*m) for torque

This module provides conversion functions to/from various units.
"""
import numpy as np
from typing import Union


# Length conversion factors to meters (base unit)
UNIT_TO_M = {
    'mm': 0.001,
    'millimeter': 0.001,
    'millimeters': 0.001,
    'cm': 0.01,
    'centimeter': 0.01,
    'centimeters': 0.01,
    'm': 1.0,
    'meter': 1.0,
    'meters': 1.0,
    'in': 0.0254,
    'inch': 0.0254,
    'inches': 0.0254,
    'ft': 0.3048,
    'foot': 0.3048,
    'feet': 0.3048,
}

# Conversion factors from meters
M_TO_UNIT = {unit: 1.0 / factor for unit, factor in UNIT_TO_M.items()}


# Mass conversion factors to kilograms (base unit)
MASS_UNIT_TO_KG = {
    'kg': 1.0,
    'kilogram': 1.0,
    'kilograms': 1.0,
    'g': 0.001,
    'gram': 0.001,
    'grams': 0.001,
    'lb': 0.453592,
    'lbs': 0.453592,
    'pound': 0.453592,
    'pounds': 0.453592,
    'ton': 1000.0,
    'tonne': 1000.0,
}

# Force conversion factors to newtons (base unit)
FORCE_UNIT_TO_N = {
    'n': 1.0,
    'newton': 1.0,
    'newtons': 1.0,
    'kn': 1000.0,
    'kgf': 9.80665,
    'lbf': 4.44822,
}

N_TO_FORCE_UNIT = {unit: 1.0 / factor for unit, factor in FORCE_UNIT_TO_N.items()}


def validate_unit(unit: str) -> str:
    """
    Validate and normalize length unit string.

    Args:
        unit: Unit string (e.g., 'mm', 'm', 'in')

    Returns:
        Normalized unit string

    Raises:
        ValueError: If unit is not recognized
    """
    unit_lower = unit.lower().strip()
    if unit_lower not in UNIT_TO_M:
        valid_units = sorted(set(['mm', 'cm', 'm', 'in', 'ft']))
        raise ValueError(f"Unknown unit '{unit}'. Valid units: {valid_units}")
    return unit_lower


def to_m(value: Union[float, np.ndarray], from_unit: str = 'm') -> Union[float, np.ndarray]:
    """
    Convert a length from the specified unit to meters (base unit).

    Args:
        value: Value or array to convert
        from_unit: Source unit (default: 'm')

    Returns:
        Value in meters
    """
    unit = validate_unit(from_unit)
    return value * UNIT_TO_M[unit]


def from_m(value: Union[float, np.ndarray], to_unit: str = 'm') -> Union[float, np.ndarray]:
    """
    Convert a length from meters (base unit) to the specified unit.

    Args:
        value: Value or array in meters
        to_unit: Target unit (default: 'm')

    Returns:
        Value in target unit
    """
    unit = validate_unit(to_unit)
    return value * M_TO_UNIT[unit]


def validate_mass_unit(unit: str) -> str:
    """
    Validate and normalize mass unit string.

    Raises:
        ValueError: If unit is not recognized
    """
    unit_lower = unit.lower().strip()
    if unit_lower not in MASS_UNIT_TO_KG:
        valid_units = sorted(set(['kg', 'g', 'lb', 'ton']))
        raise ValueError(f"Unknown mass unit '{unit}'. Valid units: {valid_units}")
    return unit_lower


def to_kg(value: Union[float, np.ndarray], from_unit: str = 'kg') -> Union[float, np.ndarray]:
    """Convert a mass from the specified unit to kilograms."""
    unit = validate_mass_unit(from_unit)
    return value * MASS_UNIT_TO_KG[unit]


def validate_force_unit(unit: str) -> str:
    """
    Validate and normalize force unit string.

    Args:
        unit: Force unit string (e.g., 'N', 'kN', 'lbf')

    Returns:
        Normalized force unit string

    Raises:
        ValueError: If unit is not recognized
    """
    unit_lower = unit.lower().strip()
    if unit_lower not in FORCE_UNIT_TO_N:
        valid_units = sorted(set(['N', 'kN', 'kgf', 'lbf']))
        raise ValueError(f"Unknown force unit '{unit}'. Valid units: {valid_units}")
    return unit_lower


def to_newtons(value: Union[float, np.ndarray], from_unit: str = 'N') -> Union[float, np.ndarray]:
    """Convert a force from the specified unit to newtons."""
    unit = validate_force_unit(from_unit)
    return value * FORCE_UNIT_TO_N[unit]


def from_newtons(value: Union[float, np.ndarray], to_unit: str = 'N') -> Union[float, np.ndarray]:
    """Convert a force from newtons to the specified unit."""
    unit = validate_force_unit(to_unit)
    return value * N_TO_FORCE_UNIT[unit]


if __name__ == "__main__":
    print("=" * 60)
    print("UNITS MODULE TEST")
    print("=" * 60)

    print("\n--- Testing length conversions ---")
    test_value = 1.0  # m
    print(f"Original: {test_value} m")
    print(f"To mm: {from_m(test_value, 'mm')} mm")
    print(f"To inches: {from_m(test_value, 'in')} in")

    print("\n--- Testing hardpoint conversion ---")
    point_in = np.array([-66.59, 0.0, 1.039])
    print(f"Point (in): {point_in}")
    print(f"Point (m): {to_m(point_in, 'in')}")

    print("\n--- Testing force conversions ---")
    print(f"3491 lbf = {to_newtons(3491.0, 'lbf'):.1f} N")

    print("\n--- Testing unit validation ---")
    try:
        to_m(100, 'furlong')
        print("ERROR: Should have raised ValueError")
    except ValueError as e:
        print(f"✓ Correctly caught error: {e}")

    print("\n✓ All tests completed successfully!")
