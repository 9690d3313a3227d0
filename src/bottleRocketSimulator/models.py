# Licensed under the PolyForm Noncommercial License 1.0.0
"""Data models and constants for the bottle rocket simulator."""

from dataclasses import dataclass
from functools import cached_property
from enum import Enum
from numbers import Real
from typing import NamedTuple, Optional, Tuple
import math
import numpy as np

# Physical constants
g = 9.81  # Gravitational acceleration (m/s^2)
rho_air = 1.225  # Air density at sea level (kg/m^3)
rho_water = 1000.0  # Water density (kg/m^3)
P_atm = 101325.0  # Atmospheric pressure (Pa)
gamma = 1.4  # Adiabatic exponent of air
PSI_TO_PA = 6894.76  # Pascals per pound per square inch

# 0.8 L bottle geometry
tank_volume = 8e-4  # Tank volume (m^3)
d_bottle = 0.075  # Bottle diameter (m)
d_nozzle = 0.026  # Nozzle diameter (m)
mass_empty = 0.0765  # Empty rocket mass (kg)

# State vector layout: [v, h, m, V_water]
VELOCITY, ALTITUDE, MASS, WATER_VOLUME = range(4)


def psi_to_pa(pressure_psi: float) -> float:
    """Convert a gauge pressure in PSI to Pascals."""
    return pressure_psi * PSI_TO_PA


def _check_number(name: str, value) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise TypeError(f"{name} must be a real number, got {type(value).__name__}")
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value}")
    return value


@dataclass(frozen=True)
class PhysicalConstants:
    """Physical constants and bottle geometry used by one simulation.

    Attributes:
        g: Gravitational acceleration (m/s^2)
        rho_air: Air density (kg/m^3)
        rho_water: Water density (kg/m^3)
        p_atm: Atmospheric pressure (Pa)
        gamma: Adiabatic exponent of the pressurising gas
        tank_volume: Internal volume of the bottle (m^3)
        d_bottle: Bottle diameter, used as the drag reference (m)
        d_nozzle: Nozzle throat diameter (m)
        mass_empty: Mass of the rocket without water (kg)
    """
    g: float = g
    rho_air: float = rho_air
    rho_water: float = rho_water
    p_atm: float = P_atm
    gamma: float = gamma
    tank_volume: float = tank_volume
    d_bottle: float = d_bottle
    d_nozzle: float = d_nozzle
    mass_empty: float = mass_empty

    def __post_init__(self):
        for name in ("g", "rho_air", "rho_water", "p_atm", "gamma",
                     "tank_volume", "d_bottle", "d_nozzle", "mass_empty"):
            if _check_number(name, getattr(self, name)) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.d_nozzle >= self.d_bottle:
            raise ValueError("d_nozzle must be smaller than d_bottle")

    @cached_property
    def bottle_area(self) -> float:
        """Bottle cross-section (m^2)."""
        return math.pi * (self.d_bottle / 2) ** 2

    @cached_property
    def nozzle_area(self) -> float:
        """Nozzle cross-section (m^2)."""
        return math.pi * (self.d_nozzle / 2) ** 2

    @cached_property
    def area_ratio_term(self) -> float:
        """Bernoulli correction 1 - (d_nozzle/d_bottle)^4."""
        return 1 - (self.d_nozzle / self.d_bottle) ** 4


DEFAULT_CONSTANTS = PhysicalConstants()


@dataclass(frozen=True)
class SimulationParameters:
    """Launch configuration for a single flight.

    Attributes:
        fill_ratio: Fraction of the tank volume filled with water, in (0, 1)
        drag_coefficient: Dimensionless drag coefficient, nominally > 0
        launch_pressure_psi: Gauge pressure at launch (PSI), nominally > 0
        constants: Physical constants and geometry for this flight
    """
    fill_ratio: float
    drag_coefficient: float
    launch_pressure_psi: float
    constants: PhysicalConstants = DEFAULT_CONSTANTS

    def __post_init__(self):
        fill_ratio = _check_number("fill_ratio", self.fill_ratio)
        if not 0 < fill_ratio < 1:
            raise ValueError(f"fill_ratio must be in (0, 1), got {fill_ratio}")
        # drag and pressure only need to be finite
        _check_number("drag_coefficient", self.drag_coefficient)
        _check_number("launch_pressure_psi", self.launch_pressure_psi)
        if not isinstance(self.constants, PhysicalConstants):
            raise TypeError(f"constants must be PhysicalConstants, got {type(self.constants).__name__}")

    @cached_property
    def initial_water_volume(self) -> float:
        return self.fill_ratio * self.constants.tank_volume

    @cached_property
    def initial_air_volume(self) -> float:
        return self.constants.tank_volume - self.initial_water_volume

    @cached_property
    def initial_pressure(self) -> float:
        """Absolute tank pressure at launch (Pa)."""
        return psi_to_pa(self.launch_pressure_psi) + self.constants.p_atm

    @cached_property
    def water_mass(self) -> float:
        """Propellant mass at launch (kg)."""
        return self.constants.rho_water * self.initial_water_volume

    @cached_property
    def initial_mass(self) -> float:
        return self.constants.mass_empty + self.water_mass

    def initial_state(self) -> np.ndarray:
        """Return the launch state vector [v, h, m, V_water]."""
        return np.array([0.0, 0.0, self.initial_mass, self.initial_water_volume])


class FlightRegime(Enum):
    """Mutually exclusive regimes of the equations of motion."""
    FREE_FLIGHT = "free_flight"  # water exhausted
    PRESSURE_EQUALIZED = "pressure_equalized"  # water left, no overpressure
    POWERED = "powered"


class TrajectorySample(NamedTuple):
    """Down-sampled point of the flight, for plotting and display."""
    time: float  # s
    altitude: float  # m, clamped at >= 0
    velocity: float  # m/s


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of one flight, from launch to impact or the time ceiling.

    Burnout fields are None when the water was never fully expelled.
    """
    parameters: SimulationParameters
    trajectory: Tuple[TrajectorySample, ...]
    max_altitude: float
    max_altitude_time: float
    burnout_time: Optional[float]
    burnout_altitude: Optional[float]
    burnout_velocity: Optional[float]
    flight_time: float

    @property
    def burned_out(self) -> bool:
        return self.burnout_time is not None

    @property
    def times(self) -> np.ndarray:
        return np.array([s.time for s in self.trajectory])

    @property
    def altitudes(self) -> np.ndarray:
        return np.array([s.altitude for s in self.trajectory])

    @property
    def velocities(self) -> np.ndarray:
        return np.array([s.velocity for s in self.trajectory])


class FillRatioSample(NamedTuple):
    fill_ratio: float
    max_altitude: float  # m


@dataclass(frozen=True)
class OptimizationResult:
    """Response of peak altitude to the fill ratio, and its best grid point."""
    best_fill_ratio: float
    best_max_altitude: float
    samples: Tuple[FillRatioSample, ...]

    @property
    def fill_ratios(self) -> np.ndarray:
        return np.array([s.fill_ratio for s in self.samples])

    @property
    def max_altitudes(self) -> np.ndarray:
        return np.array([s.max_altitude for s in self.samples])
