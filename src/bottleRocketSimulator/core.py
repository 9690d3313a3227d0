# Licensed under the PolyForm Noncommercial License 1.0.0
"""Core simulation logic for the bottle rocket simulator."""

from typing import List, Optional
import math
import numpy as np

from .integrators import integrate
from .models import (
    ALTITUDE,
    DEFAULT_CONSTANTS,
    MASS,
    VELOCITY,
    WATER_VOLUME,
    FlightRegime,
    PhysicalConstants,
    SimulationParameters,
    SimulationResult,
    TrajectorySample,
)


class FlightRecorder:
    """
    Observes integrated states and extracts the flight events and trajectory.

    Burnout is recorded once, at the first state with no water left. The apogee
    only moves on a strictly higher altitude, so the earliest time of a peak is
    kept. A trajectory sample is emitted whenever time crosses a multiple of
    the sample interval, independently of the integration step.
    """

    def __init__(self, sample_interval: float = 0.005):
        self.sample_interval = sample_interval
        self.samples: List[TrajectorySample] = [TrajectorySample(0.0, 0.0, 0.0)]
        self.max_altitude = 0.0
        self.max_altitude_time = 0.0
        self.burnout_time: Optional[float] = None
        self.burnout_altitude: Optional[float] = None
        self.burnout_velocity: Optional[float] = None
        self.airborne = False
        self.time = 0.0

    def observe(self, t: float, state: np.ndarray) -> None:
        v, h = float(state[VELOCITY]), float(state[ALTITUDE])

        if state[WATER_VOLUME] <= 0 and self.burnout_time is None:
            self.burnout_time = t
            self.burnout_altitude = h
            self.burnout_velocity = v

        if h > self.max_altitude:
            self.max_altitude = h
            self.max_altitude_time = t

        if h > 0:
            self.airborne = True

        if math.floor(t / self.sample_interval) > math.floor(self.time / self.sample_interval):
            # clamp for display only
            self.samples.append(TrajectorySample(t, max(0.0, h), v))

        self.time = t

    def landed(self, altitude: float) -> bool:
        """True once the rocket is below the pad, or back on the ground after liftoff."""
        return altitude < 0 or (self.airborne and altitude <= 0)

    def result(self, parameters: SimulationParameters) -> SimulationResult:
        return SimulationResult(
            parameters=parameters,
            trajectory=tuple(self.samples),
            max_altitude=self.max_altitude,
            max_altitude_time=self.max_altitude_time,
            burnout_time=self.burnout_time,
            burnout_altitude=self.burnout_altitude,
            burnout_velocity=self.burnout_velocity,
            flight_time=self.time,
        )


class BottleRocketSimulator:
    """
    Simulates the vertical flight of a water rocket from launch to impact.

    The flight is integrated with a fixed RK4 step. Impact is detected at the
    first step that ends at or below ground level, without interpolating back
    to the exact crossing, so the landing time and position are only resolved
    to within one step.
    """

    def __init__(self, constants: PhysicalConstants = DEFAULT_CONSTANTS, dt: float = 0.002,
                 max_time: float = 15.0, sample_interval: float = 0.005):
        """
        Initialize the rocket simulator.

        Args:
            constants: Physical constants and bottle geometry
            dt: Integration step (s)
            max_time: Ceiling on simulated time (s)
            sample_interval: Spacing of the recorded trajectory samples (s)
        """
        if not isinstance(constants, PhysicalConstants):
            raise TypeError(f"constants must be PhysicalConstants, got {type(constants).__name__}")
        if dt <= 0 or max_time <= 0 or sample_interval <= 0:
            raise ValueError("dt, max_time and sample_interval must be positive")

        self.constants = constants
        self.dt = dt
        self.max_time = max_time
        self.sample_interval = sample_interval
        self._regime_derivatives = {
            FlightRegime.FREE_FLIGHT: self._ballistic_derivatives,
            FlightRegime.PRESSURE_EQUALIZED: self._ballistic_derivatives,
            FlightRegime.POWERED: self._powered_derivatives,
        }

    def _drag_acceleration(self, v: float, m: float, params: SimulationParameters) -> float:
        """Quadratic drag, always opposing the velocity."""
        c = params.constants
        return -0.5 * c.rho_air * params.drag_coefficient * c.bottle_area * v * abs(v) / m

    def _overpressure(self, water_volume: float, params: SimulationParameters) -> float:
        """Tank pressure above ambient after adiabatic expansion of the air (Pa)."""
        c = params.constants
        air_volume = c.tank_volume - water_volume
        pressure = params.initial_pressure * (params.initial_air_volume / air_volume) ** c.gamma
        return pressure - c.p_atm

    def _select_regime(self, state: np.ndarray, params: SimulationParameters):
        """Return the regime for a state and the tank overpressure it was selected on."""
        water_volume = state[WATER_VOLUME]
        if water_volume <= 0:
            return FlightRegime.FREE_FLIGHT, 0.0
        delta_p = self._overpressure(water_volume, params)
        if delta_p <= 0:
            return FlightRegime.PRESSURE_EQUALIZED, delta_p
        return FlightRegime.POWERED, delta_p

    def flight_regime(self, state: np.ndarray, params: SimulationParameters) -> FlightRegime:
        """Select the regime of the equations of motion for a state."""
        return self._select_regime(state, params)[0]

    def _jet_velocity(self, delta_p: float, constants: PhysicalConstants) -> float:
        return math.sqrt(2 * delta_p / (constants.rho_water * constants.area_ratio_term))

    def exhaust_velocity(self, water_volume: float, params: SimulationParameters) -> float:
        """Bernoulli jet velocity at the nozzle, corrected for the bottle to nozzle area ratio."""
        return self._jet_velocity(self._overpressure(water_volume, params), params.constants)

    def _ballistic_derivatives(self, state: np.ndarray, params: SimulationParameters,
                               drag: float, delta_p: float) -> np.ndarray:
        v = state[VELOCITY]
        return np.array([-params.constants.g + drag, v, 0.0, 0.0])

    def _powered_derivatives(self, state: np.ndarray, params: SimulationParameters,
                             drag: float, delta_p: float) -> np.ndarray:
        c = params.constants
        v, _, m, _ = state

        v_e = self._jet_velocity(delta_p, c)
        dV_water_dt = -c.nozzle_area * v_e
        dm_dt = c.rho_water * dV_water_dt
        thrust_accel = c.rho_water * c.nozzle_area * v_e ** 2 / m

        return np.array([thrust_accel - c.g + drag, v, dm_dt, dV_water_dt])

    def _equations_of_motion(self, t: float, state: np.ndarray,
                             params: SimulationParameters) -> np.ndarray:
        """
        Calculate time derivatives of the state vector.

        State vector: [v, h, m, V_water]
        Derivatives: [dv/dt, dh/dt, dm/dt, dV_water/dt]
        """
        drag = self._drag_acceleration(state[VELOCITY], state[MASS], params)
        regime, delta_p = self._select_regime(state, params)
        return self._regime_derivatives[regime](state, params, drag, delta_p)

    def _exhaust_water(self, state: np.ndarray, params: SimulationParameters) -> np.ndarray:
        # A step can overshoot the last of the water; pin the tank at empty.
        if state[WATER_VOLUME] <= 0:
            state[WATER_VOLUME] = 0.0
            state[MASS] = params.constants.mass_empty
        return state

    def simulate(self, fill_ratio: float, drag_coefficient: float, pressure_psi: float,
                 verbose: bool = False) -> SimulationResult:
        """
        Simulate one flight.

        Args:
            fill_ratio: Fraction of the tank filled with water, in (0, 1)
            drag_coefficient: Drag coefficient of the rocket
            pressure_psi: Gauge launch pressure (PSI)
            verbose: Print a summary of the flight

        Returns:
            SimulationResult with the down-sampled trajectory and flight events
        """
        params = SimulationParameters(fill_ratio, drag_coefficient, pressure_psi, self.constants)
        recorder = FlightRecorder(self.sample_interval)

        def stop(t, state):
            return t >= self.max_time or recorder.landed(state[ALTITUDE])

        steps = integrate(self._equations_of_motion, 0.0, params.initial_state(), self.dt, params,
                          stop=stop, project=self._exhaust_water)
        for t, state in steps:
            recorder.observe(t, state)

        result = recorder.result(params)

        if verbose:
            print(f"fill ratio {fill_ratio:.2f}, Cd {drag_coefficient:.2f}, {pressure_psi:.0f} PSI")
            print(f"  apogee {result.max_altitude:.1f} m at {result.max_altitude_time:.2f} s")
            if result.burned_out:
                print(f"  burnout at {result.burnout_time * 1000:.0f} ms, "
                      f"{result.burnout_velocity:.1f} m/s")
            else:
                print("  water not fully expelled")

        return result


def run_simulation(fill_ratio: float, drag_coefficient: float, pressure_psi: float,
                   constants: PhysicalConstants = DEFAULT_CONSTANTS,
                   verbose: bool = False) -> SimulationResult:
    """Simulate one flight with the default step, time ceiling and sampling."""
    return BottleRocketSimulator(constants).simulate(fill_ratio, drag_coefficient, pressure_psi,
                                                     verbose=verbose)
