# Licensed under the PolyForm Noncommercial License 1.0.0
"""
Command-line interface for the bottle rocket simulator.
"""

import argparse


def main(argv=None):
    """Run the bottle rocket simulator and the fill-ratio optimizer."""
    from .core import run_simulation
    from .optimizer import compare_fill_ratios, find_optimal

    parser = argparse.ArgumentParser(prog="bottleRocketSimulator",
                                     description="Simulate the vertical flight of a water rocket.")
    parser.add_argument("--fill-ratio", type=float, default=0.33, help="fraction of the tank filled with water")
    parser.add_argument("--drag-coefficient", type=float, default=0.4)
    parser.add_argument("--pressure", type=float, default=60.0, help="gauge launch pressure [PSI]")
    parser.add_argument("--compare", type=float, nargs="+", metavar="RATIO",
                        help="overlay the trajectories of these fill ratios")
    parser.add_argument("--plot", action="store_true", help="show the plots")
    parser.add_argument("--save", metavar="PATH", help="save the plot to PATH")
    args = parser.parse_args(argv)

    print("Bottle Rocket Simulator")
    print("=======================")

    # Run simulation
    print("Running simulation...")
    result = run_simulation(args.fill_ratio, args.drag_coefficient, args.pressure)

    print("Finding optimal fill ratio...")
    optimal = find_optimal(args.drag_coefficient, args.pressure)

    params = result.parameters
    print(f"\nSimulation Complete!")
    print(f"Max altitude: {result.max_altitude:.1f} m at {result.max_altitude_time:.2f} s")
    if result.burned_out:
        print(f"Burnout time: {result.burnout_time * 1000:.0f} ms")
        print(f"Burnout velocity: {result.burnout_velocity:.1f} m/s")
    else:
        print("Burnout time: -")
        print("Burnout velocity: -")
    print(f"Water mass: {params.water_mass * 1000:.0f} g")
    print(f"Optimal fill ratio: {optimal.best_fill_ratio * 100:.1f}% ({optimal.best_max_altitude:.1f} m)")

    if args.compare:
        compared = compare_fill_ratios(args.drag_coefficient, args.pressure, args.compare)
        print("\nComparison:")
        for ratio, other in compared:
            print(f"  {ratio * 100:3.0f}%: {other.max_altitude:.1f} m")

    if args.plot or args.save:
        from .plotting import plot_comparison, plot_results

        print("Plotting results...")
        if args.compare:
            plot_comparison(compared, show=args.plot, save_path=args.save)
        else:
            plot_results(result, optimal, show=args.plot, save_path=args.save)

    return 0


if __name__ == "__main__":
    main()
