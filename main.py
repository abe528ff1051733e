# main.py
"""
Main entry point for a headless isotope mixture session.

This script orchestrates a scripted run of the mixture model:
1. Loads configuration from `config.json`.
2. Initializes the logging system.
3. Sets up the mixture controller and its test chamber.
4. Replays a scripted sequence of user actions.
5. Handles clean shutdown.
"""
import logging
import sys
from utils import setup_logging, load_config
import cProfile
import pstats
import io

def log_chamber(controller, label):
    chamber = controller.test_chamber
    logging.info(
        f"{label}: {chamber.count} isotopes, average atomic mass {chamber.average_mass:.5f}"
    )
    for config in controller.possible_isotopes:
        logging.debug(
            f"  {config}: {chamber.get_isotope_count(config)} "
            f"({chamber.get_isotope_proportion(config):.2%})"
        )

def drag_into_chamber(controller, count):
    """Moves up to `count` atoms from each bucket into the chamber."""
    for bucket in list(controller.bucket_list):
        for isotope in bucket.particles[:count]:
            controller.begin_drag(isotope)
            isotope.set_position_and_destination(controller.test_chamber.generate_random_position())
            controller.end_drag(isotope)

def report_profile(profiler, sort_key, limit):
    """Logs the `limit` most expensive calls of a finished profiling run."""
    report = io.StringIO()
    pstats.Stats(profiler, stream=report).strip_dirs().sort_stats(sort_key).print_stats(limit)
    logging.info(f"Profile of the scripted session, top {limit} by {sort_key}:\n{report.getvalue()}")

def main():
    """
    The main function to run the session.
    """
    # No handlers exist before the settings are read, so report to stderr.
    try:
        config = load_config('config.json')
    except (OSError, ValueError) as e:
        print(f"Cannot start the session, config.json is unusable: {e}", file=sys.stderr)
        return

    setup_logging(config)

    logging.info("--- Isotope Mixtures Session Starting ---")

    sim_params = config.get('simulation_parameters', {})
    run_params = config.get('run_control', {})

    from isotope import IsotopeConfig
    from mixture import MixtureController
    from mixture_state import InteractivityMode

    controller = MixtureController(sim_params)
    atoms_per_drag = run_params.get('atoms_per_drag', 3)
    second_element = run_params.get('second_proton_count', 8)

    profiler = cProfile.Profile()
    profiler.enable()

    drag_into_chamber(controller, atoms_per_drag)
    log_chamber(controller, "User's mix")

    controller.set_showing_natures_mix(True)
    log_chamber(controller, "Nature's mix")
    controller.set_showing_natures_mix(False)

    controller.set_atom_configuration(IsotopeConfig(second_element, second_element))
    drag_into_chamber(controller, atoms_per_drag)
    log_chamber(controller, "Second element")

    controller.set_interactivity_mode(InteractivityMode.SLIDERS_AND_SMALL_ATOMS)
    for control in controller.numerical_controllers:
        control.set_isotope_quantity(run_params.get('slider_quantity', 50))
    log_chamber(controller, "Slider mix")

    controller.set_interactivity_mode(InteractivityMode.BUCKETS_AND_LARGE_ATOMS)
    controller.set_atom_configuration(controller.default_prototype)
    log_chamber(controller, "Restored first element")

    profiler.disable()

    report_profile(
        profiler,
        sort_key=run_params.get('profile_sort', 'tottime'),
        limit=run_params.get('profile_lines', 15)
    )

    logging.info("--- Isotope Mixtures Session Shutting Down ---")


if __name__ == "__main__":
    main()
