"""Command-line entry point: ``chix8 ROM``."""

import argparse
import sys
import time

import jax

from chix8.config import EmulatorConfig
from chix8.emulator import load_rom, run_cycles
from chix8.faults import RomLoadError, fault_exception
from chix8.logging import RunLogger
from chix8.rendering import COLOR_SCHEMES, display_to_text, save_screenshot
from chix8.state import create_state


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chix8", description="Run a CHIP-8 ROM.")
    parser.add_argument("rom", help="path to the ROM image")
    parser.add_argument("--ips", type=int, default=700,
                        help="instructions per second (default: 700)")
    parser.add_argument("--scale", type=int, default=10,
                        help="window pixels per display cell (default: 10)")
    parser.add_argument("--color-scheme", choices=sorted(COLOR_SCHEMES), default="white")
    parser.add_argument("--seed", type=int, default=0, help="seed for the CXNN random source")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    parser.add_argument("--headless", type=int, metavar="CYCLES",
                        help="run CYCLES cycles without a window and print the display")
    parser.add_argument("--screenshot", metavar="PATH",
                        help="with --headless, also save the final display as an image")
    parser.add_argument("--progress", action="store_true",
                        help="with --headless, show a progress bar")
    return parser


def run_headless(state, cycles: int, config: EmulatorConfig, logger: RunLogger,
                 screenshot: str = None, progress: bool = False) -> int:
    start = time.time()
    state = run_cycles(state, cycles, config.cycles_per_tick, progress)
    state.display.block_until_ready()
    logger.log_run_end(cycles, time.time() - start)

    print(display_to_text(state.display))
    if screenshot:
        save_screenshot(state.display, screenshot, config.scale, config.color_scheme)
        logger.info(f"Saved screenshot: {screenshot}")

    fault = fault_exception(state)
    if fault is not None:
        logger.log_fault(fault)
        return 1
    return 0


def run_windowed(state, config: EmulatorConfig, logger: RunLogger) -> int:
    # pygame is only needed when a window is opened.
    from chix8.driver import ExecutionDriver
    from chix8.frontend import PygameFrontend

    driver = ExecutionDriver(state, config, logger=logger)
    frontend = PygameFrontend(driver, config.scale, config.color_scheme)
    start = time.time()
    frontend.run()
    logger.log_run_end(driver.cycles, time.time() - start)
    return 1 if driver.fault is not None else 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.headless is None and (args.screenshot or args.progress):
        parser.error("--screenshot and --progress require --headless")
    if args.headless is not None and args.headless <= 0:
        parser.error("--headless needs a positive number of cycles")

    try:
        config = EmulatorConfig(
            instructions_per_second=args.ips,
            scale=args.scale,
            color_scheme=args.color_scheme,
            seed=args.seed,
            log_level=args.log_level,
        )
    except ValueError as e:
        parser.error(str(e))

    logger = RunLogger(log_level=config.log_level)
    try:
        state = load_rom(create_state(jax.random.PRNGKey(config.seed)), args.rom)
    except RomLoadError as e:
        logger.error(str(e))
        return 1
    logger.log_run_start(args.rom, config.asdict())

    if args.headless is not None:
        return run_headless(state, args.headless, config, logger, args.screenshot, args.progress)
    return run_windowed(state, config, logger)


if __name__ == "__main__":
    sys.exit(main())
