"""Command line entry point for the MegaRAID probe.

Classifies block devices behind MegaRAID controllers and reports their
media type.
"""

import argparse
import sys
from typing import Optional

from .config import Settings
from .core.config import ProbeConfig
from .core.writer_config import WriterConfig
from .core.logging_config import LoggingConfigurator
from .core.runner import ProbeRunner
from .writer.factory import WriterFactory


def create_argument_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""

    parser = argparse.ArgumentParser(
        description='MegaRAID block device media type probe',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Classify every disk found under /dev/disk using the installed storcli
  python -m megaraid_probe

  # Classify one device, print JSON
  python -m megaraid_probe --device /dev/sda

  # Replay a saved "storcli64 /call/vall show all J" capture
  python -m megaraid_probe --fromJson ./capture.json --device /dev/sdb

  # Expose results for Prometheus, one storcli run per sweep
  python -m megaraid_probe --output prometheus --prometheus-port 9105 --cache-per-sweep
        """
    )

    parser.add_argument('--config', type=str, default=None,
                        help='YAML or JSON configuration file')

    # Data source selection (mutually exclusive)
    source_group = parser.add_mutually_exclusive_group()
    source_group.add_argument('--storcli', type=str, default=None,
                              help='Path to the storcli binary (default: /opt/MegaRAID/storcli/storcli64)')
    source_group.add_argument('--fromJson', type=str, default=None,
                              help='Replay a saved storcli JSON capture instead of running storcli')

    # Device selection
    device_group = parser.add_argument_group('Device Selection')
    device_group.add_argument('--device', action='append', default=None,
                              help='Block device to classify (repeatable, default: all discovered disks)')
    device_group.add_argument('--dev-root', type=str, default=None,
                              help='Parent directory of the udev by-* link kinds (default: /dev/disk)')

    # Output configuration
    output_group = parser.add_argument_group('Output Configuration')
    output_group.add_argument('--output', choices=['json', 'prometheus', 'both'],
                              default='json', help='Output format (default: json)')
    output_group.add_argument('--json-output', type=str, default=None,
                              help='Write JSON results to this file instead of stdout')
    output_group.add_argument('--prometheus-port', type=int, default=8000,
                              help='Prometheus metrics server port (default: 8000)')

    # Probe behavior
    behavior_group = parser.add_argument_group('Probe Behavior')
    behavior_group.add_argument('--cache-per-sweep', action='store_true',
                                help='Query storcli once per sweep instead of once per device')
    behavior_group.add_argument('--intervalTime', type=int, default=0,
                                help='Seconds between sweeps, 0 runs a single sweep (default: 0)')
    behavior_group.add_argument('--maxIterations', type=int, default=0,
                                help='Maximum sweeps (0=unlimited, >0=exit after N sweeps)')

    # Debugging
    debug_group = parser.add_argument_group('Debugging')
    debug_group.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                             default=None, help='Set logging level (default: INFO)')
    debug_group.add_argument('--logfile', type=str, default=None,
                             help='Path to log file (default: console only)')

    return parser


def validate_arguments(args) -> Optional[str]:
    """Validate command line arguments.

    Returns:
        Error message if validation fails, None if valid
    """
    if args.json_output and args.output == 'prometheus':
        return "--json-output requires --output json or both"
    return None


def main(argv=None) -> int:
    """Main entry point."""

    parser = create_argument_parser()
    args = parser.parse_args(argv)

    error_msg = validate_arguments(args)
    if error_msg:
        parser.error(error_msg)

    try:
        settings = Settings(config_file=args.config)
        config = ProbeConfig.from_args(args, settings)
        writer_config = WriterConfig.from_args(args)
    except ValueError as e:
        parser.error(str(e))

    LoggingConfigurator.setup_logging(log_level=config.log_level, log_file=config.logfile)
    logger = LoggingConfigurator.get_logger(__name__)

    logger.info("=== MegaRAID Probe Startup ===")
    logger.info(f"Probe: {config.name} (enabled={config.enabled}, priority={config.priority})")
    logger.info(f"Data Source: {'JSON Replay ' + config.from_json if config.use_json_replay else 'storcli ' + config.storcli_path}")
    logger.info(f"Devices: {config.devices or 'all disks known to udev'}")
    logger.info(f"Output Mode: {writer_config.output_format}")
    logger.info(f"Cache Per Sweep: {config.cache_per_sweep}")

    writer = WriterFactory.create_writer_from_config(writer_config)
    try:
        runner = ProbeRunner(config, writer=writer)
        if not runner.initialize():
            logger.error("Probe is disabled, nothing to do")
            return 1

        runner.run_continuous()

    except KeyboardInterrupt:
        logger.info("Received interrupt, shutting down...")
    except OSError as e:
        logger.error(f"Probe error: {e}")
        if config.log_level == 'DEBUG':
            raise
        return 1
    finally:
        writer.close()

    return 0


if __name__ == '__main__':
    sys.exit(main())
