"""CLI interface for the video processing service."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from video_processing_service import __version__
from video_processing_service.application.factories import ServiceFactory
from video_processing_service.domain.exceptions import BadTriggerError, DomainException
from video_processing_service.infrastructure.config import ConfigLoader, ServiceConfig
from video_processing_service.shared.logging import ROOT_LOGGER_NAME, get_logger, setup_logger

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="video-processing-service",
        description="Fetch raw videos, transcode them and publish the rendition",
    )
    parser.add_argument('--config', type=Path, help='Config YAML file')
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose (DEBUG) logging')
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")

    sub = parser.add_subparsers(dest='command', required=True)

    serve = sub.add_parser('serve', help='Run the HTTP service')
    serve.add_argument('--host', help='Bind address')
    serve.add_argument('--port', type=int, help='Bind port')

    process = sub.add_parser('process', help='Run one job for a raw object')
    process.add_argument('source_id', help='Raw object id')
    process.add_argument('--target-height', type=int, help='Output height in pixels')

    remove = sub.add_parser('remove', help='Delete a published processed object')
    remove.add_argument('object_id', help='Processed object id')

    return parser


def _run_serve(config: ServiceConfig) -> int:
    import uvicorn
    from video_processing_service.presentation.api import create_app_from_config

    app = create_app_from_config(config)
    uvicorn.run(app, host=config.host, port=config.port)
    return EXIT_OK


def _run_process(config: ServiceConfig, source_id: str) -> int:
    logger = get_logger(__name__)
    factory = ServiceFactory(config)

    # Staging failure is a start-up error, not a job failure
    factory.create_staging().ensure_directories()
    orchestrator = factory.create_orchestrator()

    result = orchestrator.process(source_id)

    logger.info("=" * 60)
    if result.success:
        logger.info(f"Processing completed: {result.derived_id}")
        logger.info(f"URL: {result.url}")
        return EXIT_OK

    logger.error(f"Processing failed at {result.stage.value}: {result.error}")
    return EXIT_FAILED


def _run_remove(config: ServiceConfig, object_id: str) -> int:
    gateway = ServiceFactory(config).create_gateway()
    gateway.remove(object_id)
    get_logger(__name__).info(f"Removed {object_id} from {config.processed_bucket}")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    # .env never overrides variables already set
    load_dotenv()

    args = build_parser().parse_args(argv)

    setup_logger(ROOT_LOGGER_NAME, level=logging.DEBUG if args.verbose else logging.INFO)
    logger = get_logger(__name__)

    overrides = {
        'host': getattr(args, 'host', None),
        'port': getattr(args, 'port', None),
        'target_height': getattr(args, 'target_height', None),
    }

    try:
        config = ConfigLoader(config_path=args.config).load(overrides=overrides)
    except DomainException as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_USAGE

    if not args.verbose:
        setup_logger(ROOT_LOGGER_NAME, level=config.log_level, log_file=config.log_file)
    elif config.log_file:
        setup_logger(ROOT_LOGGER_NAME, level=logging.DEBUG, log_file=config.log_file)

    try:
        if args.command == 'serve':
            return _run_serve(config)
        if args.command == 'process':
            return _run_process(config, args.source_id)
        if args.command == 'remove':
            return _run_remove(config, args.object_id)
    except BadTriggerError as e:
        logger.error(f"Bad trigger: {e}")
        return EXIT_USAGE
    except DomainException as e:
        logger.error(f"Error: {e}")
        return EXIT_FAILED
    except OSError as e:
        logger.error(f"Start-up failed: {e}")
        return EXIT_FAILED
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return EXIT_INTERRUPTED

    return EXIT_USAGE


if __name__ == '__main__':
    sys.exit(main())
