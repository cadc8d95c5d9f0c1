"""Command-Line Interface handler for chunkscribe."""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .config_loader import ConfigLoader, build_settings
from .log_setup import setup_logging
from .audio_extractor import AudioExtractor
from .transcriber import OpenAITranscriber
from .pipeline import TranscriptionPipeline
from .exceptions import ChunkScribeError, ConfigurationError

logger = logging.getLogger(__name__) # Get logger for this module

DEFAULT_CONFIG_PATH = "config.yaml"
DEFAULT_OUTPUT_PATH = "transcription.txt"

class CLIHandler:
    """Parses arguments and orchestrates the chunkscribe process."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Creates the argument parser for the CLI."""
        parser = argparse.ArgumentParser(
            prog="chunkscribe",
            description="chunkscribe: transcribe long recordings by splitting them into overlapping chunks.",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter # Show defaults in help
        )
        parser.add_argument(
            "input",
            nargs="?",
            help="Path to the input audio file."
        )
        parser.add_argument(
            "output",
            nargs="?",
            default=DEFAULT_OUTPUT_PATH,
            help="Path of the transcript text file to write."
        )
        parser.add_argument(
            "-c", "--config",
            default=None,
            help=f"Path to the configuration YAML file (default: {DEFAULT_CONFIG_PATH} if present)."
        )
        parser.add_argument(
            "--chunk-seconds",
            type=float,
            default=None, # Default taken from config
            help="Override the nominal chunk length in seconds."
        )
        parser.add_argument(
            "--overlap-seconds",
            type=float,
            default=None,
            help="Override the overlap between consecutive chunks in seconds."
        )
        parser.add_argument(
            "--model",
            default=None,
            help="Override the transcription model."
        )
        parser.add_argument(
            "--language",
            default=None,
            help="Language hint passed to the transcription service (e.g. 'en', 'ru')."
        )
        parser.add_argument(
            "--temp-dir",
            default=None,
            help="Directory in which the per-run scratch directory is created."
        )
        parser.add_argument(
            "--keep-chunks",
            action="store_true",
            help="Keep the cut audio chunks after the run."
        )
        parser.add_argument(
            "--log-level",
            default="INFO",
            choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            help="Set the logging level for console and file output."
        )
        return parser

    def _apply_overrides(self, config: dict, args: argparse.Namespace) -> dict:
        overrides = {
            'chunk_seconds': args.chunk_seconds,
            'overlap_seconds': args.overlap_seconds,
            'model': args.model,
            'language': args.language,
            'temp_dir': args.temp_dir,
        }
        if args.keep_chunks:
            overrides['keep_chunks'] = True
        for key, value in overrides.items():
            if value is not None:
                logger.info(f"Overriding {key} from config with CLI argument: {value}")
                config[key] = value
        return config

    def run(self, argv: Optional[List[str]] = None) -> None:
        """Parses arguments, sets up logging, loads config, and runs the pipeline."""
        args = self.parser.parse_args(argv)
        if not args.input:
            self.parser.print_usage(sys.stderr)
            sys.exit(1)

        # --- Setup Logging ---
        log_level = getattr(logging, args.log_level.upper(), logging.INFO)
        setup_logging(log_level=log_level)

        # --- Load Configuration ---
        config_path = args.config or DEFAULT_CONFIG_PATH
        try:
            config = ConfigLoader().load_or_default(config_path, required=args.config is not None)
            config = self._apply_overrides(config, args)
            settings = build_settings(config)
        except ConfigurationError as e:
            logger.critical(f"Invalid configuration: {e}")
            sys.exit(1)
        except FileNotFoundError:
            logger.critical(f"Configuration file not found: {config_path}")
            sys.exit(1)

        # --- Re-configure Logging with settings from Config ---
        setup_logging(log_level=log_level, log_dir=settings.log_dir, log_file=settings.log_file)

        # --- Validate Input Path ---
        if not os.path.isfile(args.input):
            logger.critical(f"Input audio file not found or is not a file: {args.input}")
            sys.exit(1)

        try:
            audio_extractor = AudioExtractor(
                ffmpeg_path=settings.ffmpeg_path,
                ffprobe_path=settings.ffprobe_path,
            )
            transcriber = OpenAITranscriber(
                model=settings.model,
                language=settings.language,
                prompt=settings.prompt,
                api_key=settings.openai_api_key,
                max_retries=settings.max_retries,
                timeout=settings.request_timeout,
            )
            pipeline = TranscriptionPipeline(
                settings=settings,
                audio_extractor=audio_extractor,
                transcriber=transcriber,
            )

            # --- Run Pipeline ---
            pipeline.run(args.input, args.output)
            sys.exit(0)

        except (ChunkScribeError, FileNotFoundError) as e:
            logger.error(f"chunkscribe failed: {e}")
            sys.exit(1)
        except KeyboardInterrupt:
            logger.warning("Process interrupted by user (Ctrl+C). Exiting.")
            sys.exit(1)
        except Exception as e:
            logger.critical(f"An unexpected critical error occurred at the top level: {e}", exc_info=True)
            sys.exit(2) # Different exit code for unexpected crashes


def main(argv: Optional[List[str]] = None) -> None:
    """Console script entry point."""
    CLIHandler().run(argv)
