"""Eval and check command implementations."""

import dataclasses
import json
import logging
from argparse import Namespace
from typing import Dict

from tfeval.classifier import is_evaluable
from tfeval.config import Config, load_config
from tfeval.evaluator import Evaluator
from tfeval.exceptions import (
    ConfigValidationError,
    DepthExceededError,
    EvaluationIndexError,
    MalformedDeclarationError,
    UnsupportedSyntaxError,
)
from tfeval.loader import ConfigFile, ConfigLoader


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_EVALUATION_FAILED = 1
EXIT_INVALID_INPUT = 2
EXIT_UNSUPPORTED = 3


def setup_logging(args: Namespace):
    level = 'WARNING' if args.log_level == 'warn' else args.log_level.upper()
    logging.basicConfig(
        level=getattr(logging, level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def build_config(args: Namespace) -> Config:
    """Load the config file (if any) and apply --env/--workspace overrides."""
    config = load_config(args.config) if args.config else Config.init()

    overrides = {}
    if args.env is not None:
        overrides['terraform_env'] = args.env
    if args.workspace is not None:
        overrides['terraform_workspace'] = args.workspace
    if overrides:
        config = dataclasses.replace(config, **overrides)
    return config


def load_files(args: Namespace, loader: ConfigLoader) -> Dict[str, ConfigFile]:
    files = {}
    if args.dir:
        files.update(loader.load_directory(args.dir))
    for path in args.file:
        files[path] = loader.load(path)
    return files


def eval_expression(args: Namespace) -> int:
    """
    Evaluate one interpolation string and print the result as JSON.

    Absent data prints as null. Exit codes: 0 success, 1 evaluation failure,
    2 malformed files or config, 3 unsupported syntax.
    """
    setup_logging(args)

    try:
        config = build_config(args)
        loader = ConfigLoader()
        files = load_files(args, loader)
        overrides = [loader.load_variable_file(path) for path in args.var_file]

        logger.info(f"Evaluating against {len(files)} file(s) and {len(overrides)} variable file(s)")
        evaluator = Evaluator(files, [], overrides, config)
        result = evaluator.eval(args.expression)

    except (ConfigValidationError, MalformedDeclarationError) as e:
        for error in e.errors:
            logger.error(f"{error.message} ({error.path})" if error.path else error.message)
        return EXIT_INVALID_INPUT
    except OSError as e:
        logger.error(f"Cannot read input: {e}")
        return EXIT_INVALID_INPUT
    except UnsupportedSyntaxError as e:
        logger.error(str(e))
        return EXIT_UNSUPPORTED
    except (EvaluationIndexError, DepthExceededError) as e:
        logger.error(f"Evaluation failed: {e}")
        return EXIT_EVALUATION_FAILED

    print(json.dumps(result.to_native()))
    return EXIT_OK


def check_expression(args: Namespace) -> int:
    """Print whether an interpolation string is evaluable; exit 0 if it is, 1 otherwise."""
    setup_logging(args)

    if is_evaluable(args.expression):
        print("evaluable")
        return EXIT_OK
    print("not evaluable")
    return EXIT_EVALUATION_FAILED
