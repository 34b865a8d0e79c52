"""
Command line entry point: load a feature table, run model selection and print
the comparison table.
"""

import argparse
import logging
import os
import sys
import traceback
from typing import List, Optional

from veracity_ml.core.config_management.config_manager import CONFIG_DIR_ENV_VAR
from veracity_ml.core.error_handling.error_handler import ErrorHandler
from .di_container import ModelSelectionDIContainer


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog='veracity-model-selection',
        description="Cross-validated model selection and evaluation on a flat feature table."
    )
    parser.add_argument('--input', help="Feature table CSV (defaults to data.input_path)")
    parser.add_argument('--train-fraction', type=float, help="Share of each class placed in the train partition")
    parser.add_argument('--folds', type=int, help="Cross-validation fold count")
    parser.add_argument('--repeats', type=int, help="Cross-validation repeat count")
    parser.add_argument('--seed', type=int, help="Top-level random seed")
    parser.add_argument('--models', nargs='+', help="Model variants to run, in report order")
    parser.add_argument('--n-jobs', type=int, help="Parallel workers for the hyperparameter search")
    parser.add_argument('--config-dir', help="Directory holding app_config.yaml and models/*.yaml")
    parser.add_argument('--output-dir', help="Directory for the comparison table and model artifacts")
    parser.add_argument('--no-artifacts', action='store_true', help="Do not write any output files")
    return parser.parse_args(argv)


def _apply_overrides(config, args: argparse.Namespace) -> None:
    """Command line values take precedence over configuration files."""
    overrides = {
        'train_fraction': args.train_fraction,
        'n_folds': args.folds,
        'n_repeats': args.repeats,
        'random_state': args.seed,
        'models': args.models,
        'n_jobs': args.n_jobs,
    }
    for key, value in overrides.items():
        if value is not None:
            setattr(config.model_selection, key, value)

    if args.input is not None:
        config.data.input_path = args.input
    if args.output_dir is not None:
        config.data.output_dir = args.output_dir
    if args.no_artifacts:
        config.model_selection.save_artifacts = False


def main(argv: Optional[List[str]] = None) -> int:
    """Run the model selection pipeline. Returns the process exit status."""
    args = parse_args(argv)
    if args.config_dir:
        os.environ[CONFIG_DIR_ENV_VAR] = args.config_dir

    app_logger = None
    try:
        container = ModelSelectionDIContainer()

        config = container.config()
        _apply_overrides(config, args)

        app_logger = container.app_logger()
        app_logger.setup(config.app_logging.log_file)

        data_access = container.data_access()
        data_validator = container.data_validator()
        results_aggregator = container.results_aggregator()
        pipeline = container.pipeline()

        df = data_access.load_feature_table(config.data.input_path)
        dataset = data_validator.validate(
            df,
            config.data.label_column,
            getattr(config.data, 'feature_columns', None) or None
        )

        result = pipeline.run(dataset)

        if config.model_selection.save_artifacts:
            data_access.save_comparison_table(result.comparison_table, config.data.output_dir)
            for model_result in result.model_results.values():
                data_access.save_model_artifacts(model_result, config.data.output_dir)

        display_table = results_aggregator.format_for_display(result.comparison_table)
        print(display_table.to_string(index=False))

        app_logger.structured_log(logging.INFO, "Model selection run completed",
                                  models=list(result.model_results))
        return 0

    except ErrorHandler as e:
        # already logged on construction
        if app_logger is None:
            print(f"{type(e).__name__}: {e.message}", file=sys.stderr)
        return e.exit_code

    except Exception as e:
        if app_logger is not None and app_logger.logger is not None:
            app_logger.structured_log(
                logging.CRITICAL,
                "Unexpected error during model selection",
                error_message=str(e),
                error_type=type(e).__name__,
                traceback=traceback.format_exc()
            )
        else:
            print(f"Unexpected error during model selection: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
