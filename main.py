import argparse

from config_loader import load_config
from profiler.errors.decorators import exit_on_failure
from profiler.init_error_hooks import init_error_hooks
from programs.pipeline import VisitorPipeline, write_charts, write_outputs
from utils.logging_config import get_logging_logger

logger = get_logging_logger(__name__)


@exit_on_failure
def run(config_path: str = "config.yaml"):
    config = load_config(config_path)

    pipeline = VisitorPipeline(config)
    result = pipeline.run()

    write_outputs(result, config.output_dir)
    if config.visualize:
        try:
            logger.info(f"🎨 Writing charts for {result.full_series.institution}")
            write_charts(result, config.output_dir, show=config.show_plots, acf_lags=config.acf_lags)
        except Exception as e:
            logger.warning(f"⚠️ Skipping charts due to error: {e}")

    print(result.selection.comparison_table().to_string())
    print(f"Preferred model: {result.choice.preferred} - {result.choice.reason}")
    return result


def main():
    init_error_hooks()

    parser = argparse.ArgumentParser(description="Museum visits seasonality analysis")
    parser.add_argument("--config", default="config.yaml", help="path to YAML config")
    args = parser.parse_args()
    run(args.config)
    print('Done.')


if __name__ == '__main__':
    main()
