"""Command-line interface for StarBuster."""

import argparse
import json
import logging
import os
import sys

from starbuster.api.analysis_client import AnalysisClient, to_repo_url
from starbuster.api.result_store import ResultStore, payload_from_record
from starbuster.core.constants import (
    DEFAULT_API_URL,
    DEFAULT_FRONTEND_URL,
    DEFAULT_MAX_STARS,
    DEFAULT_MAX_USERS,
    DEFAULT_RESULTS_DIR,
)
from starbuster.core.errors import AnalysisServiceError, ErrorKind
from starbuster.main import StarBuster

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("starbuster")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="StarBuster - Detect artificially starred GitHub repositories"
    )
    parser.add_argument(
        "owner_repo",
        nargs="?",
        help="GitHub repository in format 'owner/repo' or full URL",
    )
    parser.add_argument("--from-file", help="Render a saved analysis payload (JSON file)")
    parser.add_argument("--result-id", help="Render a stored, non-expired analysis result")
    parser.add_argument(
        "-f", "--format", choices=["text", "json", "markdown"], default="text", help="Output format"
    )
    parser.add_argument("-o", "--output", help="Output file (default: stdout)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose DEBUG logging")
    parser.add_argument(
        "--plot", help="Save account creation date plot to specified file path (e.g., plot.png)"
    )
    parser.add_argument(
        "--deep", action="store_true", help="Request the advanced analysis (slower, more signals)"
    )
    parser.add_argument(
        "--max-stars", type=int, default=DEFAULT_MAX_STARS, help="Maximum stargazers to sample"
    )
    parser.add_argument(
        "--max-users", type=int, default=DEFAULT_MAX_USERS, help="Maximum user profiles to inspect"
    )
    parser.add_argument(
        "--api-url",
        default=os.environ.get("STARBUSTER_API_URL", DEFAULT_API_URL),
        help="Analysis service base URL (or set STARBUSTER_API_URL env var)",
    )
    parser.add_argument(
        "--results-dir",
        default=os.environ.get("STARBUSTER_RESULTS_DIR", DEFAULT_RESULTS_DIR),
        help="Directory of stored results (or set STARBUSTER_RESULTS_DIR env var)",
    )
    parser.add_argument(
        "--save", action="store_true", help="Store the result so it can be shared by id"
    )
    return parser


def load_payload(args) -> dict:
    """Fetch the analysis payload selected by the command-line arguments."""
    if args.result_id:
        store = ResultStore(args.results_dir)
        record = store.get(args.result_id)
        if record is None:
            raise AnalysisServiceError(
                ErrorKind.NOT_FOUND, f"Analysis result {args.result_id} not found or expired"
            )
        return payload_from_record(record)

    if args.from_file:
        with open(args.from_file, "r", encoding="utf-8") as f:
            return json.load(f)

    try:
        repo_url = to_repo_url(args.owner_repo)
    except ValueError as e:
        raise AnalysisServiceError(ErrorKind.INVALID_INPUT, f"Invalid repository: {e}") from e

    client = AnalysisClient(args.api_url)
    payload = client.analyze(
        repo_url, deep_analysis=args.deep, max_stars=args.max_stars, max_users=args.max_users
    )

    if args.save:
        record = ResultStore(args.results_dir).save(payload)
        payload.setdefault("id", record["id"])
    return payload


def main(argv=None):
    """Command-line entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not (args.owner_repo or args.from_file or args.result_id):
        parser.error("a repository, --from-file or --result-id is required")

    if args.verbose:
        logger.setLevel(logging.DEBUG)
        logging.getLogger("urllib3").setLevel(logging.INFO)

    try:
        payload = load_payload(args)

        engine = StarBuster(os.environ.get("STARBUSTER_FRONTEND_URL", DEFAULT_FRONTEND_URL))
        view = engine.build_view(payload)
        final_report_str = engine.generate_report(view, format_str=args.format)

        if args.plot:
            logger.info(f"Generating creation date plot for {view['repository']['full_name']}...")
            engine.plot_creation_histogram(
                view["creation_histogram"],
                title=f"Stargazer Account Creation Dates for {view['repository']['full_name']}",
                save_path=args.plot,
            )

        if args.output:
            with open(args.output, "w", encoding="utf-8") as f:
                f.write(final_report_str)
            logger.info(f"Report saved to {args.output}")
        else:
            sys.stdout.write(final_report_str + "\n")

    except AnalysisServiceError as e:
        logger.error(f"Analysis failed ({e.kind.value}): {e.user_message}")
        logger.debug(f"Underlying error: {e.message}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Analysis interrupted by user.")
        sys.exit(130)
    except Exception as e:
        logger.error(f"A critical error occurred: {str(e)}", exc_info=args.verbose)
        if not args.verbose:
            logger.error("Run with -v or --verbose for detailed traceback.")
        sys.exit(1)


if __name__ == "__main__":
    main()
