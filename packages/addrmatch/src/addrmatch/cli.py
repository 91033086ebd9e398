"""CLI tool for address normalization, job matching and customer matching."""

import argparse
import os
import sys

import pandas as pd
import structlog

from addrmatch.config import MatchConfig, MatchOptions
from addrmatch.customers import CustomerMatcher
from addrmatch.io import read_addresses, results_frame, review_frame, write_table
from addrmatch.jobs import batch_match_addresses, find_all_matches
from addrmatch.logging import configure_logging
from addrmatch.manual_matches import ManualLinkStore
from addrmatch.normalize import normalize_address
from addrmatch.scoring import calculate_similarity, confidence_for
from addrmatch.sources import (
    CandidateSourceError,
    FrameCandidateSource,
    customer_source,
    job_source,
    read_table,
)

_DEFAULT_JOBS = os.environ.get("ADDRMATCH_JOBS", "localdata/jobs.csv")
_DEFAULT_CUSTOMERS = os.environ.get("ADDRMATCH_CUSTOMERS", "localdata/customers.csv")
_DEFAULT_LINKS = os.environ.get("ADDRMATCH_LINKS", "localdata/manual_links.json")


def _load_links(path: str | None) -> ManualLinkStore | None:
    if not path:
        return None
    store = ManualLinkStore(path)
    store.load()
    return store


def cmd_normalize(args: argparse.Namespace) -> None:
    for address in args.addresses:
        print(normalize_address(address))


def cmd_compare(args: argparse.Namespace) -> None:
    config = MatchConfig()
    a = normalize_address(args.address1)
    b = normalize_address(args.address2)
    score = calculate_similarity(a, b)
    print(f"  {args.address1!r} -> {a!r}")
    print(f"  {args.address2!r} -> {b!r}")
    print(f"  similarity: {score:.4f} ({confidence_for(score, config.tiers)})")
    print(f"  match at {config.jobs.best}: {'yes' if score >= config.jobs.best else 'no'}")


def cmd_match(args: argparse.Namespace) -> None:
    log = structlog.get_logger()
    config = MatchConfig()
    options = MatchOptions(min_score=args.min_score)

    addresses = read_addresses(args.submissions, args.column)
    jobs = job_source(read_table(args.jobs), include_archived=args.include_archived).fetch()
    log.info("files_loaded", submissions=len(addresses), jobs=len(jobs))

    if args.all:
        frames = [
            review_frame(address, find_all_matches(address, jobs, options, config))
            for address in addresses
        ]
        frames = [f for f in frames if not f.empty]
        df_out = pd.concat(frames, ignore_index=True) if frames else pd.DataFrame()
        print(f"\nReview candidates: {len(df_out)} rows for {len(addresses)} addresses")
    else:
        results = batch_match_addresses(
            addresses, jobs, options, config, manual_links=_load_links(args.links)
        )
        df_out = results_frame(results, entity="job")
        _print_summary(results)

    if args.show and not df_out.empty:
        print(df_out.to_string(index=False))

    write_table(df_out, args.output)
    print(f"\nSaved to: {args.output}")


def cmd_customers(args: argparse.Namespace) -> None:
    config = MatchConfig()
    options = MatchOptions(min_score=args.min_score)

    jobs = FrameCandidateSource(read_table(args.jobs), name="jobs").fetch()
    matcher = CustomerMatcher(
        customer_source(read_table(args.customers)),
        config,
        manual_links=_load_links(args.links),
    )
    results = matcher.batch_match_jobs_to_customers(jobs, options)
    df_out = results_frame(results, entity="customer", key_column="job_id")

    if args.show and not df_out.empty:
        print(df_out.to_string(index=False))

    _print_summary(results)
    s = matcher.stats
    print(f"Checked: {s.checked}, fetch errors: {s.fetch_errors}")
    write_table(df_out, args.output)
    print(f"\nSaved to: {args.output}")


def cmd_serve(args: argparse.Namespace) -> None:
    """Launch the matching API."""
    import uvicorn

    from addrmatch.server import create_app

    log = structlog.get_logger()
    log.info("server_start", jobs=args.jobs, customers=args.customers, port=args.port)

    app = create_app(
        jobs_path=args.jobs,
        customers_path=args.customers,
        links_path=args.links,
    )
    uvicorn.run(app, host=args.host, port=args.port, log_level="warning")


def _print_summary(results: dict) -> None:
    methods = {"exact": 0, "fuzzy": 0, "manual": 0}
    unmatched = 0
    for match in results.values():
        if match is None:
            unmatched += 1
        else:
            methods[match.method] += 1
    parts = [f"{k.upper()}={v}" for k, v in methods.items()]
    parts.append(f"NO_MATCH={unmatched}")
    print(f"\nResults: {', '.join(parts)}")


def main(argv: list[str] | None = None) -> None:
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set logging level (default: INFO)",
    )
    parent_parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs as JSON lines",
    )

    parser = argparse.ArgumentParser(
        description="Fuzzy address matching for jobs and customers",
        parents=[parent_parser],
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    norm_parser = subparsers.add_parser("normalize", parents=[parent_parser], help="Print normalized addresses")
    norm_parser.add_argument("addresses", nargs="+", help="Raw addresses")
    norm_parser.set_defaults(func=cmd_normalize)

    cmp_parser = subparsers.add_parser("compare", parents=[parent_parser], help="Score two addresses")
    cmp_parser.add_argument("address1")
    cmp_parser.add_argument("address2")
    cmp_parser.set_defaults(func=cmd_compare)

    match_parser = subparsers.add_parser("match", parents=[parent_parser], help="Match submission addresses to jobs")
    match_parser.add_argument("--submissions", required=True, help="File of submission addresses")
    match_parser.add_argument("--column", default="address", help="Address column in the submissions file")
    match_parser.add_argument("--jobs", default=_DEFAULT_JOBS, help="Jobs file (id, address, status)")
    match_parser.add_argument("--all", action="store_true", help="List every candidate above the review threshold")
    match_parser.add_argument("--min-score", type=float, default=None, help="Override the default threshold")
    match_parser.add_argument("--include-archived", action="store_true", help="Consider jobs in any status")
    match_parser.add_argument("--links", default=None, help="Manual links file")
    match_parser.add_argument("--show", action="store_true", help="Display results on screen")
    match_parser.add_argument("--output", default="localdata/job_matches.csv", help="Output file path")
    match_parser.set_defaults(func=cmd_match)

    cust_parser = subparsers.add_parser("customers", parents=[parent_parser], help="Match jobs to customers")
    cust_parser.add_argument("--jobs", default=_DEFAULT_JOBS, help="Jobs file (id, address)")
    cust_parser.add_argument("--customers", default=_DEFAULT_CUSTOMERS, help="Customers file (id, name, address)")
    cust_parser.add_argument("--min-score", type=float, default=None, help="Override the default threshold")
    cust_parser.add_argument("--links", default=None, help="Manual links file")
    cust_parser.add_argument("--show", action="store_true", help="Display results on screen")
    cust_parser.add_argument("--output", default="localdata/customer_matches.csv", help="Output file path")
    cust_parser.set_defaults(func=cmd_customers)

    serve_parser = subparsers.add_parser("serve", parents=[parent_parser], help="Run the matching API")
    serve_parser.add_argument("--jobs", default=_DEFAULT_JOBS, help="Jobs file")
    serve_parser.add_argument("--customers", default=_DEFAULT_CUSTOMERS, help="Customers file")
    serve_parser.add_argument("--links", default=_DEFAULT_LINKS, help="Manual links file")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8765, help="Server port (default: 8765)")
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)
    configure_logging(args.log_level, json_output=args.json_logs)
    try:
        args.func(args)
    except (CandidateSourceError, OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
