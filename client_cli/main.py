"""Command-line front end for the IPP client."""
# Example:
# python -m client_cli.main --uri ipp://localhost:631/ printers

from __future__ import annotations

import asyncio
import logging
import sys
from argparse import (
    ArgumentDefaultsHelpFormatter,
    ArgumentParser,
    RawDescriptionHelpFormatter,
)

import httpx

from ipp_client import (
    IppClient,
    cancel_job,
    cups_get_printers,
    get_jobs,
    get_printer_attributes,
    print_job,
    printer_summaries,
    set_config,
)
from ipp_proto.errors import IppError
from ipp_proto.logging_config import configure_logging
from ipp_proto.request import IppRequestResponse
from ipp_shared.constants import DelimiterTag

log = logging.getLogger("ipp_client")


# Combine both formatters to allow newlines and showing default arguments
class RawDescriptionDefaultsHelpFormatter(
    RawDescriptionHelpFormatter,
    ArgumentDefaultsHelpFormatter,
):
    pass


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        description="IPP command-line client.\n\n"
        "Sends Internet Printing Protocol requests to a printer or CUPS server.\n"
        "Defaults are read from config.yaml and IPP_* environment variables.",
        formatter_class=RawDescriptionDefaultsHelpFormatter,
    )
    parser.add_argument("--uri", default=None, help="Printer or server uri (ipp://, ipps://, http://)")
    parser.add_argument("--config", default="config.yaml", help="YAML configuration file")
    parser.add_argument("--user", default=None, help="User name sent as requesting-user-name")
    parser.add_argument("--insecure", action="store_true", help="Do not verify TLS certificates")
    parser.add_argument("--log-level", default=None, help="Log level (defaults to LOG_LEVEL or INFO)")

    actions = parser.add_subparsers(dest="action")
    actions.add_parser("printers", help="List printers of a CUPS server")

    attrs = actions.add_parser("attributes", help="Show printer attributes")
    attrs.add_argument("names", nargs="*", help="Attribute names to request (all if omitted)")

    jobs = actions.add_parser("jobs", help="List jobs")
    jobs.add_argument("--which", choices=["completed", "not-completed"], default=None)

    submit = actions.add_parser("print", help="Print a file")
    submit.add_argument("file", help="Document to send")
    submit.add_argument("--format", default="application/octet-stream", help="Document MIME type")
    submit.add_argument("--job-name", default=None, help="Job name (defaults to file name)")

    cancel = actions.add_parser("cancel", help="Cancel a job")
    cancel.add_argument("job_id", type=int, help="Job identifier")
    return parser


def print_groups(response: IppRequestResponse, tag: DelimiterTag) -> None:
    for group in response.attributes.groups_of(tag):
        for attribute in group:
            print(attribute)
        print()


async def run(args, cfg: dict) -> int:
    """Execute the selected action; return the process exit code."""
    uri = args.uri or cfg["uri"]
    client = IppClient(
        uri,
        timeout=cfg["timeout"],
        verify_tls=cfg["verify_tls"] and not args.insecure,
        username=cfg["username"],
        password=cfg["password"],
    )
    user = args.user or cfg["username"]

    if args.action == "printers":
        response = await client.send(cups_get_printers(["printer-name", "device-uri", "printer-state"]))
        for printer in printer_summaries(response):
            print(f"{printer.name}: {printer.device_uri} {printer.state.name.lower()}")
        return 0

    if args.action == "attributes":
        response = await client.send(get_printer_attributes(uri, args.names))
        print_groups(response, DelimiterTag.PRINTER_ATTRIBUTES)
        return 0

    if args.action == "jobs":
        response = await client.send(get_jobs(uri, user_name=user, which_jobs=args.which))
        print_groups(response, DelimiterTag.JOB_ATTRIBUTES)
        return 0

    if args.action == "print":
        with open(args.file, "rb") as fh:
            request = print_job(
                uri,
                fh,
                user_name=user,
                job_name=args.job_name or args.file,
                document_format=args.format,
            )
            response = await client.send(request)
        job_id = response.attributes.find(DelimiterTag.JOB_ATTRIBUTES, "job-id")
        print(f"job-id: {job_id.value if job_id is not None else 'unknown'}")
        return 0

    if args.action == "cancel":
        await client.send(cancel_job(uri, args.job_id, user_name=user))
        print(f"Job {args.job_id} canceled")
        return 0

    return 1


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint.

    Args:
        argv: Optional list of arguments (defaults to ``sys.argv``).

    Returns:
        int: Process exit code (0 on success, non-zero on error).
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if not args.action:
        # No action selected, show help
        parser.print_help()
        return 1

    cfg = set_config(args.config)
    log.debug("Handling action: %s", args.action)

    try:
        return asyncio.run(run(args, cfg))
    except (IppError, ConnectionError, OSError, ValueError, httpx.HTTPError) as exc:
        sys.stderr.write(f"Error talking to {args.uri or cfg['uri']}: {exc}\n")
        return 1


if __name__ == "__main__":
    sys.exit(main())
