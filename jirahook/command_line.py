import sys
from argparse import ArgumentParser
import traceback
import logging
import json

import uvicorn

from .config import load_config, generate_config_template
from .permissions import check_permissions
from .webhook import WebhookProcessor
from .server import create_app


logger = logging.getLogger(__name__)


def _parse_args():
    parent_parser = ArgumentParser()
    parent_parser.add_argument("-v", "--verbose", action="store_true", help="enable verbose log messages")
    parent_parser.add_argument("-d", "--debug", action="store_true", help="enable debug log messages")

    parser = ArgumentParser(
        description="GitHub pull request to JIRA transition webhook", parents=[parent_parser], add_help=False
    )

    subparsers = parser.add_subparsers(dest="command", help="selected command")
    subparsers.required = True

    serve_parser = subparsers.add_parser(
        "serve", description="Run the webhook server", parents=[parent_parser], add_help=False
    )
    serve_parser.add_argument("config_path", nargs="*", help="path to jirahook config file", metavar="config-path")
    serve_parser.add_argument("--host", default="0.0.0.0", help="interface to listen on")
    serve_parser.add_argument("--port", type=int, default=8080, help="port to listen on")

    process_parser = subparsers.add_parser(
        "process",
        description="Process a saved webhook payload (skips signature verification)",
        parents=[parent_parser],
        add_help=False,
    )
    process_parser.add_argument("config_path", nargs="*", help="path to jirahook config file", metavar="config-path")
    process_parser.add_argument("--payload", required=True, help="path to JSON file containing the webhook payload")
    process_parser.add_argument("--dry-run", action="store_true", help="do not make changes to GitHub or JIRA")

    permissions_parser = subparsers.add_parser(
        "check-permissions",
        description="Check GitHub and JIRA credentials and permissions",
        parents=[parent_parser],
        add_help=False,
    )
    permissions_parser.add_argument(
        "config_path", nargs="*", help="path to jirahook config file", metavar="config-path"
    )

    subparsers.add_parser(
        "generate-config", description="Print config file template to stdout", parents=[parent_parser], add_help=False
    )

    return parser.parse_args()


def main():
    args = _parse_args()

    _configure_logging(args)

    if args.command == "serve":
        return _handle_serve(args)
    elif args.command == "process":
        return _handle_process(args)
    elif args.command == "generate-config":
        return _handle_generate_config(args)
    elif args.command == "check-permissions":
        return _handle_check_permissions(args)


def _configure_logging(args):
    handler = logging.StreamHandler()

    if args.debug:
        handler.setLevel(logging.DEBUG)
        logging.getLogger("jirahook").setLevel(logging.DEBUG)
    elif args.verbose:
        handler.setLevel(logging.INFO)
        logging.getLogger("jirahook").setLevel(logging.INFO)
    else:
        handler.setLevel(logging.WARNING)

    formatter = logging.Formatter("%(asctime)s - %(levelname)-7s - %(name)s - %(message)s")
    handler.setFormatter(formatter)

    logging.getLogger().addHandler(handler)


def _load_config(args):
    try:
        return load_config(args.config_path)
    except Exception:
        _print_error("Failed parsing config file:")
        traceback.print_exc(file=sys.stderr)
        return None


def _handle_serve(args):
    config = _load_config(args)
    if config is None:
        return 1

    try:
        processor = WebhookProcessor.from_config(config)
    except Exception:
        logger.exception("Fatal error")
        return 1

    uvicorn.run(create_app(processor), host=args.host, port=args.port)

    return 0


def _handle_process(args):
    config = _load_config(args)
    if config is None:
        return 1

    try:
        with open(args.payload, "r") as file:
            payload = json.loads(file.read())
    except (OSError, ValueError):
        _print_error(f"Failed reading payload file {args.payload}:")
        traceback.print_exc(file=sys.stderr)
        return 1

    try:
        processor = WebhookProcessor.from_config(config, dry_run=args.dry_run)
        outcome = processor.process(payload)
    except Exception:
        logger.exception("Fatal error")
        return 1

    print(f"Payload {outcome}")

    return 0


def _handle_check_permissions(args):
    config = _load_config(args)
    if config is None:
        return 1

    try:
        errors = check_permissions(config)
    except Exception:
        logger.exception("Fatal error")
        return 1

    if errors:
        _print_error("JIRA and/or GitHub permissions must be corrected:")
        for error in errors:
            _print_error(error)
        return 1
    else:
        print("JIRA and GitHub permissions are sufficient")
        return 0


def _handle_generate_config(args):
    sys.stdout.write(generate_config_template())

    return 0


def _print_error(*args, **kwargs):
    print(*args, **kwargs, file=sys.stderr)
