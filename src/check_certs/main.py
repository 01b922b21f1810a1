# src/check_certs/main.py

import argparse
import logging
import sys

import shtab

from check_certs import __version__
from check_certs.config import DEFAULT_TIMEOUT, CheckConfig, setup_logging
from check_certs.exceptions import TemplateRenderError
from check_certs.render import load_user_template, render_csv, render_json, render_markdown, render_text
from check_certs.tls_checker import check_certificates
from check_certs.web_server import run_server

logger = logging.getLogger(__name__)


def create_parser():
    '''
    Create and configure the argument parser for check-certs.

    Returns:
        argparse.ArgumentParser: The configured argument parser.
    '''
    parser = argparse.ArgumentParser(
        description="Show TLS certificate details for one or more hosts.",
        epilog="Example: check-certs example.com example.org:8443 -m"
    )
    parser.add_argument(
        '--version',
        '-V',
        action='version',
        version=f'%(prog)s {__version__}',
        help="Show program's version number and exit"
    )
    parser.add_argument('domains', nargs='*',
                        help='Hosts to check (e.g., example.com or example.com:8443, port defaults to 443)')

    output_group = parser.add_mutually_exclusive_group()
    output_group.add_argument('-m', '--markdown', action='store_true',
                              help='Output a markdown table')
    output_group.add_argument('-j', '--json', action='store_true',
                              help='Output JSON')
    output_group.add_argument('-c', '--csv', action='store_true',
                              help='Output CSV')

    parser.add_argument('-t', '--template', type=str, metavar='TEMPLATE', default=None,
                        help='Jinja2 template (file path or template text) replacing the default text output')
    parser.add_argument('-k', '--insecure', action='store_true',
                        help='Skip certificate verification (e.g., for self-signed certs). Unsafe.')
    parser.add_argument('-u', '--utc', action='store_true',
                        help='Show validity dates in UTC instead of local time')
    parser.add_argument('--timeout', type=float, default=DEFAULT_TIMEOUT, metavar='SECONDS',
                        help=f'Connect and handshake timeout in seconds (default: {DEFAULT_TIMEOUT})')
    parser.add_argument('-l', '--loglevel', type=str, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='WARNING', help='Set log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)')
    parser.add_argument('-s', '--server', action='store_true',
                        help='Run as HTTP server with web interface')
    parser.add_argument('-p', '--port', type=int, default=8000,
                        help='Specify web server port (default: 8000)')

    prog_name = parser.prog
    shtab.add_argument_to(parser, ['--print-completion'], preamble={
        "bash": f"""
# Load this into your shell environment by adding
# eval "$({prog_name} --print-completion bash)"
# to your .bashrc or .bash_profile
        """,
        "zsh": f"""
# Load this into your shell environment by adding
# eval "$({prog_name} --print-completion zsh)"
# to your .zshrc
        """,
    })
    return parser


def format_output(records, args, template=None) -> str:
    """Render records in the format selected on the command line."""
    if args.json:
        return render_json(records) + "\n"
    if args.markdown:
        return render_markdown(records)
    if args.csv:
        return render_csv(records)
    return render_text(records, template)


def main(argv=None):
    """
    Parse command-line arguments and check the given hosts, run the web
    server, or print shell completion scripts.
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.loglevel)

    if not args.domains and not args.server:
        parser.print_help()
        sys.exit(0)

    if args.server:
        if args.domains:
            logger.warning("Domains provided on the command line are ignored when running in server mode.")
        run_server(args)
        return

    try:
        template = load_user_template(args.template)
    except OSError as e:
        print(f"Could not read template {args.template}: {e}", file=sys.stderr)
        sys.exit(1)

    config = CheckConfig.from_args(args, template=template)
    records = check_certificates(args.domains, config)

    try:
        output = format_output(records, args, config.template)
    except TemplateRenderError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)
    sys.stdout.write(output)


if __name__ == "__main__":
    main()
