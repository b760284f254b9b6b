#!/usr/bin/env python3
"""
Primo pipes probe - main entry point.

Logs in to the Primo Back Office, scrapes the pipe list (and optionally the
scheduled tasks page) and prints one monitoring status line:

    PRIMO_PIPES <OK|WARNING|CRITICAL|UNKNOWN> - <message>

Exit codes follow the usual plugin convention: 0 OK, 1 WARNING,
2 CRITICAL, 3 UNKNOWN.
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from ..collectors.pipes import PipeCollector
from ..collectors.schedule import ScheduleCollector
from ..collectors.session import Deadline, login
from ..data.models import Severity, Verdict
from ..exceptions import AuthError, EmptyResultError, FetchError, ProbeError, ProbeTimeoutError
from ..insights.pipes import evaluate_pipes
from ..insights.schedule import evaluate_schedule
from ..insights.verdict import aggregate
from .config import ConfigError, ProbeConfig

logger = logging.getLogger(__name__)

PLUGIN_NAME = "PRIMO_PIPES"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def format_result(severity: Severity, message: str) -> str:
    message = message.replace("\n", " ")
    return f"{PLUGIN_NAME} {severity.value} - {message}"


def configure_logging(debug: bool = False) -> None:
    """Send log records to stderr; stdout is reserved for the status line."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        stream=sys.stderr,
        format=LOG_FORMAT,
    )
    if not debug:
        logging.getLogger("urllib3").setLevel(logging.ERROR)


@contextmanager
def alarm(seconds: int) -> Iterator[None]:
    """Raise ProbeTimeoutError if the block runs longer than ``seconds``."""
    if not hasattr(signal, "SIGALRM"):
        yield
        return

    def _expired(signum, frame):
        raise ProbeTimeoutError(f"timed out after {seconds} seconds")

    previous = signal.signal(signal.SIGALRM, _expired)
    signal.alarm(seconds)
    try:
        yield
    finally:
        signal.alarm(0)
        signal.signal(signal.SIGALRM, previous)


def run_probe(config: ProbeConfig, deadline: Optional[Deadline] = None, now: Optional[float] = None) -> Verdict:
    """Run login, scrape and evaluation once.

    Raises:
        ProbeError: Any fatal condition (login, fetch, empty pipe list, timeout).
    """
    deadline = deadline or Deadline(config.timeout)
    session = login(
        config.host,
        config.customer_id,
        config.username,
        config.password,
        cookie_jar_path=config.cookie_jar,
        deadline=deadline,
        verify=config.tls_verify,
        user_agent=config.user_agent,
    )

    collector = PipeCollector(session, name_filter=config.pipe_name or None)
    pipes = collector.collect()
    evaluation = evaluate_pipes(
        pipes,
        stale_threshold_hours=config.stale_hours,
        job_detail_fetcher=collector.job_detail,
        now=now,
    )

    disabled: List[str] = []
    if config.scheduled_watch:
        tasks = ScheduleCollector(session).collect()
        disabled = evaluate_schedule(tasks, config.scheduled_watch)

    return aggregate(
        evaluation.histogram,
        evaluation.pipe_by_status,
        stalled_finding=evaluation.stalled_finding,
        disabled_tasks=disabled,
        verbose=config.verbose,
    )


def check(config: ProbeConfig) -> Verdict:
    """Run the probe under the global timeout and map failures to UNKNOWN."""
    try:
        with alarm(config.timeout):
            return run_probe(config)
    except ProbeTimeoutError as e:
        return Verdict(Severity.UNKNOWN, str(e))
    except (AuthError, EmptyResultError) as e:
        return Verdict(Severity.UNKNOWN, str(e))
    except FetchError as e:
        return Verdict(Severity.UNKNOWN, f"fetch failed: {e}")
    except ProbeError as e:
        return Verdict(Severity.UNKNOWN, str(e))
    except Exception as e:
        logger.exception("Unexpected error during probe run")
        return Verdict(Severity.UNKNOWN, f"unexpected error: {e}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="check_primo_pipes",
        description="Check the health of Primo Back Office pipes.",
    )
    parser.add_argument("-H", "--host", help="Back Office base URL, e.g. https://primo.example.edu:1601")
    parser.add_argument("-c", "--customer-id", dest="customer_id", help="Numeric customer id")
    parser.add_argument("-u", "--username", help="Back Office user")
    parser.add_argument("-p", "--password", help="Back Office password (or set PRIMO_PIPES_PASSWORD)")
    parser.add_argument("-n", "--pipe-name", dest="pipe_name", help="Only check the pipe with this name")
    parser.add_argument("-s", "--stale-hours", dest="stale_hours", type=float,
                        help="Warn when a running pipe has been running this many hours")
    parser.add_argument("-S", "--scheduled", dest="scheduled_watch",
                        help="Comma-separated scheduled pipe tasks that must be enabled")
    parser.add_argument("-j", "--cookie-jar", dest="cookie_jar", help="Cookie jar file")
    parser.add_argument("-t", "--timeout", type=int, help="Overall timeout in seconds (default 15)")
    parser.add_argument("-v", "--verbose", action="store_true", default=None,
                        help="List pipe names per status instead of counts")
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--insecure", dest="verify", action="store_false", default=None,
                        help="Disable TLS certificate verification (NOT recommended)")
    parser.add_argument("--ca-bundle", dest="ca_bundle", help="Path to a custom CA bundle PEM")
    parser.add_argument("--debug", action="store_true", help="Log debug output to stderr")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.debug)

    overrides: Dict[str, Any] = {
        key: value for key, value in vars(args).items() if key not in ("config", "debug")
    }
    try:
        config = ProbeConfig.load(args.config).merge(overrides)
        config.validate()
    except ConfigError as e:
        print(format_result(Severity.UNKNOWN, f"configuration error: {e}"))
        return Severity.UNKNOWN.exit_code

    verdict = check(config)
    print(format_result(verdict.severity, verdict.message))
    return verdict.exit_code


if __name__ == "__main__":
    sys.exit(main())
