"""CLI entry point: python main.py finishSecret my/secret 3f6c0a1e-..."""

import argparse
import dataclasses
import json
import sys

from src.logging_config import LogFormat, config_from_settings, configure_logging
from src.rotation_errors import RotationError
from src.secret_rotation import RotationStep
from src.secret_rotation.handler import build_orchestrator
from src.settings import get_settings


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Run one step of a managed secret rotation attempt"
    )
    parser.add_argument(
        "step", choices=[s.value for s in RotationStep],
        help="Rotation step to run"
    )
    parser.add_argument("secret_id", help="Secret identifier (name or ARN)")
    parser.add_argument("token", help="Rotation attempt token (version id)")
    parser.add_argument(
        "--console", action="store_true",
        help="Human-readable log output instead of JSON"
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    log_config = config_from_settings(settings)
    if args.console:
        log_config = dataclasses.replace(log_config, format=LogFormat.CONSOLE)
    configure_logging(log_config)

    orchestrator = build_orchestrator(settings)
    try:
        result = orchestrator.rotate(args.step, args.secret_id, args.token)
    except RotationError as exc:
        print(json.dumps({"error": exc.to_dict()}, indent=2), file=sys.stderr)
        return 1

    print(json.dumps(result.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
