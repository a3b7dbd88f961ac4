from __future__ import annotations

import asyncio

from charmline.apps.runtime_support import build_orchestrator
from charmline.cli import base_parser
from charmline.core.config.loader import load_app_config
from charmline.core.telemetry.logging import configure_logging


def main() -> int:
    parser = base_parser("charmline-diag", "Charmline diagnostics CLI")
    parser.add_argument("--config", default=None, help="Config file path")
    parser.add_argument("--validate-config", action="store_true")
    parser.add_argument("--list-providers", action="store_true")
    parser.add_argument("--check-providers", action="store_true")
    args = parser.parse_args()

    try:
        cfg = load_app_config(instance_path=args.config)
    except Exception as exc:  # noqa: BLE001
        print(f"config-invalid error={exc}")
        return 1
    configure_logging("WARNING", cfg.telemetry.json_logs)

    did_work = False
    if args.validate_config:
        did_work = True
        print(
            f"config-valid instance={cfg.instance.name} env={cfg.environment} "
            f"max_retries={cfg.runtime.max_retries} timeout_s={cfg.runtime.provider_timeout_seconds}"
        )

    orchestrator = build_orchestrator(cfg)

    if args.list_providers:
        did_work = True
        print("providers:")
        if not orchestrator.providers:
            print("- none (local fallback only)")
        for descriptor in orchestrator.providers:
            print(f"- {descriptor.name}: priority={descriptor.priority} model={descriptor.model}")

    if args.check_providers:
        did_work = True
        health = asyncio.run(orchestrator.check_health())
        print("provider-health:")
        if not health:
            print("- none")
        for name, status in health.items():
            print(f"- {name}: {status}")

    if not did_work:
        parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
