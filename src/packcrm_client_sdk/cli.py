from __future__ import annotations

import argparse
import asyncio
import json
import os
from pathlib import Path
from typing import Any, Sequence

from .config import ConfigError, load_config
from .exceptions import ApiError, ClientValidationError, CommandFailedError
from .listing import (
    ACTIVITY_COLUMNS,
    CLIENT_COLUMNS,
    EVENT_COLUMNS,
    TENANT_COLUMNS,
    USER_COLUMNS,
    ColumnDef,
    print_table,
    sort_rows,
    view_state_for,
)
from .session import ApiSession
from .state.principals import partition_users

LISTINGS: dict[str, tuple[str, list[ColumnDef], tuple[str, ...]]] = {
    "clients": ("clients", CLIENT_COLUMNS, ("search", "event", "marketingPerson", "followUpStatus", "priority")),
    "events": ("events", EVENT_COLUMNS, ("search", "status")),
    "tenants": ("tenants", TENANT_COLUMNS, ("search", "plan", "isActive")),
    "users": ("platform_users", USER_COLUMNS, ("search", "role", "isActive")),
    "activity": ("platform_activity", ACTIVITY_COLUMNS, ("action",)),
}


def _session(args: argparse.Namespace) -> ApiSession:
    config = load_config(args.env_file)
    return ApiSession(config, token=args.token, tenant_id=args.tenant_id)


def _filter_flag(name: str) -> str:
    return "--" + "".join(f"-{char.lower()}" if char.isupper() else char for char in name)


def _filter_dest(name: str) -> str:
    return _filter_flag(name)[2:].replace("-", "_")


def _query_param(value: str) -> tuple[str, str]:
    key, sep, raw = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected key=value, got {value!r}")
    return key, raw


async def _fetch_listing(resource_slice: Any, filters: dict[str, str], page: int) -> None:
    if filters:
        resource_slice.set_filters(filters)
    if page != 1:
        resource_slice.set_page(page)
    await resource_slice.fetch_list()


def cmd_list(args: argparse.Namespace) -> None:
    slice_name, columns, filter_names = LISTINGS[args.resource]
    session = _session(args)
    resource_slice = getattr(session, slice_name)()
    filters: dict[str, str] = {}
    for name in filter_names:
        value = getattr(args, _filter_dest(name), None)
        if value:
            filters[name] = value
    asyncio.run(_fetch_listing(resource_slice, filters, args.page))

    state = resource_slice.state
    view = view_state_for(columns, args.sort_by, args.sort_dir)
    pagination = state.pagination
    print(f"Environment: {session.config.env_name}")
    print(
        f"Page {pagination.page}/{pagination.total_pages or 1} "
        f"limit={pagination.limit} total={pagination.total}"
    )
    rows = list(state.items)
    if args.resource == "users":
        protected, rows = partition_users(rows)
        if protected:
            print_table("Platform owner (read-only)", sort_rows(protected, view), columns)
    print_table(args.resource.capitalize(), sort_rows(rows, view), columns)


def cmd_dashboard(args: argparse.Namespace) -> None:
    session = _session(args)
    dashboard = asyncio.run(session.platform_dashboard().fetch_platform_dashboard())
    print(json.dumps(dashboard, indent=2, default=str))


def cmd_export(args: argparse.Namespace) -> None:
    session = _session(args)
    targets = {
        "clients": session.clients,
        "events": session.events,
        "activity": session.platform_activity,
    }
    params = dict(args.param or [])
    content = asyncio.run(targets[args.resource]().export(params))
    out = Path(args.out)
    out.write_bytes(content)
    print(f"Wrote {len(content)} bytes to {out}")


def _add_listing_parser(subparsers: Any, resource: str) -> None:
    _, columns, filter_names = LISTINGS[resource]
    parser = subparsers.add_parser(resource, help=f"List {resource}")
    for name in filter_names:
        parser.add_argument(_filter_flag(name), dest=_filter_dest(name))
    parser.add_argument("--page", type=int, default=1)
    parser.add_argument("--sort-by", choices=[column.key for column in columns])
    parser.add_argument("--sort-dir", choices=["asc", "desc"], default="asc")
    parser.set_defaults(func=cmd_list, resource=resource)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="packcrm", description="PackCRM resource lists from the terminal")
    parser.add_argument("--env-file", default=None)
    parser.add_argument("--token", default=os.getenv("PACKCRM_TOKEN"))
    parser.add_argument("--tenant-id", default=os.getenv("PACKCRM_TENANT_ID"))
    subparsers = parser.add_subparsers(dest="command", required=True)

    for resource in LISTINGS:
        _add_listing_parser(subparsers, resource)

    dashboard_parser = subparsers.add_parser("dashboard", help="Show the platform dashboard")
    dashboard_parser.set_defaults(func=cmd_dashboard)

    export_parser = subparsers.add_parser("export", help="Download a spreadsheet export")
    export_parser.add_argument("resource", choices=["clients", "events", "activity"])
    export_parser.add_argument("--out", required=True)
    export_parser.add_argument("--param", action="append", type=_query_param, help="key=value query parameter")
    export_parser.set_defaults(func=cmd_export)
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    try:
        args.func(args)
    except CommandFailedError as exc:
        cause = exc.cause
        request_id = cause.request_id if isinstance(cause, ApiError) else None
        print(json.dumps({"command": exc.command, "message": exc.message, "request_id": request_id}, indent=2))
        raise SystemExit(1) from exc
    except ClientValidationError as exc:
        print(json.dumps({"error": "VALIDATION_ERROR", "message": str(exc)}, indent=2))
        raise SystemExit(2) from exc
    except ConfigError as exc:
        print(json.dumps({"error": "CONFIG_ERROR", "message": str(exc)}, indent=2))
        raise SystemExit(2) from exc


if __name__ == "__main__":
    main()
