#!/usr/bin/env python3
# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Dataverse Dataset Client - Quickstart

Walks through the read-only dataset calls against a Dataverse installation and,
when asked, uploads a file and publishes a minor version.

Prerequisites:
- dataverse-dataset installed (``pip install -e .``)
- DATAVERSE_BASE_URL set, and DATAVERSE_API_TOKEN for anything beyond public reads

Usage:
    python examples/basic/quickstart.py doi:10.5072/FK2/ABC123
    python examples/basic/quickstart.py doi:10.5072/FK2/ABC123 --upload data.csv --publish
"""

import argparse
import logging
import os
import sys

from dataverse_dataset import DataverseClient
from dataverse_dataset.core.config import DataverseConfig
from dataverse_dataset.core.errors import HttpError
from dataverse_dataset.core.telemetry import TelemetryConfig


def log_call(call: str) -> None:
    print({"call": call})


def show(label: str, result) -> None:
    if result.ok:
        print(f"✅ {label}: {result.status_code}")
        print(result.body[:500])
    elif isinstance(result.error, HttpError):
        print(f"❌ {label}: server said {result.status_code}: {result.error.message}")
    else:
        print(f"❌ {label}: {result.error.code}: {result.error.message}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Dataverse dataset quickstart")
    parser.add_argument("dataset", help="Persistent identifier, or internal id with --by-id")
    parser.add_argument("--by-id", action="store_true", help="Address the dataset by internal id")
    parser.add_argument("--upload", help="Local file to add to the draft version")
    parser.add_argument("--publish", action="store_true", help="Publish a minor version at the end")
    parser.add_argument("--verbose", action="store_true", help="Log every request")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    base = DataverseConfig.from_env()
    config = DataverseConfig(
        api_version=base.api_version,
        connection_timeout=base.connection_timeout,
        read_timeout=base.read_timeout,
        http_retries=base.http_retries,
        telemetry=TelemetryConfig(enable_logging=args.verbose, log_level="DEBUG"),
    )

    try:
        client = DataverseClient(
            os.environ.get("DATAVERSE_BASE_URL", ""), os.environ.get("DATAVERSE_API_TOKEN"), config
        )
    except ValueError as e:
        print(f"❌ {e} Set DATAVERSE_BASE_URL first.")
        return 1

    with client:
        ds = client.dataset(args.dataset, persistent_id=not args.by_id)

        log_call(f"dataset({ds.id!r}).view()")
        show("view", ds.view())

        log_call("list_versions()")
        show("versions", ds.list_versions())

        log_call("list_files(':latest')")
        show("files", ds.list_files(":latest"))

        log_call("get_locks()")
        show("locks", ds.get_locks())

        log_call("export_metadata_to('dataverse_json')")
        show("export", ds.export_metadata_to("dataverse_json"))

        if args.upload:
            log_call(f"add_file({args.upload!r})")
            show("add file", ds.add_file(args.upload, json_string='{"description": "Uploaded by quickstart"}'))

        if args.publish:
            log_call("publish('minor')")
            show("publish", ds.publish("minor"))

    return 0


if __name__ == "__main__":
    sys.exit(main())
