"""
mavenhost: Maven repository upload endpoint with asynchronous directory indexing
"""

import argparse
import asyncio
import inspect
import json
import logging
from pathlib import Path

import uvicorn
from uvicorn.config import LOGGING_CONFIG

from mavenhost.auth import hash_password
from mavenhost.config import ENV_PREFIX, get_settings, validate_settings
from mavenhost.connections import mavenhost_connections
from mavenhost.paths import url_path


def run(args):
    settings = get_settings()
    logging.info(f"Starting server at port {args.port}, debug={not args.nodebug}")
    for warning in validate_settings(settings):
        logging.warning(warning)
    logging.info(
        "To change server config, create an .env file and/or set environment parameters,\n"
        f"{' ' * 26}see mavenhost/config.py for more information.\n"
    )
    log_config = "logging.yml" if Path("logging.yml").exists() else LOGGING_CONFIG
    uvicorn.run("mavenhost.api:app", host="0.0.0.0", reload=not args.nodebug, port=int(args.port), log_config=log_config)


def config_mavenhost(_args):
    settings = get_settings()
    print(f"# Settings read from environment and {settings.env_file}")
    for fieldname, fieldinfo in type(settings).model_fields.items():
        if fieldname == "env_file":
            continue
        if doc := fieldinfo.description:
            print(f"# {doc}")
        value = settings.model_dump(mode="json")[fieldname]
        if value is None:
            print(f"#{ENV_PREFIX}{fieldname}=")
        elif isinstance(value, (list, dict)):
            print(f"{ENV_PREFIX}{fieldname}='{json.dumps(value)}'")
        else:
            print(f"{ENV_PREFIX}{fieldname}={value}")


def hash_password_command(args):
    print(hash_password(args.password, args.salt))


async def reindex(args):
    settings = get_settings()
    directory = url_path(args.directory)
    if not directory.endswith("/"):
        directory += "/"
    if not directory.startswith(settings.repository_root):
        logging.error(f"{directory} is not under the repository root {settings.repository_root}")
        return
    async with mavenhost_connections(settings) as services:
        changed = await services.propagator.propagate(directory)
        await services.purger.purge(changed)
        logging.info(f"Regenerated {len(changed)} listings: {', '.join(changed)}")


def main():
    parser = argparse.ArgumentParser(description=__doc__, prog="python -m mavenhost")

    subparsers = parser.add_subparsers(dest="action", title="action", help="Action to perform:", required=True)
    p = subparsers.add_parser("run", help="Run the upload API")
    p.add_argument(
        "--no-debug",
        action="store_true",
        dest="nodebug",
        help="Disable debug mode (no auto reload)",
    )
    p.add_argument("-p", "--port", help="Port", default=5001)
    p.set_defaults(func=run)

    p = subparsers.add_parser("config", help="Print the current settings in .env format")
    p.set_defaults(func=config_mavenhost)

    p = subparsers.add_parser("hash-password", help="Hash a password for the authorized_users table")
    p.add_argument("password", help="The password to hash")
    p.add_argument("-s", "--salt", default="", help="Optional salt, to be stored in the table entry as well")
    p.set_defaults(func=hash_password_command)

    p = subparsers.add_parser("reindex", help="Regenerate the listing of a directory and its unmarked ancestors")
    p.add_argument("directory", help="Directory path, e.g. repository/releases/org/example/")
    p.set_defaults(func=reindex)

    args = parser.parse_args()

    logging.basicConfig(format="[%(levelname)-7s:%(name)-15s] %(message)s", level=logging.INFO)
    for noisy in ("elasticsearch", "elastic_transport", "botocore", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    if inspect.iscoroutinefunction(args.func):
        asyncio.run(args.func(args))
    else:
        args.func(args)


if __name__ == "__main__":
    main()
