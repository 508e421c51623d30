#!/usr/bin/env python3

import json
import logging
import sys

from github import Github

from auto_backport import actions
from auto_backport.config import load_config, parse_args
from auto_backport.errors import FatalBackportError
from auto_backport.event import load_event
from auto_backport.orchestrator import backport

CREATED_PULL_REQUESTS_OUTPUT = "created_pull_requests"


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    args = parse_args(argv)

    try:
        config = load_config(args)
        event = load_event(args.event_path)
        created = backport(event, Github(config.token), config)
    except FatalBackportError as e:
        logging.error(str(e))
        actions.error(str(e))
        return 1

    actions.set_output(CREATED_PULL_REQUESTS_OUTPUT, json.dumps(created))
    return 0


if __name__ == "__main__":
    sys.exit(main())
