import json
import logging
import sys
from typing import Optional

import fire
import requests
from pydantic import ValidationError
from web3.exceptions import Web3Exception

from mintdrop.config import load_conf, load_config_from_env
from mintdrop.errors import (
    BadConfigException,
    MissingEnvironmentVariableException,
    ScanError,
    TargetNotFoundError,
)
from mintdrop.merkle import verify_payload
from mintdrop.models import RebuildConfig
from mintdrop.queries import Chain, Distributor
from mintdrop.rebuild import rebuild_and_push
from mintdrop.reporter import failure
from mintdrop.storage import LocalStore

# anything here means the rebuild could not produce a trustworthy result
HARD_FAILURES = (
    BadConfigException,
    MissingEnvironmentVariableException,
    ValidationError,
    TargetNotFoundError,
    ScanError,
    Web3Exception,
    requests.RequestException,
)


def _config(config: Optional[str]) -> RebuildConfig:
    return load_conf(config) if config else load_config_from_env()


def rebuild(config: Optional[str] = None) -> None:
    """
    Rebuild the claims for the current round and push the root if needed.
    Prints the result as json, exits 1 when `ok` is false.
    :param `config`: path to a json config, defaults to the environment
    """
    try:
        result = rebuild_and_push(_config(config))
    except HARD_FAILURES as e:
        result = failure(e)

    print(result.model_dump_json(indent=2))
    if not result.ok:
        print(f"❌ rebuild failed: {result.error}", file=sys.stderr)
        sys.exit(1)
    if result.reason == "push-failed":
        print(f"⚠️  setRoot failed, next run retries: {result.error}", file=sys.stderr)
    elif result.updated:
        print(f"🚀 pushed root {result.fileRoot} for round {result.round}", file=sys.stderr)
    else:
        print(f"😃 nothing pushed ({result.reason})", file=sys.stderr)


def status(config: Optional[str] = None) -> None:
    """Print what the distributor currently holds"""
    conf = _config(config)
    chain = Chain.from_url(conf.rpc_url)
    state = Distributor(chain.w3, conf.distributor_address).read_state()
    print(json.dumps(state.model_dump(), indent=4))


def verify(path: str) -> None:
    """Check every proof in a local artifact re-derives its root"""
    payload = LocalStore(path).read()
    if payload is None:
        print(f"❌ no artifact at {path}", file=sys.stderr)
        sys.exit(1)

    bad = verify_payload(payload)
    for account in bad:
        print(f"❌ proof for {account} does not match root {payload.root}")
    if bad:
        sys.exit(1)
    print(f"✅ {len(payload.claims)} proofs match root {payload.root}")


def main() -> None:
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    fire.Fire({"rebuild": rebuild, "status": status, "verify": verify})


if __name__ == "__main__":
    main()
