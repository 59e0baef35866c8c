"""Harness and test environment configuration."""

import os
import pathlib as pl

# Distro of the machines under test, e.g. "cl", "fcos" or "rhcos"
DISTRO = os.environ.get("KOLA_DISTRO") or "cl"

# Comma separated list of enabled capability flags, e.g. "RequiresInternetAccess"
ENABLED_FLAGS: tuple[str, ...] = tuple(
    f.strip() for f in (os.environ.get("KOLA_ENABLED_FLAGS") or "").split(",") if f.strip()
)

# Wait for the cluster to become healthy for up to `attempts * delay` seconds
HEALTH_CHECK_ATTEMPTS = int(os.environ.get("HEALTH_CHECK_ATTEMPTS") or 60)
if HEALTH_CHECK_ATTEMPTS < 1:
    msg = f"Invalid HEALTH_CHECK_ATTEMPTS '{HEALTH_CHECK_ATTEMPTS}': must be >= 1"
    raise RuntimeError(msg)

HEALTH_CHECK_DELAY = float(os.environ.get("HEALTH_CHECK_DELAY") or 3.0)
if HEALTH_CHECK_DELAY < 0:
    msg = f"Invalid HEALTH_CHECK_DELAY '{HEALTH_CHECK_DELAY}': must be >= 0"
    raise RuntimeError(msg)

SSH_USER = os.environ.get("SSH_USER") or "core"
SSH_OPTIONS: tuple[str, ...] = tuple(
    (
        os.environ.get("SSH_OPTIONS")
        or "-o StrictHostKeyChecking=no -o UserKnownHostsFile=/dev/null -o BatchMode=yes"
    ).split()
)

# Location of the on-machine agent that runs native functions
KOLET_PATH = os.environ.get("KOLET_PATH") or "./kolet"

# Number of independent clusters that can be dispatched in parallel
PARALLEL = int(os.environ.get("KOLA_PARALLEL") or 1)
if PARALLEL < 1:
    msg = f"Invalid KOLA_PARALLEL '{PARALLEL}': must be >= 1"
    raise RuntimeError(msg)

# Resolve KOLA_LOG_DIR
LOG_DIR: str | pl.Path = os.environ.get("KOLA_LOG_DIR") or ""
if LOG_DIR:
    LOG_DIR = pl.Path(LOG_DIR).expanduser().resolve()
