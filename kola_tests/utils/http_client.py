"""HTTP client used by native functions that fetch remote resources from a machine."""

import functools

import requests

USER_AGENT = "kolet"


@functools.cache
def get_session() -> requests.Session:
    """Get a session shared by all native functions executed in one `kolet` process."""
    session = requests.Session()
    session.headers["User-Agent"] = USER_AGENT
    return session
