"""
Page-level navigation policy: where to send a visitor for a given path.
"""

from typing import Optional
from urllib.parse import urlencode

from outreach.config import DEFAULT_PATH, LOGIN_PATH, PASSTHROUGH_PREFIXES, PUBLIC_ROUTES
from outreach.roles import Role, get_default_path, has_access


def is_passthrough(pathname: str) -> bool:
    """Static assets and API calls are not subject to page routing."""
    return pathname.startswith(PASSTHROUGH_PREFIXES) or "." in pathname


def is_public(pathname: str) -> bool:
    return pathname.startswith(PUBLIC_ROUTES)


def route_redirect(role: Optional[Role], authenticated: bool, pathname: str) -> Optional[str]:
    """Return the path to redirect to, or None to serve *pathname* as is."""
    if is_passthrough(pathname):
        return None

    public = is_public(pathname)

    if not authenticated:
        if public:
            return None
        return f"{LOGIN_PATH}?{urlencode({'redirectTo': pathname})}"

    if pathname == LOGIN_PATH:
        target = get_default_path(role)
    elif public:
        return None
    elif pathname == "/":
        target = DEFAULT_PATH
    elif not has_access(role, pathname):
        target = get_default_path(role)
    else:
        return None

    # never bounce a visitor to the page they are already on
    return None if target == pathname else target
