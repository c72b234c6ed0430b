"""spotsession entry point.

Examples:
  spotsession login      Open the Spotify consent page and finish the login
  spotsession status     Show whether stored credentials are valid
  spotsession whoami     Print the profile of the signed-in user
  spotsession refresh    Force an access token refresh
  spotsession logout     Forget the stored credentials
"""

import argparse
import asyncio
import logging
import sys
import webbrowser
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version

from spotsession.config import get_settings
from spotsession.errors import AuthError, ConfigurationError
from spotsession.logging_setup import setup_logging
from spotsession.session import AuthorizationSession

logger = logging.getLogger(__name__)


async def cmd_login(session: AuthorizationSession, open_browser: bool) -> int:
    url = session.build_authorization_request()
    print(f"Open this URL to authorize:\n\n  {url}\n")
    if open_browser:
        webbrowser.open(url)

    redirect_url = input("Paste the URL you were redirected to: ").strip()
    try:
        user = await session.complete_authorization(redirect_url)
    except AuthError as e:
        logger.error("Authorization failed: %s", e)
        return 1

    print(f"Logged in as {user.name}" if user else "Logged in (profile unavailable)")
    return 0


async def cmd_status(session: AuthorizationSession) -> int:
    status = session.status
    print(f"authorized: {'yes' if status.is_authorized else 'no'}")
    if status.is_authorized:
        await session.bridge.wait_for_profile()
        if session.current_user:
            print(f"user: {session.current_user.name}")
    return 0 if status.is_authorized else 1


async def cmd_whoami(session: AuthorizationSession) -> int:
    if not session.is_authorized:
        print("Not logged in. Run 'spotsession login' first.")
        return 1
    await session.bridge.wait_for_profile()
    user = session.current_user
    if user is None:
        logger.error("Could not fetch the user profile")
        return 1
    print(f"{user.name} ({user.id})")
    if user.email:
        print(f"email:   {user.email}")
    if user.product:
        print(f"product: {user.product}")
    return 0


async def cmd_refresh(session: AuthorizationSession) -> int:
    try:
        await session.refresh()
    except AuthError as e:
        logger.error("Refresh failed: %s", e)
        return 1
    print("Access token refreshed.")
    return 0


async def cmd_logout(session: AuthorizationSession) -> int:
    session.deauthorize()
    print("Logged out.")
    return 0


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    async with AuthorizationSession.from_settings(settings) as session:
        if args.command == "login":
            return await cmd_login(session, open_browser=not args.no_browser)
        if args.command == "status":
            return await cmd_status(session)
        if args.command == "whoami":
            return await cmd_whoami(session)
        if args.command == "refresh":
            return await cmd_refresh(session)
        return await cmd_logout(session)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="spotsession",
        description="Spotify authorization session manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Examples:", 1)[1] if __doc__ else None,
    )
    try:
        pkg_version = get_version("spotsession")
    except PackageNotFoundError:
        pkg_version = "unknown"
    parser.add_argument("--version", action="version", version=f"%(prog)s {pkg_version}")
    parser.add_argument("--log-level", default=None, help="Logging level (default: INFO)")

    sub = parser.add_subparsers(dest="command", required=True)
    login = sub.add_parser("login", help="Authorize with Spotify")
    login.add_argument("--no-browser", action="store_true", help="Only print the URL")
    sub.add_parser("status", help="Show authorization status")
    sub.add_parser("whoami", help="Show the signed-in user")
    sub.add_parser("refresh", help="Refresh the access token")
    sub.add_parser("logout", help="Forget stored credentials")

    args = parser.parse_args()

    try:
        settings = get_settings()
    except ConfigurationError as e:
        setup_logging(level="INFO")
        logger.critical("%s", e)
        sys.exit(2)

    setup_logging(level=args.log_level or settings.log_level)

    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
