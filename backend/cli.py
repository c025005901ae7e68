import argparse
import asyncio
import logging
import sys

from application.exceptions import GatewayError, Unauthorized
from backend.main import App, create_app
from backend.settings import get_settings


async def _list_sessions(app: App, client_id: str) -> None:
    sessions = await app.store.fetch_sessions(client_id)
    for session in sessions:
        number = session.session_number if session.session_number is not None else "-"
        print(f"{session.id}\t#{number}\t{session}")


async def _write_report(app: App, client_id: str, client_name: str, output: str) -> None:
    sessions = await app.store.fetch_sessions(client_id)
    document = app.render_report(client_name, sessions)
    if output:
        with open(output, "wb") as f:
            f.write(document)
    else:
        sys.stdout.write(document.decode("utf-8"))


def main(argv=None):
    parser = argparse.ArgumentParser(description="Inspect a client's training sessions")
    parser.add_argument("--token", help="Bearer token (default: AUTH_TOKEN from settings)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sessions_parser = subparsers.add_parser("sessions", help="List a client's sessions")
    sessions_parser.add_argument("client_id")

    report_parser = subparsers.add_parser("report", help="Render a client's session report")
    report_parser.add_argument("client_id")
    report_parser.add_argument("--name", default="", help="Client name for the title")
    report_parser.add_argument("-o", "--output", help="Output file path (default: stdout)")

    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = create_app(settings)
    if args.token:
        app.credentials.set_token(args.token)

    try:
        if args.command == "sessions":
            asyncio.run(_list_sessions(app, args.client_id))
        else:
            asyncio.run(
                _write_report(app, args.client_id, args.name or args.client_id, args.output)
            )
    except Unauthorized as e:
        print(f"Error: not authorized ({e}); pass --token or set AUTH_TOKEN", file=sys.stderr)
        sys.exit(2)
    except GatewayError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"Error: cannot write {args.output}: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
