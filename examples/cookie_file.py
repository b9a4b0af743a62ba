"""
Persist cookies between runs.

The first run stores whatever the server sets; later runs send them back.
"""

import click
from tsubo import Client


def main() -> None:
    with Client(cookie_path="cookies.txt") as c:
        r = c.get("http://httpbin.org/cookies/set?session=abc123&theme=dark")
        if r is None:
            click.secho("request failed", fg="red")
            return
        click.secho(f"status: {r.status_code}", fg="green")
        click.secho(f"stored: {[cookie.name for cookie in c.cookies]}", fg="yellow")

        r = c.get("http://httpbin.org/cookies")
        if r is not None:
            click.secho(f"server saw: {r.text.strip()}", fg="blue")


if __name__ == "__main__":
    main()
