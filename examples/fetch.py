import logging

import click
from tsubo import Client


@click.command()
@click.argument("url")
@click.option("--method", default="GET", show_default=True)
@click.option("--header", "-H", multiple=True, help="Extra header as 'Name: value'.")
@click.option("--cookies", "cookie_path", default=None, help="Cookie file to load and save.")
@click.option("--library", is_flag=True, help="Send through httpx instead of a raw socket.")
@click.option("--verbose", "-v", is_flag=True)
def main(url: str, method: str, header: tuple[str, ...], cookie_path: str | None, library: bool, verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)
    client = Client(url, use_library=library, cookie_path=cookie_path)
    client.method = method
    client.add_header(
        "User-Agent",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
        " (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    )
    for item in header:
        name, _, value = item.partition(":")
        client.add_header(name.strip(), value.strip())

    if not client.send():
        click.secho(f"Request to {url} failed", fg="red")
        raise SystemExit(1)

    response = client.response
    click.secho(f"{response.status_code} {response.reason}", fg="green")
    if client.cookies is not None and len(client.cookies):
        click.secho(f"Cookies: {client.cookies.serve(url)}", fg="yellow")
    click.echo(response.text[:2000])


if __name__ == "__main__":
    main()
