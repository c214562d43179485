"""CLI utilities for pytest-scrn screenshot workflows.

Commands print the JSON Schema of specifications, create a starter
specification, preview the planned screenshots and run them with pytest.
"""

from pathlib import Path

from click import Path as PathParam
from click import ClickException, Context, argument, echo, group, option, pass_context

from pytest_scrn.core import RunOptions, ScreenshotRunner
from pytest_scrn.errors import ScrnError
from pytest_scrn.jsonschema import SchemaGenerator

#: Starter specification written by the `init` command.
INIT_CONFIG = '''\
# The title is used to name the top-level test group
title: "My screenshot automation"
# All visit URLs are relative to this baseUrl, which can be
# overwritten with the SCRN_BASE_URL environment variable
baseUrl: "{base_url}"

global:
  viewportWidth: 1920
  viewportHeight: 1080
  language: en
  # For user "admin", set environment variables admin_username and admin_password
  login: admin

screenshots:
  - image: "my/test/image.png"
    visit: "/apps/cockpit/index.html"
    tags:
      - cockpit
'''

InputFilepath = PathParam(
    exists=True,
    dir_okay=False,
    readable=True,
    path_type=Path,
)

OutputFilepath = PathParam(
    dir_okay=False,
    writable=True,
    path_type=Path,
)


@group(help='Command-line utilities for pytest-scrn screenshot workflows.')
def cli() -> None:
    """Root CLI group for pytest-scrn tools."""
    return None


@cli.command(
    name='schema',
    help='Print the pytest-scrn JSON Schema to standard output.',
)
def print_schema() -> None:
    """Generate and print the JSON Schema."""
    echo(SchemaGenerator.make_schema())


@cli.command(
    name='init',
    help='Create a starter screenshot specification.',
)
@option(
    '-u', '--base-url',
    default='http://localhost:8080',
    show_default=True,
    help='Base URL of visited pages.',
)
@argument(
    'config',
    type=OutputFilepath,
    default='scrn_screenshots.yaml',
)
def init_config(config: Path, base_url: str) -> None:
    """Write a starter specification.

    Args:
        config: Path of the created specification.
        base_url: Base URL written into the specification.

    Raises:
        ClickException: If the file already exists.
    """
    if config.exists():
        raise ClickException(f'Config file {config} already exists')

    config.parent.mkdir(parents=True, exist_ok=True)
    config.write_text(INIT_CONFIG.format(base_url=base_url), encoding='utf-8')

    echo(f'Config file {config} created')


@cli.command(
    name='plan',
    help='Print the screenshots planned for a specification.',
)
@option('-t', '--tag', 'tags', multiple=True, help='Keep screenshots with this tag.')
@option('--title', 'titles', multiple=True, help='Keep screenshots whose image contains this string.')
@option('--image', 'images', multiple=True, help='Keep screenshots with this image.')
@option('--flat', is_flag=True, default=False, help='Do not group by the specification title.')
@argument('config', type=InputFilepath)
def print_plan(config: Path, tags: tuple[str, ...], titles: tuple[str, ...],
               images: tuple[str, ...], flat: bool) -> None:
    """Print the test tree of a specification.

    Args:
        config: Path of the specification.
        tags: Tags filter.
        titles: Titles filter.
        images: Images filter.
        flat: Whether to omit the top-level group.

    Raises:
        ClickException: If the specification is invalid.
    """
    try:
        runner = ScreenshotRunner.from_file(config, plugins=False)
        options = RunOptions(tags=tags, titles=titles, images=images)
        tree = runner.run(options) if flat or not runner.spec.title else runner.run_suite(options)

    except ScrnError as error:
        raise ClickException(f'{error}') from error

    printed: tuple[str, ...] = ()
    for path, unit in tree.walk():
        for depth, name in enumerate(path):
            if printed[:depth + 1] != path[:depth + 1]:
                echo(f'{'  ' * depth}{name}')
        printed = path

        tags_ = f' [{', '.join(unit.tags)}]' if unit.tags else ''
        echo(f'{'  ' * len(path)}{unit.name}{tags_}')


@cli.command(
    name='run',
    help='Capture the screenshots of a specification with pytest.',
    context_settings={'ignore_unknown_options': True},
)
@option('-t', '--tag', 'tags', multiple=True, help='Keep screenshots with this tag.')
@option('--no-highlight', is_flag=True, default=False, help='Disable the highlight action.')
@argument('config', type=InputFilepath)
@argument('pytest_args', nargs=-1, type=str)
@pass_context
def run_config(ctx: Context, config: Path, tags: tuple[str, ...],
               no_highlight: bool, pytest_args: tuple[str, ...]) -> None:
    """Run pytest on a specification file.

    Args:
        ctx: Click context.
        config: Path of the specification.
        tags: Tags filter.
        no_highlight: Whether highlighting is disabled.
        pytest_args: Extra pytest arguments.
    """
    import pytest  # noqa: PLC0415

    args = [f'{config}']
    if tags:
        args.extend(('--scrn-tags', ','.join(tags)))
    if no_highlight:
        args.append('--scrn-no-highlight')

    ctx.exit(int(pytest.main([*args, *pytest_args])))


if __name__ == '__main__':
    cli()
