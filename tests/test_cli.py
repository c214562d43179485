"""Tests for command-line utilities."""

import json
from typing import TYPE_CHECKING

import pytest
from click.testing import CliRunner

from pytest_scrn.__main__ import cli
from pytest_scrn.core import ConfigValidator

if TYPE_CHECKING:
    from pathlib import Path

if TYPE_CHECKING:
    from pytest_mock import MockerFixture

TEST_SPEC_CONTENT = '''
title: Cockpit screenshots
global:
  language: [en, de]
screenshots:
  - image: cockpit/index.png
    visit: /apps/cockpit/index.html
    tags: [cockpit]
  - image: home.png
    visit: /apps/home
'''


@pytest.fixture
def runner() -> CliRunner:
    """Provide a click test runner."""
    return CliRunner()


@pytest.fixture
def spec_file(tmp_path: 'Path') -> 'Path':
    """Provide a specification file."""
    path = tmp_path / 'scrn_screens.yaml'
    path.write_text(TEST_SPEC_CONTENT, encoding='utf-8')
    return path


def test_schema(runner: CliRunner) -> None:
    """Print the JSON Schema of specifications."""
    result = runner.invoke(cli, ['schema'])

    assert result.exit_code == 0

    schema = json.loads(result.output)

    assert schema['title'] == 'pytest-scrn'
    assert 'screenshots' in schema['properties']
    assert 'baseUrl' in schema['properties']
    assert schema['$schema'].startswith('https://json-schema.org/')


def test_init(runner: CliRunner, tmp_path: 'Path') -> None:
    """Write a valid starter specification."""
    path = tmp_path / 'nested' / 'scrn_start.yaml'

    result = runner.invoke(cli, ['init', f'{path}', '--base-url', 'http://example.com'])

    assert result.exit_code == 0
    assert 'created' in result.output

    spec = ConfigValidator.load(path, require_title=True)

    assert spec.base_url == 'http://example.com'
    assert spec.global_.login == 'admin'
    assert spec.screenshots[0].tags == ['cockpit']


def test_init_existing_file(runner: CliRunner, spec_file: 'Path') -> None:
    """Refuse to overwrite an existing file."""
    result = runner.invoke(cli, ['init', f'{spec_file}'])

    assert result.exit_code == 1
    assert 'already exists' in result.output
    assert spec_file.read_text(encoding='utf-8') == TEST_SPEC_CONTENT


def test_plan(runner: CliRunner, spec_file: 'Path') -> None:
    """Print the planned test tree."""
    result = runner.invoke(cli, ['plan', f'{spec_file}'])

    assert result.exit_code == 0
    assert result.output.splitlines() == [
        'Cockpit screenshots',
        '  cockpit',
        '    index.png (en) [cockpit]',
        '    index.png (de) [cockpit]',
        '  home.png (en)',
        '  home.png (de)',
    ]


def test_plan_filtered(runner: CliRunner, spec_file: 'Path') -> None:
    """Print the planned test tree with filters."""
    result = runner.invoke(cli, ['plan', f'{spec_file}', '--flat', '--image', 'home.png'])

    assert result.exit_code == 0
    assert result.output.splitlines() == [
        'home.png (en)',
        'home.png (de)',
    ]


def test_plan_invalid(runner: CliRunner, tmp_path: 'Path') -> None:
    """Report an invalid specification."""
    path = tmp_path / 'scrn_invalid.yaml'
    path.write_text('title: Invalid\n', encoding='utf-8')

    result = runner.invoke(cli, ['plan', f'{path}'])

    assert result.exit_code == 1
    assert 'Field required' in result.output


def test_run(runner: CliRunner, spec_file: 'Path', mocker: 'MockerFixture') -> None:
    """Run pytest on a specification."""
    main = mocker.patch('pytest.main', return_value=0)

    result = runner.invoke(cli, ['run', f'{spec_file}', '-t', 'cockpit', '-t', 'admin',
                                 '--no-highlight', '-x', '--scrn-headed'])

    assert result.exit_code == 0
    main.assert_called_once_with([
        f'{spec_file}',
        '--scrn-tags', 'cockpit,admin',
        '--scrn-no-highlight',
        '-x',
        '--scrn-headed',
    ])


def test_run_failure(runner: CliRunner, spec_file: 'Path', mocker: 'MockerFixture') -> None:
    """Exit with the pytest exit code."""
    mocker.patch('pytest.main', return_value=1)

    result = runner.invoke(cli, ['run', f'{spec_file}'])

    assert result.exit_code == 1
